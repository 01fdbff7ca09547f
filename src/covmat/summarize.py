"""
Runs bwtool for a single sample and loads the per-region sums, re-using a previous output
file when it already has one record per region
"""
import os
import subprocess
from typing import Optional

import numpy as np
import pandas as pd

from .error import ExecutionFailure, OutputShapeMismatch
from .job import SampleJob
from .util import logger

STDERR_TAIL = 10


class Summary:
    """
    the per-region sums for a single sample
    """

    def __init__(self, sample: str, values: np.ndarray, cached: bool = False):
        self.sample = sample
        self.values = values
        self.cached = cached

    def __len__(self):
        return len(self.values)

    def __repr__(self):
        return '{}(sample={}, n={}, cached={})'.format(
            self.__class__.__name__, self.sample, len(self), self.cached
        )


def read_sums(filename: str) -> np.ndarray:
    """
    read a bwtool sum file. The last column of each record is the sum for the region

    Raises:
        ValueError: a sum could not be read as a number
    """
    try:
        df = pd.read_csv(filename, sep='\t', header=None, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        return np.array([], dtype=float)
    return pd.to_numeric(df.iloc[:, -1]).to_numpy(dtype=float)


def count_records(filename: str) -> int:
    """
    count the non-empty lines of a sum file
    """
    with open(filename, 'r') as fh:
        return sum(1 for line in fh if line.strip())


def load_cached(job: SampleJob, region_count: int) -> Optional[np.ndarray]:
    """
    check if a previous output for this job can be re-used. Only the number of records is checked

    Returns:
        the cached sums or None if the file is missing or stale
    """
    if not os.path.exists(job.output):
        return None
    records = count_records(job.output)
    if records != region_count:
        logger.warning(
            f'stale output for sample {job.sample} ({records} records, expected {region_count}): {job.output}'
        )
        return None
    try:
        return read_sums(job.output)
    except ValueError as err:
        logger.warning(f'unreadable output for sample {job.sample} ({err}): {job.output}')
        return None


def run_summary(
    job: SampleJob,
    bed: str,
    region_count: int,
    bwtool: str,
    script: Optional[str] = None,
    overwrite: bool = False,
) -> Summary:
    """
    compute the per-region sums for a single sample

    Args:
        job: the sample to be summarized
        bed: path to the shared region BED file
        region_count: the number of regions (records expected in the output)
        bwtool: path to the bwtool executable
        script: wrapper script calling bwtool (defaults to the packaged sum.sh)
        overwrite: ignore any existing output and re-run bwtool

    Raises:
        ExecutionFailure: bwtool exited with an error or did not write the output file
        OutputShapeMismatch: the output does not have one record per region
    """
    logger.info(f'processing sample {job.sample}')
    if not overwrite:
        values = load_cached(job, region_count)
        if values is not None:
            logger.info(f'using existing output for sample {job.sample}: {job.output}')
            return Summary(job.sample, values, cached=True)

    if os.path.exists(job.output):
        logger.info(f'removing the previous output for sample {job.sample}: {job.output}')
        os.remove(job.output)
    command = job.command(bed, bwtool, script)
    logger.debug(f'>>> {command}')
    proc = subprocess.run(
        command, shell=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE, universal_newlines=True
    )
    if proc.stdout:
        logger.debug(proc.stdout.strip())
    if proc.returncode != 0:
        tail = '\n'.join(proc.stderr.strip().split('\n')[-STDERR_TAIL:])
        raise ExecutionFailure(
            f'bwtool failed for sample {job.sample} (exit status {proc.returncode}): {tail}'
        )
    if not os.path.exists(job.output):
        raise ExecutionFailure(f'bwtool did not create the output for sample {job.sample}', job.output)

    try:
        values = read_sums(job.output)
    except ValueError as err:
        raise ExecutionFailure(f'could not parse the output for sample {job.sample}: {err}', job.output)
    if len(values) != region_count:
        raise OutputShapeMismatch(
            f'output for sample {job.sample} has {len(values)} records but there are {region_count} regions',
            job.output,
        )
    return Summary(job.sample, values)
