from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from .error import AssemblyInconsistency
from .region import RegionSet
from .summarize import Summary
from .util import logger

BIGWIG_COLUMN = 'bigwig_file'


def assemble_matrix(
    summaries: Dict[str, Summary], samples: Sequence[str], regions: RegionSet
) -> pd.DataFrame:
    """
    place the per-sample sums as the columns of the coverage matrix

    Args:
        summaries: the sums by sample identifier
        samples: the column order
        regions: the row order

    Returns:
        the matrix with the region labels as the index and the sample identifiers as the columns

    Raises:
        AssemblyInconsistency: a sample is missing or unexpected, or its sums are not one per region
    """
    missing = [sample for sample in samples if sample not in summaries]
    if missing:
        raise AssemblyInconsistency('no results for samples', missing)
    unexpected = sorted(set(summaries) - set(samples))
    if unexpected:
        raise AssemblyInconsistency('results for samples which were not requested', unexpected)

    columns = []
    for sample in samples:
        values = np.asarray(summaries[sample].values, dtype=float)
        if values.shape != (len(regions),):
            raise AssemblyInconsistency(
                f'sample {sample} has {values.size} sums but there are {len(regions)} regions'
            )
        columns.append(values)
    logger.info(f'assembled a {len(regions)} x {len(samples)} coverage matrix')
    return pd.DataFrame(
        np.column_stack(columns),
        index=pd.Index(regions.labels, name='region'),
        columns=pd.Index(list(samples), name='sample'),
    )


def match_samples(file_names: List[str], pheno: pd.DataFrame, id_column: str) -> pd.DataFrame:
    """
    match the track files to the rows of the phenotype table by file name

    Args:
        file_names: the bigWig file names, in column order
        pheno: the sample metadata. Must have a bigwig_file column and the id column
        id_column: the column holding the sample identifiers

    Returns:
        the matched phenotype rows in the order of the files, indexed by sample identifier

    Raises:
        AssemblyInconsistency: a file has no (or more than one) phenotype row, or the sample identifiers are not unique
    """
    for col in [BIGWIG_COLUMN, id_column]:
        if col not in pheno.columns:
            raise AssemblyInconsistency(f'missing required column in the sample metadata: {col}')

    rows = []
    for file_name in file_names:
        matches = np.flatnonzero(pheno[BIGWIG_COLUMN].to_numpy() == file_name)
        if len(matches) == 0:
            raise AssemblyInconsistency('no sample metadata for the track', file_name)
        elif len(matches) > 1:
            raise AssemblyInconsistency(
                f'the track matches {len(matches)} rows of the sample metadata', file_name
            )
        rows.append(matches[0])

    matched = pheno.iloc[rows].copy()
    samples = matched[id_column].astype(str)
    if samples.duplicated().any() or matched[id_column].isnull().any():
        raise AssemblyInconsistency(
            f'sample identifiers ({id_column}) must be given and unique',
            sorted(samples[samples.duplicated()].unique()),
        )
    matched.index = pd.Index(samples.tolist(), name='sample')
    return matched
