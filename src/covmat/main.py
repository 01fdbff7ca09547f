import functools
import re
import sys
import time
from typing import Dict, Mapping, Optional

import pandas as pd

from . import __version__
from .assemble import assemble_matrix, match_samples
from .config import validate_config
from .error import InvalidInput
from .experiment import CoverageExperiment
from .job import SampleJob
from .locate import Downloader, check_manifest, select_resolver
from .region import RegionSet, materialize_bed
from .schedule import emit_commands, get_scheduler
from .summarize import run_summary
from .util import format_run_time, logger, mkdirp

TCGA_PROJECT = 'TCGA'


def compute_matrix(
    regions: RegionSet,
    tracks: Mapping[str, str],
    config: Dict,
    col_data: Optional[pd.DataFrame] = None,
    commands_fh=None,
) -> Optional[CoverageExperiment]:
    """
    Compute the region by sample coverage matrix by running bwtool once per sample

    Args:
        regions: the regions, in row order
        tracks: the bigWig location by sample identifier, in column order
        config: the config (validated here)
        col_data: sample metadata indexed by sample identifier
        commands_fh: where the commands are written in commands only mode (default stdout)

    Returns:
        the packaged coverage matrix, or None when only the commands are emitted

    Raises:
        InvalidInput: no samples or regions were given
    """
    start_time = int(time.time())
    config = validate_config(config)
    if not isinstance(regions, RegionSet):
        regions = RegionSet(regions)
    if not tracks:
        raise InvalidInput('at least one sample track is required')
    logger.info(f'covmat: {__version__}')
    logger.info(f'computing coverage for {len(regions)} regions across {len(tracks)} samples')

    bed = materialize_bed(
        regions,
        config['output.sumsdir'],
        bed=config['output.bed'],
        overwrite=config['output.overwrite'],
    )
    jobs = [
        SampleJob.from_sumsdir(sample, bigwig, config['output.sumsdir'])
        for sample, bigwig in tracks.items()
    ]
    scheduler = get_scheduler(config)

    if config['schedule.commands_only']:
        commands = scheduler.commands(
            jobs, bed, config['bwtool.path'], config['bwtool.script']
        )
        if commands_fh is None and config['schedule.commands_file']:
            logger.info(f"writing: {config['schedule.commands_file']}")
            with open(config['schedule.commands_file'], 'w') as fh:
                emit_commands(commands, fh)
        else:
            emit_commands(commands, commands_fh if commands_fh is not None else sys.stdout)
        logger.info(f'emitted {len(commands)} commands')
        return None

    mkdirp(config['output.sumsdir'])
    summaries = scheduler.run(
        jobs,
        functools.partial(
            run_summary,
            bed=bed,
            region_count=len(regions),
            bwtool=config['bwtool.path'],
            script=config['bwtool.script'],
            overwrite=config['output.overwrite'],
        ),
    )
    cached = sum(1 for s in summaries.values() if s.cached)
    logger.info(f'{cached} of {len(summaries)} samples re-used existing outputs')
    counts = assemble_matrix(summaries, list(tracks.keys()), regions)
    experiment = CoverageExperiment.from_regions(counts, regions, col_data)
    logger.info(f'run time (hh/mm/ss): {format_run_time(start_time)}')
    return experiment


def select_sample_tracks(url_table: pd.DataFrame) -> pd.DataFrame:
    """
    the bigWig files of the samples (excludes the mean coverage files)
    """
    is_sample = url_table['file_name'].apply(
        lambda name: bool(re.search(r'[.]bw$', str(name))) and 'mean' not in str(name)
    )
    return url_table[is_sample]


def coverage_matrix(
    project: str,
    regions: RegionSet,
    url_table: pd.DataFrame,
    config: Dict,
    pheno: pd.DataFrame,
    downloader: Optional[Downloader] = None,
) -> Optional[CoverageExperiment]:
    """
    Compute the coverage matrix for all the samples of a study

    Args:
        project: the study identifier
        regions: the regions, in row order
        url_table: the file manifest (project, file_name, path, url columns)
        config: the config (validated here)
        pheno: the sample metadata. Matched to the tracks by its bigwig_file column
        downloader: fetches missing tracks when they are located by download

    Returns:
        the packaged coverage matrix, or None when only the commands are emitted

    Raises:
        InvalidInput: the project has no files in the manifest
    """
    config = validate_config(config)
    if not isinstance(project, str) or not project:
        raise InvalidInput('a single project identifier is required', project)
    if 'project' not in url_table.columns:
        raise InvalidInput('missing required column in the sample manifest: project')
    check_manifest(url_table)
    manifest = url_table[url_table['project'] == project]
    if not len(manifest):
        raise InvalidInput(f'there are no files for the project {project} in the manifest')
    manifest = select_sample_tracks(manifest)
    if not len(manifest):
        raise InvalidInput(f'there are no sample bigWig files for the project {project}')

    resolver = select_resolver(manifest, config, downloader)
    locations = resolver.resolve(manifest)

    id_column = config['samples.id_column'] or (
        'gdc_file_id' if project == TCGA_PROJECT else 'run'
    )
    col_data = match_samples(list(manifest['file_name']), pheno, id_column)
    tracks = dict(zip(col_data.index, locations))

    if config['schedule.commands_file']:
        config['schedule.commands_file'] = config['schedule.commands_file'].format(project=project)
    return compute_matrix(regions, tracks, config, col_data=col_data)
