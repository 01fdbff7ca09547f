import os
from typing import Optional

import pandas as pd

from .error import AssemblyInconsistency
from .region import RegionSet
from .util import logger, mkdirp

COUNTS_FILENAME = 'counts.tsv'
REGIONS_FILENAME = 'regions.tsv'
SAMPLES_FILENAME = 'samples.tsv'


class CoverageExperiment:
    """
    The coverage matrix together with the region (row) and sample (column) annotations
    """

    def __init__(
        self,
        counts: pd.DataFrame,
        row_ranges: pd.DataFrame,
        col_data: Optional[pd.DataFrame] = None,
    ):
        """
        Args:
            counts: the region by sample matrix of sums
            row_ranges: one row per region, in the same order as the matrix rows
            col_data: sample metadata indexed by sample identifier. Reordered to match the matrix columns

        Raises:
            AssemblyInconsistency: the annotations do not line up with the matrix
        """
        if len(row_ranges) != counts.shape[0] or list(row_ranges.index) != list(counts.index):
            raise AssemblyInconsistency('the region annotations do not match the rows of the matrix')
        if col_data is None:
            col_data = pd.DataFrame(index=pd.Index(counts.columns, name='sample'))
        missing = [sample for sample in counts.columns if sample not in col_data.index]
        if missing:
            raise AssemblyInconsistency('no sample metadata for columns', missing)
        if col_data.index.duplicated().any():
            raise AssemblyInconsistency('the sample metadata has duplicate sample identifiers')
        self.counts = counts
        self.row_ranges = row_ranges
        self.col_data = col_data.loc[list(counts.columns)]

    @classmethod
    def from_regions(
        cls, counts: pd.DataFrame, regions: RegionSet, col_data: Optional[pd.DataFrame] = None
    ) -> 'CoverageExperiment':
        return cls(counts, regions.to_frame(), col_data)

    @property
    def shape(self):
        return self.counts.shape

    @property
    def samples(self):
        return list(self.counts.columns)

    def __repr__(self):
        return '{}(regions={}, samples={})'.format(self.__class__.__name__, *self.shape)

    def write(self, output_dir: str) -> None:
        """
        write the matrix and its annotations as tab delimited files
        """
        mkdirp(output_dir)
        for filename, df in [
            (COUNTS_FILENAME, self.counts),
            (REGIONS_FILENAME, self.row_ranges),
            (SAMPLES_FILENAME, self.col_data),
        ]:
            path = os.path.join(output_dir, filename)
            logger.info(f'writing: {path}')
            df.to_csv(path, sep='\t', index=True)

    @classmethod
    def read(cls, output_dir: str) -> 'CoverageExperiment':
        counts = read_tabbed(os.path.join(output_dir, COUNTS_FILENAME))
        counts.columns = counts.columns.astype(str)
        counts.columns.name = 'sample'
        row_ranges = read_tabbed(os.path.join(output_dir, REGIONS_FILENAME), dtype={'chr': str})
        col_data = read_tabbed(os.path.join(output_dir, SAMPLES_FILENAME))
        return cls(counts, row_ranges, col_data)


def read_tabbed(filename: str, **kwargs) -> pd.DataFrame:
    """
    read a file written by CoverageExperiment.write. The first column is the index and is read as
    text, so identifiers such as NA or null are kept as they were written
    """
    return pd.read_csv(
        filename,
        sep='\t',
        index_col=0,
        converters={0: str},
        keep_default_na=False,
        na_values=[''],
        **kwargs,
    )
