import pandas as pd
import pytest
from covmat.error import AssemblyInconsistency
from covmat.experiment import CoverageExperiment

from ..util import mock_regions


@pytest.fixture
def counts():
    return pd.DataFrame(
        [[1.0, 4.0], [2.0, 5.0], [3.0, 6.0]],
        index=pd.Index(['region1', 'region2', 'region3'], name='region'),
        columns=pd.Index(['A', 'B'], name='sample'),
    )


class TestCoverageExperiment:
    def test_default_col_data(self, counts):
        exp = CoverageExperiment.from_regions(counts, mock_regions(3))
        assert exp.shape == (3, 2)
        assert list(exp.col_data.index) == ['A', 'B']
        assert exp.samples == ['A', 'B']

    def test_col_data_reordered(self, counts):
        col_data = pd.DataFrame({'tissue': ['lung', 'liver']}, index=['B', 'A'])
        exp = CoverageExperiment.from_regions(counts, mock_regions(3), col_data)
        assert list(exp.col_data['tissue']) == ['liver', 'lung']

    def test_missing_col_data_error(self, counts):
        col_data = pd.DataFrame({'tissue': ['lung']}, index=['B'])
        with pytest.raises(AssemblyInconsistency):
            CoverageExperiment.from_regions(counts, mock_regions(3), col_data)

    def test_row_mismatch_error(self, counts):
        with pytest.raises(AssemblyInconsistency):
            CoverageExperiment.from_regions(counts, mock_regions(2))

    def test_write_read(self, counts, tmp_path):
        col_data = pd.DataFrame({'tissue': ['liver', 'lung']}, index=['A', 'B'])
        exp = CoverageExperiment.from_regions(counts, mock_regions(3), col_data)
        exp.write(str(tmp_path / 'out'))
        loaded = CoverageExperiment.read(str(tmp_path / 'out'))
        assert loaded.counts.values.tolist() == counts.values.tolist()
        assert list(loaded.counts.columns) == ['A', 'B']
        assert list(loaded.row_ranges['chr']) == ['chr1', 'chr1', 'chr1']
        assert list(loaded.col_data['tissue']) == ['liver', 'lung']

    def test_write_read_na_identifiers(self, tmp_path):
        counts = pd.DataFrame(
            [[1.0], [2.0]],
            index=pd.Index(['region1', 'NA'], name='region'),
            columns=pd.Index(['NA'], name='sample'),
        )
        regions = pd.DataFrame(
            {'chr': ['chr1', 'chr1'], 'start': [1, 101], 'end': [50, 150], 'strand': ['*', '*']},
            index=pd.Index(['region1', 'NA'], name='region'),
        )
        exp = CoverageExperiment(counts, regions)
        exp.write(str(tmp_path / 'out'))
        loaded = CoverageExperiment.read(str(tmp_path / 'out'))
        assert loaded.samples == ['NA']
        assert list(loaded.col_data.index) == ['NA']
        assert list(loaded.counts.index) == ['region1', 'NA']
        assert loaded.counts['NA'].tolist() == [1.0, 2.0]
