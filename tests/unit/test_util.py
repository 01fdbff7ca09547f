import os

import pytest
from covmat.constants import LOCATION, STRAND
from covmat.util import bash_expands, filepath, format_run_time, mkdirp, write_bed_file


class TestBashExpands:
    def test_brackets(self, tmp_path):
        for name in ['a.bw', 'b.bw', 'c.txt']:
            (tmp_path / name).write_text('')
        result = bash_expands(str(tmp_path / '{a,b}.bw'))
        assert sorted(os.path.basename(f) for f in result) == ['a.bw', 'b.bw']

    def test_no_match_error(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            bash_expands(str(tmp_path / '*.bw'))


class TestFilepath:
    def test_single(self, tmp_path):
        (tmp_path / 'regions.bed').write_text('')
        assert filepath(str(tmp_path / '*.bed')) == str(tmp_path / 'regions.bed')

    def test_missing_error(self, tmp_path):
        with pytest.raises(TypeError):
            filepath(str(tmp_path / 'regions.bed'))

    def test_multiple_error(self, tmp_path):
        (tmp_path / 'a.bed').write_text('')
        (tmp_path / 'b.bed').write_text('')
        with pytest.raises(TypeError):
            filepath(str(tmp_path / '*.bed'))


def test_mkdirp_existing(tmp_path):
    dirname = str(tmp_path / 'a' / 'b')
    assert mkdirp(dirname) == dirname
    assert mkdirp(dirname) == dirname
    assert os.path.isdir(dirname)


def test_write_bed_file(tmp_path):
    filename = str(tmp_path / 'out.bed')
    write_bed_file(filename, [('chr1', 0, 10), ('chr2', 5, 20)])
    with open(filename, 'r') as fh:
        assert fh.read() == 'chr1\t0\t10\nchr2\t5\t20\n'


def test_format_run_time():
    assert format_run_time(0, 3725) == '1:02:05'
    assert format_run_time(10, 10) == '0:00:00'


class TestNamespace:
    def test_enforce(self):
        assert STRAND.enforce('+') == '+'
        with pytest.raises(KeyError):
            STRAND.enforce('x')

    def test_values(self):
        assert sorted(LOCATION.values()) == ['download', 'local', 'mounted', 'remote']
