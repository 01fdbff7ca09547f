import functools
import io
import os

import pytest
import timeout_decorator
from covmat.error import ExecutionFailure, InvalidInput
from covmat.job import JOB_STATUS, SampleJob
from covmat.schedule import (
    SCHEDULER,
    LocalScheduler,
    SerialScheduler,
    emit_commands,
    get_scheduler,
)
from covmat.summarize import run_summary

from ..util import bash_only, invocations, write_fake_script, write_sums


@pytest.fixture
def script(tmp_path):
    return write_fake_script(str(tmp_path / 'bin'))


@pytest.fixture
def sumsdir(tmp_path):
    dirname = tmp_path / 'sums'
    dirname.mkdir()
    return str(dirname)


def build_jobs(tmp_path, sumsdir, tracks):
    jobs = []
    for sample, (track_name, values) in tracks.items():
        track = write_sums(str(tmp_path / 'tracks' / track_name), values)
        jobs.append(SampleJob.from_sumsdir(sample, track, sumsdir))
    return jobs


def summarize(script, region_count=3):
    return functools.partial(
        run_summary, bed='regions.bed', region_count=region_count, bwtool='bwtool', script=script
    )


class TestGetScheduler:
    def test_serial(self):
        assert get_scheduler({'schedule.concurrency_limit': 1}).NAME == SCHEDULER.SERIAL

    def test_local(self):
        scheduler = get_scheduler({'schedule.concurrency_limit': 4})
        assert scheduler.NAME == SCHEDULER.LOCAL
        assert scheduler.concurrency_limit == 4

    def test_bad_limit_error(self):
        with pytest.raises(ValueError):
            LocalScheduler(0)


class TestCommands:
    def test_one_command_per_job(self, tmp_path):
        jobs = [
            SampleJob.from_sumsdir('A', '/data/A.bw', str(tmp_path / 'sums')),
            SampleJob.from_sumsdir('B', '/data/B.bw', str(tmp_path / 'sums')),
        ]
        commands = SerialScheduler().commands(jobs, 'regions.bed', 'bwtool', 'sum.sh')
        assert len(commands) == 2
        assert commands[0].endswith('/data/A.bw {}'.format(jobs[0].output))
        assert commands[1].endswith('/data/B.bw {}'.format(jobs[1].output))
        assert not os.path.exists(tmp_path / 'sums')
        assert all(job.status == JOB_STATUS.NOT_SUBMITTED for job in jobs)

    def test_duplicate_sample_error(self):
        jobs = [SampleJob('A', 'a.bw', 'a.tsv'), SampleJob('A', 'b.bw', 'b.tsv')]
        with pytest.raises(InvalidInput):
            SerialScheduler().commands(jobs, 'regions.bed', 'bwtool')

    def test_emit_commands(self):
        fh = io.StringIO()
        emit_commands(['cmd 1', 'cmd 2'], fh)
        assert fh.getvalue() == 'cmd 1\ncmd 2\n'


@bash_only
class TestSerialScheduler:
    def test_results_by_sample(self, tmp_path, sumsdir, script):
        jobs = build_jobs(tmp_path, sumsdir, {'A': ('a.bw', [1, 2, 3]), 'B': ('b.bw', [4, 5, 6])})
        results = SerialScheduler().run(jobs, summarize(script))
        assert sorted(results) == ['A', 'B']
        assert results['A'].values.tolist() == [1, 2, 3]
        assert results['B'].values.tolist() == [4, 5, 6]
        assert all(job.status == JOB_STATUS.COMPLETED for job in jobs)
        assert all(job.job_ident for job in jobs)

    def test_cached_status(self, tmp_path, sumsdir, script):
        jobs = build_jobs(tmp_path, sumsdir, {'A': ('a.bw', [1, 2, 3])})
        write_sums(jobs[0].output, [1, 2, 3])
        SerialScheduler().run(jobs, summarize(script))
        assert jobs[0].status == JOB_STATUS.CACHED
        assert invocations(script) == []

    def test_fail_fast(self, tmp_path, sumsdir, script):
        jobs = build_jobs(
            tmp_path,
            sumsdir,
            {'A': ('a.bw', [1, 2, 3]), 'B': ('fail.bw', [1, 2, 3]), 'C': ('c.bw', [1, 2, 3])},
        )
        with pytest.raises(ExecutionFailure):
            SerialScheduler().run(jobs, summarize(script))
        assert [job.status for job in jobs] == [
            JOB_STATUS.COMPLETED,
            JOB_STATUS.FAILED,
            JOB_STATUS.CANCELLED,
        ]
        assert len(invocations(script)) == 2


@bash_only
class TestLocalScheduler:
    @timeout_decorator.timeout(60)
    def test_results_by_sample(self, tmp_path, sumsdir, script):
        tracks = {f'S{i}': (f's{i}.bw', [i, i + 1, i + 2]) for i in range(8)}
        jobs = build_jobs(tmp_path, sumsdir, tracks)
        results = LocalScheduler(4).run(jobs, summarize(script))
        assert sorted(results) == sorted(tracks)
        for sample, (_, values) in tracks.items():
            assert results[sample].values.tolist() == values
        assert all(job.status == JOB_STATUS.COMPLETED for job in jobs)
        assert len(invocations(script)) == 8

    @timeout_decorator.timeout(60)
    def test_matches_serial(self, tmp_path, sumsdir, script):
        tracks = {f'S{i}': (f's{i}.bw', [i * 1.5, i, 0]) for i in range(6)}
        jobs = build_jobs(tmp_path, sumsdir, tracks)
        serial = SerialScheduler().run(jobs, summarize(script))
        for job in jobs:
            job.reset()
        pooled = LocalScheduler(4).run(jobs, summarize(script))
        assert sorted(serial) == sorted(pooled)
        for sample in serial:
            assert serial[sample].values.tolist() == pooled[sample].values.tolist()

    @timeout_decorator.timeout(60)
    def test_fail_fast(self, tmp_path, sumsdir, script):
        jobs = build_jobs(
            tmp_path, sumsdir, {'A': ('a.bw', [1, 2, 3]), 'B': ('fail.bw', [1, 2, 3])}
        )
        scheduler = LocalScheduler(2)
        with pytest.raises(ExecutionFailure):
            scheduler.run(jobs, summarize(script))
        assert jobs[1].status == JOB_STATUS.FAILED
        assert 'unable to open' in jobs[1].status_comment
        assert scheduler.pool is None

    def test_duplicate_sample_error(self, tmp_path, sumsdir, script):
        jobs = [SampleJob('A', 'a.bw', 'a.tsv'), SampleJob('A', 'b.bw', 'b.tsv')]
        with pytest.raises(InvalidInput):
            LocalScheduler(2).run(jobs, summarize(script))
