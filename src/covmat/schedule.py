import atexit
from concurrent import futures
from typing import IO, Callable, Dict, List, Optional

import shortuuid

from .constants import CovmatNamespace
from .error import InvalidInput
from .job import JOB_STATUS, SampleJob
from .summarize import Summary
from .util import logger


class SCHEDULER(CovmatNamespace):
    """
    the ways sample jobs can be run
    """

    SERIAL: str = 'SERIAL'
    LOCAL: str = 'LOCAL'


def check_unique_samples(jobs: List[SampleJob]) -> None:
    seen = set()
    for job in jobs:
        if job.sample in seen:
            raise InvalidInput('sample identifiers must be unique within a run', job.sample)
        seen.add(job.sample)


def emit_commands(commands: List[str], fh: IO) -> None:
    """
    write the commands one per line so they can be submitted as an array job
    """
    for command in commands:
        fh.write(command + '\n')


class Scheduler:
    """
    Runs one summary per sample job. Results are collected by sample, never by completion order
    """

    NAME: Optional[str] = None

    def __init__(self, concurrency_limit: int = 1):
        if concurrency_limit < 1:
            raise ValueError('the concurrency limit must be a positive integer', concurrency_limit)
        self.concurrency_limit = concurrency_limit

    def commands(self, jobs: List[SampleJob], bed: str, bwtool: str, script: Optional[str] = None) -> List[str]:
        """
        the commands which would be run for each job (in job order). Nothing is executed
        """
        check_unique_samples(jobs)
        return [job.command(bed, bwtool, script) for job in jobs]

    def run(self, jobs: List[SampleJob], func: Callable[[SampleJob], Summary]) -> Dict[str, Summary]:
        """
        Args:
            jobs: the sample jobs to run
            func: called once per job, returns the summary for the job

        Returns:
            the summaries by sample identifier

        Raises:
            the error from the first job to fail. Jobs not yet started are cancelled
        """
        raise NotImplementedError('abstract method')

    @staticmethod
    def update_status(job: SampleJob, summary: Summary) -> None:
        job.status = JOB_STATUS.CACHED if summary.cached else JOB_STATUS.COMPLETED


class SerialScheduler(Scheduler):
    """
    runs the jobs one at a time in the current process
    """

    NAME = SCHEDULER.SERIAL

    def __init__(self, concurrency_limit: int = 1):
        Scheduler.__init__(self, 1)

    def run(self, jobs, func):
        check_unique_samples(jobs)
        results = {}
        for job in jobs:
            job.job_ident = str(shortuuid.uuid())
            job.status = JOB_STATUS.SUBMITTED
            try:
                summary = func(job)
            except Exception as err:
                job.status = JOB_STATUS.FAILED
                job.status_comment = str(err)
                for remaining in jobs:
                    if remaining.status == JOB_STATUS.NOT_SUBMITTED:
                        remaining.status = JOB_STATUS.CANCELLED
                raise err
            self.update_status(job, summary)
            results[job.sample] = summary
        return results


class LocalScheduler(Scheduler):
    """
    Scheduler class for running the jobs in a local pool of worker processes
    """

    NAME = SCHEDULER.LOCAL

    def __init__(self, concurrency_limit: int = 1):
        Scheduler.__init__(self, concurrency_limit)
        self.pool: Optional[futures.ProcessPoolExecutor] = None  # set this at the first submission
        self.responses: Dict[str, futures.Future] = {}  # submitted jobs by job ID
        atexit.register(self.close)  # makes the pool 'auto close' on normal python exit

    def submit(self, job: SampleJob, func: Callable[[SampleJob], Summary]) -> futures.Future:
        """
        Add a job to the pool
        """
        if self.pool is None:
            self.pool = futures.ProcessPoolExecutor(max_workers=self.concurrency_limit)
        if not job.job_ident:
            job.job_ident = str(shortuuid.uuid())
        # if this job exists in the pool, return its response object
        if job.job_ident in self.responses:
            return self.responses[job.job_ident]
        job.status = JOB_STATUS.SUBMITTED
        response = self.pool.submit(func, job)
        self.responses[job.job_ident] = response
        logger.info(f'submitted {job.sample} ({job.job_ident})')
        return response

    def run(self, jobs, func):
        check_unique_samples(jobs)
        job_by_response = {self.submit(job, func): job for job in jobs}
        results = {}
        try:
            for response in futures.as_completed(job_by_response):
                job = job_by_response[response]
                summary = response.result()
                self.update_status(job, summary)
                results[job.sample] = summary
        except Exception as err:
            self.close(cancel=True)
            for response, job in job_by_response.items():
                self.update_info(job, response)
            raise err
        finally:
            self.close()
        return results

    def update_info(self, job: SampleJob, response: futures.Future) -> None:
        """
        Args:
            job: the job to check and update the status for
            response: the future the job was submitted as
        """
        if response.cancelled():
            job.status = JOB_STATUS.CANCELLED
        elif not response.done():
            job.status = JOB_STATUS.SUBMITTED
        elif response.exception() is not None:
            job.status = JOB_STATUS.FAILED
            job.status_comment = str(response.exception())
        else:
            self.update_status(job, response.result())

    def close(self, cancel: bool = False) -> None:
        if self.pool is not None:
            self.pool.shutdown(wait=True, cancel_futures=cancel)
            self.pool = None
        self.responses = {}


def get_scheduler(config: Dict) -> Scheduler:
    """
    build the scheduler for a validated config. A concurrency limit of 1 runs the jobs serially
    """
    concurrency_limit = config['schedule.concurrency_limit']
    if concurrency_limit == 1:
        return SerialScheduler()
    return LocalScheduler(concurrency_limit)
