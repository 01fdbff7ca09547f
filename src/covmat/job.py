import os
import shlex
from typing import Optional

from .constants import SUM_SCRIPT, SUM_SUFFIX, CovmatNamespace


class JOB_STATUS(CovmatNamespace):
    """
    The status of a sample job as tracked by the scheduler
    """

    NOT_SUBMITTED: str = 'NOT SUBMITTED'
    SUBMITTED: str = 'SUBMITTED'
    COMPLETED: str = 'COMPLETED'
    CACHED: str = 'CACHED'
    FAILED: str = 'FAILED'
    CANCELLED: str = 'CANCELLED'


def sum_filename(sumsdir: str, sample: str) -> str:
    """
    Example:
        >>> sum_filename('sums', 'SRR1')
        'sums/SRR1.sum.tsv'
    """
    return os.path.join(sumsdir, f'{sample}{SUM_SUFFIX}')


class SampleJob:
    def __init__(self, sample: str, bigwig: str, output: str):
        """
        Args:
            sample: the sample identifier, unique within a run
            bigwig: path or url of the sample track
            output: path the per-sample sums are written to
        """
        if not sample:
            raise ValueError('a sample job requires a sample identifier')
        self._sample = str(sample)
        self._bigwig = str(bigwig)
        self._output = str(output)
        self.job_ident: Optional[str] = None
        self.status = JOB_STATUS.NOT_SUBMITTED
        self.status_comment = ''

    @property
    def sample(self) -> str:
        return self._sample

    @property
    def bigwig(self) -> str:
        return self._bigwig

    @property
    def output(self) -> str:
        return self._output

    @classmethod
    def from_sumsdir(cls, sample: str, bigwig: str, sumsdir: str) -> 'SampleJob':
        return cls(sample, bigwig, sum_filename(sumsdir, sample))

    def command(self, bed: str, bwtool: str, script: Optional[str] = None) -> str:
        """
        the shell command which runs bwtool for this sample

        Example:
            >>> SampleJob('s1', 's1.bw', 'sums/s1.sum.tsv').command('regions.bed', 'bwtool', 'sum.sh')
            'bash sum.sh bwtool regions.bed s1.bw sums/s1.sum.tsv'
        """
        return ' '.join(
            shlex.quote(arg)
            for arg in ['bash', script or SUM_SCRIPT, bwtool, bed, self.bigwig, self.output]
        )

    def reset(self):
        self.status = JOB_STATUS.NOT_SUBMITTED
        self.status_comment = ''
        self.job_ident = None

    def __repr__(self):
        return '{}(sample={}, job_ident={}, status={})'.format(
            self.__class__.__name__, self.sample, self.job_ident, self.status
        )
