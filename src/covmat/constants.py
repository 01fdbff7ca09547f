"""
module holding the controlled vocabularies and constants used throughout the covmat package
"""
import os
from typing import List


class CovmatNamespace:
    """
    Namespace to hold module constants. Members are the uppercase class attributes

    Example:
        >>> class THING(CovmatNamespace):
        ...     ONE = 'one'
        ...     TWO = 'two'
        >>> THING.values()
        ['one', 'two']
    """

    @classmethod
    def keys(cls) -> List[str]:
        return [k for k in vars(cls) if k.isupper() and not k.startswith('_')]

    @classmethod
    def values(cls) -> List[str]:
        return [getattr(cls, k) for k in cls.keys()]

    @classmethod
    def items(cls):
        return [(k, getattr(cls, k)) for k in cls.keys()]

    @classmethod
    def enforce(cls, value):
        """
        checks that the current namespace has a given value

        Returns:
            the input value

        Raises:
            KeyError: the value did not exist

        Example:
            >>> STRAND.enforce('+')
            '+'
            >>> STRAND.enforce('x')
            Traceback (most recent call last):
            ....
        """
        if value not in cls.values():
            raise KeyError('value {0} is not a valid member of '.format(repr(value)), cls.values())
        return value


class STRAND(CovmatNamespace):
    """
    holds controlled vocabulary for allowed strand values

    Attributes:
        POS: the positive/forward strand
        NEG: the negative/reverse strand
        NS: strand is not specified
    """

    POS: str = '+'
    NEG: str = '-'
    NS: str = '*'


class LOCATION(CovmatNamespace):
    """
    the strategies for resolving where the sample tracks live

    Attributes:
        LOCAL: paths on the cluster filesystem as given in the manifest
        MOUNTED: manifest urls rewritten onto a locally mounted copy of the data
        DOWNLOAD: files downloaded (if missing) into an output directory
        REMOTE: tracks read directly from their urls
    """

    LOCAL: str = 'local'
    MOUNTED: str = 'mounted'
    DOWNLOAD: str = 'download'
    REMOTE: str = 'remote'


SUM_SUFFIX: str = '.sum.tsv'
"""suffix of the per-sample bwtool sum files"""

BED_PREFIX: str = 'covmat-'
"""prefix of the region list BED file created in the sums directory"""

SUM_SCRIPT: str = os.path.join(os.path.dirname(__file__), 'data', 'sum.sh')
"""the wrapper script used to run bwtool summary for a single sample"""
