class CovmatError(Exception):
    """
    base class for all errors raised while building a coverage matrix
    """

    pass


class InvalidInput(CovmatError):
    """
    raised for an empty sample set, an empty region set, or a malformed region BED file
    """

    pass


class ArtifactMissing(CovmatError):
    """
    raised when a required file (region BED, sample track) does not exist
    """

    pass


class ExecutionFailure(CovmatError):
    """
    raised when the summarization command fails or does not produce its output file
    """

    pass


class OutputShapeMismatch(CovmatError):
    """
    raised when a freshly produced sum file does not have one record per region
    """

    pass


class AssemblyInconsistency(CovmatError):
    """
    raised when the per-sample results or the sample metadata cannot be aligned to the matrix columns
    """

    pass
