# conditionalmarkets/core/errors.py


class ProbabilityEngineError(ValueError):
    """Base class for every error raised by the probability engine."""
    pass


class DomainError(ProbabilityEngineError):
    """Raised when an input is outside the mathematical domain of an operation."""
    pass


class InvalidStateError(ProbabilityEngineError):
    """Raised when market-maker state or market structure is inconsistent."""
    pass


class InvalidInputError(ProbabilityEngineError):
    """Raised when a caller-supplied vector or selection is malformed."""
    pass
