"""Exception types raised by the analysis pipeline."""


class InspectorError(Exception):
    """Base class for codeinspector failures."""


class PreconditionError(InspectorError):
    """Raised when a run cannot start, e.g. the project root is missing."""


class AnalysisCancelled(InspectorError):
    """Raised at a progress checkpoint once the caller requested cancellation."""


__all__ = ["AnalysisCancelled", "InspectorError", "PreconditionError"]
