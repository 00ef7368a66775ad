"""Exception classes for class analysis."""


class AnalysisError(Exception):
    """Base exception for analysis errors."""

    pass


class SourceSyntaxError(AnalysisError):
    """Raised when the source cannot be parsed."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(message)


class ClassNotFoundError(AnalysisError):
    """Raised when the requested class is not in the source."""

    def __init__(self, message: str, available: list[str] | None = None):
        self.available = available or []
        super().__init__(message)


class MethodNotFoundError(AnalysisError):
    """Raised when focused analysis names a method the class does not have."""

    def __init__(self, message: str, available: list[str] | None = None):
        self.available = available or []
        super().__init__(message)


class AnalysisInvariantError(AnalysisError):
    """Raised when analysis produces data that breaks its own invariants.

    This signals a programming error and is never converted into a
    degraded result.
    """

    pass
