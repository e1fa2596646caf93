"""
Analysis Exceptions

Failures raised by the analysis pipeline. Fetch-side failures carry the
message that ends up on the record's ``error_message``.
"""


class AnalysisError(Exception):
    """Base class for analysis pipeline errors."""


class AnalysisNotFoundError(AnalysisError):
    def __init__(self, analysis_id: str):
        self.analysis_id = analysis_id
        super().__init__(f"Analysis {analysis_id} not found")


class FetchFailure(AnalysisError):
    """The target answered with a non-2xx status."""

    def __init__(self, status_code: int, status_text: str):
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(status_text)


class TransportFailure(AnalysisError):
    """The request never produced a response (DNS, TLS, connection, timeout)."""


class InvalidTransitionError(AnalysisError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition analysis from {current.value} to {target.value}")


class DuplicateRuleError(AnalysisError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"A rule named '{name}' is already registered")
