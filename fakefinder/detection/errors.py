"""Exceptions raised by the detection engine."""


class AnalysisCancelled(Exception):
    """A submission's cancellation token was set while a method was running."""

    def __init__(self, method_name: str):
        super().__init__(f"Analysis cancelled during '{method_name}'")
        self.method_name = method_name


class SubmissionNotFound(KeyError):
    pass


class SubmissionStateError(RuntimeError):
    """A submission was asked to run after it already left the idle state."""
