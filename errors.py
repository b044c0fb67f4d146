"""
Exception hierarchy for the Case Interview Simulator.
"""


class CaseInterviewError(Exception):
    """Base class for every error raised by this package."""


class MissingCredentialError(CaseInterviewError):
    """No API key was supplied for the session and none is configured."""

    def __init__(self, message: str = "API key missing. Please provide a key."):
        super().__init__(message)


class OracleError(CaseInterviewError):
    """The reasoning oracle failed on both the primary and fallback model."""


class GradingError(CaseInterviewError):
    """The grading call failed or returned an invalid report."""


class CaseAcquisitionError(CaseInterviewError):
    """Generating, extracting or analysing input for a case failed."""


class CaseNotFoundError(CaseInterviewError, LookupError):
    pass


class SessionStateError(CaseInterviewError):
    """An operation was attempted in the wrong session lifecycle state."""


class EmptyUtteranceError(CaseInterviewError, ValueError):
    pass


class TurnInProgressError(CaseInterviewError):
    """A new utterance arrived while the previous turn is still running."""


class ViewTransitionError(CaseInterviewError):
    pass
