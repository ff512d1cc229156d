"""Error taxonomy for the analytics subsystem.

None of these are fatal to the application. Callers translate them into a
degraded panel, a zero-state response, or an HTTP 4xx at the API boundary.
"""


class WellbeingError(Exception):
    """Base class for analytics errors."""


class StorageUnavailable(WellbeingError):
    """A read against the relational store failed or timed out."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        message = f"Storage unavailable during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidDateRange(WellbeingError, ValueError):
    """A date range whose end falls before its start."""


class EntitlementCheckFailed(WellbeingError):
    """The subscription tier of a user could not be determined."""


class SummaryGenerationFailed(WellbeingError):
    """The external text-generation service failed or replied with garbage."""


class SurveyNotFound(WellbeingError):
    """No survey exists with the requested id."""


class SurveyAccessDenied(WellbeingError):
    """The survey belongs to another user."""
