"""Survey lifecycle status derived from send and close dates."""

from datetime import datetime

from wellbeing.models.common import SurveyStatus, as_utc, utc_now


def survey_status(
    date: datetime,
    close_date: datetime | None = None,
    override: SurveyStatus | None = None,
    *,
    now: datetime | None = None,
) -> SurveyStatus:
    """An explicit status wins; otherwise Scheduled / Completed / Sent by date."""
    if override is not None:
        return override
    now = as_utc(now) if now is not None else utc_now()
    if as_utc(date) > now:
        return SurveyStatus.SCHEDULED
    if close_date is not None and as_utc(close_date) < now:
        return SurveyStatus.COMPLETED
    return SurveyStatus.SENT
