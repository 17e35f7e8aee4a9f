"""
Dashboard statistics.

Inputs are the same public dicts the list endpoints return, so the numbers a dashboard
shows always agree with what the individual endpoints serve.
"""
import math
from datetime import datetime, timezone
from typing import Any, Iterable

from ..utils.validation import as_utc

ACTIVE_APPLICATION_STATUSES = ("review", "interview")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str) and value:
        raw = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            return as_utc(datetime.fromisoformat(raw))
        except ValueError:
            return None
    return None


def compute_hr_stats(jobs: Iterable[dict], applications: Iterable[dict]) -> dict:
    jobs = list(jobs)
    applications = list(applications)
    return {
        "totalJobs": len(jobs),
        "activeJobs": sum(1 for j in jobs if j.get("status") == "active"),
        # Sum of the per-job counters, not a count of application rows.
        "totalApplicants": sum(int(j.get("applicants") or 0) for j in jobs),
        "scheduledInterviews": sum(
            1 for a in applications if a.get("status") == "interview" and a.get("interviewDate")
        ),
        "candidatesInInterview": sum(1 for a in applications if a.get("status") == "interview"),
        "hired": sum(1 for a in applications if a.get("status") == "accepted"),
    }


def compute_candidate_stats(
    applications: Iterable[dict],
    interviews: Iterable[dict],
    mock_interviews: Iterable[dict],
    now: datetime | None = None,
) -> dict:
    applications = list(applications)
    interviews = list(interviews)
    mock_interviews = list(mock_interviews)
    now = as_utc(now) if now else datetime.now(timezone.utc)

    upcoming = 0
    for i in interviews:
        when = _as_datetime(i.get("date"))
        if i.get("status") == "scheduled" and when is not None and when > now:
            upcoming += 1

    completed = [i for i in interviews if i.get("status") == "completed"]
    completed += [m for m in mock_interviews if m.get("status") == "completed"]
    total_score = sum(float(c.get("score") or 0) for c in completed)
    average = _round_half_up(total_score / len(completed)) if completed else 0

    return {
        "upcomingInterviews": upcoming,
        "activeApplications": sum(1 for a in applications if a.get("status") in ACTIVE_APPLICATION_STATUSES),
        "averageScore": average,
        "totalMockInterviews": len(mock_interviews),
        "totalApplications": len(applications),
    }
