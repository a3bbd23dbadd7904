"""
Offer-date projection from weekly activity goals.

Each activity carries a base weekly offer rate. A bonus drawn from
LinkedIn outreach, events, and career fairs lifts every rate by a
multiplier between 1x and 3x. The expected wait is a fixed three weeks of
ramp-up plus the inverse of the weekly offer rate.
"""

import math
from datetime import datetime, timedelta, timezone

# Offers per unit of activity per week
RATE_APP_WITH_OUTREACH = 0.0025
RATE_LINKEDIN_OUTREACH = 0.00075
RATE_IN_PERSON_EVENT = 0.0075
RATE_CAREER_FAIR = 0.1

RAMP_UP_WEEKS = 3
WEEKS_PER_MONTH = 4.33
WEEKS_PER_YEAR = 52

# (threshold, points), highest threshold first
LINKEDIN_BONUS = ((20, 20), (12, 11), (6, 6), (1, 1))
EVENT_BONUS = ((8, 80), (4, 40), (2, 20), (1, 10))
CAREER_FAIR_BONUS = ((4, 80), (3, 40), (2, 20), (1, 10))


def _points(value: float, table) -> int:
    for threshold, points in table:
        if value >= threshold:
            return points
    return 0


def bonus_multiplier(
    linkedin_outreach_per_week: float,
    in_person_events_per_month: float,
    career_fairs_per_year: float,
) -> float:
    """Rate multiplier in [1, 3); zero bonus leaves rates unchanged."""
    bonus = (
        _points(linkedin_outreach_per_week, LINKEDIN_BONUS)
        + _points(in_person_events_per_month, EVENT_BONUS)
        + _points(career_fairs_per_year, CAREER_FAIR_BONUS)
    )
    return 3 - 2 * math.exp(-0.01 * bonus)


def estimate_offer_date(
    apps_with_outreach_per_week: float,
    linkedin_outreach_per_week: float,
    in_person_events_per_month: float,
    career_fairs_per_year: float,
    reference: datetime | None = None,
) -> datetime:
    """
    Estimated date of the first offer.

    With no activity at all the estimate is the reference time itself.
    """
    reference = reference or datetime.now(timezone.utc)
    multiplier = bonus_multiplier(
        linkedin_outreach_per_week, in_person_events_per_month, career_fairs_per_year
    )

    weekly_offers = multiplier * (
        apps_with_outreach_per_week * RATE_APP_WITH_OUTREACH
        + linkedin_outreach_per_week * RATE_LINKEDIN_OUTREACH
        + in_person_events_per_month * RATE_IN_PERSON_EVENT
        + (career_fairs_per_year / WEEKS_PER_YEAR) * RATE_CAREER_FAIR
    )
    if not math.isfinite(weekly_offers) or weekly_offers <= 0:
        return reference

    weeks = RAMP_UP_WEEKS + 1 / weekly_offers
    return reference + timedelta(days=weeks * 7)


def estimate_weekly_hours(
    apps_with_outreach_per_week: float,
    linkedin_outreach_per_week: float,
    in_person_events_per_month: float,
    career_fairs_per_year: float,
) -> int:
    """Hours per week the goals take: 1h per app, 30m per message, 4h per event, 10h per fair."""
    hours = (
        apps_with_outreach_per_week * 1
        + linkedin_outreach_per_week * 0.5
        + in_person_events_per_month * (4 / WEEKS_PER_MONTH)
        + career_fairs_per_year * (10 / 26)
    )
    return round(hours)
