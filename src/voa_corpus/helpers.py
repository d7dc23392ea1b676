"""Helper functions for voa-corpus."""

import math

# (size of this unit in the next smaller one, name); each entry divides
# the running duration before moving on to the next unit.
TIME_UNITS = [
    (60, "seconds"),
    (60, "minutes"),
    (24, "hours"),
    (7, "days"),
    (365.25 / (12 * 7), "weeks"),
    (12, "months"),
    (10, "years"),
]


def _truncate(value: float) -> str:
    value = math.floor(value * 100) / 100
    return f"{value:.2f}".rstrip("0").rstrip(".")


def duration_in_words(seconds: float) -> str:
    """Describe a duration using the largest unit it fits under.

    >>> duration_in_words(90)
    '1.5 minutes'
    >>> duration_in_words(-30)
    '30 seconds in the past'
    """
    suffix = ""
    duration = seconds
    if duration < 0:
        duration = -duration
        suffix = " in the past"

    for limit, name in TIME_UNITS:
        if duration < limit:
            return f"{_truncate(duration)} {name}{suffix}"
        duration /= limit
    return f"{_truncate(duration)} decades{suffix}"
