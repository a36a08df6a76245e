"""
Timestamp layouts used in /time responses.

- format_rfc822:  "02 Jan 06 15:04 UTC"
- format_default: "2006-01-02 15:04:05.123456 -0700 MST"

Month names are spelled out here instead of using %b so the output does not
depend on the process locale.
"""

from datetime import datetime

_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def _zone_abbreviation(moment: datetime) -> str:
    name = moment.tzname()
    if name:
        return name
    return moment.strftime("%z")


def format_rfc822(moment: datetime) -> str:
    """Day, month, two-digit year, HH:MM and zone abbreviation."""
    return (
        f"{moment.day:02d} {_MONTHS[moment.month - 1]} {moment.year % 100:02d} "
        f"{moment.hour:02d}:{moment.minute:02d} {_zone_abbreviation(moment)}"
    )


def format_default(moment: datetime) -> str:
    """
    Full timestamp with numeric and named offset.

    Fractional seconds are printed without trailing zeros and left out
    entirely when the instant falls on a whole second.
    """
    text = moment.strftime("%Y-%m-%d %H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    return f"{text} {moment.strftime('%z')} {_zone_abbreviation(moment)}"
