"""Duration value object and calendar arithmetic.

Supports the restricted ISO 8601 duration grammar used by the protocol:

    P(nY)?(nM)?(nW)?(nD)?(T(nH)?(nM)?(nS)?)?

Calendar rules:
- Components are applied in a fixed order: years, months, weeks+days
  (combined), hours, minutes, seconds.
- Year and month steps use day-overflow rollover. When the target month
  has fewer days than the starting day-of-month, the surplus days spill
  into the next month:

      2026-01-31 + P1M  -> 2026-03-03
      2028-01-31 + P1M  -> 2028-03-02   (leap year)
      2028-02-29 + P1Y  -> 2029-03-01

  Dates are never clamped to the end of the month.
- total_days is an approximation (365/30/7) of the date components.
  Ceiling checks use span_days, which adds the time components exactly.
  End dates are always computed with add_to().
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass, fields
from datetime import datetime, timedelta

from egp.domain.errors.duration import DurationParseError
from egp.domain.models.instant import ensure_utc

DURATION_PATTERN = re.compile(
    r"^P(?:(\d+)Y)?(?:(\d+)M)?(?:(\d+)W)?(?:(\d+)D)?"
    r"(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?$",
    re.ASCII,
)

# Components this long overflow every datetime anyway
MAX_COMPONENT_DIGITS = 18

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class Duration:
    """An ISO 8601 duration with non-negative integer components.

    Attributes:
        years: Calendar years.
        months: Calendar months.
        weeks: Weeks (7 days each).
        days: Days.
        hours: Hours.
        minutes: Minutes.
        seconds: Seconds.
    """

    years: int = 0
    months: int = 0
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    def __post_init__(self) -> None:
        """Validate that every component is a non-negative integer."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise DurationParseError(self, f"{f.name} must be an integer")
            if value < 0:
                raise DurationParseError(self, f"{f.name} must not be negative")

    @classmethod
    def parse(cls, text: str) -> Duration:
        """Parse a duration string.

        "P" and "PT" are syntactically valid and yield the zero duration;
        callers that need a real span call require_non_zero().

        Args:
            text: The duration text, e.g. "P6M" or "P1Y2M3DT4H".

        Returns:
            The parsed Duration.

        Raises:
            DurationParseError: On non-string input, a missing "P" marker,
                negative numbers or any out-of-grammar character.
        """
        if not isinstance(text, str):
            raise DurationParseError(text, "duration must be a string")
        if not text.startswith("P"):
            raise DurationParseError(text, "missing 'P' designator")
        if "-" in text:
            raise DurationParseError(text, "negative components are not allowed")
        match = DURATION_PATTERN.match(text)
        if match is None:
            raise DurationParseError(text, "does not match P[nY][nM][nW][nD][T[nH][nM][nS]]")
        groups = match.groups()
        if any(group and len(group) > MAX_COMPONENT_DIGITS for group in groups):
            raise DurationParseError(
                text, f"components are limited to {MAX_COMPONENT_DIGITS} digits"
            )
        values = [int(group) if group else 0 for group in groups]
        return cls(*values)

    @classmethod
    def try_parse(cls, text: object) -> Duration | None:
        """Parse a duration, returning None instead of raising."""
        try:
            return cls.parse(text)  # type: ignore[arg-type]
        except DurationParseError:
            return None

    @property
    def is_zero(self) -> bool:
        """True when every component is zero."""
        return not any(getattr(self, f.name) for f in fields(self))

    @property
    def total_days(self) -> int:
        """Approximate length in days (years*365 + months*30 + weeks*7 + days).

        Advisory only. Time components are ignored.
        """
        return self.years * 365 + self.months * 30 + self.weeks * 7 + self.days

    @property
    def span_days(self) -> float:
        """total_days plus the exact length of the time components.

        Used for ceiling checks, so PT30000H counts as 1250 days.
        """
        seconds = self.hours * 3600 + self.minutes * 60 + self.seconds
        return self.total_days + seconds / SECONDS_PER_DAY

    def require_non_zero(self) -> Duration:
        """Return self, or raise if this duration is empty.

        Raises:
            DurationParseError: If every component is zero.
        """
        if self.is_zero:
            raise DurationParseError(self.format(), "duration must not be empty")
        return self

    def format(self) -> str:
        """Render the canonical text form.

        Zero components are omitted; the zero duration renders as "P0D".
        """
        date_part = "".join(
            f"{value}{unit}"
            for value, unit in (
                (self.years, "Y"),
                (self.months, "M"),
                (self.weeks, "W"),
                (self.days, "D"),
            )
            if value
        )
        time_part = "".join(
            f"{value}{unit}"
            for value, unit in ((self.hours, "H"), (self.minutes, "M"), (self.seconds, "S"))
            if value
        )
        if not date_part and not time_part:
            return "P0D"
        return "P" + date_part + (f"T{time_part}" if time_part else "")

    def __str__(self) -> str:
        return self.format()

    def add_to(self, instant: datetime) -> datetime:
        """Return instant advanced by this duration. See add_to()."""
        return add_to(instant, self)


def _roll_to(instant: datetime, year: int, month: int) -> datetime:
    days_in_month = calendar.monthrange(year, month)[1]
    overflow = instant.day - days_in_month
    if overflow <= 0:
        return instant.replace(year=year, month=month)
    return instant.replace(year=year, month=month, day=days_in_month) + timedelta(days=overflow)


def add_to(instant: datetime, duration: Duration) -> datetime:
    """Advance an instant by a duration using calendar arithmetic.

    Args:
        instant: Starting point. Naive datetimes are treated as UTC.
        duration: The span to add.

    Returns:
        Aware UTC datetime.

    Raises:
        OverflowError: If the result falls outside the datetime range.
    """
    result = ensure_utc(instant)
    try:
        if duration.years:
            result = _roll_to(result, result.year + duration.years, result.month)
        if duration.months:
            index = result.month - 1 + duration.months
            result = _roll_to(result, result.year + index // 12, index % 12 + 1)
        result += timedelta(days=duration.weeks * 7 + duration.days)
        result += timedelta(hours=duration.hours)
        result += timedelta(minutes=duration.minutes)
        result += timedelta(seconds=duration.seconds)
    except ValueError as exc:
        # year out of range from replace()
        raise OverflowError(str(exc)) from exc
    return result
