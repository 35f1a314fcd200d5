"""
SmartCalc Date/Time Evaluator
Handles current time, timezone conversion, date arithmetic, date ranges and
duration conversion. Results can be chained through \\N references.
"""

import calendar
import re
from datetime import datetime, timedelta
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from calc_errors import DomainError
from constants import (
    CITY_TIMEZONES, TIMEZONE_ABBREVIATIONS, MONTH_NAMES,
    DAYS_PER_MONTH, DAYS_PER_YEAR,
)
from domain_evaluators import NOT_MINE, Claimed, DomainEvaluator, DomainResult, run_handler_chain
from reference_adjuster import REFERENCE_PATTERN
from units_evaluator import ureg

DATE_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%b %d, %Y %H:%M",
    "%b %d, %Y",
    "%b %d %Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%d %b %Y",
    "%d %B %Y",
]

TIME_FORMATS = [
    "%I:%M%p",
    "%I:%M %p",
    "%I%p",
    "%I %p",
    "%H:%M",
    "%H:%M:%S",
    "%I:%M:%S%p",
    "%I:%M:%S %p",
]

DURATION_UNIT = r"(seconds?|secs?|minutes?|mins?|hours?|hrs?|days?|weeks?|months?|years?|yrs?)"

NOW_IN = re.compile(r"^now(?:\(\))?\s+in\s+(.+)$", re.IGNORECASE)
TIME_CONVERSION = re.compile(
    r"^(\d{1,2}(?::\d{2})?(?::\d{2})?\s*(?:am|pm)?)\s+(.+?)\s+in\s+(.+)$", re.IGNORECASE)
DURATION_CONVERSION = re.compile(
    r"^([\d.]+)\s*" + DURATION_UNIT + r"\s+in\s+" + DURATION_UNIT + r"$", re.IGNORECASE)
DATE_ARITHMETIC = re.compile(
    r"^(.+?)\s*([+-])\s*([\d.]+)\s*" + DURATION_UNIT + r"$", re.IGNORECASE)
TIMEZONE_CONVERSION = re.compile(
    r"^(.+?)\s+([A-Za-z]{2,4})\s+in\s+(\w+(?:\s+\w+)?)$")
DURATION_TIMES_NUMBER = re.compile(
    r"^([\d.]+)\s*" + DURATION_UNIT + r"\s*[x×*]\s*([\d.]+)$", re.IGNORECASE)
NUMBER_TIMES_DURATION = re.compile(
    r"^([\d.]+)\s*[x×*]\s*([\d.]+)\s*" + DURATION_UNIT + r"$", re.IGNORECASE)

RANGE_SEPARATORS = (" till ", " until ", " to ", " through ", " - ")

DATE_TIME_KEYWORDS = (
    "now", "today", "yesterday", "tomorrow",
    "hour", "hr", "minute", "min", "second", "sec",
    "day", "week", "month", "year", "yr",
    " in ", " till ", " until ", " to ",
    "am", "pm",
)
DATE_TIME_PATTERNS = (
    re.compile(r"\d{4}-\d{2}-\d{2}"),
    re.compile(r"\d{1,2}/\d{1,2}/\d{4}"),
    re.compile(r"\d{1,2}:\d{2}"),
)


# =============================================================================
# PARSING AND FORMATTING
# =============================================================================

def lookup_timezone(name: str) -> Optional[ZoneInfo]:
    """Resolve a city, abbreviation or IANA name to a zone, or None."""
    key = name.strip().lower()
    zone = CITY_TIMEZONES.get(key) or TIMEZONE_ABBREVIATIONS.get(key)
    try:
        return ZoneInfo(zone or name.strip())
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def _unit_kind(unit):
    unit = unit.lower()
    if unit.startswith("sec"):
        return "seconds"
    if unit.startswith("min"):
        return "minutes"
    if unit.startswith("h"):
        return "hours"
    if unit.startswith("d"):
        return "days"
    if unit.startswith("w"):
        return "weeks"
    if unit.startswith("mo"):
        return "months"
    return "years"


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic; the day is clamped to the end of the target month."""
    index = moment.month - 1 + months
    year = moment.year + index // 12
    month = index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def shift(moment: datetime, amount: float, unit: str) -> datetime:
    """Move a datetime by amount units; whole months and years follow the calendar."""
    kind = _unit_kind(unit)
    if kind in ("months", "years"):
        months = amount * (12 if kind == "years" else 1)
        if float(months).is_integer():
            return add_months(moment, int(months))
        days_per_unit = DAYS_PER_YEAR if kind == "years" else DAYS_PER_MONTH
        return moment + timedelta(days=amount * days_per_unit)
    return moment + timedelta(**{kind: amount})


def format_time(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M ") + (moment.tzname() or "")


def format_date(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d")


def _plural(count, unit):
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_detailed_duration(start: datetime, end: datetime) -> str:
    """
    Describe the span between two datetimes, largest units first.

    Returns:
        str: e.g. "1 year 2 months 3 weeks 4 days 5 hours 6 min", or "0 min"
    """
    if end < start:
        start, end = end, start

    years = 0
    while add_months(start, 12) <= end:
        start = add_months(start, 12)
        years += 1

    months = 0
    while add_months(start, 1) <= end:
        start = add_months(start, 1)
        months += 1

    remaining = int((end - start).total_seconds())
    weeks, remaining = divmod(remaining, 7 * 86400)
    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes = remaining // 60

    parts = []
    if years:
        parts.append(_plural(years, "year"))
    if months:
        parts.append(_plural(months, "month"))
    if weeks:
        parts.append(_plural(weeks, "week"))
    if days:
        parts.append(_plural(days, "day"))
    if hours:
        parts.append(_plural(hours, "hour"))
    if minutes:
        parts.append(f"{minutes} min")
    return " ".join(parts) if parts else "0 min"


def format_duration(span: timedelta) -> str:
    seconds = span.total_seconds()
    if seconds < 0:
        return "-" + format_duration(-span)
    days = seconds / 86400
    if days >= 1:
        whole = int(days)
        hours = (seconds - whole * 86400) / 3600
        if hours > 0:
            return f"{whole} days {hours:.1f} hours"
        return f"{whole} days"
    if seconds >= 3600:
        return f"{seconds / 3600:.2f} hours"
    if seconds >= 60:
        return f"{seconds / 60:.2f} minutes"
    return f"{seconds:.2f} seconds"


def _number(text):
    try:
        return float(text)
    except ValueError:
        raise DomainError(f"invalid number: {text}") from None


def _convert(moment, zone):
    try:
        return moment.astimezone(zone)
    except (OverflowError, ValueError):
        raise DomainError("date out of range") from None


def _format_amount(value, unit):
    if float(value).is_integer():
        return f"{value:.0f} {unit}"
    return f"{value:.2f} {unit}"


def is_date_time_expression(expr: str) -> bool:
    lower = expr.lower()
    if any(keyword in lower for keyword in DATE_TIME_KEYWORDS):
        return True
    return any(pattern.search(expr) for pattern in DATE_TIME_PATTERNS)


# =============================================================================
# EVALUATOR
# =============================================================================

class DateTimeEvaluator(DomainEvaluator):
    """
    Date and time grammar.

    The clock is injectable so results are reproducible; it must return an
    aware datetime. Naive input is interpreted in the clock's timezone.
    """

    name = "datetime"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now().astimezone())
        super().__init__((
            self.handle_now_in,
            self.handle_now,
            self.handle_time_conversion,
            self.handle_duration_conversion,
            self.handle_date_arithmetic,
            self.handle_date_difference,
            self.handle_timezone_conversion,
            self.handle_date_range,
            self.handle_duration_multiplication,
            self.handle_date_time_literal,
        ))

    def looks_like_mine(self, expr: str) -> bool:
        return is_date_time_expression(expr) or "\\" in expr

    def evaluate(self, expr, refs):
        resolved = REFERENCE_PATTERN.sub(
            lambda m: refs.resolve_date_time(int(m.group(1))), expr)
        claimed = run_handler_chain(self.handlers, resolved)
        if claimed is NOT_MINE:
            return None
        return DomainResult(claimed.text, date_time_ref=claimed.text)

    # ----- parsing helpers -------------------------------------------------

    def local_zone(self):
        return self.clock().tzinfo

    def parse_date_time(self, text: str, zone=None) -> Optional[datetime]:
        """Parse a date, date-time or clock time; a trailing zone name overrides zone."""
        text = text.strip()
        zone = zone or self.local_zone()

        head, _, tail = text.rpartition(" ")
        if head and tail.lower() in TIMEZONE_ABBREVIATIONS:
            zone = lookup_timezone(tail)
            text = head

        lower = text.lower()
        if lower in ("now", "now()"):
            return self.clock().astimezone(zone)
        if lower in ("today", "today()", "tomorrow", "yesterday"):
            return self._relative_day(lower, zone)

        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).replace(tzinfo=zone)
            except ValueError:
                continue

        for fmt in TIME_FORMATS:
            try:
                parsed = datetime.strptime(lower, fmt)
            except ValueError:
                continue
            today = self.clock().astimezone(zone)
            return today.replace(hour=parsed.hour, minute=parsed.minute,
                                 second=parsed.second, microsecond=0)
        return None

    def _relative_day(self, word, zone):
        today = self.clock().astimezone(zone).replace(hour=0, minute=0, second=0, microsecond=0)
        offset = {"tomorrow": 1, "yesterday": -1}.get(word, 0)
        return today + timedelta(days=offset)

    def parse_partial_date(self, text: str) -> Optional[datetime]:
        """'Dec 6' or '6 Dec' in the current year, else any full date."""
        text = text.strip().lower()
        zone = self.local_zone()
        match = re.match(r"^([a-z]+)\s+(\d+)$", text) or re.match(r"^(\d+)\s+([a-z]+)$", text)
        if match:
            first, second = match.groups()
            month_name, day = (first, second) if first.isalpha() else (second, first)
            month = MONTH_NAMES.get(month_name)
            if month:
                try:
                    return datetime(self.clock().year, month, int(day), tzinfo=zone)
                except (ValueError, OverflowError):
                    raise DomainError(f"invalid date: {text}") from None
        return self.parse_date_time(text, zone)

    # ----- handlers --------------------------------------------------------

    def handle_now_in(self, expr, expr_lower):
        match = NOW_IN.match(expr)
        if not match:
            return NOT_MINE
        zone = lookup_timezone(match.group(1))
        if zone is None:
            raise DomainError(f"unknown timezone or city: {match.group(1)}")
        return Claimed(format_time(self.clock().astimezone(zone)))

    def handle_now(self, expr, expr_lower):
        if expr_lower in ("now", "now()"):
            return Claimed(format_time(self.clock()))
        if expr_lower in ("today", "today()", "tomorrow", "yesterday"):
            return Claimed(format_date(self._relative_day(expr_lower.rstrip("()"), self.local_zone())))
        return NOT_MINE

    def handle_time_conversion(self, expr, expr_lower):
        match = TIME_CONVERSION.match(expr)
        if not match:
            return NOT_MINE
        time_text, source, target = (g.strip() for g in match.groups())
        source_zone = lookup_timezone(source)
        target_zone = lookup_timezone(target)
        if source_zone is None or target_zone is None:
            return NOT_MINE
        moment = self.parse_date_time(time_text, source_zone)
        if moment is None:
            return NOT_MINE
        return Claimed(format_time(_convert(moment, target_zone)))

    def handle_duration_conversion(self, expr, expr_lower):
        match = DURATION_CONVERSION.match(expr)
        if not match:
            return NOT_MINE
        value, source, target = match.groups()
        quantity = ureg.Quantity(_number(value), _unit_kind(source)[:-1])
        converted = quantity.to(_unit_kind(target)[:-1]).magnitude
        return Claimed(_format_amount(converted, target))

    def handle_date_arithmetic(self, expr, expr_lower):
        match = DATE_ARITHMETIC.match(expr)
        if not match:
            return NOT_MINE
        base_text, op, amount, unit = match.groups()
        base = self.parse_date_time(base_text)
        if base is None:
            return NOT_MINE
        amount = _number(amount)
        if op == "-":
            amount = -amount
        try:
            return Claimed(format_time(shift(base, amount, unit)))
        except (OverflowError, ValueError):
            raise DomainError("date out of range") from None

    def handle_date_difference(self, expr, expr_lower):
        for match in re.finditer(r"\s-\s", expr):
            start = self.parse_date_time(expr[:match.start()])
            end = self.parse_date_time(expr[match.end():])
            if start is not None and end is not None:
                return Claimed(format_detailed_duration(end, start))
        return NOT_MINE

    def handle_timezone_conversion(self, expr, expr_lower):
        match = TIMEZONE_CONVERSION.match(expr)
        if not match:
            return NOT_MINE
        moment_text, source, target = match.groups()
        source_zone = lookup_timezone(source)
        target_zone = lookup_timezone(target)
        if source_zone is None or target_zone is None:
            return NOT_MINE
        moment = self.parse_date_time(moment_text, source_zone)
        if moment is None:
            return NOT_MINE
        return Claimed(format_time(_convert(moment, target_zone)))

    def handle_date_range(self, expr, expr_lower):
        for separator in RANGE_SEPARATORS:
            start_text, found, end_text = expr_lower.partition(separator)
            if not found or not start_text:
                continue
            start = self.parse_partial_date(start_text)
            end = self.parse_partial_date(end_text)
            if start is None or end is None:
                return NOT_MINE
            if end < start:
                try:
                    end = add_months(end, 12)
                except ValueError:
                    raise DomainError("date out of range") from None
            days = (end - start).total_seconds() / 86400
            if float(days).is_integer():
                return Claimed(f"{days:.0f} days")
            return Claimed(f"{days:.1f} days")
        return NOT_MINE

    def handle_duration_multiplication(self, expr, expr_lower):
        match = NUMBER_TIMES_DURATION.match(expr)
        if match:
            factor, amount, unit = match.groups()
        else:
            match = DURATION_TIMES_NUMBER.match(expr)
            if not match:
                return NOT_MINE
            amount, unit, factor = match.groups()
        kind = _unit_kind(unit)
        if kind in ("months", "years"):
            return NOT_MINE
        try:
            span = timedelta(**{kind: _number(amount) * _number(factor)})
        except (OverflowError, ValueError):
            raise DomainError("duration out of range") from None
        return Claimed(format_duration(span))

    def handle_date_time_literal(self, expr, expr_lower):
        moment = self.parse_date_time(expr)
        if moment is None:
            return NOT_MINE
        return Claimed(format_time(moment))
