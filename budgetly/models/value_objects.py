"""
Value Objects for Budgetly

Every field of every entity is wrapped in one of these types. They are
the foundation the rest of the domain is built on.

GUARANTEES:
1. Validation happens at construction time - an invalid value object
   cannot exist.
2. Failures raise InvalidParam carrying the offending input.
3. Instances are frozen. The only "mutator", Bool.toggle, returns a new
   instance.

DESIGN DECISION: Each value object is a frozen pydantic RootModel with a
`mode="before"` validator on `root`. The validator runs before any type
coercion, so `Name(42)` is rejected by our rules instead of being quietly
turned into "42".
"""

import math
import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, ClassVar
from uuid import UUID, uuid4

from pydantic import ConfigDict, RootModel, field_validator

from budgetly.exceptions import InvalidParam


UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MAX_EPOCH_MS = 999_999_999_999_999


def _is_number(value: Any) -> bool:
    """bool is an int subclass in Python - never treat it as a number here."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


# =============================================================================
# STRING VALUE OBJECTS
# =============================================================================

class _StringValue(RootModel[str]):
    """Shared behaviour for value objects wrapping a string."""

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.root


class _BoundedText(_StringValue):
    """A string whose length must fall in [min_length, max_length]."""

    min_length: ClassVar[int] = 1
    max_length: ClassVar[int] = 2999

    @field_validator("root", mode="before")
    @classmethod
    def _check_length(cls, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise InvalidParam(value)
        if not cls.min_length <= len(value) <= cls.max_length:
            raise InvalidParam(value)
        return value


class Id(_StringValue):
    """UUID (versions 1-5) identifying an entity."""

    @field_validator("root", mode="before")
    @classmethod
    def _check_uuid(cls, value: Any) -> str:
        if isinstance(value, UUID):
            value = str(value)
        if not isinstance(value, str) or not UUID_PATTERN.match(value):
            raise InvalidParam(value)
        return value

    @classmethod
    def generate(cls) -> "Id":
        return cls(str(uuid4()))

    def equals(self, other: "Id") -> bool:
        return self.root == str(other)


class Name(_BoundedText):
    """Display name: 3 to 155 characters."""

    min_length: ClassVar[int] = 3
    max_length: ClassVar[int] = 155


class Description(_BoundedText):
    min_length: ClassVar[int] = 1
    max_length: ClassVar[int] = 2999


class Goal(_BoundedText):
    min_length: ClassVar[int] = 1
    max_length: ClassVar[int] = 2999


class Plan(_BoundedText):
    """Narrative plan text, usually AI generated."""

    min_length: ClassVar[int] = 1
    max_length: ClassVar[int] = 2999


class Email(_StringValue):

    @field_validator("root", mode="before")
    @classmethod
    def _check_email(cls, value: Any) -> str:
        if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
            raise InvalidParam(value)
        return value


class Password(_StringValue):
    """
    Plaintext password as typed by the user.

    Kept as a separate type from PasswordHash so the two can never be
    swapped by accident.
    """

    @field_validator("root", mode="before")
    @classmethod
    def _check_not_empty(cls, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise InvalidParam(value)
        return value


class PasswordHash(_StringValue):
    """One-way hash of a password, as stored."""

    @field_validator("root", mode="before")
    @classmethod
    def _check_not_empty(cls, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise InvalidParam(value)
        return value


# =============================================================================
# NUMERIC VALUE OBJECTS
# =============================================================================

class MoneyValue(RootModel[float]):
    """
    Positive amount of money, rounded to 2 decimal places.

    DESIGN DECISION: Zero is rejected along with negative amounts. Every
    amount in this domain (bill value, goal value, salary) is meaningless
    when zero, and an absent salary is modelled as None, not 0.
    """

    model_config = ConfigDict(frozen=True)

    @field_validator("root", mode="before")
    @classmethod
    def _check_amount(cls, value: Any) -> float:
        if not _is_number(value) or not value:
            raise InvalidParam(value)
        number = float(value)
        if math.isnan(number) or math.isinf(number) or number < 0:
            raise InvalidParam(value)
        return round(number, 2)

    def to_number(self) -> float:
        return self.root


class InstallmentsNumber(RootModel[int]):
    """How many monthly installments a bill is split into."""

    model_config = ConfigDict(frozen=True)

    @field_validator("root", mode="before")
    @classmethod
    def _check_installments(cls, value: Any) -> int:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise InvalidParam(value)
        return value

    def to_number(self) -> int:
        return self.root


MS_PER_DAY = 86_400_000

# "+YYYYYY-MM-DDTHH:MM:SS.mmmZ", used for instants after year 9999
EXTENDED_ISO_PATTERN = re.compile(
    r"^\+(\d{6})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,3}))?Z$"
)


def _civil_from_days(days: int) -> tuple[int, int, int]:
    """Proleptic Gregorian (year, month, day) for a count of days since 1970-01-01."""
    days += 719_468
    era = days // 146_097
    day_of_era = days - era * 146_097
    year_of_era = (
        day_of_era - day_of_era // 1460 + day_of_era // 36_524 - day_of_era // 146_096
    ) // 365
    day_of_year = day_of_era - (365 * year_of_era + year_of_era // 4 - year_of_era // 100)
    shifted_month = (5 * day_of_year + 2) // 153
    day = day_of_year - (153 * shifted_month + 2) // 5 + 1
    month = shifted_month + 3 if shifted_month < 10 else shifted_month - 9
    year = year_of_era + era * 400 + (1 if month <= 2 else 0)
    return year, month, day


def _days_from_civil(year: int, month: int, day: int) -> int:
    """Inverse of _civil_from_days."""
    if month <= 2:
        year -= 1
    era = year // 400
    year_of_era = year - era * 400
    shifted_month = month - 3 if month > 2 else month + 9
    day_of_year = (153 * shifted_month + 2) // 5 + day - 1
    day_of_era = year_of_era * 365 + year_of_era // 4 - year_of_era // 100 + day_of_year
    return era * 146_097 + day_of_era - 719_468


def _days_in_month(year: int, month: int) -> int:
    if month == 2:
        leap = year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)
        return 29 if leap else 28
    return 30 if month in (4, 6, 9, 11) else 31


class DateEpoch(RootModel[int]):
    """
    A point in time stored as whole epoch milliseconds.

    Accepts ISO-8601 strings, datetimes, dates or epoch numbers. Naive datetimes
    and strings without an offset are read as UTC. Fractional milliseconds
    are truncated.

    Valid range: 0 < epoch <= 999999999999999, which reaches past year 9999.
    `to_iso()` covers the whole range with calendar arithmetic and renders
    years above 9999 in the extended "+YYYYYY" form. `to_datetime()` is
    bounded by what datetime can hold.
    """

    model_config = ConfigDict(frozen=True)

    @field_validator("root", mode="before")
    @classmethod
    def _check_epoch(cls, value: Any) -> int:
        if isinstance(value, str):
            epoch = cls._parse_string(value)
        elif isinstance(value, datetime):
            epoch = cls._from_datetime(value)
        elif isinstance(value, date):
            epoch = cls._from_datetime(datetime(value.year, value.month, value.day))
        elif _is_number(value):
            number = float(value) if isinstance(value, Decimal) else value
            if isinstance(number, float) and not math.isfinite(number):
                raise InvalidParam(value)
            epoch = int(number)
        else:
            raise InvalidParam(value)

        if epoch <= 0 or epoch > MAX_EPOCH_MS:
            raise InvalidParam(value)
        return epoch

    @staticmethod
    def _from_datetime(value: datetime) -> int:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - EPOCH) // timedelta(milliseconds=1)

    @classmethod
    def _parse_string(cls, value: str) -> int:
        text = value.strip()
        extended = EXTENDED_ISO_PATTERN.match(text)
        if extended:
            return cls._parse_extended(value, extended)
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidParam(value)
        return cls._from_datetime(parsed)

    @staticmethod
    def _parse_extended(value: str, match: "re.Match[str]") -> int:
        year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
        millis = int((match.group(7) or "0").ljust(3, "0"))
        if not 1 <= month <= 12 or not 1 <= day <= _days_in_month(year, month):
            raise InvalidParam(value)
        if hour > 23 or minute > 59 or second > 59:
            raise InvalidParam(value)
        seconds = ((hour * 60) + minute) * 60 + second
        return _days_from_civil(year, month, day) * MS_PER_DAY + seconds * 1000 + millis

    @classmethod
    def now(cls) -> "DateEpoch":
        return cls(datetime.now(timezone.utc))

    def to_number(self) -> int:
        return self.root

    def year_month(self) -> tuple[int, int]:
        """UTC calendar (year, month), valid over the whole range."""
        year, month, _ = _civil_from_days(self.root // MS_PER_DAY)
        return year, month

    def to_datetime(self) -> datetime:
        """
        Timezone-aware UTC datetime for this instant.

        Raises:
            OverflowError: For instants after 9999-12-31, which datetime
                cannot represent. Use to_iso() or year_month() there.
        """
        return EPOCH + timedelta(milliseconds=self.root)

    def to_iso(self) -> str:
        """ISO-8601 with millisecond precision and a `Z` suffix."""
        days, remainder = divmod(self.root, MS_PER_DAY)
        year, month, day = _civil_from_days(days)
        seconds, millis = divmod(remainder, 1000)
        minutes, second = divmod(seconds, 60)
        hour, minute = divmod(minutes, 60)
        year_text = f"{year:04d}" if year <= 9999 else f"+{year:06d}"
        return (
            f"{year_text}-{month:02d}-{day:02d}"
            f"T{hour:02d}:{minute:02d}:{second:02d}.{millis:03d}Z"
        )


# =============================================================================
# BOOLEAN VALUE OBJECT
# =============================================================================

class Bool(RootModel[bool]):
    """Boolean accepting True/False or the numbers 0/1. Nothing else."""

    model_config = ConfigDict(frozen=True)

    @field_validator("root", mode="before")
    @classmethod
    def _check_bool(cls, value: Any) -> bool:
        if value is None:
            raise InvalidParam(value, f"Invalid value: {value}")
        if isinstance(value, bool):
            return value
        if not _is_number(value):
            raise InvalidParam(
                value,
                f"Invalid type: {type(value).__name__}. Expected boolean or number.",
            )
        if value not in (0, 1):
            raise InvalidParam(value, f"Invalid number: {value}. Expected 0 or 1.")
        return bool(value)

    def to_boolean(self) -> bool:
        return self.root

    def toggle(self) -> "Bool":
        return Bool(not self.root)
