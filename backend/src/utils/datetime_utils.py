"""
Datetime utilities for consistent civil-calendar handling across the application.

Every timestamp in the system is stored as a naive datetime that represents
wall-clock time in the clinic's fixed UTC offset. Timezone-aware inputs are
converted into that offset and stripped of tzinfo at the boundary.
"""

import calendar
import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from core.config import CLINIC_UTC_OFFSET_HOURS

logger = logging.getLogger(__name__)

# Fixed clinic timezone (no daylight saving)
CLINIC_TZ = timezone(timedelta(hours=CLINIC_UTC_OFFSET_HOURS))


def clinic_now() -> datetime:
    """
    Get the current clinic wall-clock time as a naive datetime.

    Returns:
        Current datetime in the clinic's civil calendar, without tzinfo
    """
    return datetime.now(CLINIC_TZ).replace(tzinfo=None)


def clinic_today() -> date:
    """Current date in the clinic's civil calendar."""
    return clinic_now().date()


def to_clinic_naive(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to naive clinic time.

    Args:
        dt: Naive (assumed to already be clinic time) or timezone-aware datetime

    Returns:
        Naive datetime in clinic time, or None if input is None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(CLINIC_TZ).replace(tzinfo=None)


def parse_datetime_to_clinic(v: str | datetime) -> datetime:
    """
    Parse an ISO datetime string (or datetime) into naive clinic time.

    Handles "2025-01-01T09:00:00-03:00", "2025-01-01T12:00:00Z" and naive
    strings (assumed to already be clinic time).

    Raises:
        ValueError: If the string cannot be parsed
    """
    if isinstance(v, datetime):
        dt = v
    else:
        try:
            dt = datetime.fromisoformat(v.strip().replace('Z', '+00:00'))
        except ValueError as e:
            raise ValueError(f"Invalid datetime string format: {v}") from e
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(CLINIC_TZ).replace(tzinfo=None)


def add_days(dt: datetime, days: int) -> datetime:
    """Add whole civil days to a datetime, keeping the wall-clock time."""
    return dt + timedelta(days=days)


def add_months(dt: datetime, months: int) -> datetime:
    """
    Add calendar months to a datetime.

    The day of month is clamped to the last day of the target month,
    so Jan 31 + 1 month is Feb 28 (or 29).
    """
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """
    Get the half-open [start, end) datetime range covering a calendar month.

    Raises:
        ValueError: If month is not within 1..12
    """
    if month < 1 or month > 12:
        raise ValueError(f"Invalid month: {month}")
    start = datetime(year, month, 1)
    end = add_months(start, 1)
    return start, end


def due_date_in(days: int, today: Optional[date] = None) -> date:
    """Due date N days after today (clinic calendar)."""
    return (today or clinic_today()) + timedelta(days=days)


def format_datetime(dt: datetime) -> str:
    """
    Format a datetime for user-facing messages: "25/12/2025 13:30".
    """
    local_datetime = to_clinic_naive(dt)
    if local_datetime is None:
        raise ValueError("Cannot format None datetime")
    return local_datetime.strftime("%d/%m/%Y %H:%M")


def format_date(value: date | datetime) -> str:
    """Format a date for user-facing messages: "25/12/2025"."""
    return value.strftime("%d/%m/%Y")


def format_currency(amount: Decimal | float | int) -> str:
    """
    Format a monetary amount the way invoices display it: "R$ 1.234,56".
    """
    formatted = f"{Decimal(str(amount)):,.2f}"
    # Swap thousands/decimal separators
    formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {formatted}"


def datetime_validator(*field_names: str):
    """
    Create a reusable Pydantic validator that parses datetime fields to clinic time.

    Usage example:
        ```python
        class MyModel(BaseModel):
            appointment_time: datetime

            @model_validator(mode='before')
            @classmethod
            def parse_datetime_fields(cls, values: Dict[str, Any]) -> Dict[str, Any]:
                return datetime_validator('appointment_time')(cls, values)
        ```

    Unparseable values are left in place so Pydantic reports the error.
    """
    def validator(cls: Any, values: Any) -> Any:  # pyright: ignore[reportUnknownParameterType]
        if not isinstance(values, dict):
            return values
        data: Dict[str, Any] = values
        for field_name in field_names:
            raw = data.get(field_name)
            if isinstance(raw, str) and raw:
                try:
                    data[field_name] = parse_datetime_to_clinic(raw)
                except ValueError as e:
                    logger.debug(
                        f"Failed to parse datetime string for field '{field_name}': "
                        f"{raw}, error: {e}. Pydantic will handle validation."
                    )
            elif isinstance(raw, list):
                parsed = []
                for item in raw:  # pyright: ignore[reportUnknownVariableType]
                    if isinstance(item, str):
                        try:
                            parsed.append(parse_datetime_to_clinic(item))
                            continue
                        except ValueError:
                            pass
                    parsed.append(item)  # pyright: ignore[reportUnknownArgumentType]
                data[field_name] = parsed
        return data
    return validator
