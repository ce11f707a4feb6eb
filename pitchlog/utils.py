import calendar
import math
from datetime import datetime, date
from typing import List, Dict, Any, Optional


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from either a model or a raw dict record"""
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def to_int(value: Any) -> int:
    """Coerce a stored numeric field to int, treating anything unusable as 0"""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return 0
        return int(parsed) if math.isfinite(parsed) else 0
    return 0


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a stored date into a naive local datetime, or None if unusable"""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def subtract_months(dt: datetime, months: int) -> datetime:
    """
    Step back whole calendar months, clamping the day to the target month's length.

    31 May minus 3 months is 28 Feb (29 in leap years), never a day in early March.
    """
    month_index = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def percentage(part: int, whole: int) -> int:
    """Integer percentage rounded half-up; 0 when whole is 0"""
    if whole <= 0:
        return 0
    return int(part * 100 / whole + 0.5)


def sort_by_date(records: List[Any], field: str = 'date', newest_first: bool = True) -> List[Any]:
    """Sort records by a date field; unparseable dates sort as oldest"""
    def date_key(record):
        return parse_datetime(get_field(record, field)) or datetime.min

    return sorted(records, key=date_key, reverse=newest_first)


def parse_id(value: Any) -> Optional[int]:
    """Parse a positive integer id from a query string or JSON value"""
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = int(str(value).strip())
    except (ValueError, TypeError):
        return None
    return parsed if parsed > 0 else None


def validate_game_data(data: Dict[str, Any], partial: bool = False) -> List[str]:
    """Validate game form data and return list of errors"""
    errors = []

    if not isinstance(data, dict):
        return ["Request body must be a JSON object"]

    if not partial:
        if parse_id(data.get('player_id')) is None:
            errors.append("Player id is required")

        if not data.get('opponent') or not str(data.get('opponent')).strip():
            errors.append("Opponent is required")

        if not data.get('date'):
            errors.append("Date is required")

        for field in ['team_score', 'opponent_score']:
            if data.get(field) is None or data.get(field) == '':
                errors.append(f"{field.replace('_', ' ').title()} is required")

    # Validate date format if provided
    if data.get('date') and parse_datetime(data['date']) is None:
        errors.append("Date must be an ISO date (e.g., '2025-10-23' or '2025-10-23T15:00:00')")

    # Validate numeric fields
    for field in ['team_score', 'opponent_score', 'player_goals', 'player_assists',
                  'points_earned', 'minutes_played', 'mistakes']:
        value = data.get(field)
        if value is None or value == '':
            continue
        try:
            int_val = int(value)
            if int_val < 0:
                errors.append(f"{field.replace('_', ' ').title()} must be non-negative")
        except (ValueError, TypeError):
            errors.append(f"{field.replace('_', ' ').title()} must be a valid number")

    return errors


def format_validation_errors(exc: Exception) -> List[str]:
    """Flatten a pydantic ValidationError into readable messages"""
    errors_fn = getattr(exc, 'errors', None)
    if not callable(errors_fn):
        return [str(exc)]
    messages = []
    for error in errors_fn():
        location = '.'.join(str(part) for part in error.get('loc', ()))
        message = error.get('msg', 'Invalid value')
        messages.append(f"{location}: {message}" if location else message)
    return messages
