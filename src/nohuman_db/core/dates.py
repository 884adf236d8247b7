"""Calendar date helpers shared by the manifest client and the scanner."""
from datetime import date, datetime
from typing import Union

from nohuman_db.core.errors import InvalidDateError

# Legacy installs carry no date; they always sort as the oldest entry.
EPOCH = date(1970, 1, 1)


def parse_date(raw: Union[str, date]) -> date:
    """Parse a ``YYYY-MM-DD`` string into a date.
    
    TOML documents may already yield ``datetime.date`` values for bare dates,
    so those are accepted unchanged.
    
    Raises:
        InvalidDateError: If ``raw`` is not a real calendar date
    """
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return date.fromisoformat(str(raw).strip())
    except ValueError:
        raise InvalidDateError(str(raw))


def parse_date_or_epoch(raw: Union[str, date, None]) -> date:
    """Parse a date, falling back to :data:`EPOCH` when it is missing or invalid."""
    if raw is None:
        return EPOCH
    try:
        return parse_date(raw)
    except InvalidDateError:
        return EPOCH
