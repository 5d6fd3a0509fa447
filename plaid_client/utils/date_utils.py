"""Date formatting for request envelopes"""

from datetime import date, datetime
from typing import Union


def to_plaid_date(value: Union[date, str]) -> str:
    """Format a date as YYYY-MM-DD; datetimes drop their time, strings are checked and passed through"""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(value).isoformat()
