"""
Display formatting for file sizes, dates and file badges.
"""
import math
from datetime import date, datetime
from typing import Optional, Union

_SIZE_UNITS = ["B", "KB", "MB", "GB"]


def format_file_size(size: Optional[int]) -> str:
    """
    Format a byte count with one decimal, e.g. ``1.2 MB``.
    
    Missing or zero sizes render as ``0 B``. Sizes at or above 1 TiB are
    still expressed in GB.
    """
    if not size or size < 0:
        return "0 B"
    k = 1024
    i = 0
    while i < len(_SIZE_UNITS) - 1 and size >= k ** (i + 1):
        i += 1
    value = math.floor(size / k ** i * 10 + 0.5) / 10
    if value == int(value):
        value = int(value)
    return f"{value} {_SIZE_UNITS[i]}"


def format_date(value: Optional[Union[date, datetime, str]]) -> str:
    """Format a date as DD/MM/YYYY, or ``N/A`` when missing."""
    if not value:
        return "N/A"
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.strftime("%d/%m/%Y")


def file_initials(filename: str) -> str:
    """Two-letter badge from the dash-separated stem, e.g. ``intro-to-js.pdf`` -> ``IT``."""
    stem = filename.split(".")[0]
    initials = "".join(part[0] for part in stem.split("-") if part).upper()
    return initials[:2] or "F"
