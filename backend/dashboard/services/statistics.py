"""
Statistics over the dashboard's file list.
"""
from typing import Any, Mapping, Sequence, Union

from dashboard.schemas.files import FileRecord, Statistics
from dashboard.utils.formatting import format_file_size

QUOTA_CEILING_BYTES = 10 * 1024 * 1024 * 1024  # 10 GiB
QUOTA_LABEL = "10GB"

# Placeholder shown on the dashboard; there is no user tracking behind it.
ACTIVE_USERS_PLACEHOLDER = 1254


def _size_of(item: Union[FileRecord, Mapping[str, Any]]) -> int:
    if isinstance(item, Mapping):
        size = item.get("size")
    else:
        size = getattr(item, "size", None)
    return size or 0


def quota_percent(total_size_bytes: int, ceiling_bytes: int = QUOTA_CEILING_BYTES) -> int:
    """
    Percentage of the quota in use, rounded half up.
    
    Not clamped: usage above the ceiling yields values over 100.
    """
    # floor(total / ceiling * 100 + 0.5) in integer arithmetic
    return (200 * total_size_bytes + ceiling_bytes) // (2 * ceiling_bytes)


def compute_statistics(files: Sequence[Union[FileRecord, Mapping[str, Any]]]) -> Statistics:
    """
    Reduce a file list to dashboard statistics.
    
    Pure and deterministic; missing sizes count as zero.
    
    Args:
        files: Listed files (FileRecord or plain mappings with a ``size`` key)
        
    Returns:
        Statistics for the list
    """
    total_size = sum(_size_of(f) for f in files)
    percent = quota_percent(total_size)
    
    return Statistics(
        total_size_bytes=total_size,
        file_count=len(files),
        quota_percent=percent,
        quota_ceiling_bytes=QUOTA_CEILING_BYTES,
        active_users=ACTIVE_USERS_PLACEHOLDER,
        used_space=format_file_size(total_size),
        storage_label=f"{percent}% of {QUOTA_LABEL}",
    )
