"""Progress label formatting."""


def format_time(ms: int | float | None) -> str:
    """Format a position as ``m:ss``. Negative or missing values give ``0:00``."""
    if ms is None or ms != ms or ms < 0:  # ms != ms catches NaN
        return "0:00"
    total_seconds = int(ms // 1000)
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


def format_remaining(duration_ms: int | None, progress_ms: int | None) -> str:
    """Format the time left in a track as ``-m:ss``."""
    if not duration_ms or duration_ms <= 0:
        return "-0:00"
    remaining_ms = duration_ms - (progress_ms or 0)
    if remaining_ms < 0:
        return "-0:00"
    return f"-{format_time(remaining_ms)}"
