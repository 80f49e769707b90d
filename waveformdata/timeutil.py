"""Formatting of durations for display."""


def _trunc_div(value: int, divisor: int) -> int:
    """Integer division that rounds towards zero."""
    quotient = abs(value) // divisor
    return -quotient if value < 0 else quotient


def seconds_to_string(seconds: int) -> str:
    """Format a number of seconds as ``MM:SS``, or ``HH:MM:SS`` when over an hour."""
    seconds = int(seconds)
    hours = _trunc_div(seconds, 3600)
    seconds -= hours * 3600
    minutes = _trunc_div(seconds, 60)
    seconds -= minutes * 60

    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"