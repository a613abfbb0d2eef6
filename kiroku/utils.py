import math


def format_timestamp(seconds: float) -> str:
    """Format encounter seconds as MM:SS:mmm, with a leading '-' if negative."""
    positive = abs(seconds)
    minutes = math.floor(positive / 60)
    whole_seconds = math.floor(positive - minutes * 60)
    millis = round((positive - math.floor(positive)) * 1000)
    if millis == 1000:  # 59.9996 style rounding
        millis = 999
    formatted = f"{minutes:02d}:{whole_seconds:02d}:{millis:03d}"
    return f"-{formatted}" if seconds < 0 else formatted
