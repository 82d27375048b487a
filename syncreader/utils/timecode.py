"""
Timecode formatting helpers.
"""


def format_time(seconds: float) -> str:
    """Format a playback position as m:ss.mmm."""
    seconds = max(0.0, seconds)
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    millis = int(round((seconds % 1) * 1000, 6))
    if millis >= 1000:
        millis = 999
    return f"{minutes}:{secs:02d}.{millis:03d}"


def format_duration(seconds: float) -> str:
    """Format duration as human-readable string."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"
