"""
Read-along synchronisation of transcript words with audio playback.
"""

__version__ = "1.0.0"
