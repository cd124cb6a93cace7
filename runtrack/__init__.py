"""
RunTrack - real-time running session tracking.

Turns a stream of noisy location fixes into distance, pace, splits,
elevation and calorie estimates.
"""

__version__ = "0.1.0"
