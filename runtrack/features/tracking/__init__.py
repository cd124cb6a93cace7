"""
Tracking pipeline wiring.

Components:
- FixChannel: Bounded queue from a fix source into one SessionEngine
"""

from .channel import FixChannel, DEFAULT_CHANNEL_SIZE

__all__ = [
    "FixChannel",
    "DEFAULT_CHANNEL_SIZE",
]
