"""
Node provisioning trackers.

This package provides a tracker abstraction with pluggable backends
(redis or in-memory) for recording which nodes have been provisioned.
"""

from .manager import KeyValueTracker, MemoryTracker, Tracker, TrackerFactory

__all__ = [
    "Tracker",
    "TrackerFactory",
    "KeyValueTracker",
    "MemoryTracker",
]
