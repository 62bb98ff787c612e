"""
Provision Tracker

Records whether nodes have completed their one-time post-deployment
provisioning step, in redis or in process memory.
"""

__version__ = "0.1.0"

from .config import Settings, TrackerBackend
from .exceptions import ProvisionTrackerError
from .tracker import KeyValueTracker, MemoryTracker, Tracker, TrackerFactory

__all__ = [
    "Settings",
    "TrackerBackend",
    "ProvisionTrackerError",
    "Tracker",
    "TrackerFactory",
    "KeyValueTracker",
    "MemoryTracker",
]
