"""
JoinX - Joined Observable Lists

Composes any number of independently sized, independently typed source
lists into one virtual list with its own dense position and type numbering.
"""

from .binding import SourceBinding, static_binding
from .composite import CompositeList, CompositeState, PositionEntry, TypeEntry
from .config import JoinConfig
from .errors import IndexOutOfRange, JoinError, UnknownType
from .protocols import DEFAULT_TYPE, NO_ID, SourceList, is_source_list
from .signal import ChangeEvent, ChangeKind, ChangeSignal, _reset_notification_state
from .source import BaseSource, Holder, ListSource, StaticSource

__version__ = "0.1.0"

# Export all the main classes and functions
__all__ = [
    # Core
    "CompositeList",
    "CompositeState",
    "PositionEntry",
    "TypeEntry",
    "SourceBinding",
    "static_binding",
    "JoinConfig",
    # Sources
    "SourceList",
    "is_source_list",
    "BaseSource",
    "ListSource",
    "StaticSource",
    "Holder",
    # Notifications
    "ChangeEvent",
    "ChangeKind",
    "ChangeSignal",
    # Sentinels
    "NO_ID",
    "DEFAULT_TYPE",
    # Exceptions
    "JoinError",
    "IndexOutOfRange",
    "UnknownType",
    # Testing utilities (internal use)
    "_reset_notification_state",
]
