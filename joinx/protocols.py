"""
JoinX Source Protocols - The Collaborator Contract
==================================================

This module defines the structural interface every source list must satisfy
to be joined into a composite. Protocols are structural types: a source does
not need to inherit from anything, it only needs the right methods.

A source list must be able to:
- report its current item count
- report the type tag and a stable id of the item at a local position
- construct a holder for one of its own type tags
- populate a holder with the item at a local position
- accept and drop change observers

It may also expose ``type_tags``, the finite set of tags it can produce.
Bindings fall back to it when no tags are declared explicitly.
"""

from typing import Any, Callable, Hashable, Protocol, runtime_checkable

# ============================================================================
# SENTINEL VALUES
# ============================================================================


class _NoId:
    """Sentinel for 'this item has no stable id'."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "NO_ID"

    def __bool__(self):
        return False

    def __reduce__(self):
        return (_NoId, ())


NO_ID = _NoId()

# Type tag used by sources that render a single kind of item
DEFAULT_TYPE = 0


# ============================================================================
# SOURCE LIST PROTOCOL
# ============================================================================


@runtime_checkable
class SourceList(Protocol):
    """
    Protocol for an ordered, typed collection that can be joined.

    Positions and type tags are always the source's own *local* values; the
    composite never passes a global position or a global type id to a source.

    Example:
        ```python
        class Fruits:
            type_tags = ("fruit",)

            def __init__(self):
                self.names = ["apple", "pear"]
                self.signal = ChangeSignal("fruits")

            def item_count(self):
                return len(self.names)

            def item_type(self, position):
                return "fruit"

            def item_id(self, position):
                return self.names[position]

            def create_holder(self, context, type_tag):
                return {}

            def bind_holder(self, holder, position):
                holder["text"] = self.names[position]

            def subscribe(self, callback):
                self.signal.subscribe(callback)

            def unsubscribe(self, callback):
                self.signal.unsubscribe(callback)

        assert isinstance(Fruits(), SourceList)
        ```
    """

    def item_count(self) -> int:
        """Return the number of items currently in the source."""
        ...

    def item_type(self, position: int) -> Hashable:
        """Return the type tag of the item at ``position``."""
        ...

    def item_id(self, position: int) -> Hashable:
        """Return a stable id for the item at ``position`` (or ``NO_ID``)."""
        ...

    def create_holder(self, context: Any, type_tag: Hashable) -> Any:
        """Construct an empty holder able to display items of ``type_tag``."""
        ...

    def bind_holder(self, holder: Any, position: int) -> None:
        """Populate ``holder`` with the item at ``position``."""
        ...

    def subscribe(self, callback: Callable) -> Any:
        """Start delivering change events to ``callback``."""
        ...

    def unsubscribe(self, callback: Callable) -> None:
        """Stop delivering change events to ``callback``."""
        ...


def is_source_list(obj: Any) -> bool:
    """
    Check if an object satisfies the SourceList protocol.

    Args:
        obj: The object to check

    Returns:
        True if obj provides every SourceList method, False otherwise
    """
    return isinstance(obj, SourceList)
