"""
JoinX Sources - Ready-Made Source Lists
=======================================

Concrete implementations of the SourceList protocol:

- BaseSource: abstract base carrying a ChangeSignal and the notify helpers
- ListSource: an in-memory list whose mutators emit fine-grained events
- StaticSource: exactly one fixed item (a header, a footer, a separator)
- Holder: the default holder created by both
"""

from abc import ABC, abstractmethod
from itertools import count
from typing import Any, Callable, Hashable, Iterable, Iterator, List, Optional, Sequence

from .protocols import DEFAULT_TYPE, NO_ID
from .signal import ChangeEvent, ChangeSignal


class Holder:
    """Default render target: remembers what it was created and bound for."""

    __slots__ = ("type_tag", "context", "item", "position")

    def __init__(self, type_tag: Hashable, context: Any = None):
        self.type_tag = type_tag
        self.context = context
        self.item = None
        self.position: Optional[int] = None

    def __repr__(self) -> str:
        return (
            f"Holder(type_tag={self.type_tag!r}, position={self.position!r}, "
            f"item={self.item!r})"
        )


def _default_holder_factory(context: Any, type_tag: Hashable) -> Holder:
    return Holder(type_tag, context)


def _default_binder(holder: Any, item: Any) -> None:
    holder.item = item


# ============================================================================
# BASE SOURCE
# ============================================================================


class BaseSource(ABC):
    """
    Base class for sources that own a ChangeSignal.

    Subclasses implement the item accessors and call the ``notify_*``
    helpers after every mutation.
    """

    type_tags: Sequence[Hashable] = (DEFAULT_TYPE,)

    def __init__(self, key: Optional[str] = None) -> None:
        self._changes = ChangeSignal(key or type(self).__name__)

    @property
    def changes(self) -> ChangeSignal:
        return self._changes

    @abstractmethod
    def item_count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def item_type(self, position: int) -> Hashable:
        raise NotImplementedError

    def item_id(self, position: int) -> Hashable:
        return NO_ID

    @abstractmethod
    def create_holder(self, context: Any, type_tag: Hashable) -> Any:
        raise NotImplementedError

    @abstractmethod
    def bind_holder(self, holder: Any, position: int) -> None:
        raise NotImplementedError

    # Subscription

    def subscribe(self, callback: Callable) -> "BaseSource":
        self._changes.subscribe(callback)
        return self

    def unsubscribe(self, callback: Callable) -> None:
        self._changes.unsubscribe(callback)

    def has_observer(self, callback: Callable) -> bool:
        return self._changes.has_observer(callback)

    def observer_count(self) -> int:
        return self._changes.observer_count()

    def batch(self):
        """Coalesce every notification made inside the block into one."""
        return self._changes.batch()

    # Notification helpers

    def notify_changed(self) -> None:
        self._changes.emit(ChangeEvent.changed())

    def notify_item_range_changed(self, start: int, count: int) -> None:
        self._changes.emit(ChangeEvent.range_changed(start, count))

    def notify_item_range_inserted(self, start: int, count: int) -> None:
        self._changes.emit(ChangeEvent.inserted(start, count))

    def notify_item_range_removed(self, start: int, count: int) -> None:
        self._changes.emit(ChangeEvent.removed(start, count))

    def notify_item_moved(self, from_position: int, to_position: int) -> None:
        self._changes.emit(ChangeEvent.moved(from_position, to_position))


# ============================================================================
# LIST SOURCE
# ============================================================================


class ListSource(BaseSource):
    """
    An in-memory ordered list of items.

    Args:
        items: Initial items
        type_of: Maps an item to its type tag (default: every item is
            ``DEFAULT_TYPE``)
        id_of: Maps an item to its stable id (default: no stable ids)
        type_tags: Every tag ``type_of`` can return
        holder_factory: ``(context, type_tag) -> holder`` (default: Holder)
        binder: ``(holder, item) -> None`` (default: sets ``holder.item``)
        key: Name used in logs and reprs

    Example:
        ```python
        people = ListSource(
            ["ann", "Bob"],
            type_of=lambda name: "upper" if name[0].isupper() else "lower",
            type_tags=("lower", "upper"),
        )
        people.append("cy")    # emits ITEM_RANGE_INSERTED(2, 1)
        ```
    """

    def __init__(
        self,
        items: Iterable[Any] = (),
        *,
        type_of: Optional[Callable[[Any], Hashable]] = None,
        id_of: Optional[Callable[[Any], Hashable]] = None,
        type_tags: Optional[Sequence[Hashable]] = None,
        holder_factory: Optional[Callable[[Any, Hashable], Any]] = None,
        binder: Optional[Callable[[Any, Any], None]] = None,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(key)
        self._items: List[Any] = list(items)
        self._type_of = type_of
        self._id_of = id_of
        if type_tags is not None:
            self.type_tags = tuple(type_tags)
        self._holder_factory = holder_factory or _default_holder_factory
        self._binder = binder or _default_binder

    @property
    def items(self) -> List[Any]:
        """A copy of the current items."""
        return list(self._items)

    # SourceList

    def item_count(self) -> int:
        return len(self._items)

    def item_type(self, position: int) -> Hashable:
        if self._type_of is None:
            return DEFAULT_TYPE
        return self._type_of(self._items[position])

    def item_id(self, position: int) -> Hashable:
        if self._id_of is None:
            return NO_ID
        return self._id_of(self._items[position])

    def create_holder(self, context: Any, type_tag: Hashable) -> Any:
        return self._holder_factory(context, type_tag)

    def bind_holder(self, holder: Any, position: int) -> None:
        self._binder(holder, self._items[position])
        if isinstance(holder, Holder):
            holder.position = position

    # Mutators

    def append(self, item: Any) -> None:
        self._items.append(item)
        self.notify_item_range_inserted(len(self._items) - 1, 1)

    def extend(self, items: Iterable[Any]) -> None:
        start = len(self._items)
        self._items.extend(items)
        added = len(self._items) - start
        if added:
            self.notify_item_range_inserted(start, added)

    def insert(self, position: int, item: Any) -> None:
        position = max(0, min(position, len(self._items)))
        self._items.insert(position, item)
        self.notify_item_range_inserted(position, 1)

    def pop(self, position: int = -1) -> Any:
        if position < 0:
            position += len(self._items)
        item = self._items.pop(position)
        self.notify_item_range_removed(position, 1)
        return item

    def move(self, from_position: int, to_position: int) -> None:
        item = self._items.pop(from_position)
        self._items.insert(to_position, item)
        self.notify_item_moved(from_position, to_position)

    def set_items(self, items: Iterable[Any]) -> None:
        self._items = list(items)
        self.notify_changed()

    def clear(self) -> None:
        count = len(self._items)
        self._items.clear()
        if count:
            self.notify_item_range_removed(0, count)

    # Sequence behaviour

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __getitem__(self, position: int) -> Any:
        return self._items[position]

    def __setitem__(self, position: int, item: Any) -> None:
        if position < 0:
            position += len(self._items)
        self._items[position] = item
        self.notify_item_range_changed(position, 1)

    def __repr__(self) -> str:
        return f"ListSource({self._changes.key!r}, {self._items!r})"


# ============================================================================
# STATIC SOURCE
# ============================================================================

_static_serial = count()


class StaticSource(BaseSource):
    """
    A source holding exactly one fixed item, or none while hidden.

    The holder is produced by ``factory(context)``; binding it does nothing
    beyond recording the position, since the content never changes.
    Its stable id is its key, which defaults to a name unique to this
    source, so two headers with the same tag still report distinct ids.
    """

    def __init__(
        self,
        factory: Optional[Callable[[Any], Any]] = None,
        type_tag: Hashable = "static",
        visible: bool = True,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(key or f"static:{type_tag}:{next(_static_serial)}")
        self._factory = factory
        self._type_tag = type_tag
        self._visible = visible
        self.type_tags = (type_tag,)

    @property
    def type_tag(self) -> Hashable:
        return self._type_tag

    @property
    def visible(self) -> bool:
        return self._visible

    @visible.setter
    def visible(self, visible: bool) -> None:
        if visible == self._visible:
            return
        self._visible = visible
        if visible:
            self.notify_item_range_inserted(0, 1)
        else:
            self.notify_item_range_removed(0, 1)

    def item_count(self) -> int:
        return 1 if self._visible else 0

    def item_type(self, position: int) -> Hashable:
        self._check_position(position)
        return self._type_tag

    def item_id(self, position: int) -> Hashable:
        self._check_position(position)
        return self._changes.key

    def create_holder(self, context: Any, type_tag: Hashable) -> Any:
        if self._factory is None:
            return Holder(type_tag, context)
        return self._factory(context)

    def bind_holder(self, holder: Any, position: int) -> None:
        self._check_position(position)
        if isinstance(holder, Holder):
            holder.position = position

    def _check_position(self, position: int) -> None:
        if position != 0 or not self._visible:
            raise IndexError(f"static source position {position} out of range")

    def __repr__(self) -> str:
        return f"StaticSource({self._type_tag!r}, visible={self._visible})"
