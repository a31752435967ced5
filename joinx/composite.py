"""
JoinX CompositeList - Many Typed Sources, One Virtual List
==========================================================

A CompositeList concatenates the items of an ordered sequence of bindings
and renumbers both positions and item types into its own dense, zero-based
spaces.

Two tables carry the translation:

- The type table, built once at construction, lists one entry per declared
  type tag in binding order then declaration order. Its index *is* the
  global type id, so two bindings declaring the same tag value still get
  distinct global ids.

- The position table, rebuilt in full on every change, lists one entry per
  visible item in binding order then local order. Its index *is* the global
  position.

Every change a source reports, however fine-grained, is handled the same
way: rebuild the position table from scratch, then tell the host that
everything changed. The rebuild is O(total items) and trivially consistent.

Example:
    ```python
    from joinx import CompositeList, ListSource, static_binding

    header = static_binding(type_tag="header")
    rows = ListSource(["a", "b"], key="rows")

    joined = CompositeList(header, rows)
    joined.item_count()        # 3
    joined.global_type_at(0)   # 0 (header)
    joined.global_type_at(1)   # 1 (rows' only type)

    joined.subscribe(lambda event: print("host: redraw"))
    rows.append("c")           # prints "host: redraw"
    joined.item_count()        # 4
    ```
"""

import logging
import weakref
from dataclasses import replace
from enum import Enum
from typing import Any, Callable, Hashable, List, NamedTuple, Optional, Tuple, Union

from .binding import SourceBinding
from .config import JoinConfig
from .errors import IndexOutOfRange, UnknownType
from .protocols import NO_ID, SourceList
from .signal import ChangeEvent, ChangeKind, ChangeSignal


class CompositeState(Enum):
    """Lifecycle of the position table."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


class TypeEntry(NamedTuple):
    """One global type id: which binding owns it and under which local tag."""

    binding_index: int
    local_tag: Hashable


class PositionEntry(NamedTuple):
    """One global position: owning binding, local position, global type id."""

    binding_index: int
    local_position: int
    global_type: int


def _forwarder(composite_ref: "weakref.ref", binding_index: int) -> Callable:
    # Holds the composite weakly so a source never keeps it alive
    def on_source_changed(event: ChangeEvent) -> None:
        composite = composite_ref()
        if composite is not None:
            composite._on_source_changed(binding_index, event)

    return on_source_changed


def _detach(subscriptions: List[Tuple[SourceList, Callable]]) -> None:
    while subscriptions:
        source, callback = subscriptions.pop()
        source.unsubscribe(callback)


class CompositeList:
    """
    Joins source bindings into a single virtual list.

    Args:
        *bindings: SourceBinding instances, or sources declaring their own
            ``type_tags`` (wrapped automatically). Order is final.
        config: A JoinConfig; defaults to ``JoinConfig()``
        **options: Overrides for individual JoinConfig fields

    The composite subscribes to each binding's source when ``auto_update``
    is on. Call :meth:`close` (or use it as a context manager) to detach;
    detaching also happens when the composite is garbage collected.
    """

    def __init__(
        self,
        *bindings: Union[SourceBinding, SourceList],
        config: Optional[JoinConfig] = None,
        **options: Any,
    ) -> None:
        config = config or JoinConfig()
        if options:
            config = replace(config, **options)
        self._config = config
        self._has_stable_ids = config.stable_ids

        self._bindings: Tuple[SourceBinding, ...] = tuple(
            b if isinstance(b, SourceBinding) else SourceBinding(b) for b in bindings
        )
        self._changes = ChangeSignal(f"CompositeList[{len(self._bindings)}]")

        type_table: List[TypeEntry] = []
        type_offsets: List[int] = []
        for binding_index, binding in enumerate(self._bindings):
            type_offsets.append(len(type_table))
            for tag in binding.type_tags:
                type_table.append(TypeEntry(binding_index, tag))
        self._type_table: Tuple[TypeEntry, ...] = tuple(type_table)
        self._type_offsets: Tuple[int, ...] = tuple(type_offsets)

        self._position_table: Tuple[PositionEntry, ...] = ()
        self._position_offsets: Tuple[int, ...] = (0,) * len(self._bindings)
        self._state = CompositeState.UNINITIALIZED

        if config.initial_rebuild:
            self.on_contents_changed()

        self._subscriptions: List[Tuple[SourceList, Callable]] = []
        if config.auto_update:
            self_ref = weakref.ref(self)
            for binding_index, binding in enumerate(self._bindings):
                callback = _forwarder(self_ref, binding_index)
                binding.source.subscribe(callback)
                self._subscriptions.append((binding.source, callback))
        self._finalizer = weakref.finalize(self, _detach, self._subscriptions)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def bindings(self) -> Tuple[SourceBinding, ...]:
        return self._bindings

    @property
    def config(self) -> JoinConfig:
        return self._config

    @property
    def state(self) -> CompositeState:
        return self._state

    @property
    def type_table(self) -> Tuple[TypeEntry, ...]:
        return self._type_table

    @property
    def position_table(self) -> Tuple[PositionEntry, ...]:
        return self._position_table

    @property
    def type_offsets(self) -> Tuple[int, ...]:
        return self._type_offsets

    @property
    def position_offsets(self) -> Tuple[int, ...]:
        return self._position_offsets

    @property
    def type_tags(self) -> Tuple[int, ...]:
        """Global type ids, so a composite can itself be bound into another."""
        return tuple(range(len(self._type_table)))

    @property
    def has_stable_ids(self) -> bool:
        return self._has_stable_ids

    @has_stable_ids.setter
    def has_stable_ids(self, value: bool) -> None:
        self._has_stable_ids = bool(value)

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    def on_contents_changed(self) -> None:
        """
        Rebuild the position table from the sources' current contents.

        For each item, global type id = (declared type count of every earlier
        binding) + the item's local type index. The new table is assembled
        aside and committed only once every item has resolved, so an
        UnknownType leaves the previous table untouched.
        """
        table: List[PositionEntry] = []
        starts: List[int] = []
        type_offset = 0

        for binding_index, binding in enumerate(self._bindings):
            starts.append(len(table))
            for local_position in range(binding.current_item_count()):
                tag = binding.type_tag_at(local_position)
                try:
                    local_type = binding.local_type_index_of(tag)
                except UnknownType:
                    logging.error(
                        f"Rebuild aborted: binding {binding_index} reported undeclared "
                        f"type {tag!r} at local position {local_position}"
                    )
                    raise
                table.append(
                    PositionEntry(binding_index, local_position, type_offset + local_type)
                )
            type_offset += binding.declared_type_count()

        self._position_table = tuple(table)
        self._position_offsets = tuple(starts)
        self._state = CompositeState.READY
        logging.debug(
            f"{self._changes.key} rebuilt: {len(table)} items, "
            f"{len(self._type_table)} types"
        )

    def notify_changed(self) -> None:
        """Rebuild, then tell the host that everything changed."""
        self.on_contents_changed()
        self._changes.emit(ChangeEvent.changed())

    def _on_source_changed(self, binding_index: int, event: ChangeEvent) -> None:
        if event.kind is not ChangeKind.CHANGED:
            logging.debug(
                f"{self._changes.key}: {event.kind.value} from binding {binding_index} "
                f"treated as a full change"
            )
        self.notify_changed()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def item_count(self) -> int:
        return len(self._position_table)

    def _entry(self, position: int) -> PositionEntry:
        table = self._position_table
        if not 0 <= position < len(table):
            raise IndexOutOfRange(position, len(table), what="global position")
        return table[position]

    def _type_entry(self, global_type: int) -> TypeEntry:
        table = self._type_table
        if not 0 <= global_type < len(table):
            raise IndexOutOfRange(global_type, len(table), what="global type id")
        return table[global_type]

    def _check_binding_index(self, binding_index: int) -> SourceBinding:
        if not 0 <= binding_index < len(self._bindings):
            raise IndexOutOfRange(
                binding_index, len(self._bindings), what="binding index"
            )
        return self._bindings[binding_index]

    def global_type_at(self, position: int) -> int:
        return self._entry(position).global_type

    def id_at(self, position: int) -> Hashable:
        entry = self._entry(position)
        if not self._has_stable_ids:
            return NO_ID
        return self._bindings[entry.binding_index].id_at(entry.local_position)

    def resolve(self, position: int) -> Tuple[SourceBinding, int]:
        """Map a global position to (binding, local position)."""
        entry = self._entry(position)
        return self._bindings[entry.binding_index], entry.local_position

    def resolve_type(self, global_type: int) -> Tuple[SourceBinding, Hashable]:
        """Map a global type id to (binding, local type tag)."""
        entry = self._type_entry(global_type)
        return self._bindings[entry.binding_index], entry.local_tag

    def global_position_of(self, binding_index: int, local_position: int) -> int:
        """Map (binding index, local position) back to a global position."""
        self._check_binding_index(binding_index)
        start = self._position_offsets[binding_index]
        if binding_index + 1 < len(self._bindings):
            end = self._position_offsets[binding_index + 1]
        else:
            end = len(self._position_table)
        if not 0 <= local_position < end - start:
            raise IndexOutOfRange(local_position, end - start, what="local position")
        return start + local_position

    def global_type_of(self, binding_index: int, local_tag: Hashable) -> int:
        """Map (binding index, local type tag) back to a global type id."""
        binding = self._check_binding_index(binding_index)
        return self._type_offsets[binding_index] + binding.local_type_index_of(local_tag)

    # ------------------------------------------------------------------
    # Holders
    # ------------------------------------------------------------------

    def create_holder(self, context: Any, global_type: int) -> Any:
        entry = self._type_entry(global_type)
        return self._bindings[entry.binding_index].create_holder(context, entry.local_tag)

    def bind_holder(self, holder: Any, position: int) -> None:
        entry = self._entry(position)
        self._bindings[entry.binding_index].bind_holder(holder, entry.local_position)

    def render(self, context: Any, position: int) -> Any:
        """Create a holder for the item at ``position`` and bind it."""
        holder = self.create_holder(context, self.global_type_at(position))
        self.bind_holder(holder, position)
        return holder

    # SourceList aliases, for nesting a composite inside another

    def item_type(self, position: int) -> int:
        return self.global_type_at(position)

    def item_id(self, position: int) -> Hashable:
        return self.id_at(position)

    # ------------------------------------------------------------------
    # Host subscription and lifetime
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable) -> "CompositeList":
        self._changes.subscribe(callback)
        return self

    def unsubscribe(self, callback: Callable) -> None:
        self._changes.unsubscribe(callback)

    def has_observer(self, callback: Callable) -> bool:
        return self._changes.has_observer(callback)

    def observer_count(self) -> int:
        return self._changes.observer_count()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self) -> None:
        """Unsubscribe from every source. Safe to call more than once."""
        self._finalizer()

    def __enter__(self) -> "CompositeList":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._position_table)

    def __repr__(self) -> str:
        return (
            f"CompositeList(bindings={len(self._bindings)}, "
            f"items={len(self._position_table)}, types={len(self._type_table)}, "
            f"state={self._state.value})"
        )
