"""
JoinX SourceBinding - One Source Plus Its Declared Type Tags
============================================================

A binding wraps one source list together with the ordered, immutable tuple
of type tags it may produce. The tuple fixes a small dense index for each
tag (its position in the tuple); the composite offsets those indices to
build its global type ids.
"""

from typing import Any, Callable, Dict, Hashable, Optional, Sequence, Tuple

from .errors import IndexOutOfRange, UnknownType
from .protocols import SourceList
from .source import StaticSource


class SourceBinding:
    """
    Wraps a source list with its declared type tags.

    Args:
        source: The wrapped source list (not owned)
        type_tags: Every tag the source can produce, each exactly once.
            Defaults to the source's own ``type_tags`` attribute.

    Raises:
        TypeError: If no type tags are given and the source declares none
            or if the tags are a bare string instead of a sequence
        ValueError: If a tag is declared twice

    Example:
        ```python
        binding = SourceBinding(messages, ("incoming", "outgoing"))
        binding.local_type_index_of("outgoing")   # 1
        binding.declared_type_tag_at(0)           # "incoming"
        ```
    """

    __slots__ = ("_source", "_type_tags", "_type_index")

    def __init__(
        self, source: SourceList, type_tags: Optional[Sequence[Hashable]] = None
    ) -> None:
        if type_tags is None:
            type_tags = getattr(source, "type_tags", None)
        if type_tags is None:
            raise TypeError(
                f"{source!r} declares no type_tags; pass them to SourceBinding explicitly"
            )
        if isinstance(type_tags, (str, bytes)):
            raise TypeError(
                f"type_tags must be a sequence of tags, not a bare {type(type_tags).__name__}; "
                f"wrap a single tag as ({type_tags!r},)"
            )

        tags = tuple(type_tags)
        index: Dict[Hashable, int] = {}
        for i, tag in enumerate(tags):
            if tag in index:
                raise ValueError(f"type tag {tag!r} declared more than once")
            index[tag] = i

        self._source = source
        self._type_tags: Tuple[Hashable, ...] = tags
        self._type_index = index

    @property
    def source(self) -> SourceList:
        return self._source

    @property
    def type_tags(self) -> Tuple[Hashable, ...]:
        return self._type_tags

    # Type space

    def declared_type_count(self) -> int:
        return len(self._type_tags)

    def declared_type_tag_at(self, local_type_index: int) -> Hashable:
        if not 0 <= local_type_index < len(self._type_tags):
            raise IndexOutOfRange(
                local_type_index, len(self._type_tags), what="local type index"
            )
        return self._type_tags[local_type_index]

    def local_type_index_of(self, tag: Hashable) -> int:
        try:
            return self._type_index[tag]
        except (KeyError, TypeError):
            # TypeError: unhashable values can never have been declared
            raise UnknownType(tag, self._type_tags) from None

    # Delegation to the source

    def current_item_count(self) -> int:
        return self._source.item_count()

    def type_tag_at(self, local_position: int) -> Hashable:
        return self._source.item_type(local_position)

    def id_at(self, local_position: int) -> Hashable:
        return self._source.item_id(local_position)

    def create_holder(self, context: Any, local_type_tag: Hashable) -> Any:
        return self._source.create_holder(context, local_type_tag)

    def bind_holder(self, holder: Any, local_position: int) -> None:
        self._source.bind_holder(holder, local_position)

    def render(self, context: Any, local_position: int, local_type_tag: Hashable) -> Any:
        """Create a holder for ``local_type_tag`` and bind it to ``local_position``."""
        holder = self.create_holder(context, local_type_tag)
        self.bind_holder(holder, local_position)
        return holder

    def __repr__(self) -> str:
        return f"SourceBinding({self._source!r}, type_tags={self._type_tags!r})"


def static_binding(
    factory: Optional[Callable[[Any], Any]] = None,
    type_tag: Hashable = "static",
    visible: bool = True,
    key: Optional[str] = None,
) -> SourceBinding:
    """
    Bind a single fixed item, such as a header or footer.

    Args:
        factory: ``context -> holder`` building the item's holder
        type_tag: The item's only type tag
        visible: Whether the item starts shown
        key: Name used in logs and as the item's stable id

    Returns:
        A binding whose source is a StaticSource
    """
    return SourceBinding(StaticSource(factory, type_tag, visible, key), (type_tag,))
