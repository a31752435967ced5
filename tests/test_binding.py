"""Tests for SourceBinding: declared type space and delegation."""

import pytest

from joinx import (
    IndexOutOfRange,
    ListSource,
    SourceBinding,
    StaticSource,
    UnknownType,
    static_binding,
)


def make_binding(items=("a", "B"), tags=("lower", "upper")):
    source = ListSource(
        list(items),
        type_of=lambda s: "upper" if s[0].isupper() else "lower",
        id_of=str.lower,
    )
    return SourceBinding(source, tags)


class TestDeclaredTypes:
    """Type tag bookkeeping."""

    def test_declared_type_count(self):
        """Count equals the number of declared tags."""
        assert make_binding().declared_type_count() == 2

    def test_declared_tag_lookup_both_ways(self):
        """Tag at index and index of tag are inverses."""
        binding = make_binding()

        for i in range(binding.declared_type_count()):
            assert binding.local_type_index_of(binding.declared_type_tag_at(i)) == i

    def test_declared_tag_at_out_of_range(self):
        """Indices outside [0, count) fail."""
        binding = make_binding()

        with pytest.raises(IndexOutOfRange):
            binding.declared_type_tag_at(2)
        with pytest.raises(IndexOutOfRange):
            binding.declared_type_tag_at(-1)

    def test_unknown_tag_raises(self):
        """A tag never declared raises UnknownType carrying the tag."""
        binding = make_binding()

        with pytest.raises(UnknownType) as info:
            binding.local_type_index_of("title")

        assert info.value.tag == "title"
        assert isinstance(info.value, LookupError)

    def test_unhashable_tag_is_unknown(self):
        """Unhashable values are reported as UnknownType, not TypeError."""
        with pytest.raises(UnknownType):
            make_binding().local_type_index_of(["lower"])

    def test_duplicate_tags_rejected(self):
        """Declaring a tag twice is refused at construction."""
        with pytest.raises(ValueError, match="more than once"):
            SourceBinding(ListSource(), ("a", "b", "a"))

    def test_tags_default_to_source_declaration(self):
        """Without explicit tags the source's own type_tags are used."""
        binding = SourceBinding(StaticSource(type_tag="header"))

        assert binding.type_tags == ("header",)

    def test_missing_tags_rejected(self):
        """A source declaring nothing needs explicit tags."""

        class Bare:
            pass

        with pytest.raises(TypeError, match="type_tags"):
            SourceBinding(Bare())

    def test_bare_string_tags_rejected(self):
        """A string is one tag, never a sequence of one-letter tags."""
        with pytest.raises(TypeError, match="sequence of tags"):
            SourceBinding(ListSource(), "ab")
        with pytest.raises(TypeError, match="sequence of tags"):
            SourceBinding(ListSource(), b"ab")

    def test_single_string_tag_in_tuple(self):
        """Wrapping the string declares exactly one tag."""
        binding = SourceBinding(ListSource(), ("ab",))

        assert binding.declared_type_count() == 1
        assert binding.local_type_index_of("ab") == 0

    def test_declared_tags_are_frozen(self):
        """Later edits to the caller's list don't reach the binding."""
        tags = ["lower", "upper"]
        binding = make_binding(tags=tags)

        tags.append("title")

        assert binding.declared_type_count() == 2
        with pytest.raises(UnknownType):
            binding.local_type_index_of("title")

    def test_empty_declaration_is_allowed(self):
        """A binding may declare no tags at all."""
        binding = SourceBinding(ListSource(), ())

        assert binding.declared_type_count() == 0


class TestDelegation:
    """Item accessors forward to the source."""

    def test_item_accessors(self):
        """Count, tag and id come straight from the source."""
        binding = make_binding()

        assert binding.current_item_count() == 2
        assert binding.type_tag_at(1) == "upper"
        assert binding.id_at(1) == "b"

    def test_count_follows_source(self):
        """The count is read live, not cached."""
        binding = make_binding()

        binding.source.append("c")

        assert binding.current_item_count() == 3

    def test_render_creates_and_binds(self):
        """render() builds a holder for the local tag and binds the position."""
        binding = make_binding()

        holder = binding.render("ctx", 1, "upper")

        assert holder.type_tag == "upper"
        assert holder.item == "B"
        assert holder.position == 1


def test_static_binding_wraps_one_item():
    """static_binding() yields a one-item binding with a single tag."""
    binding = static_binding(lambda context: "banner", type_tag="banner")

    assert binding.type_tags == ("banner",)
    assert binding.current_item_count() == 1
    assert binding.create_holder(None, "banner") == "banner"


def test_static_binding_can_start_hidden():
    """A hidden static binding contributes no items but keeps its tag."""
    binding = static_binding(visible=False)

    assert binding.current_item_count() == 0
    assert binding.declared_type_count() == 1
