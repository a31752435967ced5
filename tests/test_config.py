"""Tests for JoinConfig."""

import dataclasses

import pytest

from joinx import JoinConfig


def test_defaults():
    """Auto update and initial rebuild on, stable ids off."""
    config = JoinConfig()

    assert config.auto_update is True
    assert config.stable_ids is False
    assert config.initial_rebuild is True


def test_is_frozen():
    """Configs are immutable values."""
    with pytest.raises(dataclasses.FrozenInstanceError):
        JoinConfig().stable_ids = True


def test_from_mapping():
    """Plain dicts convert field by field."""
    config = JoinConfig.from_mapping({"stable_ids": True, "auto_update": False})

    assert config == JoinConfig(stable_ids=True, auto_update=False)


def test_from_mapping_rejects_unknown_keys():
    """Unknown keys are reported by name."""
    with pytest.raises(ValueError, match="autoupdate"):
        JoinConfig.from_mapping({"autoupdate": True})


def test_from_mapping_rejects_non_bool_values():
    """Strings such as "false" are refused instead of read as truthy."""
    with pytest.raises(TypeError, match="auto_update"):
        JoinConfig.from_mapping({"auto_update": "false"})


def test_from_mapping_rejects_integer_flags():
    """Only real booleans are accepted, not 0 or 1."""
    with pytest.raises(TypeError, match="stable_ids"):
        JoinConfig.from_mapping({"stable_ids": 1})
