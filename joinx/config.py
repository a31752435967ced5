"""
JoinX Configuration
===================

Options controlling how a CompositeList follows its sources.
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass(frozen=True)
class JoinConfig:
    """Behaviour switches for a CompositeList.

    auto_update: subscribe to every source at construction and rebuild on
        each change; when off, the host calls ``notify_changed()`` itself.
    stable_ids: whether ``id_at`` reports the sources' ids or ``NO_ID``.
    initial_rebuild: build the position table during construction; when off
        the composite starts uninitialized and empty.
    """

    auto_update: bool = True
    stable_ids: bool = False
    initial_rebuild: bool = True

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "JoinConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ValueError(f"unknown JoinConfig keys: {unknown}")
        for name, value in mapping.items():
            if not isinstance(value, bool):
                raise TypeError(
                    f"JoinConfig key {name!r} must be a bool, got {type(value).__name__} {value!r}"
                )
        return cls(**mapping)
