"""
ItemForge - itemforge/serialization.py
Persistence codec: item <-> JSON-safe dict.
===========================================
Rolled affixes are stored verbatim and validated back on load. Nothing is
re-rolled, so a loaded item reports exactly the stats it was saved with.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Dict, List

from itemforge.affixes import RolledAffix
from itemforge.items import ITEM_CLASSES, BaseItem, ItemKind

FORMAT_VERSION = 1

AFFIX_LISTS = ("implicit_modifiers", "prefixes", "suffixes")


def _affixes_to_json(affixes: List[RolledAffix]) -> List[Dict[str, Any]]:
    return [a.model_dump(mode="json") for a in affixes]


def item_to_dict(item: BaseItem) -> Dict[str, Any]:
    if item.kind is None:
        raise ValueError(f"{type(item).__name__} has no item kind and cannot be serialised")

    data: Dict[str, Any] = {"format": FORMAT_VERSION, "kind": item.kind.value}
    for f in dataclasses.fields(item):
        value = getattr(item, f.name)
        if f.name in AFFIX_LISTS:
            data[f.name] = _affixes_to_json(value)
        elif f.name == "tags":
            data[f.name] = sorted(value)
        elif isinstance(value, Enum):
            data[f.name] = value.value
        else:
            data[f.name] = value
    return data


def item_from_dict(data: Dict[str, Any]) -> BaseItem:
    """Rebuilds the item variant. Raises KeyError/ValueError or ValidationError on bad input."""
    kind = ItemKind(data["kind"])
    cls = ITEM_CLASSES[kind]

    fields: Dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.name in AFFIX_LISTS:
            value = [RolledAffix.model_validate(a) for a in value]
        elif f.name == "tags":
            value = set(value)
        fields[f.name] = value

    item = cls(**fields)
    _restore_enums(item)
    return item


def _restore_enums(item: BaseItem) -> None:
    """Dataclasses do not coerce; turn stored enum values back into members."""
    for f in dataclasses.fields(item):
        if not isinstance(f.default, Enum):
            continue
        enum_cls = type(f.default)
        value = getattr(item, f.name)
        if not isinstance(value, enum_cls):
            setattr(item, f.name, enum_cls(value))
