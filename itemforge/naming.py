"""
ItemForge - itemforge/naming.py
Display names for generated items.
==================================
  Normal / Unique   base name
  Magic             "[first prefix] Base [of first suffix]"
  Rare              seeded "<rare prefix> <kind suffix>", else "Rare <base>"
"""

from __future__ import annotations

from typing import Optional

from itemforge.data_loader import NameDataDef
from itemforge.items import BaseItem, ItemRarity
from itemforge.logging_config import get_logger
from itemforge.rng import make_rng

logger = get_logger("Naming")


def magic_item_name(item: BaseItem) -> str:
    parts = []
    if item.prefixes:
        parts.append(item.prefixes[0].name)
    parts.append(item.name)
    if item.suffixes:
        suffix = item.suffixes[0].name
        parts.append(suffix if suffix.lower().startswith("of ") else f"of {suffix}")
    return " ".join(parts)


def rare_item_name(item: BaseItem, name_data: Optional[NameDataDef], seed: Optional[int] = None) -> str:
    fallback = f"Rare {item.name}"
    if name_data is None or not name_data.rare_prefixes:
        logger.warning("Rare name prefix pool missing; using %r", fallback)
        return fallback

    suffixes = name_data.suffix_pool_for(item.kind)
    if not suffixes:
        logger.warning("No rare name suffix pool for %s; using %r", item.kind, fallback)
        return fallback

    rng = make_rng(seed)
    prefix = name_data.rare_prefixes[rng.randrange(len(name_data.rare_prefixes))]
    suffix = suffixes[rng.randrange(len(suffixes))]
    return f"{prefix} {suffix}"


def generate_item_name(item: Optional[BaseItem], name_data: Optional[NameDataDef] = None,
                       seed: Optional[int] = None) -> str:
    if item is None:
        logger.error("generate_item_name called with no item")
        return "Unknown Item"

    rarity = item.rarity
    if rarity == ItemRarity.MAGIC:
        return magic_item_name(item)
    if rarity == ItemRarity.RARE:
        return rare_item_name(item, name_data, seed)
    return item.name
