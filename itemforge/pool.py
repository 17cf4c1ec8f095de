"""
ItemForge - itemforge/pool.py
Affix Pool and Pool Selector.
=============================
Version:     0.3
Stack:       Python 3.11+ | Pydantic v2 | random.Random
Status:      Pool is an explicit read-only value; no module-level database.

Pool layout
-----------
  AffixPool.trees[item kind] -> SlotTree
  SlotTree.prefixes / .suffixes -> AffixCategory
  AffixCategory.sub_categories -> AffixSubCategory
  AffixSubCategory.affixes -> Affix templates

Iteration order is authored order, which the weighted draw depends on for
reproducibility.
"""

from __future__ import annotations

import random
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from itemforge.affixes import Affix, SlotKind, max_tier_for_level
from itemforge.compatibility import is_compatible
from itemforge.items import BaseItem, ItemKind
from itemforge.logging_config import get_logger
from itemforge.rng import make_rng

logger = get_logger("Pool")


# ============================================================
# SCHEMAS
# ============================================================

class AffixSubCategory(BaseModel):
    model_config = ConfigDict(frozen=True)
    name: str
    affixes: Tuple[Affix, ...] = ()


class AffixCategory(BaseModel):
    model_config = ConfigDict(frozen=True)
    name: str
    sub_categories: Tuple[AffixSubCategory, ...] = ()

    def iter_affixes(self) -> Iterator[Affix]:
        for sub in self.sub_categories:
            yield from sub.affixes


class SlotTree(BaseModel):
    model_config = ConfigDict(frozen=True)
    prefixes: Tuple[AffixCategory, ...] = ()
    suffixes: Tuple[AffixCategory, ...] = ()

    def categories_for(self, slot: SlotKind) -> Tuple[AffixCategory, ...]:
        if slot == SlotKind.PREFIX:
            return self.prefixes
        if slot == SlotKind.SUFFIX:
            return self.suffixes
        return self.prefixes + self.suffixes


class AffixPool(BaseModel):
    model_config = ConfigDict(frozen=True)
    trees: Dict[ItemKind, SlotTree] = Field(default_factory=dict)

    def templates_for(self, kind: ItemKind, slot: SlotKind) -> List[Affix]:
        """Templates for a kind and slot. SlotKind.UNIFIED returns the union of both slot lists."""
        tree = self.trees.get(kind)
        if tree is None:
            return []
        return [a for category in tree.categories_for(slot) for a in category.iter_affixes()]

    def iter_templates(self) -> Iterator[Affix]:
        for tree in self.trees.values():
            for category in tree.prefixes + tree.suffixes:
                yield from category.iter_affixes()

    def total_count(self) -> int:
        return sum(1 for _ in self.iter_templates())

    def counts(self) -> Dict[str, int]:
        """Diagnostic counts keyed "<kind>.<slot>", e.g. "weapon.prefix"."""
        result: Dict[str, int] = {}
        for kind, tree in self.trees.items():
            result[f"{kind.value}.prefix"] = sum(len(list(c.iter_affixes())) for c in tree.prefixes)
            result[f"{kind.value}.suffix"] = sum(len(list(c.iter_affixes())) for c in tree.suffixes)
        return result

    def find(self, name: str) -> Optional[Affix]:
        for template in self.iter_templates():
            if template.name == name:
                return template
        return None


# ============================================================
# SELECTION
# ============================================================

def eligible_affixes(pool: AffixPool, item: BaseItem, slot: SlotKind,
                     item_level: int, max_tier: Optional[int] = None) -> List[Affix]:
    if max_tier is None:
        max_tier = max_tier_for_level(item_level)
    if item.USES_UNIFIED_POOL:
        slot = SlotKind.UNIFIED

    return [
        t for t in pool.templates_for(item.kind, slot)
        if t.tier <= max_tier
        and t.min_level <= item_level
        and t.weight > 0
        and is_compatible(t, item)
    ]


def weighted_choice(templates: Sequence[Affix], rng: random.Random) -> Affix:
    """First template whose cumulative weight exceeds the draw; first element on rounding miss."""
    total = sum(t.weight for t in templates)
    u = rng.random() * total
    cumulative = 0.0
    for template in templates:
        cumulative += template.weight
        if u < cumulative:
            return template
    return templates[0]


def select_random_affix(pool: Optional[AffixPool], item: Optional[BaseItem], slot: SlotKind,
                        item_level: int, max_tier: Optional[int] = None, *,
                        rng: Optional[random.Random] = None,
                        seed: Optional[int] = None) -> Optional[Affix]:
    if pool is None or item is None:
        logger.error("select_random_affix called with pool=%r item=%r", pool, item)
        return None

    candidates = eligible_affixes(pool, item, slot, item_level, max_tier)
    if not candidates:
        return None

    choice = weighted_choice(candidates, make_rng(seed, rng))
    logger.debug("Selected %s (tier %d) for %s %s from %d candidates",
                 choice.name, choice.tier, item.name, slot.value, len(candidates))
    return choice
