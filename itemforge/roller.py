"""
ItemForge - itemforge/roller.py
Value Roller: turns an Affix template into a RolledAffix.
=========================================================
Version:     0.3
Stack:       Python 3.11+ | Pydantic v2 | random.Random
Status:      Pure function of (template, seed). Templates are never mutated.

Rules
-----
  Single range   min == max > 0 is fixed; both bounds <= 0 is invalid;
                 otherwise a uniform integer in [ceil(min), floor(max)].
  Dual range     roll first, roll second, then a final value between them.
  All attributes An AllAttributes modifier, or Str/Dex/Int sharing one range
                 (the trio, or any attributes under an "all attributes"
                 description), roll once as a single AllAttributes modifier.
                 Attribute modifiers outside that set roll on their own.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional, Sequence, Tuple

from itemforge.affixes import Affix, RolledAffix
from itemforge.logging_config import get_logger
from itemforge.modifiers import (
    ALL_ATTRIBUTES_STAT,
    ATTRIBUTE_STATS,
    AffixModifier,
    RolledModifier,
    StatFamily,
)
from itemforge.rng import derive_seed

logger = get_logger("Roller")

MERGED_ATTRIBUTE_DESCRIPTION = "+{value} to all Attributes"


# ============================================================
# PRIMITIVE DRAWS
# ============================================================

def _draw_between(lo: float, hi: float, rng: random.Random) -> float:
    a, b = math.ceil(lo), math.floor(hi)
    if a > b:
        # no integer inside a fractional band
        return float(lo)
    return float(rng.randint(a, b))


def roll_range(value_range: Tuple[float, float], rng: random.Random) -> Optional[float]:
    """One value from a range, or None when the range is invalid."""
    lo, hi = value_range
    if lo == hi and lo > 0:
        return float(lo)
    if lo <= 0 and hi <= 0:
        return None
    return _draw_between(lo, hi, rng)


# ============================================================
# MODIFIERS
# ============================================================

def _base_fields(modifier: AffixModifier) -> dict:
    return modifier.model_dump(
        include=set(AffixModifier.model_fields.keys()),
    )


def _unrolled(modifier: AffixModifier, **overrides) -> RolledModifier:
    fields = _base_fields(modifier)
    fields.update(overrides)
    return RolledModifier(**fields, rolled_value=0.0, rolled_first_value=None,
                          rolled_second_value=None, is_rolled=False)


def roll_modifier(modifier: AffixModifier, rng: random.Random, **overrides) -> RolledModifier:
    """
    Rolls one modifier from the shared generator. overrides replace authored
    fields on the result (the attribute merge uses it to rename the stat).
    """
    fields = _base_fields(modifier)
    fields.update(overrides)

    if not modifier.is_dual_range:
        value = roll_range(modifier.value_range, rng)
        if value is None:
            logger.warning("Invalid range %s on %s; rolled to 0", modifier.value_range, modifier.stat_name)
            return _unrolled(modifier, **overrides)
        return RolledModifier(**fields, rolled_value=value, is_rolled=True)

    first = roll_range(modifier.first_range, rng)
    second = roll_range(modifier.second_range, rng)
    if first is None or second is None:
        logger.warning("Invalid dual range %s / %s on %s; rolled to 0",
                       modifier.first_range, modifier.second_range, modifier.stat_name)
        return _unrolled(modifier, **overrides)

    lo, hi = min(first, second), max(first, second)
    final = lo if lo == hi else _draw_between(lo, hi, rng)
    return RolledModifier(**fields, rolled_value=final, rolled_first_value=first,
                          rolled_second_value=second, is_rolled=True)


# ============================================================
# ATTRIBUTE MERGE
# ============================================================

def _range_signature(modifier: AffixModifier) -> tuple:
    return (modifier.value_range, modifier.first_range, modifier.second_range)


def _first_attribute_indices(mods: Sequence[AffixModifier]) -> Tuple[int, ...]:
    first = {}
    for index, m in enumerate(mods):
        if m.stat_name in ATTRIBUTE_STATS:
            first.setdefault(m.stat_name, index)
    return tuple(sorted(first.values()))


def _share_one_range(mods: Sequence[AffixModifier], indices: Tuple[int, ...]) -> bool:
    return len({_range_signature(mods[i]) for i in indices}) == 1


def attribute_merge_groups(template: Affix) -> Tuple[Tuple[int, ...], ...]:
    """
    Positions of the modifier sets that each collapse into one AllAttributes
    roll, in authored order. Empty when the template does not merge.

    Only a shared set collapses: an AllAttributes modifier on its own, or
    Str/Dex/Int when they carry one range. Every other modifier, attribute
    or not, keeps its own roll.
    """
    mods = template.modifiers
    groups = [(index,) for index, m in enumerate(mods) if m.stat_name == ALL_ATTRIBUTES_STAT][:1]

    attributes = _first_attribute_indices(mods)
    if attributes and _share_one_range(mods, attributes):
        if len(attributes) == len(ATTRIBUTE_STATS):
            groups.append(attributes)
        elif not groups and "all attributes" in template.description.lower():
            groups.append(attributes)

    return tuple(sorted(groups))


def is_all_attributes_template(template: Affix) -> bool:
    return bool(attribute_merge_groups(template))


def _merged_overrides(source: AffixModifier) -> dict:
    overrides = {"stat_name": ALL_ATTRIBUTES_STAT, "family": StatFamily.ATTRIBUTE}
    if source.stat_name != ALL_ATTRIBUTES_STAT:
        overrides["description"] = MERGED_ATTRIBUTE_DESCRIPTION
    return overrides


# ============================================================
# ENTRY POINT
# ============================================================

def roll_affix(template: Optional[Affix], seed: int) -> Optional[RolledAffix]:
    if template is None:
        logger.error("roll_affix called with no template")
        return None

    rng = random.Random(derive_seed(seed, template.name))
    groups = attribute_merge_groups(template)
    leaders = {group[0] for group in groups}
    merged = {index for group in groups for index in group}

    rolled: List[RolledModifier] = []
    for index, modifier in enumerate(template.modifiers):
        if index in merged:
            # the first position of a set carries the single roll for it
            if index in leaders:
                rolled.append(roll_modifier(modifier, rng, **_merged_overrides(modifier)))
            continue
        rolled.append(roll_modifier(modifier, rng))

    fields = template.model_dump(include=set(Affix.model_fields.keys()) - {"modifiers"})
    return RolledAffix(**fields, modifiers=tuple(rolled), seed=seed)
