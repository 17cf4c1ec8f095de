"""
ItemForge - itemforge/compatibility.py
Compatibility Resolver: may this template ever roll on this item?
=================================================================
Version:     0.3
Stack:       Python 3.11+
Status:      Pure predicate. No randomness, no mutation.

Three gates, all must pass:
  1. Scope    - every modifier: Local needs a backing base stat,
                Global weapon-only families are refused on weapons.
  2. Tags     - compatible_tags (any-of, with "<x>_base" sentinels),
                else legacy required_tags (all-of against KIND_TAGS).
  3. Hands    - OneHand / TwoHand templates need a matching weapon.
"""

from __future__ import annotations

from typing import Callable, Dict, FrozenSet, Optional

from itemforge.affixes import Affix, Handedness
from itemforge.items import KIND_TAGS, Armour, BaseItem, Weapon
from itemforge.logging_config import get_logger
from itemforge.modifiers import AffixModifier, ModifierScope, StatFamily

logger = get_logger("Compatibility")

BASE_SENTINEL_SUFFIX = "_base"


# ============================================================
# LOCAL REQUIREMENTS (one entry per StatFamily)
# ============================================================

def _is_weapon(item: BaseItem) -> bool:
    return isinstance(item, Weapon)


def _weapon_with_crit(item: BaseItem) -> bool:
    return isinstance(item, Weapon) and item.critical_strike_chance > 0


def _spell_weapon(item: BaseItem) -> bool:
    return isinstance(item, Weapon) and "spell" in item.tags


def _armour_with(attr: str) -> Callable[[BaseItem], bool]:
    def check(item: BaseItem) -> bool:
        return isinstance(item, Armour) and getattr(item, attr) > 0
    return check


def _shield(item: BaseItem) -> bool:
    return isinstance(item, Armour) and "shield" in item.tags


def _unrestricted(item: BaseItem) -> bool:
    return True


LOCAL_REQUIREMENTS: Dict[StatFamily, Callable[[BaseItem], bool]] = {
    StatFamily.PHYSICAL_DAMAGE: _is_weapon,
    StatFamily.FIRE_DAMAGE: _is_weapon,
    StatFamily.COLD_DAMAGE: _is_weapon,
    StatFamily.LIGHTNING_DAMAGE: _is_weapon,
    StatFamily.CHAOS_DAMAGE: _is_weapon,
    StatFamily.CRITICAL_CHANCE: _weapon_with_crit,
    StatFamily.ATTACK_SPEED: _is_weapon,
    StatFamily.CAST_SPEED: _spell_weapon,
    StatFamily.ACCURACY: _is_weapon,
    StatFamily.ARMOUR: _armour_with("armour"),
    StatFamily.EVASION: _armour_with("evasion"),
    StatFamily.ENERGY_SHIELD: _armour_with("energy_shield"),
    StatFamily.BLOCK_CHANCE: _shield,
    StatFamily.ATTRIBUTE: _unrestricted,
    StatFamily.RESISTANCE: _unrestricted,
    StatFamily.LIFE: _unrestricted,
    StatFamily.MANA: _unrestricted,
    StatFamily.OTHER: _unrestricted,
}

# Families that must be Local when they appear on a weapon.
WEAPON_LOCAL_ONLY: FrozenSet[StatFamily] = frozenset({
    StatFamily.PHYSICAL_DAMAGE,
    StatFamily.FIRE_DAMAGE,
    StatFamily.COLD_DAMAGE,
    StatFamily.LIGHTNING_DAMAGE,
    StatFamily.CHAOS_DAMAGE,
    StatFamily.CRITICAL_CHANCE,
    StatFamily.ATTACK_SPEED,
    StatFamily.CAST_SPEED,
})


# ============================================================
# GATES
# ============================================================

def is_modifier_compatible(modifier: AffixModifier, item: BaseItem) -> bool:
    family = modifier.resolved_family
    if modifier.scope == ModifierScope.LOCAL:
        return LOCAL_REQUIREMENTS[family](item)
    if isinstance(item, Weapon) and family in WEAPON_LOCAL_ONLY:
        return False
    return True


def has_base_stat(item: BaseItem, sentinel: str) -> bool:
    """"armour_base" -> item.base_stat("armour") > 0."""
    stat = sentinel[: -len(BASE_SENTINEL_SUFFIX)]
    return item.base_stat(stat) > 0


def tags_match(template: Affix, item: BaseItem) -> bool:
    if template.compatible_tags:
        for tag in template.compatible_tags:
            if tag.endswith(BASE_SENTINEL_SUFFIX):
                if has_base_stat(item, tag):
                    return True
            elif tag in item.tags:
                return True
        return False

    if template.required_tags:
        kind_tags = KIND_TAGS.get(item.kind, frozenset())
        return template.required_tags <= kind_tags

    return True


def handedness_matches(template: Affix, item: BaseItem) -> bool:
    if template.handedness == Handedness.BOTH:
        return True
    if not isinstance(item, Weapon):
        return False
    if template.handedness == Handedness.ONE_HAND:
        return item.is_one_handed
    return item.is_two_handed


def is_compatible(template: Optional[Affix], item: Optional[BaseItem]) -> bool:
    if template is None or item is None:
        logger.error("is_compatible called with template=%r item=%r", template, item)
        return False

    for modifier in template.modifiers:
        if not is_modifier_compatible(modifier, item):
            return False

    if not tags_match(template, item):
        return False

    return handedness_matches(template, item)
