"""
ItemForge - itemforge/items.py
Item Aggregate: base item plus the closed set of equipment variants.
====================================================================
Version:     0.3
Stack:       Python 3.11+ | dataclasses
Status:      Rarity is derived from affix counts, never stored.

Variants
--------
  Weapon      handedness, damage range, attack speed, crit chance, damage type
  Armour      armour, evasion, energy shield, block chance
  Jewellery   no base stats
  Effigy      unified affix pool, combined cap of UNIFIED_AFFIX_CAP
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, FrozenSet, Iterator, List, Optional, Set, Tuple

from itemforge.affixes import RolledAffix
from itemforge.config import MAX_PREFIXES, MAX_SUFFIXES, UNIFIED_AFFIX_CAP
from itemforge.modifiers import (
    ALL_ATTRIBUTES_STAT,
    ATTRIBUTE_STATS,
    DamageType,
    ModifierKind,
    RolledModifier,
)


class ItemKind(str, Enum):
    WEAPON = "weapon"
    ARMOUR = "armour"
    JEWELLERY = "jewellery"
    EFFIGY = "effigy"


class ItemRarity(str, Enum):
    NORMAL = "Normal"
    MAGIC = "Magic"
    RARE = "Rare"
    UNIQUE = "Unique"


class WeaponHandedness(str, Enum):
    ONE_HANDED = "OneHanded"
    TWO_HANDED = "TwoHanded"


class EffigyElement(str, Enum):
    FIRE = "Fire"
    COLD = "Cold"
    LIGHTNING = "Lightning"
    PHYSICAL = "Physical"
    CHAOS = "Chaos"


# Legacy required_tags resolve against these, not against the item's own tags.
KIND_TAGS: Dict[ItemKind, FrozenSet[str]] = {
    ItemKind.WEAPON: frozenset({"weapon", "attack", "melee", "ranged", "spell"}),
    ItemKind.ARMOUR: frozenset({"armour", "defence"}),
    ItemKind.JEWELLERY: frozenset({"jewellery", "accessory"}),
    ItemKind.EFFIGY: frozenset({"effigy"}),
}


def calculate_rarity(prefix_count: int, suffix_count: int, is_unique: bool = False) -> ItemRarity:
    if is_unique:
        return ItemRarity.UNIQUE
    total = prefix_count + suffix_count
    if total == 0:
        return ItemRarity.NORMAL
    if total <= 2:
        return ItemRarity.MAGIC
    return ItemRarity.RARE


# ============================================================
# BASE ITEM
# ============================================================

@dataclass
class BaseItem:
    name: str
    item_level: int = 1
    tags: Set[str] = field(default_factory=set)
    implicit_modifiers: List[RolledAffix] = field(default_factory=list)
    prefixes: List[RolledAffix] = field(default_factory=list)
    suffixes: List[RolledAffix] = field(default_factory=list)
    is_unique: bool = False
    base_id: str = ""
    generated_name: str = ""

    KIND: ClassVar[Optional[ItemKind]] = None
    USES_UNIFIED_POOL: ClassVar[bool] = False

    @property
    def kind(self) -> Optional[ItemKind]:
        return self.KIND

    @property
    def rarity(self) -> ItemRarity:
        return calculate_rarity(len(self.prefixes), len(self.suffixes), self.is_unique)

    @property
    def display_name(self) -> str:
        return self.generated_name or self.name

    # --- Capacity -------------------------------------------------------

    def can_add_prefix(self) -> bool:
        return len(self.prefixes) < MAX_PREFIXES

    def can_add_suffix(self) -> bool:
        return len(self.suffixes) < MAX_SUFFIXES

    def add_prefix(self, rolled: RolledAffix) -> bool:
        if not self.can_add_prefix():
            return False
        self.prefixes.append(rolled)
        return True

    def add_suffix(self, rolled: RolledAffix) -> bool:
        if not self.can_add_suffix():
            return False
        self.suffixes.append(rolled)
        return True

    def clear_affixes(self) -> None:
        """Drops random prefixes and suffixes. Implicits stay."""
        self.prefixes.clear()
        self.suffixes.clear()

    def total_affix_count(self) -> int:
        return len(self.implicit_modifiers) + len(self.prefixes) + len(self.suffixes)

    def random_affix_count(self) -> int:
        return len(self.prefixes) + len(self.suffixes)

    # --- Stat queries ---------------------------------------------------

    def iter_affixes(self) -> Iterator[RolledAffix]:
        yield from self.implicit_modifiers
        yield from self.prefixes
        yield from self.suffixes

    def iter_modifiers(self, stat_name: str, kind: Optional[ModifierKind] = None) -> Iterator[RolledModifier]:
        """Rolled modifiers whose stat_name matches exactly. Unrolled ones are skipped."""
        for affix in self.iter_affixes():
            for mod in affix.modifiers:
                if mod.stat_name != stat_name or not mod.is_rolled:
                    continue
                if kind is not None and mod.kind != kind:
                    continue
                yield mod

    def sum_stat(self, stat_name: str, kind: Optional[ModifierKind] = None) -> float:
        return sum((m.contribution() for m in self.iter_modifiers(stat_name, kind)), 0.0)

    def sum_dual_stat(self, stat_name: str, kind: Optional[ModifierKind] = None) -> Tuple[float, float]:
        lo, hi = 0.0, 0.0
        for mod in self.iter_modifiers(stat_name, kind):
            a, b = mod.dual_contribution()
            lo += a
            hi += b
        return (lo, hi)

    def sum_attribute(self, attribute: str, kind: Optional[ModifierKind] = None) -> float:
        """Own attribute total plus any merged AllAttributes value."""
        total = self.sum_stat(attribute, kind)
        if attribute in ATTRIBUTE_STATS:
            total += self.sum_stat(ALL_ATTRIBUTES_STAT, kind)
        return total

    def base_stats(self) -> Dict[str, float]:
        """Base stat values keyed the way "<x>_base" tag sentinels refer to them."""
        return {}

    def base_stat(self, name: str) -> float:
        return self.base_stats().get(name, 0.0)


# ============================================================
# VARIANTS
# ============================================================

@dataclass
class Weapon(BaseItem):
    handedness: WeaponHandedness = WeaponHandedness.ONE_HANDED
    min_damage: float = 0.0
    max_damage: float = 0.0
    attack_speed: float = 1.0
    critical_strike_chance: float = 5.0
    damage_type: DamageType = DamageType.PHYSICAL

    KIND: ClassVar[Optional[ItemKind]] = ItemKind.WEAPON

    @property
    def is_one_handed(self) -> bool:
        return self.handedness == WeaponHandedness.ONE_HANDED

    @property
    def is_two_handed(self) -> bool:
        return self.handedness == WeaponHandedness.TWO_HANDED

    def total_damage_range(self) -> Tuple[float, float]:
        """
        (base + added flat damage of every type) scaled by the summed
        increased damage of every type, rounded up.
        """
        added_lo, added_hi = 0.0, 0.0
        increased = 0.0
        for damage_type in DamageType:
            stat = f"{damage_type.value}Damage"
            lo, hi = self.sum_dual_stat(stat, ModifierKind.FLAT)
            added_lo += lo
            added_hi += hi
            increased += self.sum_stat(stat, ModifierKind.INCREASED)
        multiplier = 1.0 + increased / 100.0
        return (
            float(math.ceil((self.min_damage + added_lo) * multiplier)),
            float(math.ceil((self.max_damage + added_hi) * multiplier)),
        )

    def total_attack_speed(self) -> float:
        return self.attack_speed * (1.0 + self.sum_stat("AttackSpeed") / 100.0)

    def total_critical_strike_chance(self) -> float:
        return self.critical_strike_chance + self.sum_stat("CriticalStrikeChance")


@dataclass
class Armour(BaseItem):
    armour: float = 0.0
    evasion: float = 0.0
    energy_shield: float = 0.0
    block_chance: float = 0.0

    KIND: ClassVar[Optional[ItemKind]] = ItemKind.ARMOUR

    def base_stats(self) -> Dict[str, float]:
        return {
            "armour": self.armour,
            "evasion": self.evasion,
            "energyshield": self.energy_shield,
        }

    def _scaled(self, base: float, stat_name: str) -> float:
        flat = self.sum_stat(stat_name, ModifierKind.FLAT)
        increased = self.sum_stat(stat_name, ModifierKind.INCREASED)
        return float(math.ceil((base + flat) * (1.0 + increased / 100.0)))

    def total_armour(self) -> float:
        return self._scaled(self.armour, "Armour")

    def total_evasion(self) -> float:
        return self._scaled(self.evasion, "Evasion")

    def total_energy_shield(self) -> float:
        return self._scaled(self.energy_shield, "EnergyShield")

    def total_block_chance(self) -> float:
        return self.block_chance + self.sum_stat("BlockChance")


@dataclass
class Jewellery(BaseItem):
    KIND: ClassVar[Optional[ItemKind]] = ItemKind.JEWELLERY


@dataclass
class Effigy(BaseItem):
    element: EffigyElement = EffigyElement.FIRE

    KIND: ClassVar[Optional[ItemKind]] = ItemKind.EFFIGY
    USES_UNIFIED_POOL: ClassVar[bool] = True

    def can_add_prefix(self) -> bool:
        return self.random_affix_count() < UNIFIED_AFFIX_CAP

    def can_add_suffix(self) -> bool:
        return self.random_affix_count() < UNIFIED_AFFIX_CAP


ITEM_CLASSES: Dict[ItemKind, type] = {
    ItemKind.WEAPON: Weapon,
    ItemKind.ARMOUR: Armour,
    ItemKind.JEWELLERY: Jewellery,
    ItemKind.EFFIGY: Effigy,
}
