"""
ItemForge - itemforge/modifiers.py
Modifier Model: a single numeric effect carried by an affix.
============================================================
Version:     0.3
Stack:       Python 3.11+ | Pydantic v2
Status:      Frozen schemas. Rolling lives in itemforge/roller.py.

Architecture notes
------------------
- AffixModifier is the authored shape: one value range, or two ranges for
  "Adds (a-b) to (c-d)" patterns. Never both, never neither.
- RolledModifier extends it with concrete values. It is produced only by the
  roller and is never mutated afterwards.
- Stat names map to a closed StatFamily enum through STAT_FAMILY_BY_NAME.
  Unknown names fall back to StatFamily.OTHER.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

ValueRange = Tuple[float, float]

ALL_ATTRIBUTES_STAT: str = "AllAttributes"
ATTRIBUTE_STATS: Tuple[str, ...] = ("Strength", "Dexterity", "Intelligence")


# ============================================================
# ENUMS
# ============================================================

class ModifierKind(str, Enum):
    FLAT = "Flat"
    INCREASED = "Increased"
    MORE = "More"
    REDUCED = "Reduced"
    LESS = "Less"


class ModifierScope(str, Enum):
    LOCAL = "Local"    # alters the item's own base stat
    GLOBAL = "Global"  # alters the character directly


class DamageType(str, Enum):
    PHYSICAL = "Physical"
    FIRE = "Fire"
    COLD = "Cold"
    LIGHTNING = "Lightning"
    CHAOS = "Chaos"


class StatFamily(str, Enum):
    PHYSICAL_DAMAGE = "physical_damage"
    FIRE_DAMAGE = "fire_damage"
    COLD_DAMAGE = "cold_damage"
    LIGHTNING_DAMAGE = "lightning_damage"
    CHAOS_DAMAGE = "chaos_damage"
    CRITICAL_CHANCE = "critical_chance"
    ATTACK_SPEED = "attack_speed"
    CAST_SPEED = "cast_speed"
    ACCURACY = "accuracy"
    ARMOUR = "armour"
    EVASION = "evasion"
    ENERGY_SHIELD = "energy_shield"
    BLOCK_CHANCE = "block_chance"
    ATTRIBUTE = "attribute"
    RESISTANCE = "resistance"
    LIFE = "life"
    MANA = "mana"
    OTHER = "other"


# ============================================================
# STAT NAME -> FAMILY
# Keys are lower-cased stat names. Exact lookup only.
# ============================================================

def _names(family: StatFamily, *names: str) -> Dict[str, StatFamily]:
    return {n.lower(): family for n in names}


STAT_FAMILY_BY_NAME: Dict[str, StatFamily] = {
    **_names(StatFamily.PHYSICAL_DAMAGE, "PhysicalDamage", "AddedPhysicalDamage", "IncreasedPhysicalDamage"),
    **_names(StatFamily.FIRE_DAMAGE, "FireDamage", "AddedFireDamage", "IncreasedFireDamage"),
    **_names(StatFamily.COLD_DAMAGE, "ColdDamage", "AddedColdDamage", "IncreasedColdDamage"),
    **_names(StatFamily.LIGHTNING_DAMAGE, "LightningDamage", "AddedLightningDamage", "IncreasedLightningDamage"),
    **_names(StatFamily.CHAOS_DAMAGE, "ChaosDamage", "AddedChaosDamage", "IncreasedChaosDamage"),
    **_names(StatFamily.CRITICAL_CHANCE, "CriticalChance", "CriticalStrikeChance"),
    **_names(StatFamily.ATTACK_SPEED, "AttackSpeed"),
    **_names(StatFamily.CAST_SPEED, "CastSpeed"),
    **_names(StatFamily.ACCURACY, "Accuracy", "AccuracyRating"),
    **_names(StatFamily.ARMOUR, "Armour", "ArmourRating", "IncreasedArmour"),
    **_names(StatFamily.EVASION, "Evasion", "EvasionRating", "IncreasedEvasion"),
    **_names(StatFamily.ENERGY_SHIELD, "EnergyShield", "IncreasedEnergyShield"),
    **_names(StatFamily.BLOCK_CHANCE, "BlockChance"),
    **_names(StatFamily.ATTRIBUTE, ALL_ATTRIBUTES_STAT, *ATTRIBUTE_STATS),
    **_names(StatFamily.RESISTANCE, "FireResistance", "ColdResistance", "LightningResistance",
             "ChaosResistance", "AllResistances"),
    **_names(StatFamily.LIFE, "Life", "MaxLife", "MaximumLife", "LifeRegeneration"),
    **_names(StatFamily.MANA, "Mana", "MaxMana", "MaximumMana", "ManaRegeneration"),
}


def resolve_stat_family(stat_name: str) -> StatFamily:
    return STAT_FAMILY_BY_NAME.get(stat_name.lower(), StatFamily.OTHER)


# ============================================================
# SCHEMAS
# ============================================================

class AffixModifier(BaseModel):
    """Authored modifier. Exactly one of value_range or (first_range, second_range)."""
    model_config = ConfigDict(frozen=True)

    stat_name: str
    kind: ModifierKind = ModifierKind.FLAT
    scope: ModifierScope = ModifierScope.GLOBAL
    damage_type: Optional[DamageType] = None
    family: Optional[StatFamily] = None
    value_range: Optional[ValueRange] = None
    first_range: Optional[ValueRange] = None
    second_range: Optional[ValueRange] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def _check_range_shape(self):
        has_single = self.value_range is not None
        has_first = self.first_range is not None
        has_second = self.second_range is not None
        if has_first != has_second:
            raise ValueError(f"{self.stat_name}: dual-range modifiers need both first_range and second_range")
        if has_single and has_first:
            raise ValueError(f"{self.stat_name}: modifier cannot be both single- and dual-range")
        if not has_single and not has_first:
            raise ValueError(f"{self.stat_name}: modifier declares no value range")
        for rng in (self.value_range, self.first_range, self.second_range):
            if rng is not None and rng[0] > rng[1]:
                raise ValueError(f"{self.stat_name}: range {rng} has min > max")
        return self

    @property
    def is_dual_range(self) -> bool:
        return self.first_range is not None

    @property
    def resolved_family(self) -> StatFamily:
        return self.family if self.family is not None else resolve_stat_family(self.stat_name)

    @property
    def overall_range(self) -> ValueRange:
        """Single range, or (first min, second max) for dual-range modifiers."""
        if self.is_dual_range:
            return (self.first_range[0], self.second_range[1])
        return self.value_range


class RolledModifier(AffixModifier):
    """A modifier whose ranges have been resolved. Only the roller builds these."""
    rolled_value: float = 0.0
    rolled_first_value: Optional[float] = None
    rolled_second_value: Optional[float] = None
    is_rolled: bool = False

    def contribution(self) -> float:
        """Scalar used by stat sums: the first value for dual-range, else rolled_value."""
        if not self.is_rolled:
            return 0.0
        if self.is_dual_range:
            return self.rolled_first_value
        return self.rolled_value

    def dual_contribution(self) -> Tuple[float, float]:
        if not self.is_rolled:
            return (0.0, 0.0)
        if self.is_dual_range:
            return (self.rolled_first_value, self.rolled_second_value)
        return (self.rolled_value, self.rolled_value)

    def render(self) -> str:
        """Tooltip line with rolled values substituted into the description template."""
        lo, hi = self.overall_range
        values = {
            "value": _fmt(self.rolled_value),
            "first": _fmt(self.rolled_first_value if self.rolled_first_value is not None else self.rolled_value),
            "second": _fmt(self.rolled_second_value if self.rolled_second_value is not None else self.rolled_value),
            "min": _fmt(lo),
            "max": _fmt(hi),
        }
        if self.description:
            return self.description.format(**values)
        if self.is_dual_range:
            return f"Adds {values['first']} to {values['second']} {self.stat_name}"
        if self.kind == ModifierKind.FLAT:
            return f"+{values['value']} to {self.stat_name}"
        return f"{values['value']}% {self.kind.value.lower()} {self.stat_name}"


def _fmt(value: Optional[float]) -> str:
    if value is None:
        return "0"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
