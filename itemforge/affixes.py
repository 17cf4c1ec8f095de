"""
ItemForge - itemforge/affixes.py
Affix Templates, Rolled Instances and the Tier Ladder.
======================================================
Version:     0.3
Stack:       Python 3.11+ | Pydantic v2
Status:      Templates are frozen at content load; rolled instances are
             produced by itemforge/roller.py and owned by exactly one item.

Tier 1 is the best tier. An item can only receive templates whose tier is at
or below the best tier its level unlocks (see max_tier_for_level).
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from itemforge.config import BEST_TIER, MAX_TIER, TIER_LEVEL_LADDER
from itemforge.modifiers import AffixModifier, RolledModifier


class SlotKind(str, Enum):
    PREFIX = "Prefix"
    SUFFIX = "Suffix"
    UNIFIED = "Unified"


class Handedness(str, Enum):
    BOTH = "Both"
    ONE_HAND = "OneHand"
    TWO_HAND = "TwoHand"


# ============================================================
# TEMPLATE
# ============================================================

class Affix(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    slot_kind: SlotKind = SlotKind.PREFIX
    tier: int = Field(default=MAX_TIER, ge=BEST_TIER, le=MAX_TIER)
    weight: float = Field(default=100.0, ge=0)  # 0 = implicit only, never rolled randomly
    min_level: int = Field(default=1, ge=0)
    handedness: Handedness = Handedness.BOTH
    compatible_tags: FrozenSet[str] = frozenset()
    required_tags: FrozenSet[str] = frozenset()
    modifiers: Tuple[AffixModifier, ...] = Field(min_length=1)

    @property
    def is_randomly_droppable(self) -> bool:
        return self.weight > 0


# ============================================================
# ROLLED INSTANCE
# ============================================================

class RolledAffix(Affix):
    """Template metadata plus concrete modifier values. Never mutated after rolling."""
    modifiers: Tuple[RolledModifier, ...] = Field(min_length=1)
    seed: int = 0

    def render_lines(self) -> List[str]:
        return [m.render() for m in self.modifiers]


# ============================================================
# TIER LADDER
# ============================================================

def max_tier_for_level(item_level: int) -> int:
    """Best (lowest-numbered) tier an item of this level may roll."""
    for min_level, tier in TIER_LEVEL_LADDER:
        if item_level >= min_level:
            return tier
    return MAX_TIER
