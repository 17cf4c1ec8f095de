"""
ItemForge - itemforge/ecs/components.py
ECS Component Definitions for python-tcod-ecs.
==============================================
Version:     0.2
Stack:       Python 3.11+ | python-tcod-ecs
Status:      Item-side components only. The BaseItem aggregate is the source
             of truth; ItemStats is a summary recomputed after every reroll.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from itemforge.items import BaseItem

@dataclass
class ItemIdentity:
    entity_id: str
    name: str
    description: str
    template_origin: Optional[str] = None
    value: int = 10

@dataclass
class Equippable:
    slot_type: str  # "hand", "torso", "finger", "effigy", etc.

@dataclass
class LootItem:
    item: BaseItem
    seed: int = 0

@dataclass
class ItemStats:
    stat_totals: Dict[str, float] = field(default_factory=dict)
    affix_lines: List[str] = field(default_factory=list)
    rarity: str = "Normal"
