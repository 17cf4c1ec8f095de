"""
ItemForge - itemforge/generation.py
Generation Policy: rarity, affix counts, slot filling.
======================================================
Version:     0.3
Stack:       Python 3.11+ | random.Random
Status:      Never raises on the generation path. Failures are logged and
             recovered at the smallest scope (slot, then item).

Flow per item
-------------
  1. guard (None input, unique item, forced Unique)
  2. clear random prefixes/suffixes (implicits untouched)
  3. rarity: forced, or one draw against rare_chance then magic_chance
  4. counts: Normal (0,0) | Magic {0,1}x{0,1} not both 0 | Rare {1..3}x{1..3} sum >= 3
  5. fill prefixes then suffixes via select_random_affix + roll_affix

Crafting
--------
  add_random_affix     one more affix on a side with room (coin flip when unset)
  remove_random_affix  coin flip between populated sides, then a uniform index
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from itemforge.affixes import RolledAffix, SlotKind
from itemforge.config import (
    DEFAULT_MAGIC_CHANCE,
    DEFAULT_RARE_CHANCE,
    MAX_PREFIXES,
    MAX_SUFFIXES,
    RARE_MIN_AFFIXES,
)
from itemforge.items import BaseItem, ItemRarity
from itemforge.logging_config import get_logger
from itemforge.pool import AffixPool, select_random_affix
from itemforge.rng import derive_seed, make_rng, next_seed
from itemforge.roller import roll_affix

logger = get_logger("Generation")


@dataclass
class GenerationOutcome:
    rarity: ItemRarity
    requested_prefixes: int = 0
    requested_suffixes: int = 0
    filled_prefixes: int = 0
    filled_suffixes: int = 0
    skipped_slots: int = 0

    @property
    def requested_total(self) -> int:
        return self.requested_prefixes + self.requested_suffixes

    @property
    def filled_total(self) -> int:
        return self.filled_prefixes + self.filled_suffixes


# ============================================================
# RARITY & COUNTS
# ============================================================

def roll_rarity(rng: random.Random, magic_chance: float = DEFAULT_MAGIC_CHANCE,
                rare_chance: float = DEFAULT_RARE_CHANCE) -> ItemRarity:
    u = rng.random()
    if u < rare_chance:
        return ItemRarity.RARE
    if u < magic_chance:
        return ItemRarity.MAGIC
    return ItemRarity.NORMAL


def affix_counts_for_rarity(rarity: ItemRarity, rng: random.Random) -> Tuple[int, int]:
    """(prefix count, suffix count) requested for a rarity."""
    if rarity == ItemRarity.MAGIC:
        prefixes = rng.randint(0, 1)
        suffixes = rng.randint(0, 1)
        if prefixes == 0 and suffixes == 0:
            if rng.random() < 0.5:
                prefixes = 1
            else:
                suffixes = 1
        return prefixes, suffixes

    if rarity == ItemRarity.RARE:
        prefixes = rng.randint(1, MAX_PREFIXES)
        suffixes = rng.randint(1, MAX_SUFFIXES)
        while prefixes + suffixes < RARE_MIN_AFFIXES:
            if prefixes < MAX_PREFIXES:
                prefixes += 1
            else:
                suffixes += 1
        return prefixes, suffixes

    return 0, 0


# ============================================================
# SLOT FILLING
# ============================================================

def _fill_slot(item: BaseItem, pool: AffixPool, slot: SlotKind, item_level: int,
               rng: random.Random) -> Optional[RolledAffix]:
    template = select_random_affix(pool, item, slot, item_level, seed=next_seed(rng))
    if template is None:
        logger.warning("No eligible %s for %s (level %d); slot left empty",
                       slot.value.lower(), item.name, item_level)
        return None
    return roll_affix(template, next_seed(rng))


def generate_affixes(item: Optional[BaseItem], pool: Optional[AffixPool],
                     item_level: Optional[int] = None, rarity: Optional[ItemRarity] = None, *,
                     magic_chance: float = DEFAULT_MAGIC_CHANCE,
                     rare_chance: float = DEFAULT_RARE_CHANCE,
                     seed: Optional[int] = None,
                     rng: Optional[random.Random] = None) -> Optional[GenerationOutcome]:
    """
    Replaces an item's random affixes in place and reports what happened.

    Returns None without touching the item for missing input, unique items,
    or a forced Unique rarity.
    """
    if item is None or pool is None:
        logger.error("generate_affixes called with item=%r pool=%r", item, pool)
        return None
    if item.is_unique:
        logger.info("Skipping affix generation for unique item %s", item.name)
        return None
    if rarity == ItemRarity.UNIQUE:
        logger.warning("Cannot force Unique rarity on %s; item left unchanged", item.name)
        return None

    rng = make_rng(seed, rng)
    level = item.item_level if item_level is None else item_level

    item.clear_affixes()

    target = rarity if rarity is not None else roll_rarity(rng, magic_chance, rare_chance)
    want_prefixes, want_suffixes = affix_counts_for_rarity(target, rng)
    outcome = GenerationOutcome(target, want_prefixes, want_suffixes)

    for _ in range(want_prefixes):
        if not item.can_add_prefix():
            break
        rolled = _fill_slot(item, pool, SlotKind.PREFIX, level, rng)
        if rolled is None:
            outcome.skipped_slots += 1
        elif item.add_prefix(rolled):
            outcome.filled_prefixes += 1

    for _ in range(want_suffixes):
        if not item.can_add_suffix():
            break
        rolled = _fill_slot(item, pool, SlotKind.SUFFIX, level, rng)
        if rolled is None:
            outcome.skipped_slots += 1
        elif item.add_suffix(rolled):
            outcome.filled_suffixes += 1

    logger.debug("Generated %s %s: %d/%d prefixes, %d/%d suffixes",
                 target.value, item.name, outcome.filled_prefixes, want_prefixes,
                 outcome.filled_suffixes, want_suffixes)
    return outcome


def generate_batch(items: Iterable[BaseItem], pool: AffixPool, run_seed: int, *,
                   magic_chance: float = DEFAULT_MAGIC_CHANCE,
                   rare_chance: float = DEFAULT_RARE_CHANCE,
                   rarity: Optional[ItemRarity] = None) -> List[Optional[GenerationOutcome]]:
    """
    Generates every item with a seed derived from (run_seed, index, base_id).
    One failing item is logged and yields None; the batch carries on.
    """
    outcomes: List[Optional[GenerationOutcome]] = []
    for index, item in enumerate(items):
        base_id = item.base_id if item is not None else ""
        item_seed = derive_seed(run_seed, index, base_id)
        try:
            outcome = generate_affixes(item, pool, rarity=rarity, magic_chance=magic_chance,
                                       rare_chance=rare_chance, seed=item_seed)
        except Exception:
            logger.exception("Affix generation failed for batch item %d (%s)", index, base_id)
            outcome = None
        outcomes.append(outcome)
    return outcomes


# ============================================================
# CRAFTING
# ============================================================

def _open_slots(item: BaseItem, slot: Optional[SlotKind]) -> List[SlotKind]:
    wanted = (SlotKind.PREFIX, SlotKind.SUFFIX) if slot in (None, SlotKind.UNIFIED) else (slot,)
    room = {SlotKind.PREFIX: item.can_add_prefix(), SlotKind.SUFFIX: item.can_add_suffix()}
    return [s for s in wanted if room[s]]


def _crafting_guard(item: Optional[BaseItem], action: str) -> bool:
    if item is None:
        logger.error("%s called with no item", action)
        return False
    if item.is_unique:
        logger.info("Refusing to %s on unique item %s", action, item.name)
        return False
    return True


def add_random_affix(item: Optional[BaseItem], pool: Optional[AffixPool],
                     slot: Optional[SlotKind] = None, *,
                     seed: Optional[int] = None,
                     rng: Optional[random.Random] = None,
                     item_level: Optional[int] = None) -> Optional[RolledAffix]:
    """
    Rolls one more affix onto an item, keeping everything it already carries.

    slot picks the side; None lets a coin flip choose between the sides that
    still have room. Rarity follows from the new counts. Returns the affix
    added, or None when the item refuses it (unique or full) or no template
    is eligible.
    """
    if not _crafting_guard(item, "add_random_affix"):
        return None
    if pool is None:
        logger.error("add_random_affix called with no pool for %s", item.name)
        return None

    open_slots = _open_slots(item, slot)
    if not open_slots:
        logger.info("%s has no room for another %s", item.name,
                    "affix" if slot in (None, SlotKind.UNIFIED) else slot.value.lower())
        return None

    rng = make_rng(seed, rng)
    level = item.item_level if item_level is None else item_level
    chosen = open_slots[0]
    if len(open_slots) > 1 and rng.random() >= 0.5:
        chosen = open_slots[1]

    rolled = _fill_slot(item, pool, chosen, level, rng)
    if rolled is None:
        return None
    added = item.add_prefix(rolled) if chosen == SlotKind.PREFIX else item.add_suffix(rolled)
    if not added:
        return None

    logger.debug("Added %s %s to %s (now %s)", chosen.value.lower(), rolled.name,
                 item.name, item.rarity.value)
    return rolled


def remove_random_affix(item: Optional[BaseItem], *,
                        seed: Optional[int] = None,
                        rng: Optional[random.Random] = None) -> Optional[RolledAffix]:
    """
    Removes one random prefix or suffix. Implicits are never touched.

    With both sides populated a coin flip picks the side, then a uniform
    index picks the affix. Returns the removed affix, or None when the item
    is unique or carries no random affixes.
    """
    if not _crafting_guard(item, "remove_random_affix"):
        return None
    if item.random_affix_count() == 0:
        logger.info("%s has no affixes to remove", item.name)
        return None

    rng = make_rng(seed, rng)
    if item.prefixes and item.suffixes:
        side = item.prefixes if rng.random() < 0.5 else item.suffixes
    else:
        side = item.prefixes or item.suffixes

    removed = side.pop(rng.randrange(len(side)))
    logger.debug("Removed %s from %s (now %s)", removed.name, item.name, item.rarity.value)
    return removed
