"""
ItemForge - itemforge/item_factory.py
ECS Entity Factory for generated items.
=======================================
Version:     0.3
Stack:       Python 3.11+ | python-tcod-ecs
Status:      Materialises a BaseItem aggregate onto an entity and supports the
             "randomize affixes", "add affix" and "remove affix" actions on
             existing loot.
"""

from typing import Dict, Optional

import tcod.ecs

from itemforge.affixes import RolledAffix, SlotKind
from itemforge.config import GenerationSettings
from itemforge.data_loader import build_item, get_generation_settings, get_item_base, get_name_data
from itemforge.ecs.components import Equippable, ItemIdentity, ItemStats, LootItem
from itemforge.generation import add_random_affix, generate_affixes, remove_random_affix
from itemforge.items import Armour, BaseItem, ItemRarity, Weapon
from itemforge.logging_config import get_logger
from itemforge.naming import generate_item_name
from itemforge.pool import AffixPool
from itemforge.rng import derive_seed

logger = get_logger("Factory")

RARITY_TAGS = {r.value.lower() for r in ItemRarity}


def summarize_stats(item: BaseItem) -> ItemStats:
    """Stat totals keyed "<Kind><Stat>" (e.g. "FlatLife") plus variant totals and tooltip lines."""
    totals: Dict[str, float] = {}
    lines = []
    for affix in item.iter_affixes():
        lines.extend(affix.render_lines())
        for mod in affix.modifiers:
            if not mod.is_rolled:
                continue
            key = f"{mod.kind.value}{mod.stat_name}"
            if key not in totals:
                totals[key] = item.sum_stat(mod.stat_name, mod.kind)

    if isinstance(item, Weapon):
        lo, hi = item.total_damage_range()
        totals["total_min_damage"] = lo
        totals["total_max_damage"] = hi
        totals["total_attack_speed"] = item.total_attack_speed()
        totals["total_critical_strike_chance"] = item.total_critical_strike_chance()
    elif isinstance(item, Armour):
        totals["total_armour"] = item.total_armour()
        totals["total_evasion"] = item.total_evasion()
        totals["total_energy_shield"] = item.total_energy_shield()
        totals["total_block_chance"] = item.total_block_chance()

    return ItemStats(stat_totals=totals, affix_lines=lines, rarity=item.rarity.value)


def _apply_rarity_tag(entity: tcod.ecs.Entity, item: BaseItem) -> None:
    for tag in RARITY_TAGS:
        entity.tags.discard(tag)
    entity.tags.add(item.rarity.value.lower())


def create_item(registry: tcod.ecs.Registry, item_path: str, pool: AffixPool, *,
                seed: int, item_level: Optional[int] = None,
                rarity: Optional[ItemRarity] = None,
                settings: Optional[GenerationSettings] = None) -> tcod.ecs.Entity:
    """Instantiates an item entity from a TOML base with generated affixes."""
    base_def = get_item_base(item_path)
    settings = settings or get_generation_settings()

    item = build_item(base_def, item_level if item_level is not None else 1, derive_seed(seed, "base"))
    generate_affixes(item, pool, rarity=rarity, magic_chance=settings.magic_chance,
                     rare_chance=settings.rare_chance, seed=derive_seed(seed, "affixes"))
    item.generated_name = generate_item_name(item, get_name_data(), derive_seed(seed, "name"))

    entity = registry.new_entity()

    # 1. Base Tags
    for tag in base_def.tags:
        entity.tags.add(tag)

    # 2. Identity
    entity.components[ItemIdentity] = ItemIdentity(
        entity_id=base_def.id,
        name=item.display_name,
        description=base_def.description,
        template_origin=item_path,
        value=base_def.value,
    )

    # 3. Equippable
    entity.components[Equippable] = Equippable(slot_type=base_def.equip_slot)

    # 4. Aggregate & Stats
    entity.components[LootItem] = LootItem(item=item, seed=seed)
    entity.components[ItemStats] = summarize_stats(item)

    _apply_rarity_tag(entity, item)
    logger.debug("Created %s (%s) from %s", item.display_name, item.rarity.value, item_path)
    return entity


def _refresh_entity(entity: tcod.ecs.Entity, item: BaseItem, name_seed: int) -> None:
    item.generated_name = generate_item_name(item, get_name_data(), name_seed)
    if ItemIdentity in entity.components:
        entity.components[ItemIdentity].name = item.display_name
    entity.components[ItemStats] = summarize_stats(item)
    _apply_rarity_tag(entity, item)


def _loot_of(entity: tcod.ecs.Entity, action: str) -> Optional[LootItem]:
    if LootItem not in entity.components:
        logger.warning("%s called on an entity without LootItem", action)
        return None
    return entity.components[LootItem]


def reroll_affixes(entity: tcod.ecs.Entity, pool: AffixPool, *, seed: int,
                   rarity: Optional[ItemRarity] = None,
                   settings: Optional[GenerationSettings] = None) -> bool:
    """
    Regenerates the random affixes of an existing item entity.
    Returns False (and changes nothing) for unique items or non-loot entities.
    """
    loot = _loot_of(entity, "reroll_affixes")
    if loot is None:
        return False

    item = loot.item
    if item.is_unique:
        logger.info("Refusing to reroll unique item %s", item.name)
        return False

    settings = settings or get_generation_settings()
    outcome = generate_affixes(item, pool, rarity=rarity, magic_chance=settings.magic_chance,
                               rare_chance=settings.rare_chance, seed=derive_seed(seed, "affixes"))
    if outcome is None:
        return False

    loot.seed = seed
    _refresh_entity(entity, item, derive_seed(seed, "name"))
    return True


def add_affix(entity: tcod.ecs.Entity, pool: AffixPool, *, seed: int,
              slot: Optional[SlotKind] = None) -> Optional[RolledAffix]:
    """Adds one random affix to an item entity and refreshes its name, stats and rarity tag."""
    loot = _loot_of(entity, "add_affix")
    if loot is None:
        return None

    rolled = add_random_affix(loot.item, pool, slot, seed=derive_seed(seed, "add"))
    if rolled is not None:
        _refresh_entity(entity, loot.item, derive_seed(seed, "name"))
    return rolled


def remove_affix(entity: tcod.ecs.Entity, *, seed: int) -> Optional[RolledAffix]:
    """Removes one random affix from an item entity and refreshes it."""
    loot = _loot_of(entity, "remove_affix")
    if loot is None:
        return None

    removed = remove_random_affix(loot.item, seed=derive_seed(seed, "remove"))
    if removed is not None:
        _refresh_entity(entity, loot.item, derive_seed(seed, "name"))
    return removed
