"""
Tests for the item entity factory: materialising generated items onto
tcod-ecs entities, rerolling the affixes of existing loot and adding or
removing single affixes.
"""
import pytest
import tcod.ecs
from unittest.mock import patch

from itemforge.affixes import SlotKind
from itemforge.config import GenerationSettings
from itemforge.data_loader import load_affix_pool
from itemforge.ecs.components import Equippable, ItemIdentity, ItemStats, LootItem
from itemforge.item_factory import (
    RARITY_TAGS,
    add_affix,
    create_item,
    remove_affix,
    reroll_affixes,
    summarize_stats,
)
from itemforge.items import ItemRarity

ALWAYS_MAGIC = GenerationSettings(magic_chance=1.0, rare_chance=0.0)


@pytest.fixture(scope="module")
def pool():
    return load_affix_pool()


def _rarity_tags(entity):
    return RARITY_TAGS & set(entity.tags)


# ---------------------------------------------------------------------------
# create_item
# ---------------------------------------------------------------------------

class TestCreateItem:
    def setup_method(self):
        self.registry = tcod.ecs.Registry()

    def test_components_attached(self, pool):
        entity = create_item(self.registry, "weapons/rusted_sword", pool, seed=1, item_level=50)
        ident = entity.components[ItemIdentity]
        assert ident.entity_id == "rusted_sword"
        assert ident.template_origin == "weapons/rusted_sword"
        assert ident.value == 12
        assert entity.components[Equippable].slot_type == "hand"
        loot = entity.components[LootItem]
        assert loot.seed == 1
        assert loot.item.item_level == 50
        assert ident.name == loot.item.display_name

    def test_base_tags_copied(self, pool):
        entity = create_item(self.registry, "armour/tower_shield", pool, seed=2)
        assert "shield" in entity.tags
        assert "armour" in entity.tags

    def test_forced_normal(self, pool):
        entity = create_item(self.registry, "weapons/rusted_sword", pool, seed=3,
                             rarity=ItemRarity.NORMAL)
        assert entity.components[ItemIdentity].name == "Rusted Sword"
        assert _rarity_tags(entity) == {"normal"}
        stats = entity.components[ItemStats]
        assert stats.rarity == "Normal"
        assert stats.stat_totals["FlatAccuracy"] == 40
        assert stats.stat_totals["total_min_damage"] == 4
        assert stats.stat_totals["total_max_damage"] == 9

    def test_forced_magic(self, pool):
        entity = create_item(self.registry, "weapons/rusted_sword", pool, seed=4,
                             rarity=ItemRarity.MAGIC)
        item = entity.components[LootItem].item
        assert item.rarity == ItemRarity.MAGIC
        assert _rarity_tags(entity) == {"magic"}
        assert "Rusted Sword" in entity.components[ItemIdentity].name

    def test_forced_rare(self, pool):
        entity = create_item(self.registry, "armour/plate_vest", pool, seed=5, item_level=50,
                             rarity=ItemRarity.RARE)
        stats = entity.components[ItemStats]
        assert stats.rarity == "Rare"
        assert "total_armour" in stats.stat_totals
        assert len(stats.affix_lines) >= 3

    def test_settings_drive_rarity(self, pool):
        with patch("itemforge.item_factory.get_generation_settings", return_value=ALWAYS_MAGIC):
            entity = create_item(self.registry, "weapons/rusted_sword", pool, seed=6)
        assert entity.components[LootItem].item.rarity == ItemRarity.MAGIC

    def test_unique_base(self, pool):
        entity = create_item(self.registry, "jewellery/band_of_the_oath", pool, seed=7, item_level=60)
        assert entity.components[ItemIdentity].name == "Band of the Oath"
        assert _rarity_tags(entity) == {"unique"}

    def test_same_seed_same_item(self, pool):
        other = tcod.ecs.Registry()
        a = create_item(self.registry, "jewellery/iron_ring", pool, seed=99, item_level=30)
        b = create_item(other, "jewellery/iron_ring", pool, seed=99, item_level=30)
        assert a.components[LootItem].item == b.components[LootItem].item
        assert a.components[ItemIdentity].name == b.components[ItemIdentity].name

    def test_missing_base(self, pool):
        with pytest.raises(FileNotFoundError):
            create_item(self.registry, "weapons/excalibur", pool, seed=1)


# ---------------------------------------------------------------------------
# reroll_affixes
# ---------------------------------------------------------------------------

class TestRerollAffixes:
    def setup_method(self):
        self.registry = tcod.ecs.Registry()

    def test_reroll_replaces_affixes(self, pool):
        entity = create_item(self.registry, "weapons/rusted_sword", pool, seed=1,
                             rarity=ItemRarity.RARE)
        assert reroll_affixes(entity, pool, seed=2, settings=ALWAYS_MAGIC)
        item = entity.components[LootItem].item
        assert item.rarity == ItemRarity.MAGIC
        assert entity.components[LootItem].seed == 2
        assert entity.components[ItemIdentity].name == item.display_name
        assert entity.components[ItemStats].rarity == "Magic"
        assert _rarity_tags(entity) == {"magic"}

    def test_reroll_keeps_implicits(self, pool):
        entity = create_item(self.registry, "weapons/rusted_sword", pool, seed=1)
        implicits = list(entity.components[LootItem].item.implicit_modifiers)
        reroll_affixes(entity, pool, seed=3, rarity=ItemRarity.RARE)
        assert entity.components[LootItem].item.implicit_modifiers == implicits

    def test_unique_refused(self, pool):
        entity = create_item(self.registry, "jewellery/band_of_the_oath", pool, seed=7)
        before = list(entity.components[LootItem].item.suffixes)
        assert reroll_affixes(entity, pool, seed=8, rarity=ItemRarity.RARE) is False
        assert entity.components[LootItem].item.suffixes == before

    def test_forced_unique_refused(self, pool):
        entity = create_item(self.registry, "weapons/rusted_sword", pool, seed=1)
        assert reroll_affixes(entity, pool, seed=2, rarity=ItemRarity.UNIQUE) is False
        assert entity.components[LootItem].seed == 1

    def test_entity_without_loot(self, pool):
        assert reroll_affixes(self.registry.new_entity(), pool, seed=1) is False


# ---------------------------------------------------------------------------
# add_affix / remove_affix
# ---------------------------------------------------------------------------

class TestCraftingActions:
    def setup_method(self):
        self.registry = tcod.ecs.Registry()

    def test_add_refreshes_entity(self, pool):
        entity = create_item(self.registry, "weapons/rusted_sword", pool, seed=1, item_level=50,
                             rarity=ItemRarity.NORMAL)
        rolled = add_affix(entity, pool, seed=2)
        item = entity.components[LootItem].item
        assert rolled in item.prefixes + item.suffixes
        assert _rarity_tags(entity) == {"magic"}
        assert entity.components[ItemStats].rarity == "Magic"
        assert entity.components[ItemIdentity].name == item.display_name
        assert entity.components[LootItem].seed == 1

    def test_remove_refreshes_entity(self, pool):
        entity = create_item(self.registry, "weapons/rusted_sword", pool, seed=1, item_level=50,
                             rarity=ItemRarity.NORMAL)
        add_affix(entity, pool, seed=2, slot=SlotKind.PREFIX)
        removed = remove_affix(entity, seed=3)
        item = entity.components[LootItem].item
        assert removed is not None
        assert item.random_affix_count() == 0
        assert _rarity_tags(entity) == {"normal"}
        implicit_lines = [line for affix in item.implicit_modifiers for line in affix.render_lines()]
        assert entity.components[ItemStats].affix_lines == implicit_lines

    def test_unique_refused(self, pool):
        entity = create_item(self.registry, "jewellery/band_of_the_oath", pool, seed=7)
        name = entity.components[ItemIdentity].name
        assert add_affix(entity, pool, seed=1) is None
        assert remove_affix(entity, seed=1) is None
        assert entity.components[ItemIdentity].name == name
        assert _rarity_tags(entity) == {"unique"}

    def test_entity_without_loot(self, pool):
        entity = self.registry.new_entity()
        assert add_affix(entity, pool, seed=1) is None
        assert remove_affix(entity, seed=1) is None


def test_summarize_stats_lines(pool):
    registry = tcod.ecs.Registry()
    entity = create_item(registry, "armour/tower_shield", pool, seed=11, rarity=ItemRarity.NORMAL)
    item = entity.components[LootItem].item
    stats = summarize_stats(item)
    assert stats.affix_lines == item.implicit_modifiers[0].render_lines()
    assert stats.stat_totals["total_block_chance"] == 24
    assert stats.stat_totals["FlatMaximumLife"] == item.sum_stat("MaximumLife")
