import logging

from itemforge.affixes import RolledAffix
from itemforge.data_loader import NameDataDef, get_name_data
from itemforge.items import Armour, Effigy, ItemKind, Jewellery, Weapon
from itemforge.modifiers import RolledModifier
from itemforge.naming import generate_item_name, magic_item_name, rare_item_name


def _affix(name):
    return RolledAffix(name=name, modifiers=(RolledModifier(stat_name="MaximumLife", value_range=(1, 1),
                                                            rolled_value=1, is_rolled=True),))


def _rare(item):
    item.add_prefix(_affix("Hale"))
    item.add_prefix(_affix("Healthy"))
    item.add_suffix(_affix("of the Brute"))
    return item


NAMES = NameDataDef(
    rare_prefixes=["Grim", "Storm"],
    rare_suffixes={ItemKind.WEAPON: ["Bane", "Edge"], ItemKind.ARMOUR: ["Shell"]},
)


class TestMagicNames:
    def test_prefix_and_suffix(self):
        sword = Weapon(name="Rusted Sword")
        sword.add_prefix(_affix("Heavy"))
        sword.add_suffix(_affix("of Skill"))
        assert generate_item_name(sword) == "Heavy Rusted Sword of Skill"

    def test_prefix_only(self):
        ring = Jewellery(name="Iron Ring")
        ring.add_prefix(_affix("Hale"))
        assert magic_item_name(ring) == "Hale Iron Ring"

    def test_suffix_without_of_gets_one(self):
        ring = Jewellery(name="Iron Ring")
        ring.add_suffix(_affix("the Brute"))
        assert generate_item_name(ring) == "Iron Ring of the Brute"


class TestRareNames:
    def test_word_pools(self):
        name = generate_item_name(_rare(Weapon(name="Rusted Sword")), NAMES, seed=4)
        prefix, suffix = name.split(" ")
        assert prefix in NAMES.rare_prefixes
        assert suffix in NAMES.rare_suffixes[ItemKind.WEAPON]

    def test_seeded(self):
        sword = _rare(Weapon(name="Rusted Sword"))
        assert rare_item_name(sword, NAMES, 10) == rare_item_name(sword, NAMES, 10)

    def test_fallback_without_suffix_pool(self, caplog):
        with caplog.at_level(logging.WARNING, logger="itemforge"):
            assert generate_item_name(_rare(Effigy(name="Ember Idol")), NAMES, seed=1) == "Rare Ember Idol"
        assert "suffix pool" in caplog.text

    def test_fallback_without_name_data(self):
        assert generate_item_name(_rare(Armour(name="Plate Vest")), None, seed=1) == "Rare Plate Vest"

    def test_shipped_pools_cover_every_kind(self):
        data = get_name_data()
        assert data.rare_prefixes
        for kind in ItemKind:
            assert data.suffix_pool_for(kind)


def test_normal_and_unique_keep_base_name():
    assert generate_item_name(Armour(name="Plate Vest")) == "Plate Vest"
    band = Jewellery(name="Band of the Oath", is_unique=True)
    band.add_prefix(_affix("Oathbound Vigour"))
    assert generate_item_name(band, NAMES, seed=1) == "Band of the Oath"


def test_none_item(caplog):
    with caplog.at_level(logging.ERROR, logger="itemforge"):
        assert generate_item_name(None) == "Unknown Item"
    assert "generate_item_name" in caplog.text
