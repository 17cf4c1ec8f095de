import pytest
from pydantic import ValidationError

from itemforge.affixes import Affix, Handedness, RolledAffix, SlotKind, max_tier_for_level
from itemforge.modifiers import AffixModifier, RolledModifier


def _mod(stat="MaximumLife", lo=10, hi=20):
    return AffixModifier(stat_name=stat, value_range=(lo, hi))


@pytest.mark.parametrize("level,tier", [
    (0, 9), (1, 9), (9, 9),
    (10, 8), (19, 8),
    (20, 7), (30, 6), (40, 5),
    (50, 4), (59, 4),
    (60, 3), (70, 2), (79, 2),
    (80, 1), (100, 1),
])
def test_tier_ladder(level, tier):
    assert max_tier_for_level(level) == tier


class TestAffixTemplate:
    def test_defaults(self):
        affix = Affix(name="Hale", modifiers=(_mod(),))
        assert affix.slot_kind == SlotKind.PREFIX
        assert affix.handedness == Handedness.BOTH
        assert affix.compatible_tags == frozenset()
        assert affix.is_randomly_droppable

    def test_tags_accept_lists(self):
        affix = Affix(name="X", compatible_tags=["shield", "armour_base"], modifiers=[_mod()])
        assert affix.compatible_tags == frozenset({"shield", "armour_base"})
        assert isinstance(affix.modifiers, tuple)

    @pytest.mark.parametrize("tier", [0, 10])
    def test_tier_bounds(self, tier):
        with pytest.raises(ValidationError):
            Affix(name="X", tier=tier, modifiers=(_mod(),))

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            Affix(name="X", weight=-1, modifiers=(_mod(),))

    def test_zero_weight_is_implicit_only(self):
        affix = Affix(name="Implicit", weight=0, modifiers=(_mod(),))
        assert not affix.is_randomly_droppable

    def test_fractional_weight(self):
        affix = Affix(name="Rare Drop", weight=0.5, modifiers=(_mod(),))
        assert affix.weight == 0.5
        assert affix.is_randomly_droppable
        rolled = RolledAffix(name="Rare Drop", weight=0.25,
                             modifiers=(RolledModifier(stat_name="MaximumLife", value_range=(1, 5), rolled_value=3.0),))
        assert rolled.weight == 0.25

    def test_needs_a_modifier(self):
        with pytest.raises(ValidationError):
            Affix(name="Empty", modifiers=())

    def test_frozen(self):
        affix = Affix(name="X", modifiers=(_mod(),))
        with pytest.raises(ValidationError):
            affix.tier = 1


class TestRolledAffix:
    def test_render_lines(self):
        rolled = RolledAffix(
            name="Hale",
            seed=7,
            modifiers=(
                RolledModifier(stat_name="MaximumLife", value_range=(10, 19), rolled_value=12,
                               is_rolled=True, description="+{value} to maximum Life"),
                RolledModifier(stat_name="Strength", value_range=(1, 3), rolled_value=2, is_rolled=True),
            ),
        )
        assert rolled.render_lines() == ["+12 to maximum Life", "+2 to Strength"]
        assert rolled.seed == 7

    def test_is_an_affix(self):
        rolled = RolledAffix(name="X", modifiers=(RolledModifier(stat_name="Y", value_range=(1, 1)),))
        assert isinstance(rolled, Affix)
