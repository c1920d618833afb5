"""Tests for Card, AbilityCard and Player."""

import pytest
from pydantic import ValidationError

from magical_vortex.engine.core.entities import AbilityCard, Card, Player
from magical_vortex.ir.abilities import AbilityKind, EffectTag
from magical_vortex.ir.cards import Affinity, CardColor, CardType, PlayerId
from magical_vortex.ir.characters import get_character


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _card(card_id: str, value: int = 5, card_type=CardType.ATK, color=CardColor.BLACK) -> Card:
    return Card(id=card_id, type=card_type, color=color, value=value)


def _make_player(**kwargs) -> Player:
    defaults = dict(id=PlayerId.PLAYER, life=40)
    defaults.update(kwargs)
    return Player(**defaults)


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------

class TestCard:
    def test_card_is_frozen(self):
        card = _card("c-1")
        with pytest.raises(ValidationError):
            card.value = 9

    @pytest.mark.parametrize("value", [0, 11])
    def test_value_out_of_range(self, value):
        with pytest.raises(ValidationError):
            _card("c-1", value=value)

    def test_copy_keeps_identity(self):
        card = _card("c-1", color=CardColor.BLACK)
        flipped = card.model_copy(update={"color": CardColor.WHITE})
        assert flipped.id == "c-1"
        assert flipped.color == CardColor.WHITE
        assert card.color == CardColor.BLACK


class TestAbilityCard:
    def test_from_tag(self):
        ability = AbilityCard.from_tag(EffectTag.MIND_CONTROL)
        assert ability.id == "ab-MIND_CONTROL"
        assert ability.name == "Mind Control"
        assert ability.level == 2
        assert ability.affinity == Affinity.NEUTRAL
        assert ability.kind == AbilityKind.ACTIVE

    def test_from_tag_custom_id(self):
        assert AbilityCard.from_tag(EffectTag.DARK_LORD, card_id="x").id == "x"

    def test_passive_kind(self):
        assert AbilityCard.from_tag(EffectTag.VORTEX_CONTROL).kind == AbilityKind.PASSIVE


# ---------------------------------------------------------------------------
# Player
# ---------------------------------------------------------------------------

class TestPlayerQueries:
    def test_affinity_without_character_is_neutral(self):
        assert _make_player().affinity == Affinity.NEUTRAL

    def test_affinity_from_character(self):
        assert _make_player(character=get_character("char4")).affinity == Affinity.BLACK

    def test_is_dead(self):
        assert _make_player(life=0).is_dead
        assert not _make_player(life=1).is_dead

    def test_holds_tag_covers_hand_and_zone(self):
        player = _make_player(
            active_abilities=[AbilityCard.from_tag(EffectTag.MAGIC_WALL)],
            ability_hand=[AbilityCard.from_tag(EffectTag.MAGIC_VISION)],
        )
        assert player.has_ability(EffectTag.MAGIC_WALL)
        assert not player.has_ability(EffectTag.MAGIC_VISION)
        assert player.holds_tag(EffectTag.MAGIC_VISION)
        assert not player.holds_tag(EffectTag.DARK_LORD)

    def test_find_helpers(self):
        wall = AbilityCard.from_tag(EffectTag.MAGIC_WALL)
        player = _make_player(power_hand=[_card("c-1")], active_abilities=[wall])
        assert player.find_card("c-1").id == "c-1"
        assert player.find_card("c-2") is None
        assert player.find_active_ability(wall.id) == wall
        assert player.find_held_ability(wall.id) is None

    def test_has_card_type(self):
        player = _make_player(power_hand=[_card("c-1", card_type=CardType.ATK)])
        assert player.has_card_type(CardType.ATK)
        assert not player.has_card_type(CardType.DEF)


class TestPlayerMutations:
    def test_remove_card(self):
        player = _make_player(power_hand=[_card("c-1"), _card("c-2")])
        removed = player.remove_card("c-1")
        assert removed.id == "c-1"
        assert [c.id for c in player.power_hand] == ["c-2"]

    def test_remove_missing_card_raises(self):
        with pytest.raises(ValueError):
            _make_player().remove_card("c-1")

    def test_replace_card_keeps_position(self):
        player = _make_player(power_hand=[_card("c-1"), _card("c-2"), _card("c-3")])
        player.replace_card(_card("c-2", card_type=CardType.DEF))
        assert [c.id for c in player.power_hand] == ["c-1", "c-2", "c-3"]
        assert player.power_hand[1].type == CardType.DEF

    def test_lose_life_floors_at_zero(self):
        player = _make_player(life=5)
        player.lose_life(8)
        assert player.life == 0

    def test_heal_caps_at_max(self):
        player = _make_player(life=37)
        assert player.heal(10, 40) == 3
        assert player.life == 40

    def test_heal_nothing(self):
        player = _make_player(life=30)
        assert player.heal(0, 40) == 0
        assert player.life == 30

    def test_reset_turn_counters(self):
        player = _make_player(
            attacks_performed=2,
            vortex_attacks_performed=1,
            vortex_defenses_performed=1,
            level_ups_performed=1,
            abilities_drawn_this_turn=1,
            used_abilities_this_turn=["ab-1"],
            hand_revealed=True,
            permanent_shield=4,
        )
        player.reset_turn_counters()
        assert player.attacks_performed == 0
        assert player.vortex_attacks_performed == 0
        assert player.vortex_defenses_performed == 0
        assert player.level_ups_performed == 0
        assert player.abilities_drawn_this_turn == 0
        assert player.used_abilities_this_turn == []
        assert player.hand_revealed is False
        # Shields persist across turns
        assert player.permanent_shield == 4
