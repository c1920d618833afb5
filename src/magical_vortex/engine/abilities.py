"""Ability effect engine.

Every active ability is described by an :class:`EffectHandler` record in
:data:`EFFECT_HANDLERS`: which discard phase collects its cost, whether the
discarded card must match a colour, whether a follow-up target is needed,
and the function that applies the effect.  Passive abilities have no
handler; they are read by :mod:`magical_vortex.engine.mechanics.modifiers`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, TYPE_CHECKING

from magical_vortex.engine.core.game_state import LogEvent, Phase
from magical_vortex.engine.errors import PreconditionViolation
from magical_vortex.engine.mechanics.card_piles import discard_from_hand
from magical_vortex.engine.mechanics.modifiers import get_max_life
from magical_vortex.ir.abilities import ABILITY_DEFINITIONS, AbilityKind, EffectTag
from magical_vortex.ir.cards import CardColor, CardType

if TYPE_CHECKING:
    from magical_vortex.engine.core.entities import AbilityCard, Card, Player
    from magical_vortex.engine.core.game_state import GameState
    from magical_vortex.engine.core.rng import GameRNG
    from magical_vortex.ir.cards import PlayerId

logger = logging.getLogger(__name__)


@dataclass
class EffectContext:
    """Everything an effect needs once its cost has been paid."""

    state: GameState
    player_id: PlayerId
    ability: AbilityCard
    discarded: Card
    rng: GameRNG

    @property
    def player(self) -> Player:
        return self.state.player(self.player_id)

    @property
    def opponent(self) -> Player:
        return self.state.player(self.player_id.opponent)


@dataclass(frozen=True)
class EffectHandler:
    """Payment and resolution contract for one active ability."""

    discard_phase: Phase
    resolve: Callable[[EffectContext], None]
    discard_color: CardColor | None = None
    """If set, the discarded card must be this colour."""

    needs_target: bool = False
    """After payment, the player picks one of their own hand cards."""

    precheck: Callable[[Player], str | None] | None = None
    """Returns a refusal message if the ability cannot be activated now."""


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------

def _wall_precheck(player: Player) -> str | None:
    if player.permanent_shield:
        return (
            "You already have a Shield active. It must be destroyed "
            "(reach 0) before you can create a new one."
        )
    return None


def _resolve_wall(ctx: EffectContext) -> None:
    ctx.player.permanent_shield = ctx.discarded.value
    ctx.state.add_log(
        LogEvent.SHIELD_SET, player=ctx.player_id, value=ctx.discarded.value
    )


def _heal(ctx: EffectContext, amount: int) -> None:
    restored = ctx.player.heal(amount, get_max_life(ctx.player))
    ctx.state.add_log(
        LogEvent.HEALED,
        player=ctx.player_id,
        ability=ctx.ability.effect_tag,
        amount=amount,
        restored=restored,
        life=ctx.player.life,
    )


def _resolve_half_heal(ctx: EffectContext) -> None:
    _heal(ctx, math.floor(ctx.discarded.value / 2) + ctx.player.level)


def _resolve_full_heal(ctx: EffectContext) -> None:
    _heal(ctx, ctx.discarded.value)


def _resolve_vision(ctx: EffectContext) -> None:
    ctx.player.hand_revealed = True
    ctx.state.add_log(LogEvent.HAND_REVEALED, player=ctx.player_id)


def _resolve_mind_control(ctx: EffectContext) -> None:
    opponent = ctx.opponent
    discarded: list[str] = []
    for _ in range(ctx.player.level):
        if not opponent.power_hand:
            break
        idx = ctx.rng.random_index(len(opponent.power_hand))
        card = opponent.power_hand.pop(idx)
        ctx.state.discard_pile.append(card)
        discarded.append(card.id)
    ctx.state.add_log(
        LogEvent.MIND_CONTROL,
        player=ctx.player_id,
        target=opponent.id,
        count=len(discarded),
        card_ids=discarded,
    )


def _resolve_nothing(ctx: EffectContext) -> None:
    """Card modifications resolve when the target is chosen."""


EFFECT_HANDLERS: dict[EffectTag, EffectHandler] = {
    EffectTag.MAGIC_WALL: EffectHandler(
        discard_phase=Phase.SELECT_DISCARD_FOR_WALL,
        resolve=_resolve_wall,
        precheck=_wall_precheck,
    ),
    EffectTag.LIGHT_AFFINITY: EffectHandler(
        discard_phase=Phase.SELECT_DISCARD_FOR_HEAL,
        resolve=_resolve_half_heal,
        discard_color=CardColor.WHITE,
    ),
    EffectTag.DARK_AFFINITY: EffectHandler(
        discard_phase=Phase.SELECT_DISCARD_FOR_HEAL,
        resolve=_resolve_half_heal,
        discard_color=CardColor.BLACK,
    ),
    EffectTag.MASTER_AFFINITY: EffectHandler(
        discard_phase=Phase.SELECT_DISCARD_FOR_HEAL,
        resolve=_resolve_full_heal,
    ),
    EffectTag.MAGIC_VISION: EffectHandler(
        discard_phase=Phase.SELECT_DISCARD_FOR_VISION,
        resolve=_resolve_vision,
    ),
    EffectTag.MIND_CONTROL: EffectHandler(
        discard_phase=Phase.SELECT_DISCARD_FOR_MIND,
        resolve=_resolve_mind_control,
    ),
    EffectTag.ELEMENTAL_CONTROL: EffectHandler(
        discard_phase=Phase.SELECT_DISCARD_FOR_MODIFICATION,
        resolve=_resolve_nothing,
        needs_target=True,
    ),
    EffectTag.MAGIC_CONTROL: EffectHandler(
        discard_phase=Phase.SELECT_DISCARD_FOR_MODIFICATION,
        resolve=_resolve_nothing,
        needs_target=True,
    ),
}

_ACTIVE_TAGS = frozenset(
    d.effect_tag for d in ABILITY_DEFINITIONS if d.kind == AbilityKind.ACTIVE
)
if _ACTIVE_TAGS != frozenset(EFFECT_HANDLERS):
    raise RuntimeError(
        "EFFECT_HANDLERS out of sync with the ability table: "
        f"{sorted(t.value for t in _ACTIVE_TAGS ^ frozenset(EFFECT_HANDLERS))}"
    )


# ---------------------------------------------------------------------------
# Entry points used by the state machine
# ---------------------------------------------------------------------------

def get_effect_handler(tag: EffectTag) -> EffectHandler | None:
    """The handler for an active ability, or ``None`` for a passive one."""
    return EFFECT_HANDLERS.get(tag)


def check_activation(player: Player, ability: AbilityCard) -> EffectHandler:
    """Validate that *player* may start activating *ability* right now."""
    handler = get_effect_handler(ability.effect_tag)
    if handler is None:
        raise PreconditionViolation(f"{ability.name} is passive and cannot be activated.")
    if ability.id in player.used_abilities_this_turn:
        raise PreconditionViolation(f"You have already used {ability.name} this turn.")
    if not player.power_hand:
        raise PreconditionViolation("You need a card in hand to pay for an ability.")
    # The cost card cannot also be the modification target.
    if handler.needs_target and len(player.power_hand) < 2:
        raise PreconditionViolation(
            f"{ability.name} needs a card to discard and another card to modify."
        )
    if handler.precheck is not None:
        reason = handler.precheck(player)
        if reason:
            raise PreconditionViolation(reason)
    return handler


def pay_and_resolve(
    state: GameState,
    player_id: PlayerId,
    ability: AbilityCard,
    card_id: str,
    rng: GameRNG,
) -> EffectHandler:
    """Discard *card_id* as the cost of *ability* and apply its effect.

    Raises :class:`PreconditionViolation` if the card is missing or has the
    wrong colour for a colour-bound heal.
    """
    handler = EFFECT_HANDLERS[ability.effect_tag]
    player = state.player(player_id)
    card = player.find_card(card_id)
    if card is None:
        raise PreconditionViolation("Select a card from your hand.")
    if handler.discard_color is not None and card.color != handler.discard_color:
        raise PreconditionViolation(
            f"{ability.name} requires discarding a {handler.discard_color.value} card."
        )

    discarded = discard_from_hand(state, player_id, card_id)
    player.used_abilities_this_turn.append(ability.id)
    state.add_log(
        LogEvent.CARD_DISCARDED,
        player=player_id,
        card_id=discarded.id,
        value=discarded.value,
        reason=ability.effect_tag,
    )
    handler.resolve(EffectContext(state, player_id, ability, discarded, rng))
    logger.debug("%s paid %s with %s", player_id.value, ability.effect_tag.value, card_id)
    return handler


def modify_card(tag: EffectTag, card: Card) -> Card:
    """Return *card* with its colour (Elemental Control) or type (Magic
    Control) flipped.  The card keeps its identity."""
    if tag == EffectTag.ELEMENTAL_CONTROL:
        return card.model_copy(update={"color": card.color.opposite})
    if tag == EffectTag.MAGIC_CONTROL:
        flipped = CardType.DEF if card.type == CardType.ATK else CardType.ATK
        return card.model_copy(update={"type": flipped})
    raise ValueError(f"{tag} does not modify cards")
