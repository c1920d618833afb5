"""Turn/phase state machine.

:func:`transition` is a reducer: it takes the committed ``GameState`` and
one :class:`~magical_vortex.engine.intents.Intent`, and returns a
:class:`Transition` holding the next state plus the continuations to
schedule.  Handlers work on a deep copy, so a rejected intent never leaves
a partial mutation behind.

:class:`GameEngine` owns the canonical state and a
:class:`~magical_vortex.engine.scheduler.ContinuationScheduler`, and is
what a presentation layer (or the headless runner) talks to.

Phase flow::

    INIT -> CHARACTER_SELECT -> START_GAME -> START_TURN
        -> DRAW_PHASE (human) | AI_TURN_LOGIC (AI) -> MAIN_PHASE -> ...
        -> RESOLVE_*_COMBAT -> SHOWDOWN -> START_TURN | MAIN_PHASE
                                        | ROUND_TRANSITION | GAME_OVER
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from magical_vortex.engine.abilities import check_activation, modify_card, pay_and_resolve
from magical_vortex.engine.config import EngineConfig
from magical_vortex.engine.core.factory import assign_character, create_initial_state
from magical_vortex.engine.core.game_state import (
    ABILITY_PAYMENT_PHASES,
    GameState,
    LogEvent,
    MatchStatus,
    PendingAction,
    PendingKind,
    Phase,
)
from magical_vortex.engine.core.rng import GameRNG
from magical_vortex.engine.errors import DataIntegrityGap, IllegalTransition, PreconditionViolation
from magical_vortex.engine.intents import Intent, IntentType
from magical_vortex.engine.mechanics.card_piles import (
    deal_opening,
    discard_from_hand,
    refill_hand,
    replace_vortex_card,
)
from magical_vortex.engine.mechanics.combat import resolve_direct, resolve_vortex
from magical_vortex.engine.mechanics.modifiers import (
    ability_capacity,
    can_vortex_attack,
    can_vortex_defend,
    eligible_ability_indices,
    get_max_hand_size,
    max_attacks,
    play_block_reason,
)
from magical_vortex.engine.play_agents.base import OpponentAgent
from magical_vortex.engine.play_agents.heuristic_agent import TieredHeuristicAgent
from magical_vortex.engine.scheduler import Continuation, ContinuationScheduler
from magical_vortex.ir.abilities import EffectTag
from magical_vortex.ir.cards import CardType, PlayerId
from magical_vortex.ir.characters import CHARACTERS, Character, get_character

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Transition plumbing
# ---------------------------------------------------------------------------

@dataclass
class TransitionContext:
    """Collaborators a handler may consult.  Never mutated by handlers."""

    config: EngineConfig
    rng: GameRNG
    agent: OpponentAgent

    def stream(self, name: str, state: GameState) -> GameRNG:
        """Independent RNG stream for one sub-system in one transition."""
        return self.rng.stream(name, state.round, state.action_token)


@dataclass
class Transition:
    """Result of applying one intent.

    Attributes
    ----------
    state:
        The next committed state, or the unchanged input state when the
        intent was ignored or refused.
    warning:
        User-facing reason the intent was refused.
    ignored:
        ``True`` if the intent was not valid in the current phase (or was
        a stale continuation).
    continuations:
        Delayed internal intents the owner must schedule.
    """

    state: GameState
    warning: str | None = None
    ignored: bool = False
    continuations: list[Continuation] = field(default_factory=list)

    @property
    def committed(self) -> bool:
        return not self.ignored and self.warning is None


Handler = Callable[[GameState, Intent, TransitionContext], GameState]

_HANDLERS: dict[IntentType, Handler] = {}


def _handles(kind: IntentType) -> Callable[[Handler], Handler]:
    def register(fn: Handler) -> Handler:
        _HANDLERS[kind] = fn
        return fn
    return register


def _require_phase(state: GameState, *phases: Phase) -> None:
    if state.phase not in phases:
        raise IllegalTransition(f"not allowed in {state.phase.value}")


def _hand_card(state: GameState, player_id: PlayerId, card_id: str | None):
    card = state.player(player_id).find_card(card_id) if card_id else None
    if card is None:
        raise PreconditionViolation("Select a card from your hand.")
    return card


def transition(state: GameState, intent: Intent, ctx: TransitionContext) -> Transition:
    """Apply *intent* to *state*.

    The input state is never modified.  On success the returned state's
    ``action_token`` is one higher than the input's.
    """
    handler = _HANDLERS.get(intent.kind)
    if handler is None:
        raise ValueError(f"No handler registered for intent {intent.kind!r}")

    try:
        if intent.kind.is_continuation and intent.token != state.action_token:
            raise IllegalTransition(
                f"stale continuation (token {intent.token}, state {state.action_token})"
            )
        working = state.model_copy(deep=True)
        next_state = handler(working, intent, ctx)
    except IllegalTransition as exc:
        logger.debug("Ignored %s in %s: %s", intent.kind.value, state.phase.value, exc)
        return Transition(state=state, ignored=True)
    except PreconditionViolation as exc:
        logger.debug("Refused %s: %s", intent.kind.value, exc)
        return Transition(state=state, warning=str(exc))

    next_state.action_token = state.action_token + 1
    _run_entry_actions(next_state, ctx)
    continuations = _continuations_for(next_state, intent, ctx.config)
    logger.debug(
        "%s: %s -> %s (token %d)",
        intent.kind.value, state.phase.value, next_state.phase.value,
        next_state.action_token,
    )
    return Transition(state=next_state, continuations=continuations)


# ---------------------------------------------------------------------------
# Entry actions and scheduling
# ---------------------------------------------------------------------------

def _run_entry_actions(state: GameState, ctx: TransitionContext) -> None:
    """Run the immediate entry actions of START_GAME and START_TURN."""
    while True:
        if state.phase == Phase.START_GAME:
            deal_opening(state, ctx.config.hand_size, ctx.config.vortex_slots)
            state.add_log(
                LogEvent.HANDS_DEALT,
                hand_size=ctx.config.hand_size,
                vortex=[c.id for c in state.vortex if c is not None],
            )
            state.phase = Phase.START_TURN
        elif state.phase == Phase.START_TURN:
            active = state.active_player
            active.reset_turn_counters()
            state.clear_pending()
            state.add_log(LogEvent.TURN_START, player=active.id, round=state.round)
            if state.current_player == PlayerId.PLAYER:
                state.phase = Phase.DRAW_PHASE
                state.status_message = "Your turn."
            else:
                state.phase = Phase.AI_TURN_LOGIC
                state.status_message = "Opponent's turn."
        else:
            return


def _continuations_for(
    state: GameState,
    intent: Intent,
    config: EngineConfig,
) -> list[Continuation]:
    if state.phase == Phase.DRAW_PHASE:
        kind, delay = IntentType.DRAW_TICK, config.draw_delay
    elif state.phase == Phase.AI_TURN_LOGIC:
        kind, delay = IntentType.AI_TURN_TICK, config.ai_turn_delay
    elif state.phase == Phase.AWAITING_AI_DEFENSE:
        kind, delay = IntentType.AI_DEFENSE_TICK, config.ai_defense_delay
    elif state.phase in (Phase.RESOLVE_DIRECT_COMBAT, Phase.RESOLVE_VORTEX_COMBAT):
        kind = IntentType.RESOLVE_COMBAT_TICK
        if intent.kind == IntentType.AI_DEFENSE_TICK:
            delay = config.resolve_after_ai_defense_delay
        else:
            delay = config.resolve_delay
    elif state.phase == Phase.SHOWDOWN:
        kind, delay = IntentType.FINALIZE_TURN_TICK, config.showdown_delay
    else:
        return []
    return [Continuation(kind=kind, token=state.action_token, phase=state.phase, delay=delay)]


# ---------------------------------------------------------------------------
# Match setup
# ---------------------------------------------------------------------------

def _draw_opponent_character(rng: GameRNG, human_pick: Character) -> Character:
    return rng.random_choice([c for c in CHARACTERS if c.id != human_pick.id])


@_handles(IntentType.START_GAME)
def _on_start_game(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.INIT, Phase.GAME_OVER)
    fresh = create_initial_state(ctx.config, ctx.rng, 1, state.action_token)
    fresh.status = MatchStatus.PLAYING
    fresh.phase = Phase.CHARACTER_SELECT
    fresh.status_message = "Choose your character."
    return fresh


@_handles(IntentType.SELECT_CHARACTER)
def _on_select_character(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.CHARACTER_SELECT)
    character = get_character(intent.character_id or "")
    if character is None:
        raise PreconditionViolation(f"Unknown character {intent.character_id!r}.")

    opponent = _draw_opponent_character(ctx.stream("characters", state), character)
    assign_character(state.human, character)
    assign_character(state.ai, opponent)
    state.add_log(LogEvent.MATCH_START, player=character.name, ai=opponent.name)
    state.current_player = PlayerId.PLAYER
    state.phase = Phase.START_GAME
    return state


@_handles(IntentType.START_NEXT_ROUND)
def _on_start_next_round(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.ROUND_TRANSITION)
    human_character = state.human.character
    if human_character is None:
        raise IllegalTransition("no character assigned")

    next_round = state.round + 1
    fresh = create_initial_state(ctx.config, ctx.rng, next_round, state.action_token)
    fresh.log = state.log
    assign_character(fresh.human, human_character)
    opponent = _draw_opponent_character(ctx.stream("characters", state), human_character)
    assign_character(fresh.ai, opponent)
    fresh.status = MatchStatus.PLAYING
    fresh.current_player = PlayerId.PLAYER
    fresh.add_log(
        LogEvent.ROUND_START, round=next_round, ai=opponent.name, ai_life=fresh.ai.life
    )
    fresh.phase = Phase.START_GAME
    logger.info("Round %d begins against %s", next_round, opponent.name)
    return fresh


# ---------------------------------------------------------------------------
# Draw phase
# ---------------------------------------------------------------------------

def _refill(state: GameState, player_id: PlayerId, rng: GameRNG) -> None:
    drawn, recycled = refill_hand(state, player_id, rng)
    if recycled:
        state.add_log(LogEvent.DECK_RECYCLED, count=recycled)
    if drawn:
        state.add_log(LogEvent.CARDS_DRAWN, player=player_id, count=len(drawn))
    else:
        state.add_log(LogEvent.HAND_FULL, player=player_id)


@_handles(IntentType.DRAW_TICK)
def _on_draw_tick(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.DRAW_PHASE)
    _refill(state, PlayerId.PLAYER, ctx.stream("piles", state))
    state.phase = Phase.MAIN_PHASE
    state.status_message = "Main phase: attack, level up, use abilities or end your turn."
    return state


# ---------------------------------------------------------------------------
# Attacks and defenses
# ---------------------------------------------------------------------------

def _declare_direct_attack(state: GameState, attacker_id: PlayerId, card) -> None:
    attacker = state.player(attacker_id)
    attacker.attacks_performed += 1
    state.pending = PendingAction(
        kind=PendingKind.DIRECT_ATTACK,
        attacker_id=attacker_id,
        target_id=attacker_id.opponent,
        attacking_card=card,
    )
    state.add_log(
        LogEvent.ATTACK_DECLARED,
        player=attacker_id,
        card_id=card.id,
        value=card.value,
        color=card.color,
        attack_number=attacker.attacks_performed,
    )


@_handles(IntentType.SELECT_ATTACK_CARD)
def _on_select_attack_card(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.MAIN_PHASE, Phase.SELECT_ATTACK_CARD)
    card = _hand_card(state, PlayerId.PLAYER, intent.card_id)

    if state.phase == Phase.MAIN_PHASE:
        selected = state.pending.attacking_card
        if card.type != CardType.ATK or (selected is not None and selected.id == card.id):
            state.pending.attacking_card = None
        else:
            state.pending.attacking_card = card
        return state

    if card.type != CardType.ATK:
        raise PreconditionViolation("Choose an attack card.")
    _declare_direct_attack(state, PlayerId.PLAYER, card)
    state.phase = Phase.AWAITING_AI_DEFENSE
    state.status_message = "The opponent is choosing a defense..."
    return state


@_handles(IntentType.CONFIRM_DIRECT_ATTACK)
def _on_confirm_direct_attack(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.MAIN_PHASE)
    human = state.human
    if human.attacks_performed >= max_attacks(human):
        raise PreconditionViolation(
            f"You can only attack {max_attacks(human)} times per turn at level {human.level}."
        )

    selected = state.pending.attacking_card
    if selected is None:
        state.phase = Phase.SELECT_ATTACK_CARD
        state.status_message = "Choose an attack card."
        return state

    card = human.find_card(selected.id)
    if card is None:
        raise PreconditionViolation("The selected attack card is no longer in your hand.")
    _declare_direct_attack(state, PlayerId.PLAYER, card)
    state.phase = Phase.AWAITING_AI_DEFENSE
    state.status_message = "The opponent is choosing a defense..."
    return state


def _vortex_slot(state: GameState, slot: int | None):
    if slot is None or not 0 <= slot < len(state.vortex) or state.vortex[slot] is None:
        raise PreconditionViolation("That Vortex slot is empty.")
    return state.vortex[slot]


@_handles(IntentType.CHOOSE_VORTEX_SLOT)
def _on_choose_vortex_slot(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    human = state.human

    if intent.for_defense:
        _require_phase(state, Phase.AWAITING_PLAYER_DEFENSE)
        if not can_vortex_defend(human):
            raise PreconditionViolation("You cannot defend through the Vortex right now.")
        vortex_card = _vortex_slot(state, intent.slot)
        human.vortex_defenses_performed += 1
        state.pending.defending_card = None
        state.pending.vortex_defense_index = intent.slot
        state.add_log(
            LogEvent.VORTEX_DEFENSE_CHOSEN,
            player=PlayerId.PLAYER,
            slot=intent.slot,
            value=vortex_card.value,
            color=vortex_card.color,
        )
        state.phase = Phase.RESOLVE_DIRECT_COMBAT
        return state

    _require_phase(state, Phase.MAIN_PHASE)
    selected = state.pending.attacking_card
    if selected is None:
        raise PreconditionViolation("Select an attack card first.")
    card = human.find_card(selected.id)
    if card is None or card.type != CardType.ATK:
        raise PreconditionViolation("Select an attack card first.")
    if not can_vortex_attack(human):
        raise PreconditionViolation("You have already used your Vortex attack this turn.")
    vortex_card = _vortex_slot(state, intent.slot)

    human.vortex_attacks_performed += 1
    state.pending = PendingAction(
        kind=PendingKind.VORTEX_ATTACK,
        attacker_id=PlayerId.PLAYER,
        target_id=PlayerId.AI,
        attacking_card=card,
        vortex_card_index=intent.slot,
    )
    state.add_log(
        LogEvent.VORTEX_ATTACK_DECLARED,
        player=PlayerId.PLAYER,
        card_id=card.id,
        slot=intent.slot,
        vortex_value=vortex_card.value,
        vortex_color=vortex_card.color,
    )
    state.phase = Phase.RESOLVE_VORTEX_COMBAT
    return state


@_handles(IntentType.CHOOSE_DEFENSE_CARD)
def _on_choose_defense_card(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.AWAITING_PLAYER_DEFENSE)
    if intent.card_id is None:
        state.pending.defending_card = None
        state.add_log(LogEvent.NO_DEFENSE, player=PlayerId.PLAYER)
    else:
        card = _hand_card(state, PlayerId.PLAYER, intent.card_id)
        if card.type != CardType.DEF:
            raise PreconditionViolation("Choose a defense card.")
        state.pending.defending_card = card
        state.add_log(
            LogEvent.DEFENSE_CHOSEN,
            player=PlayerId.PLAYER,
            card_id=card.id,
            value=card.value,
            color=card.color,
        )
    state.phase = Phase.RESOLVE_DIRECT_COMBAT
    return state


@_handles(IntentType.AI_DEFENSE_TICK)
def _on_ai_defense_tick(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.AWAITING_AI_DEFENSE)
    attack_card = state.pending.attacking_card
    if attack_card is None:
        raise IllegalTransition("no attack to defend against")

    ai = state.ai
    choice = ctx.agent.choose_defense_card(
        list(ai.power_hand), attack_card, state.round, state.human, ai
    )
    if choice is not None and (ai.find_card(choice.id) is None or choice.type != CardType.DEF):
        logger.debug("Agent chose an unusable defense %s; taking the hit", choice.id)
        choice = None

    state.pending.defending_card = choice
    if choice is None:
        state.add_log(LogEvent.NO_DEFENSE, player=PlayerId.AI)
    else:
        state.add_log(
            LogEvent.DEFENSE_CHOSEN,
            player=PlayerId.AI,
            card_id=choice.id,
            value=choice.value,
            color=choice.color,
        )
    state.phase = Phase.RESOLVE_DIRECT_COMBAT
    return state


# ---------------------------------------------------------------------------
# Combat resolution and turn finalization
# ---------------------------------------------------------------------------

def _resolve_pending_combat(state: GameState) -> None:
    pending = state.pending
    if pending.attacker_id is None or pending.target_id is None or pending.attacking_card is None:
        raise DataIntegrityGap("no attack in flight")

    attacker = state.player(pending.attacker_id)
    defender = state.player(pending.target_id)
    attack_card = attacker.find_card(pending.attacking_card.id)
    if attack_card is None:
        raise DataIntegrityGap(f"attack card {pending.attacking_card.id} left the hand")

    if pending.kind == PendingKind.VORTEX_ATTACK or pending.vortex_defense_index is not None:
        index = (
            pending.vortex_card_index
            if pending.kind == PendingKind.VORTEX_ATTACK
            else pending.vortex_defense_index
        )
        if index is None or not 0 <= index < len(state.vortex) or state.vortex[index] is None:
            raise DataIntegrityGap(f"Vortex slot {index} is empty")
        result = resolve_vortex(attack_card, state.vortex[index], attacker, defender)
    else:
        defense_card = None
        if pending.defending_card is not None:
            defense_card = defender.find_card(pending.defending_card.id)
            if defense_card is None:
                raise DataIntegrityGap(f"defense card {pending.defending_card.id} left the hand")
        result = resolve_direct(attack_card, defense_card, attacker, defender)

    if result.target_id is not None:
        target = state.player(result.target_id)
        target.lose_life(result.damage)
        target.permanent_shield = result.shield_remaining

    state.add_log(
        LogEvent.COMBAT_RESOLVED,
        mode=result.mode,
        attacker=attacker.id,
        attack_value=result.attack_value,
        opposing_value=result.opposing_value,
        same_color=result.same_color,
        combat_value=result.combat_value,
        target=result.target_id,
        damage=result.damage,
        absorbed=result.absorbed,
        shield_remaining=result.shield_remaining,
        vortex_defense=pending.vortex_defense_index is not None,
    )


@_handles(IntentType.RESOLVE_COMBAT_TICK)
def _on_resolve_combat_tick(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.RESOLVE_DIRECT_COMBAT, Phase.RESOLVE_VORTEX_COMBAT)
    try:
        _resolve_pending_combat(state)
    except DataIntegrityGap as exc:
        logger.warning("Combat aborted in %s: %s", state.phase.value, exc)
        state.add_log(LogEvent.COMBAT_ABORTED, reason=str(exc))
        state.clear_pending()
        if state.current_player == PlayerId.PLAYER:
            state.phase = Phase.MAIN_PHASE
        else:
            state.phase = Phase.AI_TURN_LOGIC
        return state
    state.phase = Phase.SHOWDOWN
    return state


def _end_turn(state: GameState) -> None:
    state.add_log(LogEvent.TURN_END, player=state.current_player)
    state.clear_pending()
    state.current_player = state.current_player.opponent
    state.phase = Phase.START_TURN


@_handles(IntentType.FINALIZE_TURN_TICK)
def _on_finalize_turn_tick(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.SHOWDOWN)
    pending = state.pending
    rng = ctx.stream("piles", state)

    if pending.attacker_id is not None and pending.attacking_card is not None:
        attacker = state.player(pending.attacker_id)
        if attacker.find_card(pending.attacking_card.id) is not None:
            discard_from_hand(state, attacker.id, pending.attacking_card.id)
    if pending.target_id is not None and pending.defending_card is not None:
        defender = state.player(pending.target_id)
        if defender.find_card(pending.defending_card.id) is not None:
            discard_from_hand(state, defender.id, pending.defending_card.id)
    for index in (pending.vortex_card_index, pending.vortex_defense_index):
        if index is not None:
            replace_vortex_card(state, index, rng)

    was_vortex_attack = pending.kind == PendingKind.VORTEX_ATTACK
    state.clear_pending()

    if state.human.is_dead:
        _finish_match(state, PlayerId.AI)
        return state
    if state.ai.is_dead:
        if state.round < ctx.config.final_round:
            state.status = MatchStatus.ROUND_OVER
            state.phase = Phase.ROUND_TRANSITION
            state.winner = PlayerId.PLAYER
            state.add_log(LogEvent.ROUND_WON, round=state.round, winner=PlayerId.PLAYER)
            state.status_message = f"Round {state.round} won!"
            logger.info("Round %d won by the player", state.round)
        else:
            _finish_match(state, PlayerId.PLAYER)
        return state

    if state.current_player == PlayerId.PLAYER:
        human = state.human
        if (was_vortex_attack and not human.has_ability(EffectTag.MASTER_VORTEX)) or not human.power_hand:
            _end_turn(state)
        else:
            state.phase = Phase.MAIN_PHASE
    else:
        state.phase = Phase.AI_TURN_LOGIC
    return state


def _finish_match(state: GameState, winner: PlayerId) -> None:
    state.status = MatchStatus.GAME_OVER
    state.phase = Phase.GAME_OVER
    state.winner = winner
    state.add_log(LogEvent.GAME_OVER, round=state.round, winner=winner)
    state.status_message = "Victory!" if winner == PlayerId.PLAYER else "Defeat."
    logger.info("Game over in round %d, winner %s", state.round, winner.value)


@_handles(IntentType.END_TURN)
def _on_end_turn(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.MAIN_PHASE)
    _end_turn(state)
    return state


# ---------------------------------------------------------------------------
# Level up
# ---------------------------------------------------------------------------

def _level_up(state: GameState, player_id: PlayerId, card_ids: list[str]) -> None:
    player = state.player(player_id)
    for card_id in card_ids:
        discard_from_hand(state, player_id, card_id)
    player.level += 1
    player.level_ups_performed += 1
    state.add_log(LogEvent.LEVEL_UP, player=player_id, level=player.level, card_ids=card_ids)


@_handles(IntentType.SELECT_CARDS_FOR_LEVEL_UP)
def _on_select_level_up_cards(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.MAIN_PHASE, Phase.SELECT_CARDS_FOR_LEVEL_UP)
    human = state.human

    if state.phase == Phase.MAIN_PHASE:
        if human.level >= ctx.config.max_level:
            raise PreconditionViolation("You are already at the maximum level.")
        if human.level_ups_performed >= 1:
            raise PreconditionViolation("You can only level up once per turn.")
        state.pending.attacking_card = None
        state.pending.selected_card_ids = []
        state.phase = Phase.SELECT_CARDS_FOR_LEVEL_UP
        state.status_message = "Select cards totalling at least 10."

    selection = list(state.pending.selected_card_ids)
    if intent.card_ids:
        selection = list(dict.fromkeys(intent.card_ids))
    elif intent.card_id is not None:
        if intent.card_id in selection:
            selection.remove(intent.card_id)
        else:
            selection.append(intent.card_id)
    for card_id in selection:
        _hand_card(state, PlayerId.PLAYER, card_id)
    state.pending.selected_card_ids = selection
    return state


@_handles(IntentType.CONFIRM_LEVEL_UP)
def _on_confirm_level_up(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.SELECT_CARDS_FOR_LEVEL_UP)
    selection = state.pending.selected_card_ids
    total = sum(_hand_card(state, PlayerId.PLAYER, cid).value for cid in selection)
    if total < ctx.config.level_up_threshold:
        raise PreconditionViolation(
            f"Selected cards total {total}; you need at least {ctx.config.level_up_threshold}."
        )
    _level_up(state, PlayerId.PLAYER, list(selection))
    state.clear_pending()
    state.phase = Phase.MAIN_PHASE
    return state


# ---------------------------------------------------------------------------
# Abilities
# ---------------------------------------------------------------------------

def _play_ability(state: GameState, player_id: PlayerId, ability) -> None:
    player = state.player(player_id)
    player.ability_hand = [a for a in player.ability_hand if a.id != ability.id]
    player.active_abilities.append(ability)
    state.add_log(LogEvent.ABILITY_PLAYED, player=player_id, ability=ability.effect_tag)


def _draw_ability(state: GameState, player_id: PlayerId, card_id: str, rng: GameRNG) -> None:
    """Pay *card_id* and draw one eligible ability uniformly at random."""
    player = state.player(player_id)
    eligible = eligible_ability_indices(player, state.ability_deck)
    if not eligible:
        raise PreconditionViolation("No eligible abilities remain in the deck.")
    discarded = discard_from_hand(state, player_id, card_id)
    state.add_log(
        LogEvent.CARD_DISCARDED,
        player=player_id,
        card_id=discarded.id,
        value=discarded.value,
        reason="ability_draw",
    )
    ability = state.ability_deck.pop(eligible[rng.random_index(len(eligible))])
    player.ability_hand.append(ability)
    player.abilities_drawn_this_turn += 1
    state.add_log(LogEvent.ABILITY_DRAWN, player=player_id, ability=ability.effect_tag)


@_handles(IntentType.PLAY_ABILITY_FROM_HAND)
def _on_play_ability(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.MAIN_PHASE)
    human = state.human
    ability = human.find_held_ability(intent.ability_id or "")
    if ability is None:
        raise PreconditionViolation("Select an ability from your hand.")
    reason = play_block_reason(human, ability)
    if reason:
        raise PreconditionViolation(reason)
    _play_ability(state, PlayerId.PLAYER, ability)
    return state


@_handles(IntentType.DRAW_ABILITY)
def _on_draw_ability(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.MAIN_PHASE)
    human = state.human
    if not human.power_hand:
        raise PreconditionViolation("You need a card in hand to draw an ability.")
    if human.abilities_drawn_this_turn >= 1:
        raise PreconditionViolation("You can only draw one ability per turn.")
    if len(human.active_abilities) >= ability_capacity(human):
        raise PreconditionViolation("Active ability limit reached.")
    if not eligible_ability_indices(human, state.ability_deck):
        raise PreconditionViolation("No eligible abilities remain in the deck.")

    if intent.card_id is None:
        state.phase = Phase.SELECT_DISCARD_FOR_DRAW
        state.status_message = "Discard a card to draw an ability."
        return state
    _hand_card(state, PlayerId.PLAYER, intent.card_id)
    _draw_ability(state, PlayerId.PLAYER, intent.card_id, ctx.stream("ability_draws", state))
    return state


@_handles(IntentType.ACTIVATE_ABILITY)
def _on_activate_ability(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.MAIN_PHASE)
    ability = state.human.find_active_ability(intent.ability_id or "")
    if ability is None:
        raise PreconditionViolation("Select one of your active abilities.")
    handler = check_activation(state.human, ability)

    state.pending = PendingAction(
        kind=PendingKind.USE_ACTIVE_ABILITY,
        attacker_id=PlayerId.PLAYER,
        target_ability=ability,
    )
    state.add_log(LogEvent.ABILITY_ACTIVATING, player=PlayerId.PLAYER, ability=ability.effect_tag)
    state.phase = handler.discard_phase
    state.status_message = f"Discard a card to use {ability.name}."
    return state


@_handles(IntentType.DISCARD_CARD)
def _on_discard_card(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(
        state,
        Phase.MAIN_PHASE,
        Phase.SELECT_DISCARD_GENERIC,
        Phase.SELECT_DISCARD_FOR_DRAW,
        *ABILITY_PAYMENT_PHASES,
    )

    if state.phase == Phase.MAIN_PHASE and intent.card_id is None:
        state.phase = Phase.SELECT_DISCARD_GENERIC
        state.status_message = "Choose a card to discard."
        return state

    _hand_card(state, PlayerId.PLAYER, intent.card_id)
    card_id = intent.card_id

    if state.phase == Phase.SELECT_DISCARD_FOR_DRAW:
        _draw_ability(state, PlayerId.PLAYER, card_id, ctx.stream("ability_draws", state))
        state.phase = Phase.MAIN_PHASE
        return state

    if state.phase in ABILITY_PAYMENT_PHASES:
        ability = state.pending.target_ability
        if ability is None:
            raise IllegalTransition("no ability awaiting payment")
        handler = pay_and_resolve(
            state, PlayerId.PLAYER, ability, card_id, ctx.stream("effects", state)
        )
        if handler.needs_target and state.human.power_hand:
            state.phase = Phase.SELECT_TARGET_FOR_MODIFICATION
            state.status_message = "Choose a card in your hand to modify."
        else:
            state.clear_pending()
            state.phase = Phase.MAIN_PHASE
        return state

    discarded = discard_from_hand(state, PlayerId.PLAYER, card_id)
    state.add_log(
        LogEvent.CARD_DISCARDED,
        player=PlayerId.PLAYER,
        card_id=discarded.id,
        value=discarded.value,
        reason="manual",
    )
    selected = state.pending.attacking_card
    if selected is not None and selected.id == card_id:
        state.pending.attacking_card = None
    state.phase = Phase.MAIN_PHASE
    return state


@_handles(IntentType.CHOOSE_MODIFICATION_TARGET)
def _on_choose_modification_target(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, Phase.SELECT_TARGET_FOR_MODIFICATION)
    ability = state.pending.target_ability
    if ability is None:
        raise IllegalTransition("no modification pending")
    card = _hand_card(state, PlayerId.PLAYER, intent.card_id)
    modified = modify_card(ability.effect_tag, card)
    state.human.replace_card(modified)
    state.add_log(
        LogEvent.CARD_MODIFIED,
        player=PlayerId.PLAYER,
        ability=ability.effect_tag,
        card_id=modified.id,
        type=modified.type,
        color=modified.color,
    )
    state.clear_pending()
    state.phase = Phase.MAIN_PHASE
    return state


_CANCELLABLE_PHASES = frozenset({
    Phase.SELECT_ATTACK_CARD,
    Phase.SELECT_CARDS_FOR_LEVEL_UP,
    Phase.SELECT_DISCARD_GENERIC,
    Phase.SELECT_DISCARD_FOR_DRAW,
    *ABILITY_PAYMENT_PHASES,
})


@_handles(IntentType.CANCEL_PENDING_ACTION)
def _on_cancel(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    _require_phase(state, *_CANCELLABLE_PHASES)
    state.clear_pending()
    state.phase = Phase.MAIN_PHASE
    state.status_message = "Cancelled."
    return state


# ---------------------------------------------------------------------------
# AI turn
# ---------------------------------------------------------------------------

def _human_can_defend(state: GameState) -> bool:
    human = state.human
    if human.has_card_type(CardType.DEF):
        return True
    return can_vortex_defend(human) and any(c is not None for c in state.vortex)


@_handles(IntentType.AI_TURN_TICK)
def _on_ai_turn_tick(state: GameState, intent: Intent, ctx: TransitionContext) -> GameState:
    """One AI decision burst: draw, level up, draw an ability, play an
    ability, then attack once or end the turn."""
    _require_phase(state, Phase.AI_TURN_LOGIC)
    ai = state.ai
    agent = ctx.agent

    if ai.attacks_performed == 0 and len(ai.power_hand) < get_max_hand_size(ai):
        _refill(state, PlayerId.AI, ctx.stream("piles", state))

    level_cap = min(ctx.config.max_level, state.round)
    if ai.level_ups_performed == 0 and ai.level < level_cap:
        chosen = agent.choose_level_up_cards(list(ai.power_hand), state.round, ai.level) or []
        held = {c.id: c for c in chosen if ai.find_card(c.id) is not None}
        if held and sum(c.value for c in held.values()) >= ctx.config.level_up_threshold:
            _level_up(state, PlayerId.AI, list(held))
            logger.debug("AI levelled up to %d", ai.level)

    if (
        ai.abilities_drawn_this_turn == 0
        and len(ai.active_abilities) < ability_capacity(ai)
        and eligible_ability_indices(ai, state.ability_deck)
    ):
        card = agent.choose_ability_discard(
            list(ai.power_hand), state.round, ai.abilities_drawn_this_turn
        )
        if card is not None and ai.find_card(card.id) is not None:
            _draw_ability(state, PlayerId.AI, card.id, ctx.stream("ability_draws", state))

    for ability in list(ai.ability_hand):
        if play_block_reason(ai, ability) is None:
            _play_ability(state, PlayerId.AI, ability)
            break

    if ai.attacks_performed < max_attacks(ai):
        card = agent.choose_attack_card(
            list(ai.power_hand), state.round, ai.attacks_performed, max_attacks(ai)
        )
        if card is not None and ai.find_card(card.id) is not None and card.type == CardType.ATK:
            _declare_direct_attack(state, PlayerId.AI, card)
            if _human_can_defend(state):
                state.phase = Phase.AWAITING_PLAYER_DEFENSE
                state.status_message = "Defend: choose a defense card or take the hit."
            else:
                state.add_log(LogEvent.NO_DEFENSE, player=PlayerId.PLAYER)
                state.phase = Phase.RESOLVE_DIRECT_COMBAT
            return state

    _end_turn(state)
    return state


# ---------------------------------------------------------------------------
# Engine facade
# ---------------------------------------------------------------------------

class GameEngine:
    """Owns the canonical ``GameState`` and its continuation scheduler.

    Parameters
    ----------
    config:
        Rule constants and pacing.  Defaults to ``EngineConfig()``.
    seed:
        Seed for every random decision in the match.
    agent:
        Decision procedures for the AI seat.  Defaults to
        :class:`TieredHeuristicAgent`.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        seed: int = 0,
        agent: OpponentAgent | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.rng = GameRNG(seed)
        self.agent = agent or TieredHeuristicAgent(self.config.level_up_threshold)
        self.scheduler = ContinuationScheduler()
        self._state = create_initial_state(self.config, self.rng)
        self.last_warning: str | None = None

    # -- queries -------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready projection of the current state."""
        return self._state.model_dump(mode="json")

    # -- dispatch ------------------------------------------------------------

    def dispatch(self, intent: Intent) -> Transition:
        """Apply *intent* and commit the result if it was accepted."""
        result = transition(self._state, intent, self._context())
        self.last_warning = result.warning
        if result.committed:
            self._state = result.state
            for continuation in result.continuations:
                self.scheduler.schedule(continuation)
        return result

    def advance(self, dt: float) -> int:
        """Move the clock forward *dt* seconds, firing due continuations.

        Returns the number of continuations fired (stale ones included).
        """
        until = self.scheduler.now + dt
        fired = 0
        while (continuation := self.scheduler.pop_due(until)) is not None:
            self._fire(continuation)
            fired += 1
        self.scheduler.advance_clock(until)
        return fired

    def run_pending(self, max_steps: int = 10_000) -> int:
        """Fire continuations until none remain, i.e. until the match waits
        for the human (or is over)."""
        fired = 0
        while fired < max_steps:
            continuation = self.scheduler.pop_next()
            if continuation is None:
                break
            self._fire(continuation)
            fired += 1
        return fired

    def _fire(self, continuation: Continuation) -> None:
        if continuation.token != self._state.action_token:
            logger.debug(
                "Dropping stale %s (token %d, now %d)",
                continuation.kind.value, continuation.token, self._state.action_token,
            )
            return
        self.dispatch(continuation.to_intent())

    def _context(self) -> TransitionContext:
        return TransitionContext(config=self.config, rng=self.rng, agent=self.agent)

    # -- convenience intents -------------------------------------------------

    def _send(self, kind: IntentType, **fields: Any) -> Transition:
        return self.dispatch(Intent(kind=kind, **fields))

    def start_game(self) -> Transition:
        return self._send(IntentType.START_GAME)

    def select_character(self, character_id: str) -> Transition:
        return self._send(IntentType.SELECT_CHARACTER, character_id=character_id)

    def select_card(self, card_id: str) -> Transition:
        return self._send(IntentType.SELECT_ATTACK_CARD, card_id=card_id)

    def confirm_attack(self) -> Transition:
        return self._send(IntentType.CONFIRM_DIRECT_ATTACK)

    def choose_defense(self, card_id: str | None = None) -> Transition:
        return self._send(IntentType.CHOOSE_DEFENSE_CARD, card_id=card_id)

    def choose_vortex_slot(self, slot: int, for_defense: bool = False) -> Transition:
        return self._send(IntentType.CHOOSE_VORTEX_SLOT, slot=slot, for_defense=for_defense)

    def activate_ability(self, ability_id: str) -> Transition:
        return self._send(IntentType.ACTIVATE_ABILITY, ability_id=ability_id)

    def play_ability(self, ability_id: str) -> Transition:
        return self._send(IntentType.PLAY_ABILITY_FROM_HAND, ability_id=ability_id)

    def select_level_up_cards(self, card_ids: list[str]) -> Transition:
        return self._send(IntentType.SELECT_CARDS_FOR_LEVEL_UP, card_ids=card_ids)

    def confirm_level_up(self) -> Transition:
        return self._send(IntentType.CONFIRM_LEVEL_UP)

    def discard(self, card_id: str | None = None) -> Transition:
        return self._send(IntentType.DISCARD_CARD, card_id=card_id)

    def choose_modification_target(self, card_id: str) -> Transition:
        return self._send(IntentType.CHOOSE_MODIFICATION_TARGET, card_id=card_id)

    def draw_ability(self, card_id: str | None = None) -> Transition:
        return self._send(IntentType.DRAW_ABILITY, card_id=card_id)

    def end_turn(self) -> Transition:
        return self._send(IntentType.END_TURN)

    def cancel(self) -> Transition:
        return self._send(IntentType.CANCEL_PENDING_ACTION)

    def start_next_round(self) -> Transition:
        return self._send(IntentType.START_NEXT_ROUND)
