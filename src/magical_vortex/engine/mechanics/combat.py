"""Combat resolution.

Implements the two damage pipelines:

    direct:  effective atk  vs  defense card   (opposite: atk - def,
                                                same:     atk - floor(def/2))
    vortex:  effective atk  vs  vortex card    (same:     atk + vortex,
                                                opposite: atk - vortex)

A positive result damages the defender, a negative one recoils onto the
attacker, zero is an exact block.  The target's Magic Wall shield then
absorbs what it can.  Both resolvers are pure: they read the player
snapshots and return a :class:`CombatResult` without touching them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from magical_vortex.engine.mechanics.modifiers import apply_incoming_halving, get_modified_value

if TYPE_CHECKING:
    from magical_vortex.engine.core.entities import Card, Player
    from magical_vortex.ir.cards import PlayerId


class CombatMode(str, Enum):
    DIRECT = "DIRECT"
    VORTEX = "VORTEX"


@dataclass(frozen=True)
class CombatResult:
    """Outcome of one exchange.

    Attributes
    ----------
    combat_value:
        Signed result before shields (positive hits the defender, negative
        recoils onto the attacker).
    target_id:
        Who takes the damage, or ``None`` on an exact block.
    damage:
        Life the target loses after its shield absorbed its share.
    absorbed:
        Damage soaked up by the target's shield.
    shield_remaining:
        The target's shield after absorption; ``None`` once cleared (or if
        there never was one).
    """

    mode: CombatMode
    attack_value: int
    opposing_value: int | None
    """Defense value (direct) or Vortex card value (vortex); ``None`` when
    undefended."""

    same_color: bool | None
    combat_value: int
    target_id: PlayerId | None
    damage: int
    absorbed: int
    shield_remaining: int | None

    @property
    def is_recoil(self) -> bool:
        return self.combat_value < 0

    @property
    def is_exact_block(self) -> bool:
        return self.combat_value == 0


def effective_attack_value(attack_card: Card, attacker: Player, defender: Player) -> int:
    """Attacker's buffs first, then the defender's colour halving."""
    value = get_modified_value(attack_card, attacker)
    return apply_incoming_halving(value, attack_card, defender)


def absorb_with_shield(damage: int, shield: int | None) -> tuple[int, int, int | None]:
    """Run *damage* through a Magic Wall.

    Returns ``(damage_after, absorbed, shield_after)``.  A shield that
    reaches 0 comes back as ``None`` so it can be re-cast.
    """
    if not shield or damage <= 0:
        return damage, 0, shield or None
    absorbed = min(shield, damage)
    remaining = shield - absorbed
    return damage - absorbed, absorbed, remaining if remaining > 0 else None


def _finish(
    mode: CombatMode,
    attack_value: int,
    opposing_value: int | None,
    same_color: bool | None,
    combat_value: int,
    attacker: Player,
    defender: Player,
) -> CombatResult:
    if combat_value > 0:
        target = defender
    elif combat_value < 0:
        target = attacker
    else:
        return CombatResult(
            mode=mode,
            attack_value=attack_value,
            opposing_value=opposing_value,
            same_color=same_color,
            combat_value=0,
            target_id=None,
            damage=0,
            absorbed=0,
            shield_remaining=None,
        )

    damage, absorbed, shield_after = absorb_with_shield(
        abs(combat_value), target.permanent_shield
    )
    return CombatResult(
        mode=mode,
        attack_value=attack_value,
        opposing_value=opposing_value,
        same_color=same_color,
        combat_value=combat_value,
        target_id=target.id,
        damage=damage,
        absorbed=absorbed,
        shield_remaining=shield_after,
    )


def resolve_direct(
    attack_card: Card,
    defense_card: Card | None,
    attacker: Player,
    defender: Player,
) -> CombatResult:
    """Resolve an attack card against an optional defense card."""
    attack_value = effective_attack_value(attack_card, attacker, defender)

    if defense_card is None:
        return _finish(
            CombatMode.DIRECT, attack_value, None, None, attack_value, attacker, defender
        )

    defense_value = get_modified_value(defense_card, defender)
    same_color = attack_card.color == defense_card.color
    if same_color:
        combat_value = attack_value - math.floor(defense_value / 2)
    else:
        combat_value = attack_value - defense_value

    return _finish(
        CombatMode.DIRECT, attack_value, defense_value, same_color, combat_value,
        attacker, defender,
    )


def resolve_vortex(
    attack_card: Card,
    vortex_card: Card,
    attacker: Player,
    defender: Player,
) -> CombatResult:
    """Resolve an attack routed through a Vortex card.

    Same colour amplifies, opposite colour destabilises (and may recoil).
    The Vortex card's printed value is used; no buffs apply to it.
    """
    attack_value = effective_attack_value(attack_card, attacker, defender)
    vortex_value = vortex_card.value
    same_color = attack_card.color == vortex_card.color
    if same_color:
        combat_value = attack_value + vortex_value
    else:
        combat_value = attack_value - vortex_value

    return _finish(
        CombatMode.VORTEX, attack_value, vortex_value, same_color, combat_value,
        attacker, defender,
    )
