"""Game mechanics for the Magical Vortex engine.

Re-exports the primary functions from each mechanics module for convenience.

Usage::

    from magical_vortex.engine.mechanics import (
        resolve_direct, resolve_vortex,
        get_modified_value, get_max_life, get_max_hand_size,
        refill_hand, discard_from_hand, replace_vortex_card,
    )
"""

# -- combat ------------------------------------------------------------------
from .combat import (
    CombatMode,
    CombatResult,
    absorb_with_shield,
    effective_attack_value,
    resolve_direct,
    resolve_vortex,
)

# -- modifiers ---------------------------------------------------------------
from .modifiers import (
    ability_capacity,
    apply_incoming_halving,
    can_vortex_attack,
    can_vortex_defend,
    eligible_ability_indices,
    get_max_hand_size,
    get_max_life,
    get_modified_value,
    is_affinity_compatible,
    is_drawable,
    max_attacks,
    play_block_reason,
)

# -- card piles --------------------------------------------------------------
from .card_piles import (
    deal_opening,
    discard_from_hand,
    draw_cards,
    recycle_discard,
    refill_hand,
    replace_vortex_card,
)

__all__ = [
    # combat
    "CombatMode",
    "CombatResult",
    "absorb_with_shield",
    "effective_attack_value",
    "resolve_direct",
    "resolve_vortex",
    # modifiers
    "ability_capacity",
    "apply_incoming_halving",
    "can_vortex_attack",
    "can_vortex_defend",
    "eligible_ability_indices",
    "get_max_hand_size",
    "get_max_life",
    "get_modified_value",
    "is_affinity_compatible",
    "is_drawable",
    "max_attacks",
    "play_block_reason",
    # card piles
    "deal_opening",
    "discard_from_hand",
    "draw_cards",
    "recycle_discard",
    "refill_hand",
    "replace_vortex_card",
]
