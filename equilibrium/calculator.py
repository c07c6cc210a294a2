"""
Equilibrium - equilibrium/calculator.py
Equilibrium Calculator: kill/death differential and derived stat deltas.
========================================================================
Version:     1.0
Stack:       Python 3.11+ | stdlib only
Status:      Canonical. Pure functions, no state.

Architecture notes
------------------
- EM = floor((kills - deaths) / EM_DIVISOR). Floored, not truncated:
  a differential of -1 yields EM -1.
- compute_stat_deltas() is branch-free over the sign of EM: every term is
  scaled by max(0, em) or max(0, -em), so the inactive side is zero.
- Fractional fields are fractions of 1 (0.03 == +3%). life_regen, defense
  and max_minions are whole numbers.
- Nothing here mutates host stats. The stat-mutation layer lives in
  equilibrium/ecs/systems.py.

Design Variables (canonical table; not overridable at runtime)
--------------------------------------------------------------
  EM_DIVISOR                 12
  KILL_MIN_MAX_HEALTH        10     -- a kill needs max health strictly above
  positive EM   damage 1.5%/em, crit 0.5%/em, move 1%/em,
                max life 0.5%/em (cap 25%), max mana 1%/em (cap 50%),
                life regen em//5, defense em//4, minions em//10,
                knockback resist 1%/em (cap 50%), shop 1%/em (cap 99%)
  negative EM   damage -2%/a, endurance 1%/a, max life -1%/a (cap 25%),
                potion sickness duration +3%/a
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict

# ============================================================
# DESIGN VARIABLE DEFAULTS
# ============================================================

EM_DIVISOR: int = 12
KILL_MIN_MAX_HEALTH: int = 10

# Positive EM (per point)
DAMAGE_PER_EM: float = 0.015
CRIT_PER_EM: float = 0.005
MOVE_SPEED_PER_EM: float = 0.01
MAX_LIFE_PER_EM: float = 0.005
MAX_LIFE_BONUS_CAP: float = 0.25
MAX_MANA_PER_EM: float = 0.01
MAX_MANA_BONUS_CAP: float = 0.50
KNOCKBACK_RESIST_PER_EM: float = 0.01
KNOCKBACK_RESIST_CAP: float = 0.50
SHOP_DISCOUNT_PER_EM: float = 0.01
SHOP_DISCOUNT_CAP: float = 0.99
LIFE_REGEN_EM_STEP: int = 5
DEFENSE_EM_STEP: int = 4
MINION_EM_STEP: int = 10

# Negative EM (per point of -EM)
DAMAGE_PENALTY_PER_EM: float = 0.02
ENDURANCE_PER_EM: float = 0.01
MAX_LIFE_PENALTY_PER_EM: float = 0.01
MAX_LIFE_PENALTY_CAP: float = 0.25
POTION_SICKNESS_PER_EM: float = 0.03

# Buff identifiers understood by the duration hook.
BUFF_POTION_SICKNESS = "potion_sickness"


# ============================================================
# OUTPUT BUNDLE
# ============================================================

@dataclass(frozen=True)
class StatDeltaBundle:
    """
    Stat deltas for a single EM evaluation. Immutable; no identity.

    buff_duration is the fractional extension applied to potion sickness.
    shop_discount is subtracted from the host's price adjustment.
    """
    damage: float = 0.0
    crit: float = 0.0
    move_speed: float = 0.0
    endurance: float = 0.0
    max_life: float = 0.0
    max_mana: float = 0.0
    life_regen: int = 0
    defense: int = 0
    knockback_resist: float = 0.0
    max_minions: int = 0
    buff_duration: float = 0.0
    shop_discount: float = 0.0

    @property
    def is_balanced(self) -> bool:
        return all(getattr(self, f.name) == 0 for f in fields(self))

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# ============================================================
# CORE FUNCTIONS
# ============================================================

def compute_modifier(kills: int, deaths: int) -> int:
    """Return the Equilibrium Modifier for a kill/death record."""
    return (kills - deaths) // EM_DIVISOR


def qualifies_as_kill(is_town_entity: bool, is_friendly: bool, max_health: int, damage: int) -> bool:
    """
    Farming guard. Town NPCs, friendly NPCs, critters (max health <= 10)
    and harmless entities (damage <= 0) never count.
    """
    return (
        not is_town_entity
        and not is_friendly
        and max_health > KILL_MIN_MAX_HEALTH
        and damage > 0
    )


def compute_stat_deltas(em: int) -> StatDeltaBundle:
    """Map an EM value onto the canonical delta table."""
    pos = max(0, em)
    neg = max(0, -em)

    return StatDeltaBundle(
        damage=DAMAGE_PER_EM * pos - DAMAGE_PENALTY_PER_EM * neg,
        crit=CRIT_PER_EM * pos,
        move_speed=MOVE_SPEED_PER_EM * pos,
        endurance=ENDURANCE_PER_EM * neg,
        max_life=min(MAX_LIFE_BONUS_CAP, MAX_LIFE_PER_EM * pos)
                 - min(MAX_LIFE_PENALTY_CAP, MAX_LIFE_PENALTY_PER_EM * neg),
        max_mana=min(MAX_MANA_BONUS_CAP, MAX_MANA_PER_EM * pos),
        life_regen=pos // LIFE_REGEN_EM_STEP,
        defense=pos // DEFENSE_EM_STEP,
        knockback_resist=min(KNOCKBACK_RESIST_CAP, KNOCKBACK_RESIST_PER_EM * pos),
        max_minions=pos // MINION_EM_STEP,
        buff_duration=POTION_SICKNESS_PER_EM * neg,
        shop_discount=min(SHOP_DISCOUNT_CAP, SHOP_DISCOUNT_PER_EM * pos),
    )


def compute_equilibrium(kills: int, deaths: int) -> StatDeltaBundle:
    return compute_stat_deltas(compute_modifier(kills, deaths))


def adjust_buff_duration(buff_id: str, duration: int, em: int) -> int:
    """
    Extend potion sickness while EM is negative. Any other buff, or a
    non-negative EM, passes through unchanged.
    """
    if buff_id != BUFF_POTION_SICKNESS or em >= 0:
        return duration
    extension = compute_stat_deltas(em).buff_duration
    return duration + int(duration * extension)


def apply_shop_discount(price_adjustment: float, em: int) -> float:
    """Subtract the shop discount from a host price-adjustment scalar."""
    if em <= 0:
        return price_adjustment
    return price_adjustment - compute_stat_deltas(em).shop_discount
