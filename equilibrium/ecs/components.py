"""
Equilibrium - equilibrium/ecs/components.py
ECS Component Definitions for python-tcod-ecs.
==============================================
Version:     1.0
Stack:       Python 3.11+ | python-tcod-ecs
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

@dataclass
class PlayerIdentity:
    entity_id: int
    name: str
    is_active: bool = True

@dataclass
class KillDeathRecord:
    total_kills: int = 0
    total_deaths: int = 0

@dataclass
class BaseStats:
    """Persistent stat baseline. EffectiveStats is rebuilt from this every tick."""
    life_max: int = 100
    mana_max: int = 20
    defense: int = 0
    crit_chance: int = 4         # percentage points
    max_minions: int = 1
    knockback_resist: float = 1.0
    move_speed: float = 1.0

@dataclass
class EffectiveStats:
    life_max: int = 100
    mana_max: int = 20
    defense: int = 0
    crit_chance: float = 4.0
    max_minions: int = 1
    knockback_resist: float = 1.0
    move_speed: float = 1.0
    damage: float = 1.0          # generic damage multiplier
    endurance: float = 0.0       # incoming damage reduction
    life_regen: int = 0

@dataclass
class NPCProfile:
    name: str
    life_max: int
    damage: int
    town_npc: bool = False
    friendly: bool = False

@dataclass
class CombatVitals:
    hp: int
    max_hp: int
    is_dead: bool = False

@dataclass
class LastInteraction:
    player_id: int # PlayerIdentity.entity_id of the last player to hit this NPC

@dataclass
class Buff:
    buff_id: str
    duration: int # ticks remaining

@dataclass
class ActiveBuffs:
    effects: List[Buff] = field(default_factory=list)
