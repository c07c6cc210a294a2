"""
Equilibrium - equilibrium/ecs/systems.py
ECS Systems: the host side of the player hooks.
===============================================
Version:     1.0
Stack:       Python 3.11+ | python-tcod-ecs

Architecture notes
------------------
- Systems are plain functions operating on a tcod.ecs.Registry.
- They reach the mod only through EquilibriumPlayer hooks and communicate
  via EventBus.
- Per tick: reset_effects_system, then buff_tick_system.
"""

from __future__ import annotations
from typing import Optional

import tcod.ecs
from equilibrium.calculator import StatDeltaBundle
from equilibrium.ecs.components import (
    PlayerIdentity,
    KillDeathRecord,
    BaseStats,
    EffectiveStats,
    NPCProfile,
    CombatVitals,
    LastInteraction,
    ActiveBuffs,
    Buff,
)
from equilibrium.events import (
    EventBus,
    GameEvent,
    EVT_NPC_KILLED,
    EVT_BUFF_APPLIED,
    EVT_BUFF_EXPIRED,
)
from equilibrium.player import EquilibriumPlayer, ShoppingSettings

# ============================================================
# LOOKUPS
# ============================================================

def get_mod_player(player: tcod.ecs.Entity, bus: Optional[EventBus] = None) -> Optional[EquilibriumPlayer]:
    """Binds the hook adapter to a player's KillDeathRecord."""
    if KillDeathRecord not in player.components:
        return None
    name = player.components[PlayerIdentity].name if PlayerIdentity in player.components else str(player)
    return EquilibriumPlayer(player.components[KillDeathRecord], name=name, bus=bus)

def find_player(registry: tcod.ecs.Registry, player_id: int) -> Optional[tcod.ecs.Entity]:
    for entity in registry.Q.all_of(components=[PlayerIdentity]):
        if entity.components[PlayerIdentity].entity_id == player_id:
            return entity
    return None

# ============================================================
# STAT SYSTEMS
# ============================================================

def apply_stat_deltas(base: BaseStats, bundle: StatDeltaBundle) -> EffectiveStats:
    """
    Rebuilds transient stats from the baseline plus one bundle.
    Life and mana bonuses truncate toward zero, as the host's int cast does.
    """
    return EffectiveStats(
        life_max=base.life_max + int(base.life_max * bundle.max_life),
        mana_max=base.mana_max + int(base.mana_max * bundle.max_mana),
        defense=base.defense + bundle.defense,
        crit_chance=base.crit_chance + bundle.crit * 100,
        max_minions=base.max_minions + bundle.max_minions,
        knockback_resist=base.knockback_resist + bundle.knockback_resist,
        move_speed=base.move_speed + bundle.move_speed,
        damage=1.0 + bundle.damage,
        endurance=bundle.endurance,
        life_regen=bundle.life_regen,
    )

def reset_effects_system(registry: tcod.ecs.Registry) -> None:
    """Resets every player's EffectiveStats, then applies the current bundle."""
    for entity in registry.Q.all_of(components=[KillDeathRecord]):
        base = entity.components.get(BaseStats, BaseStats())
        mod_player = get_mod_player(entity)
        entity.components[EffectiveStats] = apply_stat_deltas(base, mod_player.on_tick())

        # Current life follows a shrinking maximum
        if CombatVitals in entity.components:
            vitals = entity.components[CombatVitals]
            vitals.max_hp = entity.components[EffectiveStats].life_max
            vitals.hp = min(vitals.hp, vitals.max_hp)

# ============================================================
# KILL / DEATH SYSTEMS
# ============================================================

def npc_kill_system(registry: tcod.ecs.Registry, npc: tcod.ecs.Entity, bus: Optional[EventBus] = None) -> bool:
    """
    Credits an NPC death to the last player who hit it.
    Returns True when the player's kill counter moved.
    """
    if NPCProfile not in npc.components:
        return False
    profile = npc.components[NPCProfile]

    if bus:
        bus.emit(GameEvent(event_key=EVT_NPC_KILLED, source=profile.name))

    if LastInteraction not in npc.components:
        return False

    killer = find_player(registry, npc.components[LastInteraction].player_id)
    if killer is None or not killer.components[PlayerIdentity].is_active:
        return False

    mod_player = get_mod_player(killer, bus)
    if mod_player is None:
        return False

    before = mod_player.record.total_kills
    return mod_player.on_kill(profile) > before

def player_death_system(player: tcod.ecs.Entity, bus: Optional[EventBus] = None) -> bool:
    mod_player = get_mod_player(player, bus)
    if mod_player is None:
        return False
    mod_player.on_death()
    return True

# ============================================================
# BUFF SYSTEMS
# ============================================================

def add_buff_system(player: tcod.ecs.Entity, buff_id: str, duration: int, bus: Optional[EventBus] = None) -> int:
    """Applies a buff after the duration hook. Returns the final duration."""
    mod_player = get_mod_player(player)
    if mod_player is not None:
        duration = mod_player.on_buff_duration_query(buff_id, duration)

    if ActiveBuffs not in player.components:
        player.components[ActiveBuffs] = ActiveBuffs()
    player.components[ActiveBuffs].effects.append(Buff(buff_id=buff_id, duration=duration))

    if bus:
        name = player.components[PlayerIdentity].name if PlayerIdentity in player.components else str(player)
        bus.emit(GameEvent(
            event_key=EVT_BUFF_APPLIED,
            source=name,
            data={"buff": buff_id, "duration": duration}
        ))
    return duration

def buff_tick_system(registry: tcod.ecs.Registry, bus: Optional[EventBus] = None) -> None:
    """Decrements duration of all active buffs and purges expired ones."""
    for entity in registry.Q.all_of(components=[ActiveBuffs]):
        active = entity.components[ActiveBuffs]
        remaining = []
        for buff in active.effects:
            buff.duration -= 1
            if buff.duration > 0:
                remaining.append(buff)
            elif bus:
                name = entity.components[PlayerIdentity].name if PlayerIdentity in entity.components else str(entity)
                bus.emit(GameEvent(event_key=EVT_BUFF_EXPIRED, source=name, data={"buff": buff.buff_id}))
        active.effects = remaining

def has_buff(entity: tcod.ecs.Entity, buff_id: str) -> bool:
    if ActiveBuffs not in entity.components:
        return False
    return any(b.buff_id == buff_id for b in entity.components[ActiveBuffs].effects)

def buff_remaining(entity: tcod.ecs.Entity, buff_id: str) -> int:
    """Ticks left on the longest instance of buff_id, 0 when absent."""
    if ActiveBuffs not in entity.components:
        return 0
    return max((b.duration for b in entity.components[ActiveBuffs].effects if b.buff_id == buff_id), default=0)

# ============================================================
# SHOP SYSTEMS
# ============================================================

def shop_price_system(player: tcod.ecs.Entity, base_price: int) -> int:
    """Price a player pays for an item listed at base_price, rounded to whole coins."""
    settings = ShoppingSettings()
    mod_player = get_mod_player(player)
    if mod_player is not None:
        mod_player.on_shop_price_query(settings)
    return max(0, round(base_price * settings.price_adjustment))
