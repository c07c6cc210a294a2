import pytest
import tcod.ecs
from equilibrium.calculator import BUFF_POTION_SICKNESS, compute_stat_deltas
from equilibrium.ecs.components import (
    PlayerIdentity,
    KillDeathRecord,
    BaseStats,
    EffectiveStats,
    NPCProfile,
    CombatVitals,
    LastInteraction,
    ActiveBuffs,
)
from equilibrium.ecs.systems import (
    apply_stat_deltas,
    reset_effects_system,
    npc_kill_system,
    player_death_system,
    add_buff_system,
    buff_tick_system,
    has_buff,
    shop_price_system,
    find_player,
)
from equilibrium.events import EventBus, EVT_NPC_KILLED, EVT_BUFF_EXPIRED

def _player(registry, entity_id=1, kills=0, deaths=0, active=True):
    ent = registry.new_entity()
    ent.components[PlayerIdentity] = PlayerIdentity(entity_id=entity_id, name=f"P{entity_id}", is_active=active)
    ent.components[KillDeathRecord] = KillDeathRecord(total_kills=kills, total_deaths=deaths)
    ent.components[BaseStats] = BaseStats()
    ent.components[CombatVitals] = CombatVitals(hp=100, max_hp=100)
    return ent

def _npc(registry, killer_id=None, **profile):
    npc = registry.new_entity()
    npc.components[NPCProfile] = NPCProfile(**{"name": "Zombie", "life_max": 45, "damage": 14, **profile})
    if killer_id is not None:
        npc.components[LastInteraction] = LastInteraction(player_id=killer_id)
    return npc

def test_apply_positive_deltas():
    # EM 10
    eff = apply_stat_deltas(BaseStats(), compute_stat_deltas(10))
    assert eff.damage == pytest.approx(1.15)
    assert eff.crit_chance == pytest.approx(9.0)     # 4 + 5 points
    assert eff.move_speed == pytest.approx(1.1)
    assert eff.life_max == 105
    assert eff.mana_max == 22
    assert eff.life_regen == 2
    assert eff.defense == 2
    assert eff.max_minions == 2
    assert eff.knockback_resist == pytest.approx(1.1)
    assert eff.endurance == 0

def test_apply_negative_deltas():
    # EM -10
    eff = apply_stat_deltas(BaseStats(life_max=400), compute_stat_deltas(-10))
    assert eff.damage == pytest.approx(0.8)
    assert eff.endurance == pytest.approx(0.1)
    assert eff.life_max == 360
    assert eff.crit_chance == pytest.approx(4.0)

def test_reset_effects_does_not_accumulate():
    registry = tcod.ecs.Registry()
    hero = _player(registry, kills=120)

    reset_effects_system(registry)
    first = hero.components[EffectiveStats]
    reset_effects_system(registry)
    reset_effects_system(registry)
    assert hero.components[EffectiveStats] == first
    assert hero.components[EffectiveStats].defense == 2

def test_reset_effects_clamps_current_life():
    registry = tcod.ecs.Registry()
    hero = _player(registry, deaths=240)  # EM -20 -> -20% life

    reset_effects_system(registry)
    assert hero.components[CombatVitals].max_hp == 80
    assert hero.components[CombatVitals].hp == 80

def test_kill_credited_to_last_interaction():
    registry = tcod.ecs.Registry()
    bus = EventBus()
    keys = []
    bus.subscribe("*", lambda e: keys.append(e.event_key))
    hero = _player(registry, entity_id=7)

    assert npc_kill_system(registry, _npc(registry, killer_id=7), bus) is True
    assert hero.components[KillDeathRecord].total_kills == 1
    assert keys[0] == EVT_NPC_KILLED

def test_kill_without_attribution_is_ignored():
    registry = tcod.ecs.Registry()
    hero = _player(registry, entity_id=1)

    assert npc_kill_system(registry, _npc(registry)) is False
    assert npc_kill_system(registry, _npc(registry, killer_id=99)) is False
    assert hero.components[KillDeathRecord].total_kills == 0

def test_kill_by_inactive_player_is_ignored():
    registry = tcod.ecs.Registry()
    ghost = _player(registry, entity_id=3, active=False)
    assert npc_kill_system(registry, _npc(registry, killer_id=3)) is False
    assert ghost.components[KillDeathRecord].total_kills == 0

def test_farming_guard_applies_through_system():
    registry = tcod.ecs.Registry()
    hero = _player(registry, entity_id=1)
    assert npc_kill_system(registry, _npc(registry, killer_id=1, name="Bunny", life_max=5, damage=0)) is False
    assert npc_kill_system(registry, _npc(registry, killer_id=1, name="Guide", town_npc=True)) is False
    assert hero.components[KillDeathRecord].total_kills == 0

def test_player_death_system():
    registry = tcod.ecs.Registry()
    hero = _player(registry)
    assert player_death_system(hero) is True
    assert hero.components[KillDeathRecord].total_deaths == 1

    bystander = registry.new_entity()
    assert player_death_system(bystander) is False

def test_potion_sickness_extended_when_negative():
    registry = tcod.ecs.Registry()
    hero = _player(registry, deaths=13)  # EM -2
    assert add_buff_system(hero, BUFF_POTION_SICKNESS, 1000) == 1060
    assert add_buff_system(hero, "ironskin", 1000) == 1000
    assert len(hero.components[ActiveBuffs].effects) == 2

def test_buff_tick_expires():
    registry = tcod.ecs.Registry()
    bus = EventBus()
    expired = []
    bus.subscribe(EVT_BUFF_EXPIRED, lambda e: expired.append(e.data["buff"]))
    hero = _player(registry)
    add_buff_system(hero, BUFF_POTION_SICKNESS, 2)

    buff_tick_system(registry, bus)
    assert has_buff(hero, BUFF_POTION_SICKNESS)
    buff_tick_system(registry, bus)
    assert not has_buff(hero, BUFF_POTION_SICKNESS)
    assert expired == [BUFF_POTION_SICKNESS]

def test_shop_price_system():
    registry = tcod.ecs.Registry()
    assert shop_price_system(_player(registry, entity_id=1, kills=120), 5000) == 4500
    assert shop_price_system(_player(registry, entity_id=2, deaths=120), 5000) == 5000
    assert shop_price_system(_player(registry, entity_id=3, kills=12 * 500), 5000) == 50

def test_find_player():
    registry = tcod.ecs.Registry()
    hero = _player(registry, entity_id=4)
    assert find_player(registry, 4) == hero
    assert find_player(registry, 5) is None
