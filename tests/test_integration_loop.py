"""
Equilibrium - tests/test_integration_loop.py
Kill/death flow through the sandbox host, chronicle and session snapshot.
"""

import tempfile
from pathlib import Path

import pytest

from equilibrium.calculator import BUFF_POTION_SICKNESS
from equilibrium.chronicle import ChronicleReader
from equilibrium.ecs.components import KillDeathRecord, EffectiveStats, CombatVitals, PlayerIdentity
from equilibrium.events import EVT_LEDGER_CONSULTED, EVT_ITEM_CRAFTED
from equilibrium.loop import SimulationLoop, LEDGER_ITEM_ID

def test_kills_raise_equilibrium():
    with tempfile.TemporaryDirectory() as tmpdir:
        chronicle_path = Path(tmpdir) / "chronicle.jsonl"
        sim = SimulationLoop(chronicle_path=chronicle_path)
        sim.open_session()
        hero = sim.spawn_player("Aric")

        for _ in range(24):
            zombie = sim.spawn_npc("zombie")
            assert sim.strike_npc(hero, zombie, 20) is False   # 45 hp, not dead yet
            assert sim.strike_npc(hero, zombie, 30) is True

        # Critters and town NPCs never count
        assert sim.strike_npc(hero, sim.spawn_npc("bunny"), 100) is False
        assert sim.strike_npc(hero, sim.spawn_npc("guide"), 1000) is False

        sim.tick()
        sim.close_session()

        assert hero.components[KillDeathRecord].total_kills == 24
        eff = hero.components[EffectiveStats]
        assert eff.damage == pytest.approx(1.03)
        assert eff.move_speed == pytest.approx(1.02)
        assert eff.crit_chance == pytest.approx(5.0)

        reader = ChronicleReader(chronicle_path)
        assert len(reader.kills("Aric")) == 24
        shifts = reader.modifier_shifts()
        assert [s["payload"]["modifier"]["modifier"] for s in shifts] == [1, 2]

def test_dead_npc_cannot_be_killed_twice():
    with tempfile.TemporaryDirectory() as tmpdir:
        sim = SimulationLoop(chronicle_path=Path(tmpdir) / "chronicle.jsonl")
        hero = sim.spawn_player("Aric")
        slime = sim.spawn_npc("green_slime")
        assert sim.strike_npc(hero, slime, 50) is True
        assert sim.strike_npc(hero, slime, 50) is False
        assert hero.components[KillDeathRecord].total_kills == 1

def test_deaths_apply_penalties():
    with tempfile.TemporaryDirectory() as tmpdir:
        sim = SimulationLoop(chronicle_path=Path(tmpdir) / "chronicle.jsonl")
        hero = sim.spawn_player("Aric")

        for _ in range(13):
            assert sim.damage_player(hero, 10_000) is True
        sim.tick()

        # EM -2: -4% damage, 2% endurance, -2% life
        eff = hero.components[EffectiveStats]
        assert eff.damage == pytest.approx(0.96)
        assert eff.endurance == pytest.approx(0.02)
        assert hero.components[CombatVitals].max_hp == 98

        # Endurance reduces incoming damage: 50 * 0.98 = 49
        hp_before = hero.components[CombatVitals].hp
        assert sim.damage_player(hero, 50) is False
        assert hero.components[CombatVitals].hp == hp_before - 49

        assert sim.apply_buff(hero, BUFF_POTION_SICKNESS, 1000) == 1060
        assert len(ChronicleReader(sim.inscriber.chronicle_path).deaths()) == 13

def test_ledger_price_and_use():
    with tempfile.TemporaryDirectory() as tmpdir:
        sim = SimulationLoop(chronicle_path=Path(tmpdir) / "chronicle.jsonl")
        consulted = []
        sim.bus.subscribe(EVT_LEDGER_CONSULTED, lambda e: consulted.append(e.data["modifier"]))

        hero = sim.spawn_player("Aric")
        assert sim.price_for(hero, LEDGER_ITEM_ID) == 5000
        hero.components[KillDeathRecord].total_kills = 120   # EM 10
        assert sim.price_for(hero, LEDGER_ITEM_ID) == 4500

        lines = sim.use_item(hero, LEDGER_ITEM_ID)
        assert lines[4][0] == "Equilibrium Modifier (EM): 10"
        assert consulted == [10]
        assert sim.use_item(hero, "torch") == []

def test_craft_ledger_emits_event():
    with tempfile.TemporaryDirectory() as tmpdir:
        sim = SimulationLoop(chronicle_path=Path(tmpdir) / "chronicle.jsonl")
        crafted = []
        sim.bus.subscribe(EVT_ITEM_CRAFTED, lambda e: crafted.append(e.target))
        hero = sim.spawn_player("Aric")

        inventory = {"book": 1, "bone": 20}
        assert sim.craft(hero, LEDGER_ITEM_ID, inventory, ["work_bench"]) == LEDGER_ITEM_ID
        assert inventory == {"bone": 5, LEDGER_ITEM_ID: 1}
        assert sim.craft(hero, LEDGER_ITEM_ID, inventory, ["work_bench"]) is None
        assert crafted == [LEDGER_ITEM_ID]

def test_session_save_and_resume():
    with tempfile.TemporaryDirectory() as tmpdir:
        snapshot = Path(tmpdir) / "snapshot.toml"
        sim = SimulationLoop(chronicle_path=Path(tmpdir) / "chronicle.jsonl")
        aric = sim.spawn_player("Aric")
        bryn = sim.spawn_player("Bryn")
        aric.components[KillDeathRecord].total_kills = 1234
        aric.components[KillDeathRecord].total_deaths = 5
        bryn.components[KillDeathRecord].total_deaths = 40
        for _ in range(3):
            sim.tick()
        sim.save_session(snapshot)

        restored = SimulationLoop(chronicle_path=Path(tmpdir) / "chronicle2.jsonl")
        restored.resume_session(snapshot)

        assert restored.clock.tick == 4
        records = {
            p.components[PlayerIdentity].name: p.components[KillDeathRecord]
            for p in restored.players()
        }
        assert records["Aric"] == KillDeathRecord(total_kills=1234, total_deaths=5)
        assert records["Bryn"] == KillDeathRecord(total_kills=0, total_deaths=40)

        # Stats are rebuilt on resume, not stored
        bryn_entity = next(p for p in restored.players() if p.components[PlayerIdentity].name == "Bryn")
        assert bryn_entity.components[EffectiveStats].damage == pytest.approx(1.0 - 0.02 * 4)

        # New players do not collide with restored ids
        assert restored.spawn_player("Cato").components[PlayerIdentity].entity_id == 3

def test_resume_missing_snapshot():
    with tempfile.TemporaryDirectory() as tmpdir:
        sim = SimulationLoop(chronicle_path=Path(tmpdir) / "chronicle.jsonl")
        with pytest.raises(FileNotFoundError):
            sim.resume_session(Path(tmpdir) / "missing.toml")

def test_session_round_trips_quoted_names():
    with tempfile.TemporaryDirectory() as tmpdir:
        snapshot = Path(tmpdir) / "snapshot.toml"
        sim = SimulationLoop(chronicle_path=Path(tmpdir) / "chronicle.jsonl")
        names = ['Aric "the Red"', "C:\\Bryn", "Søren"]
        for i, name in enumerate(names):
            sim.spawn_player(name).components[KillDeathRecord].total_kills = 50 + i
        sim.save_session(snapshot)

        restored = SimulationLoop(chronicle_path=Path(tmpdir) / "chronicle2.jsonl")
        restored.resume_session(snapshot)
        records = {
            p.components[PlayerIdentity].name: p.components[KillDeathRecord].total_kills
            for p in restored.players()
        }
        assert records == {names[0]: 50, names[1]: 51, names[2]: 52}

def test_craft_without_player_identity():
    with tempfile.TemporaryDirectory() as tmpdir:
        sim = SimulationLoop(chronicle_path=Path(tmpdir) / "chronicle.jsonl")
        crafted = []
        sim.bus.subscribe(EVT_ITEM_CRAFTED, lambda e: crafted.append(e.target))

        inventory = {"book": 1, "bone": 15}
        assert sim.craft(sim.registry.new_entity(), LEDGER_ITEM_ID, inventory, ["work_bench"]) is None
        assert inventory == {"book": 1, "bone": 15}
        assert crafted == []
