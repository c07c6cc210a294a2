"""
Equilibrium - equilibrium/loop.py
Host sandbox: wires the ECS registry, EventBus, chronicle and mod hooks.
=======================================================================
Version:     1.0
Stack:       Python 3.11+ | python-tcod-ecs | tomllib

Plays the host engine's role: spawns players and NPCs, routes damage,
kills and deaths to the systems, runs the per-tick stat reset, and
round-trips each player's TagCompound through a TOML session snapshot.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, List, Dict

import tcod.ecs

from equilibrium.chronicle import ChronicleInscriber, GameTimestamp
from equilibrium.crafting import RecipeBook
from equilibrium.data_loader import get_npc_def, get_player_def, get_item_def
from equilibrium.ecs.components import (
    PlayerIdentity,
    KillDeathRecord,
    BaseStats,
    EffectiveStats,
    NPCProfile,
    CombatVitals,
    LastInteraction,
)
from equilibrium.ecs.systems import (
    get_mod_player,
    reset_effects_system,
    buff_tick_system,
    npc_kill_system,
    player_death_system,
    add_buff_system,
    shop_price_system,
)
from equilibrium.events import EventBus, GameEvent, EVT_LEDGER_CONSULTED, EVT_ITEM_CRAFTED
from equilibrium.ledger import StatusLine, ledger_status_lines
from equilibrium.player import TagCompound

LEDGER_ITEM_ID = "karmic_ledger"


class SimulationLoop:
    """
    Core executor for the sandbox.
    Wires the EventBus, Registry, ChronicleInscriber and RecipeBook.
    """
    def __init__(self, chronicle_path: Optional[Path] = None):
        if chronicle_path is None:
            chronicle_path = Path("sessions/chronicle.jsonl")

        self.registry = tcod.ecs.Registry()
        self.bus = EventBus()
        self.clock = GameTimestamp(era="Recent", cycle=1, tick=1)
        self.inscriber = ChronicleInscriber(bus=self.bus, chronicle_path=chronicle_path, clock=self.clock)
        self.recipes = RecipeBook.from_data()
        self._next_player_id = 1

    def open_session(self) -> None:
        self.inscriber.open_session()

    def close_session(self) -> None:
        self.inscriber.close_session()

    # ----------------------------------------------------------
    # Spawning
    # ----------------------------------------------------------

    def spawn_player(self, name: Optional[str] = None, template: str = "default", entity_id: Optional[int] = None) -> tcod.ecs.Entity:
        pdef = get_player_def(template)
        if entity_id is None:
            entity_id = self._next_player_id
        self._next_player_id = max(self._next_player_id, entity_id + 1)

        player = self.registry.new_entity()
        player.components[PlayerIdentity] = PlayerIdentity(entity_id=entity_id, name=name or pdef.name)
        player.components[KillDeathRecord] = KillDeathRecord()
        player.components[BaseStats] = BaseStats(
            life_max=pdef.life_max,
            mana_max=pdef.mana_max,
            defense=pdef.defense,
            crit_chance=pdef.crit_chance,
            max_minions=pdef.max_minions,
        )
        player.components[CombatVitals] = CombatVitals(hp=pdef.life_max, max_hp=pdef.life_max)
        player.components[EffectiveStats] = EffectiveStats()
        return player

    def spawn_npc(self, npc_id: str) -> tcod.ecs.Entity:
        ndef = get_npc_def(npc_id)
        npc = self.registry.new_entity()
        npc.components[NPCProfile] = NPCProfile(
            name=ndef.name,
            life_max=ndef.life_max,
            damage=ndef.damage,
            town_npc=ndef.town_npc,
            friendly=ndef.friendly,
        )
        npc.components[CombatVitals] = CombatVitals(hp=ndef.life_max, max_hp=ndef.life_max)
        return npc

    def players(self) -> List[tcod.ecs.Entity]:
        return list(self.registry.Q.all_of(components=[PlayerIdentity, KillDeathRecord]))

    # ----------------------------------------------------------
    # Tick
    # ----------------------------------------------------------

    def tick(self) -> None:
        """Advance the simulation by one engine tick."""
        self.clock = self.clock.advance_tick()
        self.inscriber.clock = self.clock

        # 1. Reset transient stats and reapply equilibrium deltas
        reset_effects_system(self.registry)

        # 2. Buff decay
        buff_tick_system(self.registry, self.bus)

    # ----------------------------------------------------------
    # Combat routing
    # ----------------------------------------------------------

    def strike_npc(self, player: tcod.ecs.Entity, npc: tcod.ecs.Entity, amount: int) -> bool:
        """
        Player hits an NPC. Records the player as last interaction and
        resolves the kill when life reaches zero. Returns True on a credited kill.
        """
        if CombatVitals not in npc.components or PlayerIdentity not in player.components:
            return False
        vitals = npc.components[CombatVitals]
        if vitals.is_dead:
            return False

        npc.components[LastInteraction] = LastInteraction(player_id=player.components[PlayerIdentity].entity_id)
        vitals.hp -= max(0, amount)
        if vitals.hp > 0:
            return False

        vitals.is_dead = True
        return npc_kill_system(self.registry, npc, self.bus)

    def damage_player(self, player: tcod.ecs.Entity, amount: int) -> bool:
        """
        Applies incoming damage reduced by endurance. Returns True if the
        player died; life is then restored to the current maximum.
        """
        if CombatVitals not in player.components:
            return False
        endurance = player.components[EffectiveStats].endurance if EffectiveStats in player.components else 0.0
        taken = max(0, int(amount * (1.0 - endurance)))

        vitals = player.components[CombatVitals]
        vitals.hp -= taken
        if vitals.hp > 0:
            return False

        player_death_system(player, self.bus)
        vitals.hp = vitals.max_hp
        return True

    def apply_buff(self, player: tcod.ecs.Entity, buff_id: str, duration: int) -> int:
        return add_buff_system(player, buff_id, duration, self.bus)

    def price_for(self, player: tcod.ecs.Entity, item_id: str) -> int:
        return shop_price_system(player, get_item_def(item_id).value)

    # ----------------------------------------------------------
    # Items
    # ----------------------------------------------------------

    def craft(self, player: tcod.ecs.Entity, result: str, inventory: Dict[str, int], stations: List[str]) -> Optional[str]:
        if PlayerIdentity not in player.components:
            return None
        crafted = self.recipes.craft(result, inventory, stations)
        if crafted is not None:
            self.bus.emit(GameEvent(
                event_key=EVT_ITEM_CRAFTED,
                source=player.components[PlayerIdentity].name,
                target=crafted,
            ))
        return crafted

    def use_item(self, player: tcod.ecs.Entity, item_id: str) -> List[StatusLine]:
        """Uses an item. Only the Karmic Ledger has an effect: its status readout."""
        if item_id != LEDGER_ITEM_ID or KillDeathRecord not in player.components:
            return []
        record = player.components[KillDeathRecord]
        mod_player = get_mod_player(player)
        self.bus.emit(GameEvent(
            event_key=EVT_LEDGER_CONSULTED,
            source=mod_player.name,
            data={"modifier": mod_player.modifier},
        ))
        return ledger_status_lines(record.total_kills, record.total_deaths)

    # ----------------------------------------------------------
    # Persistence
    # ----------------------------------------------------------

    def save_session(self, snapshot_path: Optional[Path] = None) -> None:
        """Writes the clock and every player's tag compound to TOML."""
        if snapshot_path is None:
            snapshot_path = Path("sessions/equilibrium_snapshot.toml")

        snapshot_path.parent.mkdir(parents=True, exist_ok=True)

        lines = []
        lines.append("[world]")
        # json string literals are valid TOML basic strings
        lines.append(f"era = {json.dumps(self.clock.era, ensure_ascii=False)}")
        lines.append(f"cycle = {self.clock.cycle}")
        lines.append(f"tick = {self.clock.tick}")
        lines.append("")

        for player in self.players():
            ident = player.components[PlayerIdentity]
            tag = TagCompound()
            get_mod_player(player).save_data(tag)

            lines.append("[[players]]")
            lines.append(f"id = {ident.entity_id}")
            lines.append(f"name = {json.dumps(ident.name, ensure_ascii=False)}")
            for key, value in tag.items():
                lines.append(f"{key} = {value}")
            lines.append("")

        with open(snapshot_path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines))

    def resume_session(self, snapshot_path: Optional[Path] = None) -> None:
        """Restores players and clock from a snapshot written by save_session."""
        import tomllib

        if snapshot_path is None:
            snapshot_path = Path("sessions/equilibrium_snapshot.toml")

        if not snapshot_path.exists():
            raise FileNotFoundError(f"Cannot resume, missing {snapshot_path}")

        with open(snapshot_path, "rb") as f:
            data = tomllib.load(f)

        wdata = data.get("world", {})
        self.clock = GameTimestamp(era=wdata.get("era", "Recent"), cycle=wdata.get("cycle", 1), tick=wdata.get("tick", 1))
        self.inscriber.clock = self.clock

        self.registry = tcod.ecs.Registry()
        self._next_player_id = 1
        for pdata in data.get("players", []):
            player = self.spawn_player(name=pdata["name"], entity_id=pdata["id"])
            tag = TagCompound({k: v for k, v in pdata.items() if k not in ("id", "name")})
            get_mod_player(player).load_data(tag)

        reset_effects_system(self.registry)
        self.open_session()
