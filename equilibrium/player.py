"""
Equilibrium - equilibrium/player.py
Player hook adapter: the host's per-player callbacks as an explicit interface.
=============================================================================
Version:     1.0
Stack:       Python 3.11+ | bespoke EventBus

Architecture notes
------------------
- ModPlayerHooks names every callback the host invokes on a player.
  EquilibriumPlayer is its only implementation.
- The adapter owns exactly one KillDeathRecord. Counters change only in
  on_kill() and on_death().
- on_tick() returns a fresh bundle. The host resets transient stats every
  tick before reapplying it, so nothing is accumulated here.
- Persistence goes through the host's TagCompound under the keys
  TAG_TOTAL_KILLS / TAG_TOTAL_DEATHS.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from equilibrium.calculator import (
    StatDeltaBundle,
    adjust_buff_duration,
    apply_shop_discount,
    compute_modifier,
    compute_stat_deltas,
    qualifies_as_kill,
)
from equilibrium.ecs.components import KillDeathRecord, NPCProfile
from equilibrium.events import (
    EventBus,
    GameEvent,
    EVT_KILL_REGISTERED,
    EVT_KILL_IGNORED,
    EVT_PLAYER_DIED,
    EVT_MODIFIER_SHIFTED,
)

TAG_TOTAL_KILLS = "totalKills"
TAG_TOTAL_DEATHS = "totalDeaths"


class TagCompound(dict):
    """Host key-value save container."""

    def get_int(self, key: str) -> int:
        """Missing keys read as 0, like the host's typed getters."""
        return int(self.get(key, 0))


@dataclass
class ShoppingSettings:
    """Mutable shop context handed to the price hook. 1.0 == list price."""
    price_adjustment: float = 1.0


class ModPlayerHooks:
    """
    Protocol for a per-player mod.
    The host calls these; default implementations are no-ops.
    """

    def on_kill(self, npc: NPCProfile) -> int:
        return 0

    def on_death(self) -> int:
        return 0

    def on_tick(self) -> StatDeltaBundle:
        return StatDeltaBundle()

    def on_buff_duration_query(self, buff_id: str, duration: int) -> int:
        return duration

    def on_shop_price_query(self, settings: ShoppingSettings) -> None:
        pass

    def save_data(self, tag: TagCompound) -> None:
        pass

    def load_data(self, tag: TagCompound) -> None:
        pass


class EquilibriumPlayer(ModPlayerHooks):
    """
    Attaches the Equilibrium Modifier to one player.

    Usage:
        record = KillDeathRecord()
        mod = EquilibriumPlayer(record, name="Aric", bus=bus)
        mod.on_kill(npc_profile)
        bundle = mod.on_tick()
    """

    def __init__(self, record: KillDeathRecord, name: str = "player", bus: Optional[EventBus] = None) -> None:
        self.record = record
        self.name = name
        self.bus = bus

    @property
    def modifier(self) -> int:
        return compute_modifier(self.record.total_kills, self.record.total_deaths)

    # ----------------------------------------------------------
    # Counter events
    # ----------------------------------------------------------

    def on_kill(self, npc: NPCProfile) -> int:
        if not qualifies_as_kill(npc.town_npc, npc.friendly, npc.life_max, npc.damage):
            self._emit(EVT_KILL_IGNORED, target=npc.name, data={"total_kills": self.record.total_kills})
            return self.record.total_kills

        before = self.modifier
        self.record.total_kills += 1
        self._emit(EVT_KILL_REGISTERED, target=npc.name, data={"total_kills": self.record.total_kills})
        self._emit_shift(before)
        return self.record.total_kills

    def on_death(self) -> int:
        before = self.modifier
        self.record.total_deaths += 1
        self._emit(EVT_PLAYER_DIED, data={"total_deaths": self.record.total_deaths})
        self._emit_shift(before)
        return self.record.total_deaths

    # ----------------------------------------------------------
    # Stat queries
    # ----------------------------------------------------------

    def on_tick(self) -> StatDeltaBundle:
        return compute_stat_deltas(self.modifier)

    def on_buff_duration_query(self, buff_id: str, duration: int) -> int:
        return adjust_buff_duration(buff_id, duration, self.modifier)

    def on_shop_price_query(self, settings: ShoppingSettings) -> None:
        settings.price_adjustment = apply_shop_discount(settings.price_adjustment, self.modifier)

    # ----------------------------------------------------------
    # Persistence
    # ----------------------------------------------------------

    def save_data(self, tag: TagCompound) -> None:
        tag[TAG_TOTAL_KILLS] = self.record.total_kills
        tag[TAG_TOTAL_DEATHS] = self.record.total_deaths

    def load_data(self, tag: TagCompound) -> None:
        self.record.total_kills = tag.get_int(TAG_TOTAL_KILLS)
        self.record.total_deaths = tag.get_int(TAG_TOTAL_DEATHS)

    # ----------------------------------------------------------
    # Bus wiring
    # ----------------------------------------------------------

    def _emit(self, event_key: str, target: Optional[str] = None, data: Optional[Dict[str, Any]] = None) -> None:
        if self.bus is None:
            return
        self.bus.emit(GameEvent(event_key=event_key, source=self.name, target=target, data=data or {}))

    def _emit_shift(self, before: int) -> None:
        after = self.modifier
        if after != before:
            self._emit(EVT_MODIFIER_SHIFTED, data={"previous": before, "modifier": after})
