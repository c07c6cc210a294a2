"""
Equilibrium - equilibrium/chronicle.py
Chronicle: append-only journal of kills, deaths and modifier shifts.
====================================================================
Version:     1.0
Stack:       Python 3.11+ | stdlib json | bespoke EventBus

Architecture notes
------------------
- The chronicle is a PASSIVE wildcard subscriber. It never emits events.
- Append-only JSONL. Inscribed entries are immutable after write.
- Significance gate (int 1-5): events below CHRONICLE_SIGNIFICANCE_MIN
  are discarded silently.
- Game time (era/cycle/tick) is injected via GameTimestamp. The chronicle
  never reads the system clock.

Significance Scoring Reference (CHRONICLE_SIGNIFICANCE_MIN = 2)
----------------------------------------------------------------
  1 - noise (ignored kills, buff expiry, raw host kill notifications)
  2 - routine (registered kills, buffs applied, crafting, ledger use)
  3 - notable (modifier shift)
  4 - significant (player death; modifier shift across zero)

Session Markers
---------------
  "chronicle.session_opened" and "chronicle.session_closed" are inscribed
  unconditionally via open_session() / close_session().
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional

from equilibrium.events import (
    GameEvent,
    EventBus,
    EVT_NPC_KILLED,
    EVT_KILL_REGISTERED,
    EVT_KILL_IGNORED,
    EVT_PLAYER_DIED,
    EVT_MODIFIER_SHIFTED,
    EVT_BUFF_APPLIED,
    EVT_BUFF_EXPIRED,
    EVT_LEDGER_CONSULTED,
    EVT_ITEM_CRAFTED,
)


# ============================================================
# DESIGN VARIABLE DEFAULTS
# Change here or override via ChronicleInscriber arguments.
# ============================================================

CHRONICLE_SIGNIFICANCE_MIN: int = 2

_SIGNIFICANCE_TABLE: Dict[str, int] = {
    EVT_NPC_KILLED:        1,
    EVT_KILL_IGNORED:      1,
    EVT_BUFF_EXPIRED:      1,

    EVT_KILL_REGISTERED:   2,
    EVT_BUFF_APPLIED:      2,
    EVT_LEDGER_CONSULTED:  2,
    EVT_ITEM_CRAFTED:      2,

    EVT_MODIFIER_SHIFTED:  3,

    EVT_PLAYER_DIED:       4,
}


# ============================================================
# GAME CLOCK
# ============================================================

@dataclass
class GameTimestamp:
    """
    Game time used in chronicle entries.

    era:   world-age label
    cycle: in-world day or session arc, 1-indexed
    tick:  engine tick within cycle, 1-indexed
    """
    era: str = "Recent"
    cycle: int = 1
    tick: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"era": self.era, "cycle": self.cycle, "tick": self.tick}

    def advance_tick(self) -> "GameTimestamp":
        """Return a new timestamp with tick incremented by 1."""
        return GameTimestamp(era=self.era, cycle=self.cycle, tick=self.tick + 1)


# ============================================================
# CHRONICLE ENTRY  (immutable after construction)
# ============================================================

@dataclass(frozen=True)
class ChronicleEntry:
    event_id: str                       # UUID4 string
    timestamp: Dict[str, Any]           # {era, cycle, tick}
    actor_handle: str                   # player or NPC name
    payload: Dict[str, Any]             # {event_type, verb, object, modifier}
    significance: int                   # 1-5

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-safe dict for JSONL write."""
        return {
            "event_id":     self.event_id,
            "timestamp":    self.timestamp,
            "actor_handle": self.actor_handle,
            "payload":      self.payload,
            "significance": self.significance,
        }


# ============================================================
# PAYLOAD BUILDER
# ============================================================

_VERBS: Dict[str, str] = {
    EVT_NPC_KILLED:       "was_slain",
    EVT_KILL_REGISTERED:  "slew",
    EVT_KILL_IGNORED:     "slew_unrecorded",
    EVT_PLAYER_DIED:      "died",
    EVT_MODIFIER_SHIFTED: "shifted_equilibrium",
    EVT_BUFF_APPLIED:     "received_buff",
    EVT_BUFF_EXPIRED:     "lost_buff",
    EVT_LEDGER_CONSULTED: "consulted_ledger",
    EVT_ITEM_CRAFTED:     "crafted",
}

def build_payload(event: GameEvent) -> Dict[str, Any]:
    """
    Normalize a GameEvent into {event_type, verb, object, modifier}.
    "object" is the event target when there is one, else the source.
    """
    return {
        "event_type": event.event_key,
        "verb": _VERBS.get(event.event_key, "occurred"),
        "object": event.target or event.source,
        "modifier": dict(event.data),
    }

def score_significance(event: GameEvent) -> int:
    """
    Return significance score (int 1-5) for an event.
    A modifier shift that crosses or lands on zero is raised to 4.
    """
    base = _SIGNIFICANCE_TABLE.get(event.event_key, 1)

    if event.event_key == EVT_MODIFIER_SHIFTED:
        previous = event.data.get("previous", 0)
        current = event.data.get("modifier", 0)
        if previous * current <= 0:
            base = max(base, 4)

    return base


# ============================================================
# CHRONICLE INSCRIBER
# ============================================================

class ChronicleInscriber:
    """
    Wildcard subscriber that inscribes qualifying events to JSONL.

    Usage:
        bus = EventBus()
        inscriber = ChronicleInscriber(bus, Path("sessions/chronicle.jsonl"), GameTimestamp())
        inscriber.open_session()
        # ... game loop ...
        inscriber.close_session()
    """

    def __init__(
        self,
        bus: EventBus,
        chronicle_path: Path,
        clock: GameTimestamp,
        significance_min: int = CHRONICLE_SIGNIFICANCE_MIN,
    ) -> None:
        self.bus = bus
        self.chronicle_path = chronicle_path
        self.clock = clock
        self.significance_min = significance_min

        self.chronicle_path.parent.mkdir(parents=True, exist_ok=True)
        bus.subscribe("*", self._on_event)

    def open_session(self) -> None:
        marker = GameEvent(
            event_key="chronicle.session_opened",
            source="system",
            data={"clock": self.clock.to_dict()},
        )
        self._inscribe(marker, significance=5)

    def close_session(self) -> None:
        marker = GameEvent(
            event_key="chronicle.session_closed",
            source="system",
            data={"clock": self.clock.to_dict()},
        )
        self._inscribe(marker, significance=5)

    def _on_event(self, event: GameEvent) -> None:
        significance = score_significance(event)
        if significance < self.significance_min:
            return
        self._inscribe(event, significance=significance)

    def _inscribe(self, event: GameEvent, significance: int) -> ChronicleEntry:
        entry = ChronicleEntry(
            event_id=str(uuid.uuid4()),
            timestamp=self.clock.to_dict(),
            actor_handle=event.source,
            payload=build_payload(event),
            significance=significance,
        )
        with open(self.chronicle_path, "a", encoding="utf-8") as fh:
            fh.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")
        return entry


# ============================================================
# CHRONICLE READER  (read-only)
# ============================================================

class ChronicleReader:
    """Read-only query interface for a chronicle.jsonl file."""

    def __init__(self, chronicle_path: Path) -> None:
        self.chronicle_path = chronicle_path

    def all_entries(self) -> List[Dict[str, Any]]:
        if not self.chronicle_path.exists():
            return []
        entries = []
        with open(self.chronicle_path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    entries.append(json.loads(line))
        return entries

    def by_event_type(self, event_type: str) -> List[Dict[str, Any]]:
        return [
            e for e in self.all_entries()
            if e.get("payload", {}).get("event_type") == event_type
        ]

    def by_actor(self, actor_handle: str) -> List[Dict[str, Any]]:
        return [e for e in self.all_entries() if e.get("actor_handle") == actor_handle]

    def kills(self, actor_handle: Optional[str] = None) -> List[Dict[str, Any]]:
        entries = self.by_event_type(EVT_KILL_REGISTERED)
        if actor_handle is not None:
            entries = [e for e in entries if e.get("actor_handle") == actor_handle]
        return entries

    def deaths(self) -> List[Dict[str, Any]]:
        return self.by_event_type(EVT_PLAYER_DIED)

    def modifier_shifts(self) -> List[Dict[str, Any]]:
        return self.by_event_type(EVT_MODIFIER_SHIFTED)

    def session_markers(self) -> List[Dict[str, Any]]:
        return [
            e for e in self.all_entries()
            if e.get("payload", {}).get("event_type", "").startswith("chronicle.session")
        ]
