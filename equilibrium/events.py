"""
Equilibrium - equilibrium/events.py
Event keys, typed event envelope and the pub-sub bus.
=====================================================
Version:     1.0
Stack:       Python 3.11+ | Pydantic v2 | bespoke pub-sub

Architecture notes
------------------
- EventBus is Pydantic v2-typed. Every event is a GameEvent.
- Host systems never reach into another system's state; they emit.
- The chronicle receives every event via wildcard subscription ("*").
- event.source is always the handle of the entity the event is about
  (the player for kill/death/shift events).
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

# ============================================================
# CANONICAL EVENT KEYS
# Never use raw strings. Add new keys here only.
# ============================================================

EVT_NPC_KILLED            = "host.npc_killed"
EVT_KILL_REGISTERED       = "equilibrium.kill_registered"
EVT_KILL_IGNORED          = "equilibrium.kill_ignored"
EVT_PLAYER_DIED           = "equilibrium.player_died"
EVT_MODIFIER_SHIFTED      = "equilibrium.modifier_shifted"
EVT_BUFF_APPLIED          = "equilibrium.buff_applied"
EVT_BUFF_EXPIRED          = "equilibrium.buff_expired"
EVT_LEDGER_CONSULTED      = "equilibrium.ledger_consulted"
EVT_ITEM_CRAFTED          = "host.item_crafted"


# ============================================================
# EVENT MODEL  (Pydantic v2)
# data dict must remain flat + JSON-serializable.
# ============================================================

class GameEvent(BaseModel):
    """Base envelope. The chronicle receives these directly."""
    event_key: str
    source: str
    target: Optional[str] = None
    data: Dict[str, Any] = {}


HandlerFn = Callable[[GameEvent], None]


class EventBus:
    """
    Bespoke pub-sub. Pass instance at construction; no global singleton.

    Wildcard key "*" receives every emitted event (used by the chronicle).
    Per-handler errors are reported to stderr and emission continues.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[HandlerFn]] = {}

    def subscribe(self, event_key: str, handler: HandlerFn) -> None:
        self._subscribers.setdefault(event_key, []).append(handler)

    def unsubscribe(self, event_key: str, handler: HandlerFn) -> None:
        if event_key in self._subscribers:
            self._subscribers[event_key] = [
                h for h in self._subscribers[event_key] if h is not handler
            ]

    def emit(self, event: GameEvent) -> None:
        targets = (
            self._subscribers.get(event.event_key, [])
            + self._subscribers.get("*", [])
        )
        for handler in targets:
            try:
                handler(event)
            except Exception as exc:  # noqa: BLE001
                print(
                    f"[EventBus] Handler error on '{event.event_key}': {exc}",
                    file=sys.stderr,
                )
