"""
Equilibrium - ui/states.py
Screen states and the real-time driver that ticks the sandbox simulation.
========================================================================
The host game advances at 60 ticks per second; buff durations and potion
sickness are measured in those ticks. The Engine converts wall-clock time
between frames into simulation ticks, so timed effects run out while the
player is idle, not only when a command is issued.
"""

from __future__ import annotations
import time
from typing import Any
import tcod

from ui.renderer import Renderer
from equilibrium.loop import SimulationLoop

# ============================================================
# DESIGN VARIABLE DEFAULTS
# ============================================================

TICKS_PER_SECOND: int = 60
MAX_TICKS_PER_FRAME: int = 30   # a stalled frame drops its backlog past this


class BaseState(tcod.event.EventDispatch[Any]):
    """
    A sandbox screen.
    Receives tcod events through dispatch() and draws in on_render().
    States with pauses_simulation set freeze the clock while active.
    """
    pauses_simulation: bool = False

    def __init__(self, engine: "Engine"):
        super().__init__()
        self.engine = engine

    @property
    def sim(self) -> SimulationLoop:
        return self.engine.sim

    def on_render(self, renderer: Renderer) -> None:
        pass


class Engine:
    """
    Front end: owns the Renderer, the SimulationLoop and the active state.
    """
    def __init__(self, renderer: Renderer, sim: SimulationLoop, initial_state_cls: type[BaseState], *args: Any):
        self.renderer = renderer
        self.sim = sim
        self.running = True
        self._pending_ticks = 0.0
        self.active_state: BaseState = initial_state_cls(self, *args)

    def change_state(self, new_state: BaseState) -> None:
        self.active_state = new_state

    # ----------------------------------------------------------
    # Simulation clock
    # ----------------------------------------------------------

    def advance(self, ticks: int) -> int:
        """Runs up to `ticks` simulation ticks. Returns how many ran."""
        if ticks <= 0 or self.active_state.pauses_simulation:
            return 0
        for _ in range(ticks):
            self.sim.tick()
        return ticks

    def advance_seconds(self, elapsed: float) -> int:
        """Converts elapsed wall-clock seconds into whole ticks; fractions carry over."""
        self._pending_ticks += max(0.0, elapsed) * TICKS_PER_SECOND
        whole = int(self._pending_ticks)
        self._pending_ticks -= whole
        return self.advance(min(whole, MAX_TICKS_PER_FRAME))

    def run(self) -> None:
        """Main loop. Waits at most one tick for input so the clock keeps moving."""
        with tcod.context.new_terminal(
            self.renderer.width,
            self.renderer.height,
            title=self.renderer.title,
            vsync=True,
        ) as context:
            self.renderer.context = context
            last = time.perf_counter()

            while self.running:
                now = time.perf_counter()
                self.advance_seconds(now - last)
                last = now

                self.renderer.clear()
                self.active_state.on_render(self.renderer)
                self.renderer.present(context)

                for event in tcod.event.wait(timeout=1.0 / TICKS_PER_SECOND):
                    context.convert_event(event)

                    if isinstance(event, tcod.event.Quit):
                        self.sim.close_session()
                        self.running = False
                        break

                    self.active_state.dispatch(event)
