"""
Equilibrium - ui/screens.py
Sandbox screens: the player HUD and the Karmic Ledger overlay.
"""
from typing import List, Tuple
import tcod
from tcod import libtcodpy

from ui.states import BaseState, Engine, TICKS_PER_SECOND
from ui.renderer import Renderer
from equilibrium.calculator import BUFF_POTION_SICKNESS
from equilibrium.ecs.components import PlayerIdentity, KillDeathRecord, EffectiveStats, CombatVitals
from equilibrium.ecs.systems import get_mod_player, has_buff, buff_remaining
from equilibrium.events import (
    GameEvent,
    EVT_KILL_REGISTERED,
    EVT_KILL_IGNORED,
    EVT_PLAYER_DIED,
    EVT_MODIFIER_SHIFTED,
    EVT_BUFF_APPLIED,
)
from equilibrium.ledger import StatusLine
from equilibrium.loop import LEDGER_ITEM_ID

POTION_SICKNESS_TICKS = 60 * TICKS_PER_SECOND
MESSAGE_LOG_SIZE = 8

# key -> NPC template slain outright by that key
SLAY_KEYS = {
    tcod.event.KeySym.Z: "zombie",
    tcod.event.KeySym.G: "green_slime",
    tcod.event.KeySym.B: "bunny",
    tcod.event.KeySym.T: "guide",
}


class SandboxState(BaseState):
    """Main screen. Drives kills, deaths and potions against one player."""

    def __init__(self, engine: Engine):
        super().__init__(engine)
        self.messages: List[Tuple[str, Tuple[int, int, int]]] = []
        self.player = self.sim.players()[0] if self.sim.players() else self.sim.spawn_player()
        self.sim.tick()

        for key in (EVT_KILL_REGISTERED, EVT_KILL_IGNORED, EVT_PLAYER_DIED, EVT_MODIFIER_SHIFTED, EVT_BUFF_APPLIED):
            self.sim.bus.subscribe(key, self._on_event)

    def _on_event(self, event: GameEvent) -> None:
        if event.event_key == EVT_KILL_REGISTERED:
            self._log(f"Slew {event.target}. Kills: {event.data['total_kills']}", (144, 238, 144))
        elif event.event_key == EVT_KILL_IGNORED:
            self._log(f"{event.target} does not count.", (150, 150, 150))
        elif event.event_key == EVT_PLAYER_DIED:
            self._log(f"You died. Deaths: {event.data['total_deaths']}", (240, 128, 128))
        elif event.event_key == EVT_MODIFIER_SHIFTED:
            self._log(f"Equilibrium shifts: {event.data['previous']} -> {event.data['modifier']}", (255, 215, 0))
        elif event.event_key == EVT_BUFF_APPLIED:
            self._log(f"{event.data['buff']} for {event.data['duration']} ticks", (200, 200, 255))

    def _log(self, text: str, color: Tuple[int, int, int]) -> None:
        self.messages.append((text, color))
        self.messages = self.messages[-MESSAGE_LOG_SIZE:]

    # ----------------------------------------------------------
    # Commands
    # ----------------------------------------------------------

    def slay(self, npc_id: str) -> bool:
        npc = self.sim.spawn_npc(npc_id)
        credited = self.sim.strike_npc(self.player, npc, npc.components[CombatVitals].max_hp)
        npc.clear()
        self.sim.tick()
        return credited

    def die(self) -> None:
        self.sim.damage_player(self.player, self.player.components[CombatVitals].max_hp * 100)
        self.sim.tick()

    def drink_potion(self) -> int:
        if has_buff(self.player, BUFF_POTION_SICKNESS):
            self._log("Still potion sick.", (150, 150, 150))
            return 0
        return self.sim.apply_buff(self.player, BUFF_POTION_SICKNESS, POTION_SICKNESS_TICKS)

    def open_ledger(self) -> None:
        lines = self.sim.use_item(self.player, LEDGER_ITEM_ID)
        self.engine.change_state(LedgerState(self.engine, self, lines))

    # ----------------------------------------------------------
    # Rendering / input
    # ----------------------------------------------------------

    def on_render(self, renderer: Renderer) -> None:
        console = renderer.root_console
        ident = self.player.components[PlayerIdentity]
        record = self.player.components[KillDeathRecord]
        vitals = self.player.components[CombatVitals]
        eff = self.player.components[EffectiveStats]
        em = get_mod_player(self.player).modifier

        console.print(renderer.width // 2, 1, "Equilibrium Sandbox", fg=(255, 255, 0), alignment=libtcodpy.CENTER)
        console.print(2, 3, f"{ident.name}  HP: {vitals.hp}/{vitals.max_hp}", fg=(0, 255, 0))
        console.print(2, 4, f"Kills: {record.total_kills}  Deaths: {record.total_deaths}  EM: {em:+d}")

        y = 6
        console.print(2, y, "--- EFFECTIVE STATS ---", fg=(255, 255, 0))
        console.print(2, y + 1, f"Damage:     x{eff.damage:.3f}")
        console.print(2, y + 2, f"Crit:       {eff.crit_chance:.1f}%")
        console.print(2, y + 3, f"Move Speed: x{eff.move_speed:.2f}")
        console.print(2, y + 4, f"Endurance:  {eff.endurance * 100:.0f}%")
        console.print(2, y + 5, f"Mana:       {eff.mana_max}")
        console.print(2, y + 6, f"Defense:    {eff.defense}  Regen: {eff.life_regen}  Minions: {eff.max_minions}")
        console.print(2, y + 7, f"Ledger price: {self.sim.price_for(self.player, LEDGER_ITEM_ID)} copper")
        sickness = buff_remaining(self.player, BUFF_POTION_SICKNESS)
        if sickness:
            console.print(2, y + 8, f"Potion sickness: {sickness / TICKS_PER_SECOND:.0f}s", fg=(240, 128, 128))

        renderer.print_lines(2, y + 10, self.messages)

        console.print(1, renderer.height - 2, "[Z]ombie [G]reen slime [B]unny [T]own NPC  [D]ie [P]otion [L]edger [S]ave [ESC] Quit", fg=(150, 150, 150))

    def ev_keydown(self, event: tcod.event.KeyDown) -> None:
        if event.sym in SLAY_KEYS:
            self.slay(SLAY_KEYS[event.sym])
        elif event.sym == tcod.event.KeySym.D:
            self.die()
        elif event.sym == tcod.event.KeySym.P:
            self.drink_potion()
        elif event.sym == tcod.event.KeySym.L:
            self.open_ledger()
        elif event.sym == tcod.event.KeySym.S:
            self.sim.save_session()
            self._log("Session saved.", (200, 200, 200))
        elif event.sym == tcod.event.KeySym.ESCAPE:
            self.sim.close_session()
            self.engine.running = False


class LedgerState(BaseState):
    """Karmic Ledger overlay. Time stands still while it is open."""
    pauses_simulation = True

    def __init__(self, engine: Engine, parent_state: SandboxState, lines: List[StatusLine]):
        super().__init__(engine)
        self.parent_state = parent_state
        self.lines = lines

    def on_render(self, renderer: Renderer) -> None:
        self.parent_state.on_render(renderer)

        win_w, win_h = 50, 20
        x = (renderer.width - win_w) // 2
        y = (renderer.height - win_h) // 2

        renderer.root_console.draw_frame(
            x, y, win_w, win_h,
            "Karmic Ledger", clear=True, fg=(255, 215, 0), bg=(0, 0, 0)
        )
        renderer.print_lines(x + 2, y + 2, self.lines, max_rows=win_h - 5)
        renderer.root_console.print(x + 2, y + win_h - 2, "[ESC/L] to close", fg=(200, 200, 200))

    def ev_keydown(self, event: tcod.event.KeyDown) -> None:
        if event.sym in (tcod.event.KeySym.ESCAPE, tcod.event.KeySym.L):
            self.engine.change_state(self.parent_state)
