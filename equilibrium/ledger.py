"""
Equilibrium - equilibrium/ledger.py
Karmic Ledger status report.
============================
Version:     1.0
Stack:       Python 3.11+

Produces (text, rgb) lines. Rendering is the UI's business; the sandbox
screen prints them with tcod and tests read them directly.
"""

from __future__ import annotations
from typing import List, Tuple

from equilibrium.calculator import compute_modifier, compute_stat_deltas

RGB = Tuple[int, int, int]
StatusLine = Tuple[str, RGB]

COLOR_GOLD: RGB = (255, 215, 0)
COLOR_LIGHT_GREEN: RGB = (144, 238, 144)
COLOR_LIGHT_CORAL: RGB = (240, 128, 128)
COLOR_CYAN: RGB = (0, 255, 255)
COLOR_LAWN_GREEN: RGB = (124, 252, 0)
COLOR_INDIAN_RED: RGB = (205, 92, 92)
COLOR_WHITE: RGB = (255, 255, 255)

LEDGER_HEADER = "--- Equilibrium Status ---"
BALANCED_TEXT = "Your stats are in balance."


def modifier_color(em: int) -> RGB:
    if em > 0:
        return COLOR_LAWN_GREEN
    if em < 0:
        return COLOR_INDIAN_RED
    return COLOR_WHITE


def ledger_status_lines(kills: int, deaths: int) -> List[StatusLine]:
    """Full ledger readout for a kill/death record."""
    em = compute_modifier(kills, deaths)
    deltas = compute_stat_deltas(em)
    color = modifier_color(em)

    lines: List[StatusLine] = [
        (LEDGER_HEADER, COLOR_GOLD),
        (f"Total Kills: {kills}", COLOR_LIGHT_GREEN),
        (f"Total Deaths: {deaths}", COLOR_LIGHT_CORAL),
        (f"Kill/Death Differential: {kills - deaths}", COLOR_CYAN),
        (f"Equilibrium Modifier (EM): {em}", color),
    ]

    if em > 0:
        body = [
            f"Damage Bonus: +{deltas.damage * 100:.1f}%",
            f"Crit Chance Bonus: +{deltas.crit * 100:.1f}%",
            f"Movement Speed Bonus: +{deltas.move_speed * 100:.1f}%",
            f"Max Health Bonus: +{deltas.max_life * 100:.1f}%",
            f"Max Mana Bonus: +{deltas.max_mana * 100:.1f}%",
            f"Life Regen Bonus: +{deltas.life_regen}",
            f"Defense Bonus: +{deltas.defense}",
            f"Knockback Resist: +{deltas.knockback_resist * 100:.0f}%",
            f"Bonus Max Minions: +{deltas.max_minions}",
            f"Shop Discount: {deltas.shop_discount * 100:.0f}%",
        ]
    elif em < 0:
        body = [
            f"Damage Penalty: -{-deltas.damage * 100:.1f}%",
            f"Damage Reduction: +{deltas.endurance * 100:.1f}%",
            f"Max Health Penalty: -{-deltas.max_life * 100:.1f}%",
            f"Potion Sickness Duration: +{deltas.buff_duration * 100:.1f}%",
        ]
    else:
        body = [BALANCED_TEXT]

    lines.extend((text, color) for text in body)
    return lines
