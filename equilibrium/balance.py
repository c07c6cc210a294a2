"""
Equilibrium - equilibrium/balance.py
Vectorized sweep of the equilibrium delta table.
================================================
Version:     1.0
Stack:       Python 3.11+ | numpy

sweep_stat_deltas() mirrors compute_stat_deltas() over an array of EM
values so the whole table can be inspected at once. Run this module
directly for a balance report.
"""

from __future__ import annotations
from typing import Dict, Iterable, List

import numpy as np

from equilibrium import calculator as calc

_CAPS: Dict[str, float] = {
    "max_mana": calc.MAX_MANA_BONUS_CAP,
    "knockback_resist": calc.KNOCKBACK_RESIST_CAP,
    "shop_discount": calc.SHOP_DISCOUNT_CAP,
}


def sweep_stat_deltas(em_values: Iterable[int]) -> Dict[str, np.ndarray]:
    """Column per StatDeltaBundle field, row per EM value."""
    em = np.asarray(list(em_values), dtype=np.int64)
    pos = np.maximum(0, em)
    neg = np.maximum(0, -em)

    return {
        "em": em,
        "damage": calc.DAMAGE_PER_EM * pos - calc.DAMAGE_PENALTY_PER_EM * neg,
        "crit": calc.CRIT_PER_EM * pos,
        "move_speed": calc.MOVE_SPEED_PER_EM * pos,
        "endurance": calc.ENDURANCE_PER_EM * neg,
        "max_life": np.minimum(calc.MAX_LIFE_BONUS_CAP, calc.MAX_LIFE_PER_EM * pos)
                    - np.minimum(calc.MAX_LIFE_PENALTY_CAP, calc.MAX_LIFE_PENALTY_PER_EM * neg),
        "max_mana": np.minimum(calc.MAX_MANA_BONUS_CAP, calc.MAX_MANA_PER_EM * pos),
        "life_regen": np.floor_divide(pos, calc.LIFE_REGEN_EM_STEP),
        "defense": np.floor_divide(pos, calc.DEFENSE_EM_STEP),
        "knockback_resist": np.minimum(calc.KNOCKBACK_RESIST_CAP, calc.KNOCKBACK_RESIST_PER_EM * pos),
        "max_minions": np.floor_divide(pos, calc.MINION_EM_STEP),
        "buff_duration": calc.POTION_SICKNESS_PER_EM * neg,
        "shop_discount": np.minimum(calc.SHOP_DISCOUNT_CAP, calc.SHOP_DISCOUNT_PER_EM * pos),
    }


def cap_violations(sweep: Dict[str, np.ndarray]) -> List[str]:
    """Names of fields that are non-finite or break their cap anywhere."""
    bad = []
    for name, column in sweep.items():
        if not np.all(np.isfinite(column)):
            bad.append(name)
    for name, cap in _CAPS.items():
        if np.any(sweep[name] > cap):
            bad.append(name)
    life = sweep["max_life"]
    if np.any(life > calc.MAX_LIFE_BONUS_CAP) or np.any(life < -calc.MAX_LIFE_PENALTY_CAP):
        bad.append("max_life")
    return bad


if __name__ == "__main__":
    sample = [-100, -25, -10, -2, -1, 0, 1, 2, 10, 25, 50, 100, 1000]
    table = sweep_stat_deltas(sample)
    columns = [c for c in table if c != "em"]
    print("em".rjust(6) + "".join(c[:10].rjust(12) for c in columns))
    for row, value in enumerate(table["em"]):
        print(f"{value:6d}" + "".join(f"{float(table[c][row]):12.3f}" for c in columns))
    print(f"\nCap violations: {cap_violations(sweep_stat_deltas(range(-1000, 1001))) or 'none'}")
