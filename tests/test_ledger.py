from equilibrium.ledger import (
    BALANCED_TEXT,
    COLOR_GOLD,
    COLOR_INDIAN_RED,
    COLOR_LAWN_GREEN,
    COLOR_WHITE,
    LEDGER_HEADER,
    ledger_status_lines,
)

def _texts(lines):
    return [text for text, _ in lines]

def test_positive_ledger():
    lines = ledger_status_lines(24, 0)
    texts = _texts(lines)
    assert lines[0] == (LEDGER_HEADER, COLOR_GOLD)
    assert texts[1:5] == [
        "Total Kills: 24",
        "Total Deaths: 0",
        "Kill/Death Differential: 24",
        "Equilibrium Modifier (EM): 2",
    ]
    assert "Damage Bonus: +3.0%" in texts
    assert "Crit Chance Bonus: +1.0%" in texts
    assert "Movement Speed Bonus: +2.0%" in texts
    assert "Max Health Bonus: +1.0%" in texts
    assert "Knockback Resist: +2%" in texts
    assert "Shop Discount: 2%" in texts
    assert len(lines) == 15
    assert all(color == COLOR_LAWN_GREEN for _, color in lines[4:])

def test_negative_ledger():
    lines = ledger_status_lines(0, 13)
    texts = _texts(lines)
    assert "Kill/Death Differential: -13" in texts
    assert "Equilibrium Modifier (EM): -2" in texts
    assert texts[5:] == [
        "Damage Penalty: -4.0%",
        "Damage Reduction: +2.0%",
        "Max Health Penalty: -2.0%",
        "Potion Sickness Duration: +6.0%",
    ]
    assert lines[-1][1] == COLOR_INDIAN_RED

def test_balanced_ledger():
    lines = ledger_status_lines(5, 3)
    assert lines[-1] == (BALANCED_TEXT, COLOR_WHITE)
    assert len(lines) == 6

def test_capped_values_display():
    texts = _texts(ledger_status_lines(12 * 200, 0))
    assert "Max Health Bonus: +25.0%" in texts
    assert "Max Mana Bonus: +50.0%" in texts
    assert "Shop Discount: 99%" in texts
