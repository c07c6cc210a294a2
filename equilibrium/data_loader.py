"""
Equilibrium - equilibrium/data_loader.py
JIT loaders for TOML content definitions powered by Pydantic.
=============================================================
Version:     1.0
Stack:       Python 3.11+ | Pydantic v2 | tomllib

Content only: NPCs, player baselines, items, recipes. The equilibrium
coefficients are not data-driven; they live in equilibrium/calculator.py.
"""

import tomllib
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict

# ================================================================================
# SCHEMAS
# ================================================================================

class NPCDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    name: str
    life_max: int
    damage: int = 0
    town_npc: bool = False
    friendly: bool = False

class PlayerDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    name: str
    life_max: int = 100
    mana_max: int = 20
    defense: int = 0
    crit_chance: int = 4
    max_minions: int = 1

class ItemDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    name: str
    description: str = ""
    width: int = 16
    height: int = 16
    use_time: int = 0
    use_animation: int = 0
    use_style: Optional[str] = None
    value: int = 0              # copper coins
    rarity: str = "white"
    auto_reuse: bool = False

class IngredientDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    item: str
    amount: int = Field(default=1, ge=1)

class RecipeDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    result: str
    result_amount: int = 1
    ingredients: List[IngredientDef]
    stations: List[str] = Field(default_factory=list)

# ================================================================================
# LOADERS & CACHE (JIT)
# ================================================================================

_NPC_CACHE: Dict[str, NPCDef] = {}
_PLAYER_CACHE: Dict[str, PlayerDef] = {}
_ITEM_CACHE: Dict[str, ItemDef] = {}
_RECIPE_CACHE: Optional[List[RecipeDef]] = None


DATA_DIR = Path(__file__).parent.parent / "data"

def _load_toml(path: Path, kind: str) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"{kind} definition not found: {path}")
    with open(path, "rb") as f:
        return tomllib.load(f)

def get_npc_def(npc_id: str) -> NPCDef:
    """JIT loads an NPC definition from TOML."""
    if npc_id in _NPC_CACHE:
        return _NPC_CACHE[npc_id]

    npc = NPCDef(**_load_toml(DATA_DIR / "npcs" / f"{npc_id}.toml", "NPC"))
    _NPC_CACHE[npc_id] = npc
    return npc

def get_player_def(player_id: str) -> PlayerDef:
    """JIT loads a player baseline from TOML."""
    if player_id in _PLAYER_CACHE:
        return _PLAYER_CACHE[player_id]

    player = PlayerDef(**_load_toml(DATA_DIR / "players" / f"{player_id}.toml", "Player"))
    _PLAYER_CACHE[player_id] = player
    return player

def get_item_def(item_id: str) -> ItemDef:
    """JIT loads an item definition from TOML."""
    if item_id in _ITEM_CACHE:
        return _ITEM_CACHE[item_id]

    item = ItemDef(**_load_toml(DATA_DIR / "items" / f"{item_id}.toml", "Item"))
    _ITEM_CACHE[item_id] = item
    return item

def get_recipes() -> List[RecipeDef]:
    """Loads all recipes from TOML. Cached globally."""
    global _RECIPE_CACHE
    if _RECIPE_CACHE is not None:
        return _RECIPE_CACHE

    _RECIPE_CACHE = []
    path = DATA_DIR / "recipes"
    if not path.exists():
        return []

    for file in sorted(path.glob("*.toml")):
        with open(file, "rb") as f:
            _RECIPE_CACHE.append(RecipeDef(**tomllib.load(f)))

    return _RECIPE_CACHE
