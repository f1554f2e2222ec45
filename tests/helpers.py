from typing import Any, Dict

BASE = "https://pokeapi.test/api/v2"
ART_URL = "https://img.test/official-artwork/25.png"
SPRITE_URL = "https://img.test/sprites/25.png"

PIKACHU: Dict[str, Any] = {
    "id": 25,
    "name": "pikachu",
    "height": 4,
    "weight": 60,
    "base_experience": 112,  # not part of the record, must be ignored
    "sprites": {
        "front_default": SPRITE_URL,
        "other": {"official-artwork": {"front_default": ART_URL}},
    },
    "types": [{"slot": 1, "type": {"name": "electric", "url": "https://pokeapi.test/type/13/"}}],
    "abilities": [
        {"slot": 3, "is_hidden": True, "ability": {"name": "lightning-rod"}},
        {"slot": 1, "is_hidden": False, "ability": {"name": "static"}},
    ],
    "stats": [
        {"base_stat": 35, "effort": 0, "stat": {"name": "hp"}},
        {"base_stat": 55, "effort": 0, "stat": {"name": "attack"}},
        {"base_stat": 40, "effort": 0, "stat": {"name": "defense"}},
        {"base_stat": 50, "effort": 0, "stat": {"name": "special-attack"}},
        {"base_stat": 50, "effort": 0, "stat": {"name": "special-defense"}},
        {"base_stat": 90, "effort": 2, "stat": {"name": "speed"}},
    ],
}


def bare(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Same record with no artwork at all, so no second request is made."""
    out = dict(payload)
    out["sprites"] = {"front_default": None, "other": {"official-artwork": {"front_default": None}}}
    return out
