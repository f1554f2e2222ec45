from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import DecodeError

# ---------- PokeAPI response shape ----------
# Only the fields we draw. Fallbacks for optional fields are applied here, once.


class _ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class NamedResource(_ApiModel):
    name: str = ""


class TypeSlot(_ApiModel):
    slot: int = 0
    type: NamedResource = Field(default_factory=NamedResource)


class AbilitySlot(_ApiModel):
    slot: int = 0
    ability: NamedResource = Field(default_factory=NamedResource)


class StatEntry(_ApiModel):
    base_stat: Optional[int] = None
    stat: NamedResource = Field(default_factory=NamedResource)


class FrontSprite(_ApiModel):
    front_default: Optional[str] = None


class OtherSprites(_ApiModel):
    official_artwork: Optional[FrontSprite] = Field(default=None, alias="official-artwork")


class Sprites(_ApiModel):
    front_default: Optional[str] = None
    other: Optional[OtherSprites] = None


class PokemonPayload(_ApiModel):
    id: int = Field(gt=0)
    name: str
    height: Optional[int] = None  # decimetres
    weight: Optional[int] = None  # hectograms
    sprites: Optional[Sprites] = None
    types: Optional[List[TypeSlot]] = None
    abilities: Optional[List[AbilitySlot]] = None
    stats: Optional[List[StatEntry]] = None


# ---------- Domain record ----------

@dataclass(frozen=True)
class TypeEntry:
    slot: int
    name: str


@dataclass(frozen=True)
class AbilityEntry:
    slot: int
    name: str


@dataclass(frozen=True)
class Stat:
    name: str
    base_value: int


@dataclass(frozen=True)
class Record:
    id: int
    name: str
    types: Tuple[TypeEntry, ...]
    abilities: Tuple[AbilityEntry, ...]
    height: int
    weight: int
    stats: Tuple[Stat, ...]
    artwork_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "types": [t.name for t in self.types],
            "abilities": [a.name for a in self.abilities],
            "height_dm": self.height,
            "weight_hg": self.weight,
            "stats": {s.name: s.base_value for s in self.stats},
            "artwork_url": self.artwork_url,
        }


_Slotted = TypeVar("_Slotted", TypeEntry, AbilityEntry)


def sort_by_slot(entries: Iterable[_Slotted]) -> Tuple[_Slotted, ...]:
    """Ascending by slot; entries sharing a slot keep their source order."""
    return tuple(sorted(entries, key=lambda e: e.slot))


def select_artwork_url(sprites: Optional[Sprites]) -> Optional[str]:
    """Official artwork first, then the default front sprite, else None."""
    if sprites is None:
        return None
    official = None
    if sprites.other is not None and sprites.other.official_artwork is not None:
        official = sprites.other.official_artwork.front_default
    # empty strings count as missing
    return official or sprites.front_default or None


def record_from_payload(p: PokemonPayload) -> Record:
    return Record(
        id=p.id,
        name=p.name,
        types=sort_by_slot(TypeEntry(t.slot, t.type.name) for t in (p.types or [])),
        abilities=sort_by_slot(AbilityEntry(a.slot, a.ability.name) for a in (p.abilities or [])),
        height=p.height or 0,
        weight=p.weight or 0,
        stats=tuple(Stat(s.stat.name, s.base_stat or 0) for s in (p.stats or [])),
        artwork_url=select_artwork_url(p.sprites),
    )


def decode_record(data: Any) -> Record:
    """Validate a raw /pokemon/{q} JSON body and turn it into a Record."""
    try:
        payload = PokemonPayload.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {"loc": (), "msg": str(e)}
        loc = ".".join(str(p) for p in first["loc"]) or "body"
        raise DecodeError(f"{loc}: {first['msg']}") from e
    return record_from_payload(payload)
