from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Union

from PIL import Image

from .errors import PokedexError
from .layout import capitalize
from .models import Record


@dataclass(frozen=True)
class Idle:
    generation: int = 0


@dataclass(frozen=True)
class Loading:
    query: str
    generation: int = 0


@dataclass(frozen=True, eq=False)
class Loaded:
    record: Record
    image: Optional[Image.Image] = None
    generation: int = 0


@dataclass(frozen=True)
class Failed:
    message: str
    generation: int = 0
    error: Optional[PokedexError] = field(default=None, compare=False)


# Snapshots are replaced wholesale, never edited in place.
QueryState = Union[Idle, Loading, Loaded, Failed]


def status_line(state: QueryState) -> str:
    if isinstance(state, Loading):
        return f'Fetching "{state.query}"…'
    if isinstance(state, Loaded):
        return f"Loaded: #{state.record.id} {capitalize(state.record.name)}"
    if isinstance(state, Failed):
        return f"Error: {state.message}"
    return ""
