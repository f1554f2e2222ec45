from __future__ import annotations
import asyncio
import io
import logging
import random
import uuid
from typing import Callable, List, Optional
from urllib.parse import quote

import httpx
from PIL import Image

from src.common.jsonlog import jlog
from .config import settings
from .errors import DecodeError, HttpStatusError, NetworkError, NotFoundError, PokedexError
from .models import Record, decode_record
from .state import Failed, Idle, Loaded, Loading, QueryState, status_line

log = logging.getLogger("pokedex.poke")

FIRST_GEN_MAX_ID = 151

StateListener = Callable[[QueryState], None]


def make_client(timeout: float | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.HTTP_TIMEOUT if timeout is None else timeout,
        follow_redirects=True,
    )


def normalize_query(raw_input: str) -> str:
    return raw_input.strip().lower()


def pokemon_url(base_url: str, query: str) -> str:
    return f"{base_url.rstrip('/')}/pokemon/{quote(query, safe='')}"


def random_query_id(rng: random.Random | None = None) -> int:
    """Uniform over the first-generation ids, 1..151 inclusive."""
    return (rng or random).randint(1, FIRST_GEN_MAX_ID)


async def get_pokemon(client: httpx.AsyncClient, query: str, *, base_url: str) -> Record:
    """Fetch one Pokemon by name or id. Raises a PokedexError subclass on any failure."""
    url = pokemon_url(base_url, query)
    try:
        res = await client.get(url, headers={"accept": "application/json"})
    except httpx.RequestError as e:
        raise NetworkError(str(e) or type(e).__name__) from e

    if res.status_code == 404:
        raise NotFoundError(query)
    if not res.is_success:
        raise HttpStatusError(res.status_code)

    try:
        data = res.json()
    except ValueError as e:
        raise DecodeError(f"invalid JSON ({e})") from e
    return decode_record(data)


def _decode_image(content: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(content))
    img.load()
    return img.convert("RGBA")


def _image_unavailable(url: str, e: BaseException) -> None:
    jlog(
        log,
        logging.WARNING,
        event="image_unavailable",
        url=url,
        error=str(e),
        error_type=type(e).__name__,
    )


async def load_image(client: httpx.AsyncClient, url: str) -> Optional[Image.Image]:
    """Download and decode artwork. Any failure means "no image", never a failed query."""
    try:
        res = await client.get(url)
        res.raise_for_status()
    except httpx.HTTPError as e:
        _image_unavailable(url, e)
        return None

    try:
        return await asyncio.to_thread(_decode_image, res.content)
    except Exception as e:
        # Pillow reports corrupt data as OSError, ValueError, SyntaxError, struct.error...
        _image_unavailable(url, e)
        return None


class FetchController:
    """
    Owns the query lifecycle for one viewer.

    The current QueryState is an immutable snapshot; every transition swaps the
    whole value. Each submit takes a new generation number and any completion
    from an older generation is dropped instead of written.
    """

    def __init__(self, client: httpx.AsyncClient, *, base_url: str | None = None):
        self._client = client
        self._base_url = (base_url or settings.API_BASE).rstrip("/")
        self._generation = 0
        self._state: QueryState = Idle()
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def status(self) -> str:
        return status_line(self._state)

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def _publish(self, state: QueryState) -> None:
        self._state = state
        for listener in self._listeners:
            listener(state)

    def _is_stale(self, generation: int, req_id: str, stage: str) -> bool:
        if generation == self._generation:
            return False
        jlog(
            log,
            logging.INFO,
            event="query_stale",
            req_id=req_id,
            generation=generation,
            current_generation=self._generation,
            stage=stage,
        )
        return True

    async def submit_query(self, raw_input: str) -> QueryState:
        q = normalize_query(raw_input)
        if not q:
            return self._state

        self._generation += 1
        generation = self._generation
        req_id = str(uuid.uuid4())
        self._publish(Loading(q, generation))
        jlog(log, logging.INFO, event="query_start", req_id=req_id, query=q, generation=generation)

        try:
            record = await get_pokemon(self._client, q, base_url=self._base_url)
        except PokedexError as e:
            if self._is_stale(generation, req_id, "fetch"):
                return self._state
            jlog(
                log,
                logging.WARNING,
                event="query_failed",
                req_id=req_id,
                query=q,
                error=str(e),
                error_type=type(e).__name__,
            )
            self._publish(Failed(str(e), generation, e))
            return self._state

        if self._is_stale(generation, req_id, "fetch"):
            return self._state

        image = None
        if record.artwork_url:
            image = await load_image(self._client, record.artwork_url)
            if self._is_stale(generation, req_id, "image"):
                return self._state

        self._publish(Loaded(record, image, generation))
        jlog(
            log,
            logging.INFO,
            event="query_loaded",
            req_id=req_id,
            query=q,
            id=record.id,
            name=record.name,
            has_image=image is not None,
        )
        return self._state

    async def submit_random(self, rng: random.Random | None = None) -> str:
        q = str(random_query_id(rng))
        await self.submit_query(q)
        return q
