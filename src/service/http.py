# src/service/http.py
from __future__ import annotations

import io
import logging
import time
from typing import Any, AsyncIterator, Dict

import httpx
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.common.jsonlog import jlog
from src.pokedex.errors import PokedexError
from src.pokedex.painter import paint
from src.pokedex.poke import FetchController, make_client, random_query_id
from src.pokedex.render import render_state
from src.pokedex.state import Failed, Loaded, status_line

load_dotenv()


log = logging.getLogger("service")

app = FastAPI(title="pokedex")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One structured line per request: path, status and how long PokeAPI kept us waiting."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        fields = {"method": request.method, "path": request.url.path}
        try:
            response = await call_next(request)
        except Exception as e:
            jlog(log, logging.ERROR, event="http_request_failed",
                 duration_secs=round(time.time() - start_time, 3),
                 error=str(e), error_type=type(e).__name__, **fields)
            raise

        # 404/502 here are failed lookups, not server faults
        level = logging.INFO if response.status_code < 500 or response.status_code == 502 else logging.ERROR
        jlog(log, level, event="http_request",
             status_code=response.status_code,
             duration_secs=round(time.time() - start_time, 3), **fields)
        return response


app.add_middleware(RequestLoggingMiddleware)


# ---------- Helpers ----------
async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with make_client() as client:
        yield client


async def _load(query: str, client: httpx.AsyncClient) -> Loaded:
    """
    Run one query through a fresh controller.
    Anything but a Loaded snapshot becomes an HTTPException carrying the user-facing message.
    """
    state = await FetchController(client).submit_query(query)
    if isinstance(state, Loaded):
        return state
    if isinstance(state, Failed):
        status = state.error.http_status if state.error is not None else PokedexError.http_status
        raise HTTPException(status_code=status, detail=state.message)
    raise HTTPException(status_code=400, detail="query cannot be empty")


def _payload(state: Loaded) -> Dict[str, Any]:
    return {
        "ok": True,
        "status": status_line(state),
        "record": state.record.to_dict(),
        "has_image": state.image is not None,
    }


# ---------- Routes ----------
@app.get("/healthz")
async def healthz():
    return {"ok": True}


@app.get("/pokemon/{query}")
async def pokemon(query: str, client: httpx.AsyncClient = Depends(get_http_client)):
    return _payload(await _load(query, client))


@app.get("/pokemon/{query}/card.png")
async def pokemon_card(query: str, client: httpx.AsyncClient = Depends(get_http_client)):
    state = await _load(query, client)
    buf = io.BytesIO()
    paint(render_state(state)).save(buf, format="PNG")
    return Response(content=buf.getvalue(), media_type="image/png")


@app.get("/random")
async def random_pokemon(client: httpx.AsyncClient = Depends(get_http_client)):
    return _payload(await _load(str(random_query_id()), client))
