# tests/conftest.py
from __future__ import annotations
import copy
import io
from typing import Any, Callable, Dict

import httpx
import pytest
from PIL import Image

from tests.helpers import PIKACHU


@pytest.fixture
def pikachu() -> Dict[str, Any]:
    """A trimmed but realistic /pokemon/25 body. Tests may mutate their copy."""
    return copy.deepcopy(PIKACHU)


@pytest.fixture
def png_bytes() -> Callable[..., bytes]:
    def _make(width: int = 40, height: int = 20, color=(255, 200, 0, 255)) -> bytes:
        buf = io.BytesIO()
        Image.new("RGBA", (width, height), color).save(buf, format="PNG")
        return buf.getvalue()
    return _make


@pytest.fixture
def mock_client() -> Callable[[Dict[str, Any]], httpx.AsyncClient]:
    """
    Build an AsyncClient answering from a {url: response} table.
    A value can be an httpx.Response, a dict (served as JSON), or a callable taking the request.
    Unknown URLs get a 404.
    """
    def _make(routes: Dict[str, Any], calls: list | None = None) -> httpx.AsyncClient:
        def handler(request: httpx.Request):
            if calls is not None:
                calls.append(request)
            route = routes.get(str(request.url))
            if route is None:
                return httpx.Response(404, text="Not Found")
            if callable(route):
                return route(request)
            if isinstance(route, dict):
                return httpx.Response(200, json=route)
            return route

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
