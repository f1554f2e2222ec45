from __future__ import annotations
import asyncio
import random

import httpx
import pytest

from src.pokedex.errors import NetworkError, NotFoundError
from src.pokedex.poke import FetchController, pokemon_url, random_query_id
from src.pokedex.render import ImageCmd, TextCmd, render_state
from src.pokedex.state import Failed, Idle, Loaded, Loading, status_line
from tests.helpers import ART_URL, BASE, SPRITE_URL, bare


def _run(client, *queries):
    """Submit queries one after another on a fresh controller; return it plus every published state."""
    seen = []

    async def go():
        async with client:
            c = FetchController(client, base_url=BASE)
            c.subscribe(seen.append)
            for q in queries:
                await c.submit_query(q)
            return c

    return asyncio.run(go()), seen


def test_query_25_loads_pikachu_with_artwork(pikachu, png_bytes, mock_client):
    calls = []
    client = mock_client(
        {
            pokemon_url(BASE, "25"): pikachu,
            ART_URL: httpx.Response(200, content=png_bytes(475, 475)),
        },
        calls,
    )
    c, seen = _run(client, "  25 ")

    assert isinstance(c.state, Loaded)
    assert c.status == "Loaded: #25 Pikachu"
    assert c.state.image is not None and c.state.image.size == (475, 475)
    assert c.state.image.mode == "RGBA"

    # Loading first, then the final snapshot; nothing in between
    assert [type(s) for s in seen] == [Loading, Loaded]
    assert status_line(seen[0]) == 'Fetching "25"…'

    # JSON first, artwork second, sprite never needed
    assert [str(r.url) for r in calls] == [pokemon_url(BASE, "25"), ART_URL]
    assert calls[0].headers["accept"] == "application/json"


def test_query_is_trimmed_lowercased_and_url_encoded(mock_client):
    calls = []
    client = mock_client({}, calls)
    _run(client, "  Mr Mime/X ")
    assert str(calls[0].url) == f"{BASE}/pokemon/mr%20mime%2Fx"


def test_not_found_becomes_failed_and_shows_on_canvas(mock_client):
    c, _ = _run(mock_client({}), "doesnotexist")

    assert isinstance(c.state, Failed)
    assert isinstance(c.state.error, NotFoundError)
    assert c.status == "Error: Not found (try another name/ID)."

    texts = [cmd.text for cmd in render_state(c.state) if isinstance(cmd, TextCmd)]
    assert texts == ["Error: Not found (try another name/ID)."]


def test_other_http_status_is_reported_by_code(mock_client):
    client = mock_client({pokemon_url(BASE, "1"): httpx.Response(503, text="busy")})
    c, _ = _run(client, "1")
    assert c.status == "Error: HTTP 503"


@pytest.mark.parametrize(
    "exc_cls, message, expected",
    [
        (httpx.ConnectError, "connection refused", "connection refused"),
        (httpx.ConnectError, "", "ConnectError"),
        (httpx.ReadTimeout, "", "ReadTimeout"),
    ],
)
def test_network_failure_reports_underlying_message(mock_client, exc_cls, message, expected):
    def boom(request):
        raise exc_cls(message, request=request)

    c, _ = _run(mock_client({pokemon_url(BASE, "1"): boom}), "1")
    assert isinstance(c.state, Failed)
    assert isinstance(c.state.error, NetworkError)
    assert c.status == f"Error: {expected}"



def test_non_json_body_fails_the_query(mock_client):
    client = mock_client({pokemon_url(BASE, "1"): httpx.Response(200, text="<html>")})
    c, _ = _run(client, "1")
    assert c.status.startswith("Error: Malformed response:")


def test_no_artwork_still_loads_with_placeholder(pikachu, mock_client):
    calls = []
    c, _ = _run(mock_client({pokemon_url(BASE, "25"): bare(pikachu)}, calls), "25")

    assert isinstance(c.state, Loaded)
    assert c.state.image is None
    assert c.status == "Loaded: #25 Pikachu"
    assert len(calls) == 1

    cmds = render_state(c.state)
    assert not any(isinstance(cmd, ImageCmd) for cmd in cmds)
    assert any(isinstance(cmd, TextCmd) and cmd.text == "No image available" for cmd in cmds)


def test_broken_artwork_downgrades_to_no_image(pikachu, png_bytes, mock_client):
    client = mock_client(
        {
            pokemon_url(BASE, "25"): pikachu,
            ART_URL: httpx.Response(200, content=b"definitely not a png"),
            SPRITE_URL: httpx.Response(200, content=png_bytes()),
        }
    )
    c, _ = _run(client, "25")
    assert isinstance(c.state, Loaded)
    assert c.state.image is None
    assert c.status == "Loaded: #25 Pikachu"


def _corrupt_ihdr(data: bytes) -> bytes:
    # low byte of the IHDR chunk length
    out = bytearray(data)
    out[11] = 0
    return bytes(out)


@pytest.mark.parametrize(
    "mangle",
    [_corrupt_ihdr, lambda data: data[:40]],
    ids=["corrupt-ihdr", "truncated"],
)
def test_undecodable_artwork_downgrades_to_no_image(pikachu, png_bytes, mock_client, mangle):
    client = mock_client(
        {
            pokemon_url(BASE, "25"): pikachu,
            ART_URL: httpx.Response(200, content=mangle(png_bytes(64, 64))),
        }
    )
    c, seen = _run(client, "25")
    assert isinstance(c.state, Loaded)
    assert c.state.image is None
    assert c.status == "Loaded: #25 Pikachu"
    assert [type(s) for s in seen] == [Loading, Loaded]



def test_artwork_http_error_downgrades_to_no_image(pikachu, mock_client):
    # ART_URL is not in the table, so it 404s
    c, _ = _run(mock_client({pokemon_url(BASE, "25"): pikachu}), "25")
    assert isinstance(c.state, Loaded) and c.state.image is None


def test_new_query_clears_previous_result(pikachu, mock_client):
    client = mock_client({pokemon_url(BASE, "25"): bare(pikachu)})
    c, seen = _run(client, "25", "nope")
    assert [type(s) for s in seen] == [Loading, Loaded, Loading, Failed]
    assert isinstance(c.state, Failed)


def test_blank_input_is_a_no_op(mock_client):
    calls = []
    c, seen = _run(mock_client({}, calls), "   ", "")
    assert isinstance(c.state, Idle)
    assert seen == [] and calls == []
    assert c.generation == 0


def test_stale_completion_is_discarded(pikachu, mock_client):
    """The first query answers after the second one; its result must not overwrite the newer state."""
    bulbasaur = dict(bare(pikachu), id=1, name="bulbasaur")
    charmander = dict(bare(pikachu), id=4, name="charmander")

    async def go():
        release = asyncio.Event()

        async def slow(request):
            await release.wait()
            return httpx.Response(200, json=bulbasaur)

        client = mock_client({pokemon_url(BASE, "1"): slow, pokemon_url(BASE, "4"): charmander})
        async with client:
            c = FetchController(client, base_url=BASE)
            first = asyncio.create_task(c.submit_query("1"))
            await asyncio.sleep(0)
            assert isinstance(c.state, Loading) and c.state.query == "1"

            await c.submit_query("4")
            assert c.status == "Loaded: #4 Charmander"

            release.set()
            await first
            return c

    c = asyncio.run(go())
    assert c.status == "Loaded: #4 Charmander"
    assert c.state.generation == 2


def test_stale_artwork_is_discarded(pikachu, png_bytes, mock_client):
    """The first query's artwork arrives after the second query has loaded."""
    bulbasaur = dict(pikachu, id=1, name="bulbasaur")
    charmander = dict(bare(pikachu), id=4, name="charmander")
    seen = []

    async def go():
        waiting = asyncio.Event()
        release = asyncio.Event()

        async def slow_art(request):
            waiting.set()
            await release.wait()
            return httpx.Response(200, content=png_bytes())

        client = mock_client(
            {
                pokemon_url(BASE, "1"): bulbasaur,
                pokemon_url(BASE, "4"): charmander,
                ART_URL: slow_art,
            }
        )
        async with client:
            c = FetchController(client, base_url=BASE)
            c.subscribe(seen.append)
            first = asyncio.create_task(c.submit_query("1"))
            await waiting.wait()

            await c.submit_query("4")
            release.set()
            await first
            return c

    c = asyncio.run(go())
    assert c.status == "Loaded: #4 Charmander"
    assert c.state.image is None
    assert [type(s) for s in seen] == [Loading, Loading, Loaded]


def test_stale_failure_is_discarded(pikachu, mock_client):
    """A late 404 for an abandoned query must not replace the newer result with an error."""
    charmander = dict(bare(pikachu), id=4, name="charmander")

    async def go():
        release = asyncio.Event()

        async def slow_404(request):
            await release.wait()
            return httpx.Response(404, text="Not Found")

        client = mock_client({pokemon_url(BASE, "1"): slow_404, pokemon_url(BASE, "4"): charmander})
        async with client:
            c = FetchController(client, base_url=BASE)
            first = asyncio.create_task(c.submit_query("1"))
            await asyncio.sleep(0)

            await c.submit_query("4")
            release.set()
            await first
            return c

    c = asyncio.run(go())
    assert not isinstance(c.state, Failed)
    assert c.status == "Loaded: #4 Charmander"
    assert c.state.generation == 2



def test_random_query_id_stays_in_first_generation():
    rng = random.Random(1234)
    picks = {random_query_id(rng) for _ in range(5000)}
    assert min(picks) == 1 and max(picks) == 151
    assert all(isinstance(p, int) for p in picks)


def test_submit_random_uses_an_id_string(mock_client):
    async def go():
        async with mock_client({}) as client:
            c = FetchController(client, base_url=BASE)
            q = await c.submit_random(random.Random(7))
            return c, q

    c, q = asyncio.run(go())
    assert q.isdigit() and 1 <= int(q) <= 151
    assert c.state.generation == 1
