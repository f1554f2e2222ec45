import asyncio
import logging
import pathlib
import sys

from .config import settings
from .layout import format_abilities, format_number, format_types
from .logging_config import setup_logging
from .painter import paint, save_canvas
from .poke import FetchController, make_client, random_query_id
from .render import render_state
from .state import Loaded, QueryState, status_line


async def fetch_state(query: str) -> QueryState:
    async with make_client() as client:
        controller = FetchController(client)
        return await controller.submit_query(query)


def format_pokemon_human(state: Loaded) -> str:
    r = state.record
    lines = [
        f"   Type: {format_types(t.name for t in r.types)}",
        f"   Height: {format_number(r.height / 10)} m  Weight: {format_number(r.weight / 10)} kg",
        f"   Abilities: {format_abilities(a.name for a in r.abilities)}",
    ]
    lines += [f"   {s.name.upper():<16}{s.base_value}" for s in r.stats]
    if r.artwork_url:
        lines.append(f"   Artwork: {r.artwork_url}{'' if state.image is not None else ' (unavailable)'}")
    return "\n".join(lines)


def _report(state: QueryState) -> int:
    if isinstance(state, Loaded):
        print(f"✅ {status_line(state)}")
        print(format_pokemon_human(state))
        return 0
    print(f"❌ {status_line(state)}")
    return 1


def cmd_fetch(args: list[str]) -> int:
    if not args or not args[0].strip():
        print("Usage: python -m src.pokedex fetch <name-or-id>")
        return 2
    return _report(asyncio.run(fetch_state(args[0])))


def cmd_random(args: list[str]) -> int:
    q = str(random_query_id())
    print(f"🎲 Random pick: {q}")
    return _report(asyncio.run(fetch_state(q)))


def cmd_render(args: list[str]) -> int:
    if not args or not args[0].strip():
        print("Usage: python -m src.pokedex render <name-or-id> [out.png]")
        return 2

    state = asyncio.run(fetch_state(args[0]))
    out = pathlib.Path(args[1]) if len(args) > 1 else None
    # the canvas is saved for failures too; it shows the error message
    path = save_canvas(paint(render_state(state)), settings.EXPORT_DIR, out)
    code = _report(state)
    print(f"📄 Saved: {path}")
    return code


def cmd_view(args: list[str]) -> int:
    # pygame is only needed for the window
    from .viewer import run_viewer
    return run_viewer(args[0] if args else None)


COMMANDS = {
    "fetch": cmd_fetch,
    "random": cmd_random,
    "render": cmd_render,
    "view": cmd_view,
}


def main():
    setup_logging()
    log = logging.getLogger("pokedex")

    if len(sys.argv) >= 2:
        cmd, *rest = sys.argv[1:]
        handler = COMMANDS.get(cmd)
        if handler is None:
            print(f"❌ Unknown command: {cmd}")
            sys.exit(2)
        sys.exit(handler(rest))

    log.info("Try: python -m src.pokedex fetch pikachu | random | render 25 out.png | view")
    print("👋 Nothing to do. See logs above.")


if __name__ == "__main__":
    main()
