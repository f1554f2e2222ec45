"""Interactive pygame window: query field, Go/Random buttons, canvas, status line."""
from __future__ import annotations
import asyncio
import logging
import random
from pathlib import Path
from typing import Optional, Set

import pygame
from PIL import Image

from src.common.jsonlog import jlog

from .config import settings
from .layout import CANVAS_H, CANVAS_W
from .painter import paint, save_canvas
from .poke import FetchController, make_client, random_query_id
from .render import render_state
from .state import QueryState, status_line

log = logging.getLogger("pokedex.viewer")

FPS = 30
TITLE = "Pokedex"

CONTROLS_H = 64
WINDOW_W = CANVAS_W
WINDOW_H = CANVAS_H + CONTROLS_H

COLOR_BG = (245, 245, 245)
COLOR_TEXT = (30, 30, 30)
COLOR_MUTED = (110, 110, 110)
COLOR_FIELD = (255, 255, 255)
COLOR_FOCUS = (70, 120, 220)
COLOR_BORDER = (180, 180, 180)
COLOR_BUTTON = (225, 225, 225)

FIELD_RECT = pygame.Rect(24, CANVAS_H + 8, 260, 28)
GO_RECT = pygame.Rect(292, CANVAS_H + 8, 56, 28)
RANDOM_RECT = pygame.Rect(356, CANVAS_H + 8, 80, 28)
STATUS_POS = (24, CANVAS_H + 42)

# what handle_event asks the viewer to do
SUBMIT = "submit"
RANDOM = "random"
EXPORT = "export"
QUIT = "quit"


class PokedexViewer:
    def __init__(
        self,
        controller: FetchController,
        *,
        initial_query: str = "",
        export_dir: Path | None = None,
        rng: random.Random | None = None,
    ):
        self.controller = controller
        self.text = initial_query
        self.focused = True
        self.export_dir = export_dir or settings.EXPORT_DIR
        self._rng = rng
        self._tasks: Set[asyncio.Task] = set()
        self._painted_state: Optional[QueryState] = None
        self.canvas: Image.Image = paint(render_state(controller.state))

    # ---------- input ----------
    def handle_event(self, event: pygame.event.Event) -> Optional[str]:
        """Update the text field from one pygame event and return the action it triggers, if any."""
        if event.type == pygame.QUIT:
            return QUIT

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if GO_RECT.collidepoint(event.pos):
                return SUBMIT
            if RANDOM_RECT.collidepoint(event.pos):
                return RANDOM
            self.focused = FIELD_RECT.collidepoint(event.pos)
            return None

        if event.type != pygame.KEYDOWN:
            return None

        ctrl = bool(getattr(event, "mod", 0) & pygame.KMOD_CTRL)
        if event.key == pygame.K_s and (ctrl or not self.focused):
            return EXPORT
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            return SUBMIT
        if not self.focused:
            return None

        if event.key == pygame.K_ESCAPE:
            self.focused = False
        elif event.key == pygame.K_BACKSPACE:
            self.text = self.text[:-1]
        elif event.unicode and event.unicode.isprintable() and not ctrl:
            self.text += event.unicode
        return None

    # ---------- actions ----------
    def submit(self, query: str) -> Optional[asyncio.Task]:
        q = query.strip()
        if not q:
            return None
        task = asyncio.get_running_loop().create_task(self.controller.submit_query(q))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            jlog(log, logging.ERROR, event="query_crashed", error=str(exc), error_type=type(exc).__name__)


    def submit_random(self) -> Optional[asyncio.Task]:
        self.text = str(random_query_id(self._rng))
        return self.submit(self.text)

    def export(self) -> Path:
        path = save_canvas(self.canvas, self.export_dir)
        log.info("Saved canvas to %s", path)
        return path

    def dispatch(self, action: Optional[str]) -> bool:
        """Run an action. Returns False once the window should close."""
        if action == QUIT:
            return False
        if action == SUBMIT:
            self.submit(self.text)
        elif action == RANDOM:
            self.submit_random()
        elif action == EXPORT:
            self.export()
        return True

    # ---------- drawing ----------
    def refresh_canvas(self) -> bool:
        """Repaint only when the controller published a new snapshot."""
        state = self.controller.state
        if state is self._painted_state:
            return False
        self.canvas = paint(render_state(state))
        self._painted_state = state
        return True

    def _draw_controls(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        pygame.draw.rect(screen, COLOR_BG, (0, CANVAS_H, WINDOW_W, CONTROLS_H))

        pygame.draw.rect(screen, COLOR_FIELD, FIELD_RECT)
        pygame.draw.rect(screen, COLOR_FOCUS if self.focused else COLOR_BORDER, FIELD_RECT, 1)
        text_surf = font.render(self.text, True, COLOR_TEXT)
        screen.blit(text_surf, (FIELD_RECT.x + 6, FIELD_RECT.y + (FIELD_RECT.h - text_surf.get_height()) // 2))

        for rect, label in ((GO_RECT, "Go"), (RANDOM_RECT, "Random")):
            pygame.draw.rect(screen, COLOR_BUTTON, rect, border_radius=4)
            pygame.draw.rect(screen, COLOR_BORDER, rect, 1, border_radius=4)
            label_surf = font.render(label, True, COLOR_TEXT)
            screen.blit(label_surf, label_surf.get_rect(center=rect.center))

        status_surf = font.render(status_line(self.controller.state), True, COLOR_MUTED)
        screen.blit(status_surf, STATUS_POS)

    async def run(self) -> None:
        pygame.init()
        pygame.display.set_caption(TITLE)
        screen = pygame.display.set_mode((WINDOW_W, WINDOW_H))
        font = pygame.font.Font(None, 22)
        canvas_surf: Optional[pygame.Surface] = None

        self.submit(self.text)

        running = True
        try:
            while running:
                for event in pygame.event.get():
                    running = self.dispatch(self.handle_event(event)) and running

                if self.refresh_canvas() or canvas_surf is None:
                    canvas_surf = pygame.image.frombytes(self.canvas.tobytes(), self.canvas.size, "RGB")

                screen.blit(canvas_surf, (0, 0))
                self._draw_controls(screen, font)
                pygame.display.flip()

                # the only place the loop yields; pending fetches make progress here
                await asyncio.sleep(1 / FPS)
        finally:
            for task in list(self._tasks):
                task.cancel()
            pygame.quit()


def run_viewer(initial_query: str | None = None) -> int:
    async def _main() -> None:
        async with make_client() as client:
            controller = FetchController(client)
            viewer = PokedexViewer(controller, initial_query=initial_query or settings.DEFAULT_QUERY)
            await viewer.run()

    asyncio.run(_main())
    return 0
