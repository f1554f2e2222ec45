from __future__ import annotations
import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Tuple

from PIL import Image, ImageDraw, ImageFont

from src.common.jsonlog import jlog
from .layout import CANVAS_H, CANVAS_W
from .render import DrawCommand, ImageCmd, RectCmd, TextCmd

log = logging.getLogger("pokedex.painter")

BACKGROUND = (255, 255, 255)
LEADING = 1.25
EXPORT_STEM = "pokeapi-pokedex"

_FONT_FILES = {
    False: ("DejaVuSans.ttf", "Arial.ttf"),
    True: ("DejaVuSans-Bold.ttf", "Arial Bold.ttf"),
}


@lru_cache(maxsize=32)
def get_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """DejaVu if the system has it, otherwise Pillow's bundled default at the same size."""
    for name in _FONT_FILES[bold]:
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _has_anchors(font) -> bool:
    return isinstance(font, ImageFont.FreeTypeFont)


def wrap_text(draw: ImageDraw.ImageDraw, text: str, font, max_width: float) -> List[str]:
    """Greedy word wrap. A single word wider than the box gets a line of its own."""
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and draw.textlength(candidate, font=font) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def _draw_text(draw: ImageDraw.ImageDraw, cmd: TextCmd) -> None:
    font = get_font(cmd.size, cmd.bold)

    if cmd.box is None:
        if _has_anchors(font):
            draw.text((cmd.x, cmd.y), cmd.text, font=font, fill=cmd.fill, anchor="ls")
        else:
            draw.text((cmd.x, cmd.y - cmd.size), cmd.text, font=font, fill=cmd.fill)
        return

    box_w, box_h = cmd.box
    line_h = cmd.size * LEADING
    for i, line in enumerate(wrap_text(draw, cmd.text, font, box_w)):
        # lines that would spill past the box are clipped
        if (i + 1) * line_h > box_h:
            break
        y = cmd.y + i * line_h
        if _has_anchors(font):
            draw.text((cmd.x, y), line, font=font, fill=cmd.fill, anchor="la")
        else:
            draw.text((cmd.x, y), line, font=font, fill=cmd.fill)


def _draw_rect(draw: ImageDraw.ImageDraw, cmd: RectCmd) -> None:
    if cmd.w <= 0 or cmd.h <= 0:
        return
    radius = min(cmd.radius, cmd.w / 2, cmd.h / 2)
    draw.rounded_rectangle(
        (cmd.x, cmd.y, cmd.x + cmd.w, cmd.y + cmd.h),
        radius=radius,
        fill=cmd.fill,
        outline=cmd.outline,
        width=1,
    )


def _draw_image(canvas: Image.Image, cmd: ImageCmd) -> None:
    size = (max(1, round(cmd.w)), max(1, round(cmd.h)))
    img = cmd.image.convert("RGBA").resize(size, Image.Resampling.LANCZOS)
    canvas.paste(img, (round(cmd.x), round(cmd.y)), img)


def paint(commands: Iterable[DrawCommand], size: Tuple[int, int] = (CANVAS_W, CANVAS_H)) -> Image.Image:
    """Rasterise draw commands, in order, onto a fresh white canvas."""
    canvas = Image.new("RGB", size, BACKGROUND)
    draw = ImageDraw.Draw(canvas)
    for cmd in commands:
        if isinstance(cmd, RectCmd):
            _draw_rect(draw, cmd)
        elif isinstance(cmd, TextCmd):
            _draw_text(draw, cmd)
        elif isinstance(cmd, ImageCmd):
            _draw_image(canvas, cmd)
        else:
            raise TypeError(f"Unknown draw command: {type(cmd).__name__}")
    return canvas


def next_export_path(export_dir: Path, stem: str = EXPORT_STEM) -> Path:
    """pokeapi-pokedex.png, then pokeapi-pokedex-1.png, -2, ... for whatever is free."""
    path = export_dir / f"{stem}.png"
    n = 1
    while path.exists():
        path = export_dir / f"{stem}-{n}.png"
        n += 1
    return path


def save_canvas(canvas: Image.Image, export_dir: Path, path: Path | None = None) -> Path:
    out = path or next_export_path(export_dir)
    out.parent.mkdir(parents=True, exist_ok=True)
    canvas.save(out, format="PNG")
    jlog(log, logging.INFO, event="export_saved", path=str(out), size=list(canvas.size))
    return out
