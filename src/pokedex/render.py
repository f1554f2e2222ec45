from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from PIL import Image

from .layout import (
    BOX_H, BOX_PADDING, BOX_RADIUS, BOX_W, CANVAS_H, CANVAS_W, COLUMN_GAP,
    FRAME_INSET, FRAME_RADIUS, LEFT, RIGHT_MARGIN, STAT_BAR_H, STAT_BAR_MAX,
    STAT_LABEL_W, STAT_ROW_H, TOP, bar_width, capitalize, fit_contain,
    format_abilities, format_number, format_types,
)
from .models import Record
from .state import Failed, Loaded, Loading, QueryState

Color = Tuple[int, int, int]

BLACK: Color = (0, 0, 0)


def ink(alpha: int) -> Color:
    """Black at `alpha` over the white background, pre-blended to an opaque grey."""
    v = 255 - alpha
    return (v, v, v)


@dataclass(frozen=True)
class RectCmd:
    x: float
    y: float
    w: float
    h: float
    radius: float = 0
    fill: Optional[Color] = None
    outline: Optional[Color] = None


@dataclass(frozen=True)
class TextCmd:
    x: float
    y: float  # baseline, or top edge when box is set
    text: str
    size: int = 14
    bold: bool = False
    fill: Color = BLACK
    box: Optional[Tuple[float, float]] = None  # wrap width, clip height


@dataclass(frozen=True, eq=False)
class ImageCmd:
    x: float
    y: float
    w: float
    h: float
    image: Image.Image


DrawCommand = Union[RectCmd, TextCmd, ImageCmd]


def frame() -> List[DrawCommand]:
    return [
        RectCmd(
            FRAME_INSET, FRAME_INSET,
            CANVAS_W - 2 * FRAME_INSET, CANVAS_H - 2 * FRAME_INSET,
            radius=FRAME_RADIUS, outline=ink(30),
        )
    ]


def render_message(msg: str) -> List[DrawCommand]:
    return [TextCmd(LEFT, TOP, msg, size=16, fill=ink(180))]


def _image_box(image: Optional[Image.Image]) -> List[DrawCommand]:
    cmds: List[DrawCommand] = [RectCmd(LEFT, TOP, BOX_W, BOX_H, radius=BOX_RADIUS, outline=ink(25))]
    if image is None:
        cmds.append(TextCmd(LEFT + 14, TOP + 28, "No image available", fill=ink(120)))
        return cmds

    inner_w = BOX_W - 2 * BOX_PADDING
    inner_h = BOX_H - 2 * BOX_PADDING
    fit = fit_contain(image.width, image.height, inner_w, inner_h)
    cmds.append(ImageCmd(LEFT + BOX_PADDING + fit.x, TOP + BOX_PADDING + fit.y, fit.w, fit.h, image))
    return cmds


def render(record: Record, image: Optional[Image.Image] = None) -> List[DrawCommand]:
    """Lay out one record. Pure: same input, same commands."""
    cmds = _image_box(image)

    rx = LEFT + BOX_W + COLUMN_GAP
    rw = CANVAS_W - rx - RIGHT_MARGIN
    muted = ink(170)

    cmds.append(TextCmd(rx, TOP + 24, f"#{record.id}  {capitalize(record.name)}", size=26, bold=True))
    cmds.append(TextCmd(rx, TOP + 52, f"Type: {format_types(t.name for t in record.types)}", fill=muted))

    # stored in tenths: decimetres / hectograms
    cmds.append(TextCmd(rx, TOP + 74, f"Height: {format_number(record.height / 10)} m", fill=muted))
    cmds.append(TextCmd(rx, TOP + 96, f"Weight: {format_number(record.weight / 10)} kg", fill=muted))

    abilities = format_abilities(a.name for a in record.abilities)
    cmds.append(TextCmd(rx, TOP + 124, f"Abilities: {abilities}", fill=muted, box=(rw, 80)))

    base_y = TOP + 220
    cmds.append(TextCmd(rx, base_y - 14, "Base stats", bold=True))

    max_bar = min(STAT_BAR_MAX, rw - STAT_LABEL_W)
    bar_x = rx + STAT_LABEL_W
    for i, stat in enumerate(record.stats):
        y = base_y + i * STAT_ROW_H
        cmds.append(TextCmd(rx, y, stat.name.upper(), fill=ink(160)))
        cmds.append(RectCmd(bar_x, y - 14, max_bar, STAT_BAR_H, radius=6, fill=ink(25)))
        cmds.append(RectCmd(bar_x, y - 14, bar_width(stat.base_value, max_bar), STAT_BAR_H, radius=6, fill=ink(120)))
        cmds.append(TextCmd(bar_x + max_bar + 10, y, str(stat.base_value), fill=ink(160)))

    return cmds


def render_state(state: QueryState) -> List[DrawCommand]:
    """Everything that goes on the canvas for the current snapshot."""
    cmds = frame()
    if isinstance(state, Loading):
        cmds += render_message("Loading…")
    elif isinstance(state, Failed):
        cmds += render_message(f"Error: {state.message}")
    elif isinstance(state, Loaded):
        cmds += render(state.record, state.image)
    else:
        cmds += render_message("No data yet.")
    return cmds
