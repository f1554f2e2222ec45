"""Layout constants and the small formatting helpers the renderer leans on."""
from __future__ import annotations
from typing import Iterable, NamedTuple

CANVAS_W = 900
CANVAS_H = 520

FRAME_INSET = 24
FRAME_RADIUS = 12

LEFT = 40
TOP = 60
BOX_W = 320
BOX_H = 360
BOX_RADIUS = 10
BOX_PADDING = 12

COLUMN_GAP = 24
RIGHT_MARGIN = 40

STAT_DOMAIN_MAX = 200
STAT_ROW_H = 32
STAT_BAR_H = 16
STAT_LABEL_W = 120
STAT_BAR_MAX = 320

EMPTY = "—"


class Fit(NamedTuple):
    x: float
    y: float
    w: float
    h: float


def capitalize(s: str) -> str:
    """Upper-case the first character, leave the rest untouched."""
    if not s:
        return ""
    return s[0].upper() + s[1:]


def fit_contain(src_w: float, src_h: float, dst_w: float, dst_h: float) -> Fit:
    """
    Largest aspect-preserving size of src that fits in dst.
    The offsets center the leftover space on the axis that did not fill up.
    """
    if src_w <= 0 or src_h <= 0 or dst_w <= 0 or dst_h <= 0:
        raise ValueError(f"fit_contain needs positive sizes, got {src_w}x{src_h} into {dst_w}x{dst_h}")

    src_ar = src_w / src_h
    dst_ar = dst_w / dst_h

    if src_ar > dst_ar:
        w = dst_w
        h = dst_w / src_ar
        return Fit(0, (dst_h - h) / 2, w, h)

    h = dst_h
    w = dst_h * src_ar
    return Fit((dst_w - w) / 2, 0, w, h)


def linear_map(value: float, in_lo: float, in_hi: float, out_lo: float, out_hi: float) -> float:
    return out_lo + (value - in_lo) * (out_hi - out_lo) / (in_hi - in_lo)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def bar_width(value: float, max_width: float, domain_max: float = STAT_DOMAIN_MAX) -> float:
    return clamp(linear_map(value, 0, domain_max, 0, max_width), 0, max_width)


def format_number(value: float) -> str:
    """Print like a JS number: 6 rather than 6.0, 0.7 stays 0.7."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_types(names: Iterable[str]) -> str:
    return " / ".join(capitalize(n) for n in names) or EMPTY


def format_abilities(names: Iterable[str]) -> str:
    return ", ".join(capitalize(n.replace("-", " ")) for n in names) or EMPTY
