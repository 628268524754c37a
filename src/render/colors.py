"""
Color helpers for heat and committer modes.

Colors are specified in CIE LCh (D65) and converted through CIE Lab and XYZ
to linear sRGB. Heat colors are interpolated in linear sRGB between the two
nearest gradient stops and then gamma encoded. Channels outside the sRGB
gamut are clipped and values are truncated to 8 bits.
"""

import random

import numpy as np

from common.constants import (
    BACKGROUND_COLOR,
    COMMITTER_CHROMA,
    COMMITTER_COLOR_SEED,
    COMMITTER_LIGHTNESS,
    HEAT_SATURATION,
    HEAT_STOPS_LCH,
)

# D65 reference white
_WHITE = np.array([0.95047, 1.0, 1.08883])

_XYZ_TO_LINEAR_SRGB = np.array(
    [
        [3.2404542, -1.5371385, -0.4985314],
        [-0.9692660, 1.8760108, 0.0415560],
        [0.0556434, -0.2040259, 1.0572252],
    ]
)

_DELTA = 6.0 / 29.0


def lch_to_linear_srgb(lch: np.ndarray) -> np.ndarray:
    """Convert ``(..., 3)`` LCh values (hue in degrees) to linear sRGB."""
    lch = np.asarray(lch, dtype=np.float64)
    lightness, chroma, hue = lch[..., 0], lch[..., 1], np.radians(lch[..., 2])

    fy = (lightness + 16.0) / 116.0
    fx = fy + chroma * np.cos(hue) / 500.0
    fz = fy - chroma * np.sin(hue) / 200.0

    f = np.stack([fx, fy, fz], axis=-1)
    xyz = np.where(f > _DELTA, f**3, 3.0 * _DELTA**2 * (f - 4.0 / 29.0)) * _WHITE
    return xyz @ _XYZ_TO_LINEAR_SRGB.T


def encode_srgb(linear: np.ndarray) -> np.ndarray:
    """Gamma encode linear sRGB and quantize to ``uint8``."""
    linear = np.asarray(linear, dtype=np.float64)
    encoded = np.where(
        linear <= 0.0031308,
        12.92 * linear,
        1.055 * np.power(np.abs(linear), 1.0 / 2.4) - 0.055,
    )
    return np.floor(np.clip(encoded, 0.0, 1.0) * 255.0).astype(np.uint8)


_HEAT_STOPS = lch_to_linear_srgb(np.array(HEAT_STOPS_LCH))


def heat_to_color(heat: int) -> tuple[int, int, int]:
    """
    Gradient color for a heat count, ignoring the zero case.

    ``heat / HEAT_SATURATION`` is clamped to 1 and spread over the stops,
    so a count of HEAT_SATURATION or more is the hottest stop.
    """
    position = min(heat / HEAT_SATURATION, 1.0) * (len(_HEAT_STOPS) - 1)
    low = int(np.floor(position))
    high = min(low + 1, len(_HEAT_STOPS) - 1)
    t = position - low

    linear = _HEAT_STOPS[low] + (_HEAT_STOPS[high] - _HEAT_STOPS[low]) * t
    r, g, b = encode_srgb(linear)
    return int(r), int(g), int(b)


# Heat is an integer count, so every reachable color fits in a small table
HEAT_TABLE: tuple[tuple[int, int, int], ...] = tuple(
    BACKGROUND_COLOR if heat == 0 else heat_to_color(heat) for heat in range(HEAT_SATURATION + 1)
)


def heat_color(heat: int) -> tuple[int, int, int]:
    """Pixel color for a heat count; zero renders as background."""
    if heat <= 0:
        return BACKGROUND_COLOR
    return HEAT_TABLE[min(heat, HEAT_SATURATION)]


def committer_palette(count: int, seed: int = COMMITTER_COLOR_SEED) -> np.ndarray:
    """
    One bright color per committer id, as a ``(count, 3)`` ``uint8`` array.

    Hues are drawn from a generator seeded with a fixed constant in id
    order, so a committer keeps the same color on every frame and every run.
    """
    rng = random.Random(seed)
    hues = [rng.uniform(0.0, 360.0) for _ in range(count)]
    if not hues:
        return np.zeros((0, 3), dtype=np.uint8)

    lch = np.array([[COMMITTER_LIGHTNESS, COMMITTER_CHROMA, hue] for hue in hues])
    return encode_srgb(lch_to_linear_srgb(lch))
