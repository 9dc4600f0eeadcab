"""Color helpers: distance metrics and a vectorised BGR to HSV conversion."""

from typing import Callable, Dict, Sequence

import numpy as np

Metric = Callable[[np.ndarray], np.ndarray]


def euclidean(delta: np.ndarray) -> np.ndarray:
    """sqrt(db^2 + dg^2 + dr^2) over the last axis."""
    return np.sqrt(np.sum(delta * delta, axis=-1))


def manhattan(delta: np.ndarray) -> np.ndarray:
    return np.sum(np.abs(delta), axis=-1)


def chebyshev(delta: np.ndarray) -> np.ndarray:
    return np.max(np.abs(delta), axis=-1)


COLOR_METRICS: Dict[str, Metric] = {
    "euclidean": euclidean,
    "manhattan": manhattan,
    "chebyshev": chebyshev,
}


def get_metric(name: str) -> Metric:
    try:
        return COLOR_METRICS[name]
    except KeyError:
        raise ValueError(f"Unknown color metric: {name}") from None


def color_distance(a: Sequence[int], b: Sequence[int], metric: str = "euclidean") -> float:
    """Distance between two single colors."""
    delta = np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)
    return float(get_metric(metric)(delta))


def bgr_to_hsv(colors: np.ndarray) -> np.ndarray:
    """Convert ``(..., 3)`` BGR colors to ``(..., 3)`` float HSV.

    Hue is in degrees ``[0, 360)``, saturation and value in ``[0, 1]``.
    Gray colors (max == min, including black) map to ``(0, 0, 0)``; no
    division by zero happens for them.  When several channels share the
    maximum, red wins over green, green over blue.
    """
    bgr = np.asarray(colors, dtype=np.float64) / 255.0
    b, g, r = bgr[..., 0], bgr[..., 1], bgr[..., 2]
    v = np.max(bgr, axis=-1)
    span = v - np.min(bgr, axis=-1)
    gray = span == 0
    safe_span = np.where(gray, 1.0, span)
    safe_v = np.where(v == 0, 1.0, v)

    hue = np.where(
        r == v,
        60.0 * (g - b) / safe_span,
        np.where(
            g == v,
            120.0 + 60.0 * (b - r) / safe_span,
            240.0 + 60.0 * (r - g) / safe_span,
        ),
    )
    hue = np.where(hue < 0, hue + 360.0, hue)
    sat = span / safe_v

    hsv = np.stack([hue, sat, v], axis=-1)
    hsv[gray] = 0.0
    return hsv
