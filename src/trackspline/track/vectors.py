"""
Vector helpers shared by the node model and the curve exporter.

All vectors are float64 numpy arrays of shape (3,). World axes follow the
track editor: +Y is up, the track advances along +Z by default.
"""

import numpy as np

WORLD_UP = np.array([0.0, 1.0, 0.0])
LEVEL_LATERAL = np.array([-1.0, 0.0, 0.0])

EPSILON = 1e-9


def as_vector(value) -> np.ndarray:
    """Copy a 3-sequence into a float64 vector."""
    vec = np.array(value, dtype=float).reshape(3)
    return vec


def length(vec: np.ndarray) -> float:
    return float(np.linalg.norm(vec))


def normalize(vec: np.ndarray, fallback: np.ndarray | None = None) -> np.ndarray:
    """Return unit vector, or ``fallback`` (default: ``vec`` copy) if too short."""
    norm = np.linalg.norm(vec)
    if norm < EPSILON:
        return (fallback if fallback is not None else vec).copy()
    return vec / norm


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Unsigned angle between two vectors in radians (0 for degenerate input)."""
    na = np.linalg.norm(a)
    nb = np.linalg.norm(b)
    if na < EPSILON or nb < EPSILON:
        return 0.0
    return float(np.arctan2(np.linalg.norm(np.cross(a, b)), np.dot(a, b)))


def rotate_about_axis(vec: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    """Rodrigues rotation of ``vec`` about unit ``axis`` by ``angle`` radians."""
    cos_a = np.cos(angle)
    sin_a = np.sin(angle)
    return (
        vec * cos_a
        + np.cross(axis, vec) * sin_a
        + axis * np.dot(axis, vec) * (1.0 - cos_a)
    )


def is_finite(vec: np.ndarray) -> bool:
    return bool(np.all(np.isfinite(vec)))


def wrap_degrees(angle: float) -> float:
    """Wrap an angle in degrees into (-180, 180]."""
    wrapped = (angle + 180.0) % 360.0 - 180.0
    if wrapped == -180.0:
        return 180.0
    return wrapped


def to_export_space(vec: np.ndarray) -> np.ndarray:
    """Convert editor coordinates to the simulator's (Z axis mirrored)."""
    return np.array([vec[0], vec[1], -vec[2]])
