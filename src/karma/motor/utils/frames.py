from __future__ import annotations

import math
from dataclasses import dataclass
from functools import reduce
from typing import Final, Optional, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

"""Homogeneous transform helpers.

Transforms are plain ``(4, 4)`` NumPy arrays.  Orientations travel as
*axis-angle 4-vectors* ``[ax, ay, az, angle]`` with a unit axis and the angle
in radians, which is the format the cartesian controllers accept.  A null
rotation is reported as ``[0, 0, 1, 0]`` so the axis always has unit norm.

Angle extraction goes through a quaternion and ``2 * atan2(|xyz|, w)``, which
stays well conditioned near 0 and near pi.
"""

_EPS: Final = 1e-9

# ---------------------------------------------------------------------------
# Pose container
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Pose:
    """End-effector target: position in meters, axis-angle orientation."""

    position: np.ndarray
    orientation: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "position", np.asarray(self.position, dtype=np.float64).reshape(3))
        object.__setattr__(self, "orientation", np.asarray(self.orientation, dtype=np.float64).reshape(4))

    def transform(self) -> np.ndarray:
        return from_axis_angle(self.orientation, self.position)

    def offset(self, delta: Sequence[float]) -> "Pose":
        """Same orientation, position shifted by ``delta`` (world frame)."""
        return Pose(self.position + np.asarray(delta, dtype=np.float64), self.orientation)

    def __repr__(self) -> str:
        pos = np.array2string(self.position, precision=3, suppress_small=True)
        ori = np.array2string(self.orientation, precision=3, suppress_small=True)
        return f"Pose(x={pos}, o={ori})"


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def make_transform(rotation: Optional[np.ndarray] = None, position: Optional[Sequence[float]] = None) -> np.ndarray:
    """Assemble a transform from an optional 3x3 rotation and translation."""
    h = np.eye(4, dtype=np.float64)
    if rotation is not None:
        h[:3, :3] = np.asarray(rotation, dtype=np.float64)
    if position is not None:
        h[:3, 3] = np.asarray(position, dtype=np.float64).reshape(3)
    return h


def translation(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> np.ndarray:
    return make_transform(position=(x, y, z))


def rotation_about_axis(axis: Sequence[float], angle_rad: float) -> np.ndarray:
    """Pure rotation of ``angle_rad`` about ``axis`` (need not be unit)."""
    axis = np.asarray(axis, dtype=np.float64).reshape(3)
    norm = np.linalg.norm(axis)
    if norm < _EPS:
        return np.eye(4, dtype=np.float64)
    rot = Rotation.from_rotvec(axis / norm * angle_rad)
    return make_transform(rotation=rot.as_matrix())


def from_axis_angle(orientation: Sequence[float], position: Optional[Sequence[float]] = None) -> np.ndarray:
    """Axis-angle 4-vector (plus optional position) -> transform."""
    o = np.asarray(orientation, dtype=np.float64).reshape(4)
    h = rotation_about_axis(o[:3], o[3])
    if position is not None:
        h[:3, 3] = np.asarray(position, dtype=np.float64).reshape(3)
    return h


# ---------------------------------------------------------------------------
# Algebra
# ---------------------------------------------------------------------------

def compose(*transforms: np.ndarray) -> np.ndarray:
    """Left-to-right product ``T1 @ T2 @ ... @ Tn``."""
    if not transforms:
        return np.eye(4, dtype=np.float64)
    return reduce(np.matmul, (np.asarray(t, dtype=np.float64) for t in transforms))


def invert(transform: np.ndarray) -> np.ndarray:
    """Rigid-body inverse ``(R^T, -R^T t)``."""
    h = np.asarray(transform, dtype=np.float64)
    rot_t = h[:3, :3].T
    inv = np.eye(4, dtype=np.float64)
    inv[:3, :3] = rot_t
    inv[:3, 3] = -rot_t @ h[:3, 3]
    return inv


def to_axis_angle(transform: np.ndarray) -> np.ndarray:
    """Rotation block of ``transform`` -> ``[ax, ay, az, angle]``.

    The angle lies in ``[0, pi]``.
    """
    q = Rotation.from_matrix(np.asarray(transform, dtype=np.float64)[:3, :3]).as_quat()  # xyzw
    if q[3] < 0.0:
        q = -q
    xyz = q[:3]
    sin_h = np.linalg.norm(xyz)
    theta = 2.0 * np.arctan2(sin_h, q[3])
    if theta < _EPS:
        return np.array([0.0, 0.0, 1.0, 0.0])
    return np.concatenate([xyz / sin_h, [theta]])


def position_of(transform: np.ndarray) -> np.ndarray:
    return np.array(transform[:3, 3], dtype=np.float64)


def pose_from_transform(transform: np.ndarray) -> Pose:
    return Pose(position_of(transform), to_axis_angle(transform))


def transform_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Frobenius norm of ``a - b`` (translation and rotation mixed)."""
    return float(np.linalg.norm(np.asarray(a) - np.asarray(b)))


# ---------------------------------------------------------------------------
# Angles
# ---------------------------------------------------------------------------

def normalize_angle_deg(theta_deg: float) -> float:
    """Wrap an angle in degrees into ``(-180, 180]``."""
    wrapped = math.fmod(float(theta_deg), 360.0)
    if wrapped <= -180.0:
        wrapped += 360.0
    elif wrapped > 180.0:
        wrapped -= 360.0
    return wrapped
