"""
Rigid body transforms stored as 4x4 homogeneous matrices.

Convention: a transform named ``a_to_b`` maps points expressed in frame a into
frame b, ``X_b = a_to_b @ X_a``.
"""

import numpy as np


def make_pose(R: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Build a 4x4 transform from a rotation (3x3) and translation (3,) or (3, 1)"""
    T = np.eye(4)
    T[:3, :3] = np.asarray(R, dtype=np.float64)
    T[:3, 3] = np.asarray(t, dtype=np.float64).reshape(3)
    return T


def invert(T: np.ndarray) -> np.ndarray:
    """Inverse of a rigid transform without a general matrix inverse"""
    R = T[:3, :3]
    t = T[:3, 3]
    out = np.eye(4)
    out[:3, :3] = R.T
    out[:3, 3] = -R.T @ t
    return out


def concat(a_to_b: np.ndarray, b_to_c: np.ndarray) -> np.ndarray:
    """Apply a_to_b first, then b_to_c"""
    return b_to_c @ a_to_b


def relative_pose(world_to_view1: np.ndarray, world_to_view2: np.ndarray) -> np.ndarray:
    """
    Transform from view 1 to view 2 given both world to view transforms.

    Composes the inverse of view 1's world pose with view 2's world pose.
    """
    return concat(invert(world_to_view1), world_to_view2)


def transform_points(T: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply T to (N, 3) points"""
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    return points @ T[:3, :3].T + T[:3, 3]
