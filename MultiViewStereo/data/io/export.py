"""
Point cloud export through Open3D.
"""

from pathlib import Path
from typing import Optional, Union

import numpy as np

from MultiViewStereo.core.exceptions import ConfigurationError
from MultiViewStereo.logger import get_logger

try:
    import open3d as o3d
    HAS_OPEN3D = True
except ImportError:
    HAS_OPEN3D = False

logger = get_logger("data.export")


def to_open3d(points: np.ndarray, colors: Optional[np.ndarray] = None):
    """
    Convert (N, 3) points into an Open3D PointCloud.

    Args:
        points: (N, 3) points
        colors: Optional (N, 3) colors, either in [0, 1] or [0, 255]

    Raises:
        ConfigurationError: If Open3D is not installed
    """
    if not HAS_OPEN3D:
        raise ConfigurationError("Open3D is required: pip install open3d")

    pcd = o3d.geometry.PointCloud()
    pcd.points = o3d.utility.Vector3dVector(np.asarray(points, dtype=np.float64).reshape(-1, 3))
    if colors is not None:
        colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
        pcd.colors = o3d.utility.Vector3dVector(colors / 255.0 if colors.max() > 1 else colors)
    return pcd


def save_point_cloud(points: np.ndarray, path: Union[str, Path],
                     colors: Optional[np.ndarray] = None) -> Path:
    """
    Write a point cloud to disk (format picked by Open3D from the extension).

    Returns:
        Path written to
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    pcd = to_open3d(points, colors)
    if not o3d.io.write_point_cloud(str(path), pcd):
        raise IOError(f"Failed to write point cloud to {path}")

    logger.info(f"✓ Point cloud saved to {path} ({len(pcd.points):,} points)")
    return path
