import numpy as np
import pytest

from MultiViewStereo.algorithms.cloud import DisparityCloud
from MultiViewStereo.algorithms.geometry import make_pose
from MultiViewStereo.config import DisparityCloudConfig
from MultiViewStereo.core.structures import CameraModel, DisparityParameters

WIDTH, HEIGHT = 40, 30
CAMERA = CameraModel(np.array([[50.0, 0, 20], [0, 50.0, 15], [0, 0, 1]]))


def parameters(baseline=0.1):
    return DisparityParameters(disparity_min=0.0, disparity_range=20.0, baseline=baseline,
                               K=CAMERA.K.copy(), rotate_to_rectified=np.eye(3))


def constant_disparity(value):
    return np.full((HEIGHT, WIDTH), value, dtype=np.float32), np.ones((HEIGHT, WIDTH), dtype=bool)


def add(cloud, value, world_to_view=None, view_id=None, param=None):
    disparity, mask = constant_disparity(value)
    return cloud.add_disparity(disparity, mask,
                               np.eye(4) if world_to_view is None else world_to_view,
                               param or parameters(),
                               CAMERA.pixel_to_norm, CAMERA.norm_to_pixel, view_id=view_id)


def test_points_on_plane():
    cloud = DisparityCloud()
    added = add(cloud, 5.0, view_id='a')

    assert added == WIDTH * HEIGHT
    points = cloud.cloud
    assert points.shape == (WIDTH * HEIGHT, 3)
    # depth = 0.1 * 50 / 5
    np.testing.assert_allclose(points[:, 2], 1.0, rtol=1e-9)


def test_masked_and_invalid_pixels_skipped():
    cloud = DisparityCloud()
    disparity, mask = constant_disparity(5.0)
    mask[:10] = False
    disparity[20, 5] = np.nan
    disparity[21, 5] = 25.0  # outside disparity_range

    added = cloud.add_disparity(disparity, mask, np.eye(4), parameters(),
                                CAMERA.pixel_to_norm, CAMERA.norm_to_pixel)
    assert added == WIDTH * (HEIGHT - 10) - 2


def test_same_view_twice_adds_nothing():
    cloud = DisparityCloud()
    first = add(cloud, 5.0)
    second = add(cloud, 5.0)

    assert first > 0
    assert second == 0
    assert len(cloud) == first


def test_different_depth_is_not_redundant():
    cloud = DisparityCloud()
    first = add(cloud, 5.0)
    second = add(cloud, 10.0)
    assert second == first


def test_partially_overlapping_view():
    cloud = DisparityCloud()
    first = add(cloud, 5.0)

    # Second camera 0.2 to the right sees the same plane at depth 1
    world_to_view = make_pose(np.eye(3), [-0.2, 0, 0])
    second = add(cloud, 5.0, world_to_view=world_to_view)

    assert 0 < second < first
    np.testing.assert_allclose(cloud.cloud[:, 2], 1.0, rtol=1e-9)


def test_existing_points_are_never_modified():
    cloud = DisparityCloud()
    add(cloud, 5.0)
    before = cloud.cloud.copy()
    add(cloud, 8.0, world_to_view=make_pose(np.eye(3), [-0.1, 0, 0]))

    np.testing.assert_array_equal(cloud.cloud[:len(before)], before)


def test_view_ranges():
    cloud = DisparityCloud()
    add(cloud, 5.0, view_id='a')
    add(cloud, 5.0, view_id='b')
    add(cloud, 10.0, view_id='c')

    assert [(r.view_id, r.count) for r in cloud.views] == [
        ('a', WIDTH * HEIGHT), ('b', 0), ('c', WIDTH * HEIGHT)]
    assert len(cloud.points_of('c')) == WIDTH * HEIGHT
    assert len(cloud.points_of('b')) == 0
    np.testing.assert_allclose(cloud.points_of('c')[:, 2], 0.5)


def test_min_point_distance():
    config = DisparityCloudConfig(disparity_similar_tol=0.0, min_point_distance=0.05)
    cloud = DisparityCloud(config)
    add(cloud, 5.0)
    # Slightly closer plane: no disparity match but every point is within 5cm
    assert add(cloud, 5.2) == 0


def test_reset():
    cloud = DisparityCloud()
    add(cloud, 5.0)
    cloud.reset()
    assert len(cloud) == 0
    assert cloud.cloud.shape == (0, 3)
    assert cloud.views == []


def test_points_behind_camera_are_ignored():
    cloud = DisparityCloud()
    add(cloud, 5.0)
    # Camera at z=-3 looking away from the plane
    flipped = make_pose(np.diag([-1.0, 1.0, -1.0]), [0, 0, -3.0])
    assert add(cloud, 5.0, world_to_view=flipped) == WIDTH * HEIGHT


@pytest.mark.parametrize("tol, expected_second", [(0.5, 0), (0.05, WIDTH * HEIGHT)])
def test_disparity_similar_tol(tol, expected_second):
    cloud = DisparityCloud(DisparityCloudConfig(disparity_similar_tol=tol))
    add(cloud, 5.0)
    assert add(cloud, 5.2) == expected_second
