import numpy as np
import pytest

from MultiViewStereo.algorithms.geometry import (
    StereoRectifier,
    concat,
    invert,
    make_pose,
    pixels_to_rectified1,
    relative_pose,
    rectify_images,
    transform_points
)
from MultiViewStereo.core.exceptions import ComputationError, ValidationError
from MultiViewStereo.core.structures import CameraModel, SceneStructure
from MultiViewStereo.core.structures.scene import pose_from_euler


K = np.array([[100.0, 0, 64], [0, 100.0, 48], [0, 0, 1]])


class TestSE3:

    def test_invert(self):
        T = pose_from_euler([10, -20, 5], [0.3, -1.0, 2.0])
        np.testing.assert_allclose(invert(T) @ T, np.eye(4), atol=1e-12)

    def test_concat_applies_first_argument_first(self):
        a_to_b = make_pose(np.eye(3), [1, 0, 0])
        b_to_c = pose_from_euler([0, 0, 90], [0, 0, 0])
        point = np.array([[1.0, 0.0, 0.0]])

        expected = transform_points(b_to_c, transform_points(a_to_b, point))
        np.testing.assert_allclose(transform_points(concat(a_to_b, b_to_c), point), expected)

    def test_relative_pose(self):
        world_to_1 = pose_from_euler([0, 5, 0], [0.1, 0, 0])
        world_to_2 = pose_from_euler([0, -5, 0], [-0.2, 0.1, 0])
        point_world = np.array([[0.5, -0.2, 3.0]])

        in_1 = transform_points(world_to_1, point_world)
        in_2 = transform_points(world_to_2, point_world)
        np.testing.assert_allclose(transform_points(relative_pose(world_to_1, world_to_2), in_1),
                                   in_2, atol=1e-12)


class TestSceneStructure:

    def test_parent_chain(self):
        scene = SceneStructure()
        camera = scene.add_camera(K)
        world_to_parent = pose_from_euler([0, 10, 0], [1, 2, 3])
        parent_to_child = make_pose(np.eye(3), [-0.5, 0, 0])

        parent = scene.add_view(camera, world_to_parent)
        child = scene.add_view(camera, parent_to_child, parent=parent)

        np.testing.assert_allclose(scene.world_to_view(child), parent_to_child @ world_to_parent)
        # Scene itself is unchanged
        np.testing.assert_array_equal(scene.views[child].world_to_view, parent_to_child)

    def test_unknown_camera_or_parent(self):
        scene = SceneStructure()
        with pytest.raises(ValidationError):
            scene.add_view(0, np.eye(4))
        scene.add_camera(K)
        with pytest.raises(ValidationError):
            scene.add_view(0, np.eye(4), parent=3)

    def test_pixel_norm_round_trip_with_distortion(self):
        camera = CameraModel(K, dist=[-0.1, 0.01, 0, 0, 0])
        pixels = np.array([[10.0, 12.0], [64.0, 48.0], [120.0, 90.0]])
        np.testing.assert_allclose(camera.norm_to_pixel(camera.pixel_to_norm(pixels)), pixels,
                                   atol=0.05)

    def test_norm_to_pixel_without_distortion(self):
        camera = CameraModel(K)
        np.testing.assert_allclose(camera.norm_to_pixel([[0.1, -0.2]]), [[74.0, 28.0]])


class TestStereoRectifier:

    def rectify(self, center2):
        rectifier = StereoRectifier()
        camera = CameraModel(K)
        rectifier.set_view1(camera, 128, 96)
        view1_to_view2 = make_pose(np.eye(3), -np.asarray(center2, dtype=float))
        return rectifier.process_view2(camera, 128, 96, view1_to_view2)

    def test_partner_to_the_right(self):
        pair = self.rectify([0.1, 0, 0])
        assert not pair.vertical
        assert not pair.partner_first
        assert pair.baseline == pytest.approx(0.1, rel=1e-6)

    def test_partner_to_the_left(self):
        pair = self.rectify([-0.1, 0, 0])
        assert not pair.vertical
        assert pair.partner_first

    def test_vertical_pair(self):
        pair = self.rectify([0.0, 0.2, 0])
        assert pair.vertical
        assert pair.baseline == pytest.approx(0.2, rel=1e-6)

    def test_no_baseline(self):
        with pytest.raises(ComputationError):
            self.rectify([0, 0, 0])

    def test_view1_required(self):
        with pytest.raises(ComputationError):
            StereoRectifier().process_view2(CameraModel(K), 128, 96, np.eye(4))

    def test_rectified_images_have_view1_size(self):
        pair = self.rectify([0.1, 0, 0])
        image = np.zeros((96, 128), dtype=np.uint8)
        rect1, rect2 = rectify_images(pair, image, image)
        assert rect1.shape == (96, 128)
        assert rect2.shape == (96, 128)

        center = pixels_to_rectified1(pair, [[64.0, 48.0]])
        assert center.shape == (1, 2)
