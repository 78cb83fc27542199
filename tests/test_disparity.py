import numpy as np
import pytest

from MultiViewStereo.algorithms.disparity import MultiViewToFusedDisparity, SGBMStereoDisparity
from MultiViewStereo.algorithms.geometry import StereoRectifier
from MultiViewStereo.config import FusedDisparityConfig
from MultiViewStereo.core.exceptions import ComputationError, ConfigurationError
from MultiViewStereo.core.structures import DisparityParameters
from MultiViewStereo.data import MockSceneProvider

from fakes import ConstantStereo


@pytest.fixture(scope="module")
def mock():
    return MockSceneProvider(num_views=3, seed=3)


@pytest.fixture
def config():
    return FusedDisparityConfig(disparity_range=16)


def images_of(mock):
    return {mock.graph.vertices[v].scene_index: mock.images.load_image(v) for v in mock.view_ids}


class TestDisparityParameters:

    def test_depth_round_trip(self):
        param = DisparityParameters(disparity_min=2.0, disparity_range=20.0, baseline=0.2,
                                    K=np.diag([50.0, 50.0, 1.0]))
        depth = param.disparity_to_depth(np.array([3.0]))
        assert depth[0] == pytest.approx(2.0)
        assert param.depth_to_disparity(depth)[0] == pytest.approx(3.0)

    def test_invalid_values(self):
        param = DisparityParameters(disparity_range=10.0, baseline=0.1, K=np.eye(3))
        values = np.array([np.nan, -1.0, 10.0, 0.0, 5.0])
        assert param.is_valid(values).tolist() == [False, False, False, False, True]
        assert np.isnan(param.disparity_to_depth(values)[:4]).all()


class TestSGBMStereoDisparity:

    def test_range_rounded_to_multiple_of_16(self):
        assert SGBMStereoDisparity(FusedDisparityConfig(disparity_range=20)).disparity_range == 32

    def test_recovers_known_shift(self, mock, config):
        stereo = SGBMStereoDisparity(config)
        left = mock.images.load_image('view_000')
        right = mock.images.load_image('view_001')

        disparity = stereo.process(left, right)
        assert disparity.dtype == np.float32
        assert disparity.shape == left.shape

        # Ignore the band SGBM can't match on the left
        interior = disparity[10:-10, stereo.disparity_range + 5:-10]
        valid = interior[np.isfinite(interior)]
        assert valid.size > 0.5 * interior.size
        assert np.median(valid) == pytest.approx(mock.disparity_of(1), abs=0.5)

    def test_color_input(self, mock, config):
        left = np.dstack([mock.images.load_image('view_000')] * 3)
        right = np.dstack([mock.images.load_image('view_001')] * 3)
        assert SGBMStereoDisparity(config).process(left, right).shape == left.shape[:2]


class TestMultiViewToFusedDisparity:

    def test_fused_depth_matches_plane(self, mock, config):
        engine = MultiViewToFusedDisparity(config, SGBMStereoDisparity(config))
        engine.initialize(mock.scene, images_of(mock))
        assert engine.process(1, [0, 2])

        param = engine.fused_param
        mask = engine.fused_mask
        assert engine.fused_disparity.shape == (96, 128)
        assert mask.sum() > 0.3 * mask.size
        assert np.all(np.isfinite(engine.fused_disparity[mask]))
        assert np.all(np.isnan(engine.fused_disparity[~mask]))

        depth = param.disparity_to_depth(engine.fused_disparity[mask])
        assert np.nanmedian(depth) == pytest.approx(mock.plane_depth, rel=0.05)

        np.testing.assert_array_equal(param.K, mock.scene.camera_of(1).K)
        np.testing.assert_array_equal(param.rotate_to_rectified, np.eye(3))
        assert param.baseline == pytest.approx(mock.baseline, rel=1e-3)
        assert np.nanmax(engine.fused_disparity) < param.disparity_range

    def test_listener_sees_every_pair(self, mock, config):
        calls = []
        engine = MultiViewToFusedDisparity(config, SGBMStereoDisparity(config))
        engine.listener = lambda left, right, *rest: calls.append((left, right, len(rest)))
        engine.initialize(mock.scene, images_of(mock))
        engine.process(1, [0, 2])
        assert calls == [(1, 0, 5), (1, 2, 5)]

    def test_min_pair_support(self, mock):
        config = FusedDisparityConfig(disparity_range=16, min_pair_support=2)
        engine = MultiViewToFusedDisparity(config, SGBMStereoDisparity(config))
        engine.initialize(mock.scene, images_of(mock))
        assert engine.process(0, [1]) is False

    def test_degenerate_pairs_are_skipped(self, scene_builder):
        simple = scene_builder({'a': (0, 0, 0), 'twin': (0, 0, 0)})
        images = {simple.index(v): simple.images.load_image(v) for v in ('a', 'twin')}

        engine = MultiViewToFusedDisparity(stereo_disparity=ConstantStereo())
        engine.initialize(simple.scene, images)
        assert engine.process(0, [1]) is False

    def test_constant_disparity_pair(self, scene_builder):
        simple = scene_builder({'a': (0, 0, 0), 'b': (0.1, 0, 0)})
        images = {simple.index(v): simple.images.load_image(v) for v in ('a', 'b')}

        engine = MultiViewToFusedDisparity(stereo_disparity=ConstantStereo(value=4.0))
        engine.initialize(simple.scene, images)
        assert engine.process(0, [1])

        # Depth = baseline * focal / disparity in the rectified frame
        rectifier = StereoRectifier()
        rectifier.set_view1(simple.scene.camera_of(0), 32, 24)
        pair = rectifier.process_view2(simple.scene.camera_of(1), 32, 24,
                                       simple.scene.world_to_view(1))
        expected = 0.1 * pair.rectified_K[0, 0] / 4.0

        depth = engine.fused_param.disparity_to_depth(engine.fused_disparity[engine.fused_mask])
        assert np.median(depth) == pytest.approx(expected, rel=0.02)

    def test_requires_stereo(self, mock):
        engine = MultiViewToFusedDisparity()
        engine.initialize(mock.scene, images_of(mock))
        with pytest.raises(ConfigurationError):
            engine.process(1, [0, 2])

    def test_requires_initialize(self, config):
        engine = MultiViewToFusedDisparity(config, SGBMStereoDisparity(config))
        with pytest.raises(ComputationError):
            engine.process(1, [0, 2])
