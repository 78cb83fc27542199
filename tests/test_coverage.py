import numpy as np
import pytest

from MultiViewStereo.algorithms.geometry import StereoRectifier, make_pose
from MultiViewStereo.algorithms.scoring import RectifiedViewCoverageScorer
from MultiViewStereo.config import CoverageConfig
from MultiViewStereo.core.structures import CameraModel

WIDTH, HEIGHT = 64, 48
CAMERA = CameraModel(np.array([[60.0, 0, 32], [0, 60.0, 24], [0, 0, 1]]))


def pair_to(center2):
    rectifier = StereoRectifier()
    rectifier.set_view1(CAMERA, WIDTH, HEIGHT)
    return rectifier.process_view2(CAMERA, WIDTH, HEIGHT,
                                   make_pose(np.eye(3), -np.asarray(center2, dtype=float)))


def score(partners, config=None):
    scorer = RectifiedViewCoverageScorer(config)
    scorer.initialize(WIDTH, HEIGHT, CAMERA)
    for center2, quality in partners:
        scorer.add_view(WIDTH, HEIGHT, CAMERA, pair_to(center2), quality)
    return scorer.process()


def test_no_partners_scores_zero():
    assert score([]) == 0.0


def test_score_in_unit_range():
    value = score([((0.1, 0, 0), 1.0)])
    assert 0.0 < value <= 1.0


def test_higher_quality_scores_higher():
    assert score([((0.1, 0, 0), 0.9)]) > score([((0.1, 0, 0), 0.3)]) > 0.0


def test_overlapping_partners_have_diminishing_returns():
    single = score([((0.1, 0, 0), 0.5)])
    double = score([((0.1, 0, 0), 0.5), ((-0.1, 0, 0), 0.5)])
    assert single < double < 2 * single


def test_rotated_partner_covers_less():
    rectifier = StereoRectifier()
    rectifier.set_view1(CAMERA, WIDTH, HEIGHT)
    # Partner turned 30 degrees about the vertical axis only sees part of the center image
    R = np.array([[np.cos(0.52), 0, np.sin(0.52)], [0, 1, 0], [-np.sin(0.52), 0, np.cos(0.52)]])
    rotated = rectifier.process_view2(CAMERA, WIDTH, HEIGHT, make_pose(R, [-0.1, 0, 0]))

    scorer = RectifiedViewCoverageScorer()
    scorer.initialize(WIDTH, HEIGHT, CAMERA)
    scorer.add_view(WIDTH, HEIGHT, CAMERA, rotated, 1.0)
    assert scorer.process() < score([((0.1, 0, 0), 1.0)])


def test_deterministic():
    partners = [((0.1, 0, 0), 0.7), ((0, 0.1, 0), 0.4)]
    assert score(partners) == score(partners)


def test_min_covered_fraction_drops_weak_cells():
    config = CoverageConfig(min_covered_fraction=0.5)
    assert score([((0.1, 0, 0), 0.3)], config) == 0.0
    assert score([((0.1, 0, 0), 0.6)], config) == pytest.approx(score([((0.1, 0, 0), 0.6)]))


def test_score_property_matches_process():
    scorer = RectifiedViewCoverageScorer()
    scorer.initialize(WIDTH, HEIGHT, CAMERA)
    scorer.add_view(WIDTH, HEIGHT, CAMERA, pair_to((0.1, 0, 0)), 0.8)
    assert scorer.score == 0.0
    value = scorer.process()
    assert scorer.score == value
