import sys
from pathlib import Path

import numpy as np
import pytest

project_root = Path(__file__).parent.parent  # Go up from tests/ to project root
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(Path(__file__).parent))

from MultiViewStereo.data import MockSceneProvider

from fakes import build_scene


@pytest.fixture
def scene_builder():
    """Factory for small scenes: {view_id: camera center} -> SimpleScene"""
    return build_scene


@pytest.fixture
def triangle(scene_builder):
    """Three views in a triangle, every pair with quality3D 0.9"""
    scene = scene_builder({
        'a': (0.0, 0.0, 0.0),
        'b': (0.3, 0.0, 0.0),
        'c': (0.15, 0.2, 0.0),
    })
    scene.graph.connect('a', 'b', 0.9)
    scene.graph.connect('b', 'c', 0.9)
    scene.graph.connect('a', 'c', 0.9)
    return scene


@pytest.fixture(scope="module")
def mock_scene():
    return MockSceneProvider(num_views=5, seed=7)


@pytest.fixture
def rng():
    return np.random.default_rng(0)
