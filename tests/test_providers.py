import cv2
import numpy as np
import pytest

from MultiViewStereo.core.exceptions import ConfigurationError, ResourceError
from MultiViewStereo.data import (
    FolderImageLookup,
    InMemoryImageLookup,
    LRUCache,
    MockSceneProvider,
    save_point_cloud,
    to_open3d
)
from MultiViewStereo.data.io import HAS_OPEN3D


@pytest.fixture
def image_folder(tmp_path, rng):
    for name, (h, w) in {'IMG_001': (20, 30), 'IMG_002': (24, 32)}.items():
        cv2.imwrite(str(tmp_path / f"{name}.png"), rng.integers(0, 255, (h, w)).astype(np.uint8))
    (tmp_path / "notes.txt").write_text("not an image")
    return tmp_path


class TestInMemoryImageLookup:

    def test_shape_and_image(self):
        image = np.zeros((10, 20), dtype=np.uint8)
        lookup = InMemoryImageLookup({'a': image})
        assert lookup.load_shape('a') == (20, 10)
        assert lookup.load_image('a') is image
        assert lookup.load_image('b') is None

    def test_unknown_shape(self):
        with pytest.raises(ResourceError):
            InMemoryImageLookup().load_shape('missing')


class TestFolderImageLookup:

    def test_finds_images(self, image_folder):
        lookup = FolderImageLookup(image_folder)
        assert lookup.view_ids() == ['IMG_001', 'IMG_002']

    def test_load_shape_is_cached(self, image_folder):
        lookup = FolderImageLookup(image_folder)
        assert lookup.load_shape('IMG_001') == (30, 20)
        assert lookup.load_shape('IMG_001') == (30, 20)

        stats = lookup.get_cache_stats()
        assert stats['hits'] == 1
        assert stats['misses'] == 1

    def test_load_image(self, image_folder):
        lookup = FolderImageLookup(image_folder)
        image = lookup.load_image('IMG_002')
        assert image.shape == (24, 32)
        assert lookup.load_image('IMG_999') is None

    def test_color(self, image_folder):
        lookup = FolderImageLookup(image_folder, grayscale=False)
        assert lookup.load_image('IMG_002').shape == (24, 32, 3)

    def test_unknown_view(self, image_folder):
        with pytest.raises(ResourceError):
            FolderImageLookup(image_folder).load_shape('IMG_999')

    def test_missing_folder(self, tmp_path):
        with pytest.raises(ResourceError):
            FolderImageLookup(tmp_path / "missing")

    def test_unreadable_image(self, tmp_path):
        (tmp_path / "broken.png").write_bytes(b"not a png")
        lookup = FolderImageLookup(tmp_path)
        assert lookup.load_image('broken') is None
        with pytest.raises(ResourceError):
            lookup.load_shape('broken')


class TestLRUCache:

    def test_eviction(self):
        cache = LRUCache(max_size=2)
        cache.put('a', 1)
        cache.put('b', 2)
        cache.get('a')
        cache.put('c', 3)

        assert 'a' in cache and 'c' in cache
        assert 'b' not in cache
        assert len(cache) == 2

    def test_disabled(self):
        cache = LRUCache(max_size=0)
        cache.put('a', 1)
        assert len(cache) == 0

    def test_get_or_load(self):
        cache = LRUCache()
        calls = []

        def loader(key):
            calls.append(key)
            return None if key == 'none' else key.upper()

        assert cache.get_or_load('x', loader) == 'X'
        assert cache.get_or_load('x', loader) == 'X'
        assert cache.get_or_load('none', loader) is None
        assert cache.get_or_load('none', loader) is None
        assert calls == ['x', 'none', 'none']

    def test_clear(self):
        cache = LRUCache()
        cache.put('a', 1)
        cache.get('a')
        cache.clear()
        assert cache.get_stats()['size'] == 0
        assert cache.hits == 0


class TestMockSceneProvider:

    def test_structure(self):
        mock = MockSceneProvider(num_views=4, max_gap=2, seed=1)
        assert len(mock.graph) == 4
        # gaps of 1 and 2
        assert len(mock.graph.edges()) == 3 + 2
        assert mock.images.load_shape('view_000') == mock.image_size
        assert all(0.0 <= e.quality3d <= 1.0 for e in mock.graph.edges())

    def test_images_are_shifted_copies(self):
        mock = MockSceneProvider(num_views=2, seed=1)
        shift = int(mock.disparity_of(1))
        left = mock.images.load_image('view_000').astype(int)
        right = mock.images.load_image('view_001').astype(int)
        np.testing.assert_array_equal(right[:, :-shift], left[:, shift:])

    def test_seed_reproducible(self):
        a = MockSceneProvider(num_views=2, seed=5).images.load_image('view_001')
        b = MockSceneProvider(num_views=2, seed=5).images.load_image('view_001')
        np.testing.assert_array_equal(a, b)


@pytest.mark.skipif(HAS_OPEN3D, reason="Open3D is installed")
def test_export_requires_open3d():
    with pytest.raises(ConfigurationError):
        to_open3d(np.zeros((3, 3)))


def test_save_point_cloud(tmp_path):
    pytest.importorskip("open3d")
    points = np.random.default_rng(0).random((50, 3))
    path = save_point_cloud(points, tmp_path / "out" / "cloud.ply")

    assert path.exists()
    assert len(to_open3d(points).points) == 50
