from ui.image_viewer import ImageViewer
from utils.constants import Keys


def test_open_starts_at_first_image():
    state = {}
    viewer = ImageViewer(state)
    viewer.open(["a", "b", "c"])
    assert viewer.urls == ["a", "b", "c"]
    assert viewer.index == 0


def test_navigation_wraps_around():
    viewer = ImageViewer({})
    viewer.open(["a", "b", "c"])
    viewer.previous()
    assert viewer.index == 2
    viewer.next()
    assert viewer.index == 0
    viewer.next()
    viewer.next()
    viewer.next()
    assert viewer.index == 0


def test_single_image_stays_put():
    viewer = ImageViewer({})
    viewer.open(["only"])
    viewer.next()
    assert viewer.index == 0


def test_close_resets():
    state = {}
    viewer = ImageViewer(state)
    viewer.open(["a", "b"])
    viewer.next()
    viewer.close()
    assert viewer.urls is None
    assert state[Keys.IMAGE_INDEX.value] == 0


def test_navigation_without_images_is_noop():
    viewer = ImageViewer({})
    viewer.next()
    assert viewer.index == 0
