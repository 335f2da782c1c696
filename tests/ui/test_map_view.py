from unittest.mock import MagicMock

from models.models import Location, Memory
from ui.map_view import (
    build_actions,
    build_marker_views,
    escape_story,
    format_date,
    normalize_location,
    photo_label,
    popup_html,
    position_key,
    resolve_map_event,
    tooltip_text,
)
from utils.constants import Keys


def _memory(memory_id="m1", story="A story", images=None, timestamp=1_700_000_000_000):
    return Memory(
        id=memory_id,
        story=story,
        location=Location(lat=10.0, lng=20.0),
        timestamp=timestamp,
        image_urls=images or [],
    )


def test_format_date():
    assert format_date(1_700_000_000_000) == "2023-11-14"
    assert format_date(0) == "Date Unknown"


def test_photo_label_pluralizes():
    assert photo_label(1) == "View 1 Photo"
    assert photo_label(3) == "View 3 Photos"


def test_story_is_escaped_in_popup():
    html = popup_html(_memory(story='<script>alert("x")</script>\nline two'))
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "line two" in html
    assert escape_story("a\nb") == "a<br>b"


def test_popup_mentions_photos_only_when_present():
    assert "Photo" not in popup_html(_memory())
    assert "View 2 Photos" in popup_html(_memory(images=["a", "b"]))
    assert "2023-11-14" in popup_html(_memory())


def test_popup_shows_first_four_thumbnails():
    urls = [f"https://cdn.example.com/p{i}.jpg" for i in range(5)]
    html = popup_html(_memory(images=urls))
    assert html.count("<img") == 4
    assert "p3.jpg" in html and "p4.jpg" not in html
    assert "and more photos..." in html

    few = popup_html(_memory(images=urls[:2]))
    assert few.count("<img") == 2
    assert "and more photos" not in few


def test_popup_thumbnail_url_is_attribute_escaped():
    html = popup_html(_memory(images=['https://x.example.com/a.jpg" onerror="alert(1)']))
    assert 'onerror="alert' not in html
    assert "&quot; onerror=&quot;alert(1)" in html


def test_tooltip_truncates_and_escapes():
    assert tooltip_text("<b>bold</b>") == "&lt;b&gt;bold&lt;/b&gt;"
    long = tooltip_text("x" * 100)
    assert len(long) == 60
    assert long.endswith("...")
    assert tooltip_text("   ") == ""


def test_build_marker_views():
    views = build_marker_views([_memory(images=["a"])])
    assert views[0].memory_id == "m1"
    assert (views[0].lat, views[0].lng) == (10.0, 20.0)
    assert views[0].photo_count == 1


def test_build_actions_respects_authorization_and_images():
    with_images = _memory("a", images=["u1"])
    without_images = _memory("b")
    on_view, on_delete = MagicMock(), MagicMock()

    actions = build_actions([with_images, without_images], False, on_view, on_delete)
    assert actions["a"].view_photos is not None
    assert actions["b"].view_photos is None
    assert actions["a"].delete is None

    actions = build_actions([with_images], True, on_view, on_delete)
    actions["a"].delete()
    on_delete.assert_called_once_with(with_images)
    actions["a"].view_photos()
    on_view.assert_called_once_with(with_images)


def test_normalize_location_wraps_longitude():
    assert normalize_location(10, 190).lng == -170
    assert normalize_location(10, -181).lng == 179
    assert normalize_location(95, 0).lat == 90


def test_resolve_map_click_once():
    state = {}
    result = {"last_clicked": {"lat": 1.5, "lng": 2.5}, "last_object_clicked": None}

    event = resolve_map_event(result, state, {})
    assert event.kind == "location"
    assert event.location == Location(lat=1.5, lng=2.5)
    assert resolve_map_event(result, state, {}) is None


def test_resolve_marker_click():
    state = {}
    index = {position_key(10.0, 20.0): "m1"}
    result = {"last_clicked": None, "last_object_clicked": {"lat": 10.0, "lng": 20.0}}

    event = resolve_map_event(result, state, index)
    assert event.kind == "marker"
    assert event.memory_id == "m1"
    assert state[Keys.LAST_MARKER_CLICK.value] == {"lat": 10.0, "lng": 20.0}


def test_resolve_click_on_unknown_marker_is_ignored():
    result = {"last_clicked": None, "last_object_clicked": {"lat": 5.0, "lng": 5.0}}
    assert resolve_map_event(result, {}, {}) is None


def test_resolve_empty_result():
    assert resolve_map_event(None, {}, {}) is None
