import html
import folium
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Tuple
from streamlit_folium import st_folium
from models.models import Location, Memory
from utils.constants import Keys, Label, MapDefaults

TOOLTIP_CHARS = 60
POPUP_THUMBNAILS = 4


@dataclass(frozen=True)
class MarkerView:
    """Everything the map needs to draw one memory. Text is already escaped."""

    memory_id: str
    lat: float
    lng: float
    popup_html: str
    tooltip: str
    date_label: str
    photo_count: int


@dataclass(frozen=True)
class MemoryActions:
    view_photos: Optional[Callable[[], None]] = None
    delete: Optional[Callable[[], None]] = None


@dataclass(frozen=True)
class MapEvent:
    kind: str  # "location" or "marker"
    location: Location
    memory_id: Optional[str] = None


def format_date(timestamp_ms: int) -> str:
    if not timestamp_ms:
        return Label.DATE_UNKNOWN.value
    try:
        moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return Label.DATE_UNKNOWN.value
    return moment.strftime("%Y-%m-%d")


def photo_label(count: int) -> str:
    return f"View {count} Photo{'' if count == 1 else 's'}"


def escape_story(story: str) -> str:
    return html.escape(story).replace("\n", "<br>")


def popup_html(memory: Memory) -> str:
    date_label = format_date(memory.timestamp)
    parts = [
        '<div style="font-family: sans-serif; color: #1f2937;">',
        f'<h4 style="margin: 0 0 4px 0;">{Label.POPUP_TITLE.value}</h4>',
        f'<p style="font-style: italic; margin: 0 0 8px 0;">{escape_story(memory.story)}</p>',
    ]
    if memory.image_urls:
        parts.append('<div style="display: flex; gap: 4px; flex-wrap: wrap; margin: 0 0 6px 0;">')
        for url in memory.image_urls[:POPUP_THUMBNAILS]:
            parts.append(
                f'<img src="{html.escape(url, quote=True)}" alt="Memory photo" '
                'style="width: 56px; height: 56px; object-fit: cover; border-radius: 4px;">'
            )
        parts.append("</div>")
        if len(memory.image_urls) > POPUP_THUMBNAILS:
            parts.append('<p style="font-size: 11px; margin: 0 0 4px 0;">and more photos...</p>')
        parts.append(
            f'<p style="color: #5b21b6; font-weight: 600; margin: 0 0 8px 0;">'
            f"{photo_label(len(memory.image_urls))} from the sidebar</p>"
        )
    parts.append('<hr style="margin: 6px 0;">')
    parts.append(f'<p style="font-size: 11px; margin: 0;">Marked on: <b>{date_label}</b></p>')
    parts.append("</div>")
    return "".join(parts)


def tooltip_text(story: str) -> str:
    first_line = story.strip().splitlines()[0] if story.strip() else ""
    if len(first_line) > TOOLTIP_CHARS:
        first_line = first_line[: TOOLTIP_CHARS - 3] + "..."
    return html.escape(first_line)


def position_key(lat: float, lng: float) -> Tuple[float, float]:
    return (round(lat, 6), round(lng, 6))


def build_marker_views(memories: List[Memory]) -> List[MarkerView]:
    return [
        MarkerView(
            memory_id=m.id,
            lat=m.location.lat,
            lng=m.location.lng,
            popup_html=popup_html(m),
            tooltip=tooltip_text(m.story),
            date_label=format_date(m.timestamp),
            photo_count=len(m.image_urls),
        )
        for m in memories
    ]


def build_actions(
    memories: List[Memory],
    authorized: bool,
    on_view_photos: Callable[[Memory], None],
    on_delete: Callable[[Memory], None],
) -> Dict[str, MemoryActions]:
    """Interaction callbacks per memory id. Delete exists only while authorized."""
    return {
        m.id: MemoryActions(
            view_photos=partial(on_view_photos, m) if m.image_urls else None,
            delete=partial(on_delete, m) if authorized else None,
        )
        for m in memories
    }


def normalize_location(lat: float, lng: float) -> Location:
    """Leaflet reports longitudes past +/-180 after panning around the globe."""
    wrapped = ((lng + 180.0) % 360.0) - 180.0
    return Location(lat=max(-90.0, min(90.0, lat)), lng=wrapped)


def resolve_map_event(
    result: Optional[Dict[str, Any]],
    state: MutableMapping[str, Any],
    marker_index: Dict[Tuple[float, float], str],
) -> Optional[MapEvent]:
    """
    Turn the widget's last-click values into a new event.

    The widget repeats its last values on every rerun, so a click counts only
    when it differs from the one already seen.
    """
    if not result:
        return None

    object_clicked = result.get("last_object_clicked")
    if object_clicked and object_clicked != state.get(Keys.LAST_MARKER_CLICK.value):
        state[Keys.LAST_MARKER_CLICK.value] = object_clicked
        memory_id = marker_index.get(
            position_key(object_clicked["lat"], object_clicked["lng"])
        )
        if memory_id:
            return MapEvent(
                kind="marker",
                location=normalize_location(object_clicked["lat"], object_clicked["lng"]),
                memory_id=memory_id,
            )

    clicked = result.get("last_clicked")
    if clicked and clicked != state.get(Keys.LAST_MAP_CLICK.value):
        state[Keys.LAST_MAP_CLICK.value] = clicked
        return MapEvent(
            kind="location", location=normalize_location(clicked["lat"], clicked["lng"])
        )
    return None


class MapView:
    """Leaflet map (through folium) showing every memory plus the transient pin."""

    def __init__(self, key: str = "memory_map", height: int = MapDefaults.HEIGHT.value):
        self.key = key
        self.height = height

    def base_map(self) -> folium.Map:
        return folium.Map(
            location=MapDefaults.CENTER.value,
            zoom_start=MapDefaults.ZOOM.value,
            max_zoom=MapDefaults.MAX_ZOOM.value,
            tiles=MapDefaults.TILES.value,
        )

    def marker_layer(
        self, views: List[MarkerView], temp_location: Optional[Location]
    ) -> folium.FeatureGroup:
        """Rebuilt from scratch on every render."""
        layer = folium.FeatureGroup(name="memories")
        for view in views:
            folium.Marker(
                location=[view.lat, view.lng],
                popup=folium.Popup(view.popup_html, max_width=MapDefaults.POPUP_MAX_WIDTH.value),
                tooltip=view.tooltip or None,
                icon=folium.Icon(color="purple", icon="heart"),
            ).add_to(layer)
        if temp_location is not None:
            folium.Marker(
                location=[temp_location.lat, temp_location.lng],
                icon=folium.Icon(color="blue", icon="plus"),
            ).add_to(layer)
        return layer

    def render(
        self,
        memories: List[Memory],
        temp_location: Optional[Location],
        state: MutableMapping[str, Any],
    ) -> Optional[MapEvent]:
        views = build_marker_views(memories)
        result = st_folium(
            self.base_map(),
            key=self.key,
            height=self.height,
            use_container_width=True,
            feature_group_to_add=self.marker_layer(views, temp_location),
            returned_objects=["last_clicked", "last_object_clicked"],
        )
        # Newest wins when pins share a position.
        marker_index = {position_key(v.lat, v.lng): v.memory_id for v in reversed(views)}
        return resolve_map_event(result, state, marker_index)
