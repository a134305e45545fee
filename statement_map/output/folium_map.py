"""Static Leaflet export of the statement map.

Markers are clustered by proximity. Every connection layer from the index
becomes its own hidden layer group that can be switched on from the layer
control. The side panel holds the default placeholder content.
"""

import logging
from pathlib import Path

import folium
from branca.element import MacroElement
from folium.plugins import MarkerCluster
from jinja2 import Template

from statement_map.config import Config
from statement_map.connection_index import ConnectionLayer, IndexBuildResult
from statement_map.loader import Dataset
from statement_map.panel import DetailPanel, PanelContent, render_connection, render_location

logger = logging.getLogger(__name__)

_CLUSTER_ICON = """function(cluster) {
  var count = cluster.getChildCount();
  var size = 'small';
  if (count > 20) size = 'large';
  else if (count > 10) size = 'medium';
  return L.divIcon({
    html: '<div class="marker-cluster-' + size + '">' + count + '</div>',
    className: 'marker-cluster',
    iconSize: L.point(40, 40)
  });
}"""

_STYLE = """
<style>
  .statement-marker { width: 30px; height: 30px; background: rgba(139, 0, 0, 0.85);
    border: 2px solid #c9a86a; border-radius: 50%; box-shadow: 0 0 10px rgba(139, 0, 0, 0.5); }
  .connection-label-icon { background: transparent; border: none; }
  .connection-label { padding: 2px 8px; border-radius: 3px; color: white; font-size: 10px;
    text-align: center; white-space: nowrap; box-shadow: 0 2px 4px rgba(0,0,0,0.5); }
  #map-header { position: fixed; top: 10px; left: 60px; z-index: 1000; background: rgba(20,20,20,0.9);
    color: #d4d4d4; padding: 6px 12px; border-radius: 3px; font-family: monospace; }
  #panel { position: fixed; top: 60px; right: 10px; bottom: 30px; width: 340px; z-index: 1000;
    overflow-y: auto; background: rgba(20,20,20,0.95); color: #d4d4d4; padding: 12px 16px;
    border: 1px solid #8b0000; border-radius: 3px; font-family: monospace; }
  .archivist-note { border-left: 3px solid #8b0000; padding-left: 8px; margin-top: 10px; }
</style>
"""


def _esc(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;").replace("'", "&#39;")


_POPUP_WIDTH = 360


def _popup(content: PanelContent) -> folium.Popup:
    """Panel markup as a marker or line popup."""
    html = (
        f'<div class="panel-popup"><h3>{content.title}</h3>'
        f'<div class="panel-meta">{content.meta}</div>'
        f'<div class="panel-text">{content.body}</div></div>'
    )
    return folium.Popup(html, max_width=_POPUP_WIDTH)


class _ZoomTopRight(MacroElement):
    _template = Template(
        """
        {% macro script(this, kwargs) %}
        {{this._parent.get_name()}}.zoomControl.setPosition('topright');
        {% endmacro %}
        """
    )


def _add_connection_layer(m: folium.Map, layer: ConnectionLayer, line_opacity: float) -> None:
    conn = layer.connection
    name = f"{conn.id}: {conn.label}" if conn.label else conn.id
    group = folium.FeatureGroup(name=name, show=False)
    detail = render_connection(conn)

    for line in layer.lines:
        kwargs = {
            "locations": line.points,
            "color": line.color,
            "weight": line.weight,
            "opacity": line_opacity,
            "tooltip": conn.label or conn.id,
            "popup": _popup(detail),
        }
        if line.dash_array:
            kwargs["dash_array"] = line.dash_array
        folium.PolyLine(**kwargs).add_to(group)

    for label in layer.labels:
        folium.Marker(
            location=label.position,
            icon=folium.DivIcon(
                html=f'<div class="connection-label" style="background: {label.color};">{_esc(label.text)}</div>',
                class_name="connection-label-icon",
                icon_size=(150, 30),
            ),
            popup=_popup(detail),
        ).add_to(group)

    group.add_to(m)


def build_folium_map(dataset: Dataset, index: IndexBuildResult, config: Config) -> folium.Map:
    map_cfg = config.map
    m = folium.Map(
        location=list(map_cfg.center),
        zoom_start=map_cfg.zoom,
        min_zoom=map_cfg.min_zoom,
        max_zoom=map_cfg.max_zoom,
        tiles=None,
    )
    m.add_child(_ZoomTopRight())
    folium.TileLayer(
        tiles=map_cfg.tiles,
        attr=map_cfg.attribution,
        name="OpenStreetMap",
        max_zoom=19,
    ).add_to(m)

    cluster = MarkerCluster(
        name="Statements",
        options={
            "showCoverageOnHover": False,
            "maxClusterRadius": map_cfg.cluster_radius,
            "spiderfyOnMaxZoom": True,
            "zoomToBoundsOnClick": True,
        },
        icon_create_function=_CLUSTER_ICON,
    )
    cluster.add_to(m)

    for loc in dataset.locations:
        marker_kwargs = {
            "location": list(loc.coordinate),
            "icon": folium.DivIcon(
                html='<div class="statement-marker"></div>',
                class_name="statement-marker-icon",
                icon_size=(30, 30),
            ),
            "popup": _popup(render_location(
                loc, dataset.connections_for(loc.statement), config=config.panel,
            )),
        }
        if loc.place:
            marker_kwargs["tooltip"] = f"{_esc(loc.place)}<br>{_esc(loc.statement)}"
        folium.Marker(**marker_kwargs).add_to(cluster)

    for layer in index.layers.values():
        _add_connection_layer(m, layer, config.highlight.line_opacity)

    if index.layers:
        folium.LayerControl(collapsed=True).add_to(m)

    if dataset.locations:
        lats = [loc.lat for loc in dataset.locations]
        lngs = [loc.lng for loc in dataset.locations]
        m.fit_bounds(
            [[min(lats), min(lngs)], [max(lats), max(lngs)]],
            padding=(map_cfg.fit_padding, map_cfg.fit_padding),
            max_zoom=map_cfg.fit_max_zoom,
        )

    subtitle = (
        f"Statement Location Index • {len(dataset.locations)} locations • "
        f"{len(dataset.connections)} connections"
    )
    root = m.get_root()
    root.header.add_child(folium.Element(_STYLE))
    root.html.add_child(folium.Element(f'<div id="map-header" class="subtitle">{_esc(subtitle)}</div>'))
    root.html.add_child(folium.Element(DetailPanel().to_html()))
    return m


def export_map(
    dataset: Dataset,
    index: IndexBuildResult,
    config: Config,
    output_path: Path | None = None,
) -> Path:
    """Write the map as a self-contained HTML page. Returns output path."""
    if output_path is None:
        output_path = config.resolved_output_path

    m = build_folium_map(dataset, index, config)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    m.save(str(output_path))
    logger.info("Map saved to %s (%d markers, %d connection layers)",
                output_path, len(dataset.locations), len(index.layers))
    return output_path
