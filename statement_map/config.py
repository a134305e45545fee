"""Configuration loading for the statement map."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class DataConfig(BaseModel):
    locations_path: str = "data/locations.geojson"
    connections_path: str = "data/connections.json"

    @property
    def resolved_locations_path(self) -> Path:
        return _resolve(self.locations_path)

    @property
    def resolved_connections_path(self) -> Path:
        return _resolve(self.connections_path)


class MapConfig(BaseModel):
    center: tuple[float, float] = (54.0, -2.0)
    zoom: int = 5
    min_zoom: int = 2
    max_zoom: int = 20
    tiles: str = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
    attribution: str = "© OpenStreetMap contributors"
    cluster_radius: int = 60
    fit_padding: int = 50
    fit_max_zoom: int = 8


class HighlightConfig(BaseModel):
    line_opacity: float = 0.7
    label_opacity: float = 1.0


class SearchConfig(BaseModel):
    id_prefix: str = "MAG"
    pad_width: int = 3
    jump_zoom: int = 12
    fly_duration: float = 1.5
    pulse_duration: float = 2.0
    blur_hide_delay: float = 0.2
    summary_preview_chars: int = 100


class PanelConfig(BaseModel):
    default_archivist_note: str = "Statement recorded for posterity."


class Config(BaseModel):
    output_path: str = "data/statement_map.html"
    data: DataConfig = Field(default_factory=DataConfig)
    map: MapConfig = Field(default_factory=MapConfig)
    highlight: HighlightConfig = Field(default_factory=HighlightConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    panel: PanelConfig = Field(default_factory=PanelConfig)

    @property
    def resolved_output_path(self) -> Path:
        return _resolve(self.output_path)


def _project_root() -> Path:
    """Return the statement map project root directory."""
    return Path(__file__).parent.parent


def _resolve(path: str) -> Path:
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return _project_root() / p


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        return Config(**raw)

    return Config()
