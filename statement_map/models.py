"""Pydantic models for the statement map."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Strength(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConnectionType(str, Enum):
    SAME_STATEMENT = "same_statement"
    ENTITY = "entity"
    ARTIFACT = "artifact"
    CHARACTER = "character"
    ORGANIZATION = "organization"
    LOCATION = "location"
    TIMELINE = "timeline"


# --- Loaded records ---


class Location(BaseModel):
    """One GeoJSON point feature. Several may share a statement."""
    model_config = ConfigDict(frozen=True)

    statement: str
    lat: float
    lng: float
    place: str | None = None
    summary: str | None = None
    date: str | None = None
    statement_giver: str | None = None
    entity: str | None = None
    supplemental: str | None = None
    archivist_note: str | None = None
    location_type: str | None = None

    @property
    def coordinate(self) -> tuple[float, float]:
        """(lat, lng), the order the map expects."""
        return (self.lat, self.lng)


class Connection(BaseModel):
    """A directed relation between two statements."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    from_statement: str = Field(alias="from")
    to_statement: str = Field(alias="to")
    type: str = "default"
    strength: str = Strength.LOW.value
    label: str | None = None
    description: str = ""
    evidence: str | None = None
    characters: list[str] = Field(default_factory=list)
    episodes: list[str] = Field(default_factory=list)
    color: str | None = None

    def involves(self, statement: str) -> bool:
        return self.from_statement == statement or self.to_statement == statement

    def other_end(self, statement: str) -> str:
        return self.to_statement if self.from_statement == statement else self.from_statement


# --- Derived ---


class SearchResult(BaseModel):
    """Search hit for one statement, represented by its first location."""
    statement: str
    place: str
    entity: str
    summary: str
    locations: list[Location]
    has_multiple_locations: bool
