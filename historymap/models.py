"""Records served by the API and the filters accepted on its query strings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Optional

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_NUMBER = (int, float)

# Field metadata: "empty" drops zero values from output, "none" drops None only.
_OMIT_EMPTY = {"omit": "empty"}
_OMIT_NONE = {"omit": "none"}


class InvalidQueryError(ValueError):
    """A query-string parameter could not be parsed."""


def parse_bool(value: str) -> bool:
    """Parse a query-string boolean; an empty value counts as false."""
    if value == "" or value in _FALSE_WORDS:
        return False
    if value in _TRUE_WORDS:
        return True
    raise InvalidQueryError(f"invalid boolean value: {value!r}")


def _mapping(data: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"cannot decode {name} from {type(data).__name__}")
    return data


def _field(data: Mapping[str, Any], key: str, kind: Any, default: Any = None) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if (isinstance(value, bool) and kind is not bool) or not isinstance(value, kind):
        raise ValueError(f"field {key!r} has the wrong type: {value!r}")
    return value


def _list(data: Mapping[str, Any], key: str, kind: Any) -> list:
    return [kind.from_dict(item) for item in _field(data, key, list, [])]


def _encode(record: Any) -> dict[str, Any]:
    """Encode a record dataclass as a JSON-ready dict."""
    out: dict[str, Any] = {}
    for f in fields(record):
        value = getattr(record, f.name)
        omit = f.metadata.get("omit")
        if (omit == "empty" and not value) or (omit == "none" and value is None):
            continue
        if isinstance(value, list):
            value = [item.to_dict() for item in value]
        out[f.name] = value
    return out


@dataclass
class Participant:
    """A person taking part in the history project."""

    id: int = 0
    name: str = ""
    country: str = ""
    role: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Participant":
        data = _mapping(data, "participant")
        return cls(
            id=_field(data, "id", int, 0),
            name=_field(data, "name", str, ""),
            country=_field(data, "country", str, ""),
            role=_field(data, "role", str, ""),
            description=_field(data, "description", str, ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return _encode(self)


@dataclass
class RoutePoint:
    """One coordinate on a route's path."""

    id: int = field(default=0, metadata=_OMIT_EMPTY)
    route_id: int = field(default=0, metadata=_OMIT_EMPTY)
    lat: float = 0.0
    lng: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> "RoutePoint":
        data = _mapping(data, "route point")
        return cls(
            id=_field(data, "id", int, 0),
            route_id=_field(data, "route_id", int, 0),
            lat=float(_field(data, "lat", _NUMBER, 0.0)),
            lng=float(_field(data, "lng", _NUMBER, 0.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return _encode(self)


@dataclass
class RouteParticipant:
    """Link between a route and a participant."""

    id: int = 0
    route_id: int = 0
    participant_id: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "RouteParticipant":
        data = _mapping(data, "route participant")
        return cls(
            id=_field(data, "id", int, 0),
            route_id=_field(data, "route_id", int, 0),
            participant_id=_field(data, "participant_id", int, 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return _encode(self)


@dataclass
class Route:
    """A route travelled, with its path and participants."""

    id: int = 0
    name: str = ""
    transport: str = ""
    is_global: bool = False
    country: Optional[str] = field(default=None, metadata=_OMIT_NONE)
    path: list[RoutePoint] = field(default_factory=list)
    participants: list[Participant] = field(default_factory=list, metadata=_OMIT_EMPTY)

    @classmethod
    def from_dict(cls, data: Any) -> "Route":
        data = _mapping(data, "route")
        return cls(
            id=_field(data, "id", int, 0),
            name=_field(data, "name", str, ""),
            transport=_field(data, "transport", str, ""),
            is_global=_field(data, "is_global", bool, False),
            country=_field(data, "country", str),
            path=_list(data, "path", RoutePoint),
            participants=_list(data, "participants", Participant),
        )

    def to_dict(self) -> dict[str, Any]:
        return _encode(self)


@dataclass
class POIPhoto:
    """A photo attached to a point of interest."""

    id: int = field(default=0, metadata=_OMIT_EMPTY)
    poi_id: int = field(default=0, metadata=_OMIT_EMPTY)
    url: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "POIPhoto":
        data = _mapping(data, "POI photo")
        return cls(
            id=_field(data, "id", int, 0),
            poi_id=_field(data, "poi_id", int, 0),
            url=_field(data, "url", str, ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return _encode(self)


@dataclass
class POI:
    """A point of interest on the map."""

    id: int = 0
    name: str = ""
    lat: float = 0.0
    lng: float = 0.0
    type: str = ""
    description: str = ""
    is_living_place: Optional[bool] = field(default=None, metadata=_OMIT_NONE)
    resident_participant_id: Optional[int] = field(default=None, metadata=_OMIT_NONE)
    photos: list[POIPhoto] = field(default_factory=list)
    participants: list[Participant] = field(default_factory=list, metadata=_OMIT_EMPTY)

    @classmethod
    def from_dict(cls, data: Any) -> "POI":
        data = _mapping(data, "POI")
        return cls(
            id=_field(data, "id", int, 0),
            name=_field(data, "name", str, ""),
            lat=float(_field(data, "lat", _NUMBER, 0.0)),
            lng=float(_field(data, "lng", _NUMBER, 0.0)),
            type=_field(data, "type", str, ""),
            description=_field(data, "description", str, ""),
            is_living_place=_field(data, "is_living_place", bool),
            resident_participant_id=_field(data, "resident_participant_id", int),
            photos=_list(data, "photos", POIPhoto),
            participants=_list(data, "participants", Participant),
        )

    def to_dict(self) -> dict[str, Any]:
        return _encode(self)


@dataclass
class MapConfig:
    """Initial map centre and zoom level."""

    id: int = 0
    center_lat: float = 0.0
    center_lng: float = 0.0
    zoom: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "MapConfig":
        data = _mapping(data, "map config")
        return cls(
            id=_field(data, "id", int, 0),
            center_lat=float(_field(data, "center_lat", _NUMBER, 0.0)),
            center_lng=float(_field(data, "center_lng", _NUMBER, 0.0)),
            zoom=_field(data, "zoom", int, 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return _encode(self)


def _first(args: Mapping[str, Any], key: str) -> Optional[str]:
    if key not in args:
        return None
    value = args.get(key)
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _optional_bool(args: Mapping[str, Any], key: str) -> Optional[bool]:
    raw = _first(args, key)
    return None if raw is None else parse_bool(raw)


@dataclass(frozen=True)
class RouteFilter:
    """Filters that narrow a route listing."""

    country: Optional[str] = None
    transport: Optional[str] = None
    is_global: Optional[bool] = None

    @classmethod
    def from_query(cls, args: Mapping[str, Any]) -> "RouteFilter":
        return cls(
            country=_first(args, "country"),
            transport=_first(args, "transport"),
            is_global=_optional_bool(args, "is_global"),
        )


@dataclass(frozen=True)
class POIFilter:
    """Filters that narrow a point-of-interest listing."""

    type: Optional[str] = None
    is_living_place: Optional[bool] = None

    @classmethod
    def from_query(cls, args: Mapping[str, Any]) -> "POIFilter":
        return cls(
            type=_first(args, "type"),
            is_living_place=_optional_bool(args, "is_living_place"),
        )


@dataclass(frozen=True)
class ParticipantFilter:
    """Filters that narrow a participant listing."""

    country: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_query(cls, args: Mapping[str, Any]) -> "ParticipantFilter":
        return cls(country=_first(args, "country"), role=_first(args, "role"))