"""Data access through the Supabase REST interface."""

from __future__ import annotations

from typing import Any, Iterable, Optional

import requests

from .models import (
    POI,
    MapConfig,
    Participant,
    POIFilter,
    POIPhoto,
    ParticipantFilter,
    Route,
    RouteFilter,
    RoutePoint,
)

_TIMEOUT = 30
_SINGLE_OBJECT = "application/vnd.pgrst.object+json"


class DatabaseError(RuntimeError):
    """A query against the data store failed."""


def _in_list(ids: Iterable[int]) -> str:
    return "in.(" + ",".join(str(i) for i in ids) + ")"


class APIService:
    """Reads routes, points of interest and participants from Supabase."""

    def __init__(
        self,
        supabase_url: str,
        api_key: str,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not supabase_url or not api_key:
            raise DatabaseError("Failed to create Supabase client: url and key are required")
        self._base = supabase_url.rstrip("/") + "/rest/v1"
        self._session = session if session is not None else requests.Session()
        self._headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}

    def _fetch(
        self,
        table: str,
        what: str,
        *,
        select: str = "*",
        filters: Iterable[tuple[str, str]] = (),
        single: bool = False,
    ) -> requests.Response:
        params = [("select", select), *filters]
        headers = dict(self._headers)
        if single:
            headers["Accept"] = _SINGLE_OBJECT
        try:
            response = self._session.get(
                f"{self._base}/{table}", params=params, headers=headers, timeout=_TIMEOUT
            )
        except requests.RequestException as exc:
            raise DatabaseError(f"failed to fetch {what}: {exc}") from exc
        if response.status_code >= 400:
            body = response.text or response.reason
            raise DatabaseError(f"failed to fetch {what}: HTTP {response.status_code}: {body}")
        return response

    @staticmethod
    def _json(response: requests.Response, what: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise DatabaseError(f"failed to unmarshal {what}: {exc}") from exc

    def _decode_list(self, response: requests.Response, what: str, kind: Any) -> list:
        payload = self._json(response, what)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise DatabaseError(f"failed to unmarshal {what}: expected a list")
        try:
            return [kind.from_dict(row) for row in payload]
        except ValueError as exc:
            raise DatabaseError(f"failed to unmarshal {what}: {exc}") from exc

    def _column(self, response: requests.Response, what: str, key: str) -> list[int]:
        payload = self._json(response, what)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise DatabaseError(f"failed to unmarshal {what}: expected a list")
        ids = []
        for row in payload:
            value = row.get(key) if isinstance(row, dict) else row
            if value is None and isinstance(row, dict):
                value = 0
            if isinstance(value, bool) or not isinstance(value, int):
                raise DatabaseError(f"failed to unmarshal {what}: bad {key} {value!r}")
            ids.append(value)
        return ids

    @staticmethod
    def _with_context(loader: Any, key: int, context: str) -> Any:
        try:
            return loader(key)
        except DatabaseError as exc:
            raise DatabaseError(f"{context}: {exc}") from exc

    def get_routes(self, route_filter: RouteFilter) -> list[Route]:
        """Routes matching the filter, each with its path and participants."""
        filters = []
        if route_filter.country is not None:
            filters.append(("country", f"eq.{route_filter.country}"))
        if route_filter.transport is not None:
            filters.append(("transport", f"eq.{route_filter.transport}"))
        if route_filter.is_global is not None:
            filters.append(("is_global", f"eq.{str(route_filter.is_global).lower()}"))

        response = self._fetch("routes", "routes", filters=filters)
        routes = self._decode_list(response, "routes", Route)
        for route in routes:
            route.path = self._with_context(
                self._route_points, route.id, f"failed to fetch route points for route {route.id}"
            )
            route.participants = self._with_context(
                self._route_participants,
                route.id,
                f"failed to fetch participants for route {route.id}",
            )
        return routes

    def _route_points(self, route_id: int) -> list[RoutePoint]:
        response = self._fetch(
            "route_points", "route points", filters=[("route_id", f"eq.{route_id}")]
        )
        return self._decode_list(response, "route points", RoutePoint)

    def _poi_photos(self, poi_id: int) -> list[POIPhoto]:
        response = self._fetch("poi_photos", "POI photos", filters=[("poi_id", f"eq.{poi_id}")])
        return self._decode_list(response, "POI photos", POIPhoto)

    def _participants_by_id(self, ids: list[int]) -> list[Participant]:
        if not ids:
            return []
        response = self._fetch("participants", "participants", filters=[("id", _in_list(ids))])
        return self._decode_list(response, "participants", Participant)

    def _route_participants(self, route_id: int) -> list[Participant]:
        response = self._fetch(
            "route_participants",
            "route_participants",
            select="participant_id",
            filters=[("route_id", f"eq.{route_id}")],
        )
        ids = self._column(response, "route_participants", "participant_id")
        return self._participants_by_id(ids)

    def _poi_participants(self, poi_id: int) -> list[Participant]:
        response = self._fetch(
            "poi_residents",
            "poi_residents",
            select="participant_id",
            filters=[("poi_id", f"eq.{poi_id}")],
        )
        ids = self._column(response, "poi_participants", "participant_id")
        return self._participants_by_id(ids)

    def get_pois(self, poi_filter: POIFilter) -> list[POI]:
        """Points of interest matching the filter, with photos and residents."""
        filters = []
        if poi_filter.type is not None:
            filters.append(("type", f"eq.{poi_filter.type}"))
        if poi_filter.is_living_place is not None:
            filters.append(("is_living_place", f"eq.{str(poi_filter.is_living_place).lower()}"))

        response = self._fetch("poi", "POIs", filters=filters)
        pois = self._decode_list(response, "POIs", POI)
        for poi in pois:
            poi.photos = self._with_context(
                self._poi_photos, poi.id, f"failed to fetch photos for POI {poi.id}"
            )
            poi.participants = self._with_context(
                self._poi_participants, poi.id, f"failed to fetch participants for POI {poi.id}"
            )
        return pois

    def get_participants(self, participant_filter: ParticipantFilter) -> list[Participant]:
        """Participants matching the filter."""
        filters = []
        if participant_filter.country is not None:
            filters.append(("country", f"eq.{participant_filter.country}"))
        if participant_filter.role is not None:
            filters.append(("role", f"eq.{participant_filter.role}"))
        response = self._fetch("participants", "participants", filters=filters)
        return self._decode_list(response, "participants", Participant)

    def get_map_config(self) -> MapConfig:
        """The single map configuration row."""
        response = self._fetch("map_config", "map config", single=True)
        payload = self._json(response, "map config")
        try:
            return MapConfig.from_dict(payload)
        except ValueError as exc:
            raise DatabaseError(f"failed to unmarshal map config: {exc}") from exc

    def get_participant_routes(self, participant_id: int) -> list[Route]:
        """Routes a participant took part in, each with its path."""
        response = self._fetch(
            "route_participants",
            "route_participants",
            select="route_id",
            filters=[("participant_id", f"eq.{participant_id}")],
        )
        ids = self._column(response, "route_participants", "route_id")
        if not ids:
            return []
        response = self._fetch("routes", "routes", filters=[("id", _in_list(ids))])
        routes = self._decode_list(response, "routes", Route)
        for route in routes:
            route.path = self._with_context(
                self._route_points, route.id, f"failed to fetch route points for route {route.id}"
            )
        return routes

    def get_participant_pois(self, participant_id: int) -> list[POI]:
        """Points of interest where a participant lived, each with its photos."""
        response = self._fetch(
            "poi_residents",
            "poi_residents",
            select="poi_id",
            filters=[("participant_id", f"eq.{participant_id}")],
        )
        ids = self._column(response, "poi_residents", "poi_id")
        if not ids:
            return []
        response = self._fetch("poi", "POIs", filters=[("id", _in_list(ids))])
        pois = self._decode_list(response, "POIs", POI)
        for poi in pois:
            poi.photos = self._with_context(
                self._poi_photos, poi.id, f"failed to fetch photos for POI {poi.id}"
            )
        return pois