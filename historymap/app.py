"""HTTP API serving routes, points of interest, participants and map settings."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import re
from collections.abc import Sequence
from typing import Any, Optional

from flask import Flask, Response, jsonify, request

from .config import ConfigError, load
from .database import APIService, DatabaseError
from .models import InvalidQueryError, POIFilter, ParticipantFilter, RouteFilter

logger = logging.getLogger(__name__)

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


def _parse_id(text: str) -> int:
    """Parse a decimal identifier, rejecting anything outside a signed 64-bit range."""
    if not _ID_PATTERN.fullmatch(text):
        raise ValueError(f"invalid identifier: {text!r}")
    value = int(text)
    if not _INT_MIN <= value <= _INT_MAX:
        raise ValueError(f"identifier out of range: {text!r}")
    return value


def _payload(result: Any) -> Any:
    if isinstance(result, list):
        return [item.to_dict() for item in result]
    return result.to_dict()


def _error(status: int, message: str) -> tuple[Response, int]:
    return jsonify({"error": message}), status


def create_app(service: APIService) -> Flask:
    """Build the web application around a data service."""
    app = Flask(__name__)
    app.json.sort_keys = False

    @app.before_request
    def _short_circuit_preflight() -> Optional[Response]:
        if request.method == "OPTIONS":
            return Response(status=204)
        return None

    @app.after_request
    def _add_cors_headers(response: Response) -> Response:
        response.headers.update(_CORS_HEADERS)
        return response

    @app.errorhandler(InvalidQueryError)
    def _invalid_query(_exc: InvalidQueryError) -> tuple[Response, int]:
        return _error(400, "Invalid query parameters")

    @app.errorhandler(DatabaseError)
    def _database_failure(exc: DatabaseError) -> tuple[Response, int]:
        return _error(500, str(exc))

    def _routes(is_global: bool) -> Response:
        route_filter = RouteFilter.from_query(request.args)
        route_filter = dataclasses.replace(route_filter, is_global=is_global)
        return jsonify(_payload(service.get_routes(route_filter)))

    @app.get("/api/world-routes")
    def get_world_routes() -> Response:
        return _routes(True)

    @app.get("/api/local-routes")
    def get_local_routes() -> Response:
        return _routes(False)

    @app.get("/api/poi")
    def get_pois() -> Response:
        poi_filter = POIFilter.from_query(request.args)
        return jsonify(_payload(service.get_pois(poi_filter)))

    @app.get("/api/participants")
    def get_participants() -> Response:
        participant_filter = ParticipantFilter.from_query(request.args)
        return jsonify(_payload(service.get_participants(participant_filter)))

    @app.get("/api/map-config")
    def get_map_config() -> Response:
        return jsonify(_payload(service.get_map_config()))

    @app.get("/api/participants/<participant_id>/routes")
    def get_participant_routes(participant_id: str) -> Any:
        try:
            key = _parse_id(participant_id)
        except ValueError:
            return _error(400, "Invalid participant ID")
        return jsonify(_payload(service.get_participant_routes(key)))

    @app.get("/api/participants/<participant_id>/pois")
    def get_participant_pois(participant_id: str) -> Any:
        try:
            key = _parse_id(participant_id)
        except ValueError:
            return _error(400, "Invalid participant ID")
        return jsonify(_payload(service.get_participant_pois(key)))

    @app.get("/health")
    def health() -> Any:
        if request.method == "HEAD":
            return Response(status=200)
        return jsonify({"status": "ok"})

    return app


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the API server using settings from the environment."""
    parser = argparse.ArgumentParser(
        prog="historymap",
        description="Serve the history map API; settings come from the environment or .env.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    try:
        cfg = load()
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    try:
        service = APIService(cfg.supabase_url, cfg.supabase_anon_key)
    except DatabaseError as exc:
        logger.error("%s", exc)
        return 1

    app = create_app(service)
    logger.info("Server starting on port %s", cfg.port)
    try:
        app.run(host="0.0.0.0", port=int(cfg.port))
    except (OSError, ValueError) as exc:
        logger.error("Failed to start server: %s", exc)
        return 1
    return 0