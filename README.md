# historymap

A small read-only HTTP API for an interactive history map. It reads routes,
route points, points of interest (with photos and residents), participants
and the map's initial view from a Supabase (PostgREST) database and serves
them as JSON.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Configuration

`historymap.config.load()` reads settings from the environment. Variables
that are not already set are also taken from a `.env` file (by default the
one in the working directory; `load(env_file)` takes another path). Values
already in the environment win over the file.

| Variable               | Required | Default |
|------------------------|----------|---------|
| `SUPABASE_URL`         | yes      |         |
| `SUPABASE_ANON_KEY`    | yes      |         |
| `SUPABASE_SERVICE_KEY` | no       | empty   |
| `BACKEND_PORT`         | no       | `8080`  |

A missing required setting raises `historymap.config.ConfigError`; the
`historymap` command then logs the message and exits with status 1. If there
is no `.env` file and `SUPABASE_URL` is not set, a warning is logged.

Example `.env`:

```
SUPABASE_URL=https://project.example.com
SUPABASE_ANON_KEY=placeholder
BACKEND_PORT=8080
```

## Running

```
historymap
```

The command takes no options besides `--help`. It listens on all interfaces
on `BACKEND_PORT`, using Flask's built-in server.

## Endpoints

Every response carries permissive CORS headers
(`Access-Control-Allow-Origin: *`). Any `OPTIONS` request is answered with
`204` and an empty body.

| Method     | Path                             | Query parameters                  |
|------------|----------------------------------|-----------------------------------|
| GET        | `/api/world-routes`              | `country`, `transport`            |
| GET        | `/api/local-routes`              | `country`, `transport`            |
| GET        | `/api/poi`                       | `type`, `is_living_place`         |
| GET        | `/api/participants`              | `country`, `role`                 |
| GET        | `/api/map-config`                |                                   |
| GET        | `/api/participants/<id>/routes`  |                                   |
| GET        | `/api/participants/<id>/pois`    |                                   |
| GET, HEAD  | `/health`                        |                                   |

- World routes are those with `is_global` true, local routes those with it
  false; an `is_global` query parameter is checked but does not change this.
  Each route includes its `path` points and, when there are any, its
  `participants`.
- Points of interest include their `photos` and, when there are any, their
  resident `participants`.
- `/api/participants/<id>/routes` gives the routes the participant took part
  in, with their paths. `/api/participants/<id>/pois` gives the points of
  interest the participant lived at, with their photos.
- `/health` answers `{"status": "ok"}` to `GET` and an empty `200` to `HEAD`.

Booleans in query parameters accept `1`, `t`, `T`, `true`, `True`, `TRUE`
and `0`, `f`, `F`, `false`, `False`, `FALSE`; an empty value counts as false.
Anything else gives `400` with `{"error": "Invalid query parameters"}`.
A participant id that is not a decimal integer gives `400` with
`{"error": "Invalid participant ID"}`. Database failures give `500` with
`{"error": "<message>"}`.

## Using it as a library

```python
from historymap.app import create_app
from historymap.database import APIService
from historymap.models import RouteFilter

service = APIService("https://project.example.com", "placeholder")
routes = service.get_routes(RouteFilter(country="France"))
print([route.to_dict() for route in routes])

app = create_app(service)   # a Flask application
```

`APIService` offers `get_routes`, `get_pois`, `get_participants`,
`get_map_config`, `get_participant_routes` and `get_participant_pois`; it
takes an optional `requests.Session` as its third argument. Failures raise
`historymap.database.DatabaseError`.

`historymap.models` holds the record dataclasses (`Route`, `RoutePoint`,
`RouteParticipant`, `POI`, `POIPhoto`, `Participant`, `MapConfig`), each with
`from_dict` and `to_dict`, and the filters `RouteFilter`, `POIFilter` and
`ParticipantFilter`, each with `from_query`, plus `parse_bool`.

## What it does not do

- It only reads. There are no endpoints that create, change or delete
  records, although the CORS headers list `POST`, `PUT` and `DELETE`.
- `SUPABASE_SERVICE_KEY` is read into the configuration but not used; every
  query is made with the anonymous key.
- It has no production-grade server of its own; the `historymap` command
  runs Flask's built-in server. For anything else, serve the application
  from `create_app` with a WSGI server of your choice.