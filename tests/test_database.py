import pytest
import responses
from responses import matchers

from historymap.database import APIService, DatabaseError
from historymap.models import POIFilter, ParticipantFilter, RouteFilter

BASE = "https://db.example.com/rest/v1"

PARTICIPANT = {"id": 7, "name": "Anna", "country": "Italy", "role": "sailor", "description": "d"}
ROUTE = {"id": 1, "name": "Voyage", "transport": "ship", "is_global": True}
POINT = {"id": 3, "route_id": 1, "lat": 41.5, "lng": 12.25}
POI_ROW = {"id": 5, "name": "House", "lat": 1.0, "lng": 2.0, "type": "home", "description": "x"}
PHOTO = {"id": 9, "poi_id": 5, "url": "https://img.example.com/a.jpg"}


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def add(mock, table, params, body, status=200):
    mock.add(
        responses.GET,
        f"{BASE}/{table}",
        json=body,
        status=status,
        match=[matchers.query_param_matcher(params)],
    )


@pytest.fixture
def service():
    return APIService("https://db.example.com", "placeholder")


def test_constructor_requires_url_and_key():
    with pytest.raises(DatabaseError):
        APIService("", "placeholder")
    with pytest.raises(DatabaseError):
        APIService("https://db.example.com", "")


def test_get_routes_with_filters(service, mocked):
    add(mocked, "routes", {"select": "*", "country": "eq.Italy", "is_global": "eq.true"}, [ROUTE])
    add(mocked, "route_points", {"select": "*", "route_id": "eq.1"}, [POINT])
    add(mocked, "route_participants", {"select": "participant_id", "route_id": "eq.1"}, [{"participant_id": 7}])
    add(mocked, "participants", {"select": "*", "id": "in.(7)"}, [PARTICIPANT])

    routes = service.get_routes(RouteFilter(country="Italy", is_global=True))
    assert len(routes) == 1
    out = routes[0].to_dict()
    assert out["path"] == [POINT]
    assert out["participants"] == [PARTICIPANT]


def test_get_routes_sends_api_key(service, mocked):
    mocked.add(
        responses.GET,
        f"{BASE}/routes",
        json=[],
        match=[matchers.header_matcher({"apikey": "placeholder", "Authorization": "Bearer placeholder"})],
    )
    assert service.get_routes(RouteFilter()) == []


def test_get_routes_without_participants_omits_field(service, mocked):
    add(mocked, "routes", {"select": "*"}, [ROUTE])
    add(mocked, "route_points", {"select": "*", "route_id": "eq.1"}, [])
    add(mocked, "route_participants", {"select": "participant_id", "route_id": "eq.1"}, [])
    routes = service.get_routes(RouteFilter())
    assert routes[0].participants == []
    assert "participants" not in routes[0].to_dict()
    assert len(mocked.calls) == 3


def test_get_routes_server_error(service, mocked):
    add(mocked, "routes", {"select": "*"}, {"message": "boom"}, status=500)
    with pytest.raises(DatabaseError, match="^failed to fetch routes"):
        service.get_routes(RouteFilter())


def test_get_routes_point_failure_names_route(service, mocked):
    add(mocked, "routes", {"select": "*"}, [ROUTE])
    add(mocked, "route_points", {"select": "*", "route_id": "eq.1"}, {"message": "boom"}, status=500)
    with pytest.raises(DatabaseError, match="^failed to fetch route points for route 1"):
        service.get_routes(RouteFilter())


def test_get_routes_bad_payload(service, mocked):
    add(mocked, "routes", {"select": "*"}, {"id": 1})
    with pytest.raises(DatabaseError, match="^failed to unmarshal routes"):
        service.get_routes(RouteFilter())


def test_get_pois_with_filters(service, mocked):
    add(mocked, "poi", {"select": "*", "type": "eq.home", "is_living_place": "eq.false"}, [POI_ROW])
    add(mocked, "poi_photos", {"select": "*", "poi_id": "eq.5"}, [PHOTO])
    add(mocked, "poi_residents", {"select": "participant_id", "poi_id": "eq.5"}, [{"participant_id": 7}])
    add(mocked, "participants", {"select": "*", "id": "in.(7)"}, [PARTICIPANT])

    pois = service.get_pois(POIFilter(type="home", is_living_place=False))
    assert pois[0].photos[0].url == PHOTO["url"]
    assert pois[0].participants[0].to_dict() == PARTICIPANT


def test_get_participants(service, mocked):
    add(mocked, "participants", {"select": "*", "country": "eq.Italy", "role": "eq.sailor"}, [PARTICIPANT])
    result = service.get_participants(ParticipantFilter(country="Italy", role="sailor"))
    assert [p.to_dict() for p in result] == [PARTICIPANT]


def test_get_map_config_requests_single_object(service, mocked):
    config = {"id": 1, "center_lat": 48.5, "center_lng": 2.25, "zoom": 5}
    mocked.add(
        responses.GET,
        f"{BASE}/map_config",
        json=config,
        match=[matchers.header_matcher({"Accept": "application/vnd.pgrst.object+json"})],
    )
    assert service.get_map_config().to_dict() == config


def test_get_map_config_error(service, mocked):
    add(mocked, "map_config", {"select": "*"}, {"message": "none"}, status=406)
    with pytest.raises(DatabaseError, match="^failed to fetch map config"):
        service.get_map_config()


def test_get_participant_routes_empty(service, mocked):
    add(mocked, "route_participants", {"select": "route_id", "participant_id": "eq.7"}, [])
    assert service.get_participant_routes(7) == []
    assert len(mocked.calls) == 1


def test_get_participant_routes(service, mocked):
    add(mocked, "route_participants", {"select": "route_id", "participant_id": "eq.7"}, [{"route_id": 1}, {"route_id": 2}])
    second = dict(ROUTE, id=2)
    add(mocked, "routes", {"select": "*", "id": "in.(1,2)"}, [ROUTE, second])
    add(mocked, "route_points", {"select": "*", "route_id": "eq.1"}, [POINT])
    add(mocked, "route_points", {"select": "*", "route_id": "eq.2"}, [])
    routes = service.get_participant_routes(7)
    assert [r.id for r in routes] == [1, 2]
    assert routes[0].path[0].to_dict() == POINT
    assert routes[1].path == []


def test_get_participant_pois(service, mocked):
    add(mocked, "poi_residents", {"select": "poi_id", "participant_id": "eq.7"}, [{"poi_id": 5}])
    add(mocked, "poi", {"select": "*", "id": "in.(5)"}, [POI_ROW])
    add(mocked, "poi_photos", {"select": "*", "poi_id": "eq.5"}, [PHOTO])
    pois = service.get_participant_pois(7)
    assert pois[0].name == "House"
    assert pois[0].photos[0].to_dict() == PHOTO
    assert pois[0].participants == []


def test_get_participant_pois_photo_failure(service, mocked):
    add(mocked, "poi_residents", {"select": "poi_id", "participant_id": "eq.7"}, [{"poi_id": 5}])
    add(mocked, "poi", {"select": "*", "id": "in.(5)"}, [POI_ROW])
    add(mocked, "poi_photos", {"select": "*", "poi_id": "eq.5"}, {"message": "x"}, status=500)
    with pytest.raises(DatabaseError, match="^failed to fetch photos for POI 5"):
        service.get_participant_pois(7)