import pytest
import requests

from cache import CountryCache
from countries_client import LIST_FIELDS, FetchError
from tests.conftest import FakeClock, FakeResponse


def test_list_all_requests_fields_and_caches(make_client, sample_countries):
    client, session = make_client([FakeResponse(200, sample_countries)])

    assert client.list_all() == sample_countries
    assert client.list_all() == sample_countries

    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == "https://api.example/v3.1/all"
    assert call["params"] == {"fields": ",".join(LIST_FIELDS)}
    assert call["timeout"] == client.timeout


def test_list_all_refetches_after_expiry(make_client, sample_countries):
    clock = FakeClock()
    client, session = make_client(
        [FakeResponse(200, sample_countries), FakeResponse(200, sample_countries[:2])],
        cache=CountryCache(ttl_seconds=10, clock=clock),
    )
    client.list_all()
    clock.now = 11
    assert client.list_all() == sample_countries[:2]
    assert len(session.calls) == 2


def test_force_refresh_skips_cache(make_client, sample_countries):
    client, session = make_client(
        [FakeResponse(200, sample_countries), FakeResponse(200, sample_countries[:1])]
    )
    client.list_all()
    assert client.list_all(force_refresh=True) == sample_countries[:1]
    assert len(session.calls) == 2


def test_transient_errors_are_retried(make_client, sample_countries):
    client, session = make_client([
        requests.ConnectionError("connection reset"),
        FakeResponse(503),
        FakeResponse(200, sample_countries),
    ])
    assert client.list_all() == sample_countries
    assert len(session.calls) == 3


def test_retries_exhausted_raise_fetch_error(make_client):
    client, session = make_client([FakeResponse(500), FakeResponse(500)], retries=2)

    with pytest.raises(FetchError) as excinfo:
        client.list_all()

    assert excinfo.value.endpoint == "/all"
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)
    assert len(session.calls) == 2
    assert client.cache.get() is None


def test_client_errors_are_not_retried(make_client):
    client, session = make_client([FakeResponse(400)])
    with pytest.raises(FetchError):
        client.list_all()
    assert len(session.calls) == 1


def test_invalid_json_raises_fetch_error(make_client):
    client, _ = make_client([FakeResponse(200, invalid_json=True)])
    with pytest.raises(FetchError):
        client.list_all()


def test_get_by_code_unwraps_single_record(make_client, sample_countries):
    france = sample_countries[0]
    client, session = make_client([FakeResponse(200, [france])])
    assert client.get_by_code("FR") == france
    assert session.calls[0]["url"] == "https://api.example/v3.1/alpha/FR"


def test_get_by_code_accepts_bare_object(make_client, sample_countries):
    client, _ = make_client([FakeResponse(200, sample_countries[1])])
    assert client.get_by_code("ES") == sample_countries[1]


def test_get_by_code_unknown_returns_none(make_client):
    client, session = make_client([FakeResponse(404)])
    assert client.get_by_code("ZZ") is None
    assert len(session.calls) == 1


def test_get_by_codes(make_client, sample_countries):
    client, session = make_client([FakeResponse(200, sample_countries[:2])])
    assert client.get_by_codes(["FRA", "ESP"]) == sample_countries[:2]
    assert session.calls[0]["params"] == {"codes": "FRA,ESP"}


def test_get_by_codes_empty_skips_request(make_client):
    client, session = make_client([])
    assert client.get_by_codes([]) == []
    assert session.calls == []


def test_lookups_build_paths(make_client):
    client, session = make_client([FakeResponse(200, []) for _ in range(4)])
    client.search_by_name("united kingdom", full_text=True)
    client.get_by_language("spa")
    client.get_by_region("europe")
    client.get_independent(status=False)

    urls = [call["url"] for call in session.calls]
    assert urls == [
        "https://api.example/v3.1/name/united%20kingdom",
        "https://api.example/v3.1/lang/spa",
        "https://api.example/v3.1/region/europe",
        "https://api.example/v3.1/independent",
    ]
    assert session.calls[0]["params"] == {"fullText": "true"}
    assert session.calls[3]["params"] == {"status": "false"}


def test_search_without_match_returns_empty_list(make_client):
    client, _ = make_client([FakeResponse(404)])
    assert client.search_by_name("atlantis") == []
