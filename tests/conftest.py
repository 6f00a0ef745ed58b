import pytest
import requests

from cache import CountryCache
from countries_client import RestCountriesClient


def make_country(cca2, common, region="Europe", population=1000, area=10.0, cca3=None):
    return {
        "cca2": cca2,
        "cca3": cca3 or cca2 + "X",
        "name": {"common": common, "official": f"Republic of {common}"},
        "flags": {"png": f"https://flags.example/{cca2.lower()}.png", "svg": "", "alt": ""},
        "region": region,
        "subregion": "",
        "capital": [f"{common} City"],
        "population": population,
        "area": area,
    }


@pytest.fixture
def sample_countries():
    return [
        make_country("FR", "France", population=68000000, area=551695.0, cca3="FRA"),
        make_country("ES", "Spain", population=47000000, area=505990.0, cca3="ESP"),
        make_country("JP", "Japan", region="Asia", population=125000000, area=377930.0, cca3="JPN"),
        make_country("BR", "Brazil", region="Americas", population=203000000, area=8515767.0, cca3="BRA"),
        make_country("EG", "Egypt", region="Africa", population=105000000, area=1002450.0, cca3="EGY"),
        make_country("AQ", "Antarctica", region="Antarctic", population=None, area=None, cca3="ATA"),
    ]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Replays queued responses (or exceptions) and records every call."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_client():
    def _make(responses, retries=3, cache=None):
        session = FakeSession(responses)
        client = RestCountriesClient(
            base_url="https://api.example/v3.1",
            retries=retries,
            base_delay=0,
            max_delay=0,
            jitter=0,
            cache=cache or CountryCache(),
            session=session,
        )
        return client, session
    return _make
