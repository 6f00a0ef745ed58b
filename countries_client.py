"""
RestCountriesClient: a wrapper around the REST Countries API with retry logic.

Fetches country records from https://restcountries.com/v3.1. Transient
failures are retried with exponential backoff; anything that still fails is
raised as FetchError so the UI can show it and offer a retry.
"""

import logging
from urllib.parse import quote

import requests
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
    retry_if_exception,
    before_sleep_log,
)

from cache import CountryCache

logger = logging.getLogger(__name__)

BASE_URL = "https://restcountries.com/v3.1"

# Seconds before a single request is abandoned
DEFAULT_TIMEOUT = 15

DEFAULT_RETRIES = 3

# The /all endpoint requires an explicit field list (max 10 fields)
LIST_FIELDS = (
    "name", "flags", "cca2", "cca3", "population",
    "region", "subregion", "area", "capital",
)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class FetchError(Exception):
    """
    Raised when country data cannot be fetched or decoded.

    Attributes:
        endpoint (str): The API path that failed, e.g. "/all".
    """

    def __init__(self, endpoint, message):
        super().__init__(f"Failed to fetch {endpoint}: {message}")
        self.endpoint = endpoint
    # End of __init__
# End of class FetchError


def _is_retryable(exc):
    """Connection problems, timeouts, rate limiting and 5xx are worth retrying."""
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return False
# End of function _is_retryable()


class RestCountriesClient:
    """
    Client for the REST Countries v3.1 API.

    Attributes:
        base_url (str): API root without a trailing slash.
        timeout (float): Per-request timeout in seconds.
        retries (int): Maximum attempts per request.
        base_delay (float): Base seconds for exponential backoff.
        max_delay (float): Maximum seconds for backoff cap.
        jitter (float): Maximum random seconds added to each backoff.
        cache (CountryCache): Holds the result of list_all().
    """

    def __init__(
        self,
        base_url=BASE_URL,
        timeout=DEFAULT_TIMEOUT,
        retries=DEFAULT_RETRIES,
        base_delay=1.0,
        max_delay=10.0,
        jitter=1.0,
        cache=None,
        session=None,
    ):
        """
        Initialise the RestCountriesClient.

        Args:
            base_url (str): API root.
            timeout (float): Per-request timeout in seconds.
            retries (int): Max attempts per request.
            base_delay (float): Base seconds for exponential backoff.
            max_delay (float): Max seconds for backoff cap.
            jitter (float): Max random seconds added to each backoff.
            cache (CountryCache or None): Cache for the full list; a fresh
                CountryCache with the default TTL when omitted.
            session (requests.Session or None): HTTP session; anything with
                a compatible get() works, which is how tests avoid the network.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.cache = cache if cache is not None else CountryCache()
        self.session = session if session is not None else requests.Session()
    # End of __init__

    def _build_retry_decorator(self):
        """
        Build a tenacity retry decorator configured with the instance's
        retry parameters.

        Returns:
            A tenacity retry decorator ready to wrap a callable.
        """
        return retry(
            stop=stop_after_attempt(self.retries),
            wait=wait_exponential_jitter(
                initial=self.base_delay,
                max=self.max_delay,
                jitter=self.jitter,
            ),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
    # End of _build_retry_decorator

    def _fetch(self, endpoint, params=None, allow_missing=False):
        """
        GET an endpoint and return its payload as a list of country dicts.

        The API answers some lookups with a bare object instead of a list;
        such payloads are wrapped into a one-element list.

        Args:
            endpoint (str): Path below base_url, e.g. "/alpha/fr".
            params (dict or None): Query string parameters.
            allow_missing (bool): Treat HTTP 404 as "no results" and return
                an empty list instead of raising.

        Returns:
            list[dict]: Country records.

        Raises:
            FetchError: on network failure after retries, on any other HTTP
                error, or when the body is not valid JSON.
        """
        url = f"{self.base_url}{endpoint}"

        @self._build_retry_decorator()
        def _do_request():
            """
            Perform the HTTP request inside the retry wrapper.

            Raises:
                requests.RequestException: propagated so tenacity can decide
                    whether to retry.
            """
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response
        # End of _do_request

        logger.info("Fetching %s params=%s", endpoint, params)
        try:
            response = _do_request()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            if allow_missing and status == 404:
                logger.warning("No results for %s (HTTP 404)", endpoint)
                return []
            logger.error("HTTP error for %s: %s", endpoint, exc)
            raise FetchError(endpoint, f"HTTP {status}") from exc
        except requests.RequestException as exc:
            logger.error("Request for %s failed: %s", endpoint, exc)
            raise FetchError(endpoint, f"{type(exc).__name__}: {exc}") from exc
        # End of try/except block for the request

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Invalid JSON from %s: %s", endpoint, exc)
            raise FetchError(endpoint, "response is not valid JSON") from exc

        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return [data]
        raise FetchError(endpoint, f"unexpected payload type {type(data).__name__}")
    # End of _fetch

    def list_all(self, force_refresh=False):
        """
        Return every country, served from the cache while it is fresh.

        Args:
            force_refresh (bool): Skip the cache and refetch.

        Returns:
            list[dict]: Country records with the LIST_FIELDS fields.

        Raises:
            FetchError: if the list cannot be fetched.
        """
        if not force_refresh:
            cached = self.cache.get()
            if cached is not None:
                return cached

        countries = self._fetch("/all", params={"fields": ",".join(LIST_FIELDS)})
        self.cache.set(countries)
        logger.info("Cached %d countries", len(countries))
        return countries
    # End of list_all

    def get_by_code(self, code):
        """
        Return the full record of one country, or None if the code is unknown.

        Args:
            code (str): ISO-3166 alpha-2 or alpha-3 code.

        Raises:
            FetchError: if the request fails for any reason other than 404.
        """
        results = self._fetch(f"/alpha/{quote(code)}", allow_missing=True)
        return results[0] if results else None
    # End of get_by_code

    def get_by_codes(self, codes):
        """Return the records for several codes in one request."""
        codes = list(codes)
        if not codes:
            return []
        return self._fetch("/alpha", params={"codes": ",".join(codes)}, allow_missing=True)
    # End of get_by_codes

    def search_by_name(self, name, full_text=False):
        params = {"fullText": "true"} if full_text else None
        return self._fetch(
            f"/name/{quote(name)}", params=params, allow_missing=True
        )
    # End of search_by_name

    def _lookup(self, kind, value):
        return self._fetch(f"/{kind}/{quote(value)}", allow_missing=True)

    def get_by_currency(self, currency):
        return self._lookup("currency", currency)

    def get_by_demonym(self, demonym):
        return self._lookup("demonym", demonym)

    def get_by_language(self, language):
        return self._lookup("lang", language)

    def get_by_capital(self, capital):
        return self._lookup("capital", capital)

    def get_by_region(self, region):
        return self._lookup("region", region)

    def get_by_subregion(self, subregion):
        return self._lookup("subregion", subregion)

    def get_by_translation(self, translation):
        return self._lookup("translation", translation)

    def get_independent(self, status=True):
        return self._fetch(
            "/independent",
            params={"status": "true" if status else "false"},
            allow_missing=True,
        )
    # End of get_independent
# End of class RestCountriesClient
