"""
Country code utilities for the Countries Explorer.

Uses the pycountry library to validate ISO-3166-1 codes before they reach the
API and to name border countries without extra requests when the API does
not return them.
"""

import logging

import pycountry

logger = logging.getLogger(__name__)


def normalize_country_code(code):
    """
    Validate and normalise an ISO-3166-1 alpha-2 or alpha-3 code.

    Args:
        code (str): Raw code, any case, surrounding whitespace allowed
            (e.g. " fr", "FRA").

    Returns:
        str: The upper-cased code, as given (alpha-2 stays alpha-2).

    Raises:
        ValueError: if the code is not a known alpha-2 or alpha-3 code.

    Example:
        >>> normalize_country_code(" es")
        'ES'
    """
    if not isinstance(code, str):
        raise ValueError(f"Country code must be a string, got {type(code).__name__}")

    cleaned = code.strip().upper()
    if len(cleaned) == 2:
        country = pycountry.countries.get(alpha_2=cleaned)
    elif len(cleaned) == 3:
        country = pycountry.countries.get(alpha_3=cleaned)
    else:
        country = None

    if country is None:
        raise ValueError(f"Unknown country code: {code!r}")
    return cleaned
# End of function normalize_country_code()


def get_code_to_name():
    """
    Return a mapping of ISO-3166-1 alpha-2 and alpha-3 codes to country names.

    Returns:
        dict[str, str]: e.g. {"ES": "Spain", "ESP": "Spain", ...}.
    """
    mapping = {}
    for country in pycountry.countries:
        name = getattr(country, "common_name", None) or country.name
        mapping[country.alpha_2] = name
        mapping[country.alpha_3] = name
    # End of the loop over pycountry countries
    return mapping
# End of function get_code_to_name()


def resolve_border_names(border_codes, client):
    """
    Resolve border country codes to display names.

    All codes are looked up with a single API request. Codes the API does not
    return fall back to the pycountry name, and finally to the code itself.

    Args:
        border_codes (list[str]): alpha-3 codes as found in a record's
            "borders" field.
        client (RestCountriesClient): Source of country records.

    Returns:
        list[dict]: [{"code": "ESP", "name": "Spain"}, ...] in input order.

    Raises:
        FetchError: propagated from the client.
    """
    border_codes = list(border_codes or [])
    if not border_codes:
        return []

    api_names = {}
    for record in client.get_by_codes(border_codes):
        name = (record.get("name") or {}).get("common")
        if not name:
            continue
        for code_field in ("cca3", "cca2"):
            if record.get(code_field):
                api_names[record[code_field]] = name
    # End of the loop that collects names from the API

    offline_names = get_code_to_name()
    borders = []
    for code in border_codes:
        name = api_names.get(code) or offline_names.get(code)
        if name is None:
            logger.warning("No name found for border code %s", code)
            name = code
        borders.append({"code": code, "name": name})
    # End of the loop that resolves each border code

    return borders
# End of function resolve_border_names()
