"""
data_model.py - Data processing for REST Countries records.

Receives country records from the REST client (list of dicts) and produces
pandas DataFrames for the browser grid, the region chart and export, plus the
display-ready fields of the detail view.
"""

import pandas as pd

COUNTRY_COLUMNS = [
    "code", "code3", "name", "official_name", "region", "subregion",
    "capital", "population", "area", "flag_png", "flag_svg", "flag_alt",
]

SORT_KEYS = ("name", "population", "area")
SORT_DIRECTIONS = ("asc", "desc")


def build_country_dataframe(records):
    """
    Builds a flat DataFrame from REST Countries records.

    Nested fields are flattened (name.common -> name, flags.png -> flag_png)
    and list fields are joined. Missing population or area become 0 so that
    numeric sorting behaves.

    Args:
        records (list[dict]): Country records as returned by
            RestCountriesClient.list_all().

    Returns:
        pd.DataFrame: One row per country with the COUNTRY_COLUMNS columns.
    """
    rows = []

    for record in records:
        name = record.get("name") or {}
        flags = record.get("flags") or {}
        capitals = record.get("capital") or []

        rows.append({
            "code": record.get("cca2", ""),
            "code3": record.get("cca3", ""),
            "name": name.get("common", ""),
            "official_name": name.get("official", ""),
            "region": record.get("region") or "",
            "subregion": record.get("subregion") or "",
            "capital": ", ".join(capitals),
            "population": record.get("population") or 0,
            "area": record.get("area") or 0,
            "flag_png": flags.get("png", ""),
            "flag_svg": flags.get("svg", ""),
            "flag_alt": flags.get("alt") or f"Flag of {name.get('common', '')}",
        })
    # End of the loop that flattens each record

    if not rows:
        return pd.DataFrame(columns=COUNTRY_COLUMNS)

    return pd.DataFrame(rows, columns=COUNTRY_COLUMNS)
# End of function build_country_dataframe()


def filter_countries(df, search_term="", region="all"):
    """
    Filters countries by a name substring and a region.

    Args:
        df (pd.DataFrame): Frame from build_country_dataframe.
        search_term (str): Case-insensitive substring of the common name.
            Empty matches everything.
        region (str): Exact region name, or "all" for no region filter.

    Returns:
        pd.DataFrame: The matching rows, original order kept.
    """
    mask = pd.Series(True, index=df.index)

    term = (search_term or "").strip().lower()
    if term:
        mask &= df["name"].str.lower().str.contains(term, regex=False)

    if region and region != "all":
        mask &= df["region"] == region

    return df[mask]
# End of function filter_countries()


def sort_countries(df, key="name", direction="asc"):
    """
    Sorts countries by name, population or area.

    Names sort case-insensitively; ties keep their previous order.

    Args:
        df (pd.DataFrame): Frame from build_country_dataframe.
        key (str): One of SORT_KEYS.
        direction (str): "asc" or "desc".

    Returns:
        pd.DataFrame: Sorted copy.

    Raises:
        ValueError: if key or direction is not recognised.
    """
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key {key!r}; expected one of {', '.join(SORT_KEYS)}")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction {direction!r}; expected 'asc' or 'desc'")

    ascending = direction == "asc"
    if key == "name":
        return df.sort_values(
            "name", ascending=ascending, kind="stable", key=lambda s: s.str.lower()
        )
    return df.sort_values(key, ascending=ascending, kind="stable")
# End of function sort_countries()


def get_page(df, page, page_size):
    """Return the rows shown on a 1-based page."""
    start = (page - 1) * page_size
    return df.iloc[start:start + page_size]
# End of function get_page()


def get_regions(df):
    """
    Lists the regions available for filtering.

    Returns:
        list[str]: "all" followed by the sorted distinct non-empty regions.
    """
    if df.empty:
        return ["all"]
    regions = sorted(r for r in df["region"].unique() if r)
    return ["all"] + regions
# End of function get_regions()


def build_region_summary(df):
    """
    Aggregates countries per region for the overview chart.

    Args:
        df (pd.DataFrame): Frame from build_country_dataframe (filtered or not).

    Returns:
        pd.DataFrame: Columns region, countries, population; sorted by
            population descending. Empty when df is empty.
    """
    if df.empty:
        return pd.DataFrame(columns=["region", "countries", "population"])

    summary = (
        df.assign(region=df["region"].replace("", "Unknown"))
        .groupby("region", as_index=False)
        .agg(countries=("code", "count"), population=("population", "sum"))
        .sort_values("population", ascending=False, kind="stable")
        .reset_index(drop=True)
    )
    return summary
# End of function build_region_summary()


def _format_number(value):
    if value is None:
        return ""
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.1f}"
    return f"{int(value):,}"


def format_country_details(record):
    """
    Prepares the display fields of the country detail view.

    Args:
        record (dict): Full country record from RestCountriesClient.get_by_code().

    Returns:
        dict: Keys name, official_name, flag, flag_alt, capital, region,
            population, area, languages (list), currencies, timezones,
            google_maps, open_street_maps, coat_of_arms, borders (list of
            alpha-3 codes). Missing values are empty strings or lists.
    """
    name = record.get("name") or {}
    flags = record.get("flags") or {}
    maps = record.get("maps") or {}
    coat_of_arms = record.get("coatOfArms") or {}
    common_name = name.get("common", "")

    region = record.get("region") or ""
    if record.get("subregion"):
        region = f"{region} • {record['subregion']}"

    area = record.get("area")
    currencies = [
        f"{currency.get('name', code)} ({currency.get('symbol', '')})"
        for code, currency in (record.get("currencies") or {}).items()
    ]

    return {
        "name": common_name,
        "official_name": name.get("official", ""),
        "flag": flags.get("svg") or flags.get("png") or "",
        "flag_alt": flags.get("alt") or f"Flag of {common_name}",
        "capital": ", ".join(record.get("capital") or []),
        "region": region,
        "population": _format_number(record.get("population")),
        "area": f"{_format_number(area)} km²" if area is not None else "",
        "languages": list((record.get("languages") or {}).values()),
        "currencies": ", ".join(currencies),
        "timezones": list(record.get("timezones") or []),
        "google_maps": maps.get("googleMaps", ""),
        "open_street_maps": maps.get("openStreetMaps", ""),
        "coat_of_arms": coat_of_arms.get("svg") or coat_of_arms.get("png") or "",
        "borders": list(record.get("borders") or []),
    }
# End of function format_country_details()
