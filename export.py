"""
CSV and JSON export/import utilities for the Countries Explorer.

Provides functions to convert the country DataFrame into a CSV string
suitable for Streamlit download buttons, as well as browser state save/load
via JSON.
"""

import json

from state import browser_state_from_dict, to_dict

EXPORT_COLUMNS = [
    "code", "name", "official_name", "region", "subregion",
    "capital", "population", "area",
]


def export_countries_csv(df):
    """
    Exports the filtered and sorted country list to a CSV string.

    Flag URLs are left out; the index is not included since it carries no
    meaning after filtering.

    Args:
        df: pd.DataFrame from data_model.build_country_dataframe, possibly
            filtered and sorted.

    Returns:
        str: CSV content as string.
    """
    return df[EXPORT_COLUMNS].to_csv(index=False)
# End of function export_countries_csv()


def export_browser_state_json(state):
    """
    Exports the browser state (search, filter, sort, page) as a JSON string.

    Args:
        state (BrowserState): Current browser state.

    Returns:
        str: Pretty-printed JSON string.
    """
    return json.dumps(to_dict(state), indent=2, ensure_ascii=False)
# End of function export_browser_state_json()


def import_browser_state_json(json_string):
    """
    Parses a browser state JSON string.

    Args:
        json_string: JSON string previously produced by
            export_browser_state_json.

    Returns:
        BrowserState: The restored state.

    Raises:
        ValueError: if the JSON is invalid, is not an object, or holds
            values of the wrong type.
    """
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at the top level, got {type(data).__name__}"
        )

    return browser_state_from_dict(data)
# End of function import_browser_state_json()
