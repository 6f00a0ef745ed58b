"""
Main Streamlit application for the Countries Explorer.

Entry point that ties together the backend modules (countries_client,
countries, data_model, pagination, quiz, state, export) into an interactive
UI: a searchable, sortable, paginated country browser, a country detail view
and a guess-the-flag game.
"""

import hashlib
import logging

import streamlit as st
import plotly.express as px

from cache import CountryCache, DEFAULT_TTL_SECONDS
from countries import normalize_country_code, resolve_border_names
from countries_client import DEFAULT_RETRIES, RestCountriesClient, FetchError
from data_model import (
    build_country_dataframe,
    build_region_summary,
    filter_countries,
    format_country_details,
    get_page,
    get_regions,
    sort_countries,
)
from export import (
    export_browser_state_json,
    export_countries_csv,
    import_browser_state_json,
)
from pagination import DOTS, compute_pagination_range, total_page_count
from quiz import InsufficientDataError, generate_question
import state as ui_state

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Page configuration
# ---------------------------------------------------------------------------

st.set_page_config(page_title="Countries of the World", layout="wide")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SIBLING_COUNT = 1
GRID_COLUMNS = 4
PAGE_SIZE_OPTIONS = list(ui_state.PAGE_SIZE_OPTIONS)

SORT_OPTIONS = {
    "Name (A-Z)": ("name", "asc"),
    "Name (Z-A)": ("name", "desc"),
    "Population (High-Low)": ("population", "desc"),
    "Population (Low-High)": ("population", "asc"),
    "Area (High-Low)": ("area", "desc"),
    "Area (Low-High)": ("area", "asc"),
}


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

@st.cache_resource
def get_client():
    """One REST client (and its country cache) shared across reruns."""
    return RestCountriesClient(cache=CountryCache(ttl_seconds=DEFAULT_TTL_SECONDS))
# End of function get_client()


def get_browser_state():
    if "browser_state" not in st.session_state:
        st.session_state["browser_state"] = ui_state.BrowserState()
    return st.session_state["browser_state"]


def set_browser_state(new_state):
    st.session_state["browser_state"] = new_state


def get_quiz_state():
    if "quiz_state" not in st.session_state:
        st.session_state["quiz_state"] = ui_state.QuizState()
    return st.session_state["quiz_state"]


def sync_widgets_from_state(browser_state):
    """
    Write a browser state into the widget keys so the sidebar shows it.

    Must run before the sidebar widgets are created in the current run.
    """
    st.session_state["search_input"] = browser_state.search_term
    st.session_state["region_input"] = browser_state.region
    st.session_state["page_size_input"] = browser_state.page_size
    for label, value in SORT_OPTIONS.items():
        if value == (browser_state.sort_key, browser_state.sort_direction):
            st.session_state["sort_input"] = label
            break
    # End of the loop that matches the sort option
# End of function sync_widgets_from_state()


def apply_imported_state(browser_state):
    """Make a loaded view the current one, snapping its page size to an offered option."""
    browser_state = ui_state.snap_page_size(browser_state)
    set_browser_state(browser_state)
    sync_widgets_from_state(browser_state)
# End of function apply_imported_state()


# ---------------------------------------------------------------------------
# Widget callbacks
# ---------------------------------------------------------------------------

def on_search_change():
    set_browser_state(
        ui_state.set_search_term(get_browser_state(), st.session_state["search_input"])
    )


def on_region_change():
    set_browser_state(
        ui_state.set_region(get_browser_state(), st.session_state["region_input"])
    )


def on_sort_change():
    sort_key, sort_direction = SORT_OPTIONS[st.session_state["sort_input"]]
    set_browser_state(ui_state.set_sort(get_browser_state(), sort_key, sort_direction))


def on_page_size_change():
    set_browser_state(
        ui_state.set_page_size(get_browser_state(), int(st.session_state["page_size_input"]))
    )


def on_page_click(page, total_pages):
    set_browser_state(ui_state.go_to_page(get_browser_state(), page, total_pages))


def open_country(code):
    st.query_params["country"] = code.lower()


def close_country():
    st.query_params.clear()


def load_new_question(countries):
    """
    Draw a new flag question into the quiz state.

    InsufficientDataError is kept in session state so the game area can show
    it instead of a question.
    """
    try:
        question = generate_question(countries)
    except InsufficientDataError as exc:
        logger.warning("Cannot build a flag question: %s", exc)
        st.session_state["quiz_error"] = str(exc)
        return
    st.session_state.pop("quiz_error", None)
    st.session_state["quiz_state"] = ui_state.start_question(get_quiz_state(), question)
# End of function load_new_question()


def on_guess(code):
    st.session_state["quiz_state"] = ui_state.select_option(get_quiz_state(), code)


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------

def build_region_chart(summary_df):
    """
    Build a Plotly bar chart of population per region.

    Args:
        summary_df (pd.DataFrame): Output of build_region_summary.

    Returns:
        plotly.graph_objects.Figure or None: The figure, or None if there is
            no data to plot.
    """
    if summary_df.empty:
        return None

    fig = px.bar(
        summary_df,
        x="region",
        y="population",
        hover_data=["countries"],
        labels={
            "region": "Region",
            "population": "Population",
            "countries": "Countries",
        },
    )
    fig.update_layout(xaxis_title="Region", yaxis_title="Population")
    return fig
# End of function build_region_chart()


def render_country_grid(page_df):
    """Render one page of countries as cards with a flag and key facts."""
    rows = [page_df.iloc[i:i + GRID_COLUMNS] for i in range(0, len(page_df), GRID_COLUMNS)]
    for row_df in rows:
        columns = st.columns(GRID_COLUMNS)
        for column, (_, country) in zip(columns, row_df.iterrows()):
            with column:
                with st.container(border=True):
                    if country["flag_png"]:
                        st.image(country["flag_png"], use_container_width=True)
                    st.markdown(f"**{country['name']}**")
                    st.caption(
                        f"Population: {int(country['population']):,}  \n"
                        f"Region: {country['region'] or 'n/a'}"
                    )
                    st.button(
                        "Details",
                        key=f"details_{country['code']}",
                        on_click=open_country,
                        args=(country["code"],),
                        use_container_width=True,
                    )
        # End of the loop over cards in a row
    # End of the loop over grid rows
# End of function render_country_grid()


def render_pagination(current_page, total_pages, total_count, page_size):
    """
    Render Previous / page numbers / Next buttons.

    Ellipsis markers are shown as plain text; every number is a button that
    jumps to its page.
    """
    labels = compute_pagination_range(
        total_count, page_size, current_page, sibling_count=SIBLING_COUNT
    )
    columns = st.columns(len(labels) + 2)

    columns[0].button(
        "‹ Previous",
        key="page_prev",
        disabled=current_page <= 1,
        on_click=on_page_click,
        args=(current_page - 1, total_pages),
    )

    for index, (column, label) in enumerate(zip(columns[1:-1], labels)):
        if label is DOTS:
            column.markdown(f"<div style='text-align:center'>{DOTS}</div>", unsafe_allow_html=True)
            continue
        column.button(
            str(label),
            key=f"page_{index}_{label}",
            type="primary" if label == current_page else "secondary",
            on_click=on_page_click,
            args=(label, total_pages),
        )
    # End of the loop over page labels

    columns[-1].button(
        "Next ›",
        key="page_next",
        disabled=current_page >= total_pages,
        on_click=on_page_click,
        args=(current_page + 1, total_pages),
    )
# End of function render_pagination()


def render_fetch_error(exc, client):
    """Show a FetchError with a button that drops the cache and tries again."""
    st.error(f"Could not load country data: {exc}")
    if st.button("Retry", type="primary"):
        client.cache.invalidate()
        st.rerun()
    st.stop()
# End of function render_fetch_error()


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

def render_country_detail(raw_code, client):
    """
    Detail view for one country, selected through the "country" query
    parameter.
    """
    st.button("← Back to Countries", on_click=close_country)

    try:
        code = normalize_country_code(raw_code)
        record = client.get_by_code(code)
    except ValueError:
        record = None
    except FetchError as exc:
        render_fetch_error(exc, client)
        return
    # End of try/except for the country lookup

    if record is None:
        st.warning(f"No country found for code '{raw_code}'.")
        return

    details = format_country_details(record)

    st.title(details["name"])
    st.caption(details["official_name"])

    flag_col, info_col = st.columns([2, 3])

    with flag_col:
        if details["flag"]:
            st.image(details["flag"], caption=details["flag_alt"], use_container_width=True)

    with info_col:
        st.markdown(f"**Capital:** {details['capital'] or 'n/a'}")
        st.markdown(f"**Region:** {details['region'] or 'n/a'}")
        st.markdown(f"**Population:** {details['population'] or 'n/a'}")
        st.markdown(f"**Area:** {details['area'] or 'n/a'}")
        st.markdown(f"**Languages:** {', '.join(details['languages']) or 'n/a'}")
        st.markdown(f"**Currencies:** {details['currencies'] or 'n/a'}")
        if details["timezones"]:
            st.markdown(f"**Timezones:** {', '.join(details['timezones'])}")
        if details["google_maps"]:
            st.link_button("Google Maps", details["google_maps"])
        if details["open_street_maps"]:
            st.link_button("OpenStreetMap", details["open_street_maps"])
    # End of info column

    st.subheader("Additional Information")

    try:
        borders = resolve_border_names(details["borders"], client)
    except FetchError as exc:
        st.warning(f"Could not load border countries: {exc}")
        borders = []

    if borders:
        st.markdown("**Border Countries**")
        border_columns = st.columns(min(len(borders), 6))
        for index, border in enumerate(borders):
            border_columns[index % len(border_columns)].button(
                border["name"],
                key=f"border_{border['code']}",
                on_click=open_country,
                args=(border["code"],),
            )
        # End of the loop over border buttons
    # End of border countries block

    if details["coat_of_arms"]:
        st.markdown("**Coat of Arms**")
        st.image(details["coat_of_arms"], width=128)
# End of function render_country_detail()


def render_flag_game(countries):
    """The guess-the-flag game: one flag, four names, keep score."""
    st.header("Fun Zone: Guess the Flag!")
    st.caption("Test your geography knowledge with this fun little game.")

    if get_quiz_state().question is None:
        load_new_question(countries)

    if "quiz_error" in st.session_state:
        st.warning(f"The game is unavailable: {st.session_state['quiz_error']}")
        return

    quiz_state = get_quiz_state()
    question = quiz_state.question
    correct_code = question.correct["cca2"]
    answered = ui_state.is_answered(quiz_state)

    flag_col, options_col = st.columns(2)

    with flag_col:
        flags = question.correct.get("flags") or {}
        flag_url = flags.get("png") or flags.get("svg")
        if flag_url:
            st.image(flag_url, use_container_width=True)
        else:
            st.info(flags.get("alt") or "No flag image available for this country.")

    with options_col:
        option_columns = st.columns(2)
        for index, option in enumerate(question.options):
            code = option["cca2"]
            label = option["name"]["common"]
            if answered and code == correct_code:
                label = f"✅ {label}"
            elif answered and code == quiz_state.selected_code:
                label = f"❌ {label}"
            option_columns[index % 2].button(
                label,
                key=f"guess_{index}_{code}",
                disabled=answered,
                on_click=on_guess,
                args=(code,),
                use_container_width=True,
            )
        # End of the loop over answer options

        if answered:
            if ui_state.last_answer_correct(quiz_state):
                st.success("Correct! You are absolutely right!")
            else:
                st.error(f"Not quite. The correct answer is {question.correct['name']['common']}.")
            st.button("Next Question", type="primary", on_click=load_new_question, args=(countries,))
        # End of feedback block

        score_col, answered_col = st.columns(2)
        score_col.metric("Score", quiz_state.score)
        answered_col.metric("Answered", quiz_state.answered)
    # End of options column
# End of function render_flag_game()


def render_browser(countries_df):
    """The searchable, sortable, paginated country grid."""
    browser_state = get_browser_state()

    st.header("Country Browser")
    st.caption("Browse, search, and learn more about each nation.")

    filtered_df = filter_countries(countries_df, browser_state.search_term, browser_state.region)
    sorted_df = sort_countries(filtered_df, browser_state.sort_key, browser_state.sort_direction)

    total_count = len(sorted_df)
    total_pages = total_page_count(total_count, browser_state.page_size)

    # A page-size change can leave the stored page past the end
    clamped_state = ui_state.go_to_page(browser_state, browser_state.current_page, total_pages)
    if clamped_state != browser_state:
        browser_state = clamped_state
        set_browser_state(browser_state)

    page_df = get_page(sorted_df, browser_state.current_page, browser_state.page_size)

    if page_df.empty:
        st.info("No Countries Found. Try adjusting your search or filters.")
    else:
        st.caption(
            f"Showing {len(page_df)} of {total_count} countries "
            f"(page {browser_state.current_page} of {total_pages})"
        )
        render_country_grid(page_df)
    # End of grid block

    if total_pages > 1:
        render_pagination(browser_state.current_page, total_pages, total_count, browser_state.page_size)

    with st.expander("Population by region", expanded=False):
        fig = build_region_chart(build_region_summary(sorted_df))
        if fig is not None:
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No data to plot.")
    # End of region chart expander

    if not sorted_df.empty:
        st.download_button(
            label="Download list (CSV)",
            data=export_countries_csv(sorted_df),
            file_name="countries.csv",
            mime="text/csv",
        )
# End of function render_browser()


# ---------------------------------------------------------------------------
# Sidebar: input controls
# ---------------------------------------------------------------------------

client = get_client()

# A view loaded from a file is applied here, before the widgets it drives exist
if "pending_browser_state" in st.session_state:
    apply_imported_state(st.session_state.pop("pending_browser_state"))

with st.sidebar:
    st.header("Browse countries")

    st.text_input(
        "Search for a country",
        key="search_input",
        on_change=on_search_change,
    )

    # Region options need the data; filled in once the list is loaded
    region_placeholder = st.empty()

    st.selectbox(
        "Sort by",
        options=list(SORT_OPTIONS.keys()),
        key="sort_input",
        on_change=on_sort_change,
    )

    st.session_state.setdefault("page_size_input", ui_state.DEFAULT_PAGE_SIZE)
    st.selectbox(
        "Countries per page",
        options=PAGE_SIZE_OPTIONS,
        key="page_size_input",
        on_change=on_page_size_change,
    )

    with st.expander("Advanced (cache and retries)", expanded=False):
        ttl_minutes = st.slider(
            "Keep country list for (minutes)",
            min_value=1,
            max_value=240,
            value=DEFAULT_TTL_SECONDS // 60,
            step=1,
            key="cache_ttl_minutes",
        )
        retries = st.slider(
            "Attempts per request",
            min_value=1,
            max_value=10,
            value=DEFAULT_RETRIES,
            step=1,
            key="retries",
            help="Failed requests are retried with exponential backoff.",
        )
        client.cache.ttl_seconds = ttl_minutes * 60
        client.retries = retries

        if st.button("Refresh country list", use_container_width=True):
            client.cache.invalidate()
    # End of advanced settings expander

    st.divider()

    # --- Save / load browser state ---
    st.subheader("View settings")

    st.download_button(
        label="Save view",
        data=export_browser_state_json(get_browser_state()),
        file_name="countries_view.json",
        mime="application/json",
        use_container_width=True,
    )

    uploaded_state = st.file_uploader("Load view", type=["json"], key="state_uploader")

    if uploaded_state is not None:
        # Guard against infinite rerun loop: only process if content differs
        state_hash = hashlib.md5(uploaded_state.getvalue()).hexdigest()
        if st.session_state.get("_last_imported_state_hash") != state_hash:
            try:
                imported_state = import_browser_state_json(uploaded_state.getvalue().decode("utf-8"))
                # Applied at the top of the next run, before the widgets exist
                st.session_state["pending_browser_state"] = imported_state
                st.session_state["_last_imported_state_hash"] = state_hash
                st.rerun()
            except (ValueError, UnicodeDecodeError) as exc:
                st.error(f"Error loading view: {exc}")
        # End of state-already-imported guard
    # End of state upload handler
# End of sidebar block


# ---------------------------------------------------------------------------
# Main panel
# ---------------------------------------------------------------------------

selected_code = st.query_params.get("country")

if selected_code:
    render_country_detail(selected_code, client)
    st.stop()

st.title("Countries of the World")
st.markdown(
    "An interactive application to explore nations, test your flag "
    "knowledge, and more."
)

with st.expander("About this project", expanded=False):
    st.markdown(
        "Country data comes from the public "
        "[REST Countries](https://restcountries.com) API and is cached for "
        "the time configured in the sidebar. Pick a country card to see its "
        "details, or try the flag game below."
    )

try:
    with st.spinner("Loading countries..."):
        country_records = client.list_all()
except FetchError as exc:
    render_fetch_error(exc, client)

countries_df = build_country_dataframe(country_records)

region_options = get_regions(countries_df)

# A loaded view may name a region the current data does not have
if st.session_state.get("region_input", "all") not in region_options:
    st.session_state["region_input"] = "all"
    set_browser_state(ui_state.set_region(get_browser_state(), "all"))

with region_placeholder:
    st.selectbox(
        "Filter by region",
        options=region_options,
        format_func=lambda r: "All Regions" if r == "all" else r,
        key="region_input",
        on_change=on_region_change,
    )

render_flag_game(country_records)

st.divider()

render_browser(countries_df)
