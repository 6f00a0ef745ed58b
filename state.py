"""
UI state for the country browser and the flag quiz.

Both states are immutable dataclasses; every transition is a plain function
returning a new instance, so the Streamlit layer only stores and swaps them.
"""

from dataclasses import asdict, dataclass, replace
from typing import Optional

from data_model import SORT_DIRECTIONS, SORT_KEYS
from pagination import clamp_page
from quiz import QuizQuestion, is_correct_answer

DEFAULT_PAGE_SIZE = 12

# Page sizes offered in the sidebar
PAGE_SIZE_OPTIONS = (8, 12, 24, 48)


@dataclass(frozen=True)
class BrowserState:
    search_term: str = ""
    region: str = "all"
    sort_key: str = "name"
    sort_direction: str = "asc"
    current_page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
# End of class BrowserState


def set_search_term(state, search_term):
    return replace(state, search_term=search_term, current_page=1)


def set_region(state, region):
    return replace(state, region=region, current_page=1)


def set_sort(state, sort_key, sort_direction):
    """
    Change the sort order and go back to the first page.

    Raises:
        ValueError: if sort_key or sort_direction is not recognised.
    """
    if sort_key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key {sort_key!r}")
    if sort_direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction {sort_direction!r}")
    return replace(state, sort_key=sort_key, sort_direction=sort_direction, current_page=1)
# End of function set_sort()


def set_page_size(state, page_size):
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return replace(state, page_size=page_size, current_page=1)


def snap_page_size(state, options=PAGE_SIZE_OPTIONS):
    """
    Replace page_size with the closest of options (the smaller one on a tie).

    Used when a saved view carries a page size the UI does not offer; the
    current page is kept.
    """
    closest = min(options, key=lambda option: (abs(option - state.page_size), option))
    return replace(state, page_size=closest)


def go_to_page(state, page, total_pages):
    """Move to page, clamped to the pages that exist."""
    return replace(state, current_page=clamp_page(page, total_pages))


def next_page(state, total_pages):
    return go_to_page(state, state.current_page + 1, total_pages)


def previous_page(state, total_pages):
    return go_to_page(state, state.current_page - 1, total_pages)


def to_dict(state):
    """Plain-dict form of a BrowserState, safe to dump as JSON."""
    return asdict(state)


def browser_state_from_dict(data):
    """
    Rebuild a BrowserState from a dict produced by to_dict().

    Unknown keys are ignored; missing keys take their defaults.

    Raises:
        ValueError: if a value has the wrong type or is out of range.
    """
    defaults = BrowserState()
    values = {}
    for field_name, default in asdict(defaults).items():
        value = data.get(field_name, default)
        # bool is an int subclass; refuse it for numeric fields
        if isinstance(default, int) and (isinstance(value, bool) or not isinstance(value, int)):
            raise ValueError(f"'{field_name}' must be an integer")
        if isinstance(default, str) and not isinstance(value, str):
            raise ValueError(f"'{field_name}' must be a string")
        values[field_name] = value
    # End of the loop that validates each field

    if values["sort_key"] not in SORT_KEYS:
        raise ValueError(f"Unknown sort key {values['sort_key']!r}")
    if values["sort_direction"] not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction {values['sort_direction']!r}")
    if values["current_page"] < 1 or values["page_size"] < 1:
        raise ValueError("'current_page' and 'page_size' must be >= 1")

    return BrowserState(**values)
# End of function browser_state_from_dict()


# ---------------------------------------------------------------------------
# Quiz state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QuizState:
    question: Optional[QuizQuestion] = None
    selected_code: Optional[str] = None
    score: int = 0
    answered: int = 0
# End of class QuizState


def start_question(state, question):
    """Show a new question; the score carries over."""
    return replace(state, question=question, selected_code=None)


def select_option(state, code):
    """
    Record the player's answer to the current question.

    Only the first answer counts: once an option is selected further
    selections are ignored until the next question.
    """
    if state.question is None or state.selected_code is not None:
        return state

    correct = is_correct_answer(state.question, code)
    return replace(
        state,
        selected_code=code,
        answered=state.answered + 1,
        score=state.score + (1 if correct else 0),
    )
# End of function select_option()


def is_answered(state):
    return state.selected_code is not None


def last_answer_correct(state):
    """True/False for the current question once answered, None before."""
    if not is_answered(state):
        return None
    return is_correct_answer(state.question, state.selected_code)
