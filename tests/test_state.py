import random

import pytest

import state
from quiz import generate_question


def test_filter_changes_reset_page():
    browser = state.BrowserState(current_page=4)

    assert state.set_search_term(browser, "ger").current_page == 1
    assert state.set_region(browser, "Asia").current_page == 1
    assert state.set_sort(browser, "population", "desc").current_page == 1
    assert state.set_page_size(browser, 24).current_page == 1


def test_transitions_return_new_instances():
    browser = state.BrowserState()
    updated = state.set_search_term(browser, "fr")
    assert browser.search_term == ""
    assert updated.search_term == "fr"


def test_set_sort_validates():
    with pytest.raises(ValueError):
        state.set_sort(state.BrowserState(), "capital", "asc")
    with pytest.raises(ValueError):
        state.set_page_size(state.BrowserState(), 0)


def test_page_navigation_is_clamped():
    browser = state.BrowserState(current_page=1)

    assert state.previous_page(browser, total_pages=5).current_page == 1
    assert state.next_page(browser, total_pages=5).current_page == 2
    assert state.go_to_page(browser, 9, total_pages=5).current_page == 5
    assert state.next_page(state.BrowserState(current_page=5), total_pages=5).current_page == 5
    assert state.go_to_page(browser, 3, total_pages=0).current_page == 1


def test_dict_round_trip():
    browser = state.BrowserState("fr", "Europe", "area", "desc", 3, 24)
    assert state.browser_state_from_dict(state.to_dict(browser)) == browser


def test_from_dict_fills_defaults_and_ignores_unknown_keys():
    browser = state.browser_state_from_dict({"search_term": "x", "extra": 1})
    assert browser == state.BrowserState(search_term="x")


@pytest.mark.parametrize(
    "data",
    [
        {"current_page": "2"},
        {"current_page": True},
        {"current_page": 0},
        {"search_term": 5},
        {"sort_key": "capital"},
        {"sort_direction": "sideways"},
    ],
)
def test_from_dict_rejects_bad_values(data):
    with pytest.raises(ValueError):
        state.browser_state_from_dict(data)


@pytest.fixture
def question(sample_countries):
    return generate_question(sample_countries, rng=random.Random(8))


def test_correct_answer_scores(question):
    quiz = state.start_question(state.QuizState(), question)
    assert not state.is_answered(quiz)
    assert state.last_answer_correct(quiz) is None

    quiz = state.select_option(quiz, question.correct["cca2"])
    assert state.is_answered(quiz)
    assert state.last_answer_correct(quiz) is True
    assert (quiz.score, quiz.answered) == (1, 1)


def test_wrong_answer_counts_without_scoring(question):
    wrong = next(o["cca2"] for o in question.options if o is not question.correct)
    quiz = state.select_option(state.start_question(state.QuizState(), question), wrong)
    assert state.last_answer_correct(quiz) is False
    assert (quiz.score, quiz.answered) == (0, 1)


def test_only_first_answer_counts(question):
    wrong = next(o["cca2"] for o in question.options if o is not question.correct)
    quiz = state.start_question(state.QuizState(), question)
    quiz = state.select_option(quiz, wrong)
    quiz = state.select_option(quiz, question.correct["cca2"])
    assert quiz.selected_code == wrong
    assert (quiz.score, quiz.answered) == (0, 1)


def test_new_question_keeps_score(question, sample_countries):
    quiz = state.select_option(state.start_question(state.QuizState(), question), question.correct["cca2"])
    next_question = generate_question(sample_countries, rng=random.Random(9))
    quiz = state.start_question(quiz, next_question)
    assert quiz.selected_code is None
    assert quiz.score == 1


def test_select_without_question_is_ignored():
    quiz = state.QuizState()
    assert state.select_option(quiz, "FR") == quiz


@pytest.mark.parametrize("page_size, expected", [(20, 24), (10, 8), (12, 12), (1, 8), (500, 48)])
def test_snap_page_size_picks_closest_option(page_size, expected):
    browser = state.BrowserState(current_page=3, page_size=page_size)
    snapped = state.snap_page_size(browser)
    assert snapped.page_size == expected
    assert snapped.current_page == 3
