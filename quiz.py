"""
Guess-the-flag question sampling.

A question is one randomly drawn country plus NUM_OPTIONS - 1 distinct
distractors, presented in a uniformly random order.
"""

import random
from dataclasses import dataclass

# 1 correct answer + 3 distractors
NUM_OPTIONS = 4


class InsufficientDataError(ValueError):
    """Raised when there are too few distinct items to build a question."""


@dataclass(frozen=True)
class QuizQuestion:
    correct: dict
    options: tuple
# End of class QuizQuestion


def country_key(item):
    """Identity of a country record: its ISO alpha-2 code."""
    return item["cca2"]


def shuffle_items(items, rng=None):
    """
    Return a new list with the items in uniformly random order.

    Fisher-Yates: every one of the n! orderings is equally likely. The input
    sequence is left untouched.

    Args:
        items (Sequence): Items to shuffle.
        rng (random.Random or None): Random source; defaults to the
            module-level generator.

    Returns:
        list: Shuffled copy of items.
    """
    rng = rng or random
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    # End of the Fisher-Yates loop
    return shuffled
# End of function shuffle_items()


def generate_question(items, num_options=NUM_OPTIONS, rng=None, key=country_key):
    """
    Build one quiz question from the full collection of items.

    The correct item is drawn uniformly. Distractors are drawn by rejection
    sampling: random indices are accepted only when their key has not been
    seen yet (the correct item's key included), until num_options - 1
    distractors are collected. The resulting options are shuffled.

    Args:
        items (Sequence[dict]): Full collection, e.g. every country.
        num_options (int): Total options per question, correct included.
        rng (random.Random or None): Random source; defaults to the
            module-level generator.
        key (callable): Returns the identity of an item.

    Returns:
        QuizQuestion: The correct item and the shuffled options.

    Raises:
        InsufficientDataError: if items holds fewer than num_options
            distinct keys.
    """
    rng = rng or random
    pool = list(items)

    if len(pool) < num_options:
        raise InsufficientDataError(
            f"Need at least {num_options} items to build a question, got {len(pool)}"
        )
    # Duplicate keys would make the rejection loop below spin forever
    if len({key(item) for item in pool}) < num_options:
        raise InsufficientDataError(
            f"Need at least {num_options} distinct items to build a question"
        )

    correct = pool[rng.randrange(len(pool))]
    used_keys = {key(correct)}
    distractors = []

    while len(distractors) < num_options - 1:
        candidate = pool[rng.randrange(len(pool))]
        candidate_key = key(candidate)
        if candidate_key in used_keys:
            continue
        used_keys.add(candidate_key)
        distractors.append(candidate)
    # End of the distractor rejection-sampling loop

    options = shuffle_items([correct] + distractors, rng=rng)
    return QuizQuestion(correct=correct, options=tuple(options))
# End of function generate_question()


def is_correct_answer(question, code, key=country_key):
    """Check a guess (an item key) against the question's correct item."""
    return code == key(question.correct)
