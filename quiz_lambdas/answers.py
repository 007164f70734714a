"""Correct-answer encodings.

Questions are stored with one canonical encoding, ``correctAnswers``: a
non-empty list of distinct indices into ``options``. Payloads may arrive in
any of three shapes, which are converted here:

* list-based   ``correctAnswers: [0, 2]``
* index-based  ``correctAnswer: 1`` or ``correctAnswer: [0, 2]``
* value-based  ``correctAnswer: "Paris"`` or ``correctAnswer: ["a", "c"]``
"""
from .errors import InvalidQuestionSchema

SINGLE_CHOICE = 'single-choice'
MULTIPLE_CHOICE = 'multiple-choice'

LIST_BASED = 'list'
INDEX_BASED = 'index'
VALUE_BASED = 'value'


def _is_index(v):
    return isinstance(v, int) and not isinstance(v, bool)


def detect_encoding(question_id, correct_answer, correct_answers):
    if correct_answers is not None:
        if correct_answer is not None:
            raise InvalidQuestionSchema(question_id, 'correctAnswer', 'cannot be combined with correctAnswers')
        return LIST_BASED
    if correct_answer is None:
        raise InvalidQuestionSchema(question_id, 'correctAnswers', 'is required')

    values = correct_answer if isinstance(correct_answer, list) else [correct_answer]
    if not values:
        raise InvalidQuestionSchema(question_id, 'correctAnswer', 'must contain at least one correct answer')
    if all(_is_index(v) for v in values):
        return INDEX_BASED
    if all(isinstance(v, str) for v in values):
        return VALUE_BASED
    raise InvalidQuestionSchema(
        question_id, 'correctAnswer',
        'must be an option index, an option value, or a list of one of those',
    )


def _check_indices(question_id, field, indices, options):
    if not indices:
        raise InvalidQuestionSchema(question_id, field, 'must contain at least one correct answer')
    for i in indices:
        if not _is_index(i):
            raise InvalidQuestionSchema(question_id, field, f'entry {i!r} is not an option index')
        if not 0 <= i < len(options):
            raise InvalidQuestionSchema(
                question_id, field, f'index {i} is out of range for {len(options)} options')
    if len(set(indices)) != len(indices):
        raise InvalidQuestionSchema(question_id, field, 'must not repeat an answer')


def normalize_answers(question_id, question_type, options, correct_answer=None, correct_answers=None):
    """Validate whichever encoding was supplied and return canonical indices."""
    encoding = detect_encoding(question_id, correct_answer, correct_answers)

    if encoding == LIST_BASED:
        if not isinstance(correct_answers, list):
            raise InvalidQuestionSchema(question_id, 'correctAnswers', 'must be a list of option indices')
        field, indices = 'correctAnswers', list(correct_answers)
    else:
        field = 'correctAnswer'
        if question_type == SINGLE_CHOICE and isinstance(correct_answer, list):
            raise InvalidQuestionSchema(question_id, field, 'must be a single answer for single-choice questions')
        values = correct_answer if isinstance(correct_answer, list) else [correct_answer]
        if encoding == VALUE_BASED:
            for v in values:
                if v not in options:
                    raise InvalidQuestionSchema(question_id, field, f'"{v}" must be one of the provided options')
            indices = [options.index(v) for v in values]
        else:
            indices = values

    _check_indices(question_id, field, indices, options)
    if question_type == SINGLE_CHOICE and len(indices) != 1:
        raise InvalidQuestionSchema(question_id, field, 'must have exactly one correct answer for single-choice questions')
    return indices
