"""Correct-answer specifications stored on questions.

A question's ``correct_answer`` JSON is one of two tagged shapes::

    {"type": "single", "value": <str | bool>}
    {"type": "multiple", "value": [<str>, ...]}

``parse_answer_key`` turns the stored JSON into a ``SingleAnswer`` or
``MultipleAnswer`` and rejects anything else with ``InvalidAnswerKey``.
"""
from dataclasses import dataclass


class InvalidAnswerKey(ValueError):
    pass


@dataclass(frozen=True)
class SingleAnswer:
    value: object

    def to_json(self) -> dict:
        return {'type': 'single', 'value': self.value}


@dataclass(frozen=True)
class MultipleAnswer:
    values: tuple

    def to_json(self) -> dict:
        return {'type': 'multiple', 'value': list(self.values)}


def _is_scalar(value) -> bool:
    return isinstance(value, (str, bool))


def parse_answer_key(raw):
    if not isinstance(raw, dict):
        raise InvalidAnswerKey('Correct answer must be an object with "type" and "value".')
    kind = raw.get('type')
    if 'value' not in raw:
        raise InvalidAnswerKey('Correct answer is missing its "value".')
    value = raw['value']
    if kind == 'single':
        if not _is_scalar(value):
            raise InvalidAnswerKey('A single correct answer must be a string or a boolean.')
        return SingleAnswer(value)
    if kind == 'multiple':
        if not isinstance(value, list) or not value:
            raise InvalidAnswerKey('A multiple correct answer must be a non-empty list.')
        if not all(isinstance(item, str) for item in value):
            raise InvalidAnswerKey('Every entry of a multiple correct answer must be a string.')
        return MultipleAnswer(tuple(value))
    raise InvalidAnswerKey(f'Unknown correct answer type: {kind!r}.')


def is_valid_student_answer(value) -> bool:
    """Submitted answers may be a string, a boolean, a list of strings, or null."""
    if value is None or _is_scalar(value):
        return True
    return isinstance(value, list) and all(isinstance(item, str) for item in value)
