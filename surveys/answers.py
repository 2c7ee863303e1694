"""
Typed answer values.

Shopper answers arrive as untyped JSON; ``parse_answer`` narrows them to one of
four variants based on the question they answer. ``None`` means skipped.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

NUMERIC_TYPES = ('rating', 'nps')
SINGLE_CHOICE_TYPES = ('multiple_choice', 'single_choice', 'select', 'image_radio')
MULTI_CHOICE_TYPES = ('checkbox',)


@dataclass(frozen=True)
class TextAnswer:
    value: str


@dataclass(frozen=True)
class NumberAnswer:
    value: float


@dataclass(frozen=True)
class ChoiceAnswer:
    value: str


@dataclass(frozen=True)
class MultiChoiceAnswer:
    value: Tuple[str, ...]


Answer = Union[TextAnswer, NumberAnswer, ChoiceAnswer, MultiChoiceAnswer]


def _is_blank(raw) -> bool:
    if raw is None:
        return True
    if isinstance(raw, str) and not raw.strip():
        return True
    return isinstance(raw, (list, tuple)) and len(raw) == 0


def _to_number(raw) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw) if isinstance(raw, (int, float)) else float(str(raw).strip())
    except (ValueError, OverflowError):
        return None
    # NaN and infinities are not valid JSON
    return value if math.isfinite(value) else None


def _untyped(raw) -> Optional[Answer]:
    """Fallback for answers whose question is unknown: trust the JSON type."""
    if isinstance(raw, bool):
        return ChoiceAnswer(str(raw).lower())
    if isinstance(raw, (int, float)):
        number = _to_number(raw)
        return NumberAnswer(number) if number is not None else TextAnswer(str(raw))
    if isinstance(raw, (list, tuple)):
        return MultiChoiceAnswer(tuple(str(v) for v in raw))
    return TextAnswer(str(raw))


def parse_answer(raw, question=None) -> Optional[Answer]:
    if _is_blank(raw):
        return None
    qtype = (question or {}).get('questionType')

    if qtype in NUMERIC_TYPES:
        number = _to_number(raw)
        return NumberAnswer(number) if number is not None else TextAnswer(str(raw))
    if qtype in MULTI_CHOICE_TYPES:
        values = raw if isinstance(raw, (list, tuple)) else [raw]
        return MultiChoiceAnswer(tuple(str(v) for v in values))
    if qtype in SINGLE_CHOICE_TYPES:
        if isinstance(raw, (list, tuple)):
            return MultiChoiceAnswer(tuple(str(v) for v in raw))
        return ChoiceAnswer(str(raw))
    if qtype == 'text':
        return TextAnswer(str(raw))
    return _untyped(raw)


def answer_value(answer: Optional[Answer]):
    """JSON primitive stored on the response document."""
    if answer is None:
        return None
    if isinstance(answer, MultiChoiceAnswer):
        return list(answer.value)
    if isinstance(answer, NumberAnswer) and answer.value.is_integer():
        return int(answer.value)
    return answer.value


def distribution_keys(answer: Optional[Answer]):
    """Keys an answer contributes to a response distribution."""
    if answer is None:
        return []
    if isinstance(answer, MultiChoiceAnswer):
        return list(answer.value)
    value = answer_value(answer)
    return [str(value)]
