"""
Schema-to-UI compiler.

``compile_survey`` turns a stored survey document into a ``RenderedForm``: an
immutable, presentation-neutral description that both the embed script and
native UI shells render from. ``FormSession`` holds the stepwise state of one
shopper filling the form in.
"""
import math
from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple

DEFAULT_MAX_RATING = 5
NPS_MIN, NPS_MAX = 0, 10
DEFAULT_THEME = {
    'primaryColor': '#008060',
    'backgroundColor': '#ffffff',
    'textColor': '#202223',
    'fontFamily': 'inherit',
    'customCSS': '',
}
SUBMIT_LABEL = 'Submit Survey'
SUBMITTING_LABEL = 'Submitting...'
ERROR_LABEL = 'Error - Try Again'
SUCCESS_MESSAGE = 'Thank you for your feedback!'
ERROR_REVERT_MS = 3000


@dataclass(frozen=True)
class ChoiceOption:
    value: str
    label: str
    image_url: Optional[str] = None


@dataclass(frozen=True)
class QuestionDescriptor:
    id: str
    position: int
    text: str
    question_type: str
    widget: str
    required: bool = False
    choices: Tuple[ChoiceOption, ...] = ()
    multi_select: bool = False
    auto_advance: bool = False
    scale: Optional[Tuple[int, int]] = None
    max_length: Optional[int] = None
    placeholder: str = ''
    error: Optional[str] = None

    @property
    def scale_values(self):
        if self.scale is None:
            return []
        low, high = self.scale
        return list(range(low, high + 1))


@dataclass(frozen=True)
class SubmitDescriptor:
    url: str
    method: str = 'POST'
    label: str = SUBMIT_LABEL
    submitting_label: str = SUBMITTING_LABEL
    error_label: str = ERROR_LABEL
    success_message: str = SUCCESS_MESSAGE
    error_revert_ms: int = ERROR_REVERT_MS


@dataclass(frozen=True)
class RenderedForm:
    survey_id: str
    title: str
    description: str
    questions: Tuple[QuestionDescriptor, ...]
    submit: SubmitDescriptor
    theme: Tuple[Tuple[str, str], ...] = field(default=())

    @property
    def container_id(self):
        return f"survey-{self.survey_id}"

    @property
    def theme_tokens(self):
        return dict(self.theme)

    def as_dict(self):
        data = asdict(self)
        data['theme'] = self.theme_tokens
        data['container_id'] = self.container_id
        return data


def _choices(options):
    choices = []
    for option in options or []:
        if isinstance(option, dict):
            label = str(option.get('label', option.get('value', '')))
            value = str(option.get('value', label))
            choices.append(ChoiceOption(value=value, label=label, image_url=option.get('imageUrl')))
        else:
            choices.append(ChoiceOption(value=str(option), label=str(option)))
    return tuple(choices)


def _positive_int(value):
    """Stored limits that are not positive integers are ignored."""
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number > 0 else None


def compile_question(question, position):
    qtype = question.get('questionType')
    base = {
        'id': str(question.get('id') or f"q{position}"),
        'position': position,
        'text': question.get('questionText', ''),
        'question_type': qtype,
        'required': bool(question.get('required', False)),
    }

    if qtype in ('multiple_choice', 'single_choice'):
        return QuestionDescriptor(widget='choice', choices=_choices(question.get('options')),
                                  auto_advance=True, **base)
    if qtype == 'checkbox':
        return QuestionDescriptor(widget='choice', choices=_choices(question.get('options')),
                                  multi_select=True, **base)
    if qtype == 'text':
        return QuestionDescriptor(widget='text', max_length=_positive_int(question.get('maxLength')),
                                  placeholder=question.get('placeholder') or '', **base)
    if qtype == 'rating':
        top = _positive_int(question.get('maxRating')) or DEFAULT_MAX_RATING
        return QuestionDescriptor(widget='scale', scale=(1, top), auto_advance=True, **base)
    if qtype == 'nps':
        return QuestionDescriptor(widget='scale', scale=(NPS_MIN, NPS_MAX), auto_advance=True, **base)
    if qtype == 'select':
        return QuestionDescriptor(widget='dropdown', choices=_choices(question.get('options')),
                                  auto_advance=True, **base)
    if qtype == 'image_radio':
        return QuestionDescriptor(widget='image_choice', choices=_choices(question.get('options')),
                                  auto_advance=True, **base)
    return QuestionDescriptor(widget='unsupported', error='Unsupported question type', **base)


def compile_survey(survey, submit_url) -> RenderedForm:
    theme = dict(DEFAULT_THEME)
    theme.update({k: v for k, v in (survey.get('style') or {}).items() if v is not None})
    return RenderedForm(
        survey_id=str(survey['id']),
        title=survey.get('title', ''),
        description=survey.get('description') or '',
        questions=tuple(compile_question(q, i) for i, q in enumerate(survey.get('questions') or [])),
        submit=SubmitDescriptor(url=submit_url),
        theme=tuple(sorted((k, str(v)) for k, v in theme.items())),
    )


class FormSession:
    """
    Stepwise state of one shopper filling in a form.

    ``request_submit`` returns True once per attempt; callers perform the POST
    and report back through ``submission_succeeded`` / ``submission_failed``.
    """

    def __init__(self, form: RenderedForm):
        self.form = form
        self.index = 0
        self.answers = {}
        self.submitting = False
        self.submitted = False
        self.submit_requests = 0

    @property
    def total(self):
        return len(self.form.questions)

    @property
    def current(self):
        if not self.total:
            return None
        return self.form.questions[self.index]

    @property
    def is_last(self):
        return self.index >= self.total - 1

    @property
    def progress(self):
        if not self.total:
            return 0
        return math.floor((self.index + 1) / self.total * 100 + 0.5)

    def answer(self, question_id, value):
        self.answers[question_id] = value
        question = self.current
        if question is not None and question.id == question_id and question.auto_advance:
            return self.advance()
        return False

    def advance(self):
        if self.is_last:
            return self.request_submit()
        self.index += 1
        return False

    def back(self):
        if self.index > 0:
            self.index -= 1

    def request_submit(self):
        """True when a new submission should be sent."""
        if self.submitting or self.submitted:
            return False
        self.submitting = True
        self.submit_requests += 1
        return True

    def submission_succeeded(self):
        self.submitting = False
        self.submitted = True

    def submission_failed(self):
        self.submitting = False

    def payload(self):
        return [
            {'questionId': q.id, 'answer': self.answers.get(q.id)}
            for q in self.form.questions
        ]
