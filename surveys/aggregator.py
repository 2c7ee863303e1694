"""
Response aggregator.

Records shopper submissions and keeps the per-survey rollup in step. Counter
fields are bumped with storage-level increments; the per-question rollup is
always rebuilt from the full response set, so ``record_response`` and
``recompute_rollup`` converge on the same document.
"""
import math
from collections import Counter, OrderedDict

from django.core.exceptions import ValidationError
from django.utils import timezone

from core.exceptions import NotFoundError
from core.services.survey_analysis import bump_report_version
from core.utils.helpers import parse_id
from core.utils.logging_utils import StructuredLogger, log_performance
from surveys.answers import answer_value, distribution_keys, parse_answer

logger = StructuredLogger('surveys')

CUSTOMER_COUNTERS = {
    'new': 'new_customers',
    'returning': 'returning_customers',
}


def _finite(value, message):
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(message)
    if not math.isfinite(number):
        raise ValidationError(message)
    return number


def normalize_answers(raw_responses, questions):
    """
    Accepts either ``[{questionId, answer, timeSpent?}]`` or a
    ``{questionId: answer}`` mapping and returns the stored list shape.
    """
    by_id = {str(q.get('id')): q for q in questions or [] if q.get('id')}

    if isinstance(raw_responses, dict):
        items = [{'questionId': k, 'answer': v} for k, v in raw_responses.items()]
    elif isinstance(raw_responses, (list, tuple)):
        items = list(raw_responses)
    else:
        raise ValidationError('responses must be a list or an object')

    normalized = []
    for item in items:
        if not isinstance(item, dict) or not item.get('questionId'):
            raise ValidationError('Each response needs a questionId')
        question_id = str(item['questionId'])
        answer = parse_answer(item.get('answer'), by_id.get(question_id))
        entry = {'questionId': question_id, 'answer': answer_value(answer)}
        if item.get('timeSpent') is not None:
            entry['timeSpent'] = _finite(item['timeSpent'], 'timeSpent must be a number')
        normalized.append(entry)
    return normalized


def _question_ids(survey, responses):
    """Survey question ids first, then ids only seen in responses."""
    ids = OrderedDict()
    for position, question in enumerate(survey.get('questions') or []):
        ids[str(question.get('id') or f"q{position}")] = question
    for response in responses:
        for item in response.get('responses') or []:
            ids.setdefault(str(item.get('questionId')), None)
    return ids


def build_question_analytics(survey, responses):
    rollup = []
    questions = _question_ids(survey, responses)
    for question_id, question in questions.items():
        answered = 0
        skips = 0
        times = []
        distribution = Counter()
        for response in responses:
            item = next(
                (r for r in response.get('responses') or [] if str(r.get('questionId')) == question_id),
                None,
            )
            answer = parse_answer(item.get('answer'), question) if item else None
            if answer is None:
                skips += 1
            else:
                answered += 1
                for key in distribution_keys(answer):
                    distribution[key] += 1
            if item and item.get('timeSpent') is not None:
                times.append(float(item['timeSpent']))
        rollup.append({
            'questionId': question_id,
            'responses': answered,
            'skips': skips,
            'averageTimeSpent': sum(times) / len(times) if times else 0,
            'responseDistribution': dict(distribution),
        })
    return rollup


def completion_rate(completions, views):
    if not views:
        return 0
    return min(completions / views, 1)


def _cart_value(response):
    value = (response.get('metadata') or {}).get('cartValue')
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def build_rollup(survey, responses, views=0):
    """Pure fold of a survey's responses into the rollup document fields."""
    completions = len(responses)
    times = [float(r.get('totalTimeSpent') or 0) for r in responses]
    carts = [v for v in (_cart_value(r) for r in responses) if v is not None]
    customer_types = Counter(r.get('customerType') for r in responses)
    return {
        'views': views,
        'completions': completions,
        'averageTimeSpent': sum(times) / completions if completions else 0,
        'completionRate': completion_rate(completions, views),
        'questionAnalytics': build_question_analytics(survey, responses),
        'demographicData': {
            'newCustomers': customer_types.get('new', 0),
            'returningCustomers': customer_types.get('returning', 0),
            'averageCartValue': sum(carts) / len(carts) if carts else 0,
        },
    }


class ResponseAggregator:
    def __init__(self, store):
        self.store = store

    async def _get_survey(self, survey_id):
        survey = await self.store.find_one('surveys', {'pk': parse_id(survey_id)})
        if survey is None:
            raise NotFoundError('Survey not found', surveyId=survey_id)
        return survey

    async def _ensure_analytics(self, survey_id):
        analytics = await self.store.find_one('survey_analytics', {'survey_id': survey_id})
        if analytics is None:
            analytics = await self.store.insert('survey_analytics', {'surveyId': survey_id})
        return analytics

    async def _responses(self, survey_id):
        return await self.store.find(
            'survey_responses', {'survey_id': survey_id}, order_by=['created_at', 'id'],
        )

    @log_performance(threshold_ms=500)
    async def record_response(self, survey_id, answers, metadata=None):
        """
        Insert one response and update the rollup.

        ``metadata`` carries ``customerType`` (required), ``customerEmail``,
        ``totalTimeSpent`` and the shopper ``metadata`` object.
        """
        metadata = metadata or {}
        survey = await self._get_survey(survey_id)

        customer_type = metadata.get('customerType')
        if customer_type not in CUSTOMER_COUNTERS:
            raise ValidationError('customerType must be "new" or "returning"')
        total_time = _finite(metadata.get('totalTimeSpent') or 0, 'totalTimeSpent must be a number')

        response = await self.store.insert('survey_responses', {
            'surveyId': survey['id'],
            'responses': normalize_answers(answers, survey.get('questions')),
            'customerEmail': metadata.get('customerEmail') or '',
            'customerType': customer_type,
            'totalTimeSpent': total_time,
            'metadata': metadata.get('metadata') or {},
            'createdAt': timezone.now(),
        })

        await self._ensure_analytics(survey['id'])
        analytics = await self.store.update_one(
            'survey_analytics',
            {'survey_id': survey['id']},
            inc={'completions': 1, CUSTOMER_COUNTERS[customer_type]: 1},
        )

        responses = await self._responses(survey['id'])
        rollup = build_rollup(survey, responses, views=analytics['views'])
        await self.store.update_one('survey_analytics', {'survey_id': survey['id']}, set={
            'average_time_spent': rollup['averageTimeSpent'],
            'completion_rate': completion_rate(analytics['completions'], analytics['views']),
            'question_analytics': rollup['questionAnalytics'],
            'average_cart_value': rollup['demographicData']['averageCartValue'],
            'updated_at': timezone.now(),
        })
        bump_report_version(survey['id'])
        logger.info(
            "Survey response recorded",
            survey_id=survey['id'], response_id=response['id'], customer_type=customer_type,
        )
        return response

    @log_performance(threshold_ms=2000)
    async def recompute_rollup(self, survey_id):
        survey = await self._get_survey(survey_id)
        analytics = await self._ensure_analytics(survey['id'])
        responses = await self._responses(survey['id'])
        rollup = build_rollup(survey, responses, views=analytics['views'])
        updated = await self.store.update_one('survey_analytics', {'survey_id': survey['id']}, set={
            'completions': rollup['completions'],
            'average_time_spent': rollup['averageTimeSpent'],
            'completion_rate': rollup['completionRate'],
            'question_analytics': rollup['questionAnalytics'],
            'new_customers': rollup['demographicData']['newCustomers'],
            'returning_customers': rollup['demographicData']['returningCustomers'],
            'average_cart_value': rollup['demographicData']['averageCartValue'],
            'updated_at': timezone.now(),
        })
        # queryset updates fire no signals
        bump_report_version(survey['id'])
        logger.info("Rollup recomputed", survey_id=survey['id'], completions=rollup['completions'])
        return updated

    async def record_view(self, survey_id):
        survey = await self._get_survey(survey_id)
        await self._ensure_analytics(survey['id'])
        analytics = await self.store.update_one(
            'survey_analytics', {'survey_id': survey['id']}, inc={'views': 1},
        )
        bump_report_version(survey['id'])
        return await self.store.update_one('survey_analytics', {'survey_id': survey['id']}, set={
            'completion_rate': completion_rate(analytics['completions'], analytics['views']),
            'updated_at': timezone.now(),
        })
