"""core/services/survey_analysis.py"""
import math
import re
from collections import Counter, defaultdict, OrderedDict
from datetime import datetime, timezone as dt_timezone

import pandas as pd
from django.conf import settings
from django.core.cache import cache
from scipy import stats

from core.exceptions import NotFoundError
from core.utils.helpers import DateFilterHelper, parse_id
from core.utils.logging_utils import StructuredLogger, log_performance
from surveys.answers import (
    ChoiceAnswer, MultiChoiceAnswer, NumberAnswer, TextAnswer, distribution_keys, parse_answer,
)

logger = StructuredLogger('core.analysis')


def _questions_by_id(survey):
    return {
        str(q.get('id') or f"q{i}"): q
        for i, q in enumerate((survey or {}).get('questions') or [])
    }


def _typed_answers(response, questions):
    """Yields (questionId, Answer|None) in submission order."""
    for item in response.get('responses') or []:
        question_id = str(item.get('questionId'))
        yield question_id, parse_answer(item.get('answer'), questions.get(question_id))


def _mean(values):
    return sum(values) / len(values) if values else 0


def _created_at(response):
    value = response.get('createdAt')
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    return None


# --- 1. SENTIMENT ---

class SentimentEngine:
    POSITIVE_WORDS = {'great', 'excellent', 'good', 'love', 'helpful', 'best', 'amazing'}
    NEGATIVE_WORDS = {'bad', 'poor', 'terrible', 'worst', 'hate', 'difficult', 'confusing'}
    MIN_WORDS = 3
    TOP_KEYWORDS = 10

    @staticmethod
    def tokenize(text):
        return [t for t in re.split(r'\W+', text.lower()) if t]

    @staticmethod
    def score_text(text):
        tokens = SentimentEngine.tokenize(text)
        if not tokens:
            return {'positive': 0, 'negative': 0, 'neutral': 1, 'keywords': []}
        positive = [t for t in tokens if t in SentimentEngine.POSITIVE_WORDS]
        negative = [t for t in tokens if t in SentimentEngine.NEGATIVE_WORDS]
        score = {
            'positive': len(positive) / len(tokens),
            'negative': len(negative) / len(tokens),
            'keywords': positive + negative,
        }
        score['neutral'] = 1 - score['positive'] - score['negative']
        return score

    @staticmethod
    def analyze(responses, survey=None):
        questions = _questions_by_id(survey)
        by_question = OrderedDict()
        for response in responses:
            for question_id, answer in _typed_answers(response, questions):
                if not isinstance(answer, TextAnswer):
                    continue
                if len(answer.value.split()) < SentimentEngine.MIN_WORDS:
                    continue
                bucket = by_question.setdefault(question_id, {
                    'positive': 0, 'negative': 0, 'neutral': 0, 'total': 0,
                    'keywords': Counter(), 'responses': [],
                })
                score = SentimentEngine.score_text(answer.value)
                for key in ('positive', 'negative', 'neutral'):
                    bucket[key] += score[key]
                bucket['total'] += 1
                bucket['keywords'].update(score['keywords'])
                bucket['responses'].append({'text': answer.value, 'sentiment': score})

        for bucket in by_question.values():
            for key in ('positive', 'negative', 'neutral'):
                bucket[key] /= bucket['total']
            ranked = sorted(bucket['keywords'].items(), key=lambda kv: (-kv[1], kv[0]))
            bucket['keywords'] = [
                {'keyword': k, 'count': c} for k, c in ranked[:SentimentEngine.TOP_KEYWORDS]
            ]

        buckets = list(by_question.values())
        overall = {
            'positive': _mean([b['positive'] for b in buckets]),
            'negative': _mean([b['negative'] for b in buckets]),
            'neutral': _mean([b['neutral'] for b in buckets]),
            'total': len(buckets),
        }
        return {'overallSentiment': overall, 'sentimentByQuestion': dict(by_question)}


# --- 2. CORRELATION ---

class CorrelationEngine:
    MIN_SAMPLES = 3

    @staticmethod
    def _option_labels(question):
        labels = []
        for option in (question or {}).get('options') or []:
            if isinstance(option, dict):
                labels.append(str(option.get('value', option.get('label', ''))))
            else:
                labels.append(str(option))
        return labels

    @staticmethod
    def numeric_value(answer, question):
        """Number for correlation, or None when the answer has no numeric reading."""
        if isinstance(answer, NumberAnswer):
            return answer.value
        if isinstance(answer, (ChoiceAnswer, TextAnswer)):
            labels = CorrelationEngine._option_labels(question)
            if answer.value in labels:
                return float(labels.index(answer.value))
        return None

    @staticmethod
    def numeric_series(responses, survey):
        questions = _questions_by_id(survey)
        series = OrderedDict()
        for response in responses:
            for question_id, answer in _typed_answers(response, questions):
                if answer is None or isinstance(answer, MultiChoiceAnswer):
                    continue
                value = CorrelationEngine.numeric_value(answer, questions.get(question_id))
                if value is not None:
                    series.setdefault(question_id, []).append(value)
        return series

    @staticmethod
    def pearson(x, y):
        """(r, significance) or (None, None) when the pair is degenerate."""
        n = len(x)
        if n < CorrelationEngine.MIN_SAMPLES:
            return None, None
        r = pd.Series(x, dtype=float).corr(pd.Series(y, dtype=float))
        if r is None or math.isnan(r):
            return None, None
        r = max(-1.0, min(1.0, float(r)))
        if abs(r) >= 1.0:
            return r, 0.0
        t = r * math.sqrt((n - 2) / (1 - r * r))
        significance = float(2 * stats.t.sf(abs(t), n - 2))
        return r, significance

    @staticmethod
    def analyze(responses, survey):
        series = CorrelationEngine.numeric_series(responses, survey)
        ids = list(series)
        correlations = []
        for i, first in enumerate(ids):
            for second in ids[i + 1:]:
                if len(series[first]) != len(series[second]):
                    continue
                r, significance = CorrelationEngine.pearson(series[first], series[second])
                correlations.append({
                    'questionId1': first,
                    'questionId2': second,
                    'correlation': r,
                    'significance': significance,
                    'sampleSize': len(series[first]),
                    'insufficientData': r is None,
                })
        correlations.sort(key=lambda c: (c['correlation'] is None, -abs(c['correlation'] or 0)))
        return {'correlations': correlations, 'sampleSize': len(responses)}


# --- 3. COMPLETION PREDICTION ---

class CompletionPredictionEngine:
    @staticmethod
    def is_completed(response):
        return all(item.get('answer') is not None for item in response.get('responses') or [])

    @staticmethod
    def factor_keys(response):
        keys = []
        created = _created_at(response)
        if created is not None:
            if created.tzinfo is not None:
                created = created.astimezone(dt_timezone.utc)
            keys.append(f"time_{created.hour}-{created.hour + 1}")
        device = (response.get('metadata') or {}).get('deviceType') or 'unknown'
        keys.append(f"device_{device}")
        return keys

    @staticmethod
    def analyze(responses):
        total = len(responses)
        completed = [r for r in responses if CompletionPredictionEngine.is_completed(r)]
        overall_rate = len(completed) / total if total else 0

        buckets = OrderedDict()
        for response in responses:
            done = CompletionPredictionEngine.is_completed(response)
            for key in CompletionPredictionEngine.factor_keys(response):
                bucket = buckets.setdefault(key, {'completed': 0, 'abandoned': 0})
                bucket['completed' if done else 'abandoned'] += 1

        factors = [
            {
                'factor': key,
                'impact': b['completed'] / (b['completed'] + b['abandoned']) - overall_rate,
                'sampleSize': b['completed'] + b['abandoned'],
            }
            for key, b in buckets.items()
        ]
        factors.sort(key=lambda f: -abs(f['impact']))
        return {
            'model': {'completionProbability': overall_rate, 'factors': factors},
            'statistics': {
                'totalResponses': total,
                'completedResponses': len(completed),
                'abandonedResponses': total - len(completed),
                'averageTimeToComplete': _mean([float(r.get('totalTimeSpent') or 0) for r in completed]),
            },
        }


# --- 4. USER JOURNEY ---

class JourneyEngine:
    TOP_PATHS = 10

    @staticmethod
    def path(response):
        return [
            str(item.get('questionId'))
            for item in response.get('responses') or []
            if item.get('answer') is not None
        ]

    @staticmethod
    def analyze(responses):
        """
        Groups answer paths and first-order transitions.

        ``mostCommonStartingPoint`` is the question most often answered first,
        not the question with the most outgoing transitions.
        """
        total = len(responses)
        paths = OrderedDict()
        transitions = defaultdict(Counter)
        starts = Counter()
        answered_counts = []

        for response in responses:
            path = JourneyEngine.path(response)
            answered_counts.append(len(path))
            path_stats = paths.setdefault(tuple(path), {'count': 0, 'timeSpent': 0.0, 'completions': 0})
            path_stats['count'] += 1
            path_stats['timeSpent'] += float(response.get('totalTimeSpent') or 0)
            if CompletionPredictionEngine.is_completed(response):
                path_stats['completions'] += 1
            if path:
                starts[path[0]] += 1
            for source, target in zip(path, path[1:]):
                transitions[source][target] += 1

        journeys = [
            {
                'path': list(path),
                'frequency': s['count'] / total,
                'averageTimeSpent': s['timeSpent'] / s['count'],
                'completionRate': s['completions'] / s['count'],
            }
            for path, s in paths.items()
        ]
        journeys.sort(key=lambda j: -j['frequency'])

        probabilities = {
            source: {target: count / sum(targets.values()) for target, count in targets.items()}
            for source, targets in transitions.items()
        }
        most_common_start = starts.most_common(1)[0][0] if starts else None
        return {
            'journeys': journeys[:JourneyEngine.TOP_PATHS],
            'transitionProbabilities': probabilities,
            'metrics': {
                'averageQuestionsAnswered': _mean(answered_counts),
                'mostCommonStartingPoint': most_common_start,
            },
        }


# --- 5. BREAKDOWNS ---

class BreakdownEngine:
    @staticmethod
    def response_breakdown(responses, survey=None):
        questions = _questions_by_id(survey)
        breakdown = OrderedDict()
        for response in responses:
            for question_id, answer in _typed_answers(response, questions):
                entry = breakdown.setdefault(question_id, {'responses': Counter(), 'totalResponses': 0})
                if answer is None:
                    continue
                entry['responses'].update(distribution_keys(answer))
                entry['totalResponses'] += 1
        return {
            qid: {'responses': dict(e['responses']), 'totalResponses': e['totalResponses']}
            for qid, e in breakdown.items()
        }

    @staticmethod
    def time_trends(responses):
        days = defaultdict(lambda: {'responses': 0, 'totalTimeSpent': 0.0})
        for response in responses:
            created = _created_at(response)
            if created is None:
                continue
            day = days[created.date().isoformat()]
            day['responses'] += 1
            day['totalTimeSpent'] += float(response.get('totalTimeSpent') or 0)
        return [
            {
                'date': date,
                'responses': d['responses'],
                'totalTimeSpent': d['totalTimeSpent'],
                'averageTimeSpent': d['totalTimeSpent'] / d['responses'],
            }
            for date, d in sorted(days.items())
        ]

    @staticmethod
    def user_segments(responses):
        customer_types = Counter(r.get('customerType') for r in responses)
        return {
            'customerTypes': {
                'new': customer_types.get('new', 0),
                'returning': customer_types.get('returning', 0),
            },
            'devices': dict(Counter(
                (r.get('metadata') or {}).get('deviceType') or 'unknown' for r in responses
            )),
            'locations': dict(Counter(
                (r.get('metadata') or {}).get('location') or 'unknown' for r in responses
            )),
        }


# --- 6. SERVICE ---

def report_cache_prefix(survey_id):
    return f"survey_report_{survey_id}"


def report_version_key(survey_id):
    return f"{report_cache_prefix(survey_id)}_version"


def bump_report_version(survey_id):
    """Makes every cached report of the survey unreachable."""
    key = report_version_key(survey_id)
    if not cache.add(key, 2):
        try:
            cache.incr(key)
        except ValueError:
            # expired between add and incr
            cache.set(key, 2)


class AnalyticsEngine:
    """
    Loads survey data through the document store and serves the derived
    reports, caching each payload per survey, kind and date window.
    """

    KINDS = ('analytics', 'sentiment', 'correlation', 'completion', 'journey')

    def __init__(self, store, cache_timeout=None):
        self.store = store
        self.cache_timeout = cache_timeout

    @property
    def timeout(self):
        if self.cache_timeout is not None:
            return self.cache_timeout
        return getattr(settings, 'SURVEY_ANALYTICS_CACHE_TIMEOUT', 300)

    def _cache_key(self, survey_id, kind, start, end):
        # same key whatever the spelling of the id in the path
        survey_id = parse_id(survey_id)
        version = cache.get(report_version_key(survey_id), 1)
        return f"{report_cache_prefix(survey_id)}_{kind}_{start or 'all'}_{end or 'all'}_v{version}"

    async def _load(self, survey_id, start=None, end=None):
        survey = await self.store.find_one('surveys', {'pk': parse_id(survey_id)})
        if survey is None:
            raise NotFoundError('Survey not found', surveyId=survey_id)
        filters = {'survey_id': survey['id']}
        filters.update(DateFilterHelper.build_filters(start, end))
        responses = await self.store.find('survey_responses', filters, order_by=['created_at', 'id'])
        return survey, responses

    async def _cached(self, survey_id, kind, start, end, compute):
        # Date filters are validated before any cache lookup
        DateFilterHelper.build_filters(start, end)
        key = self._cache_key(survey_id, kind, start, end)
        cached = cache.get(key)
        if cached is not None:
            return cached
        survey, responses = await self._load(survey_id, start, end)
        result = compute(survey, responses)
        cache.set(key, result, self.timeout)
        logger.debug("Report computed", survey_id=survey['id'], kind=kind, responses=len(responses))
        return result

    @log_performance(threshold_ms=2000)
    async def sentiment(self, survey_id, start=None, end=None):
        return await self._cached(
            survey_id, 'sentiment', start, end,
            lambda survey, responses: SentimentEngine.analyze(responses, survey),
        )

    @log_performance(threshold_ms=2000)
    async def correlation(self, survey_id, start=None, end=None):
        return await self._cached(
            survey_id, 'correlation', start, end,
            lambda survey, responses: CorrelationEngine.analyze(responses, survey),
        )

    @log_performance(threshold_ms=2000)
    async def completion_prediction(self, survey_id, start=None, end=None):
        return await self._cached(
            survey_id, 'completion', start, end,
            lambda survey, responses: CompletionPredictionEngine.analyze(responses),
        )

    @log_performance(threshold_ms=2000)
    async def user_journey(self, survey_id, start=None, end=None):
        return await self._cached(
            survey_id, 'journey', start, end,
            lambda survey, responses: JourneyEngine.analyze(responses),
        )

    @log_performance(threshold_ms=2000)
    async def analytics_report(self, survey_id, start=None, end=None):
        """The stored rollup merged with breakdowns over the date window."""
        DateFilterHelper.build_filters(start, end)
        key = self._cache_key(survey_id, 'analytics', start, end)
        cached = cache.get(key)
        if cached is not None:
            return cached
        survey, responses = await self._load(survey_id, start, end)
        rollup = await self.store.find_one('survey_analytics', {'survey_id': survey['id']}) or {}
        result = {
            'analytics': rollup,
            'responseBreakdown': BreakdownEngine.response_breakdown(responses, survey),
            'timeTrends': BreakdownEngine.time_trends(responses),
            'userSegments': BreakdownEngine.user_segments(responses),
            'dateRange': DateFilterHelper.build_date_range_label(start, end),
        }
        cache.set(key, result, self.timeout)
        return result
