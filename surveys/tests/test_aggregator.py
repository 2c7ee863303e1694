import pytest
from asgiref.sync import async_to_sync
from django.core.exceptions import ValidationError

from core.exceptions import NotFoundError
from core.services.document_store import DjangoDocumentStore
from surveys.aggregator import (
    ResponseAggregator,
    build_question_analytics,
    build_rollup,
    completion_rate,
    normalize_answers,
)
from surveys.models import SurveyAnalytics, SurveyResponse

QUESTIONS = [
    {'id': 'q-rating', 'questionType': 'rating'},
    {'id': 'q-text', 'questionType': 'text'},
]


@pytest.fixture
def aggregator():
    return ResponseAggregator(DjangoDocumentStore())


def submit(aggregator, survey_id, answers, customer_type='new', total_time=30, metadata=None):
    return async_to_sync(aggregator.record_response)(survey_id, answers, {
        'customerType': customer_type,
        'totalTimeSpent': total_time,
        'metadata': metadata or {},
    })


class TestPureFold:
    def test_normalize_accepts_mapping(self):
        normalized = normalize_answers({'q-rating': '4', 'q-text': ''}, QUESTIONS)
        assert normalized == [
            {'questionId': 'q-rating', 'answer': 4},
            {'questionId': 'q-text', 'answer': None},
        ]

    def test_normalize_requires_question_id(self):
        with pytest.raises(ValidationError):
            normalize_answers([{'answer': 'x'}], QUESTIONS)

    @pytest.mark.parametrize('time_spent', ['soon', 'nan', float('inf')])
    def test_normalize_rejects_unusable_time_spent(self, time_spent):
        with pytest.raises(ValidationError, match='timeSpent must be a number'):
            normalize_answers([{'questionId': 'q-rating', 'answer': 3, 'timeSpent': time_spent}], QUESTIONS)

    def test_question_rollup_counts_answers_and_skips(self):
        survey = {'questions': QUESTIONS}
        responses = [
            {'responses': [{'questionId': 'q-rating', 'answer': 4, 'timeSpent': 2},
                           {'questionId': 'q-text', 'answer': None}]},
            {'responses': [{'questionId': 'q-rating', 'answer': 4, 'timeSpent': 4}]},
        ]
        rating, text = build_question_analytics(survey, responses)
        assert rating == {
            'questionId': 'q-rating', 'responses': 2, 'skips': 0,
            'averageTimeSpent': 3.0, 'responseDistribution': {'4': 2},
        }
        assert text['responses'] == 0
        assert text['skips'] == 2
        assert text['averageTimeSpent'] == 0

    def test_multi_select_choices_are_counted_individually(self):
        survey = {'questions': [{'id': 'm', 'questionType': 'checkbox'}]}
        responses = [{'responses': [{'questionId': 'm', 'answer': ['a', 'b']}]},
                     {'responses': [{'questionId': 'm', 'answer': ['a']}]}]
        (rollup,) = build_question_analytics(survey, responses)
        assert rollup['responseDistribution'] == {'a': 2, 'b': 1}

    def test_completion_rate_is_capped(self):
        assert completion_rate(5, 0) == 0
        assert completion_rate(1, 4) == 0.25
        assert completion_rate(6, 3) == 1

    def test_build_rollup_of_no_responses(self):
        rollup = build_rollup({'questions': QUESTIONS}, [], views=3)
        assert rollup['completions'] == 0
        assert rollup['averageTimeSpent'] == 0
        assert rollup['completionRate'] == 0
        assert rollup['demographicData']['averageCartValue'] == 0


@pytest.mark.django_db
class TestResponseAggregator:
    def test_rating_and_text_end_to_end(self, aggregator, make_survey):
        survey = make_survey()
        submit(aggregator, survey.id, [
            {'questionId': 'q-rating', 'answer': 4},
            {'questionId': 'q-text', 'answer': 'Great service'},
        ], total_time=30, metadata={'cartValue': 80})
        submit(aggregator, survey.id, [
            {'questionId': 'q-rating', 'answer': '4'},
            {'questionId': 'q-text', 'answer': None},
        ], customer_type='returning', total_time=50, metadata={'cartValue': 120})

        analytics = SurveyAnalytics.objects.get(survey=survey)
        assert analytics.completions == 2
        assert analytics.average_time_spent == 40
        assert analytics.new_customers == 1
        assert analytics.returning_customers == 1
        assert analytics.average_cart_value == 100
        rating, text = analytics.question_analytics
        assert rating['responseDistribution'] == {'4': 2}
        assert text['responses'] == 1
        assert text['skips'] == 1

    def test_recompute_converges_and_is_idempotent(self, aggregator, make_survey):
        survey = make_survey()
        async_to_sync(aggregator.record_view)(survey.id)
        async_to_sync(aggregator.record_view)(survey.id)
        submit(aggregator, survey.id, {'q-rating': 5, 'q-text': 'ok then fine'})
        incremental = async_to_sync(aggregator.recompute_rollup)(survey.id)
        again = async_to_sync(aggregator.recompute_rollup)(survey.id)

        assert incremental['views'] == 2
        assert incremental['completions'] == 1
        assert incremental['completionRate'] == 0.5
        for key in ('views', 'completions', 'averageTimeSpent', 'completionRate',
                    'questionAnalytics', 'demographicData'):
            assert incremental[key] == again[key]

    def test_recompute_repairs_counter_drift(self, aggregator, make_survey):
        survey = make_survey()
        submit(aggregator, survey.id, {'q-rating': 3})
        SurveyAnalytics.objects.filter(survey=survey).update(completions=99, new_customers=42)

        repaired = async_to_sync(aggregator.recompute_rollup)(survey.id)
        assert repaired['completions'] == 1
        assert repaired['demographicData']['newCustomers'] == 1

    def test_record_view_refreshes_completion_rate(self, aggregator, make_survey):
        survey = make_survey()
        submit(aggregator, survey.id, {'q-rating': 3})
        analytics = async_to_sync(aggregator.record_view)(survey.id)
        assert analytics['views'] == 1
        assert analytics['completionRate'] == 1

    def test_creates_missing_rollup(self, aggregator, make_survey):
        survey = make_survey()
        SurveyAnalytics.objects.filter(survey=survey).delete()
        submit(aggregator, survey.id, {'q-rating': 2})
        assert SurveyAnalytics.objects.get(survey=survey).completions == 1

    def test_unknown_survey(self, aggregator, db):
        with pytest.raises(NotFoundError):
            submit(aggregator, 999, {'q-rating': 1})
        with pytest.raises(NotFoundError):
            submit(aggregator, 'not-an-id', {'q-rating': 1})

    def test_invalid_customer_type_stores_nothing(self, aggregator, make_survey):
        survey = make_survey()
        with pytest.raises(ValidationError):
            submit(aggregator, survey.id, {'q-rating': 1}, customer_type='vip')
        assert SurveyResponse.objects.count() == 0
