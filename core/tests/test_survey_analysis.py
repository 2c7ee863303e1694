from datetime import datetime, timezone as dt_timezone

import pytest

from core.services.survey_analysis import (
    BreakdownEngine,
    CompletionPredictionEngine,
    CorrelationEngine,
    JourneyEngine,
    SentimentEngine,
)


def response(answers, created=None, time_spent=10, device=None, customer_type='new'):
    return {
        'responses': [{'questionId': qid, 'answer': a} for qid, a in answers],
        'createdAt': created or datetime(2024, 3, 1, 9, 30, tzinfo=dt_timezone.utc),
        'totalTimeSpent': time_spent,
        'customerType': customer_type,
        'metadata': {'deviceType': device} if device else {},
    }


class TestSentiment:
    def test_all_positive_words(self):
        result = SentimentEngine.analyze([response([('t', 'great excellent good')])])
        bucket = result['sentimentByQuestion']['t']
        assert bucket['positive'] == 1
        assert bucket['negative'] == 0
        assert bucket['neutral'] == 0
        assert result['overallSentiment']['positive'] == 1
        assert result['overallSentiment']['total'] == 1

    def test_short_answers_are_ignored(self):
        result = SentimentEngine.analyze([response([('t', 'great stuff')])])
        assert result['sentimentByQuestion'] == {}
        assert result['overallSentiment'] == {'positive': 0, 'negative': 0, 'neutral': 0, 'total': 0}

    def test_scores_sum_to_one(self):
        score = SentimentEngine.score_text('The checkout was confusing but support was helpful')
        assert score['positive'] + score['negative'] + score['neutral'] == pytest.approx(1)
        assert score['keywords'] == ['helpful', 'confusing']

    def test_keywords_ranked_by_count_then_name(self):
        result = SentimentEngine.analyze([
            response([('t', 'bad bad good product')]),
            response([('t', 'good but bad shipping')]),
            response([('t', 'amazing, truly amazing')]),
        ])
        keywords = result['sentimentByQuestion']['t']['keywords']
        assert keywords[0] == {'keyword': 'bad', 'count': 3}
        assert [k['keyword'] for k in keywords[1:]] == ['amazing', 'good']

    def test_non_text_answers_are_skipped(self):
        survey = {'questions': [{'id': 'r', 'questionType': 'rating'}]}
        result = SentimentEngine.analyze([response([('r', 5)])], survey)
        assert result['sentimentByQuestion'] == {}


class TestCorrelation:
    def test_perfect_linear_relation(self):
        survey = {'questions': [{'id': 'a', 'questionType': 'rating'}, {'id': 'b', 'questionType': 'rating'}]}
        responses = [response([('a', x), ('b', y)]) for x, y in [(1, 2), (2, 4), (3, 6)]]
        result = CorrelationEngine.analyze(responses, survey)
        (pair,) = result['correlations']
        assert pair['correlation'] == pytest.approx(1.0)
        assert pair['significance'] == pytest.approx(0, abs=1e-6)
        assert pair['sampleSize'] == 3
        assert result['sampleSize'] == 3

    def test_zero_variance_is_insufficient(self):
        assert CorrelationEngine.pearson([3, 3, 3], [1, 2, 3]) == (None, None)

    def test_too_few_samples(self):
        assert CorrelationEngine.pearson([1, 2], [2, 4]) == (None, None)

    def test_significance_is_two_tailed(self):
        r, p = CorrelationEngine.pearson([1, 2, 3, 4, 5], [2, 1, 4, 3, 5])
        assert r == pytest.approx(0.8)
        assert p == pytest.approx(0.1041, abs=1e-3)

    def test_choices_map_to_option_index(self):
        survey = {'questions': [
            {'id': 'c', 'questionType': 'multiple_choice', 'options': ['low', 'mid', 'high']},
            {'id': 'r', 'questionType': 'rating'},
            {'id': 'free', 'questionType': 'text'},
        ]}
        responses = [
            response([('c', 'low'), ('r', 1), ('free', 'meh')]),
            response([('c', 'mid'), ('r', 2), ('free', 'ok')]),
            response([('c', 'high'), ('r', 3), ('free', 'yay')]),
        ]
        series = CorrelationEngine.numeric_series(responses, survey)
        assert series == {'c': [0.0, 1.0, 2.0], 'r': [1.0, 2.0, 3.0]}

    def test_insufficient_pairs_sort_last(self):
        survey = {'questions': [{'id': i, 'questionType': 'rating'} for i in ('a', 'b', 'c')]}
        responses = [response([('a', x), ('b', x), ('c', 5)]) for x in (1, 2, 3)]
        result = CorrelationEngine.analyze(responses, survey)
        assert [c['insufficientData'] for c in result['correlations']] == [False, True, True]

    def test_empty(self):
        assert CorrelationEngine.analyze([], None) == {'correlations': [], 'sampleSize': 0}


class TestCompletionPrediction:
    def test_empty_input(self):
        result = CompletionPredictionEngine.analyze([])
        assert result['model'] == {'completionProbability': 0, 'factors': []}
        assert result['statistics']['averageTimeToComplete'] == 0

    def test_factors_and_statistics(self):
        responses = [
            response([('a', 1), ('b', 2)], device='mobile', time_spent=30),
            response([('a', 1), ('b', None)], device='desktop', time_spent=5),
        ]
        result = CompletionPredictionEngine.analyze(responses)
        assert result['model']['completionProbability'] == 0.5
        factors = {f['factor']: f for f in result['model']['factors']}
        assert factors['device_mobile']['impact'] == 0.5
        assert factors['device_desktop']['impact'] == -0.5
        assert factors['time_9-10']['impact'] == 0
        assert result['model']['factors'][-1]['factor'] == 'time_9-10'
        assert result['statistics'] == {
            'totalResponses': 2,
            'completedResponses': 1,
            'abandonedResponses': 1,
            'averageTimeToComplete': 30,
        }

    def test_missing_device_is_unknown(self):
        assert 'device_unknown' in CompletionPredictionEngine.factor_keys(response([]))


class TestJourney:
    def test_path_frequency_and_transitions(self):
        responses = [
            response([('a', 1), ('b', 2)]),
            response([('a', 1), ('b', 3)]),
            response([('a', 1), ('c', 'x')]),
        ]
        result = JourneyEngine.analyze(responses)
        top = result['journeys'][0]
        assert top['path'] == ['a', 'b']
        assert top['frequency'] == pytest.approx(2 / 3)
        assert result['transitionProbabilities']['a'] == {
            'b': pytest.approx(2 / 3), 'c': pytest.approx(1 / 3),
        }
        assert result['metrics']['mostCommonStartingPoint'] == 'a'
        assert result['metrics']['averageQuestionsAnswered'] == 2

    def test_starting_point_is_the_most_common_first_answer(self):
        responses = [
            response([('a', 1)]),
            response([('a', 2)]),
            response([('b', 1), ('c', 2), ('d', 3)]),
        ]
        result = JourneyEngine.analyze(responses)
        assert 'a' not in result['transitionProbabilities']
        assert result['metrics']['mostCommonStartingPoint'] == 'a'

    def test_skipped_questions_leave_the_path(self):
        assert JourneyEngine.path(response([('a', None), ('b', 1)])) == ['b']

    def test_empty(self):
        result = JourneyEngine.analyze([])
        assert result['journeys'] == []
        assert result['metrics'] == {'averageQuestionsAnswered': 0, 'mostCommonStartingPoint': None}


class TestBreakdowns:
    def test_response_breakdown(self):
        survey = {'questions': [{'id': 'm', 'questionType': 'checkbox'}]}
        responses = [response([('m', ['x', 'y'])]), response([('m', ['x'])]), response([('m', None)])]
        assert BreakdownEngine.response_breakdown(responses, survey) == {
            'm': {'responses': {'x': 2, 'y': 1}, 'totalResponses': 2},
        }

    def test_time_trends_group_by_day(self):
        responses = [
            response([], created=datetime(2024, 3, 2, 8, tzinfo=dt_timezone.utc), time_spent=10),
            response([], created=datetime(2024, 3, 1, 8, tzinfo=dt_timezone.utc), time_spent=20),
            response([], created=datetime(2024, 3, 1, 20, tzinfo=dt_timezone.utc), time_spent=40),
        ]
        trends = BreakdownEngine.time_trends(responses)
        assert [t['date'] for t in trends] == ['2024-03-01', '2024-03-02']
        assert trends[0]['responses'] == 2
        assert trends[0]['averageTimeSpent'] == 30

    def test_user_segments(self):
        segments = BreakdownEngine.user_segments([
            response([], device='mobile'),
            response([], customer_type='returning'),
        ])
        assert segments['customerTypes'] == {'new': 1, 'returning': 1}
        assert segments['devices'] == {'mobile': 1, 'unknown': 1}
        assert segments['locations'] == {'unknown': 2}
