import json
import unittest
from unittest.mock import MagicMock

import pytest
import requests

from lottoai.config import PredictionServiceConfig
from lottoai.core.models import DrawRecord, ModelParameters
from lottoai.net.gemini import (
    GeminiPredictionService, MalformedResponseError, MissingCredentialError,
    PredictionError, ServiceUnavailableError, build_prompt, build_request,
    format_history_line, parse_prediction, USER_ERROR_MESSAGE
)


VALID_PAYLOAD = {
    'analysisSummary': '近期红球偏热。',
    'redBallProbabilities': [
        {'number': 7, 'probability': 12.5, 'deviation': 0.8},
        {'number': 21.0, 'probability': 30, 'deviation': -1.2},
    ],
    'blueBallProbabilities': [{'number': 9, 'probability': 40, 'deviation': 0.1}],
    'suggestedCombinations': [
        {'red': [1, 7, 12, 21, 28, 33], 'blue': [9], 'reasoning': '冷热搭配'},
        {'red': [2, 7, 13, 21, 25, 30], 'reasoning': '偏差修正'},
    ],
}


def make_history(n):
    return [
        DrawRecord(issue=str(2026000 + i), date='2026-01-01',
                   primary_numbers=(1, 2, 3, 4, 5, 6), secondary_numbers=(i % 16 + 1,))
        for i in range(n)
    ]


def gemini_response(payload, status=200):
    response = MagicMock()
    response.status_code = status
    response.text = json.dumps(payload)
    response.json.return_value = {
        'candidates': [{'content': {'parts': [{'text': json.dumps(payload)}]}}]
    }
    return response


class TestRequestAndPrompt(unittest.TestCase):
    def test_request_keeps_first_records_only(self):
        history = make_history(80)
        request = build_request('SSQ', history, ModelParameters(), sample_size=50)
        self.assertEqual(len(request.history_sample), 50)
        self.assertEqual(request.history_sample[0].issue, '2026000')

    def test_unknown_game_rejected(self):
        with self.assertRaises(KeyError):
            build_request('POWERBALL', [], ModelParameters())

    def test_history_line_format(self):
        record = DrawRecord('1', '', (1, 2), (3,))
        self.assertEqual(format_history_line(record), 'Issue 1: Red[1, 2] Blue[3]')
        self.assertEqual(format_history_line(DrawRecord('2', '', (4, 5))), 'Issue 2: Red[4, 5]')

    def test_prompt_contains_parameters_and_history(self):
        params = ModelParameters(simulation_iterations=20000, training_epochs=500,
                                 recent_data_weight=0.4, use_adjacency_model=False)
        prompt = build_prompt(build_request('DALETOU', make_history(3), params))
        self.assertIn('大乐透', prompt)
        self.assertIn('20000', prompt)
        self.assertIn('500', prompt)
        self.assertIn('0.4', prompt)
        self.assertIn('忽略 CRF 模型', prompt)
        self.assertIn('Issue 2026002', prompt)


class TestParsePrediction(unittest.TestCase):
    def test_valid_payload(self):
        result = parse_prediction('SSQ', VALID_PAYLOAD)
        self.assertEqual(result.game, 'SSQ')
        self.assertEqual(result.primary_probabilities[1].number, 21)
        self.assertEqual(result.secondary_probabilities[0].probability_percent, 40.0)
        self.assertEqual(result.suggested_combinations[0].secondary, (9,))
        self.assertIsNone(result.suggested_combinations[1].secondary)
        self.assertEqual([p.number for p in result.top_primary(1)], [21])

    def test_blue_probabilities_optional(self):
        payload = dict(VALID_PAYLOAD)
        del payload['blueBallProbabilities']
        self.assertEqual(parse_prediction('HAPPY8', payload).secondary_probabilities, [])

    def test_schema_violations(self):
        broken = [
            [],
            {k: v for k, v in VALID_PAYLOAD.items() if k != 'analysisSummary'},
            {k: v for k, v in VALID_PAYLOAD.items() if k != 'redBallProbabilities'},
            {k: v for k, v in VALID_PAYLOAD.items() if k != 'suggestedCombinations'},
            dict(VALID_PAYLOAD, redBallProbabilities=[{'number': 'x', 'probability': 1, 'deviation': 0}]),
            dict(VALID_PAYLOAD, redBallProbabilities=[{'number': 3, 'probability': 140, 'deviation': 0}]),
            dict(VALID_PAYLOAD, redBallProbabilities=[{'number': 3.5, 'probability': 1, 'deviation': 0}]),
            dict(VALID_PAYLOAD, suggestedCombinations=[{'red': [1, 2]}]),
            dict(VALID_PAYLOAD, suggestedCombinations=[{'red': 'one', 'reasoning': 'x'}]),
        ]
        for payload in broken:
            with self.assertRaises(MalformedResponseError):
                parse_prediction('SSQ', payload)


class TestGeminiPredictionService(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.config = PredictionServiceConfig(api_key='test-key', model='gemini-test')
        self.service = GeminiPredictionService(self.config, session=self.session)
        self.request = self.service.build_request('SSQ', make_history(60), ModelParameters())

    def test_successful_prediction(self):
        self.session.post.return_value = gemini_response(VALID_PAYLOAD)
        result = self.service.predict(self.request)

        self.assertEqual(result.analysis_summary, '近期红球偏热。')
        args, kwargs = self.session.post.call_args
        self.assertIn('gemini-test:generateContent', args[0])
        self.assertEqual(kwargs['headers']['x-goog-api-key'], 'test-key')
        body = kwargs['json']
        self.assertEqual(body['generationConfig']['responseMimeType'], 'application/json')
        self.assertEqual(body['generationConfig']['temperature'], 0.1)
        self.assertIn('Issue 2026049', body['contents'][0]['parts'][0]['text'])
        self.assertNotIn('Issue 2026050', body['contents'][0]['parts'][0]['text'])

    def test_missing_key(self):
        service = GeminiPredictionService(PredictionServiceConfig(api_key=''), session=self.session)
        with self.assertRaises(MissingCredentialError):
            service.predict(self.request)
        self.session.post.assert_not_called()

    def test_network_error(self):
        self.session.post.side_effect = requests.ConnectionError('down')
        with self.assertRaises(ServiceUnavailableError):
            self.service.predict(self.request)

    def test_http_errors(self):
        self.session.post.return_value = gemini_response({}, status=403)
        with self.assertRaises(MissingCredentialError):
            self.service.predict(self.request)

        self.session.post.return_value = gemini_response({}, status=503)
        with self.assertRaises(ServiceUnavailableError):
            self.service.predict(self.request)

    def test_no_candidates(self):
        response = gemini_response(VALID_PAYLOAD)
        response.json.return_value = {'candidates': []}
        self.session.post.return_value = response
        with self.assertRaises(ServiceUnavailableError):
            self.service.predict(self.request)

    def test_model_output_not_json(self):
        response = gemini_response(VALID_PAYLOAD)
        response.json.return_value = {'candidates': [{'content': {'parts': [{'text': 'not json'}]}}]}
        self.session.post.return_value = response
        with self.assertRaises(MalformedResponseError):
            self.service.predict(self.request)

    def test_body_not_json(self):
        response = gemini_response(VALID_PAYLOAD)
        response.json.side_effect = ValueError('bad body')
        self.session.post.return_value = response
        with self.assertRaises(MalformedResponseError):
            self.service.predict(self.request)


@pytest.mark.parametrize('error_cls', [MissingCredentialError, ServiceUnavailableError, MalformedResponseError])
def test_all_errors_share_user_message(error_cls):
    error = error_cls('detail')
    assert isinstance(error, PredictionError)
    assert error.user_message == USER_ERROR_MESSAGE
