"""Tests for Analysis Service HTTP handler."""
import json
from unittest.mock import patch

import pytest

from mindscreen.shared.utils import configure_pii_salt


@pytest.fixture(autouse=True)
def setup_pii_salt():
    """Configure PII salt before each test."""
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


@pytest.fixture
def client():
    """Create Flask test client."""
    from mindscreen.services.analysis_service.handler import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


class TestHealthEndpoint:

    def test_health_returns_200(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['status'] == 'healthy'
        assert data['service'] == 'analysis-service'


class TestReadyEndpoint:

    def test_ready_when_trained(self, client):
        response = client.get('/ready')
        assert response.status_code == 200

    def test_not_ready_when_untrained(self, client):
        from mindscreen.services.analysis_service import handler
        with patch.object(handler, "analyzer") as mock_analyzer:
            mock_analyzer.is_ready = False
            response = client.get('/ready')
        assert response.status_code == 503
        assert json.loads(response.data)['reason'] == 'model_untrained'


class TestAnalyzeEndpoint:
    """Tests for /analyze endpoint."""

    def test_analyze_positive_message(self, client):
        response = client.post(
            '/analyze',
            json={'message': 'I had a great day, feeling grateful and motivated'},
        )
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['risk_level'] == 'low'
        assert data['sentiment'] == 'positive'
        assert 'cluster_assignment' in data

    def test_analyze_crisis_message(self, client):
        response = client.post(
            '/analyze',
            json={
                'message': 'I want to end it all',
                'session_id': 'sess_001',
                'user_id': 'user_123',
            },
        )
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['risk_level'] == 'high'
        assert data['keyword_analysis']['risk_keywords'] == ['end it all']
        # Publishing is disabled unless configured
        assert data['alert_published'] is False

    def test_missing_message_returns_400(self, client):
        response = client.post('/analyze', json={'session_id': 'sess_001'})
        assert response.status_code == 400

    def test_empty_body_returns_400(self, client):
        response = client.post('/analyze', data='', content_type='application/json')
        assert response.status_code == 400

    def test_internal_error_returns_500(self, client):
        from mindscreen.services.analysis_service import handler
        with patch.object(handler.analyzer, "analyze", side_effect=RuntimeError("boom")):
            response = client.post('/analyze', json={'message': 'hello'})
        assert response.status_code == 500
        assert json.loads(response.data)['error'] == 'Analysis failed'


class TestRespondEndpoint:

    def test_fallback_reply_without_model(self, client):
        response = client.post(
            '/respond',
            json={'message': 'sometimes I have insomnia and feel tired', 'history': ['hi']},
        )
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['response']['source'] == 'fallback'
        assert data['response']['content']
        assert data['analysis']['risk_level'] in ('low', 'medium')

    def test_crisis_reply(self, client):
        response = client.post('/respond', json={'message': 'I want to kill myself'})
        data = json.loads(response.data)
        assert data['response']['source'] == 'crisis_protocol'
        assert data['response']['llm_bypassed'] is True

    def test_invalid_history_returns_400(self, client):
        response = client.post('/respond', json={'message': 'hello', 'history': 'nope'})
        assert response.status_code == 400


class TestModelEndpoint:

    def test_model_details(self, client):
        response = client.get('/model')
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['state'] == 'trained'
        assert len(data['clusters']) == 4
        assert data['validation_metrics']['sample_size'] == 8
        assert 'processed_messages' in data['system_metrics']


class TestSessionSummaryEndpoint:

    def test_summary(self, client):
        response = client.post(
            '/sessions/summary',
            json={
                'session_id': 'sess_001',
                'messages': [
                    'I had a great day',
                    'but I can\'t sleep and I am always tired',
                ],
            },
        )
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['session_id'] == 'sess_001'
        assert data['message_count'] == 2
        assert 'sleep' in data['key_topics']

    def test_missing_messages_returns_400(self, client):
        response = client.post('/sessions/summary', json={'session_id': 'sess_001'})
        assert response.status_code == 400


class TestNonObjectBodies:
    """JSON bodies that are not objects are client errors."""

    @pytest.mark.parametrize("path", ['/analyze', '/respond', '/sessions/summary'])
    @pytest.mark.parametrize("body", [[1], "x", 42])
    def test_returns_400(self, client, path, body):
        response = client.post(path, json=body)
        assert response.status_code == 400
        assert json.loads(response.data)['error'] == 'Request body must be a JSON object'
