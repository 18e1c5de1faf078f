"""Tests for the API-Sports rugby client."""

from unittest.mock import Mock, patch

import pytest
import requests

from liverugby.api import RugbyApiClient
from liverugby.core.exceptions import (
    ApiConnectionError,
    ApiRateLimitError,
    ApiResponseError,
    ApiTimeoutError,
)


def api_response(payload=None, status_code=200, json_error=False):
    response = Mock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def client(config):
    client = RugbyApiClient(config)
    yield client
    client.close()


class TestRugbyApiClient:
    """Tests for RugbyApiClient."""

    def test_session_retries_only_get(self, client):
        adapter = client.session.get_adapter("https://v1.rugby.api-sports.io")
        assert adapter.max_retries.total == 3
        assert list(adapter.max_retries.allowed_methods) == ["GET"]

    @patch('requests.Session.get')
    def test_unwraps_response(self, mock_get, client, sample_game):
        mock_get.return_value = api_response({'get': "games", 'errors': [], 'results': 1, 'response': [sample_game]})

        assert client.games_by_date("2025-03-01") == [sample_game]
        args, kwargs = mock_get.call_args
        assert args[0] == "https://v1.rugby.api-sports.io/games"
        assert kwargs['params'] == {'date': "2025-03-01", 'timezone': "Europe/Paris"}
        assert kwargs['headers']['x-apisports-key'] == "test-key"
        assert kwargs['timeout'] == 10

    @patch('requests.Session.get')
    def test_missing_response_is_empty(self, mock_get, client):
        mock_get.return_value = api_response({'errors': {}})
        assert client.get('/games') == []

    @patch('requests.Session.get')
    def test_single_game(self, mock_get, client, sample_game):
        mock_get.return_value = api_response({'response': [sample_game]})
        assert client.game(49925)['id'] == 49925
        assert mock_get.call_args[1]['params'] == {'id': 49925}

        mock_get.return_value = api_response({'response': []})
        assert client.game(1) is None

    @patch('requests.Session.get')
    def test_rate_limited_status(self, mock_get, client):
        mock_get.return_value = api_response(status_code=429)
        with pytest.raises(ApiRateLimitError) as exc_info:
            client.get('/games')
        assert exc_info.value.status_code == 429

    @patch('requests.Session.get')
    def test_quota_in_errors_payload(self, mock_get, client):
        mock_get.return_value = api_response({
            'errors': {'requests': "You have reached the request limit for the day"},
            'response': [],
        })
        with pytest.raises(ApiRateLimitError):
            client.get('/games')

    @patch('requests.Session.get')
    def test_errors_payload(self, mock_get, client):
        mock_get.return_value = api_response({'errors': {'token': "Error/Missing application key"}})
        with pytest.raises(ApiResponseError) as exc_info:
            client.get('/games')
        assert exc_info.value.details == {'token': "Error/Missing application key"}

    @patch('requests.Session.get')
    def test_http_error(self, mock_get, client):
        mock_get.return_value = api_response(status_code=503)
        with pytest.raises(ApiResponseError) as exc_info:
            client.get('/standings')
        assert exc_info.value.status_code == 503

    @patch('requests.Session.get')
    def test_bad_json(self, mock_get, client):
        mock_get.return_value = api_response(json_error=True)
        with pytest.raises(ApiResponseError):
            client.get('/games')

    @pytest.mark.parametrize('error,expected', [
        (requests.exceptions.Timeout("timed out"), ApiTimeoutError),
        (requests.exceptions.ConnectionError("refused"), ApiConnectionError),
        (requests.exceptions.TooManyRedirects("loop"), ApiResponseError),
    ])
    @patch('requests.Session.get')
    def test_transport_errors(self, mock_get, client, error, expected):
        mock_get.side_effect = error
        with pytest.raises(expected):
            client.get('/games')

    @patch('liverugby.api.client.current_season', return_value=2025)
    @patch('requests.Session.get')
    def test_season_defaults(self, mock_get, mock_season, client):
        mock_get.return_value = api_response({'response': []})

        client.standings(16)
        assert mock_get.call_args[1]['params'] == {'league': 16, 'season': 2025}

        client.games_by_league(16)
        assert mock_get.call_args[1]['params'] == {'league': 16}

        client.search_teams("Toul")
        assert mock_get.call_args[1]['params'] == {'search': "Toul"}

    def test_context_manager(self, config):
        with RugbyApiClient(config) as client:
            assert client.session is not None
