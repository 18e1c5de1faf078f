"""Tests for the HTTPS callable client."""

from unittest.mock import Mock, patch

import pytest
import requests

from liverugby.api import FunctionsClient
from liverugby.core.exceptions import FunctionCallError, InvalidResponseError


def reply(body, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = body
    return response


@pytest.fixture
def functions_client(config):
    config.firebase.functions_base_url = "https://functions.test"
    client = FunctionsClient(config, id_token="id-token")
    yield client
    client.close()


class TestCall:

    @patch('requests.Session.post')
    def test_request_envelope(self, mock_post, functions_client):
        mock_post.return_value = reply({'result': {'success': True, 'message': "ok"}})

        assert functions_client.call('unsubscribeFromMatch', {'matchId': 1}) == {'success': True, 'message': "ok"}
        args, kwargs = mock_post.call_args
        assert args[0] == "https://functions.test/unsubscribeFromMatch"
        assert kwargs['json'] == {'data': {'matchId': 1}}
        assert kwargs['headers']['Authorization'] == "Bearer id-token"

    @patch('requests.Session.post')
    def test_token_provider(self, mock_post, config):
        tokens = iter(["first", "second"])
        client = FunctionsClient(config, id_token=lambda: next(tokens))
        mock_post.return_value = reply({'result': None})

        client.call('a')
        client.call('b')
        assert mock_post.call_args[1]['headers']['Authorization'] == "Bearer second"

    @patch('requests.Session.post')
    def test_anonymous(self, mock_post, config):
        mock_post.return_value = reply({'result': {}})
        FunctionsClient(config).call('getTodayMatches')
        assert 'Authorization' not in mock_post.call_args[1]['headers']
        assert mock_post.call_args[1]['json'] == {'data': {}}

    @pytest.mark.parametrize('status,code,http_status', [
        ('UNAUTHENTICATED', 'unauthenticated', 401),
        ('INVALID_ARGUMENT', 'invalid-argument', 400),
        ('NOT_FOUND', 'not-found', 404),
        ('INTERNAL', 'internal', 500),
        ('DEADLINE_EXCEEDED', 'internal', 504),
    ])
    @patch('requests.Session.post')
    def test_error_reply(self, mock_post, functions_client, status, code, http_status):
        mock_post.return_value = reply({'error': {'status': status, 'message': "Vous devez être connecté"}}, http_status)

        with pytest.raises(FunctionCallError) as exc_info:
            functions_client.call('getTodayMatches')
        assert exc_info.value.code == code
        assert exc_info.value.message == "Vous devez être connecté"
        assert exc_info.value.function == 'getTodayMatches'
        assert exc_info.value.details == {'http_status': http_status}

    @patch('requests.Session.post')
    def test_reply_without_result(self, mock_post, functions_client):
        mock_post.return_value = reply({}, 502)
        with pytest.raises(FunctionCallError) as exc_info:
            functions_client.call('getTodayMatches')
        assert exc_info.value.code == 'internal'

    @patch('requests.Session.post')
    def test_transport_error(self, mock_post, functions_client):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(FunctionCallError):
            functions_client.call('getTodayMatches')

    @patch('requests.Session.post')
    def test_undecodable_reply(self, mock_post, functions_client):
        response = reply(None, 500)
        response.json.side_effect = ValueError("not json")
        mock_post.return_value = response
        with pytest.raises(FunctionCallError):
            functions_client.call('getTodayMatches')


class TestTypedHelpers:

    @patch('requests.Session.post')
    def test_today_matches(self, mock_post, functions_client, sample_game):
        mock_post.return_value = reply({'result': {'success': True, 'matches': [sample_game]}})
        matches = functions_client.get_today_matches()
        assert [m.home_team.name for m in matches] == ["Toulouse"]

    @pytest.mark.parametrize('result', [
        {'success': False, 'matches': []},
        {'matches': []},
        {'success': True},
    ])
    @patch('requests.Session.post')
    def test_unsuccessful_result(self, mock_post, functions_client, result):
        mock_post.return_value = reply({'result': result})
        with pytest.raises(InvalidResponseError):
            functions_client.get_today_matches()

    @patch('requests.Session.post')
    def test_league_standings(self, mock_post, functions_client):
        row = {'position': 1, 'team': {'id': 107, 'name': "Toulouse"}, 'points': 66,
               'games': {'played': 18, 'win': {'total': 13}, 'draw': {'total': 1}, 'lose': {'total': 4}}}
        mock_post.return_value = reply({'result': {'success': True, 'standings': [[row]]}})

        standings = functions_client.get_league_standings(16, 2024)
        assert standings[0].team_name == "Toulouse"
        assert standings[0].won == 13
        assert mock_post.call_args[1]['json'] == {'data': {'leagueId': 16, 'season': 2024}}

    @patch('requests.Session.post')
    def test_match_details(self, mock_post, functions_client, sample_game):
        mock_post.return_value = reply({'result': {'success': True, 'match': sample_game}})
        assert functions_client.get_match_details(49925).score_text == "10 - 3"

        mock_post.return_value = reply({'result': {'success': True, 'match': "missing"}})
        with pytest.raises(InvalidResponseError):
            functions_client.get_match_details(49925)

    @patch('requests.Session.post')
    def test_teams(self, mock_post, functions_client):
        mock_post.return_value = reply({'result': {'success': True, 'teams': [{'id': 107, 'name': "Toulouse"}, None]}})
        assert [t.id for t in functions_client.search_teams("Toul")] == [107]

    @patch('requests.Session.post')
    def test_activity_token_is_ios(self, mock_post, functions_client):
        mock_post.return_value = reply({'result': {'success': True, 'message': "Activity Push Token enregistré avec succès"}})
        assert functions_client.register_activity_push_token(49925, "apns").startswith("Activity Push Token")
        assert mock_post.call_args[1]['json']['data'] == {'matchId': 49925, 'token': "apns", 'platform': 'ios'}

    @patch('requests.Session.post')
    def test_subscription(self, mock_post, functions_client):
        subscription = {'userId': "u", 'matchId': 1, 'eventTypes': ['halftime'], 'active': True}
        mock_post.return_value = reply({'result': {'success': True, 'subscription': subscription}})
        assert functions_client.subscribe_to_match(1, ['halftime']) == subscription
