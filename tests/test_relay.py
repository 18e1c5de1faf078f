"""Tests for the multicast push relay."""

from unittest.mock import patch

import pytest
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from liverugby.core.exceptions import PushSendError
from liverugby.models import NotificationPayload
from liverugby.push import PushRelay, build_data_payload, chunk_tokens, is_invalid_token_error

from conftest import FakeMulticast, TokenError


@pytest.fixture
def payload():
    return NotificationPayload(title="🏉 Match en cours", body="Toulouse vs La Rochelle", image_url="https://cdn/16.png")


def make_tokens(count):
    return [f"token-{i:04d}" for i in range(count)]


class TestChunking:

    def test_600_tokens_never_exceed_500_per_send(self, payload, fake_multicast):
        """A 600-token multicast is split into calls of at most 500"""
        relay = PushRelay(send=fake_multicast)
        result = relay.send_multicast(make_tokens(600), payload)

        sizes = [len(call.tokens) for call in fake_multicast.calls]
        assert sizes == [500, 100]
        assert max(sizes) <= 500
        assert result.success_count == 600
        assert len(result.results) == 600

    def test_batch_size_is_capped(self):
        assert [len(c) for c in chunk_tokens(make_tokens(1200), 1000)] == [500, 500, 200]

    def test_custom_batch_size(self, payload, fake_multicast):
        relay = PushRelay(send=fake_multicast, batch_size=2)
        relay.send_multicast(make_tokens(5), payload)
        assert [len(call.tokens) for call in fake_multicast.calls] == [2, 2, 1]
        assert relay.metrics.batches_sent == 3

    def test_chunk_tokens_empty(self):
        assert chunk_tokens([]) == []


class TestSendMulticast:

    def test_empty_token_list(self, payload, fake_multicast):
        result = PushRelay(send=fake_multicast).send_multicast([], payload)
        assert result.success is False
        assert result.success_count == 0
        assert fake_multicast.calls == []

    def test_message_content(self, payload, fake_multicast):
        PushRelay(send=fake_multicast).send_multicast(["a"], payload, {'matchId': 49925, 'skip': None})
        message = fake_multicast.calls[0]

        assert message.notification.title == payload.title
        assert message.notification.body == payload.body
        assert message.notification.image == "https://cdn/16.png"
        assert message.data['matchId'] == "49925"
        assert 'skip' not in message.data
        assert message.data['timestamp'].isdigit()

    def test_invalid_tokens_reported(self, payload):
        send = FakeMulticast(failures={
            "gone": messaging.UnregisteredError("Requested entity was not found."),
            "bad": TokenError("messaging/invalid-registration-token"),
            "rejected": firebase_exceptions.InvalidArgumentError("Invalid registration"),
            "busy": firebase_exceptions.UnavailableError("Try again later"),
        })
        result = PushRelay(send=send).send_multicast(["ok", "gone", "bad", "rejected", "busy"], payload)

        assert result.success is True
        assert result.success_count == 1
        assert result.failure_count == 4
        assert sorted(result.invalid_tokens) == ["bad", "gone"]
        assert "busy" in result.failed_tokens
        assert "rejected" in result.failed_tokens
        assert result.to_dict()['failureCount'] == 4

    def test_rejected_message_keeps_tokens(self, payload):
        """INVALID_ARGUMENT for the message itself says nothing about the tokens"""
        error = firebase_exceptions.InvalidArgumentError("Message payload size limit exceeded")
        send = FakeMulticast(failures={"t1": error, "t2": error, "t3": error})

        result = PushRelay(send=send).send_multicast(["t1", "t2", "t3"], payload)

        assert result.failure_count == 3
        assert result.invalid_tokens == []

    def test_transport_error_propagates(self, payload):
        def failing_send(message):
            raise firebase_exceptions.UnavailableError("FCM unavailable")

        with pytest.raises(PushSendError) as exc_info:
            PushRelay(send=failing_send).send_multicast(["a"], payload)
        assert exc_info.value.partial_result.results == []

    def test_transport_error_keeps_earlier_batches(self, payload):
        tokens = make_tokens(600)
        first_batch = FakeMulticast(failures={tokens[0]: messaging.UnregisteredError("not found")})
        calls = []

        def send(message):
            calls.append(message)
            if len(calls) == 2:
                raise firebase_exceptions.UnavailableError("FCM unavailable")
            return first_batch(message)

        with pytest.raises(PushSendError) as exc_info:
            PushRelay(send=send).send_multicast(tokens, payload)

        partial = exc_info.value.partial_result
        assert len(partial.results) == 500
        assert partial.success_count == 499
        assert partial.invalid_tokens == [tokens[0]]
        assert exc_info.value.details == {'batch_size': 100, 'sent_so_far': 499}

    @patch('liverugby.push.relay.messaging.send_each_for_multicast')
    def test_default_sender(self, mock_send, payload):
        mock_send.side_effect = FakeMulticast()
        relay = PushRelay()
        relay.send_multicast(["a", "b"], payload)
        assert mock_send.called


class TestHelpers:

    @pytest.mark.parametrize('error,expected', [
        (None, False),
        (TokenError("messaging/registration-token-not-registered"), True),
        (TokenError("messaging/internal-error"), False),
        (ValueError("boom"), False),
    ])
    def test_is_invalid_token_error(self, error, expected):
        assert is_invalid_token_error(error) is expected

    def test_build_data_payload(self):
        data = build_data_payload({'homeScore': 7, 'flag': True, 'none': None})
        assert data['homeScore'] == "7"
        assert data['flag'] == "True"
        assert 'none' not in data
        assert 'timestamp' in data
