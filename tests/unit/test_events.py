"""Unit tests for domain event publishing."""
import json
from datetime import date
from unittest.mock import MagicMock, patch

from pika.exceptions import AMQPConnectionError

from common import events
from common.config import get_settings


def test_publishing_disabled_by_default():
    with patch.object(events.pika, "BlockingConnection") as connection:
        assert events.publish_event("booking_created", booking_id=1) is False
    connection.assert_not_called()


def test_publish_sends_json_message(monkeypatch):
    monkeypatch.setattr(get_settings(), "event_broker_enabled", True)
    connection = MagicMock()
    channel = connection.channel.return_value

    with patch.object(events.pika, "BlockingConnection", return_value=connection):
        assert events.publish_event("booking_created", booking_id=3, check_in_date=date(2030, 1, 2)) is True

    body = json.loads(channel.basic_publish.call_args.kwargs["body"])
    assert body == {"event": "booking_created", "booking_id": 3, "check_in_date": "2030-01-02"}
    connection.close.assert_called_once()


def test_broker_failure_does_not_raise(monkeypatch):
    monkeypatch.setattr(get_settings(), "event_broker_enabled", True)

    with patch.object(events.pika, "BlockingConnection", side_effect=AMQPConnectionError("refused")):
        assert events.publish_event("payment_recorded", payment_id=9) is False
