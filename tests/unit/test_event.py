"""
Unit tests for event completion.
"""
import pytest

from hubspot_api.core.config import HubspotConfig
from hubspot_api.core.connection import EventConnection
from hubspot_api.core.errors import ConfigurationError, InvalidParams
from hubspot_api.resources.event import EventClient


@pytest.fixture
def events(event_connection):
    return EventClient(event_connection)


class TestEventComplete:
    """Tests for EventClient.complete."""

    def test_query_parameters(self, api, events):
        api.add("GET", "/v1/event")

        assert events.complete("000000047946", email="jane@example.com") is True

        request = api.last
        assert request.url.host == "track.hubspot.com"
        assert request.url.path == "/v1/event"
        assert list(request.url.params.keys()) == ["_n", "_a", "email"]
        assert api.params() == {
            "_n": "000000047946",
            "_a": "62515",
            "email": "jane@example.com",
        }

    def test_value_and_properties(self, api, events):
        api.add("GET", "/v1/event")

        events.complete("signup", email="jane@example.com", value=12.5, firstname="Jane")

        assert api.params() == {
            "_n": "signup",
            "_a": "62515",
            "email": "jane@example.com",
            "_m": "12.5",
            "firstname": "Jane",
        }

    def test_no_credentials_sent(self, api, events):
        api.add("GET", "/v1/event")

        events.complete("signup")

        assert "hapikey" not in api.params()
        assert "Authorization" not in api.last.headers

    def test_rejected_request_returns_false(self, api, events, recorder):
        api.add("GET", "/v1/event", status=400)

        assert events.complete("signup", email="jane@example.com") is False
        assert recorder.get_events()[0].outcome == "http_error"

    def test_portal_id_required(self, api):
        with EventConnection(HubspotConfig(hapikey="demo"), transport=api.transport()) as connection:
            with pytest.raises(ConfigurationError, match="'portal_id' not configured"):
                EventClient(connection).complete("signup")

        assert api.requests == []

    def test_event_id_required(self, api, events):
        with pytest.raises(InvalidParams):
            events.complete("")

        assert api.requests == []

    def test_close_closes_own_connection(self):
        events = EventClient()

        events.close()

        assert events.connection.client.is_closed

    def test_close_leaves_shared_connection_open(self, event_connection):
        with EventClient(event_connection):
            pass

        assert not event_connection.client.is_closed
