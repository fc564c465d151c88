"""
HubSpot enterprise events HTTP API.

Events are completed with a GET to the tracking host carrying the event id
(``_n``), the portal id (``_a``) and the contact identification.
"""

from typing import Any, Optional

from ..core.connection import EventConnection
from ..core.errors import InvalidParams


class EventClient:
    """Client for completing custom behavioral events."""

    PATHS = {
        "complete": "/v1/event",
    }

    def __init__(self, connection: Optional[EventConnection] = None):
        self._owns_connection = connection is None
        self.connection = connection if connection is not None else EventConnection()

    def __enter__(self) -> "EventClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection if this client created it."""
        if self._owns_connection:
            self.connection.close()

    @property
    def name(self) -> str:
        return "events"

    def complete(
        self,
        event_id: str,
        email: Optional[str] = None,
        value: Optional[Any] = None,
        **properties: Any,
    ) -> bool:
        """
        Record the completion of an event for a contact.

        Args:
            event_id: Event id or name as configured in HubSpot
            email: Email of the contact that completed the event
            value: Optional event value, sent as ``_m``
            properties: Extra contact properties to update with the event

        Returns:
            True if the tracking endpoint accepted the request

        Raises:
            ConfigurationError: If portal_id is not configured
            InvalidParams: If event_id is empty
        """
        self.connection.config.ensure("portal_id")
        if not event_id:
            raise InvalidParams("event_id must not be empty")

        params = {
            "_n": event_id,
            "_a": self.connection.config.portal_id,
            "email": email,
            "_m": value,
            **properties,
        }
        return self.connection.complete(self.PATHS["complete"], params)
