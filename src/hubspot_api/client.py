"""
Entry point bundling the connections and resource clients for one portal.
"""

from typing import Any, Optional

import httpx

from .core.config import HubspotConfig, get_config, validate_config
from .core.connection import Connection, EventConnection
from .resources.company import CompanyClient
from .resources.contact import ContactClient
from .resources.event import EventClient


class HubspotClient:
    """
    HubSpot API client.

    Example:
        with HubspotClient(HubspotConfig(hapikey="demo")) as hubspot:
            for contact in hubspot.contacts.all(limit=50):
                print(contact.email)
    """

    def __init__(
        self,
        config: Optional[HubspotConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
        events_transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration; the process default when None
            transport: Optional httpx transport for the REST API
            events_transport: Optional httpx transport for the tracking host;
                defaults to transport
        """
        self.config = config if config is not None else get_config()
        validate_config(self.config)

        self.connection = Connection(self.config, transport=transport)
        self.event_connection = EventConnection(
            self.config,
            transport=events_transport if events_transport is not None else transport,
        )

        self.contacts = ContactClient(self.connection)
        self.companies = CompanyClient(self.connection, contact_client=self.contacts)
        self.events = EventClient(self.event_connection)

    def __enter__(self) -> "HubspotClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.connection.close()
        self.event_connection.close()
