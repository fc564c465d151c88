"""Client library for the HubSpot CRM REST API."""

from hubspot_api.client import HubspotClient
from hubspot_api.core import (
    ConfigurationError,
    DecodeError,
    HubspotConfig,
    HubspotError,
    InvalidParams,
    PagedCollection,
    TransportError,
    configure,
    get_config,
    reset_config,
)
from hubspot_api.resources import Company, Contact

__version__ = "0.1.0"

__all__ = [
    "Company",
    "ConfigurationError",
    "Contact",
    "DecodeError",
    "HubspotClient",
    "HubspotConfig",
    "HubspotError",
    "InvalidParams",
    "PagedCollection",
    "TransportError",
    "configure",
    "get_config",
    "reset_config",
]
