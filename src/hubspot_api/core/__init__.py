"""Core types: configuration, transport, pagination and property marshalling."""

from hubspot_api.core.config import (
    HubspotConfig,
    configure,
    get_config,
    load_config,
    reset_config,
    validate_config,
)
from hubspot_api.core.connection import Connection, EventConnection, build_path
from hubspot_api.core.errors import (
    ConfigurationError,
    DecodeError,
    HubspotError,
    InvalidParams,
    PageLimitExceeded,
    PaginationError,
    PathTemplateError,
    TransportError,
)
from hubspot_api.core.pagination import Page, PagedCollection, Paginator
from hubspot_api.core.properties import decode_properties, encode_properties
from hubspot_api.core.telemetry import (
    RequestEvent,
    RequestOutcome,
    TelemetryLevel,
    TelemetryRecorder,
    TelemetryStats,
    get_recorder,
    set_recorder,
)

__all__ = [
    # config
    "HubspotConfig",
    "configure",
    "get_config",
    "load_config",
    "reset_config",
    "validate_config",
    # connection
    "Connection",
    "EventConnection",
    "build_path",
    # errors
    "ConfigurationError",
    "DecodeError",
    "HubspotError",
    "InvalidParams",
    "PageLimitExceeded",
    "PaginationError",
    "PathTemplateError",
    "TransportError",
    # pagination
    "Page",
    "PagedCollection",
    "Paginator",
    # properties
    "decode_properties",
    "encode_properties",
    # telemetry
    "RequestEvent",
    "RequestOutcome",
    "TelemetryLevel",
    "TelemetryRecorder",
    "TelemetryStats",
    "get_recorder",
    "set_recorder",
]
