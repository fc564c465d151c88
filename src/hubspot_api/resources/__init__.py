"""HubSpot resource clients."""

from hubspot_api.resources.company import (
    ByObjectId,
    ByVid,
    Company,
    CompanyClient,
    CompanyUpdate,
)
from hubspot_api.resources.contact import Contact, ContactClient, contact_vid
from hubspot_api.resources.event import EventClient

__all__ = [
    "ByObjectId",
    "ByVid",
    "Company",
    "CompanyClient",
    "CompanyUpdate",
    "Contact",
    "ContactClient",
    "EventClient",
    "contact_vid",
]
