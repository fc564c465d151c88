"""
HubSpot contacts (v1 API).

Contacts are identified by ``vid``. Outgoing properties use ``property`` as
the key field and profile updates are POSTed.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from ..core.errors import InvalidParams
from ..core.pagination import PagedCollection, Paginator
from .base import Resource, ResourceClient, ResponseShape

logger = logging.getLogger(__name__)

ALL_SHAPE = ResponseShape("contacts", ("vid-offset",), "has-more")
SEARCH_SHAPE = ResponseShape("contacts", ("offset",), "has-more")

MAX_PAGE_SIZE = 100


class Contact(Resource):
    """A HubSpot contact record."""

    id_field = "vid"

    def __init__(self, result: Mapping[str, Any], client: Optional["ContactClient"] = None):
        super().__init__(result, client)
        self.is_contact = result.get("is-contact")
        self.list_memberships = list(result.get("list-memberships") or [])
        self.is_new = result.get("isNew")

    @property
    def vid(self) -> Any:
        return self.id

    @property
    def email(self) -> Optional[str]:
        return self.properties.get("email")

    @property
    def utk(self) -> Optional[str]:
        return self.properties.get("usertoken")

    @property
    def name(self) -> str:
        parts = (self.properties.get("firstname"), self.properties.get("lastname"))
        return " ".join(str(part) for part in parts if part)

    def merge(self, other: "ContactRef") -> bool:
        """Merge another contact into this one."""
        return self._bound().merge(self.vid, other)


ContactRef = Union[int, str, Contact]


def contact_vid(ref: ContactRef) -> int:
    """
    Resolve a contact reference to its vid.

    Args:
        ref: A Contact record, an integer vid or a string of digits

    Returns:
        The contact vid

    Raises:
        InvalidParams: For unsaved contacts and anything else
    """
    if isinstance(ref, Contact):
        if ref.vid is None:
            raise InvalidParams("Contact has no vid")
        return int(ref.vid)
    if isinstance(ref, bool):
        raise InvalidParams("Expected a contact or contact vid, got bool")
    if isinstance(ref, int):
        return ref
    if isinstance(ref, str) and ref.strip().isdigit():
        return int(ref.strip())
    raise InvalidParams(
        f"Expected a contact or contact vid, got {type(ref).__name__}",
        details={"ref": repr(ref)},
    )


class ContactClient(ResourceClient[Contact]):
    """Client for the contacts endpoints."""

    PATHS = {
        "all": "/contacts/v1/lists/all/contacts/all",
        "create": "/contacts/v1/contact",
        "create_or_update": "/contacts/v1/contact/createOrUpdate/email/:email",
        "delete": "/contacts/v1/contact/vid/:id",
        "find": "/contacts/v1/contact/vid/:id/profile",
        "find_by_email": "/contacts/v1/contact/email/:email/profile",
        "find_by_user_token": "/contacts/v1/contact/utk/:token/profile",
        "merge": "/contacts/v1/contact/merge-vids/:id/",
        "search": "/contacts/v1/search/query",
        "update": "/contacts/v1/contact/vid/:id/profile",
    }
    resource_class = Contact
    property_key_field = "property"
    update_method = "POST"

    @property
    def name(self) -> str:
        return "contacts"

    def all(
        self,
        options: Optional[Mapping[str, Any]] = None,
        offset: Any = None,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
        paginator: Optional[Paginator] = None,
    ) -> PagedCollection:
        """
        List every contact, paged by ``vidOffset``.

        Args:
            options: Extra query parameters, e.g. {"property": ["email"]}
            offset: vidOffset to resume from
            limit: Page size (at most 100)
            max_pages: Optional upper bound on fetched pages
            paginator: Optional pagination control callback

        Returns:
            PagedCollection of Contact records
        """
        def fetch(options: dict[str, Any], offset: Any, limit: int):
            response = self.connection.get_json(
                self.PATHS["all"],
                {**options, "count": limit, "vidOffset": offset},
            )
            return self.read_page(response, ALL_SHAPE)

        return self.paged(fetch, options, offset, limit, MAX_PAGE_SIZE, max_pages, paginator)

    def search(
        self,
        query: str,
        options: Optional[Mapping[str, Any]] = None,
        offset: Any = None,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
        paginator: Optional[Paginator] = None,
    ) -> PagedCollection:
        """Full-text contact search, paged by ``offset``."""
        if not query:
            raise InvalidParams("search query must not be empty")

        def fetch(options: dict[str, Any], offset: Any, limit: int):
            response = self.connection.get_json(
                self.PATHS["search"],
                {**options, "q": query, "offset": offset, "count": limit},
            )
            return self.read_page(response, SEARCH_SHAPE)

        return self.paged(fetch, options, offset, limit, MAX_PAGE_SIZE, max_pages, paginator)

    def find_by_email(self, email: str) -> Contact:
        response = self.connection.get_json(self.PATHS["find_by_email"], {"email": email})
        return self.from_result(response)

    def find_by_user_token(self, token: str) -> Contact:
        response = self.connection.get_json(self.PATHS["find_by_user_token"], {"token": token})
        return self.from_result(response)

    find_by_utk = find_by_user_token

    def create(self, email: str, properties: Optional[Mapping[str, Any]] = None) -> Contact:
        """Create a contact with the given email and properties."""
        if not email:
            raise InvalidParams("email is required to create a contact")
        return self._create({**(properties or {}), "email": email})

    def create_or_update(self, email: str, properties: Optional[Mapping[str, Any]] = None) -> Contact:
        """
        Create a contact, or update the one that already has this email.

        The returned record carries the vid and ``is_new`` flag from the
        response plus the properties that were sent.
        """
        if not email:
            raise InvalidParams("email is required to create or update a contact")
        response = self.connection.post_json(
            self.PATHS["create_or_update"],
            {"email": email},
            body={"properties": self.encode(properties)},
        )
        contact = self.from_result(response)
        contact.merge_properties({**(properties or {}), "email": email})
        return contact

    def update(self, vid: Any, properties: Mapping[str, Any]) -> bool:
        """Update contact properties; HubSpot answers with no content."""
        self._update(vid, properties)
        return True

    def merge(self, primary: ContactRef, secondary: ContactRef) -> bool:
        """Merge the secondary contact into the primary one."""
        primary_vid = contact_vid(primary)
        secondary_vid = contact_vid(secondary)
        if primary_vid == secondary_vid:
            raise InvalidParams("Cannot merge a contact into itself")
        self.connection.post_json(
            self.PATHS["merge"],
            {"id": primary_vid},
            body={"vidToMerge": secondary_vid},
            parse=False,
        )
        logger.debug("Merged contact %s into %s", secondary_vid, primary_vid)
        return True
