"""
HubSpot companies (v2 API) and batch updates.

Companies are identified by ``companyId``. Outgoing properties use ``name``
as the key field and updates are PUT. Listing endpoints differ in where they
put the cursor, so each one declares its own ResponseShape.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union

from ..core.connection import Connection
from ..core.errors import InvalidParams
from ..core.pagination import PagedCollection, Paginator
from ..core.properties import encode_properties
from .base import Resource, ResourceClient, ResponseShape
from .contact import ContactClient, ContactRef, contact_vid

logger = logging.getLogger(__name__)

ALL_SHAPE = ResponseShape("companies", ("offset",), "has-more")
# search_domain nests the cursor inside a composite offset object
SEARCH_DOMAIN_SHAPE = ResponseShape("results", ("offset", "companyId"), "hasMore")
RECENT_SHAPE = ResponseShape("results", ("offset",), "hasMore")
CONTACT_IDS_SHAPE = ResponseShape("vids", ("vidOffset",), "hasMore")
CONTACTS_SHAPE = ResponseShape("contacts", ("vidOffset",), "hasMore")

MAX_ALL_PAGE_SIZE = 250
MAX_PAGE_SIZE = 100
MAX_BATCH_SIZE = 100


@dataclass(frozen=True)
class ByVid:
    """Company identified by the legacy ``vid`` key."""
    value: Any
    key: ClassVar[str] = "vid"


@dataclass(frozen=True)
class ByObjectId:
    """Company identified by ``objectId``."""
    value: Any
    key: ClassVar[str] = "objectId"


CompanyIdentifier = Union[ByVid, ByObjectId]


@dataclass(frozen=True)
class CompanyUpdate:
    """
    One entry of a batch update.

    Attributes:
        identifier: Which company to update
        properties: Property values to set, without identifier keys
    """
    identifier: CompanyIdentifier
    properties: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CompanyUpdate":
        """
        Build an update from ``{"vid" | "objectId": id, **properties}``.

        Raises:
            InvalidParams: If neither or both identifier keys are present
        """
        values = {str(key): value for key, value in data.items()}
        vid = values.pop(ByVid.key, None)
        object_id = values.pop(ByObjectId.key, None)

        if vid is not None and object_id is not None:
            raise InvalidParams(
                "Ambiguous company identifier: both vid and objectId given",
                details={"vid": vid, "objectId": object_id},
            )
        if vid is not None:
            return cls(ByVid(vid), values)
        if object_id is not None:
            return cls(ByObjectId(object_id), values)
        raise InvalidParams("expecting vid or objectId for company")

    @property
    def object_id(self) -> Any:
        return self.identifier.value

    def to_wire(self) -> dict[str, Any]:
        """Batch body entry; both identifier kinds are sent as objectId."""
        return {
            "objectId": self.object_id,
            "properties": encode_properties(self.properties, key_field="name"),
        }


class Company(Resource):
    """A HubSpot company record."""

    id_field = "companyId"

    @property
    def vid(self) -> Any:
        return self.id

    @property
    def name(self) -> Optional[str]:
        return self.properties.get("name")

    def add_contact(self, contact: ContactRef) -> "Company":
        self._bound().add_contact(self.id, contact)
        return self

    def remove_contact(self, contact: ContactRef) -> "Company":
        self._bound().remove_contact(self.id, contact)
        return self

    def contact_ids(self, **kwargs: Any) -> PagedCollection:
        """Paged vids of the contacts associated with this company."""
        return self._bound().contact_ids(self.id, **kwargs)

    def contacts(self, **kwargs: Any) -> PagedCollection:
        """Paged Contact records associated with this company."""
        return self._bound().contacts(self.id, **kwargs)


class CompanyClient(ResourceClient[Company]):
    """Client for the companies endpoints."""

    PATHS = {
        "add_contact": "/companies/v2/companies/:id/contacts/:contact_id",
        "all": "/companies/v2/companies/paged",
        "batch_update": "/companies/v1/batch-async/update",
        "contacts": "/companies/v2/companies/:id/contacts",
        "contact_ids": "/companies/v2/companies/:id/vids",
        "create": "/companies/v2/companies/",
        "delete": "/companies/v2/companies/:id",
        "find": "/companies/v2/companies/:id",
        "recently_created": "/companies/v2/companies/recent/created",
        "recently_modified": "/companies/v2/companies/recent/modified",
        "remove_contact": "/companies/v2/companies/:id/contacts/:contact_id",
        "search_domain": "/companies/v2/domains/:domain/companies",
        "update": "/companies/v2/companies/:id",
    }
    resource_class = Company
    property_key_field = "name"
    update_method = "PUT"

    def __init__(
        self,
        connection: Optional[Connection] = None,
        contact_client: Optional[ContactClient] = None,
    ):
        super().__init__(connection)
        self.contact_client = contact_client or ContactClient(self.connection)

    @property
    def name(self) -> str:
        return "companies"

    def all(
        self,
        options: Optional[Mapping[str, Any]] = None,
        offset: Any = None,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
        paginator: Optional[Paginator] = None,
    ) -> PagedCollection:
        """
        List every company.

        Args:
            options: Extra query parameters, e.g. {"properties": ["name"]}
            offset: Offset to resume from
            limit: Page size (at most 250)
            max_pages: Optional upper bound on fetched pages
            paginator: Optional pagination control callback

        Returns:
            PagedCollection of Company records
        """
        def fetch(options: dict[str, Any], offset: Any, limit: int):
            response = self.connection.get_json(
                self.PATHS["all"],
                {**options, "offset": offset, "limit": limit},
            )
            return self.read_page(response, ALL_SHAPE)

        return self.paged(fetch, options, offset, limit, MAX_ALL_PAGE_SIZE, max_pages, paginator)

    def search_domain(
        self,
        domain: str,
        options: Optional[Mapping[str, Any]] = None,
        offset: Any = None,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
        paginator: Optional[Paginator] = None,
    ) -> PagedCollection:
        """
        Find companies by domain.

        The request carries the cursor as ``{"isPrimary": true, "companyId": offset}``
        and the response returns it the same way; only the companyId travels
        through the collection.

        Args:
            domain: Domain to search, e.g. "example.com"
            options: Sent as ``requestOptions``, e.g. {"properties": ["domain"]}
        """
        if not domain:
            raise InvalidParams("domain must not be empty")

        def fetch(options: dict[str, Any], offset: Any, limit: int):
            body = {
                "limit": limit,
                "requestOptions": options,
                "offset": {"isPrimary": True, "companyId": offset},
            }
            response = self.connection.post_json(
                self.PATHS["search_domain"],
                {"domain": domain},
                body=body,
            )
            return self.read_page(response, SEARCH_DOMAIN_SHAPE)

        return self.paged(fetch, options, offset, limit, MAX_PAGE_SIZE, max_pages, paginator)

    def _recent(self, path_name: str, options, offset, limit, max_pages, paginator) -> PagedCollection:
        def fetch(options: dict[str, Any], offset: Any, limit: int):
            response = self.connection.get_json(
                self.PATHS[path_name],
                {**options, "offset": offset, "count": limit},
            )
            return self.read_page(response, RECENT_SHAPE)

        return self.paged(fetch, options, offset, limit, MAX_PAGE_SIZE, max_pages, paginator)

    def recently_created(
        self,
        options: Optional[Mapping[str, Any]] = None,
        offset: Any = None,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
        paginator: Optional[Paginator] = None,
    ) -> PagedCollection:
        """Companies ordered by creation date, newest first."""
        return self._recent("recently_created", options, offset, limit, max_pages, paginator)

    def recently_modified(
        self,
        options: Optional[Mapping[str, Any]] = None,
        offset: Any = None,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
        paginator: Optional[Paginator] = None,
    ) -> PagedCollection:
        """Companies ordered by last modification, newest first."""
        return self._recent("recently_modified", options, offset, limit, max_pages, paginator)

    def create(self, properties: Mapping[str, Any]) -> Company:
        return self._create(properties)

    def update(self, id: Any, properties: Mapping[str, Any]) -> Company:
        """Update company properties and return the company as stored."""
        response = self._update(id, properties)
        return self.from_result(response)

    def batch_update(self, updates: Iterable[Union[CompanyUpdate, Mapping[str, Any]]]) -> Any:
        """
        Update many companies in one asynchronous request.

        HubSpot accepts up to 100 companies per request and answers
        202 Accepted.

        Args:
            updates: CompanyUpdate entries, or mappings holding ``vid`` or
                ``objectId`` next to the properties

        Returns:
            Decoded response body, usually None

        Raises:
            InvalidParams: For an empty or oversized batch or an entry
                without a single identifier
        """
        entries = [
            update if isinstance(update, CompanyUpdate) else CompanyUpdate.from_mapping(update)
            for update in updates
        ]
        if not entries:
            raise InvalidParams("batch_update needs at least one company")
        if len(entries) > MAX_BATCH_SIZE:
            raise InvalidParams(
                f"batch_update accepts at most {MAX_BATCH_SIZE} companies, got {len(entries)}"
            )

        body = [entry.to_wire() for entry in entries]
        logger.debug("Batch updating %d companies", len(body))
        return self.connection.post_json(self.PATHS["batch_update"], body=body)

    def add_contact(self, id: Any, contact: ContactRef) -> bool:
        """Associate a contact with a company."""
        self.connection.put_json(
            self.PATHS["add_contact"],
            {"id": id, "contact_id": contact_vid(contact)},
            parse=False,
        )
        return True

    def remove_contact(self, id: Any, contact: ContactRef) -> bool:
        """Remove a contact from a company."""
        self.connection.delete_json(
            self.PATHS["remove_contact"],
            {"id": id, "contact_id": contact_vid(contact)},
        )
        return True

    def contact_ids(
        self,
        id: Any,
        options: Optional[Mapping[str, Any]] = None,
        offset: Any = None,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
        paginator: Optional[Paginator] = None,
    ) -> PagedCollection:
        """Paged vids of a company's contacts."""
        def fetch(options: dict[str, Any], offset: Any, limit: int):
            response = self.connection.get_json(
                self.PATHS["contact_ids"],
                {**options, "id": id, "vidOffset": offset, "count": limit},
            )
            return self.read_page(response, CONTACT_IDS_SHAPE, build=lambda vid: vid)

        return self.paged(fetch, options, offset, limit, MAX_PAGE_SIZE, max_pages, paginator)

    def contacts(
        self,
        id: Any,
        options: Optional[Mapping[str, Any]] = None,
        offset: Any = None,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
        paginator: Optional[Paginator] = None,
    ) -> PagedCollection:
        """Paged Contact records of a company's contacts."""
        def fetch(options: dict[str, Any], offset: Any, limit: int):
            response = self.connection.get_json(
                self.PATHS["contacts"],
                {**options, "id": id, "vidOffset": offset, "count": limit},
            )
            return self.read_page(response, CONTACTS_SHAPE, build=self.contact_client.from_result)

        return self.paged(fetch, options, offset, limit, MAX_PAGE_SIZE, max_pages, paginator)
