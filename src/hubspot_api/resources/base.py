"""
Resource record and resource client base classes.

A ResourceClient maps one HubSpot object type onto its REST endpoints: it
fills path templates, issues requests through a Connection and turns decoded
responses into Resource records. Listing endpoints are exposed as
PagedCollections whose fetch closures normalize each endpoint's response
shape into ``(items, next_offset, has_more)``.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar

from ..core.connection import Connection
from ..core.errors import DecodeError, InvalidParams
from ..core.pagination import DEFAULT_MAX_LIMIT, PagedCollection, Paginator
from ..core.properties import decode_properties, encode_properties

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class ResponseShape:
    """
    Where a listing endpoint puts its items and cursor.

    Attributes:
        items_key: Key of the item list
        offset_path: Key path to the next offset; more than one element for
            offsets nested in a composite object
        has_more_key: Key of the has-more flag
    """
    items_key: str
    offset_path: tuple[str, ...]
    has_more_key: str

    def unpack(self, response: Any) -> tuple[list[Any], Any, bool]:
        """
        Normalize a listing response.

        Returns:
            Tuple of (raw items, next offset, has more)

        Raises:
            DecodeError: If a required key is missing or has the wrong type
        """
        if not isinstance(response, Mapping):
            raise DecodeError(
                f"Expected a JSON object, got {type(response).__name__}",
                details={"shape": self.items_key},
            )
        for key in (self.items_key, self.has_more_key):
            if key not in response:
                raise DecodeError(
                    f"Response is missing {key!r}",
                    details={"keys": sorted(response)},
                )

        items = response[self.items_key]
        if not isinstance(items, list):
            raise DecodeError(f"{self.items_key!r} must be a list")
        has_more = bool(response[self.has_more_key])

        next_offset: Any = response
        for key in self.offset_path:
            if not isinstance(next_offset, Mapping) or key not in next_offset:
                next_offset = _MISSING
                break
            next_offset = next_offset[key]

        if next_offset is _MISSING:
            if has_more:
                raise DecodeError(
                    f"Response reports more pages but has no {'.'.join(self.offset_path)!r}"
                )
            next_offset = None

        return items, next_offset, has_more


class Resource:
    """
    A HubSpot object decoded from a response.

    Properties are held as a name -> value dict. A record is bound to the
    client that produced it, which instance operations delegate to. After
    destroy() the record stays readable but refuses further changes.
    """

    id_field: ClassVar[str] = "id"

    def __init__(self, result: Mapping[str, Any], client: Optional["ResourceClient"] = None):
        self.raw = dict(result)
        self.id = result.get(self.id_field)
        self.properties: dict[str, Any] = decode_properties(result.get("properties"))
        self._client = client
        self._destroyed = False

    def __getitem__(self, name: str) -> Any:
        return self.properties[name]

    def __contains__(self, name: object) -> bool:
        return name in self.properties

    def get(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def __repr__(self) -> str:
        state = " destroyed" if self._destroyed else ""
        return f"<{type(self).__name__} {self.id_field}={self.id!r}{state}>"

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def _bound(self) -> "ResourceClient":
        """Client for instance operations on a live record."""
        if self._destroyed:
            raise InvalidParams(f"{type(self).__name__} {self.id!r} was destroyed")
        if self._client is None:
            raise InvalidParams(f"{type(self).__name__} is not bound to a client")
        if self.id is None:
            raise InvalidParams(f"{type(self).__name__} has no {self.id_field}")
        return self._client

    def merge_properties(self, properties: Mapping[str, Any]) -> None:
        """Merge locally known property values into the record."""
        self.properties.update({str(key): value for key, value in properties.items()})

    def update(self, properties: Mapping[str, Any]) -> "Resource":
        """
        Update properties remotely and merge them into this record.

        Returns:
            self
        """
        self._bound().update(self.id, properties)
        self.merge_properties(properties)
        return self

    def destroy(self) -> bool:
        """Delete the object remotely and mark this record destroyed."""
        self._bound().delete(self.id)
        self._destroyed = True
        return True


R = TypeVar("R", bound=Resource)


class ResourceClient(ABC, Generic[R]):
    """
    Abstract base class for resource clients.

    Subclasses provide the path table, the record class and the key field
    used when encoding outgoing properties.
    """

    PATHS: ClassVar[dict[str, str]] = {}
    resource_class: ClassVar[type[Resource]] = Resource
    property_key_field: ClassVar[str] = "name"
    update_method: ClassVar[str] = "PUT"

    def __init__(self, connection: Optional[Connection] = None):
        # a connection created here is owned, and closed, by this client
        self._owns_connection = connection is None
        self.connection = connection if connection is not None else Connection()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection if this client created it."""
        if self._owns_connection:
            self.connection.close()

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the resource type, e.g. "contacts"."""

    def from_result(self, result: Any) -> R:
        """Build a record bound to this client from a decoded object."""
        if not isinstance(result, Mapping):
            raise DecodeError(
                f"Expected a {self.resource_class.__name__} object, got {type(result).__name__}"
            )
        return self.resource_class(result, client=self)

    def paged(
        self,
        fetch: Callable[[dict[str, Any], Any, int], tuple[list[Any], Any, bool]],
        options: Optional[Mapping[str, Any]] = None,
        offset: Any = None,
        limit: Optional[int] = None,
        max_limit: int = DEFAULT_MAX_LIMIT,
        max_pages: Optional[int] = None,
        paginator: Optional[Paginator] = None,
    ) -> PagedCollection:
        """Wrap a fetch closure in a PagedCollection."""
        return PagedCollection(
            fetch,
            options,
            offset=offset,
            limit=limit,
            max_limit=max_limit,
            max_pages=max_pages,
            paginator=paginator,
        )

    def read_page(
        self,
        response: Any,
        shape: ResponseShape,
        build: Optional[Callable[[Any], Any]] = None,
    ) -> tuple[list[Any], Any, bool]:
        """Unpack a listing response and build records from its items."""
        items, next_offset, has_more = shape.unpack(response)
        if build is None:
            build = self.from_result
        return [build(item) for item in items], next_offset, has_more

    def encode(self, properties: Optional[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Encode outgoing properties with this resource's key field."""
        values = {str(key): value for key, value in (properties or {}).items()}
        return encode_properties(values, key_field=self.property_key_field)

    def find(self, id: Any) -> R:
        """Fetch one record by id."""
        response = self.connection.get_json(self.PATHS["find"], {"id": id})
        return self.from_result(response)

    def delete(self, id: Any) -> bool:
        """Delete one object by id."""
        self.connection.delete_json(self.PATHS["delete"], {"id": id})
        logger.debug("Deleted %s %s", self.name, id)
        return True

    def _create(self, properties: Optional[Mapping[str, Any]]) -> R:
        response = self.connection.post_json(
            self.PATHS["create"],
            body={"properties": self.encode(properties)},
        )
        return self.from_result(response)

    def _update(self, id: Any, properties: Optional[Mapping[str, Any]]) -> Any:
        return self.connection.request_json(
            self.update_method,
            self.PATHS["update"],
            {"id": id},
            body={"properties": self.encode(properties)},
        )

    @abstractmethod
    def update(self, id: Any, properties: Mapping[str, Any]) -> Any:
        """Update the properties of one object."""
