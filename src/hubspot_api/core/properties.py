"""
Property bag marshalling.

HubSpot transmits a resource's fields as a property bag: either a list of
``{"name": ..., "value": ...}`` records or a mapping of name to a record
holding ``value`` plus metadata (timestamps, source, versions). In memory a
record's properties are a plain dict of name to value.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from .errors import DecodeError

VALUE_FIELD = "value"


def decode_properties(properties: Any, key_field: str = "name") -> dict[str, Any]:
    """
    Convert a wire property bag into a name -> value mapping.

    Only the key and value of each record are kept. Duplicate names resolve
    to the last record seen.

    Args:
        properties: Sequence of records, mapping of name to record, or None
        key_field: Field holding the property name in sequence form

    Returns:
        Mapping of property name to value; empty for None or empty input

    Raises:
        DecodeError: If the bag is neither a list nor a mapping, or a record
            is not a mapping, lacks key/value or has a non-string key
    """
    if not properties:
        return {}

    if isinstance(properties, Mapping):
        decoded = {}
        for name, record in properties.items():
            if isinstance(record, Mapping):
                if VALUE_FIELD not in record:
                    raise DecodeError(
                        f"Property {name!r} has no {VALUE_FIELD!r} field",
                        details={"property": name},
                    )
                decoded[str(name)] = record[VALUE_FIELD]
            else:
                decoded[str(name)] = record
        return decoded

    if isinstance(properties, (str, bytes)) or not isinstance(properties, Sequence):
        raise DecodeError(
            f"Property bag must be a list or mapping, got {type(properties).__name__}"
        )

    decoded = {}
    for index, record in enumerate(properties):
        if not isinstance(record, Mapping):
            raise DecodeError(
                f"Property record {index} is not an object",
                details={"index": index},
            )
        if key_field not in record or VALUE_FIELD not in record:
            raise DecodeError(
                f"Property record {index} needs {key_field!r} and {VALUE_FIELD!r}",
                details={"index": index, "fields": sorted(record)},
            )
        if not isinstance(record[key_field], str):
            raise DecodeError(
                f"Property record {index} has a non-string {key_field!r}",
                details={"index": index},
            )
        decoded[record[key_field]] = record[VALUE_FIELD]
    return decoded


def encode_properties(values: Mapping[str, Any] | None, key_field: str = "name") -> list[dict[str, Any]]:
    """
    Convert a name -> value mapping into a wire property list.

    Values are passed through unconverted, in the mapping's iteration order.
    Reserved identifier keys must be removed by the caller beforehand.

    Args:
        values: Mapping of property name to value
        key_field: Field name to use for the property name

    Returns:
        List of ``{key_field: name, "value": value}`` records
    """
    if not values:
        return []
    return [{key_field: key, VALUE_FIELD: value} for key, value in values.items()]
