"""Common shape of every persisted governance record.

Every stored object carries type, protocol_version, timestamp and
node_id so that a downstream indexer can classify it without external
metadata. The content id is NOT part of the record: the store assigns
it on write, and the pair is carried around as a StoredObject.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Generic, Mapping, TypeVar

from egp.domain.errors.reference import MalformedRecordError
from egp.domain.models.instant import ensure_utc, format_instant, parse_instant

DEFAULT_PROTOCOL_VERSION = "0.1.0-alpha"
DEFAULT_NODE_ID = "unknown"

OBJECT_ID_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")


class ObjectType(Enum):
    """Kind of a persisted object.

    Types:
        SENSE: A reported systemic signal.
        PROPOSE: A candidate solution responding to a sense.
        ADOPT: A commitment to trial a proposal.
        RELATIONSHIP: A typed edge between two objects.
        LEARNING_ARCHIVE: Archive skeleton attached to an adoption.
    """

    SENSE = "sense"
    PROPOSE = "propose"
    ADOPT = "adopt"
    RELATIONSHIP = "relationship"
    LEARNING_ARCHIVE = "learning_archive"


# Kinds addressable as /{kind}/{id}
PROTOCOL_KINDS: frozenset[ObjectType] = frozenset(
    {ObjectType.SENSE, ObjectType.PROPOSE, ObjectType.ADOPT}
)


def object_uri(kind: ObjectType, object_id: str) -> str:
    """Build the protocol URI for an object, e.g. "/sense/b123"."""
    return f"/{kind.value}/{object_id}"


def parse_object_uri(uri: str, kind: ObjectType) -> str:
    """Extract the object id from a protocol URI of the given kind.

    Raises:
        ValueError: If the URI is not "/{kind}/{alphanumeric id}".
    """
    prefix = f"/{kind.value}/"
    if not isinstance(uri, str) or not uri.startswith(prefix):
        raise ValueError(f"expected a {prefix}{{id}} reference, got {uri!r}")
    object_id = uri[len(prefix) :]
    if not OBJECT_ID_PATTERN.match(object_id):
        raise ValueError(f"invalid object id in {uri!r}")
    return object_id


def frozen_json(value: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Detach a caller-supplied JSON mapping from its owner."""
    if value is None:
        return None
    return copy.deepcopy(dict(value))


def drop_none(values: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose value is None (optional fields stay absent on the wire)."""
    return {key: value for key, value in values.items() if value is not None}


def require_mapping(record: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(record, Mapping):
        raise MalformedRecordError(kind, f"expected an object, got {type(record).__name__}")
    return record


def read_field(record: Mapping[str, Any], key: str, kind: str) -> Any:
    try:
        return record[key]
    except KeyError:
        raise MalformedRecordError(kind, f"missing field {key!r}") from None


def read_instant(record: Mapping[str, Any], key: str, kind: str) -> datetime:
    try:
        return parse_instant(read_field(record, key, kind))
    except ValueError as exc:
        raise MalformedRecordError(kind, f"field {key!r}: {exc}") from exc


@dataclass(frozen=True, kw_only=True)
class GovernanceObject:
    """Base of every persisted governance record.

    Subclasses set OBJECT_TYPE and implement to_record()/from_record().

    Attributes:
        timestamp: Creation instant (UTC).
        node_id: Identifier of the originating node.
        protocol_version: Protocol version the record was written under.
    """

    OBJECT_TYPE: ClassVar[ObjectType]

    timestamp: datetime
    node_id: str = DEFAULT_NODE_ID
    protocol_version: str = DEFAULT_PROTOCOL_VERSION

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))

    @property
    def type(self) -> ObjectType:
        """The record kind."""
        return self.OBJECT_TYPE

    def envelope(self) -> dict[str, Any]:
        """Common wire fields shared by every record."""
        return {
            "type": self.OBJECT_TYPE.value,
            "protocol_version": self.protocol_version,
            "timestamp": format_instant(self.timestamp),
            "node_id": self.node_id,
        }

    def to_record(self) -> dict[str, Any]:
        """Serialize to the JSON payload handed to the content store."""
        raise NotImplementedError

    @classmethod
    def read_envelope(cls, record: Any) -> tuple[Mapping[str, Any], dict[str, Any]]:
        """Check the record kind and read the common fields.

        Returns:
            Tuple of (record mapping, keyword arguments for the common fields).

        Raises:
            MalformedRecordError: If the payload is not a record of this kind.
        """
        kind = cls.OBJECT_TYPE.value
        mapping = require_mapping(record, kind)
        actual = mapping.get("type")
        if actual != kind:
            raise MalformedRecordError(kind, f"type is {actual!r}")
        common = {
            "timestamp": read_instant(mapping, "timestamp", kind),
            "node_id": str(mapping.get("node_id", DEFAULT_NODE_ID)),
            "protocol_version": str(
                mapping.get("protocol_version", DEFAULT_PROTOCOL_VERSION)
            ),
        }
        return mapping, common


RecordT = TypeVar("RecordT", bound=GovernanceObject)


@dataclass(frozen=True)
class StoredObject(Generic[RecordT]):
    """A record together with the content id the store assigned to it.

    Attributes:
        id: Content address.
        record: The immutable record.
    """

    id: str
    record: RecordT

    @property
    def uri(self) -> str:
        """Protocol URI of the object, e.g. "/propose/b123"."""
        return object_uri(self.record.type, self.id)
