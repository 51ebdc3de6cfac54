"""Resolved schema models.

Every extraction pass converts declarations into these models; the
renderer only ever reads them.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """Convert a camel-case identifier to snake case (``profileImageURL`` -> ``profile_image_url``)."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


class ValueKind(str, Enum):
    UNKNOWN = "unknown"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    ONEOF = "oneof"


class HTTPMethod(str, Enum):
    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"

    @property
    def label(self) -> str:
        return self.value.upper()


class ObjectSymbol(BaseModel):
    """A fully-qualified name known to denote an object record."""

    model_config = ConfigDict(frozen=True)

    name: str


class ObjectRef(BaseModel):
    """Name-keyed handle to a SchemaObject owned by the parser context."""

    model_config = ConfigDict(frozen=True)

    name: str


class ValueType(BaseModel):
    """A member's value type.

    ``ref`` is set for OBJECT, ``item`` for ARRAY and ``wrapper`` for ONEOF.
    """

    model_config = ConfigDict(frozen=True)

    kind: ValueKind
    ref: ObjectRef | None = None
    item: "ValueType | None" = None
    wrapper: "OneofWrapper | None" = None

    @classmethod
    def primitive(cls, kind: ValueKind) -> "ValueType":
        return cls(kind=kind)

    @classmethod
    def object_ref(cls, name: str) -> "ValueType":
        return cls(kind=ValueKind.OBJECT, ref=ObjectRef(name=name))

    @classmethod
    def array_of(cls, item: "ValueType") -> "ValueType":
        return cls(kind=ValueKind.ARRAY, item=item)

    @classmethod
    def one_of(cls, wrapper: "OneofWrapper") -> "ValueType":
        return cls(kind=ValueKind.ONEOF, wrapper=wrapper)


class OneofCase(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value_type: ValueType


class OneofWrapper(BaseModel):
    """A OneOf sum type whose cases each carry exactly one payload."""

    model_config = ConfigDict(frozen=True)

    wrapper_name: str
    cases: tuple[OneofCase, ...]


ValueType.model_rebuild()
OneofCase.model_rebuild()
OneofWrapper.model_rebuild()

UNKNOWN = ValueType.primitive(ValueKind.UNKNOWN)
STRING = ValueType.primitive(ValueKind.STRING)
NUMBER = ValueType.primitive(ValueKind.NUMBER)
BOOLEAN = ValueType.primitive(ValueKind.BOOLEAN)


class Member(BaseModel):
    """A single field of a SchemaObject."""

    key: str
    value_type: ValueType
    is_required: bool
    default_value: str | None = None
    comment: str = ""


class SchemaObject(BaseModel):
    """An Object record with its members in source order."""

    name: str
    comment: str = ""
    members: list[Member] = []

    def ref(self) -> ObjectRef:
        return ObjectRef(name=self.name)


class ParsedEndpoint(BaseModel):
    """An Endpoint record with its four payload objects."""

    name: str
    method: HTTPMethod
    path: str
    header: ObjectRef
    query: ObjectRef
    body: ObjectRef
    response: ObjectRef
