"""Declaration tree read from a schema source file.

The tree only records what the extraction passes need: nesting, local
names, conformances, leading comments, field type shapes and literal
initializers.
"""

from enum import Enum

from pydantic import BaseModel

CAPABILITY_OBJECT = "Object"
CAPABILITY_NOMINAL_OBJECT = "NominalObject"
CAPABILITY_ONEOF = "OneOf"
CAPABILITY_ENDPOINT = "Endpoint"

TYPE_MODIFIERS = {"static", "class"}


class DeclKind(str, Enum):
    RECORD = "record"  # struct / class
    SUM = "sum"  # enum
    FIELD = "field"  # let / var binding
    CASE = "case"  # enum case element
    OTHER = "other"


class TypeShape(BaseModel):
    """Declared type of a field: plain / optional / array / unsupported."""

    kind: str  # plain / optional / array / unsupported
    name: str | None = None  # may be dotted, e.g. Message.Image
    text: str

    @classmethod
    def plain(cls, name: str) -> "TypeShape":
        return cls(kind="plain", name=name, text=name)

    @classmethod
    def optional(cls, name: str) -> "TypeShape":
        return cls(kind="optional", name=name, text=f"{name}?")

    @classmethod
    def array(cls, name: str) -> "TypeShape":
        return cls(kind="array", name=name, text=f"[{name}]")

    @classmethod
    def unsupported(cls, text: str) -> "TypeShape":
        return cls(kind="unsupported", text=text)


class Initializer(BaseModel):
    """Initializer expression of a field, interpreted only when literal."""

    kind: str  # string / integer / boolean / member / expression
    text: str = ""
    segments: list[str] = []  # string literal segments around interpolations

    def literal(self, separator: str = ",") -> str | None:
        """Return the default-value text, or None for non-literal expressions."""
        if self.kind == "string":
            return separator.join(self.segments)
        if self.kind in ("integer", "boolean"):
            return self.text
        return None


class CaseParameter(BaseModel):
    label: str | None = None
    type_shape: TypeShape


class Declaration(BaseModel):
    """A node of the declaration tree."""

    kind: DeclKind
    name: str
    conformances: list[str] = []
    modifiers: list[str] = []
    children: list["Declaration"] = []
    comment: str = ""
    type_shape: TypeShape | None = None
    initializer: Initializer | None = None
    parameters: list[CaseParameter] = []
    line: int | None = None

    def conforms_to(self, *capabilities: str) -> bool:
        return any(c in self.conformances for c in capabilities)

    @property
    def is_object(self) -> bool:
        return self.kind == DeclKind.RECORD and self.conforms_to(CAPABILITY_OBJECT, CAPABILITY_NOMINAL_OBJECT)

    @property
    def is_nominal(self) -> bool:
        return self.kind == DeclKind.RECORD and self.conforms_to(CAPABILITY_NOMINAL_OBJECT)

    @property
    def is_endpoint(self) -> bool:
        return self.kind == DeclKind.RECORD and self.conforms_to(CAPABILITY_ENDPOINT)

    @property
    def is_oneof(self) -> bool:
        return self.kind == DeclKind.SUM and self.conforms_to(CAPABILITY_ONEOF)

    @property
    def is_stored_field(self) -> bool:
        """Instance stored property with a type annotation."""
        return (
            self.kind == DeclKind.FIELD
            and self.type_shape is not None
            and not TYPE_MODIFIERS.intersection(self.modifiers)
        )

    def records(self) -> list["Declaration"]:
        return [c for c in self.children if c.kind == DeclKind.RECORD]

    def fields(self) -> list["Declaration"]:
        return [c for c in self.children if c.kind == DeclKind.FIELD]

    def cases(self) -> list["Declaration"]:
        return [c for c in self.children if c.kind == DeclKind.CASE]

    def field(self, name: str) -> "Declaration | None":
        for child in self.fields():
            if child.name == name and not TYPE_MODIFIERS.intersection(child.modifiers):
                return child
        return None


Declaration.model_rebuild()


class SourceFile(BaseModel):
    """Top-level declarations of one schema source file."""

    path: str = "<memory>"
    declarations: list[Declaration] = []


def qualified_name(namespace: str | None, name: str) -> str:
    """Join *namespace* and *name* into a fully-qualified name."""
    return f"{namespace}_{name}" if namespace else name
