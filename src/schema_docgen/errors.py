"""Error types raised or recorded while building the schema model.

Duplicate declarations and unsupported field shapes are only ever recorded
on the parser context. Everything else is raised by the pass that detects
it; the driver decides whether to abort or skip the declaration.
"""


class SchemaDocError(Exception):
    """Base error carrying the declaration, field and reason."""

    def __init__(self, reason: str, declaration: str | None = None, field: str | None = None):
        self.reason = reason
        self.declaration = declaration
        self.field = field
        super().__init__(self._format())

    def _format(self) -> str:
        location = self.declaration or ""
        if self.field:
            location = f"{location}.{self.field}" if location else self.field
        return f"{location}: {self.reason}" if location else self.reason


class DuplicateDeclarationError(SchemaDocError):
    """A fully-qualified name was declared more than once."""

    def __init__(self, name: str, kind: str = "object"):
        self.name = name
        super().__init__(f"duplicated {kind} declaration", declaration=name)


class UnresolvedTypeError(SchemaDocError):
    def __init__(self, type_name: str, namespace: str | None = None, declaration: str | None = None, field: str | None = None):
        self.type_name = type_name
        self.namespace = namespace
        scope = f" in namespace '{namespace}'" if namespace else ""
        super().__init__(f"cannot resolve type name '{type_name}'{scope}", declaration=declaration, field=field)


class UnsupportedTypeShapeError(SchemaDocError):
    def __init__(self, type_text: str, declaration: str | None = None, field: str | None = None):
        self.type_text = type_text
        super().__init__(f"unhandled type shape '{type_text}'", declaration=declaration, field=field)


class MissingNestedRecordError(SchemaDocError):
    def __init__(self, record: str, declaration: str):
        self.record = record
        super().__init__(f"missing nested '{record}' object record", declaration=declaration)


class MissingPropertyError(SchemaDocError):
    def __init__(self, prop: str, declaration: str):
        super().__init__(f"missing literal value for '{prop}'", declaration=declaration, field=prop)


class UndefinedMethodError(SchemaDocError):
    def __init__(self, method: str, declaration: str):
        self.method = method
        super().__init__(f"undefined method, {method}", declaration=declaration, field="method")


class UnknownObjectError(SchemaDocError):
    def __init__(self, name: str):
        super().__init__(f"no extracted object named '{name}'")


class SourceParseError(SchemaDocError):
    def __init__(self, reason: str, line: int | None = None):
        self.line = line
        where = f"line {line}: " if line is not None else ""
        super().__init__(f"{where}{reason}")


class ConfigError(SchemaDocError):
    pass
