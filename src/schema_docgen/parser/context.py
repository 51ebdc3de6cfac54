"""Registry shared by all extraction passes.

One ParserContext is created per source file. The passes populate it in
order (symbols, one-of wrappers, objects, endpoints); rendering only reads
it. Every registry keeps insertion order and the first registration of a
name wins; later duplicates are recorded in ``errors``.
"""

from schema_docgen.errors import (
    DuplicateDeclarationError,
    SchemaDocError,
    UnknownObjectError,
    UnresolvedTypeError,
)
from schema_docgen.parser.base import (
    BOOLEAN,
    NUMBER,
    STRING,
    ObjectRef,
    ObjectSymbol,
    OneofWrapper,
    ParsedEndpoint,
    SchemaObject,
    ValueType,
)

DEFAULT_PRIMITIVES = {
    "Int": NUMBER,
    "String": STRING,
    "Bool": BOOLEAN,
}


class ParserContext:
    """Symbols, wrappers, objects, endpoints and recorded errors of one run."""

    def __init__(self, primitives: dict[str, ValueType] | None = None, segment_separator: str = ","):
        self.primitives = dict(DEFAULT_PRIMITIVES if primitives is None else primitives)
        self.segment_separator = segment_separator
        self.object_symbols: dict[str, ObjectSymbol] = {}
        # qualified name of every record and enum -> its enclosing qualified name
        self.scopes: dict[str, str | None] = {}
        self.oneof_wrappers: dict[str, OneofWrapper] = {}
        self.objects: dict[str, SchemaObject] = {}
        self.endpoints: dict[str, ParsedEndpoint] = {}
        self.errors: list[SchemaDocError] = []

    # -- registration ---------------------------------------------------------

    def add_symbol(self, name: str) -> ObjectSymbol:
        return self.object_symbols.setdefault(name, ObjectSymbol(name=name))

    def add_scope(self, name: str, parent: str | None) -> None:
        self.scopes.setdefault(name, parent)

    def register_wrapper(self, wrapper: OneofWrapper) -> bool:
        if wrapper.wrapper_name in self.oneof_wrappers:
            self.errors.append(DuplicateDeclarationError(wrapper.wrapper_name, kind="oneof"))
            return False
        self.oneof_wrappers[wrapper.wrapper_name] = wrapper
        return True

    def register_object(self, obj: SchemaObject) -> ObjectRef:
        if obj.name in self.objects:
            self.errors.append(DuplicateDeclarationError(obj.name))
        else:
            self.objects[obj.name] = obj
        return obj.ref()

    def register_endpoint(self, endpoint: ParsedEndpoint) -> bool:
        if endpoint.name in self.endpoints:
            self.errors.append(DuplicateDeclarationError(endpoint.name, kind="endpoint"))
            return False
        self.endpoints[endpoint.name] = endpoint
        return True

    # -- lookup ---------------------------------------------------------------

    def object(self, ref: ObjectRef) -> SchemaObject:
        try:
            return self.objects[ref.name]
        except KeyError:
            raise UnknownObjectError(ref.name) from None

    def resolve(self, type_name: str, namespace: str | None = None) -> ValueType:
        """Resolve a referenced type name to a ValueType.

        Primitive keywords win regardless of namespace. Otherwise each scope
        is searched from *namespace* outwards to the global scope, one-of
        wrappers before object symbols. A dotted name (``Message.Image``)
        is looked up only within its qualifier, never in the global scope.
        """
        if "." in type_name:
            qualifier, _, type_name = type_name.rpartition(".")
            namespace = qualifier.replace(".", "_")
            scopes: list[str | None] = [namespace]
        else:
            scopes = self._enclosing_scopes(namespace)

        if type_name in self.primitives:
            return self.primitives[type_name]

        for scope in scopes:
            target = f"{scope}_{type_name}" if scope else type_name
            wrapper_name = _best_suffix_match(self.oneof_wrappers, target)
            if wrapper_name is not None:
                return ValueType.one_of(self.oneof_wrappers[wrapper_name])
            symbol_name = _best_suffix_match(self.object_symbols, target)
            if symbol_name is not None:
                return ValueType.object_ref(symbol_name)

        raise UnresolvedTypeError(type_name, namespace)

    def _enclosing_scopes(self, namespace: str | None) -> list[str | None]:
        """Scope chain from *namespace* out to the global scope.

        Declared scopes follow their recorded parents, so an underscore inside
        a type name never opens a scope. A namespace that was never declared
        falls back to splitting on ``_``: ``A_B_C`` -> ``[A_B_C, A_B, A, None]``.
        """
        scopes: list[str | None] = []
        while namespace:
            scopes.append(namespace)
            if namespace in self.scopes:
                namespace = self.scopes[namespace]
            else:
                namespace = namespace.rpartition("_")[0]
        scopes.append(None)
        return scopes


def _best_suffix_match(names, target: str) -> str | None:
    """Exact name first, else the longest name ending with ``_<target>``."""
    if target in names:
        return target
    suffix = f"_{target}"
    best = None
    for name in names:
        if name.endswith(suffix) and (best is None or len(name) > len(best)):
            best = name
    return best
