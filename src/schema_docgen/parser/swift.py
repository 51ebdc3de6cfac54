"""Swift declaration reader.

Reads the subset of Swift used by schema files into a declaration tree:
struct / class / enum declarations with their conformances, stored
``let`` / ``var`` bindings, enum cases with associated values and the
comments directly preceding each declaration. Function bodies, computed
properties, protocols and extensions are skipped.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

from schema_docgen.errors import SourceParseError
from schema_docgen.parser.declarations import (
    CaseParameter,
    Declaration,
    DeclKind,
    Initializer,
    SourceFile,
    TypeShape,
)

_TOKEN_RE = re.compile(
    r"""
    (?P<space>[ \t\r\f\v]+)
  | (?P<newline>\n)
  | (?P<comment>//[^\n]*)
  | (?P<number>0[xob][0-9a-fA-F_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?)
  | (?P<ident>`[^\W\d]\w*`|[^\W\d]\w*)
  | (?P<punct>->|\.\.\.|\.\.<|[{}()\[\]:,;=?!.<>@#&|+\-*/%^~$\\])
    """,
    re.VERBOSE,
)

_INTEGER_RE = re.compile(r"^(?:0[xob][0-9a-fA-F_]+|\d[\d_]*)$")
_COMMENT_MARKER_RE = re.compile(r"^///? ?")

_MODIFIERS = {
    "public", "private", "fileprivate", "internal", "open", "static", "final",
    "lazy", "weak", "unowned", "override", "mutating", "nonmutating", "indirect",
    "required", "convenience", "dynamic", "optional", "package", "nonisolated",
}
_MEMBER_KEYWORDS = {"var", "let", "func", "subscript", "init"}
_SKIPPED_FUNCTIONS = {"func", "init", "deinit", "subscript"}
_SKIPPED_ALIASES = {"typealias", "associatedtype"}
_SKIPPED_TYPES = {"protocol", "extension"}
_RECORD_KEYWORDS = {"struct", "class", "actor"}
_OBSERVERS = {"willSet", "didSet"}


@dataclass
class Token:
    kind: str  # ident / number / string / punct / eof
    text: str
    line: int
    newline_before: bool = False
    comments: list[str] = field(default_factory=list)
    segments: list[str] = field(default_factory=list)


def parse_source(path: str | Path) -> SourceFile:
    """Read a Swift schema file into a SourceFile."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceParseError(f"cannot read {path}: {e}") from e
    return parse_text(text, path=str(path))


def parse_text(text: str, path: str = "<memory>") -> SourceFile:
    """Parse Swift source *text* into a SourceFile."""
    parser = _DeclarationParser(tokenize(text))
    return SourceFile(path=path, declarations=parser.parse_file())


# -- tokenizer ----------------------------------------------------------------


def tokenize(text: str) -> list[Token]:
    """Split *text* into tokens, attaching leading comments to each token."""
    tokens: list[Token] = []
    pending: list[str] = []
    newline = True
    line = 1
    pos = 0

    while pos < len(text):
        if text.startswith("/*", pos):
            pos, line = _skip_block_comment(text, pos, line)
            continue
        if text[pos] == '"':
            start_line = line
            pos, line, segments, raw = _scan_string(text, pos, line)
            tokens.append(Token("string", raw, start_line, newline, pending, segments))
            pending, newline = [], False
            continue

        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise SourceParseError(f"unexpected character {text[pos]!r}", line)
        kind = match.lastgroup
        value = match.group()
        pos = match.end()

        if kind == "space":
            continue
        if kind == "newline":
            line += 1
            newline = True
            continue
        if kind == "comment":
            # a comment on the same line as a token trails that token
            if newline or not tokens:
                pending.append(_COMMENT_MARKER_RE.sub("", value).rstrip())
            continue
        if kind == "ident":
            value = value.strip("`")
        tokens.append(Token(kind, value, line, newline, pending))
        pending, newline = [], False

    tokens.append(Token("eof", "", line, True, pending))
    return tokens


def _skip_block_comment(text: str, pos: int, line: int) -> tuple[int, int]:
    start_line = line
    depth = 0
    while pos < len(text):
        if text.startswith("/*", pos):
            depth += 1
            pos += 2
        elif text.startswith("*/", pos):
            depth -= 1
            pos += 2
            if depth == 0:
                return pos, line
        else:
            if text[pos] == "\n":
                line += 1
            pos += 1
    raise SourceParseError("unterminated block comment", start_line)


def _scan_string(text: str, pos: int, line: int) -> tuple[int, int, list[str], str]:
    """Scan a string literal starting at *pos*.

    Returns the end position, the updated line number, the literal text
    segments around interpolations and the raw source text.
    """
    start, start_line = pos, line
    delimiter = '"""' if text.startswith('"""', pos) else '"'
    pos += len(delimiter)
    segments: list[str] = []
    current: list[str] = []

    while True:
        if pos >= len(text):
            raise SourceParseError("unterminated string literal", start_line)
        if text.startswith(delimiter, pos):
            pos += len(delimiter)
            break
        char = text[pos]
        if char == "\\" and text.startswith("\\(", pos):
            if current:
                segments.append("".join(current))
                current = []
            pos, line = _skip_interpolation(text, pos + 2, line, start_line)
            continue
        if char == "\\":
            current.append(text[pos:pos + 2])
            pos += 2
            continue
        if char == "\n":
            if delimiter == '"':
                raise SourceParseError("unterminated string literal", start_line)
            line += 1
        current.append(char)
        pos += 1

    if current:
        segments.append("".join(current))
    return pos, line, segments, text[start:pos]


def _skip_interpolation(text: str, pos: int, line: int, start_line: int) -> tuple[int, int]:
    depth = 1
    while pos < len(text):
        char = text[pos]
        if char == '"':
            pos, line, _, _ = _scan_string(text, pos, line)
            continue
        if char == "\n":
            line += 1
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return pos + 1, line
        pos += 1
    raise SourceParseError("unterminated string interpolation", start_line)


# -- declarations -------------------------------------------------------------


class _DeclarationParser:
    """Recursive-descent reader over the token list."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    def parse_file(self) -> list[Declaration]:
        declarations: list[Declaration] = []
        while not self._at("eof"):
            if self._peek().text == "}":
                raise SourceParseError("unbalanced '}'", self._peek().line)
            declarations.extend(self._member())
        return declarations

    # -- token helpers --------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _at(self, kind: str) -> bool:
        return self._peek().kind == kind

    def _is(self, text: str, offset: int = 0) -> bool:
        token = self._peek(offset)
        return token.kind in ("punct", "ident") and token.text == text

    def _advance(self) -> Token:
        token = self._peek()
        if token.kind != "eof":
            self.pos += 1
        return token

    def _expect(self, text: str) -> Token:
        token = self._peek()
        if not self._is(text):
            found = token.text or "end of file"
            raise SourceParseError(f"expected '{text}', found '{found}'", token.line)
        return self._advance()

    def _expect_ident(self) -> Token:
        token = self._peek()
        if token.kind != "ident":
            found = token.text or "end of file"
            raise SourceParseError(f"expected identifier, found '{found}'", token.line)
        return self._advance()

    def _skip_balanced(self, open_text: str, close_text: str) -> list[Token]:
        start = self._expect(open_text)
        depth = 1
        skipped = [start]
        while depth:
            if self._at("eof"):
                raise SourceParseError(f"unbalanced '{open_text}'", start.line)
            token = self._advance()
            skipped.append(token)
            if token.kind == "punct" and token.text == open_text:
                depth += 1
            elif token.kind == "punct" and token.text == close_text:
                depth -= 1
        return skipped

    # -- members --------------------------------------------------------------

    def _members(self) -> list[Declaration]:
        self._expect("{")
        declarations: list[Declaration] = []
        while not self._is("}"):
            if self._at("eof"):
                raise SourceParseError("expected '}', found end of file", self._peek().line)
            declarations.extend(self._member())
        self._expect("}")
        return declarations

    def _member(self) -> list[Declaration]:
        first = self._peek()
        comment = "\n".join(first.comments)

        while self._is("@"):
            self._advance()
            self._expect_ident()
            if self._is("(") and not self._peek().newline_before:
                self._skip_balanced("(", ")")

        modifiers: list[str] = []
        while self._peek().kind == "ident" and self._is_modifier():
            modifiers.append(self._advance().text)
            if self._is("("):
                self._skip_balanced("(", ")")  # private(set)

        if self._is("{"):
            self._skip_balanced("{", "}")
            return []
        keyword = self._advance()
        if keyword.kind != "ident":
            return []
        text = keyword.text
        if text in _RECORD_KEYWORDS:
            return [self._type_decl(DeclKind.RECORD, modifiers, comment, keyword.line)]
        if text == "enum":
            return [self._type_decl(DeclKind.SUM, modifiers, comment, keyword.line)]
        if text in ("let", "var"):
            return self._bindings(modifiers, comment)
        if text == "case":
            return self._case_decl(comment)
        if text in _SKIPPED_TYPES:
            self._skip_type_decl()
        elif text in _SKIPPED_FUNCTIONS:
            self._skip_function()
        elif text in _SKIPPED_ALIASES or text == "import":
            self._skip_line()
        return []

    def _is_modifier(self) -> bool:
        text = self._peek().text
        if text == "class":
            return self._peek(1).text in _MEMBER_KEYWORDS | _MODIFIERS
        if text not in _MODIFIERS:
            return False
        return self._peek(1).kind == "ident" or self._is("(", 1)

    def _type_decl(self, kind: DeclKind, modifiers: list[str], comment: str, line: int) -> Declaration:
        name = self._expect_ident().text
        if self._is("<"):
            self._skip_balanced("<", ">")
        conformances: list[str] = []
        if self._is(":"):
            self._advance()
            while True:
                conformances.append(self._type_text(stop={",", "{", "where"}))
                if not self._is(","):
                    break
                self._advance()
        if self._is("where"):
            while not self._is("{") and not self._at("eof"):
                self._advance()
        children = self._members()
        return Declaration(
            kind=kind,
            name=name,
            conformances=conformances,
            modifiers=modifiers,
            children=children,
            comment=comment,
            line=line,
        )

    def _skip_type_decl(self) -> None:
        while not self._is("{"):
            if self._at("eof"):
                raise SourceParseError("expected '{', found end of file", self._peek().line)
            self._advance()
        self._skip_balanced("{", "}")

    def _skip_function(self) -> None:
        depth = 0
        seen_parameters = False
        while not self._at("eof"):
            token = self._peek()
            if depth == 0:
                if token.text == "{" and token.kind == "punct":
                    self._skip_balanced("{", "}")
                    return
                if token.text in ("}", ";") and token.kind == "punct":
                    return
                if seen_parameters and token.newline_before and token.text not in ("->", "throws", "rethrows", "async", "where"):
                    return
            if token.kind == "punct" and token.text in ("(", "["):
                depth += 1
            elif token.kind == "punct" and token.text in (")", "]"):
                depth -= 1
                if depth == 0:
                    seen_parameters = True
            self._advance()

    def _skip_line(self) -> None:
        while not self._at("eof") and not self._peek().newline_before and not self._is("}"):
            self._advance()

    # -- bindings -------------------------------------------------------------

    def _bindings(self, modifiers: list[str], comment: str) -> list[Declaration]:
        declarations: list[Declaration] = []
        while True:
            token = self._peek()
            name = None
            if token.kind == "ident":
                name = self._advance().text
            elif self._is("("):
                self._skip_balanced("(", ")")  # tuple pattern
            else:
                raise SourceParseError(f"expected binding name, found '{token.text}'", token.line)

            type_shape = None
            initializer = None
            if self._is(":"):
                self._advance()
                type_shape = self._type()
            if self._is("="):
                self._advance()
                initializer = self._expression()
            computed = False
            if self._is("{"):
                computed = initializer is None and not self._is_observer_block()
                self._skip_balanced("{", "}")

            if name and not computed:
                declarations.append(
                    Declaration(
                        kind=DeclKind.FIELD,
                        name=name,
                        modifiers=modifiers,
                        comment=comment,
                        type_shape=type_shape,
                        initializer=initializer,
                        line=token.line,
                    )
                )
            if not self._is(","):
                return declarations
            self._advance()

    def _is_observer_block(self) -> bool:
        return self._peek(1).text in _OBSERVERS

    def _case_decl(self, comment: str) -> list[Declaration]:
        declarations: list[Declaration] = []
        while True:
            token = self._expect_ident()
            parameters: list[CaseParameter] = []
            if self._is("("):
                parameters = self._case_parameters()
            if self._is("="):
                self._advance()
                self._expression()  # raw value
            declarations.append(
                Declaration(
                    kind=DeclKind.CASE,
                    name=token.text,
                    comment=comment if not declarations else "",
                    parameters=parameters,
                    line=token.line,
                )
            )
            if not self._is(","):
                return declarations
            self._advance()

    def _case_parameters(self) -> list[CaseParameter]:
        self._expect("(")
        parameters: list[CaseParameter] = []
        while not self._is(")"):
            label = None
            if self._peek().kind == "ident" and self._is(":", 1):
                label = self._advance().text
                self._advance()
            elif self._peek().kind == "ident" and self._peek(1).kind == "ident" and self._is(":", 2):
                self._advance()
                label = self._advance().text
                self._advance()
            parameters.append(CaseParameter(label=label if label != "_" else None, type_shape=self._type()))
            if self._is("="):
                self._advance()
                self._expression()
            if self._is(","):
                self._advance()
            elif not self._is(")"):
                token = self._peek()
                raise SourceParseError(f"expected ')', found '{token.text}'", token.line)
        self._expect(")")
        return parameters

    # -- types ----------------------------------------------------------------

    def _type(self) -> TypeShape:
        start = self.pos
        kind, name, inner = self._type_primary()
        postfix = 0
        while (self._is("?") or self._is("!")) and not self._peek().newline_before:
            self._advance()
            postfix += 1
        if self._is("->"):
            self._advance()
            self._type()
            kind = "function"
        text = _join_tokens(self.tokens[start:self.pos])

        if kind == "name" and postfix == 0:
            return TypeShape.plain(name)
        if kind == "name" and postfix == 1:
            return TypeShape.optional(name)
        if kind == "array" and postfix == 0 and inner.kind == "plain":
            return TypeShape.array(inner.name)
        return TypeShape.unsupported(text)

    def _type_primary(self) -> tuple[str, str | None, TypeShape | None]:
        token = self._peek()
        if self._is("["):
            self._advance()
            inner = self._type()
            if self._is(":"):
                self._advance()
                self._type()
                self._expect("]")
                return "dictionary", None, None
            self._expect("]")
            return "array", None, inner
        if self._is("("):
            self._skip_balanced("(", ")")
            return "tuple", None, None
        if token.kind == "ident" and token.text in ("some", "any", "inout"):
            self._advance()
            self._type_primary()
            return "existential", None, None
        if token.kind != "ident":
            raise SourceParseError(f"expected type, found '{token.text or 'end of file'}'", token.line)

        parts = [self._advance().text]
        generic = False
        while True:
            if self._is("<") and not self._peek().newline_before:
                self._skip_balanced("<", ">")
                generic = True
            if self._is(".") and self._peek(1).kind == "ident":
                self._advance()
                parts.append(self._advance().text)
                continue
            break
        if generic:
            return "generic", None, None
        return "name", ".".join(parts), None

    def _type_text(self, stop: set[str]) -> str:
        start = self.pos
        depth = 0
        while not self._at("eof"):
            token = self._peek()
            if depth == 0 and token.text in stop:
                break
            if token.text == "<":
                depth += 1
            elif token.text == ">":
                depth -= 1
            self._advance()
        return _join_tokens(self.tokens[start:self.pos])

    # -- expressions ----------------------------------------------------------

    def _expression(self) -> Initializer:
        start = self.pos
        depth = 0
        while not self._at("eof"):
            token = self._peek()
            is_punct = token.kind == "punct"
            if depth == 0 and self.pos > start:
                if is_punct and token.text in (",", ";", "}", "{"):
                    break
                if token.newline_before and not (is_punct and token.text == "."):
                    break
            if depth == 0 and is_punct and token.text in (")", "]", "}"):
                break
            if is_punct and token.text in ("(", "[", "{"):
                depth += 1
            elif is_punct and token.text in (")", "]", "}"):
                depth -= 1
            self._advance()

        tokens = self.tokens[start:self.pos]
        if not tokens:
            raise SourceParseError("expected expression", self._peek().line)
        return _classify_expression(tokens)


def _classify_expression(tokens: list[Token]) -> Initializer:
    texts = [t.text for t in tokens]
    if len(tokens) == 1:
        token = tokens[0]
        if token.kind == "string":
            return Initializer(kind="string", text=token.text, segments=token.segments)
        if token.kind == "number" and _INTEGER_RE.match(token.text):
            return Initializer(kind="integer", text=token.text)
        if token.kind == "ident" and token.text in ("true", "false"):
            return Initializer(kind="boolean", text=token.text)
    if len(tokens) == 2 and texts[0] == "." and tokens[1].kind == "ident":
        return Initializer(kind="member", text=texts[1])
    if len(tokens) == 3 and tokens[0].kind == "ident" and texts[1] == "." and tokens[2].kind == "ident":
        return Initializer(kind="member", text=texts[2])
    return Initializer(kind="expression", text=_join_tokens(tokens))


def _join_tokens(tokens: list[Token]) -> str:
    parts: list[str] = []
    for token in tokens:
        parts.append(token.text)
        if token.kind == "punct" and token.text in (",", ":"):
            parts.append(" ")
    return "".join(parts).strip()
