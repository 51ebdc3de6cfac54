"""Run configuration, loaded from an optional YAML file."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from schema_docgen.errors import ConfigError
from schema_docgen.parser.base import BOOLEAN, NUMBER, STRING, ValueType
from schema_docgen.parser.context import ParserContext

CONFIG_ENV_VAR = "SCHEMA_DOCGEN_CONFIG"


class DocgenConfig(BaseModel):
    """Options shared by the extraction passes and the renderer."""

    model_config = ConfigDict(extra="forbid")

    number_keywords: list[str] = ["Int"]
    string_keywords: list[str] = ["String"]
    boolean_keywords: list[str] = ["Bool"]
    segment_separator: str = ","  # joins string literal segments around interpolations
    strict: bool = True
    object_catalog: bool = False

    def primitives(self) -> dict[str, ValueType]:
        table: dict[str, ValueType] = {}
        for keywords, value_type in (
            (self.number_keywords, NUMBER),
            (self.string_keywords, STRING),
            (self.boolean_keywords, BOOLEAN),
        ):
            for keyword in keywords:
                table[keyword] = value_type
        return table

    def make_context(self) -> ParserContext:
        return ParserContext(primitives=self.primitives(), segment_separator=self.segment_separator)


def load_config(path: str | Path | None) -> DocgenConfig:
    """Load configuration from *path*; defaults when *path* is None."""
    if path is None:
        return DocgenConfig()
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a mapping")
    try:
        return DocgenConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}: {e}") from e
