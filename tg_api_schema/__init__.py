"""
Telegram Bot API schema parser

Turns the Bot API documentation page into a typed, machine-readable schema.
- Sections: h4 section scraper (methods, objects, abstract one-of objects)
- Sentence: description tokenizer and sentence-pattern extractors
- Type resolver: table type column + description → Field
- Assembler: CustomSchema with injected response and currency objects

Public API surface:
  Orchestration  : SchemaBuilder, build_schema, build_schema_from_url
  Type resolution: parse_type_text, resolve_return_type
  Data models    : CustomSchema, Method, Field, ParsedSection
  Error types    : SchemaParserError, ScrapeError, FetchError
"""

# --- Orchestration ---
from .main import SchemaBuilder, build_schema, build_schema_from_url

# --- Type resolution (usable on single table rows) ---
from .type_resolver import parse_type_text, resolve_return_type
from .assembler import to_custom_schema

# --- Data models ---
from .schemas import CustomSchema, Method, Field, ParsedSection, TypeInfo

# --- Exceptions (callers should catch these for error handling) ---
from .exceptions import SchemaParserError, ScrapeError, FetchError

__version__ = "0.1.0"
__all__ = [
    "SchemaBuilder",
    "build_schema",
    "build_schema_from_url",
    "parse_type_text",
    "resolve_return_type",
    "to_custom_schema",
    "CustomSchema",
    "Method",
    "Field",
    "ParsedSection",
    "TypeInfo",
    "SchemaParserError",
    "ScrapeError",
    "FetchError",
]
