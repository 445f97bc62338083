"""
Pydantic schemas defining the contracts between modules.

Part / Token / ExtractedType: transient values of the description parser
Field variants:  typed descriptor of one parameter, object field or return type
TableRow / ParsedSection / NavItem: output of the section scraper
CustomSchema:    final document produced by the assembler

Data flow through the pipeline:
  page HTML → sections (ParsedSection) → assembler → CustomSchema
  TableRow.description → sentence parser (Part lists) → type resolver (Field)
"""

from typing import Annotated, Literal, Optional, Union

import pydantic
from pydantic import BaseModel, ConfigDict


# --- Description parser values ---

TokenKind = Literal["word", "dot", "quote", "lparen", "rparen"]
PartKind = Literal["word", "link", "bold", "italic", "code"]


class Token(BaseModel):
    """One lexical unit of a text node."""
    kind: TokenKind
    text: str


class Part(BaseModel):
    """
    Atomic unit of a sentence.

    `kind` records where the text came from: a plain word run, or the text of
    an <a>, <strong>/<b>, <em> or <code> element. Only link parts carry an href.
    `has_quotes` marks a part collapsed from a quoted span.
    """
    inner: str
    has_quotes: bool = False
    kind: PartKind = "word"
    href: Optional[str] = None


Sentence = list[Part]


class SearchBy(BaseModel):
    """Predicate over a single Part."""
    by: Literal["word", "kind", "quotes"]
    word: Optional[str] = None
    kind: Optional[PartKind] = None

    def matches(self, part: Part) -> bool:
        if self.by == "word":
            return part.inner == self.word
        if self.by == "kind":
            return part.kind == self.kind
        return part.has_quotes


class Pattern(BaseModel):
    """
    A window of predicates plus capture rules.

    `offset` is added to the window end to find where the captured tail starts
    (negative values reach back into the window). An `exclude` match skips the
    whole sentence for the current extraction.
    """
    parts: list[SearchBy]
    offset: int = 0
    exclude: bool = False


class ExtractedType(BaseModel):
    """Type mention found in prose: single name, array of X, or a union."""
    kind: Literal["single", "array", "or"]
    name: Optional[str] = None
    href: Optional[str] = None
    inner: Optional["ExtractedType"] = None
    variants: Optional[list["ExtractedType"]] = None


class FieldDetails(BaseModel):
    """Raw constraint captures of a description, before numeric conversion."""
    default: Optional[str] = None
    min: Optional[str] = None
    max: Optional[str] = None


# --- Field descriptors ---

class FieldBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: Optional[str] = None
    required: Optional[bool] = None
    description: Optional[str] = None


class FieldInteger(FieldBase):
    type: Literal["integer"] = "integer"
    min: Optional[int] = None
    max: Optional[int] = None
    default: Optional[int] = None
    enum: Optional[list[int]] = None


class FieldFloat(FieldBase):
    type: Literal["float"] = "float"
    min: Optional[float] = None
    max: Optional[float] = None
    default: Optional[float] = None
    enum: Optional[list[float]] = None


class FieldString(FieldBase):
    type: Literal["string"] = "string"
    const: Optional[str] = None
    default: Optional[str] = None
    enum: Optional[list[str]] = None
    min_len: Optional[int] = pydantic.Field(default=None, alias="minLen")
    max_len: Optional[int] = pydantic.Field(default=None, alias="maxLen")
    semantic_type: Optional[str] = pydantic.Field(default=None, alias="semanticType")


class FieldBoolean(FieldBase):
    type: Literal["boolean"] = "boolean"
    const: Optional[bool] = None


class FieldArray(FieldBase):
    type: Literal["array"] = "array"
    array_of: "Field" = pydantic.Field(alias="arrayOf")


class Reference(BaseModel):
    name: str
    anchor: str


class FieldReference(FieldBase):
    type: Literal["reference"] = "reference"
    reference: Reference


class FieldOneOf(FieldBase):
    type: Literal["one_of"] = "one_of"
    variants: list["Field"] = pydantic.Field(min_length=2)


Field = Annotated[
    Union[
        FieldInteger,
        FieldFloat,
        FieldString,
        FieldBoolean,
        FieldArray,
        FieldReference,
        FieldOneOf,
    ],
    pydantic.Field(discriminator="type"),
]

FieldArray.model_rebuild()
FieldOneOf.model_rebuild()


# --- Section scraper output ---

class TypeInfo(BaseModel):
    """Type column of a table row: cell HTML plus the first link's href."""
    text: str
    href: Optional[str] = None


class TableRow(BaseModel):
    name: str
    type: TypeInfo
    required: Optional[str] = None   # "Yes" / "Optional" for method parameters only
    description: str = ""            # Cell HTML


class NavItem(BaseModel):
    text: str
    href: str
    children: list["NavItem"] = pydantic.Field(default_factory=list)


NavItem.model_rebuild()


class ParsedSection(BaseModel):
    anchor: str
    title: str
    type: Literal["Method", "Object", "Unknown"] = "Unknown"
    description: Optional[str] = None
    table: Optional[list[TableRow]] = None
    one_of: Optional[list[TypeInfo]] = None


# --- Final document ---

class DateObject(BaseModel):
    year: int
    month: int
    day: int


class Version(BaseModel):
    major: int
    minor: int
    release_date: DateObject


class Method(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    anchor: str
    description: Optional[str] = None
    parameters: list[Field] = pydantic.Field(default_factory=list)
    returns: Field
    has_multipart: bool = pydantic.Field(default=False, alias="hasMultipart")


class ObjectBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    anchor: str
    description: Optional[str] = None
    semantic_type: Optional[str] = pydantic.Field(default=None, alias="semanticType")


class ObjectFields(ObjectBase):
    type: Literal["fields"] = "fields"
    fields: list[Field]


class ObjectOneOf(ObjectBase):
    type: Literal["oneOf"] = "oneOf"
    one_of: list[Field] = pydantic.Field(alias="oneOf")


class ObjectFile(ObjectBase):
    type: Literal["file"] = "file"


class ObjectEnum(ObjectBase):
    type: Literal["enum"] = "enum"
    values: list[str]


class ObjectUnknown(ObjectBase):
    type: Literal["unknown"] = "unknown"


SchemaObject = Annotated[
    Union[ObjectFields, ObjectOneOf, ObjectFile, ObjectEnum, ObjectUnknown],
    pydantic.Field(discriminator="type"),
]


class CustomSchema(BaseModel):
    """Output of the assembler, the final pipeline product."""
    version: Version
    methods: list[Method] = pydantic.Field(default_factory=list)
    objects: list[SchemaObject] = pydantic.Field(default_factory=list)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)
