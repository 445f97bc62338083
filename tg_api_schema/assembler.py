"""
Schema assembler: walks parsed sections and builds the CustomSchema.

Per table row it calls the type resolver, then applies the description
markers that need the whole row (currency codes, file uploads, formattable
text), merges key / required / Markdown description, and finally marks
formattable strings from sibling field names. It also injects the objects
that the page describes only in prose (API response wrappers, currencies).
"""

from typing import Optional

from .dom import fragment_text
from .logger import get_module_logger
from .markdown import MarkdownConverter
from .schemas import (
    CustomSchema,
    Field,
    FieldBoolean,
    FieldInteger,
    FieldOneOf,
    FieldReference,
    FieldString,
    Method,
    ObjectEnum,
    ObjectFields,
    ObjectFile,
    ObjectOneOf,
    ObjectUnknown,
    ParsedSection,
    Reference,
    TableRow,
    Version,
)
from .type_resolver import parse_type_text, resolve_return_type

logger = get_module_logger("assembler")

CURRENCY_MARKER = "ISO 4217"
SENDING_FILES_MARKER = "More information on Sending Files"
FORMATTABLE_MARKER = "after entities parsing"
UPDATE_TYPE_MARKER = "update type"

MARKUP_OBJECTS = {
    "InlineKeyboardMarkup",
    "ReplyKeyboardMarkup",
    "ReplyKeyboardRemove",
    "ForceReply",
}

# References that are sent as multipart/form-data
FILE_UPLOAD_EXACT = {"InputFile", "InputSticker"}
FILE_UPLOAD_PREFIXES = ("InputMedia", "InputPaidMedia", "InputProfilePhoto", "InputStoryContent")

RESPONSE_ANCHOR = "#making-requests"


def _reference(name: str, anchor: Optional[str] = None) -> FieldReference:
    return FieldReference(reference=Reference(name=name, anchor=anchor or f"#{name.lower()}"))


def maybe_file_to_send(field: Field) -> bool:
    """True if the field (or an array item / union variant) can carry an uploaded file."""
    if field.type == "reference":
        name = field.reference.name
        return name in FILE_UPLOAD_EXACT or name.startswith(FILE_UPLOAD_PREFIXES)
    if field.type == "array":
        return maybe_file_to_send(field.array_of)
    if field.type == "one_of":
        return any(maybe_file_to_send(v) for v in field.variants)
    return False


def _apply_description_markers(field: Field, text: str) -> Field:
    """Rewrite or tag a resolved field using phrases of its description."""
    if field.type == "string":
        if CURRENCY_MARKER in text:
            return _reference("Currencies")
        if SENDING_FILES_MARKER in text:
            return FieldOneOf(variants=[_reference("InputFile"), field])
        if FORMATTABLE_MARKER in text:
            return field.model_copy(update={"semantic_type": "formattable"})
    elif field.type == "array" and field.array_of.type == "string":
        if UPDATE_TYPE_MARKER in text:
            inner = field.array_of.model_copy(update={"semantic_type": "updateType"})
            return field.model_copy(update={"array_of": inner})
    return field


def _is_required(row: TableRow, text: str) -> bool:
    if row.required is not None:
        return row.required.strip().lower() == "yes"
    # Object fields have no Required column; optional ones say so first
    return not text.startswith("Optional")


def table_row_to_field(row: TableRow, converter: Optional[MarkdownConverter] = None) -> Field:
    """Resolve one parameter/field table row into a complete Field."""
    converter = converter or MarkdownConverter()
    text = fragment_text(row.description)

    field = parse_type_text(row.type, row.description)
    field = _apply_description_markers(field, text)

    required = _is_required(row, text)
    if getattr(field, "const", None) is not None:
        required = True
    elif getattr(field, "default", None) is not None:
        required = False

    return field.model_copy(update={
        "key": row.name,
        "required": required,
        "description": converter.convert(row.description),
    })


def apply_formattable_siblings(fields: list[Field], include_entities: bool) -> list[Field]:
    """
    Mark string fields as formattable when a sibling configures their formatting.

    `<key>_parse_mode` always counts; `<key>_entities` only for method
    parameters, since response objects carry entities for every text field.
    """
    keys = {f.key for f in fields}
    marked = []

    for field in fields:
        if field.type == "string" and field.key:
            has_sibling = f"{field.key}_parse_mode" in keys or (
                include_entities and f"{field.key}_entities" in keys
            )
            if has_sibling:
                field = field.model_copy(update={"semantic_type": "formattable"})
        marked.append(field)

    return marked


def _one_of_description(section: ParsedSection, converter: MarkdownConverter) -> Optional[str]:
    description = converter.convert(section.description)
    links = [
        f"- [{t.text}]({converter.resolve_href(t.href)})" if t.href else f"- {t.text}"
        for t in section.one_of or []
    ]
    if not links:
        return description
    return "\n\n".join(part for part in (description, "\n".join(links)) if part)


def _build_method(section: ParsedSection, converter: MarkdownConverter) -> Method:
    parameters = [table_row_to_field(row, converter) for row in section.table or []]
    parameters = apply_formattable_siblings(parameters, include_entities=True)

    return Method(
        name=section.title,
        anchor=section.anchor,
        description=converter.convert(section.description),
        parameters=parameters,
        returns=resolve_return_type(section.description or ""),
        has_multipart=any(maybe_file_to_send(p) for p in parameters),
    )


def _build_object(section: ParsedSection, converter: MarkdownConverter):
    common = {
        "name": section.title,
        "anchor": section.anchor,
        "semantic_type": "markup" if section.title in MARKUP_OBJECTS else None,
    }

    if section.one_of:
        return ObjectOneOf(
            description=_one_of_description(section, converter),
            one_of=[parse_type_text(t) for t in section.one_of],
            **common,
        )

    description = converter.convert(section.description)
    fields = [table_row_to_field(row, converter) for row in section.table or []]
    if fields:
        fields = apply_formattable_siblings(fields, include_entities=False)
        return ObjectFields(description=description, fields=fields, **common)
    if section.title == "InputFile":
        return ObjectFile(description=description, **common)
    return ObjectUnknown(description=description, **common)


def _response_objects() -> list:
    """Response wrappers described only in the "Making requests" prose."""
    ok = ObjectFields(
        name="APIResponseOk",
        anchor=RESPONSE_ANCHOR,
        description="Successful response: `ok` is true and the result is in `result`.",
        fields=[
            FieldBoolean(key="ok", const=True, required=True),
            FieldString(key="result", required=True, description="The result of the query."),
        ],
    )
    error = ObjectFields(
        name="APIResponseError",
        anchor=RESPONSE_ANCHOR,
        description="Unsuccessful response: `ok` is false and the error is explained in `description`.",
        fields=[
            FieldBoolean(key="ok", const=False, required=True),
            FieldString(key="description", required=True,
                        description="A human-readable description of the result."),
            FieldInteger(key="error_code", required=True,
                         description="Error code; subject to change in the future."),
            _reference("ResponseParameters").model_copy(update={
                "key": "parameters",
                "required": False,
                "description": "Helps to automatically handle the error.",
            }),
        ],
    )
    response = ObjectOneOf(
        name="APIResponse",
        anchor=RESPONSE_ANCHOR,
        description="Every Bot API response is one of these two objects.",
        one_of=[_reference("APIResponseOk"), _reference("APIResponseError")],
    )
    return [ok, error, response]


def to_custom_schema(
    version: Version,
    sections: list[ParsedSection],
    currencies: Optional[list[str]] = None,
    converter: Optional[MarkdownConverter] = None,
) -> CustomSchema:
    """
    Assemble the final schema document.

    Args:
        version: Parsed version header
        sections: Sections from the scraper
        currencies: Currency codes for the Currencies enum (omitted if empty)
        converter: Markdown converter for descriptions

    Returns:
        CustomSchema with methods, parsed objects and injected objects
    """
    converter = converter or MarkdownConverter()
    schema = CustomSchema(version=version)

    for section in sections:
        if section.type == "Method":
            schema.methods.append(_build_method(section, converter))
        elif section.type == "Object":
            schema.objects.append(_build_object(section, converter))

    schema.objects.extend(_response_objects())

    if currencies:
        schema.objects.append(ObjectEnum(
            name="Currencies",
            anchor="#currencies",
            description="Supported currencies (ISO 4217 codes plus Telegram Stars).",
            values=list(currencies),
        ))

    logger.info(f"Assembled {len(schema.methods)} methods and {len(schema.objects)} objects")
    return schema
