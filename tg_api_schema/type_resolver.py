"""
Type resolver: combines a table row's type column with its description.

The type column is short literal text ("Array of Integer",
'<a href="#inputfile">InputFile</a> or String') and is matched with regular
expressions. The description is prose and goes through the sentence parser
for defaults, ranges and enumerations.

Nothing here raises on unrecognised input: missing facets stay None and an
unknown type keyword without a link resolves to a plain string field.
"""

import math
import re
from typing import Optional

from .dom import fragment_text, load_fragment
from .logger import get_module_logger
from .schemas import (
    ExtractedType,
    Field,
    FieldArray,
    FieldBoolean,
    FieldDetails,
    FieldFloat,
    FieldInteger,
    FieldOneOf,
    FieldReference,
    FieldString,
    Reference,
    TypeInfo,
)
from .sentence import (
    extract_default,
    extract_min_max,
    extract_one_of,
    extract_return_type,
    extract_type_from_parts,
    parse_description_to_sentences,
)

logger = get_module_logger("type_resolver")

ARRAY_PATTERN = re.compile(r"^Array of (.+)$", re.IGNORECASE | re.DOTALL)
CONST_PATTERN = re.compile(r'always ["“]([^"“”]+)["”]')
QUOTED_PATTERN = re.compile(r'["“]([^"“”]*?)["”]')

FLOAT_KEYWORDS = ("Float", "Float number")


def _to_number(text: Optional[str], integer: bool):
    """Parse a captured number; None when absent, malformed, or not finite."""
    if text is None:
        return None
    try:
        value = int(text) if integer else float(text)
    except ValueError:
        return None
    if not integer and not math.isfinite(value):
        return None
    return value


def _is_number(text: str) -> bool:
    return _to_number(text, integer=False) is not None


def extract_type_and_ref(html: str) -> tuple[str, Optional[str]]:
    """Text and href of the first link in `html`, or its plain text and None."""
    root = load_fragment(html)
    link = root.find("a")
    if link is not None:
        return link.get_text().strip(), link.get("href")
    return root.get_text().strip(), None


def _links_of(html: str) -> list[tuple[str, Optional[str]]]:
    root = load_fragment(html)
    return [(a.get_text().strip(), a.get("href")) for a in root.find_all("a")]


def parse_field_details_sentence(description: str) -> FieldDetails:
    """Default value and range bounds of a description, as raw strings."""
    sentences = parse_description_to_sentences(description)
    bounds = extract_min_max(sentences) or {}
    return FieldDetails(
        default=extract_default(sentences),
        min=bounds.get("min"),
        max=bounds.get("max"),
    )


def detect_enum(description: str, numeric: bool = False) -> Optional[list[str]]:
    """
    Enumerated values of a description.

    Precedence: emoji images (string fields only), then the OneOf sentence
    patterns, then any quoted substrings of the plain text. Each stage needs
    at least two values; numeric fields also need every value to be a number.
    """
    if not numeric:
        root = load_fragment(description)
        alts = [img.get("alt") for img in root.select("img.emoji[alt]") if img.get("alt")]
        if len(alts) > 1:
            return alts

    values = extract_one_of(parse_description_to_sentences(description))
    if values and len(values) > 1 and (not numeric or all(_is_number(v) for v in values)):
        return values

    quoted = QUOTED_PATTERN.findall(fragment_text(description))
    if len(quoted) > 1 and (not numeric or all(_is_number(v) for v in quoted)):
        return quoted

    return None


def _numeric_field(model, description: Optional[str], integer: bool):
    if not description:
        return model()

    details = parse_field_details_sentence(description)
    low = _to_number(details.min, integer)
    high = _to_number(details.max, integer)
    default = _to_number(details.default, integer)

    enum = None
    candidates = detect_enum(description, numeric=True)
    if candidates:
        # Range bounds and the default sit in the same sentences as the
        # enumeration and would otherwise be picked up as members.
        taken = {v for v in (low, high, default) if v is not None}
        numbers = [_to_number(v, integer) for v in candidates]
        numbers = list(dict.fromkeys(n for n in numbers if n is not None and n not in taken))
        if len(numbers) > 1:
            enum = numbers

    return model(min=low, max=high, default=default, enum=enum)


def _string_field(description: Optional[str]) -> FieldString:
    if not description:
        return FieldString()

    m = CONST_PATTERN.search(fragment_text(description))
    const = m.group(1) if m else None

    details = parse_field_details_sentence(description)
    return FieldString(
        const=const,
        # A constant is never also a default
        default=details.default if const is None else None,
        enum=detect_enum(description, numeric=False),
        min_len=_to_number(details.min, integer=True),
        max_len=_to_number(details.max, integer=True),
    )


def _union_side(side: str, row_href: Optional[str]) -> Field:
    text, href = extract_type_and_ref(side)
    if href:
        return parse_type_text(TypeInfo(text=text, href=href))
    # The row's href belongs to this side only if it names it
    if row_href and row_href.lstrip("#").lower() == text.lower():
        return parse_type_text(TypeInfo(text=text, href=row_href))
    return parse_type_text(TypeInfo(text=side))


def parse_type_text(type_info: TypeInfo, description: Optional[str] = None) -> Field:
    """
    Resolve a type column (plus the row's description) into a Field.

    Args:
        type_info: Type cell HTML and the href of its first link
        description: Description cell HTML, used for constraints and enums

    Returns:
        Field without key/description (the assembler merges those)
    """
    text = type_info.text.strip()

    array_match = ARRAY_PATTERN.match(text)
    if array_match:
        inner_html = array_match.group(1)
        links = _links_of(inner_html)
        if len(links) > 1:
            # "Array of InputMediaAudio, InputMediaDocument, ... and InputMediaVideo"
            variants = [
                FieldReference(reference=Reference(name=name, anchor=href or f"#{name.lower()}"))
                for name, href in links
            ]
            return FieldArray(array_of=FieldOneOf(variants=variants))
        return FieldArray(array_of=parse_type_text(TypeInfo(text=inner_html)))

    if " or " in text:
        sides = [side.strip() for side in text.split(" or ")]
        return FieldOneOf(variants=[_union_side(side, type_info.href) for side in sides])

    name, href = extract_type_and_ref(text)
    href = href or type_info.href

    if name == "Integer":
        return _numeric_field(FieldInteger, description, integer=True)
    if name in FLOAT_KEYWORDS:
        return _numeric_field(FieldFloat, description, integer=False)
    if name == "String":
        return _string_field(description)
    if name == "Boolean":
        return FieldBoolean()
    if name == "True":
        return FieldBoolean(const=True)
    if name == "False":
        return FieldBoolean(const=False)
    if href:
        return FieldReference(reference=Reference(name=name, anchor=href))

    logger.debug(f"Unknown type '{name}' without link, using string")
    return FieldString()


# ── Return types ───────────────────────────────────────────────────────────

def _field_from_type_name(name: str, href: Optional[str]) -> Field:
    if name in ("Int", "Integer"):
        return FieldInteger()
    if name in FLOAT_KEYWORDS:
        return FieldFloat()
    if name == "String":
        return FieldString()
    if name == "Boolean":
        return FieldBoolean()
    if name == "True":
        return FieldBoolean(const=True)
    if name == "False":
        return FieldBoolean(const=False)
    return FieldReference(reference=Reference(name=name, anchor=href or f"#{name.lower()}"))


def _field_from_extracted(extracted: ExtractedType) -> Field:
    if extracted.kind == "array":
        return FieldArray(array_of=_field_from_extracted(extracted.inner))
    if extracted.kind == "or":
        variants = [_field_from_extracted(v) for v in extracted.variants]
        if len(variants) == 1:
            return variants[0]
        return FieldOneOf(variants=variants)
    return _field_from_type_name(extracted.name, extracted.href)


def resolve_return_type(description: str) -> Field:
    """
    Resolve a method's return type from its free-text description.

    "On success, the sent <a>Message</a> is returned" → reference Message,
    "Returns an Array of <a>Update</a> objects" → array of Update,
    "... is returned, otherwise <em>True</em> is returned" → one_of.
    Descriptions naming no type resolve to a plain string.
    """
    sentences = parse_description_to_sentences(description)
    parts = extract_return_type(sentences)
    extracted = extract_type_from_parts(parts) if parts else None

    if extracted is None:
        logger.debug("No return type clause found, using string")
        return FieldString()
    return _field_from_extracted(extracted)
