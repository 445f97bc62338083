"""
Description parser: turns documentation prose into sentences of typed parts.

Pipeline inside this module:
  HTML fragment → node walk (inline markup becomes Parts, text goes through
  tokenize()) → Sentence list → pattern sets → extracted values.

Parsing is deterministic and order-sensitive. Within a pattern set, exclusion
patterns come before the generic patterns they guard; reordering a set changes
what gets extracted.
"""

import re
from typing import Optional

from bs4 import Comment, NavigableString, Tag

from .dom import load_fragment
from .logger import get_module_logger
from .schemas import ExtractedType, Part, Pattern, SearchBy, Sentence, Token

logger = get_module_logger("sentence")

# Deeper element nesting than this is not walked
MAX_NODE_DEPTH = 200

QUOTE_CHARS = '"“”'

TOKEN_PATTERN = re.compile(
    r'(\.)'
    r'|([' + QUOTE_CHARS + r'])'
    r'|(\()'
    r'|(\))'
    r'|([^,\s.' + QUOTE_CHARS + r'()]+)'
)

NUMBER_PATTERN = re.compile(r"^\d+$")
PRODUCT_PATTERN = re.compile(r"^(\d+)\s*\*\s*(\d+)$")


# ── Tokenizer ──────────────────────────────────────────────────────────────

def tokenize(text: str) -> list[Token]:
    """
    Split plain text into word, dot, quote and parenthesis tokens.

    Commas and whitespace separate tokens but are never emitted, so
    "a, b, c" gives three word tokens. Each quote character is its own token.
    """
    tokens = []
    for m in TOKEN_PATTERN.finditer(text):
        if m.group(1) is not None:
            tokens.append(Token(kind="dot", text="."))
        elif m.group(2) is not None:
            tokens.append(Token(kind="quote", text=m.group(2)))
        elif m.group(3) is not None:
            tokens.append(Token(kind="lparen", text="("))
        elif m.group(4) is not None:
            tokens.append(Token(kind="rparen", text=")"))
        else:
            tokens.append(Token(kind="word", text=m.group(5)))
    return tokens


# ── Sentence builder ───────────────────────────────────────────────────────

# none → left → right → none
NEXT_QUOTE_STATE = {"none": "left", "left": "right", "right": "none"}

# Inline elements that become a single Part of the given kind
INLINE_PART_KINDS = {
    "a": "link",
    "em": "italic",
    "strong": "bold",
    "b": "bold",
    "code": "code",
}


class SentenceBuilder:
    """
    Walks one HTML fragment and accumulates Sentences.

    State: the Parts of the current sentence, the quote state, the index where
    the open quoted span started, and whether we are inside parentheses.
    """

    def __init__(self):
        self.sentences: list[Sentence] = []
        self.parts: list[Part] = []
        self.quote = "none"
        self.quote_start = 0
        self.paren = False

    def build(self, html: str) -> list[Sentence]:
        try:
            root = load_fragment(html)
        except RecursionError:
            logger.warning("Description nested too deeply to parse, skipping")
            return []
        return self._walk(root.children, 0)

    def _walk(self, nodes, depth: int) -> list[Sentence]:
        for node in nodes:
            self._process_node(node, depth)
        self._finalize_sentence()
        return self.sentences

    def _finalize_sentence(self):
        if self.parts:
            self.sentences.append(self.parts)
            self.parts = []

    def _collapse_quoted_parts(self):
        quoted = self.parts[self.quote_start:]
        del self.parts[self.quote_start:]
        combined = " ".join(p.inner for p in quoted)
        self.parts.append(Part(inner=combined, has_quotes=True))

    def _process_text(self, text: str):
        for token in tokenize(text):
            if token.kind == "lparen":
                self.paren = True
                continue
            if token.kind == "rparen":
                self.paren = False
                continue
            # Everything inside (...) is dropped
            if self.paren:
                continue

            if token.kind == "word":
                self.parts.append(Part(inner=token.text))
            elif token.kind == "dot":
                # A period inside an open quote ("e.g. x") does not end the sentence
                if self.quote != "left":
                    self._finalize_sentence()
            elif token.kind == "quote":
                self.quote = NEXT_QUOTE_STATE[self.quote]
                if self.quote == "left":
                    self.quote_start = len(self.parts)
                elif self.quote == "right":
                    self._collapse_quoted_parts()
                    self.quote = NEXT_QUOTE_STATE[self.quote]

    def _process_node(self, node, depth: int):
        if isinstance(node, Comment):
            return
        if isinstance(node, NavigableString):
            self._process_text(str(node))
            return
        if not isinstance(node, Tag) or self.paren:
            return
        if depth > MAX_NODE_DEPTH:
            logger.debug(f"Skipping <{node.name}> nested deeper than {MAX_NODE_DEPTH}")
            return

        tag = node.name.lower()

        if tag in INLINE_PART_KINDS:
            text = node.get_text().strip()
            # Empty anchors are dropped so they never render as stray links
            if text:
                kind = INLINE_PART_KINDS[tag]
                href = node.get("href", "") if kind == "link" else None
                self.parts.append(Part(inner=text, kind=kind, href=href))
        elif tag == "img":
            alt = node.get("alt", "")
            if alt:
                # An emoji inside an open quote is a quoted value
                self.parts.append(Part(inner=alt, has_quotes=self.quote == "left"))
        elif tag == "li":
            # Each item is read with fresh quote and paren state
            self._finalize_sentence()
            self.sentences.extend(SentenceBuilder()._walk(node.children, depth + 1))
        elif tag == "br":
            pass
        else:
            # <p> and other containers are read inline, no sentence break
            for child in node.children:
                self._process_node(child, depth + 1)


def parse_description_to_sentences(html: str) -> list[Sentence]:
    """
    Parse an HTML description into Sentences.

    A sentence ends at a period outside quotes and parentheses, or at the end
    of input. Each <li> is parsed as an independent sub-document.
    """
    return SentenceBuilder().build(html)


# ── Pattern sets ───────────────────────────────────────────────────────────

def word(w: str) -> SearchBy:
    return SearchBy(by="word", word=w)


def kind(k: str) -> SearchBy:
    return SearchBy(by="kind", kind=k)


def quotes() -> SearchBy:
    return SearchBy(by="quotes")


def pattern(parts: list[SearchBy], offset: int = 0, exclude: bool = False) -> Pattern:
    return Pattern(parts=parts, offset=offset, exclude=exclude)


PATTERN_SETS: dict[str, list[Pattern]] = {
    "ReturnType": [
        pattern([word("Returns"), word("the"), word("bot's"), word("Telegram")], exclude=True),
        pattern([word("Returns"), word("the"), word("list"), word("of")], exclude=True),
        pattern([word("Returns"), word("the"), word("amount"), word("of")], exclude=True),
        pattern([word("On"), word("success")]),
        pattern([word("Returns")]),
        pattern([word("returns")]),
        pattern([word("An")]),
        pattern([word("is"), word("returned")], offset=-3),
    ],
    "Default": [
        pattern([word("Defaults"), word("to")]),
        pattern([word("defaults"), word("to")]),
        pattern([word("must"), word("be"), kind("italic")], offset=-1),
        pattern([word("always"), quotes()], offset=-1),
    ],
    "MinMax": [
        pattern([word("Values"), word("between")]),
        pattern([word("characters")], offset=-2),
    ],
    "OneOf": [
        pattern([word("either")]),
        pattern([word("One"), word("of")]),
        pattern([word("one"), word("of")]),
        pattern([word("Can"), word("be")]),
        pattern([word("can"), word("be"), quotes()], offset=-1),
        pattern([quotes(), word("or"), quotes()], offset=-3),
        pattern([word("Choose"), word("one")]),
    ],
}


# ── Pattern matcher ────────────────────────────────────────────────────────

def _find_window(search: Pattern, sentence: Sentence, start: int = 0) -> int:
    """Index of the first window at or after `start` matching every predicate, or -1."""
    size = len(search.parts)
    for i in range(start, len(sentence) - size + 1):
        if all(p.matches(sentence[i + j]) for j, p in enumerate(search.parts)):
            return i
    return -1


def _capture_start(search: Pattern, index: int) -> int:
    return max(0, index + len(search.parts) + search.offset)


def match_pattern(pattern_set: str, sentences: list[Sentence]) -> Optional[Sentence]:
    """
    Return the captured tail of the first sentence matching `pattern_set`.

    Sentences are tried in order, and patterns in set order within each one.
    An exclusion match abandons the sentence; the first other match returns
    the sentence sliced from the pattern's capture start.
    """
    patterns = PATTERN_SETS[pattern_set]

    for sentence in sentences:
        for search in patterns:
            index = _find_window(search, sentence)
            if index == -1:
                continue
            if search.exclude:
                break
            return sentence[_capture_start(search, index):]

    return None


# ── Extractors ─────────────────────────────────────────────────────────────

def extract_default(sentences: list[Sentence]) -> Optional[str]:
    """Default value text ("Defaults to 100", "must be <em>X</em>", 'always "X"')."""
    result = match_pattern("Default", sentences)
    if not result:
        return None
    return result[0].inner


def extract_min_max(sentences: list[Sentence]) -> Optional[dict]:
    """Range bounds from "Values between 1-100" or "0-256 characters", as strings."""
    result = match_pattern("MinMax", sentences)
    if not result:
        return None

    bounds = result[0].inner.split("-")
    if len(bounds) < 2:
        return None

    low, high = bounds[0].strip(), bounds[1].strip()
    if not low or not high:
        return None
    return {"min": low, "max": high}


def _eval_product(expr: str) -> str:
    """Evaluate "<int> * <int>" (e.g. "6 * 3600" → "21600"); other text is returned as is."""
    m = PRODUCT_PATTERN.match(expr)
    if m:
        return str(int(m.group(1)) * int(m.group(2)))
    return expr


def _is_value_part(part: Part) -> bool:
    return (
        part.has_quotes
        or part.kind in ("italic", "code")
        or bool(NUMBER_PATTERN.match(part.inner))
    )


def _part_value(part: Part) -> str:
    return _eval_product(part.inner) if part.kind == "code" else part.inner


def _values_of(parts: list[Part]) -> list[str]:
    return [_part_value(p) for p in parts if _is_value_part(p)]


def extract_one_of(sentences: list[Sentence]) -> Optional[list[str]]:
    """
    Enumerated values ("one of "a", "b", "c"", "either <em>x</em> or <em>y</em>").

    Unlike match_pattern() this gathers every value-like part of the capture:
    quoted, italic, code, or a plain integer. When the whole sentence holds
    more value-like parts than the capture (values listed before the trigger
    word), the whole-sentence list wins.
    """
    patterns = PATTERN_SETS["OneOf"]

    for sentence in sentences:
        full_values = _values_of(sentence)
        for search in patterns:
            index = _find_window(search, sentence)
            while index != -1:
                values = _values_of(sentence[_capture_start(search, index):])
                if len(full_values) > len(values):
                    values = full_values

                unique = list(dict.fromkeys(values))
                if unique:
                    return unique
                index = _find_window(search, sentence, index + 1)

    return None


def extract_return_type(sentences: list[Sentence]) -> Optional[Sentence]:
    """Part slice of the clause naming a method's return type."""
    return match_pattern("ReturnType", sentences)


# ── Type tree from parts ───────────────────────────────────────────────────

def strip_plural_ending(name: str) -> str:
    """
    Drop the final "s" of a name ending in "es".

    "Messages" → "Message", but also "Statuses" → "Statuse"; names ending in
    a bare "s" ("Users") are left alone.
    """
    if name.endswith("es"):
        return name[:-1]
    return name


def _is_capitalized(text: str) -> bool:
    return bool(text) and text[0].isupper()


ARRAY_LEADS = (
    ("an", "array", "of"),
    ("a", "list", "of"),
    ("the", "list", "of"),
)


def extract_type_from_parts(parts: list[Part]) -> Optional[ExtractedType]:
    """
    Build a type tree from the parts of a return-type clause.

    "X is returned, otherwise Y" gives a union of every capitalised part.
    Otherwise the first capitalised part names the type; "Array of X" and
    "an array of X" / "a list of X" wrap it in an array.
    """
    if not parts:
        return None

    if any(p.inner == "otherwise" for p in parts):
        variants = [
            ExtractedType(kind="single", name=strip_plural_ending(p.inner), href=p.href)
            for p in parts
            if p.inner != "otherwise" and _is_capitalized(p.inner)
        ]
        if not variants:
            return None
        return ExtractedType(kind="or", variants=variants)

    pos = next((i for i, p in enumerate(parts) if _is_capitalized(p.inner)), -1)
    if pos == -1:
        return None

    part = parts[pos]
    name = strip_plural_ending(part.inner)

    if name == "Array":
        rest = parts[pos + 1:]
        if rest and rest[0].inner == "of":
            rest = rest[1:]
        inner = extract_type_from_parts(rest)
        if inner is None:
            return None
        return ExtractedType(kind="array", inner=inner)

    if pos >= 3:
        lead = tuple(p.inner for p in parts[pos - 3:pos])
        if lead in ARRAY_LEADS:
            inner = extract_type_from_parts(parts[pos:])
            if inner is not None:
                return ExtractedType(kind="array", inner=inner)

    return ExtractedType(kind="single", name=name, href=part.href)
