"""
Tests for the description parser: tokenizer, sentence builder, pattern
matcher and extractors.
"""

import pytest

from tg_api_schema.schemas import ExtractedType, Part
from tg_api_schema.sentence import (
    extract_default,
    extract_min_max,
    extract_one_of,
    extract_return_type,
    extract_type_from_parts,
    match_pattern,
    parse_description_to_sentences,
    strip_plural_ending,
    tokenize,
)


def words(sentence):
    return [p.inner for p in sentence]


# --- Tokenizer ---

def test_tokenize_words():
    assert [(t.kind, t.text) for t in tokenize("hello world")] == [
        ("word", "hello"),
        ("word", "world"),
    ]


def test_tokenize_dot_is_separate_token():
    assert [(t.kind, t.text) for t in tokenize("hello. world")] == [
        ("word", "hello"),
        ("dot", "."),
        ("word", "world"),
    ]


def test_tokenize_parentheses():
    assert [t.kind for t in tokenize("hello (world)")] == ["word", "lparen", "word", "rparen"]


def test_tokenize_skips_commas_and_spaces():
    assert [t.text for t in tokenize("a, b, c")] == ["a", "b", "c"]


@pytest.mark.parametrize("text", ['"hello"', "“hello”"])
def test_tokenize_quotes(text):
    assert [t.kind for t in tokenize(text)] == ["quote", "word", "quote"]


def test_tokenize_keeps_dashes_inside_words():
    assert [t.text for t in tokenize("1-4096 characters")] == ["1-4096", "characters"]


# --- Sentence builder ---

def test_sentences_split_on_period():
    sentences = parse_description_to_sentences("First sentence. Second sentence.")
    assert [words(s) for s in sentences] == [["First", "sentence"], ["Second", "sentence"]]


def test_parenthesized_text_is_dropped():
    sentences = parse_description_to_sentences("Hello (really?), world.")
    assert len(sentences) == 1
    assert words(sentences[0]) == ["Hello", "world"]


def test_markup_inside_parentheses_is_dropped():
    sentences = parse_description_to_sentences(
        'Send it (see <a href="#formatting-options">formatting</a>) now.'
    )
    assert words(sentences[0]) == ["Send", "it", "now"]


def test_quoted_text_collapses_into_one_part():
    sentences = parse_description_to_sentences('The value is "hello world" always.')
    assert len(sentences) == 1
    quoted = [p for p in sentences[0] if p.has_quotes]
    assert [p.inner for p in quoted] == ["hello world"]


def test_period_inside_quotes_does_not_split():
    sentences = parse_description_to_sentences('The value "e.g. something" is valid.')
    assert len(sentences) == 1


def test_unterminated_quote_keeps_parts_uncollapsed():
    sentences = parse_description_to_sentences('Starts with "open quote')
    assert words(sentences[0]) == ["Starts", "with", "open", "quote"]
    assert not any(p.has_quotes for p in sentences[0])


@pytest.mark.parametrize("html,kind,inner", [
    ("Use <code>getMe</code> method.", "code", "getMe"),
    ("Returns <em>True</em> on success.", "italic", "True"),
    ("<strong>Bold</strong> text here.", "bold", "Bold"),
    ("<b>Bold</b> text here.", "bold", "Bold"),
])
def test_inline_markup_parts(html, kind, inner):
    sentence = parse_description_to_sentences(html)[0]
    part = next(p for p in sentence if p.kind == kind)
    assert part.inner == inner
    assert part.href is None


def test_link_part_keeps_href():
    sentence = parse_description_to_sentences(
        'Returns a <a href="#message">Message</a> object.'
    )[0]
    link = next(p for p in sentence if p.kind == "link")
    assert link.inner == "Message"
    assert link.href == "#message"


def test_empty_link_is_dropped():
    sentence = parse_description_to_sentences('See <a href="#x"></a> this.')[0]
    assert words(sentence) == ["See", "this"]


def test_img_alt_becomes_part():
    sentence = parse_description_to_sentences(
        'The emoji <img class="emoji" alt="\U0001F44D"> is nice.'
    )[0]
    emoji = next(p for p in sentence if p.inner == "\U0001F44D")
    assert emoji.kind == "word"
    assert not emoji.has_quotes


def test_img_inside_quotes_is_a_quoted_part():
    sentence = parse_description_to_sentences(
        'One of "<img class="emoji" alt="\U0001F3B2">", "<img class="emoji" alt="\U0001F3AF">"'
    )[0]
    assert [p.inner for p in sentence if p.has_quotes] == ["\U0001F3B2", "\U0001F3AF"]


def test_list_items_are_separate_sentences():
    sentences = parse_description_to_sentences(
        "<p>Intro text</p><ul><li>first item</li><li>second item</li></ul>"
    )
    assert [words(s) for s in sentences] == [
        ["Intro", "text"],
        ["first", "item"],
        ["second", "item"],
    ]


def test_nested_list_items_keep_their_sentences():
    sentences = parse_description_to_sentences(
        "<ul><li>outer item<ul><li>inner item</li></ul></li></ul>"
    )
    assert [words(s) for s in sentences] == [
        ["outer", "item"],
        ["inner", "item"],
    ]


def test_deeply_nested_list_returns_normally():
    html = "<ul><li>" * 300 + "x" + "</li></ul>" * 300
    sentences = parse_description_to_sentences(html)
    assert isinstance(sentences, list)
    # Nodes past the depth limit are not walked
    assert all(words(s) != ["x"] for s in sentences)


def test_comments_are_ignored():
    sentence = parse_description_to_sentences("Keep <!-- hidden --> this")[0]
    assert words(sentence) == ["Keep", "this"]


def test_empty_description_has_no_sentences():
    assert parse_description_to_sentences("") == []


# --- Default ---

@pytest.mark.parametrize("html,expected", [
    ("Defaults to 100.", "100"),
    ("Limit. defaults to 50.", "50"),
    ("The format must be <em>HTML</em>.", "HTML"),
    ('The status is always "creator".', "creator"),
    ("No default here.", None),
])
def test_extract_default(html, expected):
    assert extract_default(parse_description_to_sentences(html)) == expected


# --- MinMax ---

@pytest.mark.parametrize("html,expected", [
    ("Values between 1-100 are accepted.", {"min": "1", "max": "100"}),
    ("Must be 0-256 characters long.", {"min": "0", "max": "256"}),
    ("No range here.", None),
    ("Values between invalid values", None),
])
def test_extract_min_max(html, expected):
    assert extract_min_max(parse_description_to_sentences(html)) == expected


# --- OneOf ---

@pytest.mark.parametrize("html,expected", [
    ('Can be one of "a", "b", "c".', ["a", "b", "c"]),
    ('Can be "html" or "markdown".', ["html", "markdown"]),
    ('Must be either "male" or "female".', ["male", "female"]),
    ("One of 1, 5, 10, 50, 100.", ["1", "5", "10", "50", "100"]),
    (
        "must be one of <code>6 * 3600</code>, <code>12 * 3600</code>, "
        "<code>86400</code>, or <code>2 * 86400</code>",
        ["21600", "43200", "86400", "172800"],
    ),
    ("Nothing to choose from.", None),
])
def test_extract_one_of(html, expected):
    assert extract_one_of(parse_description_to_sentences(html)) == expected


def test_extract_one_of_deduplicates():
    sentences = parse_description_to_sentences('Can be "a", "b" or "a".')
    assert extract_one_of(sentences) == ["a", "b"]


def test_extract_one_of_prefers_whole_sentence_values():
    # Values listed before the trigger phrase are still collected
    sentences = parse_description_to_sentences('"private", "group" or "channel" can be "supergroup"')
    assert extract_one_of(sentences) == ["private", "group", "channel", "supergroup"]


# --- ReturnType ---

def test_return_type_on_success():
    parts = extract_return_type(parse_description_to_sentences(
        'On success, a <a href="#message">Message</a> object is returned.'
    ))
    link = next(p for p in parts if p.kind == "link")
    assert link.inner == "Message"


def test_return_type_skips_excluded_sentence():
    parts = extract_return_type(parse_description_to_sentences(
        'Returns the list of gifts. Returns a <a href="#gifts">Gifts</a> object.'
    ))
    assert next(p for p in parts if p.kind == "link").inner == "Gifts"


def test_return_type_skips_amount_sentence():
    parts = extract_return_type(parse_description_to_sentences(
        'Returns the amount of Telegram Stars owned by the bot. '
        'Returns a <a href="#staramount">StarAmount</a> object.'
    ))
    assert next(p for p in parts if p.kind == "link").inner == "StarAmount"


def test_return_type_amount_sentence_alone_is_excluded():
    parts = extract_return_type(parse_description_to_sentences(
        "Returns the amount of Telegram Stars owned by the bot."
    ))
    assert parts is None


def test_return_type_bot_telegram_star_is_excluded():
    parts = extract_return_type(parse_description_to_sentences(
        "Returns the bot's Telegram Star transactions in chronological order."
    ))
    assert parts is None


def test_return_type_is_returned_reaches_back():
    parts = extract_return_type(parse_description_to_sentences("True is returned on success."))
    assert words(parts) == ["True", "is", "returned", "on", "success"]


# --- Pattern matching ---

def test_match_pattern_negative_offset():
    result = match_pattern("MinMax", parse_description_to_sentences("Must be 0-4096 characters long."))
    assert result[0].inner == "0-4096"


def test_match_pattern_exclusion_abandons_sentence():
    assert match_pattern("ReturnType", parse_description_to_sentences(
        "Returns the list of something nice."
    )) is None


def test_match_pattern_first_matching_sentence_wins():
    result = match_pattern("Default", parse_description_to_sentences(
        "Defaults to 1. Defaults to 2."
    ))
    assert words(result) == ["1"]


def test_match_pattern_without_match():
    assert match_pattern("OneOf", parse_description_to_sentences("Plain text.")) is None


# --- Type tree ---

@pytest.mark.parametrize("name,expected", [
    ("Messages", "Message"),
    ("Statuses", "Statuse"),
    ("Users", "Users"),
    ("Message", "Message"),
])
def test_strip_plural_ending(name, expected):
    assert strip_plural_ending(name) == expected


def test_extract_type_single():
    parts = [
        Part(inner="a"),
        Part(inner="Message", kind="link", href="#message"),
        Part(inner="object"),
    ]
    assert extract_type_from_parts(parts) == ExtractedType(kind="single", name="Message", href="#message")


def test_extract_type_array():
    parts = [
        Part(inner="Array"),
        Part(inner="of"),
        Part(inner="Update", kind="link", href="#update"),
    ]
    assert extract_type_from_parts(parts) == ExtractedType(
        kind="array",
        inner=ExtractedType(kind="single", name="Update", href="#update"),
    )


@pytest.mark.parametrize("lead", [("an", "array", "of"), ("a", "list", "of"), ("the", "list", "of")])
def test_extract_type_lowercase_array_leads(lead):
    parts = [Part(inner=w) for w in lead] + [Part(inner="ChatMember"), Part(inner="objects")]
    result = extract_type_from_parts(parts)
    assert result.kind == "array"
    assert result.inner.name == "ChatMember"


def test_extract_type_otherwise_union():
    parts = [
        Part(inner="Message", kind="link", href="#message"),
        Part(inner="is"),
        Part(inner="returned"),
        Part(inner="otherwise"),
        Part(inner="True", kind="italic"),
    ]
    result = extract_type_from_parts(parts)
    assert result.kind == "or"
    assert [v.name for v in result.variants] == ["Message", "True"]


def test_extract_type_without_capitalised_part():
    assert extract_type_from_parts([Part(inner="basic"), Part(inner="information")]) is None
    assert extract_type_from_parts([]) is None
