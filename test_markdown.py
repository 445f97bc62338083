"""
Tests for description HTML → Markdown rendering.
"""

import markdownify
import pytest

from tg_api_schema.markdown import MarkdownConverter


@pytest.fixture
def converter():
    return MarkdownConverter()


@pytest.mark.parametrize("html,expected", [
    ('<a href="#message">Message</a>', "[Message](https://core.telegram.org/bots/api#message)"),
    ('<a href="/bots/api">API</a>', "[API](https://core.telegram.org/bots/api)"),
    ('<a href="https://example.com/x">x</a>', "[x](https://example.com/x)"),
    ("<em>Optional</em>. Username", "_Optional_. Username"),
    ("<strong>Bold</strong> text", "**Bold** text"),
    ("<i>Note</i> this", "_Note_ this"),
    ("<b>Bold</b> text", "**Bold** text"),
    ("Use <code>getMe</code>", "Use `getMe`"),
    ("Hello\n    world", "Hello world"),
])
def test_inline_markup(converter, html, expected):
    assert converter.convert(html) == expected


def test_protocol_relative_image(converter):
    html = (
        '<img class="emoji" src="//telegram.org/img/emoji/40/F09F8EB2.png" '
        'width="20" height="20" alt="\U0001F3B2">'
    )
    assert converter.convert(html) == "![\U0001F3B2](https://telegram.org/img/emoji/40/F09F8EB2.png)"


def test_all_images_in_sentence_are_absolute(converter):
    html = (
        'Emoji, must be one of <img class="emoji" src="//telegram.org/img/emoji/40/F09F8EB2.png" alt="\U0001F3B2">, '
        '<img class="emoji" src="//telegram.org/img/emoji/40/F09F8EAF.png" alt="\U0001F3AF">'
    )
    result = converter.convert(html)
    assert "https://telegram.org/img/emoji/40/F09F8EB2.png" in result
    assert "https://telegram.org/img/emoji/40/F09F8EAF.png" in result
    assert "](//" not in result


def test_empty_link_is_skipped(converter):
    assert converter.convert('<a href="https://core.telegram.org/stickers#animation-requirements"></a>') == ""


def test_empty_link_before_real_link(converter):
    url = "https://core.telegram.org/stickers#animation-requirements"
    result = converter.convert(f'see <a href="{url}"></a><a href="{url}">{url}</a> for requirements')
    assert "[](" not in result
    assert f"[{url}]({url})" in result


def test_paragraphs_are_separated_by_blank_line(converter):
    assert converter.convert("<p>First.</p>\n<p>Second.</p>") == "First.\n\nSecond."


def test_list_items(converter):
    html = '<p>It can be one of</p><ul><li><a href="#a">A</a></li><li>B</li></ul>'
    assert converter.convert(html) == (
        "It can be one of\n\n- [A](https://core.telegram.org/bots/api#a)\n- B"
    )


def test_line_break_keeps_hard_break(converter):
    assert converter.convert("Line one<br>Line two") == "Line one  \nLine two"


def test_blockquote(converter):
    assert converter.convert("<blockquote>Note this</blockquote>") == "> Note this"


@pytest.mark.parametrize("html", [None, ""])
def test_empty_input(converter, html):
    assert converter.convert(html) is None


def test_custom_base_url():
    converter = MarkdownConverter(base_url="https://example.org/", page_path="/docs")
    assert converter.resolve_href("#x") == "https://example.org/docs#x"
    assert converter.resolve_href("/y") == "https://example.org/y"
    assert converter.resolve_href("//cdn.example.org/z.png") == "https://cdn.example.org/z.png"


def test_converter_extends_markdownify():
    converter = MarkdownConverter()
    assert isinstance(converter, markdownify.MarkdownConverter)
    assert converter.options["bullets"] == "-"
