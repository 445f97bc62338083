"""
HTML → Markdown rendering for descriptions.

A MarkdownConverter is constructed explicitly and passed to the assembler;
nothing here is module-level state. Rendering is markdownify's, configured
like the documentation's own Markdown: "-" bullets, "_" emphasis, "**" strong,
and links and images made absolute against the documentation page.
"""

import re
from typing import Optional

import markdownify

from .dom import load_fragment
from .logger import get_module_logger

logger = get_module_logger("markdown")

DEFAULT_BASE_URL = "https://core.telegram.org"
DEFAULT_PAGE_PATH = "/bots/api"

BLANK_LINES = re.compile(r"\n{3,}")


def _tidy_line(line: str) -> str:
    # Two trailing spaces are a hard line break
    stripped = line.strip()
    if stripped and line.endswith("  "):
        return stripped + "  "
    return stripped


class MarkdownConverter(markdownify.MarkdownConverter):
    """Renders description HTML as Markdown with absolute documentation links."""

    class Options(markdownify.MarkdownConverter.DefaultOptions):
        bullets = "-"
        strong_em_symbol = markdownify.ASTERISK
        newline_style = markdownify.SPACES
        # A URL used as link text stays a [url](url) link
        autolinks = False
        escape_misc = False

    def __init__(self, base_url: str = DEFAULT_BASE_URL, page_path: str = DEFAULT_PAGE_PATH, **options):
        super().__init__(**options)
        self.base_url = base_url.rstrip("/")
        self.page_url = self.base_url + page_path

    def resolve_href(self, href: str) -> str:
        """Make in-page anchors and root-relative paths absolute."""
        if href.startswith("#"):
            return self.page_url + href
        if href.startswith("//"):
            return "https:" + href
        if href.startswith("/"):
            return self.base_url + href
        return href

    def convert(self, html: Optional[str]) -> Optional[str]:
        """Convert an HTML fragment; None for empty input."""
        if not html:
            return None
        text = self.convert_soup(load_fragment(html))
        text = "\n".join(_tidy_line(line) for line in text.split("\n"))
        return BLANK_LINES.sub("\n\n", text).strip()

    # Emphasis is "_x_" while strong stays "**x**"
    convert_em = markdownify.abstract_inline_conversion(lambda self: "_")
    convert_i = convert_em

    def convert_a(self, el, text, *args, **kwargs):
        href = el.get("href")
        if href:
            el["href"] = self.resolve_href(href)
        return super().convert_a(el, text, *args, **kwargs)

    def convert_img(self, el, text, *args, **kwargs):
        src = el.get("src")
        if src:
            el["src"] = self.resolve_href(src)
        return super().convert_img(el, text, *args, **kwargs)
