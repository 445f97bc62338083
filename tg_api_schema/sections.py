"""
Section scraper for the Bot API documentation page.

The page is a flat sequence of <h3>/<h4> headings, each h4 holding an
<a class="anchor" name="...">. A section runs from its h4 to the next one:
description paragraphs, then either a parameter/field table or a <ul> of the
types an abstract object can be.

Output: NavItem tree for the navigation, ParsedSection per h4.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .logger import get_module_logger
from .schemas import NavItem, ParsedSection, TableRow, TypeInfo

logger = get_module_logger("sections")

HEADING_PATTERN = re.compile(r"^h([34])$", re.IGNORECASE)


def _node_text(node) -> str:
    if node is None:
        return ""
    if isinstance(node, NavigableString):
        return str(node).strip()
    return node.get_text().strip()


def _own_text(elem: Tag) -> str:
    """Text of the element's direct text nodes (not of its child tags)."""
    return "".join(
        str(child) for child in elem.children
        if isinstance(child, NavigableString) and not isinstance(child, Comment)
    ).strip()


def _is_doc_table(elem: Optional[Tag]) -> bool:
    return elem is not None and elem.name == "table" and "table" in (elem.get("class") or [])


def _tags_after(node):
    return (sibling for sibling in node.next_siblings if isinstance(sibling, Tag))


def _next_tag(node) -> Optional[Tag]:
    return next(_tags_after(node), None)


def _starts_upper(text: str) -> bool:
    return bool(text) and text[0].isupper()


def _starts_lower(text: str) -> bool:
    return bool(text) and text[0].islower()


def parse_navigation(soup: BeautifulSoup) -> list[NavItem]:
    """
    Build the h3 → h4 navigation tree from the heading anchors.

    Top-level items without children are dropped unless the page has a
    single top-level item.
    """
    menu: list[NavItem] = []
    last_parent: Optional[NavItem] = None

    for anchor in soup.select("a.anchor"):
        parent = anchor.parent
        match = HEADING_PATTERN.match(parent.name or "")
        name = anchor.get("name")
        if not match or not name:
            continue

        item = NavItem(text=_node_text(anchor.next_sibling), href=f"#{name}")

        if match.group(1) == "3":
            menu.append(item)
            last_parent = item
        elif last_parent is not None:
            last_parent.children.append(item)

    return [item for item in menu if item.children or len(menu) == 1]


def _read_rows(table: Tag, section_type: str) -> list[TableRow]:
    rows = []

    for tr in table.select("tbody tr"):
        cells = tr.find_all("td")
        if section_type == "Method" and len(cells) < 3:
            continue
        if len(cells) < 2:
            continue

        type_link = cells[1].find("a")
        row = TableRow(
            name=cells[0].get_text().strip(),
            type=TypeInfo(
                text=cells[1].decode_contents().strip(),
                href=type_link.get("href") if type_link is not None else None,
            ),
        )

        if section_type == "Method":
            row.required = cells[2].get_text().strip()
            row.description = cells[3].decode_contents().strip() if len(cells) > 3 else ""
        else:
            row.description = cells[2].decode_contents().strip() if len(cells) > 2 else ""

        rows.append(row)

    return rows


def parse_anchor(soup: BeautifulSoup, anchor: Optional[Tag]) -> Optional[ParsedSection]:
    """
    Parse the section introduced by `anchor` (an <a name> inside an h4).

    Returns None when the anchor is missing, not in an h4, unnamed, or the
    heading has no title text.
    """
    if anchor is None:
        return None
    heading = anchor.parent
    if heading is None or heading.name != "h4":
        return None

    anchor_name = anchor.get("name")
    if not anchor_name:
        return None

    title = _own_text(heading)
    if not title:
        return None

    # --- Description: consecutive <p> siblings after the heading ---
    description_html = ""
    last_paragraph_text = ""
    last_description_node = heading
    node = _next_tag(heading)
    while node is not None and node.name == "p":
        description_html += str(node)
        last_paragraph_text = node.get_text()
        last_description_node = node
        node = _next_tag(node)
    after_description = node

    section = ParsedSection(
        anchor=f"#{anchor_name}",
        title=title,
        description=description_html.strip() or None,
    )

    if (
        after_description is not None
        and after_description.name == "ul"
        and "can be one of" in last_paragraph_text
    ):
        # Abstract object: the list names every concrete type
        section.one_of = []
        for li in after_description.find_all("li", recursive=False):
            for link in li.find_all("a", recursive=False):
                text = link.get_text().strip()
                if text:
                    section.one_of.append(TypeInfo(text=text, href=link.get("href")))
        section.type = "Object"
    else:
        table = after_description if _is_doc_table(after_description) else None
        if table is None:
            for sibling in _tags_after(last_description_node):
                if sibling.name == "h4":
                    break
                if _is_doc_table(sibling):
                    table = sibling
                    break

        if table is not None:
            headers = [th.get_text().strip() for th in table.select("thead th")]
            first_header = headers[0] if headers else ""
            if first_header == "Parameter":
                section.type = "Method"
            elif first_header == "Field":
                section.type = "Object"
            section.table = _read_rows(table, section.type)

    if section.type == "Unknown":
        # Objects are CamelCase, methods camelCase
        if _starts_upper(title):
            section.type = "Object"
        elif _starts_lower(title):
            section.type = "Method"

    logger.debug(f"Parsed section {title} ({section.type})")
    return section


def parse_sections(soup: BeautifulSoup, nav_items: list[NavItem]) -> list[ParsedSection]:
    """Parse every h4 section listed under the given navigation groups."""
    parsed = []

    for group in nav_items:
        for item in group.children:
            anchor = soup.find("a", attrs={"name": item.href.lstrip("#")})
            section = parse_anchor(soup, anchor)
            if section is not None:
                parsed.append(section)

    logger.info(f"Parsed {len(parsed)} sections from {len(nav_items)} groups")
    return parsed
