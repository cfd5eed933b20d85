# === FILE: site_mapper/parser/html_parser.py ===
"""HTML scanning for SiteMapper.

The crawler only needs two things from a document:

* title: text of the first ``<title>`` element, ``""`` if there is none;
* hrefs: the ``href`` of every ``<a>`` element in document order, with
  ``None`` standing in for anchors that have no ``href`` at all.

Resolution, host filtering and deduplication are the crawler's business, so
hrefs are returned verbatim.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional, Union

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Comment, NavigableString, Tag

from site_mapper.errors import ParseError

__all__: Sequence[str] = ("ScannedDocument", "scan_html")


@dataclass(slots=True)
class ScannedDocument:
    """Title and raw anchor targets of one HTML document."""

    title: str = ""
    hrefs: list[Optional[str]] = field(default_factory=list)


def _title_text(tag: Tag) -> Optional[str]:
    first = next(iter(tag.children), None)
    if isinstance(first, NavigableString) and not isinstance(first, Comment):
        return str(first).strip()
    return None


def scan_html(markup: Union[str, bytes]) -> ScannedDocument:
    """Parse *markup* and walk every node depth first.

    Duplicate attributes keep their first value. Raises :class:`ParseError`
    if the tree builder rejects the markup.
    """
    try:
        soup = BeautifulSoup(markup, "html.parser", on_duplicate_attribute="ignore")
    except (ParserRejectedMarkup, AssertionError) as exc:
        raise ParseError(f"unable to parse HTML: {exc}") from exc

    doc = ScannedDocument()
    title_found = False
    for node in soup.descendants:
        if not isinstance(node, Tag):
            continue
        if node.name == "title" and not title_found:
            text = _title_text(node)
            if text is not None:
                doc.title = text
                title_found = True
        elif node.name == "a":
            href = node.get("href")
            doc.hrefs.append(href if isinstance(href, str) else None)
    return doc
