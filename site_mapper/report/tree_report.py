# site_mapper/report/tree_report.py
"""
Текстовый отчёт SiteMapper: граф страниц в виде дерева с отступами.

The graph may contain cycles, so every page is expanded at most once.
Visited pages are tracked by identity, the same way the crawler deduplicates
them. Links to pages already shown elsewhere are back references: hidden by
default, printed with :data:`BACKREF_MARKER` when requested.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Set, Tuple

from site_mapper.crawler.models import Page

__all__ = ("BACKREF_MARKER", "TreeNode", "build_tree", "render_tree")

BACKREF_MARKER = "(🔙 lower or already parsed page)"


@dataclass(slots=True)
class TreeNode:
    text: str
    children: List[TreeNode] = field(default_factory=list)

    def add(self, text: str) -> TreeNode:
        child = TreeNode(text)
        self.children.append(child)
        return child


def page_label(page: Page) -> str:
    return f"{page.url} ({page.title})"


def error_label(page: Page) -> str:
    reason = page.error if page.error is not None else "not crawled"
    return f"{page.url} (parse error: {reason})"


def build_tree(root: Page, show_backrefs: bool = False) -> TreeNode:
    """
    Lay *root*'s graph out as a tree.

    All links of a page are placed before any of them is expanded, so a page
    sits at the shallowest position that reaches it first.
    """
    tree = TreeNode(page_label(root))
    visited: Set[int] = {id(root)}
    stack: List[Tuple[Page, TreeNode]] = [(root, tree)]

    while stack:
        page, node = stack.pop()
        expand: List[Tuple[Page, TreeNode]] = []
        for link in page.links:
            if id(link) in visited:
                if show_backrefs:
                    node.add(f"{page_label(link)} {BACKREF_MARKER}")
            elif link.parsed:
                visited.add(id(link))
                expand.append((link, node.add(page_label(link))))
            else:
                node.add(error_label(link))
        stack.extend(reversed(expand))
    return tree


def _children_with_prefix(node: TreeNode, prefix: str) -> List[Tuple[TreeNode, str, bool]]:
    last = len(node.children) - 1
    return [(child, prefix, i == last) for i, child in enumerate(node.children)]


def render_tree(root: Page, show_backrefs: bool = False) -> str:
    """Indented text, one ``<url> (<title>)`` line per page."""
    tree = build_tree(root, show_backrefs)
    lines = [tree.text]
    stack = list(reversed(_children_with_prefix(tree, "")))
    while stack:
        node, prefix, is_last = stack.pop()
        connector, indent = ("└── ", "    ") if is_last else ("├── ", "│   ")
        lines.append(f"{prefix}{connector}{node.text}")
        stack.extend(reversed(_children_with_prefix(node, prefix + indent)))
    return "\n".join(lines)
