# File: site_mapper/report/__init__.py
"""site_mapper.report: вывод готового графа страниц, используемый CLI и тестами."""

from __future__ import annotations

from site_mapper.report.tree_report import BACKREF_MARKER, build_tree, render_tree

__all__ = ["BACKREF_MARKER", "build_tree", "render_tree"]
