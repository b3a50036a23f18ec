"""
Renderer - human-readable console output for operation results.

Output is meant for people reading a terminal, not for parsing.
"""

from __future__ import annotations

import sys
from pprint import pformat
from typing import Any, TextIO

from bson import json_util

__all__ = ["Renderer"]


class Renderer:
    """
    Writes section headers, labels and results to a text stream.

    Example:
        renderer = Renderer()
        renderer.section("BASIC CRUD OPERATIONS")
        renderer.heading("All Fantasy books:")
        renderer.documents(docs)
    """

    __slots__ = ("_out",)

    def __init__(self, output: TextIO | None = None) -> None:
        self._out = output or sys.stdout

    @property
    def output(self) -> TextIO:
        return self._out

    def line(self, text: str = "") -> None:
        """Write one line."""
        print(text, file=self._out)

    def section(self, title: str) -> None:
        """Write a section banner preceded by a blank line."""
        self.line()
        self.line(f"{title} ----------------")

    def heading(self, label: str) -> None:
        """Write an operation label preceded by a blank line."""
        self.line()
        self.line(label)

    def documents(self, docs: list[dict[str, Any]]) -> None:
        """Write a list of documents, one per entry."""
        if not docs:
            self.line("[]")
            return
        for doc in docs:
            self.line(pformat(doc, sort_dicts=False))

    def json(self, value: Any) -> None:
        """Write a value as indented extended JSON."""
        self.line(json_util.dumps(value, indent=2))
