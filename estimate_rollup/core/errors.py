from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EstimateError(Exception):
    """Base error envelope. Prefer returning/printing these rather than raising raw exceptions."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<estimates>"
        return f"{loc}: {self.code}: {self.message}"


class EstimateLoadError(EstimateError):
    pass


class ShapeError(EstimateError):
    """Raw input does not match the expected node shape at `path`."""


class AggregationDegenerateError(EstimateError):
    """A non-leaf node has no children, so its mean scores are undefined."""


def error_sort_key(e: EstimateError) -> tuple[str, tuple[tuple[int, int, str], ...], str]:
    """Sort key (file, path, code) where list indices in the path compare numerically.

    `estimates[2]` sorts before `estimates[10]`, so errors come out in
    document order.
    """
    parts: list[tuple[int, int, str]] = []
    for token in re.findall(r"[^.\[\]]+", e.path or ""):
        if token.isdigit():
            parts.append((0, int(token), ""))
        else:
            parts.append((1, 0, token))
    return (e.file or "", tuple(parts), e.code)
