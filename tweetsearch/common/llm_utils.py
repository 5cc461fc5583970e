"""Shared utilities for parsing LLM responses."""

from __future__ import annotations

import re
from typing import List, Optional

_LIST_MARKER = re.compile(r"^(?:\d+\.|-)\s*")
_THINK_BLOCK = re.compile(r"<think(?:ing)?>.*?</think(?:ing)?>", re.DOTALL | re.IGNORECASE)
_THINK_OPEN = re.compile(r"<think(?:ing)?>", re.IGNORECASE)


def parse_llm_list(raw: str, limit: Optional[int] = None) -> List[str]:
    """Extract items from a numbered ("1.") or hyphen-bulleted LLM response.

    Lines without a leading marker are ignored, as are items that are empty
    once the marker is stripped.
    """
    if not raw:
        return []

    items = []
    for line in raw.split("\n"):
        line = line.strip()
        match = _LIST_MARKER.match(line)
        if not match:
            continue
        item = line[match.end():].strip()
        if item:
            items.append(item)

    if limit is not None:
        return items[:limit]
    return items


def strip_reasoning(raw: str) -> str:
    """Remove <think>...</think> reasoning blocks from an LLM response.

    A block left open by a cut-off response runs to the end of the text,
    so everything from its opening tag is dropped. That can leave an empty
    string; a response made only of closed blocks is returned unchanged.
    """
    if not raw:
        return raw
    stripped = _THINK_BLOCK.sub("", raw)
    unclosed = _THINK_OPEN.search(stripped)
    if unclosed:
        return stripped[:unclosed.start()].strip()
    return stripped.strip() or raw.strip()
