"""
Concurrent reading and concatenation of selected files.

Output format, for more than one file in the batch::

    --- File: src/a.py ---
    <content>
    <blank line>

A batch of exactly one file yields that file's text unchanged, with no header.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from clipcopy.file_resolver.types import FileSystem, Resource

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationOutcome:
    content: str
    error_count: int
    failed: tuple[str, ...]


def format_entry(relative: str, text: str) -> str:
    return f"--- File: {relative} ---\n{text}\n\n"


async def _read_text(resource: Resource, fs: FileSystem, encoding: str) -> str | None:
    try:
        data = await fs.read_bytes(resource.path)
        # No binary detection: undecodable bytes become replacement characters.
        return data.decode(encoding, errors="replace")
    except (OSError, UnicodeError, LookupError) as e:
        log.debug("Could not read %s: %s", resource.relative, e)
        return None


async def aggregate(
    resources: Sequence[Resource], fs: FileSystem, encoding: str = "utf-8"
) -> AggregationOutcome:
    """
    Read every resource concurrently and join the results in the given order.
    A failed read is recorded by relative path and never stops the others.
    """
    texts = await asyncio.gather(*(_read_text(r, fs, encoding) for r in resources))

    multiple = len(resources) > 1
    parts: list[str] = []
    failed: list[str] = []
    for resource, text in zip(resources, texts):
        if text is None:
            failed.append(resource.relative)
        elif multiple:
            parts.append(format_entry(resource.relative, text))
        else:
            parts.append(text)

    if failed:
        log.info("Read %d of %d file(s)", len(resources) - len(failed), len(resources))
    return AggregationOutcome(content="".join(parts), error_count=len(failed), failed=tuple(failed))
