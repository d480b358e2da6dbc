"""
Turns the free-text analysis into display fragments, one per non-empty line.

Line rules, checked in this order:
  "1. Title"        -> SectionHeader
  "- Label: value"  -> LabeledItem
  "- text"          -> BulletItem
  anything else     -> Paragraph
"""
import re
from typing import Literal, Union

from pydantic import BaseModel

_MARKDOWN_CHARS = re.compile(r"[*_#`]")
_HEADER_PREFIX  = re.compile(r"^[0-9]+\.")
_HEADER_STRIP   = re.compile(r"^[0-9]+\.\s*")


class SectionHeader(BaseModel):
    kind: Literal["header"] = "header"
    text: str


class LabeledItem(BaseModel):
    kind:  Literal["labeled"] = "labeled"
    label: str
    value: str


class BulletItem(BaseModel):
    kind: Literal["bullet"] = "bullet"
    text: str


class Paragraph(BaseModel):
    kind: Literal["paragraph"] = "paragraph"
    text: str


Fragment = Union[SectionHeader, LabeledItem, BulletItem, Paragraph]


def format_line(line: str) -> Fragment | None:
    """Format a single line; returns None for lines that are blank after cleanup."""
    clean = _MARKDOWN_CHARS.sub("", line).strip()
    if not clean:
        return None

    if _HEADER_PREFIX.match(clean):
        return SectionHeader(text=_HEADER_STRIP.sub("", clean, count=1))

    if clean.startswith("-") and ":" in clean:
        label, _, value = clean[1:].partition(":")
        return LabeledItem(label=label.strip(), value=value.strip())

    if clean.startswith("-"):
        return BulletItem(text=clean[1:].strip())

    return Paragraph(text=clean)


def format_analysis(text: str | None) -> list[Fragment]:
    if not text:
        return []
    fragments = []
    for line in text.split("\n"):
        fragment = format_line(line)
        if fragment is not None:
            fragments.append(fragment)
    return fragments
