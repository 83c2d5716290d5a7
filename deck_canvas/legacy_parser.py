"""Parsing of legacy plain-text body lines into layout items.

Older payloads carry only ``body_lines``; the list-driven layouts recover
their items from simple separator conventions:

* ``N. `` prefixes on numbered and outline items
* the first ``:`` splits a label from its description
* the first `` - `` splits a team member's name from their role
* a line reading ``vs`` or ``vs.`` divides comparison columns
"""

import math
import re
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .models import (
    BulletsBlock,
    MetricsBlock,
    NumberedBlock,
    ParagraphBlock,
    SubheadingBlock,
    TableBlock,
)

NUMBER_PREFIX_RE = re.compile(r"^\d+\.\s*")
BULLET_PREFIX_RE = re.compile(r"^[-•]\s*")
VS_SEPARATORS = ("vs", "vs.")


@dataclass(frozen=True)
class Step:
    label: str
    description: str


@dataclass(frozen=True)
class Feature:
    title: str
    description: str = ""


@dataclass(frozen=True)
class Milestone:
    date: str
    text: str


@dataclass(frozen=True)
class TeamMember:
    name: str
    role: str = ""


@dataclass
class ComparisonColumns:
    left_title: str = "Before"
    right_title: str = "After"
    left: List[str] = field(default_factory=list)
    right: List[str] = field(default_factory=list)
    split_on_separator: bool = False


def strip_number_prefix(line: str) -> str:
    return NUMBER_PREFIX_RE.sub("", line, count=1)


def strip_bullet_prefix(line: str) -> str:
    return BULLET_PREFIX_RE.sub("", line, count=1)


def split_label(line: str) -> Tuple[str, str]:
    """
    Split ``label: description`` on the first colon.

    Returns:
        (label, description); label is empty when the line has no colon
    """
    label, sep, rest = line.partition(":")
    if not sep:
        return "", line.strip()
    return label.strip(), rest.strip()


def parse_team_member(line: str) -> TeamMember:
    """Parse ``Name - Role``. A line without the separator is all name."""
    name, sep, role = line.partition(" - ")
    if not sep:
        return TeamMember(name=line.strip())
    return TeamMember(name=name.strip(), role=role.strip())


def initials(name: str) -> str:
    """Up to two upper-case initials from the space-separated words of a name."""
    return "".join(word[0] for word in name.split(" ") if word)[:2].upper()


def _is_bullet(line: str) -> bool:
    return line.startswith("-") or line.startswith("•")


def split_comparison(lines: Sequence[str]) -> ComparisonColumns:
    """
    Divide comparison lines into two columns.

    The split happens at the first line equal to ``vs``/``vs.`` (case-insensitive,
    surrounding whitespace ignored); without one, the first ``ceil(n / 2)`` lines
    form the left column. A column whose first line is not a bullet uses that
    line as its title.
    """
    lines = list(lines)
    columns = ComparisonColumns()

    vs_index = next(
        (i for i, line in enumerate(lines) if line.strip().lower() in VS_SEPARATORS),
        None,
    )
    if vs_index is not None:
        left, right = lines[:vs_index], lines[vs_index + 1:]
        columns.split_on_separator = True
    else:
        mid = math.ceil(len(lines) / 2)
        left, right = lines[:mid], lines[mid:]

    if left and not _is_bullet(left[0]):
        columns.left_title = left.pop(0)
    if right and not _is_bullet(right[0]):
        columns.right_title = right.pop(0)

    columns.left = [strip_bullet_prefix(line) for line in left]
    columns.right = [strip_bullet_prefix(line) for line in right]
    return columns


def parse_steps(lines: Sequence[str]) -> List[Step]:
    """Process steps: ``label: description``, otherwise labelled ``Step N``."""
    steps = []
    for i, line in enumerate(lines):
        label, description = split_label(strip_number_prefix(line))
        steps.append(Step(label=label or f"Step {i + 1}", description=description))
    return steps


def parse_features(lines: Sequence[str]) -> List[Feature]:
    features = []
    for line in lines:
        label, description = split_label(line)
        if label:
            features.append(Feature(title=label, description=description))
        else:
            features.append(Feature(title=description))
    return features


def parse_milestones(lines: Sequence[str]) -> List[Milestone]:
    return [Milestone(*split_label(line)) for line in lines]


def parse_logos(lines: Sequence[str]) -> List[str]:
    """Company names with bullet prefixes removed; blank lines dropped."""
    return [name for name in (strip_bullet_prefix(line).strip() for line in lines) if name]


def lines_from_blocks(blocks: Sequence) -> List[str]:
    """
    Flatten structured body blocks into legacy body lines.

    Used by list-driven layouts when a slide carries only a structured body.
    Metrics become ``label: value`` and table rows are joined with `` - ``.
    """
    lines: List[str] = []
    for block in blocks:
        if isinstance(block, (ParagraphBlock, SubheadingBlock)):
            lines.append(block.text)
        elif isinstance(block, BulletsBlock):
            lines.extend(item.text for item in block.items)
        elif isinstance(block, NumberedBlock):
            lines.extend(f"{i + 1}. {item.text}" for i, item in enumerate(block.items))
        elif isinstance(block, MetricsBlock):
            lines.extend(f"{item.label}: {item.value}" for item in block.items)
        elif isinstance(block, TableBlock):
            lines.extend(" - ".join(row) for row in block.rows)
    return lines
