"""
Text helpers shared by the chat channel formatters.

Change messages quote schema names with single or double quotes
(``Field 'id' was added to type 'User'``). Chat channels render those names
as inline code instead.
"""

import re

from schemawatch.diff import ChangeRecord, Criticality

_QUOTED = re.compile(r"['\"]([^'\"]+)['\"]")

# Display order of criticality buckets
CRITICALITY_ORDER = (Criticality.BREAKING, Criticality.DANGEROUS, Criticality.NON_BREAKING)


def coderize(message: str) -> str:
    """Wrap quoted names in backticks."""
    return _QUOTED.sub(r"`\1`", message)


def pluralize(word: str, count: int) -> str:
    return word if count == 1 else f"{word}s"


def environment_label(environment: str, bold: str = "*") -> str:
    return "" if environment == "default" else f" in {bold}{environment}{bold}"


def group_by_criticality(changes) -> dict[Criticality, list[ChangeRecord]]:
    """Bucket changes by criticality, keeping their original order."""
    groups: dict[Criticality, list[ChangeRecord]] = {level: [] for level in CRITICALITY_ORDER}
    for change in changes:
        groups[change.criticality].append(change)
    return groups


def truncate(text: str, max_len: int) -> str:
    return f"{text[:max_len - 3]}..." if len(text) > max_len else text
