"""
Structural diff between two GraphQL schemas.

Breaking and dangerous changes come straight from graphql-core. graphql-core
does not report plain additions, so new types, new object/interface fields
and new directives are collected here as non-breaking changes. Additions
that graphql-core already classifies (enum values, union members, interface
implementations, arguments and input fields) are left to it.
"""

import enum
from dataclasses import dataclass

from graphql import (
    GraphQLInterfaceType,
    GraphQLObjectType,
    GraphQLSchema,
    find_breaking_changes,
    find_dangerous_changes,
)


class Criticality(str, enum.Enum):
    BREAKING = "BREAKING"
    DANGEROUS = "DANGEROUS"
    NON_BREAKING = "NON_BREAKING"


@dataclass(frozen=True)
class ChangeRecord:
    """A single detected difference between two schema revisions."""
    criticality: Criticality
    type: str
    message: str


def _additions(old: GraphQLSchema, new: GraphQLSchema) -> list[ChangeRecord]:
    changes = []
    for name, new_type in new.type_map.items():
        if name.startswith("__"):
            continue
        old_type = old.type_map.get(name)
        if old_type is None:
            changes.append(ChangeRecord(Criticality.NON_BREAKING, "TYPE_ADDED", f"Type '{name}' was added"))
            continue
        # Kind changes are already reported as breaking
        if isinstance(new_type, (GraphQLObjectType, GraphQLInterfaceType)) and type(old_type) is type(new_type):
            for field_name in new_type.fields:
                if field_name not in old_type.fields:
                    changes.append(
                        ChangeRecord(
                            Criticality.NON_BREAKING,
                            "FIELD_ADDED",
                            f"Field '{field_name}' was added to type '{name}'",
                        )
                    )

    old_directives = {directive.name for directive in old.directives}
    for directive in new.directives:
        if directive.name not in old_directives:
            changes.append(
                ChangeRecord(
                    Criticality.NON_BREAKING,
                    "DIRECTIVE_ADDED",
                    f"Directive '{directive.name}' was added",
                )
            )
    return changes


def diff_schemas(old: GraphQLSchema, new: GraphQLSchema) -> list[ChangeRecord]:
    """Return every change from ``old`` to ``new``, breaking changes first."""
    changes = [
        ChangeRecord(Criticality.BREAKING, change.type.name, change.description)
        for change in find_breaking_changes(old, new)
    ]
    changes.extend(
        ChangeRecord(Criticality.DANGEROUS, change.type.name, change.description)
        for change in find_dangerous_changes(old, new)
    )
    changes.extend(_additions(old, new))
    return changes
