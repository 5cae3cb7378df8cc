"""Resolve the before/after schema documents of a push."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from graphql import GraphQLError, GraphQLSchema, build_schema

from schemawatch.errors import SchemaBuildError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaPointer:
    """One schema file at one revision."""
    path: str
    ref: str


@dataclass(frozen=True)
class SchemaSources:
    old: str
    new: str


@dataclass(frozen=True)
class SchemaPair:
    old: GraphQLSchema
    new: GraphQLSchema


FileLoader = Callable[[SchemaPointer], Awaitable[str]]


def create_pointers(path: str, before: str, ref: str) -> tuple[SchemaPointer, SchemaPointer]:
    return SchemaPointer(path=path, ref=before), SchemaPointer(path=path, ref=ref)


async def load_sources(
    old_pointer: SchemaPointer,
    new_pointer: SchemaPointer,
    load_file: FileLoader,
) -> SchemaSources:
    """Fetch both documents, old first. Loader errors propagate."""
    old = await load_file(old_pointer)
    new = await load_file(new_pointer)
    return SchemaSources(old=old, new=new)


def build_lenient_schema(source: str, pointer: SchemaPointer) -> GraphQLSchema:
    """
    Build a schema without re-validating it.

    The stored document is assumed to have been valid when it was
    committed; only documents that cannot be interpreted at all fail.

    Raises:
        SchemaBuildError: if the text cannot be parsed or built
    """
    try:
        return build_schema(source, assume_valid=True, assume_valid_sdl=True)
    except (GraphQLError, TypeError) as exc:
        raise SchemaBuildError(pointer.path, pointer.ref, str(exc)) from exc


def build_schemas(
    sources: SchemaSources,
    old_pointer: SchemaPointer,
    new_pointer: SchemaPointer,
) -> SchemaPair:
    return SchemaPair(
        old=build_lenient_schema(sources.old, old_pointer),
        new=build_lenient_schema(sources.new, new_pointer),
    )
