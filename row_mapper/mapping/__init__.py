"""Mapping layer - entity registration and materialization."""

from __future__ import annotations

from row_mapper.mapping.builder import EntityBuilder, define, entity
from row_mapper.mapping.castings import iso_datetime, to_datetime, to_iso_string, to_timestamp
from row_mapper.mapping.inputer import Inputer
from row_mapper.mapping.normalizer import Normalizer
from row_mapper.mapping.outputer import Outputer

__all__ = [
    "define",
    "entity",
    "EntityBuilder",
    "Inputer",
    "Outputer",
    "Normalizer",
    "to_datetime",
    "to_timestamp",
    "to_iso_string",
    "iso_datetime",
]
