"""Mapper configuration.

MapperConfig is a Pydantic model holding the defaults a Mapper applies
when a call doesn't override them.
"""

from __future__ import annotations

from pydantic import BaseModel


class MapperConfig(BaseModel):
    """Defaults for Mapper normalization and projection."""

    alias: bool = False
    unsafe: bool = False
    unroll: bool = False
    fields: list[str] = []
