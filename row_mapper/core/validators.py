"""Format validators.

One validator per declared column format. A column combines its
validators with ``Group(OR)``, so a value is valid when it matches at
least one declared format. Range and length constraints on scalar
formats are checked through pydantic ``TypeAdapter`` instances in
strict mode.
"""

from __future__ import annotations

import datetime as dt
import decimal
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Annotated, Any, Literal, Protocol, runtime_checkable

from pydantic import Field, TypeAdapter, ValidationError

from row_mapper.core.enums import MISSING

# Class or zero-argument resolver returning a class
ModelInput = type | Callable[[], type]


def resolve_type(model: ModelInput) -> type:
    """Resolve a class or a class thunk without consulting any registry."""
    if isinstance(model, type):
        return model
    return model()


@runtime_checkable
class Validator(Protocol):
    """Accepts a value and reports whether it is valid."""

    @property
    def name(self) -> str: ...

    def validate(self, value: Any) -> bool: ...


class _Constrained:
    """Base for validators delegating to a strict pydantic adapter."""

    def __init__(self, name: str, annotation: Any) -> None:
        self._name = name
        self._adapter: TypeAdapter[Any] = TypeAdapter(annotation)

    @property
    def name(self) -> str:
        return self._name

    def _accepts(self, value: Any) -> bool:
        return True

    def _prepare(self, value: Any) -> Any:
        return value

    def validate(self, value: Any) -> bool:
        if not self._accepts(value):
            return False
        try:
            self._adapter.validate_python(self._prepare(value), strict=True)
        except ValidationError:
            return False
        return True


def _as_decimal(value: float | None) -> decimal.Decimal | None:
    return None if value is None else decimal.Decimal(str(value))


def _is_numeric(value: Any) -> bool:
    return isinstance(value, int | float | decimal.Decimal) and not isinstance(value, bool)


# --- Common ---


class AnyValue:
    name = "Any"

    def validate(self, value: Any) -> bool:
        return value is not MISSING


class Undefined:
    name = "Undefined"

    def validate(self, value: Any) -> bool:
        return value is MISSING


class Null:
    name = "Null"

    def validate(self, value: Any) -> bool:
        return value is None


class Binary:
    name = "Binary"

    def validate(self, value: Any) -> bool:
        return isinstance(value, bytes | bytearray | memoryview)


class Boolean:
    name = "Boolean"

    def validate(self, value: Any) -> bool:
        return isinstance(value, bool)


class Integer(_Constrained):
    def __init__(self, minimum: int | None = None, maximum: int | None = None) -> None:
        super().__init__("Integer", Annotated[int, Field(ge=minimum, le=maximum)])

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)


class Decimal(_Constrained):
    """Fractional numbers: floats and ``decimal.Decimal``."""

    def __init__(self, minimum: float | None = None, maximum: float | None = None) -> None:
        bounds = Field(ge=_as_decimal(minimum), le=_as_decimal(maximum))
        super().__init__("Decimal", Annotated[decimal.Decimal, bounds])

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, float | decimal.Decimal)

    def _prepare(self, value: Any) -> Any:
        return decimal.Decimal(str(value)) if isinstance(value, float) else value


class Number(_Constrained):
    """Any real number: integers, floats and ``decimal.Decimal``."""

    def __init__(self, minimum: float | None = None, maximum: float | None = None) -> None:
        bounds = Field(ge=_as_decimal(minimum), le=_as_decimal(maximum))
        super().__init__("Number", Annotated[decimal.Decimal, bounds])

    def _accepts(self, value: Any) -> bool:
        return _is_numeric(value)

    def _prepare(self, value: Any) -> Any:
        if isinstance(value, decimal.Decimal):
            return value
        return decimal.Decimal(str(value))


class String(_Constrained):
    def __init__(self, minimum: int | None = None, maximum: int | None = None) -> None:
        super().__init__("String", Annotated[str, Field(min_length=minimum, max_length=maximum)])


class Enumeration(_Constrained):
    def __init__(self, *values: str) -> None:
        self.values = values
        super().__init__(f"Enumeration of {list(values)}", Literal[values])

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, str)


class Pattern:
    def __init__(self, pattern: str | re.Pattern[str], name: str | None = None) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.name = name or f"Pattern {self.pattern.pattern!r}"

    def validate(self, value: Any) -> bool:
        return isinstance(value, str) and self.pattern.search(value) is not None


class Timestamp(_Constrained):
    def __init__(
        self, minimum: dt.datetime | None = None, maximum: dt.datetime | None = None
    ) -> None:
        super().__init__("Timestamp", Annotated[dt.datetime, Field(ge=minimum, le=maximum)])


class Date(_Constrained):
    """Calendar dates. Datetimes are compared by their date part."""

    def __init__(self, minimum: dt.date | None = None, maximum: dt.date | None = None) -> None:
        super().__init__("Date", Annotated[dt.date, Field(ge=minimum, le=maximum)])

    def _prepare(self, value: Any) -> Any:
        return value.date() if isinstance(value, dt.datetime) else value


# --- Structural ---


class InstanceOf:
    """Instance of a class, resolved lazily to allow forward references."""

    def __init__(self, model: ModelInput) -> None:
        self._model = model

    @property
    def name(self) -> str:
        return f"Instance of {resolve_type(self._model).__name__}"

    def validate(self, value: Any) -> bool:
        return isinstance(value, resolve_type(self._model))


class ArrayOf:
    """List or tuple whose items are all of one type.

    With ``nested`` set, an item may itself be a list of that type (the
    shape produced by joins that load all matches).
    """

    def __init__(
        self,
        model: ModelInput,
        unique: bool = False,
        minimum: int | None = None,
        maximum: int | None = None,
        nested: bool = False,
    ) -> None:
        self._model = model
        self.unique = unique
        self.minimum = minimum
        self.maximum = maximum
        self.nested = nested

    @property
    def name(self) -> str:
        return f"Array of {resolve_type(self._model).__name__}"

    def _validate_items(self, items: Iterable[Any], nested: bool) -> bool:
        model = resolve_type(self._model)
        for item in items:
            if nested and isinstance(item, list | tuple):
                if not self._validate_items(item, False):
                    return False
            elif not isinstance(item, model) or (model is int and isinstance(item, bool)):
                return False
        return True

    def validate(self, value: Any) -> bool:
        if not isinstance(value, list | tuple):
            return False
        if self.minimum is not None and len(value) < self.minimum:
            return False
        if self.maximum is not None and len(value) > self.maximum:
            return False
        if self.unique:
            seen: list[Any] = []
            for item in value:
                if item in seen:
                    return False
                seen.append(item)
        return self._validate_items(value, self.nested)


class MapOf:
    """Mapping with string keys whose values are all of one type."""

    def __init__(self, model: ModelInput) -> None:
        self._model = model

    @property
    def name(self) -> str:
        return f"Map of {resolve_type(self._model).__name__}"

    def validate(self, value: Any) -> bool:
        if not isinstance(value, Mapping):
            return False
        model = resolve_type(self._model)
        return all(isinstance(key, str) and isinstance(item, model) for key, item in value.items())


class Group:
    """Combines validators with OR (any) or AND (all) semantics."""

    OR = "or"
    AND = "and"

    def __init__(self, operator: str, validators: Iterable[Validator]) -> None:
        if operator not in (Group.OR, Group.AND):
            raise ValueError(f"Unknown group operator: {operator!r}")
        self.operator = operator
        self.validators = tuple(validators)

    @property
    def name(self) -> str:
        glue = " or " if self.operator == Group.OR else " and "
        return glue.join(validator.name for validator in self.validators)

    def validate(self, value: Any) -> bool:
        results = (validator.validate(value) for validator in self.validators)
        return any(results) if self.operator == Group.OR else all(results)
