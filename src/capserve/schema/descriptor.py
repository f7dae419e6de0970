"""Declarative input schema for capabilities

A SchemaDescriptor is an ordered set of FieldSpecs describing the shape of a
capability's input: field names, primitive kinds, enumerations, numeric
ranges, optionality and defaults. Descriptors are pure data; validation
lives in capserve.schema.validation.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


class InvalidSchemaError(Exception):
    """Schema descriptor is internally inconsistent"""
    def __init__(self, field_name: str, issue: str):
        super().__init__(f"Field '{field_name}' has invalid schema: {issue}")
        self.field_name = field_name
        self.issue = issue


class FieldKind(Enum):
    """Primitive kind of a field"""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"


@dataclass(frozen=True)
class FieldSpec:
    """Specification for a single input field

    `default` is only used when the field is optional and absent. `coerce`
    allows string input to be parsed into the declared kind, which hosts that
    transport every argument as text rely on.
    """
    name: str
    kind: FieldKind
    description: Optional[str] = None
    required: bool = True
    default: Any = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    integer: bool = False
    choices: Tuple[Any, ...] = ()
    coerce: bool = False

    def __post_init__(self):
        # Normalise list choices so the spec stays hashable
        if not isinstance(self.choices, tuple):
            object.__setattr__(self, "choices", tuple(self.choices))

        if self.kind == FieldKind.ENUM and not self.choices:
            raise InvalidSchemaError(self.name, "enum field declares no choices")
        if self.kind != FieldKind.ENUM and self.choices:
            raise InvalidSchemaError(self.name, f"choices are only allowed on enum fields, not {self.kind.value}")

        if self.kind != FieldKind.NUMBER:
            if self.minimum is not None or self.maximum is not None:
                raise InvalidSchemaError(self.name, "bounds are only allowed on number fields")
            if self.integer:
                raise InvalidSchemaError(self.name, "integer constraint is only allowed on number fields")

        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise InvalidSchemaError(self.name, f"minimum {self.minimum} exceeds maximum {self.maximum}")

        if self.required and self.default is not None:
            raise InvalidSchemaError(self.name, "required fields cannot declare a default")

        if self.default is not None:
            # A default must satisfy the field's own constraints
            from capserve.schema.validation import check_field

            _, violation = check_field(self, self.default)
            if violation is not None:
                raise InvalidSchemaError(self.name, f"default {self.default!r} is invalid: {violation.message}")

    @property
    def optional(self) -> bool:
        return not self.required

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the parameter listing used in registry snapshots"""
        kind = self.kind.value
        if self.kind == FieldKind.ENUM:
            kind = _enum_value_type(self.choices)

        result: Dict[str, Any] = {"type": kind}
        if self.kind == FieldKind.ENUM:
            result["enum"] = list(self.choices)
        if self.integer:
            result["integer"] = True
        if self.minimum is not None:
            result["min"] = self.minimum
        if self.maximum is not None:
            result["max"] = self.maximum
        if self.optional:
            result["optional"] = True
        if self.default is not None:
            result["default"] = self.default
        if self.description is not None:
            result["description"] = self.description
        return result

    def to_json_schema(self) -> Dict[str, Any]:
        """Convert to a JSON Schema (draft-07) property definition"""
        if self.kind == FieldKind.STRING:
            schema: Dict[str, Any] = {"type": "string"}
        elif self.kind == FieldKind.BOOLEAN:
            schema = {"type": "boolean"}
        elif self.kind == FieldKind.NUMBER:
            schema = {"type": "integer" if self.integer else "number"}
            if self.minimum is not None:
                schema["minimum"] = self.minimum
            if self.maximum is not None:
                schema["maximum"] = self.maximum
        else:
            schema = {"enum": list(self.choices)}

        if self.default is not None:
            schema["default"] = self.default
        if self.description is not None:
            schema["description"] = self.description
        return schema


def _enum_value_type(choices: Tuple[Any, ...]) -> str:
    if all(isinstance(c, str) for c in choices):
        return "string"
    if all(isinstance(c, (int, float)) and not isinstance(c, bool) for c in choices):
        return "number"
    return "enum"


# Field constructors

def string_field(name: str, description: Optional[str] = None, *, required: bool = True,
                 default: Optional[str] = None, coerce: bool = False) -> FieldSpec:
    return FieldSpec(name, FieldKind.STRING, description, required=required, default=default, coerce=coerce)


def number_field(name: str, description: Optional[str] = None, *, required: bool = True,
                 default: Optional[float] = None, minimum: Optional[float] = None,
                 maximum: Optional[float] = None, integer: bool = False,
                 coerce: bool = False) -> FieldSpec:
    for bound in (minimum, maximum):
        if bound is not None and (isinstance(bound, bool) or math.isnan(bound)):
            raise InvalidSchemaError(name, f"bound {bound!r} is not a number")
    return FieldSpec(
        name, FieldKind.NUMBER, description,
        required=required, default=default,
        minimum=minimum, maximum=maximum, integer=integer, coerce=coerce,
    )


def boolean_field(name: str, description: Optional[str] = None, *, required: bool = True,
                  default: Optional[bool] = None, coerce: bool = False) -> FieldSpec:
    return FieldSpec(name, FieldKind.BOOLEAN, description, required=required, default=default, coerce=coerce)


def enum_field(name: str, choices, description: Optional[str] = None, *, required: bool = True,
               default: Any = None) -> FieldSpec:
    return FieldSpec(name, FieldKind.ENUM, description, required=required, default=default, choices=tuple(choices))


@dataclass(frozen=True)
class SchemaDescriptor:
    """Ordered, immutable collection of field specifications"""
    fields: Tuple[FieldSpec, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, "fields", tuple(self.fields))

        seen = set()
        for spec in self.fields:
            if spec.name in seen:
                raise InvalidSchemaError(spec.name, "declared more than once")
            seen.add(spec.name)

    @classmethod
    def of(cls, *fields: FieldSpec) -> "SchemaDescriptor":
        """Build a descriptor from field specs"""
        return cls(tuple(fields))

    @classmethod
    def empty(cls) -> "SchemaDescriptor":
        return cls(())

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def get(self, name: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def field_names(self) -> List[str]:
        return [spec.name for spec in self.fields]

    def required_names(self) -> List[str]:
        return [spec.name for spec in self.fields if spec.required]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a name -> parameter listing mapping"""
        return {spec.name: spec.to_dict() for spec in self.fields}

    def to_json_schema(self) -> Dict[str, Any]:
        """Convert to a JSON Schema (draft-07) object schema"""
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {spec.name: spec.to_json_schema() for spec in self.fields},
        }
        required = self.required_names()
        if required:
            schema["required"] = required
        return schema
