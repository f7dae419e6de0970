"""Input validation against schema descriptors

validate() checks a raw input mapping against a SchemaDescriptor and returns
a ValidationResult: either a new normalized mapping (defaults applied, values
coerced where the field declares it) or the list of every violated
constraint. Bad input is reported as data, never raised.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from capserve.schema.descriptor import FieldKind, FieldSpec, SchemaDescriptor


INPUT_FIELD = "<input>"

_TRUE_STRINGS = ("true", "1", "yes", "y")
_FALSE_STRINGS = ("false", "0", "no", "n")


@dataclass(frozen=True)
class Violation:
    """Base class for a single violated constraint"""
    name: str

    @property
    def message(self) -> str:
        raise NotImplementedError("Subclasses must implement message")

    def to_dict(self) -> Dict[str, Any]:
        result = {"violation": type(self).__name__, "field": self.name, "message": self.message}
        return result


@dataclass(frozen=True)
class MissingField(Violation):
    """Required field absent"""

    @property
    def message(self) -> str:
        return f"Field '{self.name}' is required but was not provided"


@dataclass(frozen=True)
class TypeMismatch(Violation):
    """Value has the wrong type for the field"""
    expected: str = ""
    actual: str = ""

    @property
    def message(self) -> str:
        return f"Field '{self.name}' expects {self.expected} but got {self.actual}"


@dataclass(frozen=True)
class OutOfRange(Violation):
    """Numeric value outside the inclusive [minimum, maximum] range"""
    value: Any = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    @property
    def message(self) -> str:
        low = "-inf" if self.minimum is None else self.minimum
        high = "inf" if self.maximum is None else self.maximum
        return f"Field '{self.name}' value {self.value} is outside [{low}, {high}]"


@dataclass(frozen=True)
class InvalidEnum(Violation):
    """Value is not one of the allowed literals"""
    value: Any = None
    allowed: Tuple[Any, ...] = ()

    @property
    def message(self) -> str:
        allowed = ", ".join(repr(a) for a in self.allowed)
        return f"Field '{self.name}' value {self.value!r} is not one of: {allowed}"


@dataclass
class ValidationResult:
    """Outcome of validating one input against a descriptor"""
    value: Optional[Dict[str, Any]] = None
    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def describe(self) -> str:
        """Human-readable summary of every violation"""
        return "\n".join(f"  - {v.message}" for v in self.violations)


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce(spec: FieldSpec, value: Any) -> Any:
    """Parse string input into the field's kind. Returns value unchanged when it cannot."""
    if not isinstance(value, str):
        return value

    text = value.strip()
    if spec.kind == FieldKind.NUMBER:
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return value
    if spec.kind == FieldKind.BOOLEAN:
        lowered = text.lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return value


def check_field(spec: FieldSpec, value: Any) -> Tuple[Any, Optional[Violation]]:
    """Check a present value against one field spec

    Returns (normalized_value, None) on success, or (value, violation) for the
    first failing check.
    """
    if spec.coerce:
        value = _coerce(spec, value)

    if spec.kind == FieldKind.STRING:
        if not isinstance(value, str):
            return value, TypeMismatch(spec.name, "string", _type_name(value))
        return value, None

    if spec.kind == FieldKind.BOOLEAN:
        if not isinstance(value, bool):
            return value, TypeMismatch(spec.name, "boolean", _type_name(value))
        return value, None

    if spec.kind == FieldKind.ENUM:
        # bool == 1 in Python, so compare types as well as values
        for choice in spec.choices:
            if type(choice) is type(value) and choice == value:
                return value, None
        return value, InvalidEnum(spec.name, value, spec.choices)

    # FieldKind.NUMBER
    if not _is_number(value) or (isinstance(value, float) and math.isnan(value)):
        return value, TypeMismatch(spec.name, "number", _type_name(value))

    if spec.integer:
        if isinstance(value, float):
            if not value.is_integer():
                return value, TypeMismatch(spec.name, "integer", "non-integral number")
            value = int(value)

    below = spec.minimum is not None and value < spec.minimum
    above = spec.maximum is not None and value > spec.maximum
    if below or above:
        return value, OutOfRange(spec.name, value, spec.minimum, spec.maximum)

    return value, None


def validate(descriptor: SchemaDescriptor, raw_input: Any) -> ValidationResult:
    """Validate raw input against a descriptor

    Every declared field is checked and all violations are collected. The
    caller's mapping is never mutated; keys the descriptor does not declare
    are copied through unchanged.

    Args:
        descriptor: The schema to validate against
        raw_input: Mapping of field name to value, or None for no input

    Returns:
        ValidationResult with either `value` or `violations` populated
    """
    if raw_input is None:
        raw_input = {}

    if not isinstance(raw_input, Mapping):
        return ValidationResult(violations=[TypeMismatch(INPUT_FIELD, "object", _type_name(raw_input))])

    normalized: Dict[str, Any] = dict(raw_input)
    violations: List[Violation] = []

    for spec in descriptor:
        value = raw_input.get(spec.name)

        if value is None:
            if spec.required:
                violations.append(MissingField(spec.name))
            elif spec.has_default:
                normalized[spec.name] = spec.default
            else:
                # Explicit null on an optional field without default
                normalized.pop(spec.name, None)
            continue

        checked, violation = check_field(spec, value)
        if violation is not None:
            violations.append(violation)
        else:
            normalized[spec.name] = checked

    if violations:
        return ValidationResult(violations=violations)
    return ValidationResult(value=normalized)
