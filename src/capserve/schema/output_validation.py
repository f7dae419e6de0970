"""JSON Schema validation for structured capability output

Operations may declare a JSON Schema (draft-07) for the structured mirror of
their response. OutputValidator compiles those schemas once and checks each
envelope's structuredContent against them.
"""

import json
from typing import Any, Dict

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError


class SchemaValidationError(Exception):
    """Schema validation error"""
    pass


class SchemaCompilationError(SchemaValidationError):
    """Schema compilation failed"""
    def __init__(self, msg: str):
        super().__init__(f"Schema compilation failed: {msg}")


class OutputValidationError(SchemaValidationError):
    """Output validation failed"""
    def __init__(self, capability: str, details: str):
        super().__init__(f"Structured output of '{capability}' failed validation:\n{details}")
        self.capability = capability
        self.details = details


class OutputValidator:
    """Schema validator with caching"""

    def __init__(self):
        self.schema_cache: Dict[str, Draft7Validator] = {}

    def compile(self, schema: Dict[str, Any]) -> Draft7Validator:
        """Compile a schema, reusing a cached validator for identical schemas"""
        schema_key = json.dumps(schema, sort_keys=True)

        if schema_key not in self.schema_cache:
            try:
                Draft7Validator.check_schema(schema)
            except SchemaError as e:
                raise SchemaCompilationError(e.message)
            self.schema_cache[schema_key] = Draft7Validator(schema)

        return self.schema_cache[schema_key]

    def validate(self, capability: str, value: Any, schema: Dict[str, Any]) -> None:
        """Validate a structured value against a schema

        Raises:
            SchemaCompilationError: If the schema itself is invalid
            OutputValidationError: If the value does not conform
        """
        validator = self.compile(schema)

        errors = sorted(validator.iter_errors(value), key=lambda e: list(e.path))
        if errors:
            error_details = "\n".join(f"  - {e.message}" for e in errors)
            raise OutputValidationError(capability, error_details)
