"""Capability definitions

A capability is one of three kinds, each with a handler signature of its own:

- operation: async (args) -> ResponseEnvelope
- resource:  async () -> ResourceResult, addressed by an exact URI
- template:  async (args) -> PromptResult

Definitions are immutable once created and live as long as the registry
holding them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from capserve.cap.response import PromptResult, ResourceResult, ResponseEnvelope
from capserve.schema.descriptor import SchemaDescriptor


class CapabilityKind(Enum):
    """Kind of a registered capability"""
    OPERATION = "operation"
    RESOURCE = "resource"
    TEMPLATE = "template"


OperationHandler = Callable[[Dict[str, Any]], Awaitable[ResponseEnvelope]]
ResourceHandler = Callable[[], Awaitable[ResourceResult]]
TemplateHandler = Callable[[Dict[str, Any]], Awaitable[PromptResult]]


@dataclass(frozen=True)
class OperationCap:
    """Operation invoked with validated input"""
    name: str
    description: str
    input_schema: SchemaDescriptor
    handler: OperationHandler
    output_schema: Optional[Dict[str, Any]] = None

    @property
    def kind(self) -> CapabilityKind:
        return CapabilityKind.OPERATION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the snapshot listing"""
        result = {
            "kind": self.kind.value,
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema.to_dict(),
        }
        if self.output_schema is not None:
            result["output_schema"] = self.output_schema
        return result


@dataclass(frozen=True)
class ResourceCap:
    """Parameterless resource addressed by URI"""
    name: str
    uri: str
    description: str
    handler: ResourceHandler
    mime_type: str = "application/json"

    @property
    def kind(self) -> CapabilityKind:
        return CapabilityKind.RESOURCE

    @property
    def input_schema(self) -> SchemaDescriptor:
        return SchemaDescriptor.empty()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "uri": self.uri,
            "description": self.description,
            "mime_type": self.mime_type,
            "input_schema": {},
        }


@dataclass(frozen=True)
class TemplateCap:
    """Parameterized text template rendered into messages"""
    name: str
    description: str
    input_schema: SchemaDescriptor
    handler: TemplateHandler

    @property
    def kind(self) -> CapabilityKind:
        return CapabilityKind.TEMPLATE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema.to_dict(),
        }


Capability = Union[OperationCap, ResourceCap, TemplateCap]


# Output schema shared by operations that answer with text items
TEXT_OUTPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "content": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {"const": "text"},
                    "text": {"type": "string"},
                },
                "required": ["type", "text"],
            },
        },
    },
    "required": ["content"],
}
