"""capserve - Capability registration and invocation

This library exposes named capabilities (operations, resources and prompt
templates) through a uniform request/response contract. Capabilities are
declared with typed input schemas, registered in a CapRegistry, and invoked
through a Dispatcher that validates input, awaits the handler, and returns a
dual-encoded ResponseEnvelope.
"""

from capserve.version import __version__

from capserve.schema.descriptor import (
    FieldKind,
    FieldSpec,
    SchemaDescriptor,
    InvalidSchemaError,
    string_field,
    number_field,
    boolean_field,
    enum_field,
)

from capserve.schema.validation import (
    validate,
    ValidationResult,
    Violation,
    MissingField,
    TypeMismatch,
    OutOfRange,
    InvalidEnum,
)

from capserve.schema.output_validation import (
    OutputValidator,
    SchemaValidationError,
    SchemaCompilationError,
    OutputValidationError,
)

from capserve.cap.response import (
    ContentType,
    TextContent,
    ImageContent,
    ContentItem,
    ResponseEnvelope,
    EnvelopeMismatchError,
    ResourceContents,
    ResourceResult,
    PromptMessage,
    PromptResult,
    content_item_from_dict,
)

from capserve.cap.definition import (
    CapabilityKind,
    Capability,
    OperationCap,
    ResourceCap,
    TemplateCap,
    TEXT_OUTPUT_SCHEMA,
)

from capserve.cap.registry import (
    CapRegistry,
    RegistryError,
    DuplicateNameError,
    NotFoundError,
)

from capserve.cap.dispatcher import (
    Dispatcher,
    DispatchError,
    UnknownCapabilityError,
    InvalidInputError,
    HandlerFailure,
    InvocationCancelledError,
    OutputValidationFailure,
)

from capserve.cap.template import PromptTemplate, split_list

from capserve.config import ServerConfig, ConfigError

from capserve.log import LogEmitter, StderrLogEmitter, NullLogEmitter, RecordingLogEmitter

from capserve.standard.caps import build_registry, SERVER_INFO_URI
from capserve.standard.errors import ProviderError, ConfigurationError

__all__ = [
    "__version__",
    # Schema
    "FieldKind",
    "FieldSpec",
    "SchemaDescriptor",
    "InvalidSchemaError",
    "string_field",
    "number_field",
    "boolean_field",
    "enum_field",
    # Validation
    "validate",
    "ValidationResult",
    "Violation",
    "MissingField",
    "TypeMismatch",
    "OutOfRange",
    "InvalidEnum",
    # Output validation
    "OutputValidator",
    "SchemaValidationError",
    "SchemaCompilationError",
    "OutputValidationError",
    # Response
    "ContentType",
    "TextContent",
    "ImageContent",
    "ContentItem",
    "ResponseEnvelope",
    "EnvelopeMismatchError",
    "ResourceContents",
    "ResourceResult",
    "PromptMessage",
    "PromptResult",
    "content_item_from_dict",
    # Capabilities
    "CapabilityKind",
    "Capability",
    "OperationCap",
    "ResourceCap",
    "TemplateCap",
    "TEXT_OUTPUT_SCHEMA",
    # Registry
    "CapRegistry",
    "RegistryError",
    "DuplicateNameError",
    "NotFoundError",
    # Dispatcher
    "Dispatcher",
    "DispatchError",
    "UnknownCapabilityError",
    "InvalidInputError",
    "HandlerFailure",
    "InvocationCancelledError",
    "OutputValidationFailure",
    # Templates
    "PromptTemplate",
    "split_list",
    # Config
    "ServerConfig",
    "ConfigError",
    # Logging
    "LogEmitter",
    "StderrLogEmitter",
    "NullLogEmitter",
    "RecordingLogEmitter",
    # Standard capabilities
    "build_registry",
    "SERVER_INFO_URI",
    "ProviderError",
    "ConfigurationError",
]
