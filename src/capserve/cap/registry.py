"""Capability registry

Name-indexed collection of operations, resources and templates. Names are
unique within a kind; the same name may be used by different kinds.
Registration happens during startup only. Lookups are read-only and can be
made from any number of concurrent invocations.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from capserve.cap.definition import (
    Capability,
    CapabilityKind,
    OperationCap,
    OperationHandler,
    ResourceCap,
    ResourceHandler,
    TemplateCap,
    TemplateHandler,
)
from capserve.schema.descriptor import SchemaDescriptor
from capserve.schema.output_validation import OutputValidator


class RegistryError(Exception):
    """Base exception for registry errors"""
    pass


class DuplicateNameError(RegistryError):
    """Capability name (or resource URI) already registered for this kind"""
    def __init__(self, kind: CapabilityKind, name: str):
        super().__init__(f"A {kind.value} named '{name}' is already registered")
        self.kind = kind
        self.name = name


class NotFoundError(RegistryError):
    """No capability registered under this kind and name"""
    def __init__(self, kind: CapabilityKind, name: str):
        super().__init__(f"No {kind.value} named '{name}' is registered")
        self.kind = kind
        self.name = name


class CapRegistry:
    """In-memory registry of capabilities

    Each registry is an explicit instance; nothing is shared between
    registries, so several can coexist in one process.
    """

    def __init__(self, output_validator: Optional[OutputValidator] = None):
        self._caps: Dict[Tuple[CapabilityKind, str], Capability] = {}
        self._resource_uris: Dict[str, ResourceCap] = {}
        self.output_validator = output_validator or OutputValidator()

    def register(self, cap: Capability) -> Capability:
        """Register a capability

        Args:
            cap: The capability definition

        Returns:
            The registered capability

        Raises:
            DuplicateNameError: If the kind/name pair, or a resource URI, is taken
            SchemaCompilationError: If an operation declares an invalid output schema
        """
        key = (cap.kind, cap.name)
        if key in self._caps:
            raise DuplicateNameError(cap.kind, cap.name)

        if isinstance(cap, ResourceCap):
            if cap.uri in self._resource_uris:
                raise DuplicateNameError(cap.kind, cap.uri)
            self._resource_uris[cap.uri] = cap
        elif isinstance(cap, OperationCap) and cap.output_schema is not None:
            self.output_validator.compile(cap.output_schema)

        self._caps[key] = cap
        return cap

    def operation(
        self,
        name: str,
        description: str,
        input_schema: SchemaDescriptor,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> Callable[[OperationHandler], OperationHandler]:
        """Decorator registering an operation handler"""
        def decorator(handler: OperationHandler) -> OperationHandler:
            self.register(OperationCap(name, description, input_schema, handler, output_schema))
            return handler
        return decorator

    def resource(
        self,
        name: str,
        uri: str,
        description: str,
        mime_type: str = "application/json",
    ) -> Callable[[ResourceHandler], ResourceHandler]:
        """Decorator registering a resource handler"""
        def decorator(handler: ResourceHandler) -> ResourceHandler:
            self.register(ResourceCap(name, uri, description, handler, mime_type))
            return handler
        return decorator

    def template(
        self,
        name: str,
        description: str,
        input_schema: SchemaDescriptor,
    ) -> Callable[[TemplateHandler], TemplateHandler]:
        """Decorator registering a template handler"""
        def decorator(handler: TemplateHandler) -> TemplateHandler:
            self.register(TemplateCap(name, description, input_schema, handler))
            return handler
        return decorator

    def resolve(self, kind: CapabilityKind, name: str) -> Capability:
        """Look up a capability

        Raises:
            NotFoundError: If nothing is registered under kind and name
        """
        try:
            return self._caps[(kind, name)]
        except KeyError:
            raise NotFoundError(kind, name) from None

    def resolve_resource_uri(self, uri: str) -> ResourceCap:
        """Look up a resource by its exact URI

        Raises:
            NotFoundError: If no resource serves this URI
        """
        try:
            return self._resource_uris[uri]
        except KeyError:
            raise NotFoundError(CapabilityKind.RESOURCE, uri) from None

    def has(self, kind: CapabilityKind, name: str) -> bool:
        return (kind, name) in self._caps

    def list(self, kind: Optional[CapabilityKind] = None) -> List[Capability]:
        """All capabilities in registration order, optionally of one kind"""
        return [cap for (k, _), cap in self._caps.items() if kind is None or k == kind]

    def __len__(self) -> int:
        return len(self._caps)

    def snapshot(self, server_name: str, server_version: str) -> Dict[str, Any]:
        """Build a JSON-serializable listing of every registered capability

        Rebuilt on each call so it always reflects the current registry.
        """
        return {
            "server": {
                "name": server_name,
                "version": server_version,
            },
            "capabilities": [cap.to_dict() for cap in self.list()],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
