"""Invocation dispatcher

The dispatcher is the single entry point a host uses to run capabilities:

1. resolve (kind, name) in the registry
2. validate the raw input against the capability's input schema
3. await the handler exactly once, optionally under a deadline
4. check that an operation's envelope mirrors its content, then return
   the handler's result unmodified

Dispatch-level failures are raised as DispatchError subclasses. They are
distinct from error-as-data envelopes, which a handler returns when a
predictable failure should be rendered to the end caller.

Handlers run as independently awaited coroutines. The dispatcher keeps no
per-invocation state on itself, so any number of invocations may be in
flight at once and complete in any order.
"""

import asyncio
from typing import Any, List, Optional, Union

from capserve.cap.definition import CapabilityKind, OperationCap, ResourceCap, TemplateCap
from capserve.cap.registry import CapRegistry, NotFoundError
from capserve.cap.response import EnvelopeMismatchError, PromptResult, ResourceResult, ResponseEnvelope
from capserve.log import LogEmitter, NullLogEmitter
from capserve.schema.output_validation import OutputValidationError
from capserve.schema.validation import Violation, validate


InvocationResult = Union[ResponseEnvelope, ResourceResult, PromptResult]

_EXPECTED_RESULT = {
    CapabilityKind.OPERATION: ResponseEnvelope,
    CapabilityKind.RESOURCE: ResourceResult,
    CapabilityKind.TEMPLATE: PromptResult,
}


class DispatchError(Exception):
    """Base class for failures raised by the dispatcher itself"""
    pass


class UnknownCapabilityError(DispatchError):
    """No capability registered under the requested kind and name"""
    def __init__(self, kind: CapabilityKind, name: str):
        super().__init__(f"Unknown {kind.value} '{name}'")
        self.kind = kind
        self.name = name


class InvalidInputError(DispatchError):
    """Input failed schema validation; the handler was not invoked"""
    def __init__(self, name: str, violations: List[Violation]):
        details = "\n".join(f"  - {v.message}" for v in violations)
        super().__init__(f"Invalid input for '{name}':\n{details}")
        self.name = name
        self.violations = violations


class HandlerFailure(DispatchError):
    """The capability handler raised"""
    def __init__(self, name: str, cause: BaseException):
        super().__init__(f"Capability '{name}' failed: {cause}")
        self.name = name
        self.cause = cause


class InvocationCancelledError(DispatchError):
    """The invocation was cancelled or ran past its deadline"""
    def __init__(self, name: str, reason: str):
        super().__init__(f"Invocation of '{name}' was cancelled: {reason}")
        self.name = name
        self.reason = reason


class OutputValidationFailure(DispatchError):
    """The handler's structured output does not match its declared schema"""
    def __init__(self, name: str, cause: OutputValidationError):
        super().__init__(str(cause))
        self.name = name
        self.cause = cause


class Dispatcher:
    """Routes invocations to registered capabilities"""

    def __init__(self, registry: CapRegistry, log: Optional[LogEmitter] = None):
        self.registry = registry
        self.log = log or NullLogEmitter()

    async def invoke(
        self,
        kind: CapabilityKind,
        name: str,
        raw_input: Any = None,
        timeout: Optional[float] = None,
    ) -> InvocationResult:
        """Invoke a capability

        Args:
            kind: Capability kind
            name: Capability name (for resources, the name or exact URI)
            raw_input: Caller-supplied input mapping. Ignored for resources.
            timeout: Optional deadline in seconds

        Returns:
            ResponseEnvelope for operations, ResourceResult for resources,
            PromptResult for templates

        Raises:
            UnknownCapabilityError: Nothing registered under kind and name
            InvalidInputError: Input failed validation
            HandlerFailure: The handler raised or returned an inconsistent envelope
            InvocationCancelledError: Deadline expired or handler cancelled
            OutputValidationFailure: Structured output violates the output schema
        """
        cap = self._resolve(kind, name)

        if isinstance(cap, ResourceCap):
            # Resources take no caller input
            call = cap.handler
        else:
            result = validate(cap.input_schema, raw_input)
            if not result.ok:
                self.log.emit_log("warn", f"Rejected input for {kind.value} '{cap.name}': {len(result.violations)} violation(s)")
                raise InvalidInputError(cap.name, result.violations)
            args = result.value

            def call():
                return cap.handler(args)

        self.log.emit_log("debug", f"Invoking {kind.value} '{cap.name}'")
        output = await self._run_handler(cap.name, call, timeout)

        expected = _EXPECTED_RESULT[kind]
        if not isinstance(output, expected):
            cause = TypeError(f"handler returned {type(output).__name__}, expected {expected.__name__}")
            self.log.emit_log("error", f"{kind.value} '{cap.name}' {cause}")
            raise HandlerFailure(cap.name, cause)

        if isinstance(cap, OperationCap):
            try:
                output.check_mirror()
            except EnvelopeMismatchError as e:
                self.log.emit_log("error", f"{kind.value} '{cap.name}' returned an inconsistent envelope: {e}")
                raise HandlerFailure(cap.name, e) from e

        if isinstance(cap, OperationCap) and cap.output_schema is not None:
            try:
                self.registry.output_validator.validate(cap.name, output.structured_content, cap.output_schema)
            except OutputValidationError as e:
                self.log.emit_log("error", str(e))
                raise OutputValidationFailure(cap.name, e) from e

        self.log.emit_log("debug", f"Completed {kind.value} '{cap.name}'")
        return output

    def _resolve(self, kind: CapabilityKind, name: str):
        try:
            return self.registry.resolve(kind, name)
        except NotFoundError:
            pass

        if kind == CapabilityKind.RESOURCE:
            try:
                return self.registry.resolve_resource_uri(name)
            except NotFoundError:
                pass

        self.log.emit_log("warn", f"Unknown {kind.value} '{name}'")
        raise UnknownCapabilityError(kind, name)

    async def _run_handler(self, name: str, call, timeout: Optional[float]):
        deadline = asyncio.timeout(timeout)
        try:
            async with deadline:
                return await call()
        except TimeoutError as e:
            if deadline.expired():
                self.log.emit_log("error", f"'{name}' exceeded its deadline of {timeout}s")
                raise InvocationCancelledError(name, f"deadline of {timeout}s exceeded") from e
            self.log.emit_log("error", f"'{name}' failed: {e}")
            raise HandlerFailure(name, e) from e
        except asyncio.CancelledError as e:
            # Our own caller is being cancelled: let it propagate
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            self.log.emit_log("error", f"'{name}' was cancelled")
            raise InvocationCancelledError(name, "handler task cancelled") from e
        except Exception as e:
            self.log.emit_log("error", f"'{name}' failed: {e}")
            raise HandlerFailure(name, e) from e

    async def call_operation(self, name: str, args: Any = None, timeout: Optional[float] = None) -> ResponseEnvelope:
        """Invoke an operation"""
        return await self.invoke(CapabilityKind.OPERATION, name, args, timeout)

    async def read_resource(self, uri: str, timeout: Optional[float] = None) -> ResourceResult:
        """Fetch a resource by URI (or name)"""
        return await self.invoke(CapabilityKind.RESOURCE, uri, None, timeout)

    async def get_prompt(self, name: str, args: Any = None, timeout: Optional[float] = None) -> PromptResult:
        """Render a template"""
        return await self.invoke(CapabilityKind.TEMPLATE, name, args, timeout)
