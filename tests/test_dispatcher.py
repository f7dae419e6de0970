"""Tests for the invocation dispatcher

Tests use # TEST###: comments for the test catalog.
"""

import asyncio

import pytest
from capserve.cap.definition import (
    TEXT_OUTPUT_SCHEMA,
    CapabilityKind,
    OperationCap,
    ResourceCap,
    TemplateCap,
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
from capserve.cap.registry import CapRegistry
from capserve.cap.response import (
    EnvelopeMismatchError,
    PromptResult,
    ResourceContents,
    ResourceResult,
    ResponseEnvelope,
    TextContent,
)
from capserve.log import RecordingLogEmitter
from capserve.schema.descriptor import SchemaDescriptor, number_field, string_field
from capserve.schema.validation import MissingField, OutOfRange


class CountingHandler:
    """Operation handler that records every call"""

    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = result or ResponseEnvelope.text("ok")
        self.error = error

    async def __call__(self, args):
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        return self.result


LIMIT_SCHEMA = SchemaDescriptor.of(
    string_field("query"),
    number_field("limit", required=False, default=1, minimum=1, maximum=10, integer=True),
)


def _dispatcher(*caps, log=None):
    registry = CapRegistry()
    for cap in caps:
        registry.register(cap)
    return Dispatcher(registry, log)


# TEST052: Test a valid invocation passes normalized input and returns the envelope unmodified
@pytest.mark.asyncio
async def test_invoke_returns_handler_envelope():
    envelope = ResponseEnvelope.text("found")
    handler = CountingHandler(result=envelope)
    dispatcher = _dispatcher(OperationCap("search", "", LIMIT_SCHEMA, handler))

    result = await dispatcher.invoke(CapabilityKind.OPERATION, "search", {"query": "seoul"})

    assert result is envelope
    assert handler.calls == [{"query": "seoul", "limit": 1}]


# TEST053: Test unknown capability fails before any handler runs
@pytest.mark.asyncio
async def test_unknown_capability_never_calls_handler():
    handler = CountingHandler()
    dispatcher = _dispatcher(OperationCap("search", "", LIMIT_SCHEMA, handler))

    with pytest.raises(UnknownCapabilityError) as exc_info:
        await dispatcher.invoke(CapabilityKind.OPERATION, "lookup", {"query": "x"})

    assert exc_info.value.name == "lookup"
    assert handler.calls == []


# TEST054: Test unknown kind/name pairing fails even when the name exists under another kind
@pytest.mark.asyncio
async def test_kind_mismatch_is_unknown():
    dispatcher = _dispatcher(OperationCap("search", "", LIMIT_SCHEMA, CountingHandler()))

    with pytest.raises(UnknownCapabilityError):
        await dispatcher.invoke(CapabilityKind.TEMPLATE, "search", {"query": "x"})


# TEST055: Test invalid input fails with every violation and the handler is not invoked
@pytest.mark.asyncio
async def test_invalid_input_not_invoked():
    handler = CountingHandler()
    dispatcher = _dispatcher(OperationCap("search", "", LIMIT_SCHEMA, handler))

    with pytest.raises(InvalidInputError) as exc_info:
        await dispatcher.call_operation("search", {"limit": 99})

    assert exc_info.value.violations == [MissingField("query"), OutOfRange("limit", 99, 1, 10)]
    assert handler.calls == []


# TEST056: Test handler exceptions are wrapped in HandlerFailure with the cause
@pytest.mark.asyncio
async def test_handler_exception_wrapped():
    cause = ConnectionError("provider unreachable")
    dispatcher = _dispatcher(OperationCap("search", "", LIMIT_SCHEMA, CountingHandler(error=cause)))

    with pytest.raises(HandlerFailure) as exc_info:
        await dispatcher.call_operation("search", {"query": "x"})

    assert exc_info.value.name == "search"
    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    assert isinstance(exc_info.value, DispatchError)


# TEST057: Test the handler runs exactly once per invocation
@pytest.mark.asyncio
async def test_handler_runs_once():
    handler = CountingHandler(error=RuntimeError("boom"))
    dispatcher = _dispatcher(OperationCap("search", "", LIMIT_SCHEMA, handler))

    with pytest.raises(HandlerFailure):
        await dispatcher.call_operation("search", {"query": "x"})
    assert len(handler.calls) == 1


# TEST058: Test a handler returning the wrong result type is a HandlerFailure
@pytest.mark.asyncio
async def test_wrong_result_type():
    async def bad(args):
        return {"content": []}

    dispatcher = _dispatcher(OperationCap("bad", "", SchemaDescriptor.empty(), bad))

    with pytest.raises(HandlerFailure) as exc_info:
        await dispatcher.call_operation("bad")
    assert isinstance(exc_info.value.cause, TypeError)


# TEST059: Test deadline expiry surfaces as InvocationCancelledError, not HandlerFailure
@pytest.mark.asyncio
async def test_deadline_cancels():
    async def slow(args):
        await asyncio.sleep(10)
        return ResponseEnvelope.text("late")

    dispatcher = _dispatcher(OperationCap("slow", "", SchemaDescriptor.empty(), slow))

    with pytest.raises(InvocationCancelledError) as exc_info:
        await dispatcher.call_operation("slow", {}, timeout=0.01)

    assert not isinstance(exc_info.value, HandlerFailure)
    assert "deadline" in exc_info.value.reason


# TEST060: Test a handler whose work is cancelled surfaces InvocationCancelledError
@pytest.mark.asyncio
async def test_handler_cancellation():
    async def cancelled(args):
        future = asyncio.get_running_loop().create_future()
        future.cancel()
        await future
        return ResponseEnvelope.text("unreachable")

    dispatcher = _dispatcher(OperationCap("cancelled", "", SchemaDescriptor.empty(), cancelled))

    with pytest.raises(InvocationCancelledError):
        await dispatcher.call_operation("cancelled")


# TEST061: Test a handler raising TimeoutError on its own is a HandlerFailure
@pytest.mark.asyncio
async def test_handler_timeout_error_is_failure():
    dispatcher = _dispatcher(OperationCap("t", "", SchemaDescriptor.empty(), CountingHandler(error=TimeoutError("upstream"))))

    with pytest.raises(HandlerFailure):
        await dispatcher.call_operation("t", {}, timeout=5)


# TEST062: Test cancelling the caller propagates CancelledError unchanged
@pytest.mark.asyncio
async def test_caller_cancellation_propagates():
    started = asyncio.Event()

    async def slow(args):
        started.set()
        await asyncio.sleep(10)
        return ResponseEnvelope.text("late")

    dispatcher = _dispatcher(OperationCap("slow", "", SchemaDescriptor.empty(), slow))
    task = asyncio.create_task(dispatcher.call_operation("slow"))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


# TEST063: Test concurrent invocations complete independently and out of order
@pytest.mark.asyncio
async def test_concurrent_invocations():
    order = []

    async def sleeper(args):
        await asyncio.sleep(args["delay"])
        order.append(args["label"])
        return ResponseEnvelope.text(args["label"])

    schema = SchemaDescriptor.of(number_field("delay"), string_field("label"))
    dispatcher = _dispatcher(OperationCap("sleep", "", schema, sleeper))

    results = await asyncio.gather(
        dispatcher.call_operation("sleep", {"delay": 0.05, "label": "slow"}),
        dispatcher.call_operation("sleep", {"delay": 0.0, "label": "fast"}),
    )

    assert [r.first_text() for r in results] == ["slow", "fast"]
    assert order == ["fast", "slow"]


# TEST064: Test resources skip validation and resolve by name or URI
@pytest.mark.asyncio
async def test_resource_dispatch():
    calls = []

    async def info():
        calls.append(True)
        return ResourceResult([ResourceContents("capserve://info", "{}")])

    dispatcher = _dispatcher(ResourceCap("info", "capserve://info", "", info))

    by_uri = await dispatcher.read_resource("capserve://info")
    by_name = await dispatcher.invoke(CapabilityKind.RESOURCE, "info", {"ignored": True})

    assert by_uri.contents[0].uri == "capserve://info"
    assert isinstance(by_name, ResourceResult)
    assert len(calls) == 2


# TEST065: Test templates are validated and return prompt results
@pytest.mark.asyncio
async def test_template_dispatch():
    async def render(args):
        return PromptResult.user_text(f"Review {args['code']}")

    dispatcher = _dispatcher(TemplateCap("review", "", SchemaDescriptor.of(string_field("code")), render))

    result = await dispatcher.get_prompt("review", {"code": "x = 1"})
    assert result.messages[0].content.text == "Review x = 1"

    with pytest.raises(InvalidInputError):
        await dispatcher.get_prompt("review", {})


# TEST066: Test structured output is checked against the declared output schema
@pytest.mark.asyncio
async def test_output_schema_enforced():
    dispatcher = _dispatcher(
        OperationCap("img", "", SchemaDescriptor.empty(), CountingHandler(result=ResponseEnvelope.image(b"png")), TEXT_OUTPUT_SCHEMA),
        OperationCap("txt", "", SchemaDescriptor.empty(), CountingHandler(), TEXT_OUTPUT_SCHEMA),
    )

    with pytest.raises(OutputValidationFailure):
        await dispatcher.call_operation("img")

    result = await dispatcher.call_operation("txt")
    assert result.first_text() == "ok"


# TEST067: Test error-as-data envelopes are returned, not raised
@pytest.mark.asyncio
async def test_error_as_data_returned():
    envelope = ResponseEnvelope.error_text("Location not found")
    dispatcher = _dispatcher(OperationCap("find", "", SchemaDescriptor.empty(), CountingHandler(result=envelope), TEXT_OUTPUT_SCHEMA))

    result = await dispatcher.call_operation("find")
    assert result is envelope
    assert result.is_error


# TEST068: Test the dispatcher reports invocations and failures through its log emitter
@pytest.mark.asyncio
async def test_dispatch_logging():
    log = RecordingLogEmitter()
    dispatcher = _dispatcher(
        OperationCap("ok", "", SchemaDescriptor.empty(), CountingHandler()),
        OperationCap("fail", "", SchemaDescriptor.empty(), CountingHandler(error=ValueError("bad"))),
        log=log,
    )

    await dispatcher.call_operation("ok")
    with pytest.raises(HandlerFailure):
        await dispatcher.call_operation("fail")
    with pytest.raises(UnknownCapabilityError):
        await dispatcher.call_operation("missing")

    assert "Invoking operation 'ok'" in log.messages("debug")
    assert "Completed operation 'ok'" in log.messages("debug")
    assert any("'fail' failed: bad" in m for m in log.messages("error"))
    assert any("missing" in m for m in log.messages("warn"))


# TEST106: Test an operation envelope whose mirror disagrees with its content is a HandlerFailure
@pytest.mark.asyncio
async def test_inconsistent_envelope_rejected():
    drifted = ResponseEnvelope([TextContent("42")], {"content": [{"type": "text", "text": "41"}]})
    consistent = ResponseEnvelope([TextContent("42")], {"content": [{"type": "text", "text": "42"}]})
    log = RecordingLogEmitter()
    dispatcher = _dispatcher(
        OperationCap("drift", "", SchemaDescriptor.empty(), CountingHandler(result=drifted)),
        OperationCap("steady", "", SchemaDescriptor.empty(), CountingHandler(result=consistent)),
        log=log,
    )

    with pytest.raises(HandlerFailure) as exc_info:
        await dispatcher.call_operation("drift")

    assert isinstance(exc_info.value.cause, EnvelopeMismatchError)
    assert any("'drift' returned an inconsistent envelope" in m for m in log.messages("error"))
    assert await dispatcher.call_operation("steady") is consistent
