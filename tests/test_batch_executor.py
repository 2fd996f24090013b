"""Unit tests for domagent.engine.batch_executor -- per-item validation and execution."""

from __future__ import annotations

from conftest import FakeElementService, run_async
from domagent.engine.action_executor import CommandExecutor
from domagent.engine.batch_executor import BatchExecutor
from domagent.errors import ElementInteractionError, ErrorKind, InteractionErrorKind


def _run_batch(service: FakeElementService, items: list) -> list:
    return run_async(BatchExecutor(CommandExecutor(service)).execute_batch(items))


# ---------------------------------------------------------------------------
# 1. Index alignment and isolation
# ---------------------------------------------------------------------------

class TestBatchIsolation:

    def test_malformed_middle_item_does_not_stop_batch(self, service: FakeElementService):
        items = [
            {"action": "CLICK", "selector": "#a"},
            "not a command",
            {"action": "READ", "selector": "h1"},
        ]
        results = _run_batch(service, items)

        assert len(results) == 3
        assert [r.success for r in results] == [True, False, True]
        assert results[1].error.kind is ErrorKind.INVALID_MODEL_RESPONSE
        assert service.methods_called() == ["click", "get_text"]

    def test_unknown_verb_item(self, service: FakeElementService):
        results = _run_batch(service, [{"action": "PRESS", "selector": "#a"}, {"action": "HOVER", "selector": "#m"}])
        assert results[0].error.kind is ErrorKind.COMMAND_VALIDATION
        assert results[0].error.details == {"index": 0, "verb": "PRESS"}
        assert results[1].success

    def test_missing_required_field_item(self, service: FakeElementService):
        results = _run_batch(service, [{"action": "TYPE", "selector": "#name"}])
        error = results[0].error
        assert error.kind is ErrorKind.COMMAND_VALIDATION
        assert error.details["missing"] == ["value"]
        assert error.details["command"]["action"] == "TYPE"
        assert service.calls == []

    def test_execution_failure_does_not_stop_batch(self, service: FakeElementService):
        service.errors["click"] = ElementInteractionError(
            InteractionErrorKind.ELEMENT_NOT_FOUND,
            "ElementNotFound: No element found for CSS selector '#a'",
        )
        results = _run_batch(
            service,
            [{"action": "CLICK", "selector": "#a"}, {"action": "GET_URL", "selector": ""}],
        )
        assert [r.success for r in results] == [False, True]
        assert results[0].error.kind is ErrorKind.ELEMENT_INTERACTION
        assert results[0].error.details["sub_kind"] == "ElementNotFound"

    def test_empty_batch(self, service: FakeElementService):
        assert _run_batch(service, []) == []


# ---------------------------------------------------------------------------
# 2. Message prefixes
# ---------------------------------------------------------------------------

class TestBatchPrefixes:

    def test_success_message_is_prefixed(self, service: FakeElementService):
        results = _run_batch(
            service,
            [
                {"action": "CLICK", "selector": "#a"},
                {"action": "TYPE", "selector": "#name", "value": "Ada"},
            ],
        )
        assert results[0].output == "Command 0 (CLICK #a): Successfully clicked element with selector: #a"
        assert results[1].output == (
            "Command 1 (TYPE #name Ada): Successfully typed 'Ada' into element with selector: #name"
        )

    def test_failure_message_is_prefixed(self, service: FakeElementService):
        service.errors["get_text"] = ElementInteractionError(
            InteractionErrorKind.ELEMENT_NOT_FOUND,
            "ElementNotFound: No element found for CSS selector 'h9'",
        )
        results = _run_batch(service, [{"action": "READ", "selector": "h9"}])
        assert results[0].error.message == (
            "Command 0 (READ h9): ElementNotFound: No element found for CSS selector 'h9'"
        )

    def test_wait_value_maps_to_timeout(self, service: FakeElementService):
        results = _run_batch(service, [{"action": "WAIT_FOR_ELEMENT", "selector": "#r", "value": "750"}])
        assert results[0].output == "Command 0 (WAIT_FOR_ELEMENT #r 750): Element '#r' appeared within 750ms"
        assert service.calls == [("wait_for_element", ("#r", 750))]

    def test_wait_superscript_value_uses_default_timeout(self, service: FakeElementService):
        items = [
            {"action": "WAIT_FOR_ELEMENT", "selector": "#x", "value": "²"},
            {"action": "GET_URL", "selector": ""},
        ]
        results = _run_batch(service, items)
        assert [r.success for r in results] == [True, True]
        assert service.calls[0] == ("wait_for_element", ("#x", 5000))
