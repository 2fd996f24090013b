"""Unit tests for domagent.engine.commands -- Verb, StructuredCommand, ProposedCommand."""

from __future__ import annotations

import pytest

from domagent.engine.commands import ProposedCommand, StructuredCommand, Verb, parse_timeout_ms
from domagent.errors import CommandValidationError, ErrorKind, InvalidModelResponseError


# ---------------------------------------------------------------------------
# 1. Verb
# ---------------------------------------------------------------------------

class TestVerb:

    def test_closed_set_has_fifteen_verbs(self):
        assert len(Verb) == 15

    def test_lookup_is_case_insensitive(self):
        assert Verb.lookup("click") is Verb.CLICK
        assert Verb.lookup(" Get_All_Text ") is Verb.GET_ALL_TEXT

    def test_lookup_unknown_returns_none(self):
        assert Verb.lookup("PRESS") is None
        assert Verb.lookup("") is None

    def test_only_get_url_needs_no_selector(self):
        assert [v for v in Verb if not v.requires_selector] == [Verb.GET_URL]

    def test_value_and_attribute_requirements(self):
        assert {v for v in Verb if v.requires_value} == {Verb.TYPE, Verb.SETATTRIBUTE, Verb.SELECTOPTION}
        assert {v for v in Verb if v.requires_attribute} == {
            Verb.GETATTRIBUTE,
            Verb.SETATTRIBUTE,
            Verb.GET_ALL_ATTRIBUTES,
        }


# ---------------------------------------------------------------------------
# 2. StructuredCommand validation
# ---------------------------------------------------------------------------

class TestStructuredCommand:

    def test_click_requires_selector(self):
        with pytest.raises(CommandValidationError) as exc_info:
            StructuredCommand(verb=Verb.CLICK)
        assert exc_info.value.details["missing"] == "selector"
        assert exc_info.value.kind is ErrorKind.COMMAND_VALIDATION

    def test_type_requires_value(self):
        with pytest.raises(CommandValidationError, match="requires a value"):
            StructuredCommand(verb=Verb.TYPE, selector="#name")

    def test_setattribute_requires_attribute_name(self):
        with pytest.raises(CommandValidationError, match="attribute name"):
            StructuredCommand(verb=Verb.SETATTRIBUTE, selector="#box", value="x")

    def test_negative_timeout_rejected(self):
        with pytest.raises(CommandValidationError, match="non-negative"):
            StructuredCommand(verb=Verb.WAIT_FOR_ELEMENT, selector="#x", timeout_ms=-1)

    def test_get_url_needs_nothing(self):
        cmd = StructuredCommand(verb=Verb.GET_URL)
        assert cmd.selector == ""

    def test_is_immutable(self):
        cmd = StructuredCommand(verb=Verb.CLICK, selector="#go")
        with pytest.raises(AttributeError):
            cmd.selector = "#other"  # type: ignore[misc]

    def test_describe_type(self):
        cmd = StructuredCommand(verb=Verb.TYPE, selector="#name", value="Ada")
        assert cmd.describe() == "TYPE #name Ada"

    def test_describe_setattribute_puts_attribute_before_value(self):
        cmd = StructuredCommand(verb=Verb.SETATTRIBUTE, selector="#box", attribute_name="data-x", value="1")
        assert cmd.describe() == "SETATTRIBUTE #box data-x 1"

    def test_describe_wait_with_timeout(self):
        cmd = StructuredCommand(verb=Verb.WAIT_FOR_ELEMENT, selector="#x", timeout_ms=250)
        assert cmd.describe() == "WAIT_FOR_ELEMENT #x 250"

    def test_describe_get_all_text_quotes_separator(self):
        cmd = StructuredCommand(verb=Verb.GET_ALL_TEXT, selector="li", separator=", ")
        assert cmd.describe() == 'GET_ALL_TEXT li ", "'

    def test_describe_get_url(self):
        assert StructuredCommand(verb=Verb.GET_URL).describe() == "GET_URL"


# ---------------------------------------------------------------------------
# 3. ProposedCommand decoding
# ---------------------------------------------------------------------------

class TestProposedCommandFromDict:

    def test_minimal_item(self):
        proposed = ProposedCommand.from_dict({"action": "CLICK", "selector": "#go"}, 0)
        assert proposed == ProposedCommand(action="CLICK", selector="#go")

    def test_optional_fields(self):
        proposed = ProposedCommand.from_dict(
            {"action": "SETATTRIBUTE", "selector": "#b", "attribute_name": "title", "value": "Hi"}, 0
        )
        assert proposed.value == "Hi"
        assert proposed.attribute_name == "title"

    def test_numeric_value_coerced_to_string(self):
        proposed = ProposedCommand.from_dict({"action": "WAIT_FOR_ELEMENT", "selector": "#x", "value": 2000}, 0)
        assert proposed.value == "2000"

    def test_empty_optional_becomes_none(self):
        proposed = ProposedCommand.from_dict({"action": "CLICK", "selector": "#x", "value": ""}, 0)
        assert proposed.value is None

    def test_missing_selector_defaults_to_empty(self):
        proposed = ProposedCommand.from_dict({"action": "GET_URL"}, 0)
        assert proposed.selector == ""

    @pytest.mark.parametrize(
        "item",
        [
            "CLICK #go",
            42,
            None,
            ["CLICK", "#go"],
            {"selector": "#go"},
            {"action": 7, "selector": "#go"},
            {"action": "CLICK", "selector": None},
            {"action": "TYPE", "selector": "#x", "value": {"nested": True}},
            {"action": "TYPE", "selector": "#x", "value": True},
        ],
    )
    def test_structural_mismatch_raises_invalid_model_response(self, item):
        with pytest.raises(InvalidModelResponseError) as exc_info:
            ProposedCommand.from_dict(item, 3)
        assert exc_info.value.details["index"] == 3
        assert exc_info.value.kind is ErrorKind.INVALID_MODEL_RESPONSE


# ---------------------------------------------------------------------------
# 4. ProposedCommand promotion
# ---------------------------------------------------------------------------

class TestProposedCommandToCommand:

    def test_valid_promotion(self):
        cmd = ProposedCommand(action="type", selector=" #name ", value="Ada").to_command(0)
        assert cmd == StructuredCommand(verb=Verb.TYPE, selector="#name", value="Ada")

    def test_unknown_verb(self):
        with pytest.raises(CommandValidationError) as exc_info:
            ProposedCommand(action="PRESS", selector="#go").to_command(4)
        assert exc_info.value.details == {"index": 4, "verb": "PRESS"}
        assert "PRESS" in exc_info.value.message

    def test_missing_value_names_field_and_command(self):
        with pytest.raises(CommandValidationError) as exc_info:
            ProposedCommand(action="TYPE", selector="#name").to_command(1)
        details = exc_info.value.details
        assert details["index"] == 1
        assert details["verb"] == "TYPE"
        assert details["missing"] == ["value"]
        assert details["command"] == {"action": "TYPE", "selector": "#name", "value": None, "attribute_name": None}

    def test_missing_selector(self):
        with pytest.raises(CommandValidationError) as exc_info:
            ProposedCommand(action="CLICK", selector="  ").to_command(0)
        assert exc_info.value.details["missing"] == ["selector"]

    def test_setattribute_missing_both(self):
        with pytest.raises(CommandValidationError) as exc_info:
            ProposedCommand(action="SETATTRIBUTE", selector="#b").to_command(0)
        assert exc_info.value.details["missing"] == ["value", "attribute_name"]

    def test_irrelevant_fields_dropped(self):
        cmd = ProposedCommand(action="CLICK", selector="#go", value="x", attribute_name="y").to_command(0)
        assert cmd.value is None
        assert cmd.attribute_name is None

    def test_get_url_ignores_selector(self):
        cmd = ProposedCommand(action="GET_URL", selector="body").to_command(0)
        assert cmd == StructuredCommand(verb=Verb.GET_URL)

    def test_wait_numeric_value_becomes_timeout(self):
        cmd = ProposedCommand(action="WAIT_FOR_ELEMENT", selector="#x", value="1500").to_command(0)
        assert cmd.timeout_ms == 1500
        assert cmd.value is None

    def test_wait_non_numeric_value_uses_default(self):
        cmd = ProposedCommand(action="WAIT_FOR_ELEMENT", selector="#x", value="soon").to_command(0)
        assert cmd.timeout_ms is None

    def test_wait_superscript_digit_uses_default(self):
        cmd = ProposedCommand(action="WAIT_FOR_ELEMENT", selector="#x", value="²").to_command(0)
        assert cmd.timeout_ms is None

    def test_get_all_text_value_becomes_separator(self):
        cmd = ProposedCommand(action="GET_ALL_TEXT", selector="li", value=" | ").to_command(0)
        assert cmd.separator == " | "
        assert cmd.value is None


# ---------------------------------------------------------------------------
# 5. parse_timeout_ms()
# ---------------------------------------------------------------------------

class TestParseTimeoutMs:

    def test_ascii_digits(self):
        assert parse_timeout_ms(" 2000 ") == 2000

    @pytest.mark.parametrize("token", [None, "", "1.5", "-3", "²", "٣"])
    def test_rejected_tokens(self, token):
        assert parse_timeout_ms(token) is None
