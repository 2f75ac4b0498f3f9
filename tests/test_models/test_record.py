"""Tests for the record model.

Covers:
- Record.from_dict for plain, structured, tool-call and tool-output dicts
- Tool call parsing for OpenAI, Anthropic and canonical shapes
- Invalid dicts raise RecordValidationError
- to_dict produces the OpenAI message shape
- text extraction and derived properties
"""

import pytest
from hypothesis import given

from context_pruner.exceptions import PrunerError, RecordValidationError
from context_pruner.models.record import ContentPart, Record, ToolCall, extract_text
from tests.strategies import chat_record, tool_exchange


# ---------------------------------------------------------------------------
# ToolCall
# ---------------------------------------------------------------------------


class TestToolCall:
    def test_from_openai_parses_json_arguments(self):
        tc = ToolCall.from_openai({
            "id": "call_1",
            "type": "function",
            "function": {"name": "read_file", "arguments": '{"path": "a.py"}'},
        })
        assert tc.id == "call_1"
        assert tc.name == "read_file"
        assert tc.arguments == {"path": "a.py"}

    def test_from_openai_bad_json_kept_raw(self):
        tc = ToolCall.from_openai({"id": "c", "function": {"name": "f", "arguments": "{oops"}})
        assert tc.arguments == {"_raw": "{oops"}

    def test_from_anthropic(self):
        tc = ToolCall.from_anthropic({"type": "tool_use", "id": "tu_1", "name": "grep", "input": {"q": "x"}})
        assert (tc.id, tc.name, tc.arguments) == ("tu_1", "grep", {"q": "x"})

    def test_from_dict_dispatch(self):
        assert ToolCall.from_dict({"id": "a", "function": {"name": "f"}}).name == "f"
        assert ToolCall.from_dict({"type": "tool_use", "id": "b", "name": "g"}).name == "g"
        assert ToolCall.from_dict({"id": "c", "name": "h", "arguments": {"k": 1}}).arguments == {"k": 1}

    @pytest.mark.parametrize(
        "shape",
        [
            {"id": "a", "name": "f", "arguments": "xyz"},
            {"type": "tool_use", "id": "a", "name": "f", "input": "xyz"},
            {"id": "a", "function": {"name": "f", "arguments": '"xyz"'}},
        ],
    )
    def test_non_dict_arguments_kept_raw(self, shape):
        assert ToolCall.from_dict(shape).arguments == {"_raw": "xyz"}

    def test_missing_arguments_empty(self):
        assert ToolCall.from_dict({"id": "a", "name": "f"}).arguments == {}
        assert ToolCall.from_anthropic({"id": "a", "name": "f"}).arguments == {}

    def test_to_openai(self):
        tc = ToolCall(id="c1", name="run", arguments={"cmd": "ls"})
        assert tc.to_openai() == {
            "id": "c1",
            "type": "function",
            "function": {"name": "run", "arguments": '{"cmd": "ls"}'},
        }


# ---------------------------------------------------------------------------
# Record.from_dict
# ---------------------------------------------------------------------------


class TestFromDict:
    def test_plain_text(self):
        r = Record.from_dict({"role": "user", "content": "hello there"})
        assert r.role == "user"
        assert r.content == "hello there"
        assert r.text == "hello there"

    def test_structured_parts(self):
        r = Record.from_dict({
            "role": "user",
            "content": [
                {"type": "text", "text": "look at this"},
                {"type": "image_url", "image_url": {"url": "data:..."}},
            ],
        })
        assert isinstance(r.content, tuple)
        assert r.content[0].is_text
        assert r.content[1].type == "image_url"
        assert r.content[1].data["image_url"] == {"url": "data:..."}
        assert r.text == "look at this"

    def test_tool_calls(self):
        r = Record.from_dict({
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {"id": "a", "type": "function", "function": {"name": "f", "arguments": "{}"}},
                {"id": "b", "type": "function", "function": {"name": "g", "arguments": "{}"}},
            ],
        })
        assert r.tool_call_ids == frozenset({"a", "b"})
        assert r.text == ""

    def test_tool_output(self):
        r = Record.from_dict({"role": "tool", "tool_call_id": "a", "content": "done"})
        assert r.is_tool_output
        assert r.tool_call_id == "a"

    def test_string_tool_arguments_parse(self):
        r = Record.from_dict({"role": "assistant", "tool_calls": [{"id": "a", "arguments": "xyz"}]})
        assert r.tool_call_ids == frozenset({"a"})
        assert r.tool_calls[0].arguments == {"_raw": "xyz"}

    def test_unknown_keys_ignored(self):
        r = Record.from_dict({"role": "user", "content": "hi there", "timestamp": 123})
        assert r == Record(role="user", content="hi there")

    @pytest.mark.parametrize(
        "data",
        [
            {"content": "no role"},
            {"role": "user", "content": 42},
            {"role": "user", "content": [{"text": "part without type"}]},
            {"role": "assistant", "tool_calls": [{"function": {"name": "f"}}]},
            {"role": "assistant", "tool_calls": [{"id": "x", "function": None}]},
        ],
    )
    def test_invalid_raises(self, data):
        with pytest.raises(RecordValidationError):
            Record.from_dict(data)

    def test_validation_error_is_pruner_error(self):
        with pytest.raises(PrunerError):
            Record.from_dict({})


# ---------------------------------------------------------------------------
# Serialization and properties
# ---------------------------------------------------------------------------


class TestToDict:
    def test_plain(self):
        assert Record(role="user", content="hi").to_dict() == {"role": "user", "content": "hi"}

    def test_tool_output_keeps_id(self):
        d = Record(role="tool", content="out", tool_call_id="c").to_dict()
        assert d["tool_call_id"] == "c"

    def test_parts_flattened(self):
        r = Record(role="user", content=(ContentPart(type="image_url", data={"image_url": {"url": "u"}}),))
        assert r.to_dict()["content"] == [{"type": "image_url", "image_url": {"url": "u"}}]

    @given(record=chat_record)
    def test_dict_form_reparses(self, record):
        assert Record.from_dict(record.to_dict()) == record

    @given(records=tool_exchange())
    def test_tool_exchange_reparses(self, records):
        """Tool call ids and tool_call_id links survive serialization."""
        reparsed = [Record.from_dict(r.to_dict()) for r in records]
        assert [r.tool_call_ids for r in reparsed] == [r.tool_call_ids for r in records]
        assert [r.tool_call_id for r in reparsed] == [r.tool_call_id for r in records]


class TestProperties:
    def test_list_inputs_become_tuples(self):
        r = Record(role="user", content=[ContentPart(type="text", text="a")])
        assert isinstance(r.content, tuple)

    def test_has_payload(self):
        assert not Record(role="user").has_payload
        assert not Record(role="user", content="").has_payload
        assert not Record(role="user", content=()).has_payload
        assert Record(role="user", content=(ContentPart(type="image"),)).has_payload

    def test_empty_tool_call_ids_dropped(self):
        r = Record(role="assistant", tool_calls=(ToolCall(id="", name="f", arguments={}),))
        assert r.tool_call_ids == frozenset()

    def test_extract_text_joins_text_parts(self):
        r = Record(
            role="user",
            content=(
                ContentPart(type="text", text="first"),
                ContentPart(type="image"),
                ContentPart(type="text", text="second"),
            ),
        )
        assert extract_text(r) == "first\nsecond"

    def test_content_part_data_read_only(self):
        part = ContentPart(type="image", data={"a": 1})
        with pytest.raises(TypeError):
            part.data["a"] = 2  # type: ignore[index]
