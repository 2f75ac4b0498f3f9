"""Record model for context-pruner.

A Record is one conversational unit: a system/user/assistant turn, an
assistant turn that requests tool calls, or a tool output. Records are
frozen; the pruning engine only ever selects which records to keep.

Dict payloads (live host messages, persisted log lines) are validated with
Pydantic before they become Records.
"""

from __future__ import annotations

import json as _json
import types
from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError

from context_pruner.exceptions import RecordValidationError

SYSTEM_ROLE = "system"
USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
TOOL_ROLE = "tool"

IMAGE_PART_TYPES: frozenset[str] = frozenset({"image", "image_url"})


def _arguments_dict(raw: Any) -> dict:
    """Tool arguments as a dict; anything else is kept under ``_raw``."""
    if not raw:
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    return {"_raw": raw}


@dataclass(frozen=True)
class ToolCall:
    """A tool/function invocation requested by an assistant record.

    Provider-agnostic canonical representation. Arguments are always
    a parsed dict -- OpenAI's JSON string is parsed at ingestion time.
    """

    id: str
    name: str
    arguments: dict
    type: str = "function"

    @classmethod
    def from_openai(cls, tc: Mapping[str, Any]) -> ToolCall:
        """Parse from OpenAI/compatible format."""
        raw_args = tc["function"].get("arguments", "{}")
        try:
            arguments = _json.loads(raw_args) if isinstance(raw_args, str) else raw_args
        except (_json.JSONDecodeError, TypeError):
            arguments = {"_raw": raw_args}
        return cls(
            id=tc["id"],
            name=tc["function"]["name"],
            arguments=arguments if isinstance(arguments, dict) else {"_raw": arguments},
            type=tc.get("type", "function"),
        )

    @classmethod
    def from_anthropic(cls, block: Mapping[str, Any]) -> ToolCall:
        """Parse from an Anthropic tool_use content block."""
        return cls(
            id=block["id"],
            name=block["name"],
            arguments=_arguments_dict(block.get("input")),
        )

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> ToolCall:
        """Parse any supported shape, dispatching on its keys."""
        if "function" in d:
            return cls.from_openai(d)
        if d.get("type") == "tool_use":
            return cls.from_anthropic(d)
        return cls(
            id=d["id"],
            name=d.get("name", ""),
            arguments=_arguments_dict(d.get("arguments")),
            type=d.get("type", "function"),
        )

    def to_openai(self) -> dict:
        """Serialize to OpenAI wire format."""
        return {
            "id": self.id,
            "type": self.type,
            "function": {
                "name": self.name,
                "arguments": _json.dumps(self.arguments),
            },
        }


@dataclass(frozen=True)
class ContentPart:
    """One typed part of a structured payload.

    ``text`` parts carry text; every other type is non-text media and is
    ignored for scoring. Extra provider keys are kept read-only in ``data``.
    """

    type: str
    text: str | None = None
    data: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.data is not None:
            object.__setattr__(self, "data", types.MappingProxyType(dict(self.data)))

    @property
    def is_text(self) -> bool:
        return self.type == "text"

    def to_dict(self) -> dict:
        d: dict = {"type": self.type}
        if self.text is not None:
            d["text"] = self.text
        if self.data:
            d.update(self.data)
        return d


class _ContentPartPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    text: str | None = None


class _RecordPayload(BaseModel):
    """Validation schema for the dict shape of a record."""

    model_config = ConfigDict(extra="ignore")

    role: str
    content: str | list[_ContentPartPayload] | None = None
    tool_call_id: str | None = None
    tool_calls: list[dict[str, Any]] | None = None
    name: str | None = None


@dataclass(frozen=True)
class Record:
    """A single conversational record."""

    role: str
    content: str | tuple[ContentPart, ...] | None = None
    tool_call_id: str | None = None
    tool_calls: tuple[ToolCall, ...] | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.content, list):
            object.__setattr__(self, "content", tuple(self.content))
        if isinstance(self.tool_calls, list):
            object.__setattr__(self, "tool_calls", tuple(self.tool_calls))

    @property
    def text(self) -> str:
        """Plain text of the payload (text parts joined by newlines)."""
        return extract_text(self)

    @property
    def has_payload(self) -> bool:
        """True if the record carries any content at all, text or not."""
        return bool(self.content)

    @property
    def is_tool_output(self) -> bool:
        return self.role == TOOL_ROLE

    @property
    def tool_call_ids(self) -> frozenset[str]:
        """Ids of the tool calls this record requests."""
        if not self.tool_calls:
            return frozenset()
        return frozenset(tc.id for tc in self.tool_calls if tc.id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Record:
        """Build a Record from an OpenAI-style message dict.

        Raises:
            RecordValidationError: If the dict does not describe a record.
        """
        try:
            payload = _RecordPayload.model_validate(data)
        except ValidationError as e:
            raise RecordValidationError(f"Record validation failed: {e}") from e

        content: str | tuple[ContentPart, ...] | None
        if isinstance(payload.content, list):
            content = tuple(
                ContentPart(
                    type=part.type,
                    text=part.text,
                    data=part.model_extra or None,
                )
                for part in payload.content
            )
        else:
            content = payload.content

        tool_calls: tuple[ToolCall, ...] | None = None
        if payload.tool_calls is not None:
            try:
                tool_calls = tuple(ToolCall.from_dict(tc) for tc in payload.tool_calls)
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                raise RecordValidationError(
                    f"Malformed tool call in record: {e!r}"
                ) from e

        return cls(
            role=payload.role,
            content=content,
            tool_call_id=payload.tool_call_id,
            tool_calls=tool_calls,
            name=payload.name,
        )

    def to_dict(self) -> dict:
        """Serialize to an OpenAI-compatible message dict."""
        d: dict = {"role": self.role}
        if isinstance(self.content, tuple):
            d["content"] = [part.to_dict() for part in self.content]
        else:
            d["content"] = self.content
        if self.name is not None:
            d["name"] = self.name
        if self.tool_calls:
            d["tool_calls"] = [tc.to_openai() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            d["tool_call_id"] = self.tool_call_id
        return d


def extract_text(record: Record) -> str:
    """Concatenate the text parts of a record, ignoring non-text parts."""
    content = record.content
    if isinstance(content, str):
        return content
    if not content:
        return ""
    return "\n".join(part.text for part in content if part.is_text and part.text)
