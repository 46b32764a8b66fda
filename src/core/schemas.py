from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, ValidationError


class DeploymentStatus(str, Enum):
    SUCCESS = "success"
    IN_PROGRESS = "in-progress"
    FAILED = "failed"
    UNKNOWN = "unknown"
    ERROR = "error"


class ReplOwner(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    username: Optional[str] = None


class Repl(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    title: Optional[str] = None
    slug: Optional[str] = None
    url: Optional[str] = None
    language: Optional[str] = None
    is_private: Optional[bool] = Field(default=None, alias="isPrivate")
    owner: Optional[ReplOwner] = None


class HistoryAuthor(BaseModel):
    model_config = ConfigDict(extra="allow")

    username: Optional[str] = None


class HistoryEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    message: Optional[str] = None
    timestamp: Optional[str] = None
    author: Optional[HistoryAuthor] = None


class LogLine(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str = ""
    timestamp: Optional[str] = None


class ReplitUser(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    username: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")


class ExecResult(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    output: Optional[str] = None
    exit_code: int = Field(default=0, alias="exitCode")


def try_validate_repl(payload: Optional[Dict[str, Any]]) -> Optional[Repl]:
    """Validate a `Repl` object returned by GraphQL.

    Returns a Repl or None if the payload is missing or malformed.
    """
    if not payload:
        return None
    try:
        return Repl.model_validate(payload)
    except ValidationError:
        return None


def try_validate_history(payload: Any) -> List[HistoryEntry]:
    """Validate a repl history list, dropping entries that do not parse."""
    if not isinstance(payload, list):
        return []
    entries: List[HistoryEntry] = []
    for item in payload:
        try:
            entries.append(HistoryEntry.model_validate(item))
        except ValidationError:
            continue
    return entries


def try_validate_log_lines(payload: Any) -> Optional[List[LogLine]]:
    """Validate the `logs` list of a repl log response.

    Plain strings are accepted as bare messages. Returns None when the
    payload is not a list at all.
    """
    if not isinstance(payload, list):
        return None
    lines: List[LogLine] = []
    for item in payload:
        if isinstance(item, str):
            lines.append(LogLine(message=item))
            continue
        try:
            lines.append(LogLine.model_validate(item))
        except ValidationError:
            continue
    return lines


class ContentBlock(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["text", "json"]
    text: Optional[str] = None
    json_data: Optional[Dict[str, Any]] = Field(default=None, alias="json")


class ToolResult(BaseModel):
    """Normalized result of one tool call, regardless of backend."""

    content: List[ContentBlock] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, summary: str, payload: Optional[Dict[str, Any]] = None) -> "ToolResult":
        blocks = [ContentBlock(type="text", text=summary)]
        if payload is not None:
            blocks.append(ContentBlock(type="json", json_data=payload))
        return cls(content=blocks)

    @property
    def text(self) -> str:
        return "\n\n".join(b.text for b in self.content if b.type == "text" and b.text)

    @property
    def data(self) -> Optional[Dict[str, Any]]:
        for block in self.content:
            if block.type == "json":
                return block.json_data
        return None

    def to_wire(self) -> Dict[str, Any]:
        blocks: List[Dict[str, Any]] = []
        for block in self.content:
            if block.type == "text":
                blocks.append({"type": "text", "text": block.text or ""})
            else:
                blocks.append({"type": "json", "json": block.json_data or {}})
        return {"content": blocks}
