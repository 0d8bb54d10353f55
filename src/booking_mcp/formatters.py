"""Shared formatting functions for MCP responses.

Every tool returns one text content item holding a JSON body:
- success: {"success": true, "data": ..., "count"?: n, "message": "..."}
- failure: {"success": false, "error": "...", "data": null} with isError set
"""
import json
from typing import Any, Optional

from mcp.types import CallToolResult, TextContent
from pydantic import BaseModel


def to_data(value: Any) -> Any:
    """Convert response schemas (or lists of them) into JSON-ready values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [to_data(item) for item in value]
    return value


def _envelope(body: dict, **flags) -> CallToolResult:
    text = json.dumps(body, indent=2, default=str)
    return CallToolResult(content=[TextContent(type="text", text=text)], **flags)


def success(data: Any, message: str, count: Optional[int] = None) -> CallToolResult:
    """Build a success envelope."""
    body: dict[str, Any] = {"success": True, "data": to_data(data)}
    if count is not None:
        body["count"] = count
    body["message"] = message
    return _envelope(body)


def failure(error: str) -> CallToolResult:
    """Build a failure envelope."""
    return _envelope({"success": False, "error": error, "data": None}, isError=True)


def parse_envelope(result: CallToolResult) -> dict:
    """Decode the JSON body of an envelope produced by this module."""
    return json.loads(result.content[0].text)


def format_count(count: int, noun: str) -> str:
    """'Found 3 offering(s)'."""
    return f"Found {count} {noun}(s)"


def format_created(noun: str, record: BaseModel) -> str:
    return f'{noun} "{record.name}" created successfully with ID {record.id}'


def format_updated(noun: str, record: BaseModel) -> str:
    return f'{noun} "{record.name}" updated successfully'


def format_deleted(noun: str, name: str) -> str:
    return f'{noun} "{name}" deleted successfully'


def format_validation_errors(errors: list[dict]) -> list[str]:
    """Turn pydantic error dicts into 'field: message' lines."""
    lines = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        lines.append(f"{location}: {error.get('msg', 'invalid value')}")
    return lines
