"""Tool definition decoding and prompt formatting.

Input is an OpenAI-style tools array:

[{"type": "function",
  "function": {"name": "lookup", "description": "Search", "parameters": {...}}}]

The parameter schema is never parsed; its exact text is carried through to
`format_tools_for_prompt` so the model sees it unchanged.
"""

from __future__ import annotations

import logging

from .scanner import Scanner
from .types import Decoded, ToolDescriptor

logger = logging.getLogger(__name__)

_FUNCTION_KEY = '"function"'
_NAME_KEY = '"name"'
_DESCRIPTION_KEY = '"description"'
_PARAMETERS_KEY = '"parameters"'


def decode_tools(text: str) -> Decoded[list[ToolDescriptor]]:
    """Decode a tools array into descriptors.

    Empty input and input without an array both yield no tools. A tool missing
    its name or description gets an empty string for that field.
    """
    tools: list[ToolDescriptor] = []
    if not text:
        return Decoded(tools)

    scanner = Scanner(text)
    if not scanner.skip_to("["):
        return Decoded(tools)

    partial = False
    while scanner.skip_past(_FUNCTION_KEY):
        if not _at_value_of_key(scanner):
            # "function" as a value, e.g. "type": "function"
            continue
        scanner.skip_whitespace()
        if scanner.peek() != "{":
            logger.debug("Skipping non-object 'function' value at offset %d", scanner.pos)
            continue

        body_start = scanner.pos
        body = scanner.match_balanced()
        if body is None:
            # Unterminated; read what is there and stop after this record.
            body = text[body_start:]
            scanner.seek(len(text))
            partial = True

        tool, complete = _decode_function_body(body)
        tools.append(tool)
        partial = partial or not complete

    if partial:
        logger.debug("Tool decode was partial after %d tool(s)", len(tools))
    return Decoded(tools, partial=partial)


def _at_value_of_key(scanner: Scanner) -> bool:
    """True if the cursor is at `:` (after optional whitespace); consumes it."""
    scanner.skip_whitespace()
    if scanner.peek() != ":":
        return False
    scanner.advance()
    return True


def _decode_function_body(body: str) -> tuple[ToolDescriptor, bool]:
    scanner = Scanner(body)
    parameters: dict[str, str] = {}
    schema_span = (-1, -1)
    complete = True

    params_at = scanner.find(_PARAMETERS_KEY)
    if params_at != -1:
        scanner.seek(params_at + len(_PARAMETERS_KEY))
        if scanner.skip_to("{"):
            schema_start = scanner.pos
            schema = scanner.match_balanced()
            if schema is None:
                complete = False
            else:
                parameters["schema"] = schema
                schema_span = (schema_start, scanner.pos)

    name = _read_string_field(body, _NAME_KEY, schema_span)
    description = _read_string_field(body, _DESCRIPTION_KEY, schema_span)
    return ToolDescriptor(name=name, description=description, parameters=parameters), complete


def _read_string_field(body: str, key: str, skip_span: tuple[int, int]) -> str:
    """Raw quoted value of the first `key` outside `skip_span`, or ""."""
    scanner = Scanner(body)
    lo, hi = skip_span
    at = scanner.find(key)
    while at != -1 and lo <= at < hi:
        at = scanner.find(key, hi)
    if at == -1:
        return ""
    scanner.seek(at + len(key))
    value = scanner.read_quoted(escaped_quotes=True)
    return "" if value is None else value


def format_tools_for_prompt(tools: list[ToolDescriptor]) -> str:
    """Render tools back into prompt-embeddable JSON objects.

    One object per tool, joined by ",\\n". Callers wrap the result in brackets
    when they need an array. Names and descriptions are emitted as-is (they are
    kept in their escaped wire form by `decode_tools`).
    """
    if not tools:
        return ""
    rendered: list[str] = []
    for tool in tools:
        lines = [
            "  {",
            '    "type": "function",',
            '    "function": {',
            f'      "name": "{tool.name}",',
            f'      "description": "{tool.description}"',
        ]
        schema = tool.parameters.get("schema")
        if schema is not None:
            lines[-1] += ","
            lines.append(f'      "parameters": {schema}')
        lines.append("    }")
        lines.append("  }")
        rendered.append("\n".join(lines))
    return ",\n".join(rendered)
