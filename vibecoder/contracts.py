#!/usr/bin/env python3
"""
Response contracts shared by the tutoring loop.

The model answers with serialized JSON. Everything is decoded here into
frozen dataclasses, and any payload that is not exactly the expected shape is
rejected with DecodeError. Nothing partially-shaped gets through.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from .errors import DecodeError


# =============================================================================
# Structured-output schemas (sent with native-mode requests)
# =============================================================================

DRAWING_COMMAND_SCHEMA = {
    'type': 'OBJECT',
    'properties': {
        'type': {
            'type': 'STRING',
            'description': "Type of drawing command: 'fill', 'circle', 'rect', 'text', 'clear'",
        },
        'color': {
            'type': 'STRING',
            'description': "Color in HEX or RGB format, e.g. '#000000' or '(0, 0, 255)'",
        },
        'x': {'type': 'NUMBER'},
        'y': {'type': 'NUMBER'},
        'radius': {'type': 'NUMBER'},
        'width': {'type': 'NUMBER'},
        'height': {'type': 'NUMBER'},
        'text': {'type': 'STRING'},
    },
    'required': ['type'],
}

TUTOR_JUDGEMENT_SCHEMA = {
    'type': 'OBJECT',
    'properties': {
        'message': {
            'type': 'STRING',
            'description': "A friendly, encouraging message to the child explaining the code "
                           "or giving a hint. MUST be in the requested language.",
        },
        'stepComplete': {
            'type': 'BOOLEAN',
            'description': "True if the user's prompt successfully achieved the current step's goal.",
        },
        'code': {
            'type': 'STRING',
            'description': "The valid Python code snippet corresponding to the request, if successful.",
        },
        'visualAction': {
            'type': 'STRING',
            'description': "The internal action key (e.g. 'DRAW_HERO') for the game preview.",
        },
        'correction': {
            'type': 'STRING',
            'description': "If stepComplete is false, explain what was missing in the prompt.",
        },
    },
    'required': ['message', 'stepComplete'],
}

EXECUTION_RESULT_SCHEMA = {
    'type': 'OBJECT',
    'properties': {
        'consoleOutput': {
            'type': 'STRING',
            'description': "The simulated stdout/stderr output of the code. "
                           "If syntax error, return Python error trace.",
        },
        'isSuccess': {
            'type': 'BOOLEAN',
            'description': "True if the code runs without syntax or runtime errors.",
        },
        'isObjectiveMet': {
            'type': 'BOOLEAN',
            'description': "True ONLY if the code achieves the specific level objective.",
        },
        'drawingCommands': {
            'type': 'ARRAY',
            'description': "List of drawing commands inferred from the code execution.",
            'items': DRAWING_COMMAND_SCHEMA,
        },
    },
    'required': ['consoleOutput', 'isSuccess', 'isObjectiveMet', 'drawingCommands'],
}


# =============================================================================
# Drawing commands
# =============================================================================

@dataclass(frozen=True)
class FillCommand:
    """Paint the whole frame"""
    color: Optional[str] = None
    type: str = field(default='fill', init=False)


@dataclass(frozen=True)
class CircleCommand:
    x: float
    y: float
    radius: float
    color: Optional[str] = None
    type: str = field(default='circle', init=False)


@dataclass(frozen=True)
class RectCommand:
    x: float
    y: float
    width: float
    height: float
    color: Optional[str] = None
    type: str = field(default='rect', init=False)


@dataclass(frozen=True)
class TextCommand:
    x: float
    y: float
    text: str
    color: Optional[str] = None
    type: str = field(default='text', init=False)


@dataclass(frozen=True)
class ClearCommand:
    type: str = field(default='clear', init=False)


@dataclass(frozen=True)
class UnknownCommand:
    """A command type this version does not understand (skipped when drawing)"""
    type: str
    fields: Tuple[Tuple[str, Any], ...] = ()


DrawingCommand = Union[
    FillCommand, CircleCommand, RectCommand, TextCommand, ClearCommand, UnknownCommand
]


# =============================================================================
# Tutor and execution payloads
# =============================================================================

@dataclass(frozen=True)
class TutorJudgement:
    """The tutor's verdict on one user prompt"""
    message: str
    step_complete: bool
    code: Optional[str] = None
    visual_action: Optional[str] = None
    correction: Optional[str] = None


@dataclass(frozen=True)
class ExecutionResult:
    """The simulated outcome of running the code buffer"""
    console_output: str
    is_success: bool
    is_objective_met: bool
    drawing_commands: Tuple[DrawingCommand, ...] = ()


# =============================================================================
# Decoding
# =============================================================================

_FENCED_JSON = re.compile(r'```(?:json)?\s*(.*?)\s*```', re.DOTALL)


def extract_json_payload(text: str) -> Any:
    """Parse JSON text, tolerating a surrounding markdown code fence"""
    if not isinstance(text, str) or not text.strip():
        raise DecodeError("Empty payload", raw=text)

    candidate = text.strip()
    match = _FENCED_JSON.search(candidate)
    if match:
        candidate = match.group(1)

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Payload is not valid JSON: {e}", raw=text) from e


def _require_object(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"{what} must be a JSON object")
    return value


def _require_str(obj: Dict[str, Any], key: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"'{key}' must be a string")
    return value


def _require_bool(obj: Dict[str, Any], key: str) -> bool:
    value = obj.get(key)
    if not isinstance(value, bool):
        raise DecodeError(f"'{key}' must be a boolean")
    return value


def _require_number(obj: Dict[str, Any], key: str) -> float:
    value = obj.get(key)
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"'{key}' must be a number")
    return value


def _optional_str(obj: Dict[str, Any], key: str) -> Optional[str]:
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError(f"'{key}' must be a string when present")
    return value or None


def decode_drawing_command(obj: Any) -> DrawingCommand:
    """Decode one drawing command; unknown types are kept, not rejected"""
    obj = _require_object(obj, 'Drawing command')
    command_type = _require_str(obj, 'type').strip().lower()

    if command_type == 'fill':
        return FillCommand(color=_optional_str(obj, 'color'))
    if command_type == 'circle':
        return CircleCommand(
            x=_require_number(obj, 'x'),
            y=_require_number(obj, 'y'),
            radius=_require_number(obj, 'radius'),
            color=_optional_str(obj, 'color'),
        )
    if command_type == 'rect':
        return RectCommand(
            x=_require_number(obj, 'x'),
            y=_require_number(obj, 'y'),
            width=_require_number(obj, 'width'),
            height=_require_number(obj, 'height'),
            color=_optional_str(obj, 'color'),
        )
    if command_type == 'text':
        return TextCommand(
            x=_require_number(obj, 'x'),
            y=_require_number(obj, 'y'),
            text=_require_str(obj, 'text'),
            color=_optional_str(obj, 'color'),
        )
    if command_type == 'clear':
        return ClearCommand()

    extra = tuple(sorted((k, v) for k, v in obj.items() if k != 'type'))
    return UnknownCommand(type=command_type, fields=extra)


def decode_tutor_judgement(text: str) -> TutorJudgement:
    """Decode a TutorJudgement payload or raise DecodeError"""
    obj = _require_object(extract_json_payload(text), 'Tutor judgement')
    try:
        return TutorJudgement(
            message=_require_str(obj, 'message'),
            step_complete=_require_bool(obj, 'stepComplete'),
            code=_optional_str(obj, 'code'),
            visual_action=_optional_str(obj, 'visualAction'),
            correction=_optional_str(obj, 'correction'),
        )
    except DecodeError as e:
        raise DecodeError(f"Invalid tutor judgement: {e}", raw=text) from e


def decode_execution_result(text: str) -> ExecutionResult:
    """Decode an ExecutionResult payload or raise DecodeError"""
    obj = _require_object(extract_json_payload(text), 'Execution result')
    try:
        commands = obj.get('drawingCommands')
        if not isinstance(commands, list):
            raise DecodeError("'drawingCommands' must be a list")

        return ExecutionResult(
            console_output=_require_str(obj, 'consoleOutput'),
            is_success=_require_bool(obj, 'isSuccess'),
            is_objective_met=_require_bool(obj, 'isObjectiveMet'),
            drawing_commands=tuple(decode_drawing_command(c) for c in commands),
        )
    except DecodeError as e:
        raise DecodeError(f"Invalid execution result: {e}", raw=text) from e
