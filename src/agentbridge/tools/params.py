"""Tool call parameter schema and validation."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from agentbridge.core.errors import ParameterValidationError

MAX_PROMPT_LENGTH = 50_000
MAX_OUTPUT_INSTRUCTIONS_LENGTH = 5_000
MAX_CWD_LENGTH = 1_000
MAX_EXTRA_ARGS = 20
MAX_EXTRA_ARG_LENGTH = 1_000

DEFAULT_OUTPUT_INSTRUCTIONS = (
    "Provide a brief summary of what you accomplished or failed to do, "
    "and suggest potential next steps if necessary."
)

AGENT_TOOL_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "prompt": {
            "type": "string",
            "description": "Task description or instructions for the agent to execute",
        },
        "output_instructions": {
            "type": "string",
            "description": (
                "Optional instructions for formatting the agent's response "
                f'(default: "{DEFAULT_OUTPUT_INSTRUCTIONS}")'
            ),
        },
        "cwd": {
            "type": "string",
            "description": "Working directory path for agent execution context (optional)",
        },
        "extra_args": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Additional configuration parameters for agent execution (optional)",
        },
    },
    "required": ["prompt"],
}


@dataclass(frozen=True, slots=True)
class AgentToolParams:
    """Validated arguments of one agent tool call."""

    prompt: str
    output_instructions: str | None = None
    cwd: str | None = None
    extra_args: tuple[str, ...] | None = None


def _validate_prompt(value: Any) -> str:
    if not value or not isinstance(value, str):
        raise ParameterValidationError(
            "Prompt parameter is required and must be a string"
        )
    prompt = value.strip()
    if not prompt:
        raise ParameterValidationError("Invalid prompt parameter: cannot be empty")
    if len(prompt) > MAX_PROMPT_LENGTH:
        raise ParameterValidationError("Prompt too long (max 50,000 characters)")
    return prompt


def _validate_output_instructions(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParameterValidationError(
            "output_instructions parameter must be a string if provided"
        )
    if len(value) > MAX_OUTPUT_INSTRUCTIONS_LENGTH:
        raise ParameterValidationError(
            "output_instructions too long (max 5,000 characters)"
        )
    return value


def _validate_cwd(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParameterValidationError("CWD parameter must be a string if provided")
    if len(value) > MAX_CWD_LENGTH:
        raise ParameterValidationError(
            "Working directory path too long (max 1000 characters)"
        )
    # Syntax only; the executor checks that the directory exists.
    if ".." in value or "\0" in value:
        raise ParameterValidationError("Invalid working directory path")
    return value


def _validate_extra_args(value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    if not isinstance(value, list | tuple):
        raise ParameterValidationError(
            "Extra args parameter must be an array if provided"
        )
    if len(value) > MAX_EXTRA_ARGS:
        raise ParameterValidationError("Too many extra arguments (max 20 allowed)")
    for index, arg in enumerate(value):
        if not isinstance(arg, str):
            raise ParameterValidationError(
                f"Extra argument at index {index} must be a string"
            )
        if len(arg) > MAX_EXTRA_ARG_LENGTH:
            raise ParameterValidationError(
                f"Extra argument at index {index} too long (max 1000 characters)"
            )
    return tuple(value)


def validate_params(raw: Any) -> AgentToolParams:
    """Validate raw tool arguments.

    Missing or ``null`` optional fields are accepted.  The prompt is
    returned trimmed; the other values are passed through unchanged.

    Raises:
        ParameterValidationError: Naming the offending field and the
            violated constraint.
    """
    if not isinstance(raw, Mapping):
        raise ParameterValidationError("Invalid parameters: expected object")

    return AgentToolParams(
        prompt=_validate_prompt(raw.get("prompt")),
        output_instructions=_validate_output_instructions(
            raw.get("output_instructions")
        ),
        cwd=_validate_cwd(raw.get("cwd")),
        extra_args=_validate_extra_args(raw.get("extra_args")),
    )


def compose_instruction(prompt: str, output_instructions: str | None = None) -> str:
    """Append output instructions (or the default ones) to *prompt*."""
    instructions = output_instructions or DEFAULT_OUTPUT_INSTRUCTIONS
    return f"{prompt}\n\n[Output Instructions]\n{instructions}"
