"""Translate exec() call arguments into an argument vector and execution options.

Positional tokens (strings and numbers) are taken in order: the first names
the subcommand and the rest are passed through literally. Mappings carry
``$``-prefixed directives that configure execution; whatever keys remain
become command-line flags.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from habitat_client.core.common.exceptions import UnsupportedArgumentError
from habitat_client.core.domain.execution import (
    CommandEnvironment,
    ExecutionOptions,
    MarshalledCommand,
)

# Directive key -> ExecutionOptions field. Both spellings are accepted.
BOOLEAN_DIRECTIVES: dict[str, str] = {
    "$nullOnError": "null_on_error",
    "$null_on_error": "null_on_error",
    "$spawn": "spawn",
    "$shell": "shell",
    "$preserveEnv": "preserve_env",
    "$preserve_env": "preserve_env",
    "$passthrough": "passthrough",
    "$wait": "wait",
}
ENV_DIRECTIVE = "$env"
OPTIONS_DIRECTIVE = "$options"

# $options keys that map onto ExecutionOptions fields instead of being forwarded
RECOGNIZED_PLATFORM_OPTIONS: dict[str, str] = {
    "maxBuffer": "max_buffer",
    "max_buffer": "max_buffer",
    "timeout": "timeout",
}


def _is_positional(arg: Any) -> bool:
    # bool is an int subclass but is not a positional token
    return isinstance(arg, (str, int, float)) and not isinstance(arg, bool)


def _directive_mapping(options: dict[str, Any], key: str) -> Mapping[Any, Any]:
    value = options.pop(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise UnsupportedArgumentError(f"{key} must be a mapping", argument=value)
    return value


def flag_arguments(key: str, value: Any) -> list[str]:
    """Render one option-map entry as command-line arguments.

    Single-character keys become short flags and longer keys long flags.
    ``True`` emits the bare flag, ``False`` and ``None`` emit nothing and any
    other value is emitted as the next argument.
    """
    flag = f"-{key}" if len(key) == 1 else f"--{key}"
    if value is True:
        return [flag]
    if value is False or value is None:
        return []
    return [flag, str(value)]


def marshal_arguments(
    *args: Any, max_buffer: int | None = None
) -> MarshalledCommand:
    """Classify exec() arguments.

    Args:
        *args: Strings, numbers and option mappings, processed in order
        max_buffer: Default output ceiling, overridable via ``$options``

    Returns:
        The command, its argument vector, environment and execution options

    Raises:
        UnsupportedArgumentError: If an argument is neither a token nor a mapping
    """
    command: str | None = None
    command_args: list[str] = []
    env_overlay: dict[str, str] = {}
    directives: dict[str, Any] = {}
    platform_options: dict[str, Any] = {}

    if max_buffer is not None:
        directives["max_buffer"] = max_buffer

    for arg in args:
        if _is_positional(arg):
            if command is None:
                command = str(arg)
            else:
                command_args.append(str(arg))
            continue

        if not isinstance(arg, Mapping):
            raise UnsupportedArgumentError(
                f"Unsupported exec argument of type {type(arg).__name__}",
                argument=arg,
            )

        # Work on a copy so the caller's mapping is left untouched
        remaining = dict(arg)

        for key, field_name in BOOLEAN_DIRECTIVES.items():
            if key in remaining:
                directives[field_name] = bool(remaining.pop(key))

        if ENV_DIRECTIVE in remaining:
            for name, value in _directive_mapping(remaining, ENV_DIRECTIVE).items():
                env_overlay[str(name)] = str(value)

        if OPTIONS_DIRECTIVE in remaining:
            for name, value in _directive_mapping(remaining, OPTIONS_DIRECTIVE).items():
                if name in RECOGNIZED_PLATFORM_OPTIONS:
                    directives[RECOGNIZED_PLATFORM_OPTIONS[name]] = value
                else:
                    platform_options[name] = value

        for key, value in remaining.items():
            command_args.extend(flag_arguments(str(key), value))

    # passthrough streams a live process, so it always spawns
    if directives.get("passthrough"):
        directives["spawn"] = True

    if command is not None:
        command_args.insert(0, command)

    try:
        options = ExecutionOptions(extra=platform_options, **directives)
    except ValidationError as exc:
        raise UnsupportedArgumentError(
            f"Invalid execution option: {exc.errors()[0]['msg']}",
            argument=directives,
        ) from exc

    env = CommandEnvironment.build(env_overlay, preserve_env=options.preserve_env)
    return MarshalledCommand(
        command=command, args=command_args, env=env, options=options
    )
