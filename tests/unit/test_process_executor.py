"""Tests for the direct and shell capture strategies using stand-in binaries."""

from pathlib import Path

import pytest

from habitat_client.core.common.exceptions import (
    CommandExecutionError,
    CommandTimeoutError,
    OutputLimitExceededError,
)
from habitat_client.core.services.argument_marshaller import marshal_arguments
from habitat_client.core.services.process_executor import ProcessExecutor

PRINT_ARGS = """
for arg in "$@"; do
    echo "$arg"
done
"""


@pytest.fixture
def executor() -> ProcessExecutor:
    return ProcessExecutor()


async def test_direct_returns_trimmed_stdout(executor, make_binary):
    binary = make_binary(PRINT_ARGS)

    output = await executor.execute(
        binary, marshal_arguments("pkg", "install", {"channel": "stable", "f": True})
    )

    assert output == "pkg\ninstall\n--channel\nstable\n-f"


async def test_direct_keeps_arguments_with_spaces_intact(executor, make_binary):
    binary = make_binary(PRINT_ARGS)

    output = await executor.execute(binary, marshal_arguments("svc", "a b"))

    assert output == "svc\na b"


async def test_shell_splits_joined_command_line(executor, make_binary):
    binary = make_binary(PRINT_ARGS)

    output = await executor.execute(
        binary, marshal_arguments("svc", "a b", {"$shell": True})
    )

    assert output == "svc\na\nb"


async def test_non_zero_exit_raises_with_captured_streams(executor, make_binary):
    binary = make_binary(
        """
        echo partial
        echo "no such service" >&2
        exit 3
        """
    )

    with pytest.raises(CommandExecutionError) as exc_info:
        await executor.execute(binary, marshal_arguments("svc", "status"))

    error = exc_info.value
    assert error.exit_code == 3
    assert error.stdout.strip() == "partial"
    assert error.stderr.strip() == "no such service"
    assert "exited with code 3" in error.message
    assert error.details["command"] == f"{binary} svc status"


async def test_null_on_error_suppresses_failure(executor, make_binary):
    binary = make_binary("exit 1\n")

    result = await executor.execute(
        binary, marshal_arguments("svc", "status", {"$nullOnError": True})
    )

    assert result is None


async def test_null_on_error_applies_to_shell_strategy(executor, make_binary):
    binary = make_binary("exit 2\n")

    result = await executor.execute(
        binary, marshal_arguments("svc", {"$shell": True, "$nullOnError": True})
    )

    assert result is None


async def test_missing_binary_raises_execution_error(executor, tmp_path):
    missing = str(tmp_path / "not-hab")

    with pytest.raises(CommandExecutionError) as exc_info:
        await executor.execute(missing, marshal_arguments("--version"))

    assert exc_info.value.exit_code is None
    assert "Failed to launch" in exc_info.value.message


async def test_missing_binary_is_suppressed_by_null_on_error(executor, tmp_path):
    missing = str(tmp_path / "not-hab")

    result = await executor.execute(
        missing, marshal_arguments("--version", {"$nullOnError": True})
    )

    assert result is None


async def test_env_overlay_reaches_child(executor, make_binary, monkeypatch):
    monkeypatch.setenv("HAB_CLIENT_AMBIENT", "from-parent")
    binary = make_binary('echo "$HAB_CLIENT_PROBE:$HAB_CLIENT_AMBIENT"\n')

    output = await executor.execute(
        binary, marshal_arguments({"$env": {"HAB_CLIENT_PROBE": "overlay"}})
    )

    assert output == "overlay:from-parent"


async def test_preserve_env_false_hides_ambient_environment(
    executor, make_binary, monkeypatch
):
    monkeypatch.setenv("HAB_CLIENT_AMBIENT", "from-parent")
    binary = make_binary('echo "${HAB_CLIENT_AMBIENT:-unset}:$HAB_CLIENT_PROBE"\n')

    output = await executor.execute(
        binary,
        marshal_arguments(
            {"$preserveEnv": False, "$env": {"HAB_CLIENT_PROBE": "only"}}
        ),
    )

    assert output == "unset:only"


async def test_output_over_max_buffer_raises(executor, make_binary):
    binary = make_binary("exec head -c 5000 /dev/zero\n")

    with pytest.raises(OutputLimitExceededError) as exc_info:
        await executor.execute(
            binary, marshal_arguments({"$options": {"maxBuffer": 100}})
        )

    assert len(exc_info.value.stdout) == 100
    assert "stdout buffer of 100 bytes" in exc_info.value.message


async def test_output_within_max_buffer_is_returned(executor, make_binary):
    binary = make_binary("printf 'ok'\n")

    output = await executor.execute(
        binary, marshal_arguments({"$options": {"maxBuffer": 2}})
    )

    assert output == "ok"


async def test_timeout_kills_child(executor, make_binary):
    binary = make_binary("exec sleep 5\n")

    with pytest.raises(CommandTimeoutError) as exc_info:
        await executor.execute(
            binary, marshal_arguments({"$options": {"timeout": 0.2}})
        )

    assert "timed out after 0.2 seconds" in exc_info.value.message
    assert exc_info.value.exit_code != 0


async def test_platform_options_are_forwarded(executor, make_binary, tmp_path):
    workdir = tmp_path / "work"
    workdir.mkdir()
    binary = make_binary("pwd\n")

    output = await executor.execute(
        binary, marshal_arguments({"$options": {"cwd": str(workdir)}})
    )

    assert Path(output).resolve() == workdir.resolve()


async def test_overlay_values_are_redacted_in_debug_log(
    executor, make_binary, caplog
):
    caplog.set_level("DEBUG", logger="habitat_client.core.services.process_executor")
    binary = make_binary("true\n")

    await executor.execute(
        binary, marshal_arguments({"$env": {"HAB_AUTH_TOKEN": "s3cr3t"}})
    )

    assert "s3cr3t" not in caplog.text
    assert "HAB_AUTH_TOKEN" in caplog.text
