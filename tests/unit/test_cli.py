import json

import pytest
from pytest_httpx import HTTPXMock

from habitat_client.cli import build_parser, main

FAKE_HAB = """
case "$1" in
    --version) echo "hab 1.6.420/20211203150224" ;;
    svc) printf 'package  state\\ncore/redis  up\\n' ;;
    fail) echo "it broke" >&2; exit 2 ;;
    *) echo "args: $*" ;;
esac
"""


@pytest.fixture
def fake_hab(make_binary) -> str:
    return make_binary(FAKE_HAB)


def test_parser_requires_an_action():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_version(fake_hab, capsys):
    assert main(["--command", fake_hab, "version"]) == 0

    assert capsys.readouterr().out.strip() == "1.6.420/20211203150224"


def test_version_unavailable(tmp_path, capsys):
    assert main(["--command", str(tmp_path / "missing"), "version"]) == 1

    assert "hab version unavailable" in capsys.readouterr().err


def test_status_prints_json(fake_hab, capsys):
    assert main(["--command", fake_hab, "status"]) == 0

    assert json.loads(capsys.readouterr().out) == [
        {"package": "core/redis", "state": "up"}
    ]


def test_require_satisfied(fake_hab, capsys):
    assert main(["--command", fake_hab, "require", ">=1.6"]) == 0

    assert capsys.readouterr().out.strip() == "1.6.420"


def test_require_unsatisfied(fake_hab, capsys):
    assert main(["--command", fake_hab, "require", ">=2"]) == 1

    assert (
        capsys.readouterr().err.strip()
        == "error: Habitat version must be >=2, reported version is 1.6.420"
    )


def test_exec_prints_output(fake_hab, capsys):
    assert main(["--command", fake_hab, "exec", "pkg", "list"]) == 0

    assert capsys.readouterr().out.strip() == "args: pkg list"


def test_exec_failure_reports_error(fake_hab, capsys):
    assert main(["--command", fake_hab, "exec", "fail"]) == 1

    assert "exited with code 2" in capsys.readouterr().err


def test_exec_passthrough_waits(fake_hab, capsys):
    assert main(["--command", fake_hab, "exec", "--passthrough", "pkg"]) == 0

    assert capsys.readouterr().out == ""


def test_services(httpx_mock: HTTPXMock, capsys):
    httpx_mock.add_response(
        url="http://sup.test:9631/services", json=[{"service_group": "redis.default"}]
    )

    assert main(["--supervisor-api", "http://sup.test:9631", "services"]) == 0

    assert json.loads(capsys.readouterr().out) == [{"service_group": "redis.default"}]


def test_invalid_config_file(tmp_path, capsys):
    path = tmp_path / "client.json"
    path.write_text("{}")

    assert main(["--config", str(path), "version"]) == 1

    assert "Unsupported configuration file format" in capsys.readouterr().err


def test_blank_command_override_reports_error(capsys):
    assert main(["--command", " ", "version"]) == 1

    err = capsys.readouterr().err
    assert err.startswith("error: Invalid command-line option")
    assert "must not be empty" in err
