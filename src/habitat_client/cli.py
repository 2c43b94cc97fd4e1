from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from pydantic import ValidationError

from habitat_client.core.common.exceptions import ConfigurationError, HabError
from habitat_client.core.common.logging_utils import (
    configure_logging_with_environment_tagging,
    get_logger,
)
from habitat_client.core.config.app_config import HabConfig, load_config
from habitat_client.core.services.spawned_process import SpawnedProcess
from habitat_client.hab import Hab

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="habitat-client",
        description="Query a local hab binary and its supervisor",
    )
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    parser.add_argument("--command", help="Path or name of the hab binary")
    parser.add_argument("--supervisor-api", help="Supervisor HTTP API base URL")

    actions = parser.add_subparsers(dest="action", required=True)
    actions.add_parser("version", help="Print the hab version and build")
    actions.add_parser("status", help="Print supervisor service status as JSON")
    actions.add_parser("services", help="Print services from the supervisor API")
    require = actions.add_parser("require", help="Fail unless hab satisfies RANGE")
    require.add_argument("range")
    run = actions.add_parser("exec", help="Run hab with the remaining arguments")
    run.add_argument("--passthrough", action="store_true", help="Stream output live")
    run.add_argument("args", nargs=argparse.REMAINDER)
    return parser


def _resolve_config(args: argparse.Namespace) -> HabConfig:
    config = load_config(args.config)
    overrides: dict[str, Any] = {}
    if args.command:
        overrides["command"] = args.command
    if args.supervisor_api:
        overrides["supervisor_api"] = args.supervisor_api
    if args.log_level:
        overrides["log_level"] = args.log_level
    if overrides:
        try:
            config = config.with_updates(**overrides)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid command-line option: {exc.errors()[0]['msg']}",
                details={"errors": exc.errors(include_url=False)},
            ) from exc
    return config


async def _run(args: argparse.Namespace, config: HabConfig) -> int:
    async with Hab(config) as hab:
        if args.action == "version":
            version = await hab.get_version()
            if version is None:
                print("hab version unavailable", file=sys.stderr)
                return 1
            print(f"{version}/{hab.build}")
        elif args.action == "status":
            services = await hab.get_supervisor_status()
            if services is None:
                print("supervisor unavailable", file=sys.stderr)
                return 1
            print(json.dumps(services, indent=2))
        elif args.action == "services":
            print(json.dumps(await hab.get_services(), indent=2))
        elif args.action == "require":
            await hab.require_version(args.range)
            print(await hab.get_version())
        elif args.action == "exec":
            exec_args = [arg for arg in args.args if arg != "--"]
            if args.passthrough:
                exec_args.append({"$passthrough": True, "$wait": True})
            result = await hab.exec(*exec_args)
            if isinstance(result, SpawnedProcess):
                print(await result.capture_output_trimmed())
            elif result is not None:
                print(result)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _resolve_config(args)
    except HabError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1

    configure_logging_with_environment_tagging(
        level=getattr(logging, config.log_level)
    )
    logger.debug("Resolved configuration", command=config.command)

    try:
        return asyncio.run(_run(args, config))
    except HabError as exc:
        logger.debug("Command failed", error=exc.to_dict())
        print(f"error: {exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
