"""CLI entrypoints (wait, health, serve)."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

from cluster_orchestrator.core.config import Settings
from cluster_orchestrator.core.exceptions import (
    DeploymentTimeoutError,
    NotFoundError,
    OrchestratorError,
    WaitCancelledError,
)
from cluster_orchestrator.deploy.client import SchedulerClient
from cluster_orchestrator.deploy.orchestrator import DeploymentOrchestrator
from cluster_orchestrator.utils.logging import setup_logging

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_UNHEALTHY = 2
EXIT_NOT_FOUND = 3
EXIT_TIMEOUT = 4
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cluster-orchestrator",
        description="Convergence and readiness checks against the cluster scheduler",
    )
    sub = parser.add_subparsers(dest="cmd")

    cmd_wait = sub.add_parser("wait", help="Wait until all instances of an application are running")
    cmd_wait.add_argument("app_id", help="Application id, e.g. /web-1")
    cmd_wait.add_argument("--timeout", type=float, default=None, help="Seconds; omitted or <= 0 uses the default")

    cmd_health = sub.add_parser("health", help="Check instance parity and health checks")
    cmd_health.add_argument("app_id", help="Application id, e.g. /web-1")

    sub.add_parser("serve", help="Run the status API")
    return parser


def _install_cancel_signals(cancel_event: asyncio.Event) -> list[int]:
    """Route SIGINT/SIGTERM to the wait's cancel event; returns the signals hooked."""
    loop = asyncio.get_running_loop()
    installed = []
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, cancel_event.set)
        except (NotImplementedError, RuntimeError):
            # No loop signal support (Windows, non-main thread); Ctrl-C raises as usual
            continue
        installed.append(signum)
    return installed


async def _run_command(args: argparse.Namespace, settings: Settings, client: SchedulerClient) -> int:
    orchestrator = DeploymentOrchestrator(client, settings)
    cancel_event = asyncio.Event()
    installed = _install_cancel_signals(cancel_event) if args.cmd == "wait" else []
    try:
        if args.cmd == "wait":
            await orchestrator.wait_for_steady_state(args.app_id, args.timeout, cancel_event=cancel_event)
            print(f"{args.app_id}: converged")
            return EXIT_OK
        healthy = await orchestrator.is_application_healthy(args.app_id)
        print(f"{args.app_id}: {'healthy' if healthy else 'unhealthy'}")
        return EXIT_OK if healthy else EXIT_UNHEALTHY
    except DeploymentTimeoutError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_TIMEOUT
    except WaitCancelledError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CANCELLED
    except NotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except OrchestratorError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_FAILED
    finally:
        loop = asyncio.get_running_loop()
        for signum in installed:
            loop.remove_signal_handler(signum)
        await client.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd is None:
        parser.print_help()
        return EXIT_FAILED

    if args.cmd == "serve":
        from cluster_orchestrator.main import run

        run()
        return EXIT_OK

    settings = Settings()
    setup_logging(settings.log_level, settings.log_format)
    client = SchedulerClient.from_settings(settings)
    return asyncio.run(_run_command(args, settings, client))


if __name__ == "__main__":
    sys.exit(main())
