"""Policy command line: lint policy files or watch a policy directory.

``lint`` parses the given files and directories, prints one line per syntax
error and exits non-zero if any were found.  ``watch`` runs the local policy
monitor and serves its Prometheus metrics until interrupted.

Usage:
    python -m policy.main lint policies/
    python -m policy.main lint rules.yaml --format
    python -m policy.main watch --config policy-engine.yaml
"""

import argparse
import signal
import sys
import threading
from pathlib import Path

from prometheus_client import start_http_server

from policy.config import load_config
from policy.loader import PolicyResult, load_policies, load_policy
from policy.monitor import LocalPolicyMonitor
from policy.printer import format_policy

stop = threading.Event()


def _shutdown(sig, frame):
    print("\nShutting down policy monitor...")
    stop.set()


def _collect(paths: list[str]) -> list[PolicyResult]:
    results = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            results.extend(load_policies(path))
        else:
            results.append(load_policy(path))
    return results


def lint(paths: list[str], show_format: bool = False) -> int:
    results = _collect(paths)
    error_count = 0
    declaration_count = 0

    for result in results:
        declaration_count += len(result.document)
        for error in result.errors:
            error_count += 1
            print(f"{result.path}:{error.line}:{error.column}: "
                  f"{error.kind.value}: {error.message}")
        if show_format and len(result.document):
            print(f"# {result.path}")
            print(format_policy(result.document))

    print(f"Done. {len(results)} files, {declaration_count} declarations, "
          f"{error_count} errors.")
    return 1 if error_count else 0


def watch(config_path: str) -> int:
    config = load_config(config_path)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    start_http_server(config.metrics_port)
    print(f"Prometheus metrics server started on :{config.metrics_port}")

    monitor = LocalPolicyMonitor(config)
    if config.monitor == "none":
        monitor.check_for_update()
        print("Monitor disabled in config; parsed policies once.")
        return 0 if monitor.active is not None else 1

    print(f"Watching {config.policies} every {config.interval}s")
    monitor.run(stop)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Policy language tools")
    sub = parser.add_subparsers(dest="command", required=True)

    lint_parser = sub.add_parser("lint", help="Parse policy files and report syntax errors")
    lint_parser.add_argument("paths", nargs="+", help="Policy files or directories")
    lint_parser.add_argument(
        "--format", action="store_true", help="Print parsed declarations in canonical form",
    )

    watch_parser = sub.add_parser("watch", help="Re-parse a policy directory on change")
    watch_parser.add_argument("--config", required=True, help="Engine config YAML")

    args = parser.parse_args(argv)

    try:
        if args.command == "lint":
            return lint(args.paths, show_format=args.format)
        return watch(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
