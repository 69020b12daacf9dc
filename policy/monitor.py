"""Local policy monitor: re-parses a policy directory when it changes.

Polls the configured directory, compares sha256 checksums of the policy
files, and when anything was added, removed or edited parses the whole set
again.  A set with syntax errors is rejected and the previously accepted
one stays active; an accepted set is handed to the update callback.

Parse outcomes are exported as Prometheus metrics so a dashboard can show
when a bad policy push was rejected.
"""

import hashlib
import sys
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from prometheus_client import Counter, Gauge, Histogram

from policy.config import Config
from policy.loader import PolicyResult, load_policy, policy_paths

# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------
parse_total = Counter(
    "policy_parse_total",
    "Policy directory parses, by outcome",
    ["result"],
)
syntax_errors_total = Counter(
    "policy_syntax_errors_total",
    "Syntax errors found in policy files",
    ["kind"],
)
declarations = Gauge(
    "policy_declarations",
    "Declarations in the active policy set",
    ["kind"],
)
parse_seconds = Histogram(
    "policy_parse_seconds",
    "Time to parse the full policy directory",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5],
)


@dataclass
class PolicySet:
    """Every file of one policy directory parse."""

    results: list[PolicyResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def declarations(self) -> list:
        return [d for r in self.results for d in r.document]

    @property
    def errors(self) -> list:
        """(path, error) pairs in file order."""
        return [(r.path, e) for r in self.results for e in r.errors]

    def counts(self) -> dict[str, int]:
        docs = [r.document for r in self.results]
        return {
            "rule": sum(len(d.rules) for d in docs),
            "filter": sum(len(d.filters) for d in docs),
            "macro": sum(len(d.macros) for d in docs),
            "list": sum(len(d.lists) for d in docs),
        }


def _checksum(path: Path) -> bytes:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.digest()


class LocalPolicyMonitor:

    def __init__(self, config: Config, on_update: Callable[[PolicySet], None] | None = None):
        self.config = config
        self.active: PolicySet | None = None
        self._on_update = on_update
        self._checksums: dict[Path, bytes] = {}

    def check_for_update(self) -> bool:
        """Re-parse if the policy files changed.  True if a new set was accepted."""
        paths = policy_paths(self.config.policies, self.config.extensions)
        if not paths:
            if self._checksums:
                print(f"No policy files in {self.config.policies}. "
                      f"Waiting for policies to be added.", file=sys.stderr)
            self._checksums = {}
            return False

        checksums = {p: _checksum(p) for p in paths}
        if checksums == self._checksums:
            return False
        self._checksums = checksums
        return self._compile(paths)

    def run(self, stop: threading.Event) -> None:
        """Poll until *stop* is set."""
        while not stop.is_set():
            try:
                self.check_for_update()
            except OSError as e:
                print(f"Unable to read policy directory {self.config.policies}: {e}",
                      file=sys.stderr)
            stop.wait(self.config.interval)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _compile(self, paths: list[Path]) -> bool:
        start = time.perf_counter()
        try:
            policy_set = PolicySet([load_policy(p) for p in paths])
        except UnicodeDecodeError as e:
            parse_total.labels(result="rejected").inc()
            print(f"Policy update rejected: file in {self.config.policies} "
                  f"is not valid UTF-8 ({e})", file=sys.stderr)
            return False
        parse_seconds.observe(time.perf_counter() - start)

        for _, error in policy_set.errors:
            syntax_errors_total.labels(kind=error.kind.value).inc()

        if not policy_set.ok:
            parse_total.labels(result="rejected").inc()
            print(f"Policy update rejected: {len(policy_set.errors)} syntax errors "
                  f"in {self.config.policies}", file=sys.stderr)
            for path, error in policy_set.errors:
                print(f"  {path.name}:{error.line}:{error.column}: "
                      f"{error.kind.value}: {error.message}", file=sys.stderr)
            return False

        parse_total.labels(result="accepted").inc()
        for kind, count in policy_set.counts().items():
            declarations.labels(kind=kind).set(count)

        self.active = policy_set
        print(f"Loaded {len(policy_set.declarations)} declarations "
              f"from {len(paths)} policy files")
        if self._on_update is not None:
            self._on_update(policy_set)
        return True
