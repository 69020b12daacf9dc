"""Load policy files from a directory and parse them."""

from dataclasses import dataclass, field
from pathlib import Path

from policy.errors import PolicySyntaxError
from policy.nodes import PolicyDocument
from policy.parser import parse_source

DEFAULT_EXTENSIONS = (".yaml", ".yml")


@dataclass
class PolicyResult:
    """Outcome of parsing one policy file."""

    path: Path
    document: PolicyDocument
    errors: list[PolicySyntaxError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def policy_paths(directory: str | Path, extensions=DEFAULT_EXTENSIONS) -> list[Path]:
    """Policy files directly inside *directory*, sorted by name."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Policy directory not found: {directory}")
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix in extensions
    )


def load_policies(directory: str | Path, extensions=DEFAULT_EXTENSIONS) -> list[PolicyResult]:
    """Parse every policy file in *directory*, in file-name order."""
    return [load_policy(path) for path in policy_paths(directory, extensions)]


def load_policy(path: str | Path) -> PolicyResult:
    """Parse a single policy file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        source = f.read()
    document, errors = parse_source(source)
    return PolicyResult(path, document, errors)
