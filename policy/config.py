"""Policy engine configuration, read from YAML.

Example::

    policies: /etc/policies
    extensions: [.yaml, .yml]
    monitor: local        # none | local
    interval: 2           # seconds between directory scans
    metrics_port: 9090
"""

from dataclasses import dataclass
from pathlib import Path

import yaml

from policy.loader import DEFAULT_EXTENSIONS

_REQUIRED_FIELDS = ("policies",)
_MONITOR_TYPES = ("none", "local")


@dataclass(frozen=True)
class Config:
    policies: Path
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    monitor: str = "none"
    interval: float = 2.0
    metrics_port: int = 9090


def load_config(path: str | Path) -> Config:
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return create_config(raw, source=path.name)


def create_config(raw: dict, source: str = "config") -> Config:
    """Validate a config mapping and fill in defaults."""
    if not isinstance(raw, dict):
        raise ValueError(f"{source}: expected a mapping at the top level")

    for key in _REQUIRED_FIELDS:
        if key not in raw:
            raise ValueError(f"{source}: missing required field '{key}'")

    monitor = raw.get("monitor", "none")
    if monitor not in _MONITOR_TYPES:
        raise ValueError(
            f"{source}: 'monitor' must be set to 'none' or 'local', got {monitor!r}"
        )

    extensions = raw.get("extensions", DEFAULT_EXTENSIONS)
    if isinstance(extensions, str):
        extensions = [extensions]
    extensions = tuple(e if e.startswith(".") else f".{e}" for e in extensions)

    interval = float(raw.get("interval", 2.0))
    if interval <= 0:
        raise ValueError(f"{source}: 'interval' must be positive, got {interval}")

    return Config(
        policies=Path(raw["policies"]),
        extensions=extensions,
        monitor=monitor,
        interval=interval,
        metrics_port=int(raw.get("metrics_port", 9090)),
    )
