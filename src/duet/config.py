"""TOML config loading for duet.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from duet.source import KNOWN_EXTENSIONS

CONFIG_FILE = "duet.toml"


@dataclass
class ProjectConfig:
    name: str = "untitled"
    version: str = "0.0.0"


@dataclass
class SourceConfig:
    root: str = "src"
    extensions: list[str] = field(default_factory=lambda: [KNOWN_EXTENSIONS[0]])


@dataclass
class FormatConfig:
    indent: int = 2


@dataclass
class DuetConfig:
    project: ProjectConfig = field(default_factory=ProjectConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    format: FormatConfig = field(default_factory=FormatConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find duet.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_FILE
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_FILE} found in any parent directory")
        path = parent


def load_config(path: Path) -> DuetConfig:
    """Parse a duet.toml file into a DuetConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = DuetConfig()

    if "project" in data:
        proj = data["project"]
        config.project = ProjectConfig(
            name=proj.get("name", "untitled"),
            version=proj.get("version", "0.0.0"),
        )

    if "source" in data:
        src = data["source"]
        extensions = src.get("extensions", [KNOWN_EXTENSIONS[0]])
        if isinstance(extensions, str):
            extensions = [extensions]
        config.source = SourceConfig(
            root=src.get("root", "src"),
            extensions=[e if e.startswith(".") else f".{e}" for e in extensions],
        )

    if "format" in data:
        fmt = data["format"]
        indent = fmt.get("indent", 2)
        if not isinstance(indent, int) or indent < 0:
            raise ValueError(f"{path}: [format] indent must be a non-negative integer")
        config.format = FormatConfig(indent=indent)

    return config


def load_nearest_config(start_path: Path | None = None) -> tuple[DuetConfig, Path | None]:
    """Load the nearest duet.toml, or defaults when there is none.

    Returns the config and the directory it applies to.
    """
    try:
        path = find_config(start_path)
    except FileNotFoundError:
        return DuetConfig(), None
    return load_config(path), path.parent
