"""Configuration management for primpact."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from primpact.exceptions import ConfigError

PRIMPACT_DIR = ".primpact"
CONFIG_FILE = "config.json"


class ScanConfig(BaseModel):
    """Repository-wide file discovery settings."""

    exclude_patterns: list[str] = Field(
        default_factory=lambda: [
            "node_modules",
            "dist",
            "build",
            "coverage",
            "vendor",
            "__pycache__",
            ".*",
        ]
    )
    batch_size: int = Field(default=50, ge=1)


class ImpactConfig(BaseModel):
    """Impact graph traversal settings."""

    max_depth: int = Field(default=3, ge=0)


class ProjectConfig(BaseModel):
    """Full project configuration."""

    scan: ScanConfig = Field(default_factory=ScanConfig)
    impact: ImpactConfig = Field(default_factory=ImpactConfig)


class AnalysisOptions(BaseModel):
    """Caller options for a single analysis run."""

    repo_path: str
    base_branch: str | None = None
    head_branch: str | None = None
    skip_breaking: bool = False
    skip_coverage: bool = False
    skip_docs: bool = False


def get_primpact_dir(root: Path) -> Path:
    """Get the .primpact directory for a repository root."""
    return root / PRIMPACT_DIR


def load_config(root: str | Path) -> ProjectConfig:
    """Load configuration from .primpact/config.json, or return defaults."""
    config_path = get_primpact_dir(Path(root)) / CONFIG_FILE
    if not config_path.exists():
        return ProjectConfig()
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        return ProjectConfig(**data)
    except (OSError, ValueError, TypeError, ValidationError) as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e


def save_config(root: str | Path, config: ProjectConfig) -> None:
    """Save configuration to .primpact/config.json."""
    cfg_dir = get_primpact_dir(Path(root))
    cfg_dir.mkdir(parents=True, exist_ok=True)
    config_path = cfg_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))
