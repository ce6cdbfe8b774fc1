"""settings.py — Runtime configuration from the environment and .env."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from workspace import DEFAULT_TTL_S, default_root

DEFAULT_TITLE = "Journal"
DEFAULT_RENDER_WORKERS = 4
RENDER_FAILURE_POLICIES = ("placeholder", "abort")


@dataclass
class Settings:
    title: str = DEFAULT_TITLE
    workspace_dir: Path | None = None
    workspace_ttl_s: float = DEFAULT_TTL_S
    render_workers: int = DEFAULT_RENDER_WORKERS
    font_file: str | None = None
    render_failure_policy: str = "placeholder"


def _env(name: str) -> str:
    return os.getenv(name, "").strip()


def load_settings(env_file: Path | None = None) -> Settings:
    """Read ISSUEBIND_* variables, loading .env first. Unset values keep their defaults."""
    load_dotenv(env_file)

    policy = _env("ISSUEBIND_RENDER_FAILURE_POLICY") or "placeholder"
    if policy not in RENDER_FAILURE_POLICIES:
        raise ValueError(
            f"ISSUEBIND_RENDER_FAILURE_POLICY must be one of {', '.join(RENDER_FAILURE_POLICIES)}, "
            f"got '{policy}'"
        )
    workers = int(_env("ISSUEBIND_RENDER_WORKERS") or DEFAULT_RENDER_WORKERS)
    if workers < 1:
        raise ValueError("ISSUEBIND_RENDER_WORKERS must be at least 1")

    workspace_dir = _env("ISSUEBIND_WORKSPACE_DIR")
    return Settings(
        title=_env("ISSUEBIND_TITLE") or DEFAULT_TITLE,
        workspace_dir=Path(workspace_dir) if workspace_dir else default_root(),
        workspace_ttl_s=float(_env("ISSUEBIND_WORKSPACE_TTL") or DEFAULT_TTL_S),
        render_workers=workers,
        font_file=_env("ISSUEBIND_FONT_FILE") or None,
        render_failure_policy=policy,
    )
