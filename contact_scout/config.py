# === FILE: contact_scout/config.py ===
"""
Loading and validation of the ContactScout engine configuration.
Pydantic describes the schema; YAML and JSON files are accepted.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

__all__ = ["EngineConfig", "load_config", "DEFAULT_CONTACT_PATHS"]

DEFAULT_CONTACT_PATHS: Tuple[str, ...] = (
    "contact",
    "contact-us",
    "contactus",
    "about",
    "about-us",
    "aboutus",
    "impressum",
)


class EngineConfig(BaseModel):
    """Limits and budgets of the contact discovery engine."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = Field(
        "Mozilla/5.0 (compatible; ContactScout/1.0)", min_length=1, description="User-Agent header."
    )
    fetch_timeout: float = Field(10.0, gt=0, description="Timeout of a single page fetch (seconds).")
    max_pages: int = Field(40, ge=1, description="Pages fetched per crawl at most.")
    max_frontier: int = Field(200, ge=1, description="Upper bound of queued URLs per crawl.")
    email_deadline: Optional[float] = Field(
        5.0, gt=0, description="Soft deadline of a fallback crawl; None disables it."
    )
    contact_paths: Tuple[str, ...] = Field(
        DEFAULT_CONTACT_PATHS, description="Well-known contact pages seeded into every crawl."
    )
    instagram_marker: str = Field("instagram.com", min_length=1)
    instagram_base: str = Field("https://instagram.com", min_length=1)

    cache_ttl: float = Field(300.0, gt=0, description="Freshness window of cached crawls (seconds).")
    cache_max_entries: Optional[int] = Field(
        1024, ge=1, description="LRU bound of the result cache; None means unbounded."
    )

    rate_per_minute: int = Field(15, ge=1, description="Admitted requests per client and window.")
    rate_window: float = Field(60.0, gt=0, description="Length of the sliding window (seconds).")
    daily_limit: int = Field(100, ge=1, description="Admitted requests per caller session and day.")
    daily_window: float = Field(86400.0, gt=0, description="Lifetime of the daily counter (seconds).")

    concurrency: int = Field(5, ge=1, description="Profiles resolved in parallel by resolve_many.")

    @field_validator("contact_paths", mode="before")
    def _strip_slashes(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return tuple(str(p).strip("/") for p in v if str(p).strip("/"))
        return v

    @model_validator(mode="after")
    def _check_budgets(self) -> EngineConfig:
        if self.email_deadline is not None and self.email_deadline > self.fetch_timeout * self.max_pages:
            raise ValueError("email_deadline exceeds the whole crawl budget")
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> EngineConfig:
    """
    Read YAML or JSON and return a validated EngineConfig.

    With *path* None the project default ``configs/default.yaml`` is used when
    present, built-in defaults otherwise. An explicit path that does not exist
    raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return EngineConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return EngineConfig(**data)
