# File: contact_scout/models.py
"""contact_scout.models: records exchanged between the engine and its callers.

* :class:`ContactRecord` – the (partial or merged) result of a lookup.
* :class:`PrimaryProfile` / :class:`SocialProfile` – the upstream profile,
  validated with pydantic because it arrives as loosely-typed JSON.
* :class:`QuotaSession` – the caller-session daily counter (cookie equivalent).
* :class:`Admission` – the verdict of the rate governor.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contact_scout.errors import EngineError, RateExceeded, Window

__all__ = [
    "EMAIL_SEPARATOR",
    "REQUIRED_FIELDS",
    "ContactRecord",
    "SocialProfile",
    "PrimaryProfile",
    "QuotaSession",
    "Admission",
]

EMAIL_SEPARATOR = "; "
REQUIRED_FIELDS: Tuple[str, ...] = ("instagram", "email", "track_link")


@dataclass(frozen=True, slots=True)
class ContactRecord:
    """Contact fields found for one person; ``None`` means "not found"."""

    website: Optional[str] = None
    instagram: Optional[str] = None
    email: Optional[str] = None
    track_link: Optional[str] = None

    def emails(self) -> List[str]:
        """Individual addresses of :attr:`email`, in order."""
        if not self.email:
            return []
        return [e.strip() for e in self.email.split(";") if e.strip()]

    def missing_fields(self) -> Tuple[str, ...]:
        return tuple(name for name in REQUIRED_FIELDS if not getattr(self, name))

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def is_empty(self) -> bool:
        return not (self.website or self.instagram or self.email or self.track_link)

    def merge(self, other: ContactRecord) -> ContactRecord:
        """Fill gaps of *self* from *other*.

        Fields already set on *self* win. Emails are the exception: addresses
        from both records are kept, *self* first, duplicates dropped.
        """
        seen = {e.lower() for e in self.emails()}
        emails = self.emails()
        for addr in other.emails():
            if addr.lower() not in seen:
                seen.add(addr.lower())
                emails.append(addr)
        return replace(
            self,
            website=self.website or other.website,
            instagram=self.instagram or other.instagram,
            email=EMAIL_SEPARATOR.join(emails) or None,
            track_link=self.track_link or other.track_link,
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


class SocialProfile(BaseModel):
    """A link declared on the upstream profile (``{service, url}``)."""

    model_config = ConfigDict(extra="ignore")

    service: str
    url: Optional[str] = None
    username: Optional[str] = None


class PrimaryProfile(BaseModel):
    """Profile returned by the upstream music-service lookup."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    display_name: str = Field(..., min_length=1)
    bio_text: str = ""
    declared_website: Optional[str] = None
    declared_social_profiles: List[SocialProfile] = Field(default_factory=list)

    @field_validator("bio_text", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("declared_website", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def social_link(self, service_marker: str, profile_base: str) -> Optional[str]:
        """First declared link whose service mentions *service_marker*.

        A profile that only carries a username is expanded to
        ``<profile_base>/<username>``.
        """
        marker = service_marker.lower()
        for prof in self.declared_social_profiles:
            if marker not in prof.service.lower():
                continue
            if prof.username:
                return f"{profile_base.rstrip('/')}/{prof.username}"
            if prof.url:
                return prof.url
        return None


@dataclass(slots=True)
class QuotaSession:
    """Per-caller daily request counter, kept with the caller's session.

    The hosting layer owns persistence (a cookie in a web deployment); the
    CLI stores it in a small JSON file through :meth:`load` / :meth:`save`.
    """

    daily_count: int = 0
    started_at: Optional[float] = None

    def expired(self, now: float, window: float) -> bool:
        return self.started_at is None or now - self.started_at >= window

    def restart(self, now: float) -> None:
        self.daily_count = 0
        self.started_at = now

    def remaining(self, now: float, window: float) -> float:
        """Seconds until the daily counter expires."""
        if self.started_at is None:
            return 0.0
        return max(0.0, window - (now - self.started_at))

    @classmethod
    def load(cls, path: Union[str, Path]) -> QuotaSession:
        p = Path(path)
        if not p.is_file():
            return cls()
        try:
            data = json.loads(p.read_text(encoding="utf-8")) or {}
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid session file {p}: {exc}") from exc
        if not isinstance(data, dict):
            raise TypeError(f"Session file must hold a mapping, got {type(data).__name__}")
        started_at = data.get("started_at")
        if started_at is not None and (isinstance(started_at, bool) or not isinstance(started_at, (int, float))):
            raise TypeError(f"started_at must be a number, got {type(started_at).__name__}")
        return cls(
            daily_count=int(data.get("daily_count", 0)),
            started_at=None if started_at is None else float(started_at),
        )

    def save(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(asdict(self)), encoding="utf-8")
        return p


@dataclass(frozen=True, slots=True)
class Admission:
    """Verdict of :meth:`contact_scout.ratelimit.RateGovernor.admit`."""

    allowed: bool
    window: Optional[Window] = None
    limit: Optional[int] = None
    retry_after: Optional[float] = None

    @classmethod
    def ok(cls) -> Admission:
        return cls(allowed=True)

    @classmethod
    def rejected(cls, window: Window, limit: int, retry_after: Optional[float] = None) -> Admission:
        return cls(allowed=False, window=window, limit=limit, retry_after=retry_after)

    def raise_for_rejection(self) -> None:
        """Raise :class:`RateExceeded` when the call was not admitted."""
        if self.allowed:
            return
        if self.window is None or self.limit is None:
            raise EngineError("rejected admission carries no window or limit")
        raise RateExceeded(self.window, self.limit, self.retry_after)
