# contact_scout/__init__.py
"""
ContactScout package initializer.
Defines package version and exposes the engine entry points and the CLI.
"""
__version__ = "0.1.0"

from contact_scout.engine import Engine, Resolution
from contact_scout.errors import EngineError, RateExceeded
from contact_scout.models import ContactRecord, PrimaryProfile, QuotaSession

# Expose CLI entry point
from contact_scout.cli import cli

__all__ = [
    "__version__",
    "Engine",
    "Resolution",
    "EngineError",
    "RateExceeded",
    "ContactRecord",
    "PrimaryProfile",
    "QuotaSession",
    "cli",
]
