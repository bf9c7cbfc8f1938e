"""HTTP transport for Verdict."""

from verdict.api.app import app

__all__ = ["app"]
