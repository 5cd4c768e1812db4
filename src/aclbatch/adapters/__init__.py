from __future__ import annotations

from .fastly import FastlyACLClient
from .http_resilience import ResilientClient

__all__ = ["FastlyACLClient", "ResilientClient"]
