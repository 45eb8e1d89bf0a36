"""Core interfaces/abstractions.

- Contracts (Protocol) implemented by concrete adapters.
- The core depends on these, never on a storage engine or HTTP library.
"""

from core.interfaces.fetcher import FetchResponse, RemoteFetcher
from core.interfaces.repository import ProjectRepository

__all__ = [
    "FetchResponse",
    "ProjectRepository",
    "RemoteFetcher",
]
