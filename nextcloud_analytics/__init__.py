"""Small client for the Nextcloud Analytics API (https://github.com/rello/analytics/wiki/API).

    client = SyncClient("https://example.com/nextcloud", 42, "myself", "app-password")
    client.send_timeline_now_data("speed_kmh", 180)
    client.send_data("age", "alice", 25)
"""
from .client import AsyncClient, SyncClient, check_response
from .errors import ApiError, ContractError, DomainError, MalformedResponseError, StatusError

__version__ = "0.1.0"

__all__ = [
    "AsyncClient", "SyncClient", "check_response",
    "ApiError", "ContractError", "DomainError", "MalformedResponseError", "StatusError",
]
