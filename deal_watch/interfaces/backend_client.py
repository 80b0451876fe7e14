# interfaces/backend_client.py
"""
Backend API client
Reads watchlists and preference policies, writes the agent activity log.

All requests carry the shared X-Agent-Secret header.
"""

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from ..errors import CollaboratorError
from ..schemas.deal_schemas import PreferencePolicy, Watchlist

AGENT_TYPE = "scraper-analyzer"


class BackendClient:
    """
    Async client for the CRUD/auth backend

    Watchlist and preference lookups raise CollaboratorError on failure.
    Activity logging is best-effort and never raises.
    """

    def __init__(
        self,
        base_url: str,
        agent_secret: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"X-Agent-Secret": agent_secret},
            timeout=timeout,
            transport=transport
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str) -> Any:
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise CollaboratorError(f"GET {path} failed: {e}") from e

    # ============================================
    # Watchlists
    # ============================================

    async def get_active_watchlists(self) -> List[Watchlist]:
        """
        Fetch every active watchlist

        Malformed entries are logged and skipped.

        Raises:
            CollaboratorError: If the backend cannot be reached
        """
        rows = await self._get_json("/api/watchlists/active")

        watchlists = []
        for row in rows or []:
            try:
                watchlists.append(Watchlist.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed watchlist {row!r}: {e}")
        return watchlists

    # ============================================
    # Preferences
    # ============================================

    async def get_preferences(self, user_id: str) -> PreferencePolicy:
        """
        Fetch one user's preference policy

        Raises:
            CollaboratorError: If the backend fails or returns an invalid policy
        """
        data = await self._get_json(f"/api/users/{user_id}/preferences")
        try:
            return PreferencePolicy.model_validate(data)
        except ValidationError as e:
            raise CollaboratorError(f"invalid preferences for user {user_id}: {e}") from e

    # ============================================
    # Activity log
    # ============================================

    async def log_activity(self, action: str, details: Dict[str, Any]) -> bool:
        """
        Record an agent activity event (best-effort)

        Returns:
            True if the backend accepted the event
        """
        payload = {
            "agentType": AGENT_TYPE,
            "action": action,
            "details": details
        }
        try:
            response = await self._client.post("/api/agent-activity", json=payload)
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to log activity '{action}': {e}")
            return False

    def __repr__(self) -> str:
        return f"BackendClient(base_url={self.base_url!r})"
