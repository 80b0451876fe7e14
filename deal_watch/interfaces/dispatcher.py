# interfaces/dispatcher.py
"""
Deal Dispatcher
Hands immediate/soon matches to the email service. Rendering and delivery
happen there; this side only sends the MatchResult.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx
from loguru import logger

from ..errors import DispatchFailure
from ..schemas.deal_schemas import MatchResult


class DealDispatcher(ABC):

    @abstractmethod
    async def dispatch(self, match: MatchResult) -> None:
        """
        Send one match to the email collaborator

        Raises:
            DispatchFailure: If the collaborator rejects or drops the match
        """

    async def close(self) -> None:
        """Release client resources (no-op by default)"""


class HttpDealDispatcher(DealDispatcher):
    """Posts matches as JSON to {base_url}/api/deal-alerts"""

    def __init__(
        self,
        base_url: str,
        agent_secret: str = "",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        headers = {"X-Agent-Secret": agent_secret} if agent_secret else {}
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport
        )

    async def dispatch(self, match: MatchResult) -> None:
        try:
            response = await self._client.post("/api/deal-alerts", json=match.model_dump(mode="json"))
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DispatchFailure(
                f"dispatch of {match.deal.hotel.hotel_id} to {match.user_id} failed: {e}"
            ) from e

        logger.info(
            f"Dispatched {match.urgency.value} alert to {match.user_id}: {match.deal.hotel.name}"
        )

    async def close(self) -> None:
        await self._client.aclose()
