"""Point-award bookkeeping for user activity."""

import logging
from typing import Any

from listingkit.core.entities.query import Filter, QueryRequest
from listingkit.core.exceptions import RemoteError
from listingkit.core.interfaces.remote_client import IRemoteClient

logger = logging.getLogger(__name__)

AWARD_PROCEDURE = "award_points"
ACTIVITIES_COLLECTION = "point_activities"

# Used when an action has no configured point value
DEFAULT_POINTS = {
    "voting": 5,
    "company_review": 10,
    "company_submit": 10,
}


class PointsAwarder:
    """Awards points for an action without ever failing the action itself."""

    def __init__(self, client: IRemoteClient) -> None:
        self._client = client

    async def award(self, user_id: Any, action: str, default: int | None = None) -> int:
        """Award the points configured for ``action`` to ``user_id``.

        The value comes from ``point_activities``; when it is missing or
        not positive the fallback is ``default`` (or ``DEFAULT_POINTS``).

        Returns:
            Points awarded, 0 if awarding failed.
        """
        points = await self._points_for(action)
        if points is None:
            points = default if default is not None else DEFAULT_POINTS.get(action, 0)
        if points <= 0:
            return 0

        try:
            await self._client.call(
                AWARD_PROCEDURE,
                {"user_id": user_id, "points_to_award": points, "action": action},
            )
        except RemoteError as e:
            logger.error("Error awarding points for %s: %s", action, e)
            return 0

        logger.info("Awarded %d points to %s for %s", points, user_id, action)
        return points

    async def _points_for(self, action: str) -> int | None:
        request = QueryRequest(select="points", limit=1).where(Filter.eq("action", action))
        try:
            result = await self._client.query(ACTIVITIES_COLLECTION, request)
        except RemoteError as e:
            logger.warning("Could not read point value for %s: %s", action, e)
            return None
        if not result.rows:
            return None
        points = int(result.rows[0].get("points") or 0)
        return points if points > 0 else None
