"""Company submissions from users."""

import logging
from typing import Any

from listingkit.core.exceptions import ValidationError
from listingkit.core.interfaces.remote_client import IRemoteClient
from listingkit.core.services.cache_service import CacheService
from listingkit.core.services.points import PointsAwarder
from listingkit.core.services.slugs import SlugAllocator
from listingkit.core.services.validation import check_length, check_url, require
from listingkit.infrastructure.key_builders.listing import COMPANIES

logger = logging.getLogger(__name__)

COMPANIES_COLLECTION = "mlm_companies"
OPTIONAL_FIELDS = (
    "state",
    "city",
    "headquarters",
    "website",
    "established",
    "logo_url",
)
SEO_FIELDS = ("meta_description", "meta_keywords", "focus_keyword")


class CompanySubmissions:
    """Validates and stores companies submitted for review."""

    def __init__(
        self,
        client: IRemoteClient,
        cache: CacheService,
        points: PointsAwarder | None = None,
        slugs: SlugAllocator | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._points = points or PointsAwarder(client)
        self._slugs = slugs or SlugAllocator(client)

    async def submit(
        self,
        user_id: Any,
        form: dict[str, Any],
        country_name: str | None = None,
    ) -> dict[str, Any]:
        """Store a company as ``pending`` under a unique slug.

        Args:
            user_id: Submitting user.
            form: Submitted fields.
            country_name: Display name of ``form["country"]``.

        Returns:
            The inserted row.

        Raises:
            ValidationError: If the form is incomplete or malformed.
            RemoteError: If the insert fails.
        """
        if not user_id:
            raise ValidationError("Please log in to submit a company", field="user_id")
        self.validate(form)

        payload: dict[str, Any] = {
            "name": form["name"].strip(),
            "description": form["description"].strip(),
            "category": form["category"],
            "country": form["country"],
            "country_name": country_name or form["country"],
            "submitted_by": user_id,
            "status": "pending",
        }
        for name in OPTIONAL_FIELDS:
            payload[name] = form.get(name) or None
        for name in SEO_FIELDS:
            payload[name] = (form.get(name) or "").strip() or None

        row = await self._slugs.insert_unique(COMPANIES_COLLECTION, payload)
        logger.info("Company %s submitted by %s", row.get("slug"), user_id)

        await self._cache.clear_family(COMPANIES)
        await self._points.award(user_id, "company_submit")
        return row

    @staticmethod
    def validate(form: dict[str, Any]) -> None:
        """Raise ValidationError for the first problem found in ``form``."""
        require(form, "name", "description", "category", "country")
        check_length(form["name"], "name", maximum=100)
        check_length(form["description"], "description", minimum=20)
        check_url(form.get("website"))
