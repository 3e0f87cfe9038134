"""Google Places search and detail lookups.

Wraps ``googlemaps.Client`` so the collector only sees typed requests
(``SearchQuery``) and typed answers (``SearchPage``, ``DetailRecord``).
Every failure raised by the googlemaps library comes out as ``PlacesError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import googlemaps
import requests
from googlemaps.exceptions import ApiError, Timeout, TransportError

from exceptions import ConfigurationError, PlacesError

logger = logging.getLogger(__name__)

#: Detail fields needed for one CSV row. Each one is billed, keep it short.
DETAIL_FIELDS = [
    "name",
    "formatted_address",
    "formatted_phone_number",
    "url",
]

_GOOGLEMAPS_ERRORS = (ApiError, TransportError, Timeout)


@dataclass(frozen=True)
class SearchQuery:
    """One nearby-search request.

    When ``page_token`` is set Google ignores every other field, so
    ``next_page`` builds a token-only query.
    """

    location: Optional[Tuple[float, float]] = None
    radius: int = 8000
    keyword: str = ""
    place_type: str = ""
    page_token: str = ""

    @staticmethod
    def next_page(page_token: str) -> "SearchQuery":
        return SearchQuery(page_token=page_token)


@dataclass
class SearchPage:
    """Place ids from one page of results plus the token for the next page."""

    place_ids: List[str] = field(default_factory=list)
    next_page_token: str = ""


@dataclass
class DetailRecord:
    name: str = ""
    address: str = ""
    phone: str = ""
    url: str = ""


def build_client(api_key: str, session: Optional[requests.Session] = None) -> googlemaps.Client:
    """Create the googlemaps client used for every call of a run.

    Over-query-limit answers are reported at once instead of being retried.
    """
    try:
        return googlemaps.Client(
            key=api_key,
            retry_over_query_limit=False,
            requests_session=session,
        )
    except ValueError as e:
        # googlemaps rejects keys that are malformed before any request
        raise ConfigurationError(f"error creating google maps client: {e}") from e


class PlacesClient:
    """Search and detail capabilities backed by a ``googlemaps.Client``."""

    def __init__(self, client: googlemaps.Client, detail_fields: Optional[List[str]] = None) -> None:
        self.client = client
        self.detail_fields = detail_fields or list(DETAIL_FIELDS)

    def search(self, query: SearchQuery) -> SearchPage:
        """Run one nearby search.

        Raises:
            PlacesError: if the request fails or Google answers with an error status.
        """
        if query.page_token:
            params = {"page_token": query.page_token}
        else:
            params = {"location": query.location, "radius": query.radius}
            if query.keyword:
                params["keyword"] = query.keyword
            if query.place_type:
                params["type"] = query.place_type

        try:
            response = self.client.places_nearby(**params)
        except _GOOGLEMAPS_ERRORS as e:
            raise PlacesError(f"error searching nearby places: {e}") from e

        place_ids = [
            place["place_id"]
            for place in response.get("results", [])
            if place.get("place_id")
        ]
        next_page_token = response.get("next_page_token") or ""
        logger.debug(
            "Nearby search returned %d places (more=%s)",
            len(place_ids), bool(next_page_token),
        )
        return SearchPage(place_ids=place_ids, next_page_token=next_page_token)

    def details(self, place_id: str) -> DetailRecord:
        """Fetch contact details for *place_id*.

        Raises:
            PlacesError: if the lookup fails.
        """
        try:
            response = self.client.place(place_id=place_id, fields=self.detail_fields)
        except _GOOGLEMAPS_ERRORS as e:
            raise PlacesError(f"error reading place details for {place_id}: {e}") from e

        result = response.get("result") or {}
        return DetailRecord(
            name=result.get("name") or "",
            address=result.get("formatted_address") or "",
            phone=result.get("formatted_phone_number") or "",
            url=result.get("url") or "",
        )
