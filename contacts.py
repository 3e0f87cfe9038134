"""Page through nearby-search results and look up each business.

The collector is a generator: rows come out in discovery order, and
whatever was yielded before a failed search is still good to write.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Iterator, List

from exceptions import PlacesError
from places import DetailRecord, PlacesClient, SearchQuery

logger = logging.getLogger(__name__)

#: Nearby search never returns more than this many results per page.
PAGE_SIZE = 20


def iteration_count(limit: int, page_size: int = PAGE_SIZE) -> int:
    """Number of search pages needed to reach *limit* results.

    At least one page is always checked, so ``limit=0`` still gives 1.

    Examples:
        >>> iteration_count(20)
        1
        >>> iteration_count(21)
        2
    """
    if limit < 0:
        raise ValueError("limit must not be negative")
    return max(1, math.ceil(limit / page_size))


def build_row(details: DetailRecord, page_token: str) -> List[str]:
    return [
        details.name,
        details.address,
        details.phone,
        details.url,
        page_token,
    ]


class PaginatedCollector:
    """Follows continuation tokens and turns every result into a CSV row."""

    def __init__(
        self,
        places: PlacesClient,
        page_size: int = PAGE_SIZE,
        page_token_delay: float = 2.0,
        sleep=time.sleep,
    ) -> None:
        self.places = places
        self.page_size = page_size
        self.page_token_delay = page_token_delay
        self._sleep = sleep

        self.pages_fetched = 0
        self.rows_yielded = 0
        self.details_failed = 0

    def collect(self, query: SearchQuery, limit: int) -> Iterator[List[str]]:
        """Yield one row per successful detail lookup.

        A failed search ends the loop; a failed detail lookup only skips
        that place.
        """
        total_iter = iteration_count(limit, self.page_size)
        current = query

        for i in range(total_iter):
            if i > 0:
                # Google rejects a page token that is used too soon after it was issued
                if self.page_token_delay > 0:
                    self._sleep(self.page_token_delay)

            try:
                page = self.places.search(current)
            except PlacesError as e:
                logger.error("%s; writing %d rows collected so far", e, self.rows_yielded)
                return
            self.pages_fetched += 1

            for place_id in page.place_ids:
                try:
                    details = self.places.details(place_id)
                except PlacesError as e:
                    logger.warning("%s", e)
                    self.details_failed += 1
                    continue

                self.rows_yielded += 1
                yield build_row(details, page.next_page_token)

            if not page.next_page_token:
                # No token means there are no more results
                logger.debug("No more pages after page %d", self.pages_fetched)
                return
            current = query.next_page(page.next_page_token)

        logger.info("Reached limit of %d results (%d pages)", limit, self.pages_fetched)
