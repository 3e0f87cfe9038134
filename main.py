"""
Business contacts lookup

Searches Google Places for businesses near a coordinate, looks up each
one's contact details and appends them to a CSV file.

Usage:
    business-contacts --lat 40.7128 --lng -74.0060 --type lawyer
    business-contacts --lat 40.7128 --lng -74.0060 --keyword "pizza" --limit 60
    business-contacts --nextPageToken <token from the last CSV column>
"""

import argparse
import logging
import sys

import requests
from dotenv import load_dotenv

from contacts import PaginatedCollector
from csv_output import append_rows
from exceptions import BusinessContactsError, ConfigurationError
from place_types import parse_place_type
from places import PlacesClient, SearchQuery, build_client
from settings import API_KEY_VAR, Settings

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="business-contacts",
        description="Searches for business contact info using the Google Places API "
                    "and formats it into a CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Requires {API_KEY_VAR} in the environment or in a .env file.

Examples:
  business-contacts --lat 40.7128 --lng -74.0060 --type lawyer
  business-contacts --lat 40.7128 --lng -74.0060 --keyword pizza --limit 60
  business-contacts --nextPageToken <token>
        """
    )

    parser.add_argument("--lat", type=float, help="Latitude from which the search is based on")
    parser.add_argument("--lng", type=float, help="Longitude from which the search is based on")
    parser.add_argument("--keyword", default="", help="Keyword to search on")
    parser.add_argument(
        "--type",
        default="",
        help="Type of business to search on; one of "
             "https://developers.google.com/maps/documentation/places/web-service/supported_types"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=100,
        help="Amount of contacts to lookup (default: 100)"
    )
    parser.add_argument(
        "--nextPageToken",
        default="",
        help="Token to lookup where you left off"
    )
    parser.add_argument(
        "--radius",
        type=int,
        help="Search radius in meters (default: 8000, or CONTACTS_RADIUS)"
    )
    parser.add_argument(
        "-o", "--output",
        help="CSV file to append to (default: results.csv, or CONTACTS_OUTPUT)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every request"
    )

    args = parser.parse_args(argv)

    if args.limit < 0:
        parser.error("--limit must not be negative")
    if args.radius is not None and args.radius <= 0:
        parser.error("--radius must be positive")

    # A page token carries the whole original query
    if args.nextPageToken:
        return args

    if args.lat is None:
        parser.error("--lat is a required flag")
    if args.lng is None:
        parser.error("--lng is a required flag")
    if not -90 <= args.lat <= 90:
        parser.error("--lat must be between -90 and 90")
    if not -180 <= args.lng <= 180:
        parser.error("--lng must be between -180 and 180")
    if not args.keyword and not args.type:
        parser.error("at least one of --keyword or --type need to be used")

    return args


def build_query(args, settings):
    """Turn the parsed flags into the first search request."""
    if args.nextPageToken:
        return SearchQuery(page_token=args.nextPageToken)

    place_type = ""
    if args.type:
        try:
            place_type = parse_place_type(args.type)
        except ValueError as e:
            logger.warning("error parsing place type, but continuing to run: %s", e)
            place_type = args.type

    return SearchQuery(
        location=(args.lat, args.lng),
        radius=settings.radius,
        keyword=args.keyword,
        place_type=place_type,
    )


def main(argv=None):
    """Main CLI entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    load_dotenv()
    try:
        settings = Settings()
        if args.output:
            settings.output_path = args.output
        if args.radius is not None:
            settings.radius = args.radius
        settings.validate()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    query = build_query(args, settings)

    try:
        with requests.Session() as session:
            # Initialize the client with your API key
            places = PlacesClient(build_client(settings.api_key, session))
            collector = PaginatedCollector(
                places,
                page_size=settings.page_size,
                page_token_delay=settings.page_token_delay,
            )
            rows = list(collector.collect(query, args.limit))

        logger.info(
            "Collected %d contacts from %d pages (%d detail lookups failed)",
            collector.rows_yielded, collector.pages_fetched, collector.details_failed,
        )
        append_rows(settings.output_path, rows)

    except BusinessContactsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user.", file=sys.stderr)
        return 130

    print(f"Results written to {settings.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
