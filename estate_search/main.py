"""
Main entry point and CLI for the property search core.

Provides a command-line interface for searching property listings with a
natural language query plus explicit filters, against a JSON data file or a
PostgreSQL database.
"""

import asyncio
import argparse
import logging
import sys
from typing import List, Optional
from datetime import datetime

from dotenv import load_dotenv
load_dotenv()

from estate_search.config.search_config import SEARCH_CONFIG, get_search_settings
from estate_search.controller import SearchController
from estate_search.error_handling.errors import SearchError
from estate_search.models import Property, SortOption
from estate_search.session.session_manager import SearchSessionManager
from estate_search.store.base import PropertyStore
from estate_search.store.memory_store import InMemoryPropertyStore
from estate_search.store.postgres_store import PostgresPropertyStore


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def format_property(prop: Property) -> str:
    """
    Format a property for console output.

    Args:
        prop: Property to format

    Returns:
        Formatted string representation of the property
    """
    lines = []

    title = prop.title or "[No title]"
    lines.append(f"🏠 {title}")
    lines.append(f"   ID: {prop.id}")

    if prop.price is not None:
        lines.append(f"   Price: {prop.price:,.0f}")

    location = ", ".join(part for part in (prop.location, prop.city) if part)
    if location:
        lines.append(f"   Location: {location}")

    details = []
    if prop.type:
        details.append(prop.type)
    if prop.listing_type:
        details.append(f"for {prop.listing_type}")
    if prop.beds is not None:
        details.append(f"{prop.beds} bed")
    if prop.baths is not None:
        details.append(f"{prop.baths} bath")
    if prop.living_area is not None:
        details.append(f"{prop.living_area:g} m2")
    if details:
        lines.append(f"   Details: {' | '.join(details)}")

    if prop.features:
        lines.append(f"   Features: {', '.join(prop.features)}")

    lines.append("")  # Blank line for spacing

    return "\n".join(lines)


def format_results(properties: List[Property], from_cache: bool = False) -> str:
    """
    Format a list of properties for console output.

    Args:
        properties: Properties in display order
        from_cache: Whether the results were served from the cache

    Returns:
        Formatted string representation of all properties
    """
    if not properties:
        return "No properties found matching your criteria.\n"

    output = []
    output.append(f"\n{'='*60}\n")
    source = " (cached)" if from_cache else ""
    output.append(f"Found {len(properties)} propert{'y' if len(properties) == 1 else 'ies'}{source}\n")
    output.append(f"{'='*60}\n\n")

    for prop in properties:
        output.append(format_property(prop))
        output.append("\n")

    output.append(f"{'='*60}\n")

    return "".join(output)


async def open_store(data_file: Optional[str], database_url: Optional[str]) -> PropertyStore:
    """
    Open the record store selected on the command line or in the environment.

    A data file takes precedence over a database URL.

    Raises:
        SearchError: If neither source is configured or the store cannot be opened
    """
    if data_file:
        return InMemoryPropertyStore.from_json_file(data_file)
    if database_url:
        return await PostgresPropertyStore.connect(database_url)
    raise SearchError("No property source configured: pass --data or --database-url")


def apply_cli_filters(controller: SearchController, args: argparse.Namespace) -> None:
    """Apply explicit command-line filters on top of the parsed query."""
    state = controller.state

    if args.city:
        state.set_cities(args.city)
    if args.type:
        state.set_property_types(args.type)
    if args.listing_type:
        state.set_listing_types(args.listing_type)
    if args.amenity:
        state.set_amenities(set(state.amenities) | set(args.amenity))
    if args.max_price is not None:
        state.set_max_price(args.max_price)
    if args.min_price is not None:
        state.set_min_price(args.min_price)
    if args.min_beds is not None:
        state.set_min_beds(args.min_beds)
    if args.min_baths is not None:
        state.set_min_baths(args.min_baths)
    if args.max_area is not None:
        state.set_max_living_area(args.max_area)
    if args.min_area is not None:
        state.set_min_living_area(args.min_area)
    if args.sort:
        state.set_sort_option(args.sort)


async def run_search(args: argparse.Namespace) -> int:
    """
    Execute the property search workflow.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    if args.min_price is not None and args.max_price is not None and args.min_price > args.max_price:
        logger.error(f"Invalid price range: min_price ({args.min_price}) > max_price ({args.max_price})")
        print(
            f"Error: Minimum price ({args.min_price}) cannot be greater than maximum price ({args.max_price})",
            file=sys.stderr
        )
        return 1

    store = None
    try:
        settings = get_search_settings()
        logger.info(f"Using configuration: {SEARCH_CONFIG}")

        store = await open_store(
            args.data or settings.store.data_file,
            args.database_url or settings.store.database_url
        )

        session_manager = None
        if not args.no_session:
            session_manager = SearchSessionManager(
                session_id=settings.session.session_id,
                storage_type=settings.session.storage_type,
                base_dir=settings.session.base_dir
            )

        controller = SearchController(store=store, settings=settings, session_manager=session_manager)

        # Explicit filters decide the city, so skip the default city pick.
        # The search runs below, once the command-line filters are applied.
        await controller.initialize(
            is_new_search=not args.city,
            restore_filters=args.resume,
            run_search=False
        )

        apply_cli_filters(controller, args)
        if args.query or not args.resume:
            controller.set_search_term(args.query or "")

        print(f"\n🔍 Searching for '{controller.state.free_text}'...")
        if controller.state.cities:
            print(f"   Cities: {', '.join(sorted(controller.state.cities))}")
        print()

        start_time = datetime.now()

        if args.query:
            extracted = await controller.process_natural_language_query()
            if not extracted.is_empty():
                logger.info(f"Filters from query: {extracted.to_dict()}")
        else:
            await controller.handle_search()

        elapsed_time = (datetime.now() - start_time).total_seconds()

        if controller.error:
            print(f"❌ {controller.error}", file=sys.stderr)
            return 1

        if not controller.state.cities:
            print("Select at least one city (--city) to search.\n")
            return 1

        print(format_results(controller.visible_results, from_cache=controller.results.from_cache))

        logger.info(f"Search completed in {elapsed_time:.2f} seconds")
        print(f"✅ Search completed in {elapsed_time:.2f} seconds")
        print(f"   Active filters: {controller.active_filter_count()}")
        print()

        controller.save_session()
        return 0

    except KeyboardInterrupt:
        logger.info("Search interrupted by user")
        print("\n\n⚠️  Search interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT

    except SearchError as e:
        logger.error(f"Search setup failed: {e}")
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1

    finally:
        if isinstance(store, PostgresPropertyStore):
            await store.close()


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="estate-search",
        description="Search property listings with natural language and explicit filters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Natural language search over a JSON data file
  estate-search "modern 3 bedroom house with pool in Algiers under 50k" --data properties.json

  # Explicit filters
  estate-search --city Oran --type Apartment --min-beds 2 --data properties.json

  # Sort by price against PostgreSQL
  estate-search "villa for sale" --city Algiers --sort priceAsc --database-url postgresql://localhost/estate
        """
    )

    parser.add_argument(
        "query",
        nargs="?",
        default="",
        help="Free-text query (e.g., '3 bedroom villa in Oran between 20k and 80k')"
    )

    parser.add_argument("--city", action="append", help="City to search in (repeatable)")
    parser.add_argument("--type", action="append", help="Property type (repeatable, e.g. House)")
    parser.add_argument(
        "--listing-type",
        action="append",
        help="Listing type (repeatable: sale, rent, construction)"
    )
    parser.add_argument("--amenity", action="append", help="Required amenity (repeatable)")

    parser.add_argument("--min-price", type=int, default=None, help="Minimum price")
    parser.add_argument("--max-price", type=int, default=None, help="Maximum price")
    parser.add_argument("--min-beds", type=int, default=None, help="Minimum number of bedrooms")
    parser.add_argument("--min-baths", type=int, default=None, help="Minimum number of bathrooms")
    parser.add_argument("--min-area", type=int, default=None, help="Minimum living area in m2")
    parser.add_argument("--max-area", type=int, default=None, help="Maximum living area in m2")

    parser.add_argument(
        "--sort",
        choices=[option.value for option in SortOption],
        default=None,
        help="Result ordering"
    )

    parser.add_argument("--data", default=None, help="JSON file holding a list of property records")
    parser.add_argument("--database-url", default=None, help="PostgreSQL connection URL")
    parser.add_argument(
        "--no-session",
        action="store_true",
        help="Do not load or save the search session"
    )
    parser.add_argument(
        "--resume",
        action="store_true",
        help="Start from the filters saved by the previous run"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging output"
    )

    return parser


def main() -> int:
    """
    Main entry point for the CLI application.

    Parses command-line arguments and executes the property search.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        return asyncio.run(run_search(args))
    except Exception as e:
        logger.exception(f"Unexpected error in main: {str(e)}")
        print(f"❌ Unexpected error: {str(e)}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
