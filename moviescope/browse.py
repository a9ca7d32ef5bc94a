"""
Curated listings for the explore page: trending, top rated, by genre and by decade.

Each listing is a single free-text search trimmed to its first results.
OMDb has no popularity or rating feeds, so fixed search terms stand in for them.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from moviescope.api_clients.omdb import OMDbClient, omdb_client
from moviescope.query import build_search_query
from moviescope.relay import RelayResult, failure, relay

logger = logging.getLogger(__name__)

TRENDING_TERM = "avengers"
TOP_RATED_TERM = "godfather"
BROWSE_LIMIT = 10


def decades(current_year: Optional[int] = None) -> List[Tuple[str, int, int]]:
    """(name, first year, last year), newest first. The current decade ends this year."""
    current_year = current_year or date.today().year
    return [
        ("2020s", 2020, current_year),
        ("2010s", 2010, 2019),
        ("2000s", 2000, 2009),
        ("1990s", 1990, 1999),
        ("1980s", 1980, 1989),
        ("1970s", 1970, 1979),
        ("1960s", 1960, 1969),
        ("1950s", 1950, 1959),
        ("Classic", 1900, 1949),
    ]


def decade_mid_year(name: str, current_year: Optional[int] = None) -> Optional[int]:
    for decade, start, end in decades(current_year):
        if decade.lower() == name.strip().lower():
            return (start + end) // 2
    return None


def listing(items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"Response": "True", "Search": items, "totalResults": str(len(items))}


def trim_results(
    result: RelayResult, limit: int, exclude_id: Optional[str] = None
) -> RelayResult:
    """
    Cut a search result down to its first `limit` titles.

    Failures and OMDb 'Response: False' bodies are returned as-is.
    """
    found = result.payload
    if not result.ok or not isinstance(found, dict) or found.get("Response") != "True":
        return result

    items = [
        m for m in found.get("Search") or []
        if isinstance(m, dict) and (exclude_id is None or m.get("imdbID") != exclude_id)
    ][:limit]
    return RelayResult(status_code=200, payload=listing(items))


async def browse_search(
    term: str,
    client: OMDbClient = omdb_client,
    year: Optional[str] = None,
    limit: int = BROWSE_LIMIT,
) -> RelayResult:
    result = await relay(build_search_query(free_text=term, year=year), client)
    return trim_results(result, limit)


async def trending(client: OMDbClient = omdb_client, limit: int = BROWSE_LIMIT) -> RelayResult:
    return await browse_search(TRENDING_TERM, client, limit=limit)


async def top_rated(client: OMDbClient = omdb_client, limit: int = BROWSE_LIMIT) -> RelayResult:
    return await browse_search(TOP_RATED_TERM, client, limit=limit)


async def by_genre(genre: str, client: OMDbClient = omdb_client, limit: int = BROWSE_LIMIT) -> RelayResult:
    return await browse_search(genre, client, limit=limit)


async def by_decade(decade: str, client: OMDbClient = omdb_client, limit: int = BROWSE_LIMIT) -> RelayResult:
    # The decade's middle year stands in for the whole range; OMDb filters by a single year
    mid_year = decade_mid_year(decade)
    if mid_year is None:
        names = ", ".join(name for name, _, _ in decades())
        logger.warning(f"Unknown decade requested: {decade}")
        return failure(f"Unknown decade: {decade}. Expected one of {names}", status_code=404)

    return await browse_search(str(mid_year), client, year=str(mid_year), limit=limit)
