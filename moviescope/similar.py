import logging
from typing import Any, Dict, Optional

from moviescope.api_clients.omdb import OMDbClient, omdb_client
from moviescope.browse import listing, trim_results
from moviescope.query import build_search_query
from moviescope.relay import RelayResult, relay

logger = logging.getLogger(__name__)


def first_genre(details: Dict[str, Any]) -> Optional[str]:
    """'Action, Adventure, Sci-Fi' -> 'Action'. OMDb uses 'N/A' for unknown."""
    raw = details.get("Genre") or ""
    for genre in raw.split(","):
        genre = genre.strip()
        if genre and genre != "N/A":
            return genre
    return None


async def find_similar(
    imdb_id: str, client: OMDbClient = omdb_client, limit: int = 6
) -> RelayResult:
    """
    Titles sharing the first genre of `imdb_id`, excluding the title itself.

    Failures from either upstream call are returned as-is.
    """
    details = await relay(build_search_query(identifier=imdb_id), client)
    if not details.ok:
        return details

    payload = details.payload
    if not isinstance(payload, dict) or payload.get("Response") != "True":
        return details

    genre = first_genre(payload)
    if not genre:
        logger.info(f"No genre listed for {imdb_id}, nothing to compare against")
        return RelayResult(status_code=200, payload=listing([]))

    matches = await relay(build_search_query(free_text=genre), client)
    similar = trim_results(matches, limit, exclude_id=imdb_id)
    if similar is not matches:
        logger.debug(f"Similar to {imdb_id} via '{genre}': {similar.payload['totalResults']} titles")
    return similar
