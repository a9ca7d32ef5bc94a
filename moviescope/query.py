"""
Translates the inbound movie search parameters into an OMDb query.

Exactly one lookup mode is picked per request, first match wins:
identifier > exact title > free text > default fallback term.
"""
from enum import Enum
from typing import Dict, Mapping, Optional

from pydantic import BaseModel

from moviescope.config import DEFAULT_SEARCH_TERM


class QueryMode(str, Enum):
    IDENTIFIER = "identifier"
    TITLE = "title"
    FREE_TEXT = "free_text"
    DEFAULT = "default"


class SearchQuery(BaseModel):
    mode: QueryMode
    identifier: Optional[str] = None
    title: Optional[str] = None
    free_text: Optional[str] = None
    year: Optional[str] = None
    genre: Optional[str] = None
    media_type: Optional[str] = None
    page: str = "1"

    def to_params(self, api_key: Optional[str]) -> Dict[str, str]:
        """Outbound OMDb parameters, `apikey` first."""
        params = {"apikey": api_key or ""}

        if self.mode == QueryMode.IDENTIFIER:
            params["i"] = self.identifier
        elif self.mode == QueryMode.TITLE:
            params["t"] = self.title
        else:
            params["s"] = self.free_text
            params["page"] = self.page

            if self.mode == QueryMode.FREE_TEXT:
                if self.year:
                    params["y"] = self.year

                # OMDb search can't filter by genre; a genre request narrows to movies instead
                if self.genre:
                    params["type"] = "movie"
                elif self.media_type:
                    params["type"] = self.media_type

        return params


def _present(value: Optional[str]) -> bool:
    return value is not None and value != ""


def build_search_query(
    identifier: Optional[str] = None,
    title: Optional[str] = None,
    free_text: Optional[str] = None,
    year: Optional[str] = None,
    genre: Optional[str] = None,
    page: Optional[str] = None,
    media_type: Optional[str] = None,
    default_term: Optional[str] = None,
) -> SearchQuery:
    page = page if _present(page) else "1"

    if _present(identifier):
        return SearchQuery(mode=QueryMode.IDENTIFIER, identifier=identifier)

    if _present(title):
        return SearchQuery(mode=QueryMode.TITLE, title=title)

    if _present(free_text):
        return SearchQuery(
            mode=QueryMode.FREE_TEXT,
            free_text=free_text,
            page=page,
            year=year if _present(year) else None,
            genre=genre if _present(genre) else None,
            media_type=media_type if _present(media_type) else None,
        )

    return SearchQuery(
        mode=QueryMode.DEFAULT,
        free_text=default_term or DEFAULT_SEARCH_TERM,
        page=page,
    )


def from_request_params(
    params: Mapping[str, Optional[str]], default_term: Optional[str] = None
) -> SearchQuery:
    """Build a query from the inbound `/api/movies` parameter names."""
    return build_search_query(
        identifier=params.get("imdbId"),
        title=params.get("title"),
        free_text=params.get("search"),
        year=params.get("year"),
        genre=params.get("genre"),
        page=params.get("page"),
        media_type=params.get("type"),
        default_term=default_term,
    )
