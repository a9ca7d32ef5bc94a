import httpx
from typing import Optional, Dict
from moviescope.config import config
from moviescope.query import SearchQuery

class OMDbClient:
    """Client for the OMDb API. One GET per call, no retries."""
    BASE_URL = "http://www.omdbapi.com/"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url
        # Tests swap in httpx.MockTransport here
        self.transport = transport

    @property
    def api_key(self) -> Optional[str]:
        # Read on each call so /config updates apply without a restart
        return self._api_key or config.OMDB_API_KEY

    @property
    def base_url(self) -> str:
        return self._base_url or config.OMDB_BASE_URL or self.BASE_URL

    def build_params(self, query: SearchQuery) -> Dict[str, str]:
        return query.to_params(self.api_key)

    def redacted_url(self, query: SearchQuery) -> str:
        params = self.build_params(query)
        if params.get("apikey"):
            params["apikey"] = "***"
        return str(httpx.URL(self.base_url, params=params))

    async def get(self, query: SearchQuery) -> httpx.Response:
        async with httpx.AsyncClient(transport=self.transport, follow_redirects=True) as client:
            return await client.get(self.base_url, params=self.build_params(query))

# Global instance
omdb_client = OMDbClient()
