import httpx
import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from moviescope.api import app, get_omdb_client
from moviescope.api_clients.omdb import OMDbClient

client = TestClient(app)

MATRIX = {
    "Title": "The Matrix",
    "Year": "1999",
    "Genre": "Action, Sci-Fi",
    "imdbID": "tt0133093",
    "Type": "movie",
    "Response": "True",
}

@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Keep local .env / config file values out of these tests."""
    for key in ("OMDB_API_KEY", "OMDB_BASE_URL", "DEFAULT_SEARCH_TERM", "SIMILAR_LIMIT"):
        monkeypatch.delenv(key, raising=False)
    with patch('moviescope.api.config.file_config', {}):
        yield

@pytest.fixture
def upstream():
    """Route the OMDb client to a mock transport and record what it was sent."""
    state = {"requests": [], "response": httpx.Response(200, json=MATRIX)}

    def handler(request):
        state["requests"].append(request)
        response = state["response"]
        if isinstance(response, Exception):
            raise response
        return response

    mock_client = OMDbClient(api_key="testkey", base_url="http://omdb.test/", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_omdb_client] = lambda: mock_client
    yield state
    app.dependency_overrides.clear()

def sent_params(state):
    assert len(state["requests"]) == 1
    return dict(state["requests"][0].url.params)

class TestMoviesEndpoint:

    def test_lookup_by_imdb_id(self, upstream):
        response = client.get("/api/movies", params={"imdbId": "tt0133093", "search": "matrix"})

        assert response.status_code == 200
        assert response.json() == MATRIX
        assert sent_params(upstream) == {"apikey": "testkey", "i": "tt0133093"}

    def test_lookup_by_title(self, upstream):
        client.get("/api/movies", params={"title": "The Matrix"})
        assert sent_params(upstream) == {"apikey": "testkey", "t": "The Matrix"}

    def test_search_with_filters(self, upstream):
        client.get("/api/movies", params={"search": "matrix", "year": "1999", "genre": "Action", "page": "2"})
        assert sent_params(upstream) == {
            "apikey": "testkey", "s": "matrix", "page": "2", "y": "1999", "type": "movie"
        }

    def test_search_with_type(self, upstream):
        client.get("/api/movies", params={"search": "office", "type": "series"})
        assert sent_params(upstream)["type"] == "series"

    def test_no_params_falls_back_to_default_term(self, upstream):
        client.get("/api/movies")
        assert sent_params(upstream) == {"apikey": "testkey", "s": "marvel", "page": "1"}

    def test_default_term_from_config(self, upstream, monkeypatch):
        monkeypatch.setenv("DEFAULT_SEARCH_TERM", "pixar")
        client.get("/api/movies")
        assert sent_params(upstream)["s"] == "pixar"

    def test_transport_failure(self, upstream):
        upstream["response"] = httpx.ConnectError("dns failure")
        response = client.get("/api/movies", params={"search": "matrix"})

        assert response.status_code == 500
        assert response.json() == {"Response": "False", "Error": "Failed to fetch movie data"}

    def test_upstream_rejection_status_is_relayed(self, upstream):
        upstream["response"] = httpx.Response(401, json={"Response": "False", "Error": "Invalid API key!"})
        response = client.get("/api/movies", params={"search": "matrix"})

        assert response.status_code == 401
        assert response.json() == {"Response": "False", "Error": "API error: 401 Unauthorized"}

    def test_invalid_json(self, upstream):
        upstream["response"] = httpx.Response(200, text="not json")
        response = client.get("/api/movies", params={"search": "matrix"})

        assert response.status_code == 500
        assert response.json() == {"Response": "False", "Error": "Invalid JSON response from API"}

    def test_nan_body_gets_invalid_json_envelope(self, upstream):
        upstream["response"] = httpx.Response(200, text='{"Response":"True","x":NaN}')
        response = client.get("/api/movies", params={"search": "matrix"})

        assert response.status_code == 500
        assert response.json() == {"Response": "False", "Error": "Invalid JSON response from API"}

    def test_repeated_param_uses_first_value(self, upstream):
        client.get("/api/movies?imdbId=tt0000001&imdbId=tt0000002")
        assert sent_params(upstream) == {"apikey": "testkey", "i": "tt0000001"}

    def test_repeated_search_uses_first_value(self, upstream):
        client.get("/api/movies?search=heat&search=alien&page=2&page=5")
        assert sent_params(upstream) == {"apikey": "testkey", "s": "heat", "page": "2"}

class TestSimilarEndpoint:

    @pytest.fixture
    def catalog(self):
        search_results = {
            "Search": [
                {"Title": "The Matrix", "imdbID": "tt0133093", "Year": "1999", "Type": "movie"},
                {"Title": "Die Hard", "imdbID": "tt0095016", "Year": "1988", "Type": "movie"},
                {"Title": "Heat", "imdbID": "tt0113277", "Year": "1995", "Type": "movie"},
                {"Title": "Speed", "imdbID": "tt0111257", "Year": "1994", "Type": "movie"},
            ],
            "totalResults": "4",
            "Response": "True",
        }
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            if "i" in request.url.params:
                return httpx.Response(200, json=MATRIX)
            return httpx.Response(200, json=search_results)

        mock_client = OMDbClient(api_key="testkey", base_url="http://omdb.test/", transport=httpx.MockTransport(handler))
        app.dependency_overrides[get_omdb_client] = lambda: mock_client
        yield seen
        app.dependency_overrides.clear()

    def test_similar_excludes_self(self, catalog):
        response = client.get("/api/movies/tt0133093/similar")

        assert response.status_code == 200
        data = response.json()
        ids = [m["imdbID"] for m in data["Search"]]
        assert "tt0133093" not in ids
        assert ids == ["tt0095016", "tt0113277", "tt0111257"]
        assert data["totalResults"] == "3"
        assert catalog[1] == {"apikey": "testkey", "s": "Action", "page": "1"}

    def test_similar_limit(self, catalog):
        response = client.get("/api/movies/tt0133093/similar", params={"limit": 2})
        assert len(response.json()["Search"]) == 2

    def test_similar_limit_out_of_range(self, catalog):
        response = client.get("/api/movies/tt0133093/similar", params={"limit": 0})
        assert response.status_code == 422
