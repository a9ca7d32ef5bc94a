"""
FastAPI backend for the moviescope front end.
Relays movie search and detail lookups to OMDb.
"""
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Dict, Optional
import logging

# Initialize Logging EARLY to capture import errors
from moviescope.logger import setup_logging
setup_logging()
logger = logging.getLogger(__name__)

try:
    from moviescope.config import config, VALID_KEYS
    from moviescope.api_clients.omdb import OMDbClient, omdb_client
    from moviescope.query import from_request_params
    from moviescope.relay import relay, RelayResult
    from moviescope.similar import find_similar
    from moviescope import browse
except Exception as e:
    logger.critical(f"Startup Failure: {e}", exc_info=True)
    raise e

config.validate()

app = FastAPI(title="moviescope API", version="0.1.0")

# Only allow credentials when origins are listed explicitly
cors_origins = config.CORS_ALLOW_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins or ["*"],
    allow_credentials=bool(cors_origins),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# ============== Models ==============

class ConfigUpdate(BaseModel):
    key: str
    value: str

# ============== Dependencies ==============

def get_omdb_client() -> OMDbClient:
    return omdb_client

def _first_values(request: Request) -> Dict[str, str]:
    """Query params with the first value winning for repeated keys, like URLSearchParams.get."""
    params: Dict[str, str] = {}
    for key, value in request.query_params.multi_items():
        params.setdefault(key, value)
    return params

def _respond(result: RelayResult) -> JSONResponse:
    return JSONResponse(content=result.payload, status_code=result.status_code)

# ============== Movies ==============

@app.get("/api/movies")
async def movies(request: Request, client: OMDbClient = Depends(get_omdb_client)):
    """
    Search or look up movies. Accepts imdbId, title, search, year, genre, type and page.
    """
    query = from_request_params(_first_values(request), default_term=config.DEFAULT_SEARCH_TERM)
    logger.debug(f"/api/movies resolved to {query.mode.value} mode")
    return _respond(await relay(query, client))

@app.get("/api/movies/{imdb_id}/similar")
async def similar_movies(
    imdb_id: str,
    limit: Optional[int] = Query(None, ge=1, le=10),
    client: OMDbClient = Depends(get_omdb_client),
):
    result = await find_similar(imdb_id, client, limit=limit or config.SIMILAR_LIMIT)
    return _respond(result)

# ============== Browse ==============

@app.get("/api/browse/trending")
async def browse_trending(limit: int = Query(browse.BROWSE_LIMIT, ge=1, le=10), client: OMDbClient = Depends(get_omdb_client)):
    return _respond(await browse.trending(client, limit=limit))

@app.get("/api/browse/top-rated")
async def browse_top_rated(limit: int = Query(browse.BROWSE_LIMIT, ge=1, le=10), client: OMDbClient = Depends(get_omdb_client)):
    return _respond(await browse.top_rated(client, limit=limit))

@app.get("/api/browse/genre/{genre}")
async def browse_genre(genre: str, limit: int = Query(browse.BROWSE_LIMIT, ge=1, le=10), client: OMDbClient = Depends(get_omdb_client)):
    return _respond(await browse.by_genre(genre, client, limit=limit))

@app.get("/api/browse/decades")
def browse_decades():
    return [
        {"name": name, "start": start, "end": end, "year": (start + end) // 2}
        for name, start, end in browse.decades()
    ]

@app.get("/api/browse/decade/{decade}")
async def browse_decade(decade: str, limit: int = Query(browse.BROWSE_LIMIT, ge=1, le=10), client: OMDbClient = Depends(get_omdb_client)):
    return _respond(await browse.by_decade(decade, client, limit=limit))

# ============== Health ==============

@app.get("/")
def root():
    return {"status": "ok", "service": "moviescope"}

@app.get("/health")
def health():
    return {"status": "healthy"}

# ============== Config ==============

@app.get("/config")
async def get_config(reveal_keys: bool = False):
    """
    Get current configuration.
    """
    try:
        logger.info(f"GET /config request received. reveal_keys={reveal_keys}")

        # Force reload from disk
        config._load_from_file()

        cfg = {
            "OMDB_API_KEY": config.OMDB_API_KEY,
            "OMDB_BASE_URL": config.OMDB_BASE_URL,
            "DEFAULT_SEARCH_TERM": config.DEFAULT_SEARCH_TERM,
            "SIMILAR_LIMIT": config.SIMILAR_LIMIT,
            "CORS_ALLOW_ORIGINS": ",".join(config.CORS_ALLOW_ORIGINS),
        }

        # Mask key if needed
        if not reveal_keys and cfg["OMDB_API_KEY"]:
            key = cfg["OMDB_API_KEY"]
            if len(key) > 4:
                cfg["OMDB_API_KEY"] = "***" + key[-4:]
            else:
                cfg["OMDB_API_KEY"] = "***"

        return cfg
    except Exception as e:
        logger.error(f"GET /config failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

@app.post("/config")
async def update_config(update: ConfigUpdate):
    """
    Update a single configuration key.
    """
    if update.key not in VALID_KEYS:
        raise HTTPException(status_code=400, detail=f"Invalid config key: {update.key}")

    try:
        config.save(update.key, update.value)
    except OSError as e:
        logger.error(f"Failed to update config: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    shown = "***" if update.key == "OMDB_API_KEY" else update.value
    logger.info(f"Config updated: {update.key} = {shown}")
    return {"success": True}

# ============== Run Server ==============

def start_server(host: str = "127.0.0.1", port: int = 8742):
    """Start the API server."""
    import uvicorn

    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="warning")

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="moviescope API Server")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind to")
    parser.add_argument("--port", type=int, default=8742, help="Port to bind to")
    args, unknown = parser.parse_known_args()

    start_server(args.host, args.port)
