"""Configuration API endpoints

Provides the game balance configuration for frontend consumption.
Supports ETag caching to minimize bandwidth and ensure config consistency.
"""
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
import hashlib
import json
from typing import Dict, Any
from core.config import CONFIG

router = APIRouter(prefix="/api/config", tags=["config"])

# Config version - increment this when making breaking changes to config structure
CONFIG_VERSION = "1.0.0"


def serialize_config() -> Dict[str, Any]:
    """
    Serialize game configuration for API consumption.

    Organizes config into logical sections for frontend consumption.
    """
    gameplay_config = {
        "version": CONFIG_VERSION,

        # Experience and levels
        "progression": {
            "xpPerLevel": CONFIG["XP_PER_LEVEL"],
            "levelCap": CONFIG["LEVEL_CAP"],
        },

        # Player power
        "power": {
            "base": CONFIG["BASE_POWER"],
            "perLevel": CONFIG["POWER_PER_LEVEL"],
            "perEquipmentItem": CONFIG["EQUIPMENT_POWER"],
        },

        # Combat resolution
        "combat": {
            "winChanceMin": CONFIG["WIN_CHANCE_MIN"],
            "winChanceMax": CONFIG["WIN_CHANCE_MAX"],
            "progressPerWin": CONFIG["PROGRESS_PER_WIN"],
        },

        # Shared progress
        "global": {
            "initialGoal": CONFIG["GLOBAL_GOAL"],
            "goalGrowth": CONFIG["GLOBAL_GOAL_GROWTH"],
        },
    }

    return gameplay_config


def calculate_etag(data: Dict[str, Any]) -> str:
    """Calculate ETag for config data using SHA256 hash"""
    # Serialize to stable JSON string (sorted keys)
    json_str = json.dumps(data, sort_keys=True)
    hash_obj = hashlib.sha256(json_str.encode('utf-8'))
    # Return first 16 characters of hex digest as ETag
    return f'"{hash_obj.hexdigest()[:16]}"'


# Cache serialized config and ETag (regenerated on server restart)
_cached_config = serialize_config()
_cached_etag = calculate_etag(_cached_config)


@router.get("/gameplay")
async def get_gameplay_config(request: Request):
    """
    Get gameplay configuration with ETag support.

    Supports conditional requests via If-None-Match header:
    - Client sends previous ETag
    - Server returns 304 Not Modified if unchanged
    - Client can cache config until ETag changes
    """
    client_etag = request.headers.get("If-None-Match")

    if client_etag and client_etag == _cached_etag:
        return Response(status_code=304, headers={"ETag": _cached_etag})

    return JSONResponse(
        content=_cached_config,
        headers={
            "ETag": _cached_etag,
            "Cache-Control": "public, max-age=300",  # Cache for 5 minutes
        }
    )


@router.get("/version")
async def get_config_version():
    """Current config version and ETag, for quick checks without the full config"""
    return {
        "version": CONFIG_VERSION,
        "etag": _cached_etag,
    }
