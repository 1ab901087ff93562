"""Leaderboard API endpoints"""
from fastapi import APIRouter, Depends

from backend.dependencies import get_store
from backend.documents import DocumentStore
from backend.models import Player

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("")
async def get_leaderboard(
    limit: int = 10,
    store: DocumentStore = Depends(get_store),
):
    """
    Retrieve the top players.

    Sorted by level (descending), then xp (descending), then name.
    """
    if limit > 100:
        limit = 100  # Cap at 100
    if limit < 1:
        limit = 10

    docs = store.list(
        "players",
        order_by=[("level", "desc"), ("xp", "desc"), ("name", "asc")],
        limit=limit,
    )

    entries = []
    for rank, (doc_id, doc) in enumerate(docs, start=1):
        player = Player.from_doc(doc_id, doc)
        entries.append({
            "rank": rank,
            "name": player.name,
            "level": player.level,
            "xp": player.xp,
        })
    return entries


@router.get("/stats")
async def get_leaderboard_stats(store: DocumentStore = Depends(get_store)):
    """Roster statistics (total players, highest level and xp)"""
    players = [Player.from_doc(doc_id, doc) for doc_id, doc in store.list("players")]
    return {
        "total_players": len(players),
        "max_level": max((p.level for p in players), default=0),
        "max_xp": max((p.xp for p in players), default=0),
    }
