"""Player roster API endpoints"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from core.game_logic import apply_xp, xp_to_next_level
from backend.dependencies import enforce_rate_limit, get_store, require_admin
from backend.documents import DocumentStore, Transaction, utc_now_iso
from backend.models import Player, PlayerUpdate, is_int, validate_player_name

router = APIRouter(prefix="/api/players", tags=["players"])
logger = logging.getLogger(__name__)


def player_path(name: str) -> str:
    return f"players/{name}"


def inventory_path(name: str) -> str:
    return f"players/{name}/inventory"


def check_name(name: str) -> None:
    """Raise 400 for names that cannot be used as a document key"""
    is_valid, error = validate_player_name(name)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)


def load_player(txn: Transaction, name: str) -> Player:
    """Read a player inside a transaction, 404 when missing"""
    doc = txn.get(player_path(name))
    if doc is None:
        raise HTTPException(status_code=404, detail="player_not_found")
    return Player.from_doc(name, doc)


@router.get("")
async def list_players(
    limit: int = 100,
    offset: int = 0,
    store: DocumentStore = Depends(get_store),
):
    """List players ordered by name"""
    if limit > 1000:
        limit = 1000
    if limit < 1:
        limit = 100
    if offset < 0:
        offset = 0

    docs = store.list("players", order_by=[("name", "asc")], limit=limit, offset=offset)
    return [Player.from_doc(doc_id, doc).to_dict() for doc_id, doc in docs]


@router.get("/{name}")
async def get_player(name: str, store: DocumentStore = Depends(get_store)):
    check_name(name)
    doc = store.get(player_path(name))
    if doc is None:
        raise HTTPException(status_code=404, detail="player_not_found")
    return Player.from_doc(name, doc).to_dict()


@router.put("/{name}")
async def put_player(
    name: str,
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
):
    """
    Create a player or merge fields into an existing one.

    Accepts xp, level, power and equipment. Level is always derived from xp;
    a requested level raises xp to that level's threshold.
    Returns 201 on creation, 200 on update.
    """
    check_name(name)
    update = PlayerUpdate(fields=payload)
    is_valid, error = update.validate()
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    def upsert(txn: Transaction):
        doc = txn.get(player_path(name))
        created = doc is None
        player = Player(name=name) if created else Player.from_doc(name, doc)
        update.apply(player)
        txn.set(player_path(name), player.to_doc())
        return created, player

    created, player = store.run_transaction(upsert)
    if created:
        logger.info(f"Player created: {name}")
    return JSONResponse(status_code=201 if created else 200, content=player.to_dict())


@router.delete("/{name}", dependencies=[Depends(require_admin)])
async def delete_player(name: str, store: DocumentStore = Depends(get_store)):
    """Delete a player and its inventory (admin only)"""
    check_name(name)
    if store.get(player_path(name)) is None:
        raise HTTPException(status_code=404, detail="player_not_found")

    with store.batch() as batch:
        batch.delete(player_path(name))
        batch.delete_collection(inventory_path(name))

    logger.info(f"Player deleted: {name}")
    return {"status": "deleted", "name": name}


@router.post("/{name}/xp")
async def award_xp(
    name: str,
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
):
    """Award experience to a player and report level-ups"""
    check_name(name)
    if "amount" not in payload:
        raise HTTPException(status_code=400, detail="missing_amount")
    amount = payload["amount"]
    if not is_int(amount) or amount < 1:
        raise HTTPException(status_code=400, detail="invalid_amount")

    def award(txn: Transaction):
        player = load_player(txn, name)
        enforce_rate_limit(name, "award_xp")
        player.xp, player.level, levels_gained = apply_xp(player.xp, amount)
        player.updated_at = utc_now_iso()
        txn.set(player_path(name), player.to_doc())
        return player, levels_gained

    player, levels_gained = store.run_transaction(award)
    return {
        "name": player.name,
        "xp": player.xp,
        "level": player.level,
        "levels_gained": levels_gained,
        "xp_to_next_level": xp_to_next_level(player.xp),
    }


@router.get("/{name}/inventory")
async def get_inventory(name: str, store: DocumentStore = Depends(get_store)):
    """Item quantities collected by a player"""
    check_name(name)
    if store.get(player_path(name)) is None:
        raise HTTPException(status_code=404, detail="player_not_found")

    items = store.list(inventory_path(name))
    return {item: int(doc.get("quantity", 0)) for item, doc in items}
