"""Combat API endpoints"""
import logging
import random
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from core.config import CONFIG
from backend.dependencies import enforce_rate_limit, get_rng, get_store
from backend.documents import DocumentStore, Transaction, utc_now_iso
from backend.engine.combat import resolve_attack
from backend.models import Enemy, validate_enemy_id, validate_player_name
from backend.routers.enemies import enemy_path
from backend.routers.players import inventory_path, load_player, player_path
from backend.routers.progress import advance_global_progress

router = APIRouter(prefix="/api/combat", tags=["combat"])
logger = logging.getLogger(__name__)


@router.post("/attack")
async def attack(
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
    rng: random.Random = Depends(get_rng),
):
    """
    Resolve one attack of a player against a catalog enemy.

    On a win the player's xp and level, its inventory and the global progress
    counter are all written in the same transaction.
    """
    name = payload.get("player")
    enemy_id = payload.get("enemy")

    is_valid, error = validate_player_name(name)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error.replace("name", "player"))
    is_valid, error = validate_enemy_id(enemy_id)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    def fight(txn: Transaction):
        player = load_player(txn, name)
        enforce_rate_limit(name, "attack")
        enemy_doc = txn.get(enemy_path(enemy_id))
        if enemy_doc is None:
            raise HTTPException(status_code=404, detail="enemy_not_found")
        enemy = Enemy.from_doc(enemy_id, enemy_doc)

        outcome = resolve_attack(player, enemy, rng)
        progress = None
        if outcome.win:
            player.xp = outcome.xp
            player.level = outcome.level
            player.updated_at = utc_now_iso()
            txn.set(player_path(name), player.to_doc())
            for item, quantity in outcome.loot.items():
                txn.increment(f"{inventory_path(name)}/{item}", "quantity", quantity)
            progress, _ = advance_global_progress(txn, CONFIG["PROGRESS_PER_WIN"])
        return outcome, progress

    outcome, progress = store.run_transaction(fight)

    if outcome.leveled_up:
        logger.info(f"{name} reached level {outcome.level}")

    result = outcome.to_dict()
    result["player"] = name
    result["enemy"] = enemy_id
    result["global"] = progress.to_dict() if progress else None
    return result
