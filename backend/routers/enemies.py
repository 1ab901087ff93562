"""Enemy catalog API endpoints"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from backend.dependencies import get_store, require_admin
from backend.documents import DocumentStore, Transaction
from backend.models import Enemy, EnemyPayload, validate_enemy_id

router = APIRouter(prefix="/api/enemies", tags=["enemies"])
logger = logging.getLogger(__name__)


def enemy_path(enemy_id: str) -> str:
    return f"enemies/{enemy_id}"


def check_enemy_id(enemy_id: str) -> None:
    is_valid, error = validate_enemy_id(enemy_id)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)


@router.get("")
async def list_enemies(store: DocumentStore = Depends(get_store)):
    """Enemy catalog, weakest first"""
    docs = store.list("enemies", order_by=[("power", "asc"), ("id", "asc")])
    return [Enemy.from_doc(doc_id, doc).to_dict() for doc_id, doc in docs]


@router.get("/{enemy_id}")
async def get_enemy(enemy_id: str, store: DocumentStore = Depends(get_store)):
    check_enemy_id(enemy_id)
    doc = store.get(enemy_path(enemy_id))
    if doc is None:
        raise HTTPException(status_code=404, detail="enemy_not_found")
    return Enemy.from_doc(enemy_id, doc).to_dict()


@router.put("/{enemy_id}", dependencies=[Depends(require_admin)])
async def put_enemy(
    enemy_id: str,
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
):
    """Create or replace an enemy (admin only)"""
    request = EnemyPayload(enemy_id=enemy_id, payload=payload)
    is_valid, error = request.validate()
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    enemy = request.to_enemy()

    def replace(txn: Transaction) -> bool:
        created = txn.get(enemy_path(enemy_id)) is None
        txn.set(enemy_path(enemy_id), enemy.to_dict())
        return created

    created = store.run_transaction(replace)
    logger.info(f"Enemy {'created' if created else 'replaced'}: {enemy_id}")
    return JSONResponse(status_code=201 if created else 200, content=enemy.to_dict())


@router.delete("/{enemy_id}", dependencies=[Depends(require_admin)])
async def delete_enemy(enemy_id: str, store: DocumentStore = Depends(get_store)):
    """Remove an enemy from the catalog (admin only)"""
    check_enemy_id(enemy_id)
    if not store.delete(enemy_path(enemy_id)):
        raise HTTPException(status_code=404, detail="enemy_not_found")
    return {"status": "deleted", "id": enemy_id}
