"""Quest list API endpoints"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from backend.dependencies import get_store, require_admin
from backend.documents import DocumentNotFound, DocumentStore, Transaction
from backend.models import QUEST_STATUSES, Quest, QuestCreate, QuestUpdate

router = APIRouter(prefix="/api/quests", tags=["quests"])
logger = logging.getLogger(__name__)


def quest_path(quest_id: str) -> str:
    return f"quests/{quest_id}"


def check_quest_id(quest_id: str) -> None:
    # Quest ids are uuid4 strings; anything containing a slash is no document key
    if not quest_id or "/" in quest_id or len(quest_id) > 64:
        raise HTTPException(status_code=404, detail="quest_not_found")


@router.get("")
async def list_quests(
    status: Optional[str] = None,
    player: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
):
    """List quests in creation order, optionally filtered by status and player"""
    if status is not None and status not in QUEST_STATUSES:
        raise HTTPException(status_code=400, detail="invalid_status")

    where = {}
    if status is not None:
        where["status"] = status
    if player is not None:
        where["player"] = player

    docs = store.list("quests", where=where, order_by=[("created_at", "asc")])
    return [Quest.from_doc(doc_id, doc).to_dict() for doc_id, doc in docs]


@router.post("", status_code=201)
async def create_quest(
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
):
    """Create a quest and return it"""
    request = QuestCreate.from_payload(payload)
    is_valid, error = request.validate()
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    quest = Quest.create(request.title, player=request.player, status=request.status)
    store.set(quest_path(quest.id), quest.to_dict())
    logger.info(f"Quest created: {quest.id}")
    return quest.to_dict()


@router.get("/{quest_id}")
async def get_quest(quest_id: str, store: DocumentStore = Depends(get_store)):
    check_quest_id(quest_id)
    doc = store.get(quest_path(quest_id))
    if doc is None:
        raise HTTPException(status_code=404, detail="quest_not_found")
    return Quest.from_doc(quest_id, doc).to_dict()


@router.patch("/{quest_id}")
async def patch_quest(
    quest_id: str,
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
):
    """Change a quest's title and/or status"""
    check_quest_id(quest_id)
    update = QuestUpdate(fields=payload)
    is_valid, error = update.validate()
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    def apply(txn: Transaction) -> Quest:
        doc = txn.get(quest_path(quest_id))
        if doc is None:
            raise DocumentNotFound(quest_path(quest_id))
        quest = update.apply(Quest.from_doc(quest_id, doc))
        txn.set(quest_path(quest_id), quest.to_dict())
        return quest

    try:
        quest = store.run_transaction(apply)
    except DocumentNotFound:
        raise HTTPException(status_code=404, detail="quest_not_found")
    return quest.to_dict()


@router.delete("/{quest_id}", dependencies=[Depends(require_admin)])
async def delete_quest(quest_id: str, store: DocumentStore = Depends(get_store)):
    """Delete a quest (admin only)"""
    check_quest_id(quest_id)
    if not store.delete(quest_path(quest_id)):
        raise HTTPException(status_code=404, detail="quest_not_found")
    return {"status": "deleted", "id": quest_id}
