"""Global progress API endpoints"""
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Body, Depends, HTTPException

from core.game_logic import advance_progress
from backend.dependencies import get_store, require_admin
from backend.documents import DocumentStore, Transaction, utc_now_iso
from backend.models import GlobalProgress, GlobalProgressUpdate, is_int

router = APIRouter(prefix="/api/global", tags=["global"])
logger = logging.getLogger(__name__)

PROGRESS_PATH = "global/progress"


def advance_global_progress(txn: Transaction, amount: int) -> Tuple[GlobalProgress, int]:
    """Read-modify-write of the global record inside an open transaction"""
    progress = GlobalProgress.from_doc(txn.get(PROGRESS_PATH))
    current, goal, stage, stages_gained = advance_progress(
        progress.current, progress.goal, progress.stage, amount
    )
    progress = GlobalProgress(current=current, goal=goal, stage=stage, updated_at=utc_now_iso())
    txn.set(PROGRESS_PATH, progress.to_dict())
    if stages_gained:
        logger.info(f"Global progress reached stage {stage}")
    return progress, stages_gained


@router.get("")
async def get_global(store: DocumentStore = Depends(get_store)):
    """Current global progress (defaults when never written)"""
    return GlobalProgress.from_doc(store.get(PROGRESS_PATH)).to_dict()


@router.patch("", dependencies=[Depends(require_admin)])
async def patch_global(
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
):
    """Overwrite any of current, goal and stage (admin only)"""
    update = GlobalProgressUpdate(fields=payload)
    is_valid, error = update.validate()
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    def apply(txn: Transaction) -> GlobalProgress:
        progress = GlobalProgress.from_doc(txn.get(PROGRESS_PATH))
        for key, value in update.changes().items():
            setattr(progress, key, value)
        progress.updated_at = utc_now_iso()
        txn.set(PROGRESS_PATH, progress.to_dict())
        return progress

    progress = store.run_transaction(apply)
    logger.info(f"Global progress set by admin: {update.changes()}")
    return progress.to_dict()


@router.post("/increment")
async def increment_global(
    payload: Optional[Dict[str, Any]] = Body(None),
    store: DocumentStore = Depends(get_store),
):
    """Add to the global counter; stages advance as goals are met"""
    amount = (payload or {}).get("amount", 1)
    if not is_int(amount) or amount < 1:
        raise HTTPException(status_code=400, detail="invalid_amount")

    progress, stages_gained = store.run_transaction(
        lambda txn: advance_global_progress(txn, amount)
    )
    result = progress.to_dict()
    result["stages_gained"] = stages_gained
    return result
