"""Seed the store with the default enemy catalog"""
import logging
from typing import Any, Dict, List, Optional

from core.config import ENEMY_CATALOG
from backend.documents import DocumentStore
from backend.models import EnemyPayload

logger = logging.getLogger(__name__)


def seed_enemies(store: DocumentStore, catalog: Optional[List[Dict[str, Any]]] = None) -> int:
    """
    Write the default enemies in one batch when the collection is empty.

    Returns the number of enemies written.
    """
    if store.count("enemies") > 0:
        return 0

    catalog = ENEMY_CATALOG if catalog is None else catalog
    written = 0
    with store.batch() as batch:
        for entry in catalog:
            payload = EnemyPayload(enemy_id=entry.get("id", ""), payload=entry)
            is_valid, error = payload.validate()
            if not is_valid:
                logger.warning(f"Skipping catalog enemy {entry.get('id')!r}: {error}")
                continue
            enemy = payload.to_enemy()
            batch.set(f"enemies/{enemy.id}", enemy.to_dict())
            written += 1

    logger.info(f"Seeded {written} enemies")
    return written
