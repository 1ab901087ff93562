"""Data models for the mmorpgapi backend"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple
import re
import uuid

from core.config import CONFIG
from core.game_logic import level_for_xp, xp_for_level, xp_to_next_level
from backend.documents import utc_now_iso

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
ENEMY_ID_PATTERN = re.compile(r"^[a-z0-9_-]+$")
QUEST_STATUSES = ("open", "active", "done")


def is_int(value: Any) -> bool:
    """True for real integers (JSON booleans excluded)"""
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_player_name(name: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate a player name used as document key"""
    if not name or not isinstance(name, str) or not name.strip():
        return False, "missing_name"
    if len(name) > CONFIG["MAX_NAME_LENGTH"] or not NAME_PATTERN.match(name):
        return False, "invalid_name"
    return True, None


def validate_enemy_id(enemy_id: Optional[str]) -> Tuple[bool, Optional[str]]:
    if not enemy_id or not isinstance(enemy_id, str):
        return False, "missing_enemy"
    if len(enemy_id) > CONFIG["MAX_NAME_LENGTH"] or not ENEMY_ID_PATTERN.match(enemy_id):
        return False, "invalid_enemy_id"
    return True, None


@dataclass
class GlobalProgress:
    """Shared progress counter all players contribute to"""
    current: int
    goal: int
    stage: int
    updated_at: Optional[str] = None

    @classmethod
    def from_doc(cls, doc: Optional[Dict[str, Any]]) -> 'GlobalProgress':
        """Create from a stored document; a missing document reads as defaults"""
        doc = doc or {}
        return cls(
            current=int(doc.get('current', 0)),
            goal=int(doc.get('goal', CONFIG["GLOBAL_GOAL"])),
            stage=int(doc.get('stage', 1)),
            updated_at=doc.get('updated_at'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current': self.current,
            'goal': self.goal,
            'stage': self.stage,
            'updated_at': self.updated_at,
        }


@dataclass
class GlobalProgressUpdate:
    """Admin update of the global progress record"""
    fields: Dict[str, Any]

    def validate(self) -> Tuple[bool, Optional[str]]:
        known = {k: v for k, v in self.fields.items() if k in ('current', 'goal', 'stage')}
        if not known:
            return False, "no_fields"
        for key, value in known.items():
            minimum = 0 if key == 'current' else 1
            if not is_int(value) or value < minimum:
                return False, f"invalid_{key}"
        return True, None

    def changes(self) -> Dict[str, int]:
        return {k: v for k, v in self.fields.items() if k in ('current', 'goal', 'stage')}


@dataclass
class Player:
    """Player roster entry, keyed by name"""
    name: str
    xp: int = 0
    level: int = 1
    power: Optional[int] = None
    equipment: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_doc(cls, name: str, doc: Dict[str, Any]) -> 'Player':
        xp = max(int(doc.get('xp', 0) or 0), 0)
        return cls(
            name=doc.get('name', name),
            xp=xp,
            level=level_for_xp(xp),
            power=doc.get('power'),
            equipment=list(doc.get('equipment') or []),
            created_at=doc.get('created_at'),
            updated_at=doc.get('updated_at'),
        )

    def to_doc(self) -> Dict[str, Any]:
        """Document form stored under players/{name}"""
        return {
            'name': self.name,
            'xp': self.xp,
            'level': self.level,
            'power': self.power,
            'equipment': self.equipment,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response"""
        result = self.to_doc()
        result['xp_to_next_level'] = xp_to_next_level(self.xp)
        return result


@dataclass
class PlayerUpdate:
    """Create-or-merge request for a player.

    Only keys present in the payload are applied; ``power: null`` clears a
    stored power so it is derived from level again.
    """
    fields: Dict[str, Any]

    def validate(self) -> Tuple[bool, Optional[str]]:
        if 'xp' in self.fields:
            xp = self.fields['xp']
            if not is_int(xp) or xp < 0:
                return False, "invalid_xp"
        if 'level' in self.fields:
            level = self.fields['level']
            if not is_int(level) or level < 1 or level > CONFIG["LEVEL_CAP"]:
                return False, "invalid_level"
        if 'power' in self.fields:
            power = self.fields['power']
            if power is not None and (not is_int(power) or power < 1):
                return False, "invalid_power"
        if 'equipment' in self.fields:
            equipment = self.fields['equipment']
            if not isinstance(equipment, list) or len(equipment) > CONFIG["MAX_EQUIPMENT_ITEMS"]:
                return False, "invalid_equipment"
            if not all(isinstance(item, str) and item.strip() for item in equipment):
                return False, "invalid_equipment"
        return True, None

    def apply(self, player: Player) -> Player:
        """Apply to a player; level is always re-derived from xp"""
        xp = player.xp
        if 'xp' in self.fields:
            xp = self.fields['xp']
        if 'level' in self.fields:
            xp = max(xp, xp_for_level(self.fields['level']))
        player.xp = xp
        player.level = level_for_xp(xp)
        if 'power' in self.fields:
            player.power = self.fields['power']
        if 'equipment' in self.fields:
            player.equipment = [item.strip() for item in self.fields['equipment']]
        player.updated_at = utc_now_iso()
        if player.created_at is None:
            player.created_at = player.updated_at
        return player


@dataclass
class Quest:
    """Quest list entry"""
    id: str
    title: str
    status: str = "open"
    player: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    completed_at: Optional[str] = None

    @classmethod
    def create(cls, title: str, player: Optional[str] = None, status: str = "open") -> 'Quest':
        """Create new quest with generated ID"""
        now = utc_now_iso()
        return cls(
            id=str(uuid.uuid4()),
            title=title.strip(),
            status=status,
            player=player,
            created_at=now,
            updated_at=now,
            completed_at=now if status == "done" else None,
        )

    @classmethod
    def from_doc(cls, quest_id: str, doc: Dict[str, Any]) -> 'Quest':
        return cls(
            id=doc.get('id', quest_id),
            title=doc.get('title', ''),
            status=doc.get('status', 'open'),
            player=doc.get('player'),
            created_at=doc.get('created_at'),
            updated_at=doc.get('updated_at'),
            completed_at=doc.get('completed_at'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'status': self.status,
            'player': self.player,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'completed_at': self.completed_at,
        }


def _validate_title(title: Any) -> Tuple[bool, Optional[str]]:
    if title is None:
        return False, "missing_title"
    if not isinstance(title, str):
        return False, "invalid_title"
    if not title.strip():
        return False, "missing_title"
    if len(title.strip()) > CONFIG["MAX_TITLE_LENGTH"]:
        return False, "invalid_title"
    return True, None


@dataclass
class QuestCreate:
    """Quest creation request"""
    title: Any = None
    status: Any = "open"
    player: Any = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'QuestCreate':
        return cls(
            title=payload.get('title'),
            status=payload.get('status', 'open'),
            player=payload.get('player'),
        )

    def validate(self) -> Tuple[bool, Optional[str]]:
        is_valid, error = _validate_title(self.title)
        if not is_valid:
            return is_valid, error
        if self.status not in QUEST_STATUSES:
            return False, "invalid_status"
        if self.player is not None:
            is_valid, error = validate_player_name(self.player)
            if not is_valid:
                return False, "invalid_player"
        return True, None


@dataclass
class QuestUpdate:
    """Quest patch request (title and/or status)"""
    fields: Dict[str, Any]

    def validate(self) -> Tuple[bool, Optional[str]]:
        if 'title' not in self.fields and 'status' not in self.fields:
            return False, "no_fields"
        if 'title' in self.fields:
            is_valid, error = _validate_title(self.fields['title'])
            if not is_valid:
                return False, "invalid_title"
        if 'status' in self.fields and self.fields['status'] not in QUEST_STATUSES:
            return False, "invalid_status"
        return True, None

    def apply(self, quest: Quest) -> Quest:
        now = utc_now_iso()
        if 'title' in self.fields:
            quest.title = self.fields['title'].strip()
        if 'status' in self.fields:
            new_status = self.fields['status']
            if new_status == "done" and quest.status != "done":
                quest.completed_at = now
            elif new_status != "done":
                quest.completed_at = None
            quest.status = new_status
        quest.updated_at = now
        return quest


@dataclass
class LootEntry:
    """One independent drop in an enemy's loot table"""
    item: str
    chance: float
    quantity: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {'item': self.item, 'chance': self.chance, 'quantity': self.quantity}


@dataclass
class Enemy:
    """Enemy catalog entry"""
    id: str
    name: str
    power: int
    hp: int
    xp_reward: int
    loot: List[LootEntry] = field(default_factory=list)

    @classmethod
    def from_doc(cls, enemy_id: str, doc: Dict[str, Any]) -> 'Enemy':
        return cls(
            id=doc.get('id', enemy_id),
            name=doc.get('name', enemy_id),
            power=int(doc['power']),
            hp=int(doc['hp']),
            xp_reward=int(doc.get('xp_reward', 0)),
            loot=[
                LootEntry(
                    item=entry['item'],
                    chance=float(entry['chance']),
                    quantity=int(entry.get('quantity', 1)),
                )
                for entry in doc.get('loot') or []
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'power': self.power,
            'hp': self.hp,
            'xp_reward': self.xp_reward,
            'loot': [entry.to_dict() for entry in self.loot],
        }


@dataclass
class EnemyPayload:
    """Create-or-replace request for an enemy"""
    enemy_id: str
    payload: Dict[str, Any]

    def validate(self) -> Tuple[bool, Optional[str]]:
        is_valid, error = validate_enemy_id(self.enemy_id)
        if not is_valid:
            return is_valid, error

        name = self.payload.get('name', self.enemy_id)
        if not isinstance(name, str) or not name.strip() or len(name) > CONFIG["MAX_TITLE_LENGTH"]:
            return False, "invalid_name"

        for key in ('power', 'hp'):
            if key not in self.payload:
                return False, f"missing_{key}"
            value = self.payload[key]
            if not is_int(value) or value < 1:
                return False, f"invalid_{key}"

        xp_reward = self.payload.get('xp_reward', 0)
        if not is_int(xp_reward) or xp_reward < 0:
            return False, "invalid_xp_reward"

        loot = self.payload.get('loot', [])
        if not isinstance(loot, list) or len(loot) > CONFIG["MAX_LOOT_ENTRIES"]:
            return False, "invalid_loot"
        for entry in loot:
            if not isinstance(entry, dict):
                return False, "invalid_loot"
            item = entry.get('item')
            chance = entry.get('chance')
            quantity = entry.get('quantity', 1)
            if not isinstance(item, str) or not NAME_PATTERN.match(item.strip()):
                return False, "invalid_loot"
            if not is_number(chance) or chance < 0 or chance > 1:
                return False, "invalid_loot"
            if not is_int(quantity) or quantity < 1:
                return False, "invalid_loot"
        return True, None

    def to_enemy(self) -> Enemy:
        return Enemy.from_doc(self.enemy_id, {
            'id': self.enemy_id,
            'name': self.payload.get('name', self.enemy_id).strip(),
            'power': self.payload['power'],
            'hp': self.payload['hp'],
            'xp_reward': self.payload.get('xp_reward', 0),
            'loot': [
                {
                    'item': entry['item'].strip(),
                    'chance': entry['chance'],
                    'quantity': entry.get('quantity', 1),
                }
                for entry in self.payload.get('loot', [])
            ],
        })
