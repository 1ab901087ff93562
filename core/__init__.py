"""Core game logic and configuration for mmorpgapi"""
from .config import CONFIG, ENEMY_CATALOG, SERVICE_NAME

__all__ = [
    'CONFIG', 'ENEMY_CATALOG', 'SERVICE_NAME',
]
