"""Data loader for JSON configuration files"""
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# Get data directory
DATA_DIR = Path(__file__).parent


def load_json_file(filename: str) -> Optional[Any]:
    """Load a JSON file from the data directory"""
    filepath = DATA_DIR / filename
    if not filepath.exists():
        logger.warning(f"Data file {filename} not found in {DATA_DIR}")
        return None

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Error loading {filename}: {e}")
        return None


def load_data() -> Dict[str, Any]:
    """
    Load all game data from JSON files.

    Returns a dictionary with keys:
    - progression: XP, power and global progress balance values
    - enemies: Default enemy catalog

    Falls back to empty values if files are missing.
    """
    data = {
        "progression": load_json_file("progression.json") or {},
        "enemies": load_json_file("enemies.json") or {},
    }

    return data
