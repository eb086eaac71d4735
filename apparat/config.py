"""
User configuration persistence.

Settings (default seed, log level, NPC activity) live in a dotfile beside
the world saves, so each saves directory carries its own preferences.
"""

import json
from pathlib import Path
from typing import TypedDict


class Config(TypedDict, total=False):
    """User configuration."""
    worlds_dir: str  # Where saves live
    seed: int | None  # Default seed for new worlds; None = random
    log_level: str  # DEBUG, INFO, WARNING, ...
    npc_activity: float  # Multiplier on NPC per-turn action chances
    show_events: bool  # Print bus events after each command


DEFAULT_CONFIG: Config = {
    "worlds_dir": "worlds",
    "seed": None,
    "log_level": "WARNING",
    "npc_activity": 1.0,
    "show_events": False,
}

CONFIG_FILENAME = ".apparat_config.json"


def get_config_path(worlds_dir: Path | str = "worlds") -> Path:
    return Path(worlds_dir) / CONFIG_FILENAME


def load_config(worlds_dir: Path | str = "worlds") -> Config:
    """
    Saved settings layered over the defaults.

    A missing or unreadable file gives the defaults; unknown keys are ignored.
    """
    config = DEFAULT_CONFIG.copy()
    try:
        saved = json.loads(get_config_path(worlds_dir).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return config

    if isinstance(saved, dict):
        config.update({k: v for k, v in saved.items() if k in DEFAULT_CONFIG})
    return config


def save_config(config: Config, worlds_dir: Path | str = "worlds") -> bool:
    """Write config to disk. Returns False if the file could not be written."""
    path = get_config_path(worlds_dir)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    except OSError:
        return False
    return True


def update_config(worlds_dir: Path | str = "worlds", **changes) -> Config:
    """Load, apply changes, save. Returns the updated config."""
    config = load_config(worlds_dir)
    config.update(changes)
    save_config(config, worlds_dir)
    return config


def set_seed(seed: int | None, worlds_dir: Path | str = "worlds") -> None:
    update_config(worlds_dir, seed=seed)


def set_log_level(level: str, worlds_dir: Path | str = "worlds") -> None:
    update_config(worlds_dir, log_level=level.upper())


def set_npc_activity(activity: float, worlds_dir: Path | str = "worlds") -> None:
    """Negative activity is stored as 0 (NPCs never act)."""
    update_config(worlds_dir, npc_activity=max(0.0, activity))
