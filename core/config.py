# -*- coding: utf-8 -*-
"""
Runtime configuration.

Defaults live on AppConfig; a YAML file may override any field by name.
Lookup order for the file: explicit path > $FOCUSLOG_CONFIG > <data dir>/config.yaml
"""
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from domain.errors import ConfigError

PROJECT_ROOT = Path(__file__).parent.parent


def get_data_dir() -> Path:
    raw = os.getenv("FOCUSLOG_DATA_DIR", "").strip()
    if raw:
        return Path(raw).expanduser()
    return PROJECT_ROOT / "data"


@dataclass
class AppConfig:
    # timer (minutes)
    focus_minutes: int = 25
    break_minutes: int = 5

    # session pairing
    pairing_window_sec: int = 300
    # "break_start": compare break start (timestamp - duration) to focus timestamp
    # "timestamp": compare raw completion timestamps
    pairing_anchor: str = "break_start"

    # standing goal defaults (minutes)
    daily_goal_minutes: int = 120
    weekly_goal_minutes: int = 600

    # views
    recent_limit: int = 10
    history_page_size: int = 10

    # storage / logs
    db_path: str = ""
    log_dir: str = ""

    # audio cues, empty = no sound
    focus_cue_path: str = ""
    break_cue_path: str = ""

    # seconds between checks for writes from other processes
    feed_poll_sec: int = 5

    def __post_init__(self):
        data_dir = get_data_dir()
        if not self.db_path:
            self.db_path = str(data_dir / "focuslog.db")
        if not self.log_dir:
            self.log_dir = str(data_dir / "logs")


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        raise ConfigError(f"Cannot read config: {e}", config_path=str(path))
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping.", config_path=str(path))
    return data


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Build an AppConfig from defaults plus YAML overrides.

    An explicit path (argument or $FOCUSLOG_CONFIG) must be readable;
    the implicit data-dir file is optional and skipped when broken.
    """
    explicit = path or os.getenv("FOCUSLOG_CONFIG", "").strip() or None
    overrides: dict = {}
    if explicit:
        overrides = _read_yaml(Path(explicit).expanduser())
    else:
        implicit = get_data_dir() / "config.yaml"
        if implicit.exists():
            try:
                overrides = _read_yaml(implicit)
            except ConfigError:
                overrides = {}

    known = {f.name for f in fields(AppConfig)}
    kwargs = {k: v for k, v in overrides.items() if k in known and v is not None}
    return AppConfig(**kwargs)
