# -*- coding: utf-8 -*-

import os
import shutil
import subprocess
from typing import Dict, Optional

from core.logger import get_logger
from domain.models import BREAK, FOCUS

logger = get_logger("services.audio")

PLAYERS = ("paplay", "aplay", "afplay")


class AudioCue:
    """
    Fire-and-forget sound on interval completion.
    Any failure is logged at debug level and otherwise ignored.
    """

    def __init__(self, focus_path: str = "", break_path: str = ""):
        self.paths: Dict[str, str] = {FOCUS: focus_path, BREAK: break_path}
        self._player: Optional[str] = None
        for name in PLAYERS:
            found = shutil.which(name)
            if found:
                self._player = found
                break

    def play(self, kind: str) -> bool:
        path = self.paths.get(kind) or ""
        if not path or self._player is None:
            return False
        try:
            if not os.path.exists(path):
                logger.debug("Cue file missing: %s", path)
                return False
            subprocess.Popen(
                [self._player, path],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            return True
        except (OSError, ValueError) as e:
            logger.debug("Cue for %s failed: %s", kind, e)
            return False
