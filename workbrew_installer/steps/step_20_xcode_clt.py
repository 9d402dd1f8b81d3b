from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import InstallerConfig
from ..lib.console import ohai, say
from ..lib.xcode import ensure_clt

logger = logging.getLogger(__name__)


class XcodeCLTStep:
    step_id = "20_xcode_clt"

    def run(self, cfg: InstallerConfig) -> Dict[str, Any]:
        ohai("Checking for Xcode Command Line Tools... 🔍")
        installed = ensure_clt(
            cfg,
            on_missing=lambda: say("🛠️ Xcode Command Line Tools not found. Installing..."),
        )
        ohai("✅ Xcode Command Line Tools are installed!")
        return {"installed_label": installed}
