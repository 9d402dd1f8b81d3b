from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..config import InstallerConfig
from ..preflight import check_os

logger = logging.getLogger(__name__)


class CheckOSStep:
    step_id = "10_check_os"

    def __init__(self, system: Optional[str] = None) -> None:
        # Injected OS name for tests; None reads the real host.
        self.system = system

    def run(self, cfg: InstallerConfig) -> Dict[str, Any]:
        return {"system": check_os(self.system)}
