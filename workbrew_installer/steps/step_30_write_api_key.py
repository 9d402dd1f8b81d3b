from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import InstallerConfig
from ..lib.api_key import write_api_key

logger = logging.getLogger(__name__)


class WriteAPIKeyStep:
    step_id = "30_write_api_key"

    def run(self, cfg: InstallerConfig) -> Dict[str, Any]:
        path = write_api_key(cfg)
        return {"api_key_path": str(path)}
