from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import InstallerConfig
from ..lib.console import ohai, say
from ..lib.package import install_agent

logger = logging.getLogger(__name__)


class InstallAgentStep:
    step_id = "40_install_agent"

    def run(self, cfg: InstallerConfig) -> Dict[str, Any]:
        ohai("Starting Workbrew installation... 🚀")
        say("⬇️  Downloading and installing the Workbrew agent package...")
        name = install_agent(cfg)
        ohai("✅ Workbrew installation is complete! 🎉")
        return {"package": name}
