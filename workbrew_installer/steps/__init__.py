from .step_10_check_os import CheckOSStep
from .step_20_xcode_clt import XcodeCLTStep
from .step_30_write_api_key import WriteAPIKeyStep
from .step_40_install_agent import InstallAgentStep

__all__ = [
    "CheckOSStep",
    "XcodeCLTStep",
    "WriteAPIKeyStep",
    "InstallAgentStep",
]
