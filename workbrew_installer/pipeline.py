from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence

from .config import InstallerConfig

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single installer step.

    Steps receive the configuration explicitly and return a small dict of
    facts worth reporting (or an empty dict).
    """

    step_id: str

    def run(self, cfg: InstallerConfig) -> Dict[str, Any]:
        ...


@dataclass
class PipelineResult:
    ran_steps: List[str] = field(default_factory=list)
    facts: Dict[str, Dict[str, Any]] = field(default_factory=dict)


def run_pipeline(*, cfg: InstallerConfig, steps: Sequence[Step]) -> PipelineResult:
    """Run steps in order. The first failure propagates and stops the run."""

    result = PipelineResult()
    for step in steps:
        logger.info("Running step %s", step.step_id)
        try:
            facts = step.run(cfg) or {}
        except Exception:
            logger.error("Step %s failed", step.step_id)
            raise
        result.ran_steps.append(step.step_id)
        result.facts[step.step_id] = facts
        logger.info("Step %s done %s", step.step_id, facts)
    return result
