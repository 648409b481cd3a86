"""
LinkWeaver utilities: run orchestration and logging setup.
"""

from .pipeline import (
    LinkagePipeline,
    LinkStageResult,
    ScaffoldStageResult,
    setup_logging,
)

__all__ = [
    "LinkagePipeline",
    "LinkStageResult",
    "ScaffoldStageResult",
    "setup_logging",
]
