"""
Workflow utilities for translating job descriptions.

1. Single jobs: validate and compose CONTROL, SETUP.CFG and EMITIMES
2. Batches: translate many independent jobs in parallel
"""

from hyjob.workflows.translate import (
    JobArtifacts,
    compose_artifacts,
    load_job,
    translate_job,
)
from hyjob.workflows.batch import translate_batch

__all__ = [
    # Single jobs
    "JobArtifacts",
    "compose_artifacts",
    "load_job",
    "translate_job",
    # Batch processing
    "translate_batch",
]
