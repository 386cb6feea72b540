"""
Translation of job descriptions into HYSPLIT input artifacts.

Usage:
    from hyjob.workflows import load_job, translate_job

    payload = load_job("jobs/dubai_conc_fwd.json")
    artifacts = translate_job(payload, met_root="/shared/met_data")

    # Write CONTROL, SETUP.CFG (and EMITIMES) to simulationMeta.outputFile.directory
    artifacts.to_directory()
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from hyjob.core.config import DEFAULTS, PhysicsDefaults, SetupConfigComposer
from hyjob.core.models import Job
from hyjob.core.modes import Mode
from hyjob.core.validator import ConfigValidator
from hyjob.io.control import ControlFileComposer
from hyjob.io.emitimes import EmitimesComposer
from hyjob.met.resolver import resolve_met_files

logger = logging.getLogger(__name__)

CONTROL_SUFFIX = "CONTROL"
SETUP_SUFFIX = "SETUP.CFG"


def load_job(job_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a job description from a JSON file.

    Args:
        job_path: Path to the job JSON file

    Returns:
        Job description dictionary
    """
    job_path = Path(job_path)
    with open(job_path, "r") as f:
        return json.load(f)


@dataclass(frozen=True)
class JobArtifacts:
    """Text artifacts produced for one validated job."""

    job: Job
    control: str
    setup: str
    emitimes: Optional[str] = None

    @property
    def mode(self) -> Mode:
        return self.job.mode

    def file_names(self) -> Dict[str, str]:
        """Map each artifact kind to its file name, relative to the output directory."""
        base = self.job.simulation_meta.output_file.file_name
        names = {
            "control": f"{base}.{CONTROL_SUFFIX}",
            "setup": f"{base}.{SETUP_SUFFIX}",
        }
        if self.emitimes is not None:
            names["emitimes"] = self.job.physics_config.emitimes_file_path
        return names

    def to_directory(self, directory: Optional[Union[str, Path]] = None) -> Dict[str, Path]:
        """Write the artifacts to directory (default: simulationMeta.outputFile.directory).

        Returns:
            Mapping of artifact kind to written path
        """
        directory = Path(directory or self.job.simulation_meta.output_file.directory)
        directory.mkdir(parents=True, exist_ok=True)

        texts = {"control": self.control, "setup": self.setup, "emitimes": self.emitimes}
        written = {}
        for kind, name in self.file_names().items():
            filepath = directory / name
            filepath.parent.mkdir(parents=True, exist_ok=True)
            with open(filepath, "w") as f:
                f.write(texts[kind])
            written[kind] = filepath

        logger.info(f"Wrote {len(written)} artifacts to {directory}")
        return written


def compose_artifacts(job: Job, defaults: PhysicsDefaults = DEFAULTS) -> JobArtifacts:
    """Compose the text artifacts of an already validated job."""
    emitimes = None
    if job.mode is Mode.CONC_FWD:
        emitimes = EmitimesComposer().compose(job)

    return JobArtifacts(
        job=job,
        control=ControlFileComposer(defaults).compose(job),
        setup=SetupConfigComposer(defaults).compose(job),
        emitimes=emitimes,
    )


def translate_job(
    payload: Mapping[str, Any],
    defaults: PhysicsDefaults = DEFAULTS,
    met_root: Optional[Union[str, Path]] = None,
    check_met_files: bool = False
) -> JobArtifacts:
    """
    Validate a job description and compose its HYSPLIT input artifacts.

    Args:
        payload: Job description dictionary
        defaults: Physics defaults for absent physicsConfig keys
        met_root: Base directory for relative met file directories
        check_met_files: Resolve every met file before composing; implied
            when met_root is given

    Returns:
        JobArtifacts holding CONTROL, SETUP.CFG and (ConcFwd) EMITIMES text

    Raises:
        MalformedJobError: If the payload is structurally invalid
        JobValidationError: If the job fails validation
        MetFileNotFoundError: If a met file cannot be resolved
    """
    job = ConfigValidator().validate(payload)

    if check_met_files or met_root is not None:
        paths = resolve_met_files(job.met_files, root=met_root)
        logger.debug(f"Resolved {len(paths)} meteorological files")

    artifacts = compose_artifacts(job, defaults)
    logger.info(f"Translated job {job.job_id} ({job.mode})")
    return artifacts
