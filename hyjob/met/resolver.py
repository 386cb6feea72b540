"""Resolution of metFiles entries to existing meteorological file paths."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from hyjob.core.errors import MetFileNotFoundError
from hyjob.core.models import OutputFile

# Configure logging
logger = logging.getLogger(__name__)


def resolve_met_file(met_file: OutputFile, root: Optional[Union[str, Path]] = None) -> Path:
    """Resolve one met file entry to a path.

    Args:
        met_file: Directory and file name from the job's metFiles
        root: Base directory for relative met directories

    Returns:
        Path to the existing file

    Raises:
        MetFileNotFoundError: If no file exists at the resolved location
    """
    directory = Path(met_file.directory)
    if root is not None and not directory.is_absolute():
        directory = Path(root) / directory

    path = directory / met_file.file_name
    if not path.is_file():
        logger.warning(f"Meteorological file missing: {path}")
        raise MetFileNotFoundError(met_file.directory, met_file.file_name)

    logger.debug(f"Resolved meteorological file: {path}")
    return path


def resolve_met_files(
    met_files: Sequence[OutputFile],
    root: Optional[Union[str, Path]] = None
) -> List[Path]:
    """Resolve every met file entry, failing on the first missing one."""
    return [resolve_met_file(m, root) for m in met_files]
