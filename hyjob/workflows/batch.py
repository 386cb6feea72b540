"""
Parallel translation of many job descriptions.

Each job is translated independently in its own worker; nothing is
shared between jobs.

Usage:
    from hyjob.workflows import translate_batch

    summary = translate_batch(payloads, n_workers=4)
    print(summary[~summary["success"]])
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from hyjob.core.errors import HyjobError, JobValidationError
from hyjob.workflows.translate import translate_job

logger = logging.getLogger(__name__)


def _translate_single(index: int, payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Worker function to translate a single job."""
    try:
        artifacts = translate_job(payload)
        return {
            "index": index,
            "job_id": payload.get("jobId"),
            "success": True,
            "mode": str(artifacts.mode),
            "n_errors": 0,
            "error": None,
            "artifacts": artifacts,
        }

    except JobValidationError as e:
        return {
            "index": index,
            "job_id": payload.get("jobId"),
            "success": False,
            "mode": str(e.report.mode) if e.report.mode else None,
            "n_errors": len(e.report.errors),
            "error": e.report.summary(),
            "artifacts": None,
        }

    except HyjobError as e:
        return {
            "index": index,
            "job_id": payload.get("jobId") if isinstance(payload, Mapping) else None,
            "success": False,
            "mode": None,
            "n_errors": 1,
            "error": str(e),
            "artifacts": None,
        }


def translate_batch(
    payloads: Sequence[Mapping[str, Any]],
    n_workers: int = 4,
    progress_callback: Optional[Callable] = None
) -> pd.DataFrame:
    """
    Translate many jobs using multiprocessing.

    Args:
        payloads: Job description dictionaries
        n_workers: Number of parallel workers (1 runs in-process)
        progress_callback: Optional callback function(completed, total)

    Returns:
        DataFrame with one row per job, in input order, with columns
        index, job_id, success, mode, n_errors, error and artifacts
    """
    total = len(payloads)
    logger.info(f"Translating {total} jobs with {n_workers} workers")

    results: List[Dict[str, Any]] = []
    if n_workers <= 1:
        for i, payload in enumerate(payloads):
            results.append(_translate_single(i, payload))
            if progress_callback:
                progress_callback(i + 1, total)
    else:
        with ProcessPoolExecutor(max_workers=n_workers) as executor:
            futures = [executor.submit(_translate_single, i, p) for i, p in enumerate(payloads)]

            completed = 0
            for future in as_completed(futures):
                results.append(future.result())
                completed += 1
                if progress_callback:
                    progress_callback(completed, total)

    columns = ["index", "job_id", "success", "mode", "n_errors", "error", "artifacts"]
    df = pd.DataFrame(results, columns=columns).sort_values("index").reset_index(drop=True)
    if total:
        logger.info(f"Completed: {total} jobs, {df['success'].mean() * 100:.1f}% translated")
    return df
