"""
Spike Detector - turns buckets that reached the spike threshold into
candidate events.

The cutoff is hard: a bucket with threshold - 1 reports is dropped, one
with exactly threshold reports becomes a candidate. Candidates keep the
bucket iteration order; no re-sorting happens here.
"""

from typing import List, Mapping, Sequence
import logging

from citypulse.models.event import BucketKey, CandidateEvent
from citypulse.models.report import Report

logger = logging.getLogger(__name__)


DEFAULT_SPIKE_THRESHOLD = 3
SAMPLE_SIZE = 3


def validate_threshold(threshold: int) -> int:
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 1:
        raise ValueError(f"Spike threshold must be a positive integer, got {threshold!r}")
    return threshold


def detect_spikes(
    buckets: Mapping[BucketKey, Sequence[Report]],
    threshold: int = DEFAULT_SPIKE_THRESHOLD,
) -> List[CandidateEvent]:
    """
    Emit a CandidateEvent for every bucket with at least ``threshold`` reports.

    Returns:
        Candidates in bucket order (empty list if nothing qualifies)
    """
    threshold = validate_threshold(threshold)

    candidates: List[CandidateEvent] = []
    for key, reports in buckets.items():
        if len(reports) < threshold:
            continue

        location_key, category_key = key
        snapshot = tuple(reports)
        candidates.append(
            CandidateEvent(
                location_key=location_key,
                category_key=category_key,
                count=len(snapshot),
                sample_reports=snapshot[:SAMPLE_SIZE],
                reports=snapshot,
            )
        )

    logger.debug(f"Spike detection: {len(candidates)} of {len(buckets)} bucket(s) reached threshold {threshold}")
    return candidates
