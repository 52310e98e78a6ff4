"""
Assignment Artifacts Module

Records which shard every key of a corpus resolves to, and compares two such
records. A comparison between this router's output and another
implementation's output is the parity check: every key must land on the same
shard.

Assignments document layout:

    {
      "meta": {"algorithm": ..., "shards": {name: addr}, "replicas": 160,
               "hash_for": "crc32", "server_hash": "md5 upper 32 bits",
               "key_source": ...},
      "assignments": [{"key": ..., "shard": ...}, ...]
    }
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ..ring.router import RingRouter

logger = logging.getLogger(__name__)

ALGORITHM = "md5 ring points, crc32 keys, first point >= hash"


@dataclass
class Assignment:
    """Shard resolved for one key (shard is None on an empty ring)."""
    key: str
    shard: Optional[str]


@dataclass
class ComparisonReport:
    """Outcome of comparing a candidate's assignments against a baseline."""
    baseline: Dict[str, Any]
    candidate: Dict[str, Any]
    total_keys: int = 0
    matches: int = 0
    mismatches: int = 0
    match_rate: float = 0.0
    mismatch_examples: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_parity(self) -> bool:
        """True when every key matched."""
        return self.mismatches == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def read_json(path: Union[str, Path]) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Union[str, Path], payload: Any) -> Path:
    """
    Write a JSON document, creating parent directories as needed.

    Returns:
        The path written to
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")
    logger.debug(f"Wrote {path}")
    return path


def assign_keys(router: RingRouter, keys: Iterable[str]) -> List[Assignment]:
    """Resolve every key through the router, preserving order."""
    return [Assignment(key=key, shard=router.resolve_name(key)) for key in keys]


def build_assignments_document(
        router: RingRouter,
        shards: Dict[str, str],
        keys: Iterable[str],
        key_source: str = "",
) -> Dict[str, Any]:
    """
    Resolve a corpus and wrap the result with its metadata.

    Args:
        router: Router to resolve with
        shards: Shard name -> address, recorded for reference only
        keys: Keys to resolve
        key_source: Where the keys came from (usually a file path)

    Returns:
        Assignments document (see module docstring)
    """
    assignments = assign_keys(router, keys)
    return {
        "meta": {
            "algorithm": ALGORITHM,
            "shards": dict(shards),
            "replicas": router.replicas,
            "hash_for": "crc32",
            "server_hash": "md5 upper 32 bits",
            "key_source": key_source,
        },
        "assignments": [asdict(assignment) for assignment in assignments],
    }


def _assignments_of(document: Dict[str, Any], label: str) -> Sequence[Dict[str, Any]]:
    assignments = document.get("assignments") if isinstance(document, dict) else None
    if not isinstance(assignments, list):
        raise ValueError(f"{label} document has no 'assignments' list")
    return assignments


def compare_assignments(
        baseline: Dict[str, Any],
        candidate: Dict[str, Any],
        limit: int = 10,
) -> ComparisonReport:
    """
    Compare two assignments documents entry by entry.

    Entries are paired by position. A pair matches when both the key and the
    shard are equal.

    Args:
        baseline: Reference assignments document
        candidate: Assignments document under test
        limit: Maximum number of mismatch examples to keep

    Returns:
        ComparisonReport

    Raises:
        ValueError: If either document lacks assignments, their lengths differ
            or an entry is not an object
    """
    baseline_assignments = _assignments_of(baseline, "baseline")
    candidate_assignments = _assignments_of(candidate, "candidate")

    if len(baseline_assignments) != len(candidate_assignments):
        raise ValueError(
            f"Assignment count mismatch: "
            f"{len(baseline_assignments)} vs {len(candidate_assignments)}"
        )

    matches = 0
    mismatches = []
    for index, (base, cand) in enumerate(zip(baseline_assignments, candidate_assignments)):
        if not isinstance(base, dict) or not isinstance(cand, dict):
            raise ValueError(f"Assignment {index} is not an object")
        if base.get("key") == cand.get("key") and base.get("shard") == cand.get("shard"):
            matches += 1
        else:
            mismatches.append({
                "key": base.get("key"),
                "baseline_shard": base.get("shard"),
                "candidate_shard": cand.get("shard"),
            })

    total = len(baseline_assignments)
    report = ComparisonReport(
        baseline=baseline.get("meta", {}),
        candidate=candidate.get("meta", {}),
        total_keys=total,
        matches=matches,
        mismatches=len(mismatches),
        match_rate=round(matches / total, 6) if total else 0.0,
        mismatch_examples=mismatches[:max(limit, 0)],
    )

    if mismatches:
        logger.warning(f"{len(mismatches)} of {total} keys resolved differently")
    return report
