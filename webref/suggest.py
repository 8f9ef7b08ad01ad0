"""
Fuzzy name suggestions shared by every dataset.

Two metrics are supported and picked per dataset in its schema file:
  - ratio:        matching character positions / length of the longer name,
                  accepted when strictly above `threshold`
  - levenshtein:  classic edit distance, accepted when <= `max_distance`

Names are compared lowercased. Results are ordered best score first, ties
broken by name.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

METRICS = ("ratio", "levenshtein")

@dataclass(frozen=True)
class SuggestConfig:
    metric: str = "ratio"
    threshold: float = 0.5
    max_distance: int = 3
    limit: int = 3

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "SuggestConfig":
        return SuggestConfig(
            metric=raw.get("metric", "ratio"),
            threshold=float(raw.get("threshold", 0.5)),
            max_distance=int(raw.get("max_distance", 3)),
            limit=int(raw.get("limit", 3)),
        )

def positional_ratio(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    matches = sum(1 for x, y in zip(a, b) if x == y)
    return matches / longest

def levenshtein(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]

def suggest(query: str, candidates: Iterable[str], config: SuggestConfig) -> List[str]:
    """Return up to `config.limit` known names close to `query`."""
    q = query.lower()
    scored: List[Tuple[float, str]] = []
    for name in set(candidates):
        cand = name.lower()
        if config.metric == "levenshtein":
            distance = levenshtein(q, cand)
            if distance <= config.max_distance:
                scored.append((float(distance), name))
        else:
            ratio = positional_ratio(q, cand)
            if ratio > config.threshold:
                scored.append((-ratio, name))
    scored.sort()
    return [name for _, name in scored[:config.limit]]
