"""
Ranking of the generator's working set.

1. Deduplicate by exact error value: keep the expression with the smallest
   size, the first one encountered when sizes tie.
2. Sort ascending by error (stable, so insertion order breaks any tie).
3. Keep the first K entries.
"""

from typing import Dict, Iterable, List

import mpmath

from config import DEFAULT_TOP_K
from generator import SearchResult


def deduplicate(results: Iterable[SearchResult]) -> List[SearchResult]:
    """One entry per distinct error, in first-seen order of the errors."""
    selected: Dict[mpmath.mpf, SearchResult] = {}
    for result in results:
        kept = selected.get(result.error)
        if kept is None or kept.expression.size > result.expression.size:
            selected[result.error] = result
    return list(selected.values())


def select(results: Iterable[SearchResult], top_k: int = DEFAULT_TOP_K) -> List[SearchResult]:
    """Deduplicated results, ascending by error, at most `top_k` of them."""
    ranked = sorted(deduplicate(results), key=lambda r: r.error)
    return ranked[:top_k]
