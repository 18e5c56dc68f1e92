"""
Entry point of the search: generator, selector, then simplification of the
winners for display.
"""

import time
from dataclasses import dataclass
from typing import Iterable, List

import mpmath

from config import RunConfig
from constants import Constant
from generator import GeneratorStats, SearchResult, generate
from selector import select
from simplifier import simplify


@dataclass
class SearchOutcome:
    """Reported results plus bookkeeping about the run that produced them."""
    results: List[SearchResult]
    stats: GeneratorStats
    n_distinct_errors: int
    elapsed_seconds: float


def search_with_stats(config: RunConfig, constants: Iterable[Constant]) -> SearchOutcome:
    """
    Run one search and keep the generator's statistics.

    The constants and config.target must have been built at
    config.working_digits, which is also the precision used here.
    """
    t_start = time.time()
    with mpmath.workdps(config.working_digits):
        generator = generate(config, constants)
        n_distinct = len({r.error for r in generator.results})
        winners = select(generator.results, config.top_k)
        if config.simplify:
            winners = [SearchResult(r.error, simplify(r.expression)) for r in winners]
    return SearchOutcome(
        results=winners,
        stats=generator.stats,
        n_distinct_errors=n_distinct,
        elapsed_seconds=time.time() - t_start,
    )


def search(config: RunConfig, constants: Iterable[Constant]) -> List[SearchResult]:
    """At most config.top_k results, ascending by error."""
    return search_with_stats(config, constants).results


def format_result(result: SearchResult, digits: int) -> str:
    """'<expression> | err: <error>' as printed by the command line."""
    return f"{result.expression.render(digits)} | err: {mpmath.nstr(result.error, digits)}"
