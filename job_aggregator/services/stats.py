from __future__ import annotations
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field


def _ranked(counter: Counter) -> dict[str, int]:
    # count desc, then name, so the result does not depend on input order
    return dict(sorted(counter.items(), key=lambda item: (-item[1], item[0])))


@dataclass
class AggregateStats:
    total: int = 0
    sources: dict[str, int] = field(default_factory=dict)
    top_companies: dict[str, int] = field(default_factory=dict)
    locations: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "sources": dict(self.sources),
            "topCompanies": dict(self.top_companies),
            "locations": dict(self.locations),
        }


def job_stats(jobs: Iterable) -> AggregateStats:
    total = 0
    sources: Counter = Counter()
    companies: Counter = Counter()
    locations: Counter = Counter()
    for job in jobs:
        total += 1
        sources[job.source] += 1
        companies[job.company] += 1
        locations[job.location] += 1
    return AggregateStats(
        total=total,
        sources=_ranked(sources),
        top_companies=_ranked(companies),
        locations=_ranked(locations),
    )
