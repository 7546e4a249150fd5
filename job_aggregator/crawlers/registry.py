from __future__ import annotations
from collections.abc import Mapping
from types import MappingProxyType

from job_aggregator.crawlers.adapters.arbeitnow import ArbeitnowAdapter
from job_aggregator.crawlers.adapters.remoteok import RemoteOKAdapter
from job_aggregator.crawlers.adapters.remotive import RemotiveAdapter
from job_aggregator.crawlers.base import SourceAdapter
from job_aggregator.crawlers.http_helpers import HttpSession

ADAPTERS = MappingProxyType(
    {
        "remotive": RemotiveAdapter,
        "remoteok": RemoteOKAdapter,
        "arbeitnow": ArbeitnowAdapter,
    }
)


def build_registry(session: HttpSession) -> Mapping[str, SourceAdapter]:
    return MappingProxyType({name: adapter_cls(session) for name, adapter_cls in ADAPTERS.items()})


def available_sources() -> list[str]:
    return list(ADAPTERS)
