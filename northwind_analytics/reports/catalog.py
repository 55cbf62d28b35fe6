"""
Report Catalog

Registry of the named reports. Each report module registers its builders
with ``@register_report``; the catalog keeps them in their published order.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import polars as pl

from northwind_analytics.data.snapshot import Snapshot
from northwind_analytics.errors import UnknownReportError

ReportBuilder = Callable[[Snapshot], pl.DataFrame]


@dataclass(frozen=True)
class ReportDefinition:
    """A named, fixed computation producing one result table"""
    name: str
    position: int
    title: str
    description: str
    requires: Mapping[str, Tuple[str, ...]]
    key_columns: Tuple[str, ...]
    builder: ReportBuilder
    metric_columns: Optional[Tuple[str, ...]] = None

    def build(self, snapshot: Snapshot) -> pl.DataFrame:
        snapshot.require(self.requires, report=self.name)
        return self.builder(snapshot)

    def describe(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "position": self.position,
            "title": self.title,
            "description": self.description,
            "requires": {table: list(cols) for table, cols in self.requires.items()},
            "key_columns": list(self.key_columns),
            "metric_columns": None if self.metric_columns is None else list(self.metric_columns),
        }


_REGISTRY: Dict[str, ReportDefinition] = {}


def register_report(
    name: str,
    position: int,
    title: str,
    requires: Mapping[str, Sequence[str]],
    key_columns: Sequence[str] = (),
    metric_columns: Optional[Sequence[str]] = None,
) -> Callable[[ReportBuilder], ReportBuilder]:
    """
    Register a report builder under ``name``.

    The builder's docstring becomes the report description. Diffs compare
    ``metric_columns``, or every numeric non-key column when not given.
    """
    def decorator(builder: ReportBuilder) -> ReportBuilder:
        if name in _REGISTRY:
            raise ValueError(f"Report already registered: {name}")
        _REGISTRY[name] = ReportDefinition(
            name=name,
            position=position,
            title=title,
            description=(builder.__doc__ or "").strip(),
            requires=MappingProxyType({t: tuple(c) for t, c in requires.items()}),
            key_columns=tuple(key_columns),
            builder=builder,
            metric_columns=None if metric_columns is None else tuple(metric_columns),
        )
        return builder

    return decorator


def list_reports() -> List[ReportDefinition]:
    """All registered reports in catalog order"""
    return sorted(_REGISTRY.values(), key=lambda r: r.position)


def report_names() -> List[str]:
    return [r.name for r in list_reports()]


def get_report(name: str) -> ReportDefinition:
    """Look up a report, raising UnknownReportError for unknown names"""
    try:
        return _REGISTRY[name]
    except KeyError:
        raise UnknownReportError(name, available=_REGISTRY) from None
