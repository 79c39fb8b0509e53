"""Report records produced by analytical queries, with JSON conversion."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

# Field metadata: "nil" drops the key only when the value is None,
# "empty" drops it when the value is None, zero, empty or False.
_OMIT_NIL = {"omit": "nil"}
_OMIT_EMPTY = {"omit": "empty"}


def _omit_nil(default: Any = None) -> Any:
    return field(default=default, metadata=_OMIT_NIL)


def _omit_empty(default: Any = None, factory: Any = None) -> Any:
    if factory is not None:
        return field(default_factory=factory, metadata=_OMIT_EMPTY)
    return field(default=default, metadata=_OMIT_EMPTY)


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    if isinstance(value, (str, list, tuple, dict, set)):
        return len(value) == 0
    if isinstance(value, timedelta):
        return value == timedelta(0)
    return False


def _format_time(value: date) -> str:
    if isinstance(value, datetime) and value.utcoffset() == timedelta(0):
        return value.replace(tzinfo=None).isoformat() + "Z"
    return value.isoformat()


def _duration_ns(value: timedelta) -> int:
    return (value.days * 86_400 + value.seconds) * 1_000_000_000 + value.microseconds * 1_000


def _convert(value: Any) -> Any:
    to_dict_method = getattr(value, "to_dict", None)
    if callable(to_dict_method) and not isinstance(value, type):
        return to_dict_method()
    if is_dataclass(value) and not isinstance(value, type):
        return to_dict(value)
    if isinstance(value, (date, datetime)):
        return _format_time(value)
    if isinstance(value, timedelta):
        return _duration_ns(value)
    if isinstance(value, dict):
        return {str(key): _convert(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_convert(item) for item in value]
    return value


def to_dict(report: Any) -> dict[str, Any]:
    """Return the JSON-ready form of an analytics record.

    Dates become ISO strings, durations become nanoseconds, and fields
    marked optional are left out when they hold no value.
    """
    if not is_dataclass(report) or isinstance(report, type):
        raise TypeError(f"expected a report record, got {type(report).__name__}")
    result: dict[str, Any] = {}
    for item in fields(report):
        value = getattr(report, item.name)
        omit = item.metadata.get("omit")
        if omit == "nil" and value is None:
            continue
        if omit == "empty" and _is_empty(value):
            continue
        result[item.name] = _convert(value)
    return result


@dataclass
class ChartPoint:
    """A single data point of a chart; x is a date, string or number."""

    x: Any
    y: int
    label: str = _omit_empty("")


@dataclass
class ChartSeries:
    """A named series of chart points."""

    name: str
    data: list[ChartPoint] = field(default_factory=list)


@dataclass
class ChartData:
    """Data laid out for a chart of type line, bar, pie or area."""

    type: str
    title: str = ""
    x_axis_label: str = ""
    y_axis_label: str = ""
    series: list[ChartSeries] = field(default_factory=list)
    categories: list[str] = _omit_empty(factory=list)
    colors: list[str] = _omit_empty(factory=list)
    options: dict[str, Any] = _omit_empty(factory=dict)


@dataclass
class AnalyticalResult:
    """One result row of an analytical query."""

    date: Optional[date] = _omit_nil()
    zone: Optional[int] = _omit_nil()
    net: Optional[int] = _omit_nil()
    node: Optional[int] = _omit_nil()
    value: str = ""
    count: int = _omit_empty(0)
    metadata: dict[str, Any] = _omit_empty(factory=dict)


@dataclass
class AnalyticalReport:
    """The results of an analytical query with timing and summary."""

    title: str
    description: str = ""
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    query_time: timedelta = field(default_factory=timedelta)
    results: list[AnalyticalResult] = field(default_factory=list)
    summary: dict[str, Any] = _omit_empty(factory=dict)
    chart_data: Optional[ChartData] = _omit_nil()


@dataclass
class ZoneCount:
    """A count for one zone."""

    zone: int
    count: int


@dataclass
class NameCount:
    """A count for one name."""

    name: str
    count: int


@dataclass
class YearlyCount:
    """A count for one year."""

    year: int
    count: int


@dataclass
class NetworkHistory:
    """The node count of a network on one date."""

    date: date
    node_count: int


@dataclass
class V34ModemReport:
    """Adoption of V.34 modems across the network."""

    first_appearance: Optional[AnalyticalResult] = None
    earliest_adopters: list[AnalyticalResult] = field(default_factory=list)
    adoption_over_time: list[YearlyCount] = field(default_factory=list)
    top_adopting_zones: list[ZoneCount] = field(default_factory=list)
    total_nodes_with_v34: int = 0
    total_nodes_analyzed: int = 0
    adoption_percentage: float = 0.0
    chart_data: Optional[ChartData] = _omit_nil()


@dataclass
class BinkpReport:
    """Introduction and adoption of the Binkp protocol."""

    first_appearance: Optional[AnalyticalResult] = None
    earliest_adopters: list[AnalyticalResult] = field(default_factory=list)
    adoption_over_time: list[YearlyCount] = field(default_factory=list)
    top_adopting_zones: list[ZoneCount] = field(default_factory=list)
    total_nodes_with_binkp: int = 0
    total_nodes_analyzed: int = 0
    adoption_percentage: float = 0.0
    chart_data: Optional[ChartData] = _omit_nil()


@dataclass
class NetworkLifecycleReport:
    """Creation, growth and end of one network."""

    network_address: str = ""
    zone: int = 0
    net: int = 0
    host_name: str = _omit_empty("")
    first_seen: Optional[date] = None
    last_seen: Optional[date] = None
    total_days: int = 0
    max_nodes: int = 0
    max_nodes_date: Optional[date] = None
    history: list[NetworkHistory] = field(default_factory=list)
    status: str = ""
    is_currently_active: bool = False
    chart_data: Optional[ChartData] = _omit_nil()


@dataclass
class SysopNameReport:
    """Most frequent sysop names of one year."""

    year: int
    top_names: list[NameCount] = field(default_factory=list)
    total_unique: int = 0
    total_nodes: int = 0
    chart_data: Optional[ChartData] = _omit_nil()


@dataclass
class TrendDataPoint:
    """One point of a trend."""

    date: date
    value: int
    label: str = _omit_empty("")


@dataclass
class TrendAnalysis:
    """A value over time and its direction: increasing, decreasing or stable."""

    name: str
    description: str = ""
    data_points: list[TrendDataPoint] = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    trend: str = ""
    chart_data: Optional[ChartData] = _omit_nil()


@dataclass
class ProtocolAdoptionReport:
    """Adoption of one protocol across the network."""

    protocol: str
    first_appearance: Optional[date] = None
    earliest_adopters: list[AnalyticalResult] = field(default_factory=list)
    adoption_over_time: list[YearlyCount] = field(default_factory=list)
    top_adopting_zones: list[ZoneCount] = field(default_factory=list)
    current_adoption: int = 0
    total_nodes: int = 0
    adoption_percentage: float = 0.0
    chart_data: Optional[ChartData] = _omit_nil()


@dataclass
class GeographicDistribution:
    """Share of nodes in one zone."""

    region: str
    zone_number: int = 0
    node_count: int = 0
    percentage: float = 0.0
    chart_data: Optional[ChartData] = _omit_nil()


@dataclass
class TechnologyEvolution:
    """How one technology spread and faded over time."""

    technology: str
    evolution_points: list[TrendDataPoint] = field(default_factory=list)
    peak_adoption: Optional[TrendDataPoint] = None
    current_status: str = ""
    chart_data: Optional[ChartData] = _omit_nil()