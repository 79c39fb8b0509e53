import json
from datetime import date, datetime, timedelta, timezone

import pytest

from nodelistdb.analytics import (
    AnalyticalReport,
    AnalyticalResult,
    BinkpReport,
    ChartData,
    ChartPoint,
    ChartSeries,
    NetworkLifecycleReport,
    ProtocolAdoptionReport,
    TechnologyEvolution,
    TrendDataPoint,
    V34ModemReport,
    YearlyCount,
    ZoneCount,
    to_dict,
)
from nodelistdb.models import Node


def test_chart_point_omits_empty_label():
    assert to_dict(ChartPoint(x="1995", y=3)) == {"x": "1995", "y": 3}


def test_chart_point_keeps_label():
    assert to_dict(ChartPoint(x=1, y=2, label="peak"))["label"] == "peak"


def test_result_keeps_zero_pointer_but_drops_none():
    result = to_dict(AnalyticalResult(zone=0, value="V34"))
    assert result == {"zone": 0, "value": "V34"}


def test_result_full_fields_in_order():
    result = to_dict(
        AnalyticalResult(
            date=date(1995, 3, 1), zone=2, net=28, node=5, value="x", count=4,
            metadata={"k": "v"},
        )
    )
    assert list(result) == ["date", "zone", "net", "node", "value", "count", "metadata"]
    assert result["date"] == "1995-03-01"


def test_report_query_time_in_nanoseconds():
    report = AnalyticalReport(
        title="t",
        generated_at=datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        query_time=timedelta(seconds=2),
    )
    result = to_dict(report)
    assert result["query_time"] == 2_000_000_000
    assert result["generated_at"] == "2020-01-02T03:04:05Z"
    assert "summary" not in result
    assert "chart_data" not in result


def test_nested_chart_data_is_converted():
    chart = ChartData(
        type="line",
        series=[ChartSeries(name="nodes", data=[ChartPoint(x=date(1990, 1, 1), y=10)])],
    )
    report = BinkpReport(total_nodes_with_binkp=5, chart_data=chart)
    result = to_dict(report)
    assert result["chart_data"]["series"][0]["data"][0] == {"x": "1990-01-01", "y": 10}
    assert "categories" not in result["chart_data"]
    assert result["first_appearance"] is None


def test_v34_report_serialises_to_json_and_back():
    report = V34ModemReport(
        first_appearance=AnalyticalResult(zone=1, value="V34", count=1),
        adoption_over_time=[YearlyCount(year=1995, count=12)],
        top_adopting_zones=[ZoneCount(zone=2, count=7)],
        total_nodes_with_v34=12,
        total_nodes_analyzed=48,
        adoption_percentage=25.0,
    )
    decoded = json.loads(json.dumps(to_dict(report)))
    assert decoded["adoption_over_time"] == [{"year": 1995, "count": 12}]
    assert decoded["top_adopting_zones"] == [{"zone": 2, "count": 7}]
    assert decoded["first_appearance"]["value"] == "V34"


def test_lifecycle_host_name_omitted_when_empty():
    report = NetworkLifecycleReport(network_address="2:28", zone=2, net=28)
    result = to_dict(report)
    assert "host_name" not in result
    assert result["network_address"] == "2:28"
    assert result["first_seen"] is None


def test_protocol_report_first_appearance_date():
    report = ProtocolAdoptionReport(protocol="IBN", first_appearance=date(1998, 6, 1))
    assert to_dict(report)["first_appearance"] == "1998-06-01"


def test_technology_peak_point():
    peak = TrendDataPoint(date=date(1996, 1, 1), value=100)
    result = to_dict(TechnologyEvolution(technology="HST", peak_adoption=peak))
    assert result["peak_adoption"] == {"date": "1996-01-01", "value": 100}


def test_node_in_metadata_uses_node_form():
    node = Node(zone=2, net=28, node=5, system_name="Sys")
    result = to_dict(AnalyticalResult(value="n", metadata={"node": node}))
    assert result["metadata"]["node"] == node.to_dict()


def test_to_dict_rejects_non_record():
    with pytest.raises(TypeError):
        to_dict({"a": 1})