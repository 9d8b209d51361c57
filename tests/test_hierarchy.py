"""Tests for hierarchy aggregation.

Checks multiplicity-weighted roll-up, depth limiting, instance mode labeling,
the per-occurrence row model, and cycle rejection.
"""

import textwrap

import pytest

from hierpower.exceptions import HierarchyCycleError, UnknownModuleError
from hierpower.hierarchy import HierarchyAggregator
from hierpower.models.liberty import Cell
from hierpower.models.report import AggregateMetric, ReportConfig, label_width
from hierpower.parsers.liberty import LibertyParser
from hierpower.parsers.netlist import NetlistParser

MULTIPLICITY_NETLIST = """
module BUF (a, y);
  INV u0 (.A(a), .Y(y));
endmodule
module TOP (a, y);
  INV i0 (.A(a));
  INV i1 (.A(a));
  INV i2 (.A(a));
  BUF b0 (.a(a));
  BUF b1 (.a(a));
endmodule
"""


@pytest.fixture
def inv_cells():
    return {"INV": Cell(name="INV", area=2.0, leakage_power=0.5)}


def _netlist(content: str, instance_mode: bool = False, cells=None):
    parser = NetlistParser(cells=cells, instance_mode=instance_mode)
    return parser.parse_string(textwrap.dedent(content))


def test_multiplicity_weighted_totals(inv_cells):
    aggregator = HierarchyAggregator(_netlist(MULTIPLICITY_NETLIST), cells=inv_cells)
    report = aggregator.build_report("TOP")

    assert report.total.instance_count == 5
    assert report.total.area == pytest.approx(5 * 2.0)
    assert report.total.power == pytest.approx(5 * 0.5)

    # Emission order is post-order: BUF before TOP
    assert [row.name for row in report.rows] == ["BUF", "TOP"]
    buf_row, top_row = report.rows
    assert buf_row.instance_count == 1
    assert buf_row.area == pytest.approx(2.0)
    assert top_row.instance_count == 5
    assert top_row.label == "TOP"
    assert buf_row.label == ".BUF"


def test_sample_design_totals(sample_liberty_content, sample_netlist_content):
    lib = LibertyParser().parse_string(sample_liberty_content)
    netlist = NetlistParser(cells=lib.cells).parse_string(sample_netlist_content)

    report = HierarchyAggregator(netlist, cells=lib.cells).build_report("top")

    assert report.total == AggregateMetric(instance_count=10, power=30.0, area=12.0)
    top_row = report.rows[-1]
    assert (top_row.instance_count, top_row.area, top_row.power) == (10, 12.0, 30.0)


def test_leaf_metric_for_unknown_cell_is_counted_without_area():
    netlist = _netlist("""
    module TOP (a);
      INV i0 (.A(a));
      MYSTERY m0 (.A(a));
    endmodule
    """)
    cells = {"INV": Cell(name="INV", area=1.0, leakage_power=3.0)}
    aggregator = HierarchyAggregator(netlist, cells=cells)

    assert aggregator.aggregate("MYSTERY") == AggregateMetric(instance_count=1)
    assert aggregator.aggregate("INV") == AggregateMetric(1, 3.0, 1.0)
    assert aggregator.aggregate("TOP") == AggregateMetric(2, 3.0, 1.0)


def test_count_only_report_without_library():
    report = HierarchyAggregator(_netlist(MULTIPLICITY_NETLIST)).build_report("TOP")

    assert not report.has_library
    assert report.total.instance_count == 5
    assert report.total.area == 0.0
    for row in report.rows:
        assert row.area is None
        assert row.power is None


def test_depth_limit_keeps_rollup(inv_cells):
    netlist = _netlist("""
    module LEAFMOD (a);
      INV u0 (.A(a));
      INV u1 (.A(a));
    endmodule
    module MID (a);
      LEAFMOD l0 (.a(a));
      INV u0 (.A(a));
    endmodule
    module TOP (a);
      MID m0 (.a(a));
    endmodule
    """)
    unlimited = HierarchyAggregator(netlist, cells=inv_cells).build_report("TOP")
    limited = HierarchyAggregator(
        netlist, cells=inv_cells, config=ReportConfig(max_depth=1)
    ).build_report("TOP")

    assert [row.depth for row in unlimited.rows] == [2, 1, 0]
    assert [row.name for row in limited.rows] == ["MID", "TOP"]
    assert all(row.depth <= 1 for row in limited.rows)

    mid_row = limited.rows[0]
    assert mid_row.instance_count == 3
    assert mid_row.area == pytest.approx(6.0)
    assert limited.total == unlimited.total


def test_depth_zero_reports_only_root(inv_cells):
    report = HierarchyAggregator(
        _netlist(MULTIPLICITY_NETLIST), cells=inv_cells, config=ReportConfig(max_depth=0)
    ).build_report("TOP")
    assert [row.name for row in report.rows] == ["TOP"]
    assert report.rows[0].instance_count == 5


def test_repeated_runs_are_identical(inv_cells):
    aggregator = HierarchyAggregator(_netlist(MULTIPLICITY_NETLIST), cells=inv_cells)

    first = aggregator.build_report("TOP")
    second = aggregator.build_report("TOP")

    assert first.rows == second.rows
    assert first.total == second.total
    assert len(aggregator.rows) == 2


def test_shared_module_gets_a_row_per_parent(inv_cells):
    netlist = _netlist("""
    module SHARED (a);
      INV u0 (.A(a));
    endmodule
    module LEFT (a);
      SHARED s (.a(a));
    endmodule
    module RIGHT (a);
      SHARED s (.a(a));
      SHARED t (.a(a));
    endmodule
    module TOP (a);
      LEFT l (.a(a));
      RIGHT r (.a(a));
    endmodule
    """)
    report = HierarchyAggregator(netlist, cells=inv_cells).build_report("TOP")

    assert [row.name for row in report.rows] == ["SHARED", "LEFT", "SHARED", "RIGHT", "TOP"]
    assert [row.label for row in report.display_rows] == [
        "TOP",
        ".RIGHT",
        "..SHARED",
        ".LEFT",
        "..SHARED",
    ]
    assert report.total.instance_count == 3


def test_instance_mode_labels_rows_by_instance(inv_cells):
    netlist = _netlist(MULTIPLICITY_NETLIST, instance_mode=True)
    report = HierarchyAggregator(
        netlist, cells=inv_cells, config=ReportConfig(instance_mode=True)
    ).build_report("TOP")

    assert [row.name for row in report.rows] == ["b0", "b1", "TOP"]
    assert [row.label for row in report.display_rows] == ["TOP", ".b1", ".b0"]
    assert report.total.instance_count == 5
    assert report.total.area == pytest.approx(10.0)


def test_instance_mode_flag_off_ignores_instance_labels(inv_cells):
    aggregator = HierarchyAggregator(_netlist(MULTIPLICITY_NETLIST), cells=inv_cells)
    aggregator.aggregate("BUF", depth=1, instance="b0")
    assert aggregator.rows[-1].name == "BUF"


def test_scale_factors_apply_to_rows_only(inv_cells):
    config = ReportConfig(area_scale=1e-6, power_scale=1000.0)
    report = HierarchyAggregator(
        _netlist(MULTIPLICITY_NETLIST), cells=inv_cells, config=config
    ).build_report("TOP")

    top_row = report.rows[-1]
    assert top_row.area == pytest.approx(10.0e-6)
    assert top_row.power == pytest.approx(2500.0)
    assert report.total.area == pytest.approx(10.0)


def test_labels_are_truncated():
    long_name = "m" * 80
    netlist = _netlist(f"""
    module {long_name} (a);
      INV u0 (.A(a));
    endmodule
    """)

    count_only = HierarchyAggregator(netlist).build_report(long_name)
    with_library = HierarchyAggregator(netlist, cells={}).build_report(long_name)

    assert len(count_only.rows[0].label) == 70 == count_only.label_width
    assert len(with_library.rows[0].label) == 50 == with_library.label_width
    assert label_width(True) == 50
    assert label_width(False) == 70
    assert with_library.rows[0].name == long_name


def test_unknown_top_module():
    aggregator = HierarchyAggregator(_netlist(MULTIPLICITY_NETLIST))
    with pytest.raises(UnknownModuleError, match="INV"):
        aggregator.build_report("INV")


def test_direct_cycle_is_rejected():
    netlist = _netlist("""
    module LOOP (a);
      LOOP again (.a(a));
    endmodule
    """)
    with pytest.raises(HierarchyCycleError) as exc_info:
        HierarchyAggregator(netlist).build_report("LOOP")
    assert exc_info.value.path == ["LOOP", "LOOP"]


def test_transitive_cycle_is_rejected():
    netlist = _netlist("""
    module A (x);
      B b (.x(x));
    endmodule
    module B (x);
      C c (.x(x));
    endmodule
    module C (x);
      A a (.x(x));
    endmodule
    module TOP (x);
      A a (.x(x));
    endmodule
    """)
    aggregator = HierarchyAggregator(netlist)
    with pytest.raises(HierarchyCycleError, match="A -> B -> C -> A"):
        aggregator.build_report("TOP")

    # The recursion path is unwound after the error
    assert aggregator.aggregate("INV") == AggregateMetric(instance_count=1)
    assert aggregator._path == []


def test_metric_arithmetic():
    metric = AggregateMetric(1, 2.0, 3.0) + AggregateMetric(2, 0.5, 1.0)
    assert metric == AggregateMetric(3, 2.5, 4.0)
    assert metric * 2 == AggregateMetric(6, 5.0, 8.0)
