"""Fixed-width text rendering of hierarchy reports."""

from ..models.report import Report, ReportRow

AREA_WIDTH = 14
POWER_WIDTH = 16
COUNT_WIDTH = 10


def _header(report: Report) -> str:
    width = report.label_width
    if not report.has_library:
        return f"{'Module/Instance':<{width}} {'Cells':>{COUNT_WIDTH}}"
    power_title = f"Leakage ({report.power_unit})" if report.power_unit else "Leakage"
    return (
        f"{'Module/Instance':<{width}} {'Area':>{AREA_WIDTH}} "
        f"{power_title:>{POWER_WIDTH}} {'Cells':>{COUNT_WIDTH}}"
    )


def format_row(row: ReportRow, report: Report) -> str:
    """Formats a single row with the column widths of `report`."""
    width = report.label_width
    if not report.has_library:
        return f"{row.label:<{width}} {row.instance_count:>{COUNT_WIDTH}d}"
    return (
        f"{row.label:<{width}} {row.area or 0.0:>{AREA_WIDTH}.4f} "
        f"{row.power or 0.0:>{POWER_WIDTH}.4f} {row.instance_count:>{COUNT_WIDTH}d}"
    )


def render_report(report: Report) -> str:
    """Renders a report as a fixed-width table.

    The table has a header row and a dashed separator, followed by the rows in
    display order: the root first, then its descendants in the reverse of the
    order the aggregator emitted them.

    Args:
        report: The aggregated report.

    Returns:
        The table text, one line per row, without a trailing newline.
    """
    header = _header(report)
    lines = [header, "-" * len(header)]
    lines.extend(format_row(row, report) for row in report.display_rows)
    return "\n".join(lines)
