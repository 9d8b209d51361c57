import csv
from typing import Any, TextIO

from hierpower.models.report import Report


def sanitize_csv_field(value: Any) -> Any:
    """Sanitizes a field to prevent CSV Injection (Formula Injection).

    If the value is a string and starts with one of the trigger characters
    (=, +, -, @), it prepends a single quote to force it to be treated as text.
    Leading whitespace is ignored when looking for a trigger character.
    """
    if isinstance(value, str) and value.lstrip().startswith(("=", "+", "-", "@")):
        return f"'{value}"
    return value


def generate_csv(report: Report, output_file: TextIO):
    """Generates a CSV export of the report rows in display order.

    Args:
        report: Aggregated hierarchy report.
        output_file: File-like object to write CSV to.
    """
    writer = csv.writer(output_file)

    headers = ["name", "depth", "instance_count"]
    if report.has_library:
        headers += ["area", f"leakage_{report.power_unit}" if report.power_unit else "leakage"]
    writer.writerow(headers)

    for row in report.display_rows:
        values = [row.name, row.depth, row.instance_count]
        if report.has_library:
            values += [row.area, row.power]

        # Sanitize all fields in the row
        writer.writerow([sanitize_csv_field(item) for item in values])
