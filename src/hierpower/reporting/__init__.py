"""Report renderers and exporters"""

from .csv_generator import generate_csv
from .text_report import render_report

__all__ = ["generate_csv", "render_report"]
