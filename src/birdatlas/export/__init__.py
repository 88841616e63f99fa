"""CSV and printable HTML exports of bird records."""

from birdatlas.export.csv_export import render_csv, write_csv
from birdatlas.export.html_export import HtmlReportRenderer

__all__ = ["HtmlReportRenderer", "render_csv", "write_csv"]
