"""Printable HTML report of bird records.

The report is a single self-contained right-to-left page (inline styles, no
external assets) that a browser can print or save as PDF.
"""

import logging
from collections.abc import Iterable
from datetime import date
from pathlib import Path

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from pydantic import BaseModel

from birdatlas.birds.models import BirdRecord

logger = logging.getLogger(__name__)

TEXT_LIMIT = 100
DEFAULT_TITLE = "تقرير بيانات الطيور"
DEFAULT_FOOTER = "تم إنشاء هذا التقرير بواسطة نظام إدارة بيانات الطيور"

ARABIC_MONTHS = (
    "يناير",
    "فبراير",
    "مارس",
    "أبريل",
    "مايو",
    "يونيو",
    "يوليو",
    "أغسطس",
    "سبتمبر",
    "أكتوبر",
    "نوفمبر",
    "ديسمبر",
)


class ReportRow(BaseModel):
    arabic_name: str
    english_name: str
    scientific_name: str
    description: str
    notes: str
    location_count: int
    image_count: int
    has_audio: bool


def truncate(text: str, limit: int = TEXT_LIMIT) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with ``...``."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def format_report_date(day: date) -> str:
    return f"{day.day} {ARABIC_MONTHS[day.month - 1]} {day.year}"


def report_rows(records: Iterable[BirdRecord]) -> list[ReportRow]:
    return [
        ReportRow(
            arabic_name=bird.arabic_name,
            english_name=bird.english_name,
            scientific_name=bird.scientific_name,
            description=truncate(bird.description),
            notes=truncate(bird.notes),
            location_count=len(bird.locations),
            image_count=len(bird.sub_images),
            has_audio=bool(bird.audio_file),
        )
        for bird in records
    ]


def create_environment() -> Environment:
    """Jinja2 environment over the packaged templates.

    Undefined variables raise instead of rendering as empty strings.
    """
    return Environment(
        loader=PackageLoader("birdatlas.export", "templates"),
        autoescape=select_autoescape(["html", "j2"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


class HtmlReportRenderer:
    """Renders the printable bird report."""

    template_name = "bird_report.html.j2"

    def __init__(
        self,
        environment: Environment | None = None,
        title: str = DEFAULT_TITLE,
        footer: str = DEFAULT_FOOTER,
    ) -> None:
        self.environment = environment or create_environment()
        self.title = title
        self.footer = footer

    def render(self, records: Iterable[BirdRecord], report_date: date | None = None) -> str:
        rows = report_rows(records)
        template = self.environment.get_template(self.template_name)
        return template.render(
            title=self.title,
            footer=self.footer,
            report_date=format_report_date(report_date or date.today()),
            rows=rows,
            record_count=len(rows),
        )

    def write(
        self, records: Iterable[BirdRecord], directory: Path, report_date: date | None = None
    ) -> Path:
        """Render the report into ``directory`` and return its path."""
        report_date = report_date or date.today()
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"bird-report-{report_date.isoformat()}.html"
        path.write_text(self.render(records, report_date), encoding="utf-8")
        logger.info("HTML report written", extra={"path": str(path)})
        return path
