"""CSV export of bird records.

The document starts with a UTF-8 byte order mark so spreadsheet tools pick
the right encoding for the Arabic headers. Multi-valued fields are joined
with ``" | "``, which never collides with the comma field delimiter.
"""

import csv
import io
import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from birdatlas.birds.models import BirdRecord, LocationEntry

logger = logging.getLogger(__name__)

BOM = "\ufeff"
MULTI_VALUE_SEPARATOR = " | "

HEADERS: tuple[str, ...] = (
    "الاسم العربي",
    "الاسم العلمي",
    "الاسم الإنجليزي",
    "الاسم المحلي",
    "الوصف",
    "ملاحظات",
    "المواقع",
    "الإحداثيات",
    "عدد المواقع",
    "الصور الفرعية",
    "ملف الصوت",
)


def format_location(entry: LocationEntry) -> str:
    """``place - region - mountain - valley - (lat, lng)``, skipping blanks."""
    parts = [
        part
        for part in (entry.location, entry.governorate, entry.mountain_name, entry.valley_name)
        if part
    ]
    if entry.has_coordinate:
        parts.append(f"({entry.latitude:.4f}, {entry.longitude:.4f})")
    return " - ".join(parts)


def format_locations(locations: Iterable[LocationEntry]) -> str:
    return MULTI_VALUE_SEPARATOR.join(format_location(entry) for entry in locations)


def format_coordinates(locations: Iterable[LocationEntry]) -> str:
    return MULTI_VALUE_SEPARATOR.join(
        f"{entry.latitude:.4f},{entry.longitude:.4f}"
        for entry in locations
        if entry.has_coordinate
    )


def bird_to_row(bird: BirdRecord) -> list[str]:
    return [
        bird.arabic_name,
        bird.scientific_name,
        bird.english_name,
        bird.local_name,
        bird.description,
        bird.notes,
        format_locations(bird.locations),
        format_coordinates(bird.locations),
        str(len(bird.locations)),
        MULTI_VALUE_SEPARATOR.join(bird.sub_images),
        bird.audio_file or "",
    ]


def render_csv(records: Iterable[BirdRecord], include_bom: bool = True) -> str:
    """Serialize one row per bird.

    Fields containing a comma, quote or newline are quoted with inner quotes
    doubled.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(HEADERS)
    for bird in records:
        writer.writerow(bird_to_row(bird))
    content = buffer.getvalue()
    return BOM + content if include_bom else content


def export_filename(now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d")
    return f"bird-data-{stamp}.csv"


def write_csv(records: Iterable[BirdRecord], directory: Path, now: datetime | None = None) -> Path:
    """Write the CSV export into ``directory`` and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    records = list(records)
    path = directory / export_filename(now)
    # BOM is part of the content; write with plain utf-8
    path.write_text(render_csv(records), encoding="utf-8", newline="")
    logger.info("CSV export written", extra={"path": str(path), "birds": len(records)})
    return path


SUMMARY_HEADERS: tuple[str, ...] = (
    "الاسم العربي",
    "الاسم الإنجليزي",
    "الاسم العلمي",
    "الوصف",
    "الملاحظات",
    "عدد المواقع",
    "عدد الصور",
    "يوجد صوت",
)
AUDIO_YES = "نعم"
AUDIO_NO = "لا"


def bird_to_summary_row(bird: BirdRecord) -> list[str | int]:
    return [
        bird.arabic_name,
        bird.english_name,
        bird.scientific_name,
        bird.description,
        bird.notes,
        len(bird.locations),
        len(bird.sub_images),
        AUDIO_YES if bird.audio_file else AUDIO_NO,
    ]


def render_summary_csv(records: Iterable[BirdRecord], include_bom: bool = True) -> str:
    """Serialize one spreadsheet summary row per bird: names, text and media counts.

    Every text field is quoted, empty ones included; counts are written bare.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\r\n")
    writer.writerow(SUMMARY_HEADERS)
    for bird in records:
        writer.writerow(bird_to_summary_row(bird))
    content = buffer.getvalue()
    return BOM + content if include_bom else content


def summary_filename(now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%dT%H-%M-%S")
    return f"birds_export_{stamp}.csv"


def write_summary_csv(
    records: Iterable[BirdRecord], directory: Path, now: datetime | None = None
) -> Path:
    """Write the summary export into ``directory`` and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    records = list(records)
    path = directory / summary_filename(now)
    path.write_text(render_summary_csv(records), encoding="utf-8", newline="")
    logger.info("Summary export written", extra={"path": str(path), "birds": len(records)})
    return path
