"""
Vehicle CSV import service.

Parses an uploaded delimited text file into Vehicle rows, validates and
de-duplicates them, then bulk-inserts inside one transaction, optionally
clearing the existing vehicle catalog first.

Input format:
- UTF-8 by default; UTF-8/16/32 byte order marks are honoured
- one header line, delimiter auto-detected among ``;``, tab and ``,``
- ``"`` quoting with ``""`` as an escaped quote
- headers matched case- and diacritic-insensitively against a synonym table
"""

import codecs
import re
import time
from dataclasses import dataclass, field
from enum import StrEnum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.core.config import settings
from autoparts.core.exceptions import PostgresException, VehicleImportException
from autoparts.core.logging import PerformanceLogger, get_logger, log_database_operation
from autoparts.db.postgres.models import Vehicle
from autoparts.db.postgres.repositories import PartRepository, VehicleRepository
from autoparts.services.normalization import clean_text, normalize_header

logger = get_logger(__name__)

# Top-level messages
EMPTY_FILE_MESSAGE = "CSV dosyasi bos."
MISSING_COLUMNS_MESSAGE = "CSV basliklari icinde Brand/Marka ve Model alanlari gerekli."
NOTHING_TO_IMPORT_MESSAGE = "Aktarilacak kayit bulunamadi."
FILE_TOO_LARGE_MESSAGE = "CSV dosyasi cok buyuk."

# Row-level messages
BLANK_BRAND_OR_MODEL = "Marka veya model bos."
INVALID_YEARS = "Baslangic/bitis yili gecersiz."

DELIMITERS = (";", "\t", ",")
LINE_BREAK = re.compile(r"\r\n|\r|\n")
YEAR_PATTERN = re.compile(r"[+-]?\d+")
MAX_YEAR = 2**31 - 1

# Longest BOMs first so UTF-32 LE is not mistaken for UTF-16 LE
BOMS = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


class CsvColumn(StrEnum):
    BRAND = "brand"
    MODEL = "model"
    START_YEAR = "start_year"
    END_YEAR = "end_year"
    YEAR = "year"
    ENGINE = "engine"
    IMAGE_URL = "image_url"
    BRAND_LOGO_URL = "brand_logo_url"


# Normalized header synonyms, tried in order
HEADER_SYNONYMS: dict[CsvColumn, tuple[str, ...]] = {
    CsvColumn.BRAND: ("brand", "marka"),
    CsvColumn.MODEL: ("model", "modeladi", "modelad"),
    CsvColumn.START_YEAR: ("startyear", "baslangicyil", "baslangicyili", "yilbaslangic", "yearstart"),
    CsvColumn.END_YEAR: ("endyear", "bitisyil", "bitisyili", "yilbitis", "yearend"),
    CsvColumn.YEAR: ("year", "yil", "modelyili"),
    CsvColumn.ENGINE: ("engine", "motor", "variant"),
    CsvColumn.IMAGE_URL: (
        "imageurl", "image", "img", "gorsel", "gorselurl",
        "resim", "resimurl", "gorseladres", "gorseladresi",
    ),
    CsvColumn.BRAND_LOGO_URL: ("brandlogourl", "brandlogo", "markalogosu", "markalogo", "markalogourl"),
}


@dataclass
class ColumnMap:
    """Column index per field; -1 when the file has no such column."""

    indexes: dict[CsvColumn, int] = field(default_factory=dict)

    def index(self, column: CsvColumn) -> int:
        return self.indexes.get(column, -1)

    @property
    def has_required(self) -> bool:
        return self.index(CsvColumn.BRAND) >= 0 and self.index(CsvColumn.MODEL) >= 0

    def field(self, values: list[str], column: CsvColumn) -> str:
        """Trimmed field value, empty when the column or the cell is missing."""
        idx = self.index(column)
        if idx < 0 or idx >= len(values):
            return ""
        return values[idx].strip()


@dataclass
class StagedVehicles:
    vehicles: list[Vehicle] = field(default_factory=list)
    skipped: int = 0
    # every rejected row; errors only keeps the first max_row_errors messages
    rejected: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class VehicleImportResult:
    imported: int = 0
    skipped: int = 0
    rejected: int = 0
    deleted_vehicles: int = 0
    errors: list[str] = field(default_factory=list)


# =============================================================================
# Parsing
# =============================================================================


def decode_csv(content: bytes) -> str:
    """Decode upload bytes, honouring a byte order mark. Invalid bytes are replaced."""
    for bom, encoding in BOMS:
        if content.startswith(bom):
            return content[len(bom):].decode(encoding, errors="replace")
    return content.decode("utf-8", errors="replace")


def split_lines(text: str) -> list[str]:
    """Split on CRLF, CR or LF. A trailing line break does not produce an extra line."""
    if not text:
        return []
    lines = LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def detect_delimiter(header: str) -> str:
    """Semicolon wins ties, then tab, then comma."""
    comma = header.count(",")
    semicolon = header.count(";")
    tab = header.count("\t")

    if semicolon >= comma and semicolon >= tab:
        return ";"
    if tab >= comma:
        return "\t"
    return ","


def parse_csv_line(line: str, delimiter: str) -> list[str]:
    """
    Split one line into fields.

    ``"`` toggles quoting, ``""`` inside quotes is a literal quote, and the
    delimiter only splits outside quotes. The last field is always emitted.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current))
    return fields


def build_column_map(headers: list[str]) -> ColumnMap:
    """Map each known column to the first header matching its first matching synonym."""
    normalized = [normalize_header(h) for h in headers]
    column_map = ColumnMap()
    for column, synonyms in HEADER_SYNONYMS.items():
        for synonym in synonyms:
            if synonym in normalized:
                column_map.indexes[column] = normalized.index(synonym)
                break
    return column_map


def parse_year(value: str) -> int | None:
    """Positive integer year, or None."""
    if not YEAR_PATTERN.fullmatch(value.strip()):
        return None
    year = int(value)
    if year <= 0 or year > MAX_YEAR:
        return None
    return year


def stage_vehicles(content: bytes, max_row_errors: int | None = None) -> StagedVehicles:
    """
    Parse and validate an upload without touching the database.

    Raises:
        VehicleImportException: empty file, missing Brand/Model columns, or
            no row left to import
    """
    if max_row_errors is None:
        max_row_errors = settings.VEHICLE_IMPORT_MAX_ROW_ERRORS

    lines = split_lines(decode_csv(content))
    if not lines:
        raise VehicleImportException(EMPTY_FILE_MESSAGE)

    delimiter = detect_delimiter(lines[0])
    column_map = build_column_map(parse_csv_line(lines[0], delimiter))
    if not column_map.has_required:
        raise VehicleImportException(MISSING_COLUMNS_MESSAGE)

    staged = StagedVehicles()
    seen: set[str] = set()

    def row_error(row: int, message: str) -> None:
        staged.rejected += 1
        if len(staged.errors) < max_row_errors:
            staged.errors.append(f"Satir {row}: {message}")

    for row, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue

        values = parse_csv_line(line, delimiter)
        brand = column_map.field(values, CsvColumn.BRAND)
        model = column_map.field(values, CsvColumn.MODEL)
        engine = column_map.field(values, CsvColumn.ENGINE)

        if not brand or not model:
            row_error(row, BLANK_BRAND_OR_MODEL)
            continue

        year_text = column_map.field(values, CsvColumn.YEAR)
        start_text = column_map.field(values, CsvColumn.START_YEAR) or year_text
        end_text = column_map.field(values, CsvColumn.END_YEAR) or year_text

        start_year = parse_year(start_text)
        end_year = parse_year(end_text)
        if start_year is None or end_year is None:
            row_error(row, INVALID_YEARS)
            continue

        if start_year > end_year:
            start_year, end_year = end_year, start_year

        key = f"{brand}|{model}|{start_year}|{end_year}|{engine}".strip().casefold()
        if key in seen:
            staged.skipped += 1
            continue
        seen.add(key)

        staged.vehicles.append(
            Vehicle(
                brand=brand,
                model=model,
                year=start_year,
                start_year=start_year,
                end_year=end_year,
                engine=clean_text(engine),
                image_url=clean_text(column_map.field(values, CsvColumn.IMAGE_URL)),
                brand_logo_url=clean_text(column_map.field(values, CsvColumn.BRAND_LOGO_URL)),
            )
        )

    if not staged.vehicles:
        raise VehicleImportException(NOTHING_TO_IMPORT_MESSAGE, row_errors=staged.errors)

    return staged


# =============================================================================
# Import
# =============================================================================


class VehicleCsvImporter:
    """Writes staged vehicles, optionally replacing the whole catalog."""

    def __init__(self, db: AsyncSession, max_row_errors: int | None = None):
        self.db = db
        self.vehicles = VehicleRepository(db)
        self.parts = PartRepository(db)
        self.max_row_errors = max_row_errors

    async def import_csv(
        self,
        content: bytes,
        clear_existing: bool = False,
        dry_run: bool = False,
    ) -> VehicleImportResult:
        """
        Import vehicles from CSV bytes.

        With ``clear_existing`` all part links are deleted, legacy part
        vehicle ids nulled and every vehicle deleted before the insert, all in
        the same transaction as the insert. ``dry_run`` validates and reports
        without writing.

        Raises:
            VehicleImportException: the file cannot be imported at all
            PostgresException: the write transaction failed and was rolled back
        """
        if len(content) > settings.VEHICLE_IMPORT_MAX_BYTES:
            raise VehicleImportException(FILE_TOO_LARGE_MESSAGE)

        with PerformanceLogger(
            "vehicle_csv_import",
            bytes=len(content),
            clear_existing=clear_existing,
            dry_run=dry_run,
        ) as perf:
            staged = stage_vehicles(content, self.max_row_errors)
            result = VehicleImportResult(skipped=staged.skipped, rejected=staged.rejected, errors=staged.errors)
            perf.add(staged=len(staged.vehicles), skipped=staged.skipped)

            if dry_run:
                result.imported = len(staged.vehicles)
                if clear_existing:
                    result.deleted_vehicles = await self.vehicles.count()
                logger.info("Vehicle import dry run", extra={"staged": result.imported, "skipped": result.skipped})
                return result

            result.deleted_vehicles = await self._write(staged.vehicles, clear_existing)
            result.imported = len(staged.vehicles)

        logger.info(
            "Vehicle import completed",
            extra={
                "imported": result.imported,
                "skipped": result.skipped,
                "deleted_vehicles": result.deleted_vehicles,
                "row_errors": len(result.errors),
            },
        )
        return result

    async def _write(self, vehicles: list[Vehicle], clear_existing: bool) -> int:
        start = time.perf_counter()
        deleted = 0
        try:
            if clear_existing:
                await self.parts.delete_all_vehicle_links()
                await self.parts.detach_legacy_vehicles()
                deleted = await self.vehicles.delete_all()

            await self.vehicles.add_many(vehicles)
            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            log_database_operation(
                "insert",
                Vehicle.__tablename__,
                (time.perf_counter() - start) * 1000,
                success=False,
                error=str(e),
            )
            raise PostgresException(
                message="Arac aktarimi geri alindi.",
                details={"clear_existing": clear_existing},
                original_error=e,
            ) from e

        log_database_operation(
            "insert",
            Vehicle.__tablename__,
            (time.perf_counter() - start) * 1000,
            rows_affected=len(vehicles),
        )
        return deleted
