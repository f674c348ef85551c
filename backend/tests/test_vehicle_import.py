"""
Tests for vehicle CSV parsing and staging.

Database writes are covered in tests/integration/test_vehicle_import_db.py.
"""

import codecs

import pytest

from autoparts.core.exceptions import ErrorCode, VehicleImportException
from autoparts.services.normalization import normalize_header
from autoparts.services.vehicle_import import (
    BLANK_BRAND_OR_MODEL,
    EMPTY_FILE_MESSAGE,
    INVALID_YEARS,
    MISSING_COLUMNS_MESSAGE,
    NOTHING_TO_IMPORT_MESSAGE,
    CsvColumn,
    build_column_map,
    decode_csv,
    detect_delimiter,
    parse_csv_line,
    parse_year,
    split_lines,
    stage_vehicles,
)


def csv_bytes(*lines: str) -> bytes:
    return "\n".join(lines).encode("utf-8")


class TestHeaderNormalization:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Başlangıç Yılı", "baslangicyili"),
            ("Bitiş_Yılı", "bitisyili"),
            (" Model Adı ", "modeladi"),
            ("Brand-Logo.URL", "brandlogourl"),
            ("MARKA", "marka"),
            ("Görsel", "gorsel"),
            ("İmage URL", "imageurl"),
        ],
    )
    def test_normalize_header(self, header, expected):
        assert normalize_header(header) == expected

    def test_column_map_uses_synonyms(self):
        column_map = build_column_map(["Marka", "Model Adı", "Yıl", "Motor", "Görsel", "Marka Logosu"])
        assert column_map.index(CsvColumn.BRAND) == 0
        assert column_map.index(CsvColumn.MODEL) == 1
        assert column_map.index(CsvColumn.YEAR) == 2
        assert column_map.index(CsvColumn.ENGINE) == 3
        assert column_map.index(CsvColumn.IMAGE_URL) == 4
        assert column_map.index(CsvColumn.BRAND_LOGO_URL) == 5
        assert column_map.index(CsvColumn.START_YEAR) == -1
        assert column_map.has_required

    def test_column_map_without_model(self):
        assert not build_column_map(["Brand", "Year"]).has_required


class TestLineParsing:
    def test_split_lines_handles_every_line_break(self):
        assert split_lines("a\r\nb\rc\nd\n") == ["a", "b", "c", "d"]

    def test_split_lines_empty(self):
        assert split_lines("") == []

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Brand;Model,Year", ";"),
            ("Brand\tModel,Year", "\t"),
            ("Brand,Model,Year", ","),
            ("Brand", ";"),
        ],
    )
    def test_detect_delimiter(self, header, expected):
        assert detect_delimiter(header) == expected

    def test_quoted_delimiter_and_escaped_quote(self):
        line = '"Mercedes-Benz","C 200, AMG",2019,"1.5 ""EQ Boost"""'
        assert parse_csv_line(line, ",") == ["Mercedes-Benz", "C 200, AMG", "2019", '1.5 "EQ Boost"']

    def test_trailing_delimiter_emits_empty_field(self):
        assert parse_csv_line("Fiat;Egea;", ";") == ["Fiat", "Egea", ""]

    @pytest.mark.parametrize(
        "value,expected",
        [("2016", 2016), (" 2016 ", 2016), ("+2016", 2016), ("0", None), ("-5", None),
         ("20x6", None), ("2016.0", None), ("", None), ("99999999999", None)],
    )
    def test_parse_year(self, value, expected):
        assert parse_year(value) == expected


class TestDecoding:
    def test_utf8_bom_is_stripped(self):
        content = codecs.BOM_UTF8 + "Marka;Model;Yıl\nFiat;Egea;2016".encode("utf-8")
        assert decode_csv(content).startswith("Marka")

    def test_utf16_bom(self):
        content = codecs.BOM_UTF16_LE + "Brand,Model,Year\nŞahin,Tofaş,1990".encode("utf-16-le")
        staged = stage_vehicles(content)
        assert staged.vehicles[0].brand == "Şahin"
        assert staged.vehicles[0].model == "Tofaş"

    def test_invalid_utf8_is_replaced(self):
        text = decode_csv(b"Brand;Model;Year\nFiat;Egea\xff;2016")
        assert "\ufffd" in text


class TestStageVehicles:
    """Tests for row validation, normalization and de-duplication."""

    def test_turkish_headers_with_range(self):
        staged = stage_vehicles(csv_bytes(
            "Marka;Model;Başlangıç Yılı;Bitiş Yılı;Motor",
            "Fiat;Egea;2016;2020;1.4 Fire",
        ))
        vehicle = staged.vehicles[0]
        assert (vehicle.brand, vehicle.model, vehicle.engine) == ("Fiat", "Egea", "1.4 Fire")
        assert (vehicle.year, vehicle.start_year, vehicle.end_year) == (2016, 2016, 2020)
        assert staged.skipped == 0
        assert staged.errors == []

    def test_reversed_range_is_swapped(self):
        staged = stage_vehicles(csv_bytes("Brand,Model,StartYear,EndYear", "Fiat,Egea,2020,2016"))
        vehicle = staged.vehicles[0]
        assert (vehicle.year, vehicle.start_year, vehicle.end_year) == (2016, 2016, 2020)

    def test_model_year_fills_both_bounds(self):
        staged = stage_vehicles(csv_bytes("Brand,Model,Year", "Renault,Clio,2012"))
        vehicle = staged.vehicles[0]
        assert (vehicle.year, vehicle.start_year, vehicle.end_year) == (2012, 2012, 2012)

    def test_model_year_fills_missing_bound(self):
        staged = stage_vehicles(csv_bytes("Brand;Model;Year;EndYear", "Toyota;Corolla;2015;2019"))
        vehicle = staged.vehicles[0]
        assert (vehicle.start_year, vehicle.end_year) == (2015, 2019)

    def test_fields_are_trimmed_and_blank_optionals_are_null(self):
        staged = stage_vehicles(csv_bytes(
            "Brand;Model;Year;Engine;ImageUrl",
            "  Fiat ; Egea  ; 2016 ;   ;  ",
        ))
        vehicle = staged.vehicles[0]
        assert (vehicle.brand, vehicle.model) == ("Fiat", "Egea")
        assert vehicle.engine is None
        assert vehicle.image_url is None

    def test_quoted_fields(self):
        staged = stage_vehicles(csv_bytes(
            "Brand,Model,Year,Engine",
            '"Mercedes-Benz","C 200, AMG",2019,"1.5 ""EQ Boost"""',
        ))
        vehicle = staged.vehicles[0]
        assert vehicle.model == "C 200, AMG"
        assert vehicle.engine == '1.5 "EQ Boost"'

    def test_tab_delimited(self):
        staged = stage_vehicles(csv_bytes("Brand\tModel\tYear", "Ford\tFocus\t2010"))
        assert staged.vehicles[0].model == "Focus"

    def test_duplicates_are_skipped_case_insensitively(self):
        staged = stage_vehicles(csv_bytes(
            "Brand;Model;Year;Engine",
            "Fiat;Egea;2016;1.4",
            "FIAT;egea;2016;1.4",
            "Fiat;Egea;2016;1.6",
        ))
        assert len(staged.vehicles) == 2
        assert staged.skipped == 1

    def test_blank_brand_or_model_is_a_row_error(self):
        staged = stage_vehicles(csv_bytes(
            "Brand;Model;Year",
            "Fiat;Egea;2016",
            ";Clio;2012",
        ))
        assert len(staged.vehicles) == 1
        assert staged.errors == [f"Satir 3: {BLANK_BRAND_OR_MODEL}"]

    @pytest.mark.parametrize("years", ["abc;2016", "0;2016", "2016;-1", ";"])
    def test_invalid_years_are_row_errors(self, years):
        staged = stage_vehicles(csv_bytes(
            "Brand;Model;StartYear;EndYear",
            "Fiat;Egea;2016;2020",
            f"Fiat;Linea;{years}",
        ))
        assert len(staged.vehicles) == 1
        assert staged.errors == [f"Satir 3: {INVALID_YEARS}"]

    def test_row_numbers_count_blank_lines(self):
        staged = stage_vehicles(csv_bytes(
            "Brand;Model;Year",
            "Fiat;Egea;2016",
            "",
            "Renault;;2012",
        ))
        assert staged.errors == [f"Satir 4: {BLANK_BRAND_OR_MODEL}"]

    def test_row_errors_are_capped(self):
        lines = ["Brand;Model;Year", "Fiat;Egea;2016"] + [f"Fiat;Egea;bad{i}" for i in range(5)]
        staged = stage_vehicles(csv_bytes(*lines), max_row_errors=2)
        assert len(staged.errors) == 2
        assert staged.rejected == 5
        assert staged.errors[0].startswith("Satir 3:")
        assert len(staged.vehicles) == 1

    def test_short_row_is_tolerated(self):
        staged = stage_vehicles(csv_bytes("Brand;Model;Year;Engine", "Fiat;Egea;2016"))
        assert staged.vehicles[0].engine is None


class TestStageVehiclesFailures:
    """File-level failures raise VehicleImportException."""

    @pytest.mark.parametrize("content", [b"", codecs.BOM_UTF8, b"\n\n"])
    def test_empty_file(self, content):
        with pytest.raises(VehicleImportException) as exc_info:
            stage_vehicles(content)
        assert exc_info.value.message in (EMPTY_FILE_MESSAGE, MISSING_COLUMNS_MESSAGE)

    def test_empty_file_message(self):
        with pytest.raises(VehicleImportException) as exc_info:
            stage_vehicles(b"")
        assert exc_info.value.message == EMPTY_FILE_MESSAGE
        assert exc_info.value.code == ErrorCode.VEHICLE_IMPORT_ERROR
        assert exc_info.value.status_code == 400

    def test_missing_model_column(self):
        with pytest.raises(VehicleImportException) as exc_info:
            stage_vehicles(csv_bytes("Brand;Year", "Fiat;2016"))
        assert exc_info.value.message == MISSING_COLUMNS_MESSAGE

    def test_header_only(self):
        with pytest.raises(VehicleImportException) as exc_info:
            stage_vehicles(csv_bytes("Brand;Model;Year"))
        assert exc_info.value.message == NOTHING_TO_IMPORT_MESSAGE

    def test_no_valid_rows_reports_row_errors(self):
        with pytest.raises(VehicleImportException) as exc_info:
            stage_vehicles(csv_bytes("Brand;Model;Year", "Fiat;;2016", "Fiat;Egea;yok"))
        exc = exc_info.value
        assert exc.message == NOTHING_TO_IMPORT_MESSAGE
        assert exc.row_errors == [f"Satir 2: {BLANK_BRAND_OR_MODEL}", f"Satir 3: {INVALID_YEARS}"]
        assert exc.details["row_errors"] == exc.row_errors
