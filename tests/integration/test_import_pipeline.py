"""
End-to-end tests: format detection, chunked file import and the CLI.

Run with: pytest -m integration -v
"""

import pytest

from conftest import (
    I2C_CSV,
    analog_chunk_v0,
    analog_chunk_v1,
    analog_waveform_v1,
    digital_chunk_v0,
    digital_chunk_v1,
    legacy_header,
    tagged_v1,
)
from saleae_import.core.errors import SaleaeParseError
from saleae_import.export import main
from saleae_import.importer import ImportConfig, create_reader, import_bytes, import_file
from saleae_import.parsers import (
    BINARY,
    CSV,
    SaleaeBinaryReader,
    SaleaeCsvReader,
    guess_trace_type,
)

pytestmark = pytest.mark.integration


@pytest.fixture
def digital_bin(tmp_path):
    path = tmp_path / "digital.bin"
    path.write_bytes(
        tagged_v1(0, digital_chunk_v1(0, 0.0, [0.5, 1.0]), digital_chunk_v1(1, 2.0, [2.5]))
    )
    return path


@pytest.fixture
def i2c_csv(tmp_path):
    path = tmp_path / "i2c_export.csv"
    path.write_text(I2C_CSV)
    return path


class TestGuessTraceType:
    def test_tagged_binary(self):
        assert guess_trace_type(tagged_v1(0)) == BINARY

    def test_legacy_binary(self):
        assert guess_trace_type(legacy_header(1) + analog_chunk_v0(0.0, 1, 1, [])) == BINARY

    def test_csv_header(self):
        assert guess_trace_type(I2C_CSV.encode()[:40]) == CSV

    def test_csv_with_bom_and_crlf(self):
        assert guess_trace_type(b"\xef\xbb\xbfname,type\r\n") == CSV

    def test_suffix_fallback(self):
        assert guess_trace_type(b"\x00\x01\x02", "capture.BIN") == BINARY
        assert guess_trace_type(b"", "export.csv") == CSV

    def test_csv_after_leading_blank_lines(self):
        assert guess_trace_type(b"\n" + I2C_CSV.encode(), "capture.txt") == CSV
        assert guess_trace_type(b"\xef\xbb\xbf\r\n  \n" + I2C_CSV.encode()) == CSV

    def test_blank_head_uses_suffix(self):
        assert guess_trace_type(b"\n\r\n", "capture.txt") is None
        assert guess_trace_type(b"\n\r\n", "capture.csv") == CSV

    def test_unknown(self):
        assert guess_trace_type(b"\x00\x01\x02\x03") is None
        assert guess_trace_type(b"plain text", "notes.txt") is None


class TestImport:
    def test_import_binary_file(self, digital_bin):
        store = import_file(digital_bin)

        assert len(store.tracks) == 1
        assert [row["ts"] for row in store.counters] == [
            0,
            500_000_000,
            1_000_000_000,
            2_000_000_000,
            2_500_000_000,
        ]

    def test_import_csv_file_in_small_chunks(self, i2c_csv):
        store = import_file(i2c_csv, config=ImportConfig(chunk_size=7))

        assert len(store.slices) == 7
        assert store.slices_frame()["name"][5] == "0x20 W: 0x01 0x02"

    def test_chunk_size_does_not_change_binary_result(self):
        data = tagged_v1(
            1,
            analog_chunk_v1(
                analog_waveform_v1(0.0, 1000.0, 1, [0.5] * 64),
                analog_waveform_v1(1.0, 1000.0, 4, [1.5] * 16),
            ),
        )

        whole = import_bytes(data)
        split = import_bytes(data, config=ImportConfig(chunk_size=5))

        assert split.counters == whole.counters
        assert len(whole.counters) == 80

    def test_legacy_digital_bytes(self):
        store = import_bytes(legacy_header(0) + digital_chunk_v0(1, 0.0, [0.001]))

        assert [(row["ts"], row["value"]) for row in store.counters] == [
            (0, 1.0),
            (1_000_000, 0.0),
        ]

    def test_csv_with_leading_blank_line_is_detected(self, tmp_path):
        path = tmp_path / "capture.txt"
        path.write_text("\n" + I2C_CSV)

        store = import_file(path)

        assert len(store.slices) == 7

    def test_forced_format(self, tmp_path):
        path = tmp_path / "capture.txt"
        path.write_text(I2C_CSV)

        store = import_file(path, config=ImportConfig(trace_format="csv"))

        assert len(store.slices) == 7

    def test_forced_binary_on_csv_fails(self, i2c_csv):
        with pytest.raises(SaleaeParseError, match="Unsupported Saleae header"):
            import_file(i2c_csv, config=ImportConfig(trace_format="binary"))

    def test_unrecognised_input(self):
        with pytest.raises(SaleaeParseError, match="Could not recognise"):
            import_bytes(b"\x00\x01\x02\x03")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Input file not found"):
            import_file(tmp_path / "missing.bin")

    def test_empty_binary_file(self, tmp_path):
        path = tmp_path / "empty.bin"
        path.write_bytes(b"")

        with pytest.raises(SaleaeParseError, match="Empty Saleae binary data"):
            import_file(path)

    def test_empty_csv_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_bytes(b"")

        store = import_file(path)

        assert store.slices == []

    def test_create_reader(self, store):
        assert isinstance(create_reader(BINARY, store), SaleaeBinaryReader)
        assert isinstance(create_reader(CSV, store), SaleaeCsvReader)
        with pytest.raises(ValueError, match="Unknown trace format"):
            create_reader("vcd", store)


class TestCli:
    def test_summary(self, i2c_csv, capsys):
        assert main([str(i2c_csv), "--summary"]) == 0

        out = capsys.readouterr().out
        assert "2 tracks, 0 counters, 7 slices" in out
        assert "0x20 W: 0x01 0x02" in out

    def test_writes_tables(self, digital_bin, tmp_path, capsys):
        out_dir = tmp_path / "tables"

        assert main([str(digital_bin), "--output-dir", str(out_dir), "--table-format", "csv"]) == 0

        assert sorted(p.name for p in out_dir.iterdir()) == [
            "args.csv",
            "counters.csv",
            "slices.csv",
            "tracks.csv",
        ]
        assert "wrote counters" in capsys.readouterr().out

    def test_parse_error(self, tmp_path, capsys):
        path = tmp_path / "bad.bin"
        path.write_bytes(b"<SALEAE>\x05\x00\x00\x00\x00\x00\x00\x00")

        assert main([str(path)]) == 1
        assert "Error: Unsupported Saleae version 5" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.csv")]) == 1
        assert "Input file not found" in capsys.readouterr().out

    def test_bad_chunk_size(self, i2c_csv, capsys):
        assert main([str(i2c_csv), "--chunk-size", "0"]) == 1
        assert "--chunk-size must be positive" in capsys.readouterr().out
