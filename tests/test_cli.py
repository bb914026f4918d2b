"""
Tests for the command-line entry point and its exit codes.
"""

import json
import logging

import pytest

import main as cli
from conftest import voucher_node


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Default output paths and .env lookup stay inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    yield
    logging.getLogger("invoice_voucher").handlers.clear()


class TestMain:
    """Tests for main()."""

    def test_record_conversion(self, record_file, tmp_path):
        xml_path = tmp_path / "voucher.xml"
        json_path = tmp_path / "response.json"

        code = cli.main([
            "--record", str(record_file),
            "--output", str(xml_path),
            "--json-output", str(json_path),
            "--quiet",
        ])

        assert code == 0
        node = voucher_node(xml_path.read_text(encoding="utf-8"))
        assert node.findtext("VOUCHERNUMBER") == "INV-42"
        assert json.loads(json_path.read_text(encoding="utf-8"))["success"] is True

    def test_default_output_directory(self, record_file, tmp_path):
        assert cli.main(["--record", str(record_file), "--quiet"]) == 0
        assert (tmp_path / "outputs" / "INV-42.xml").exists()

    def test_minimal_mode_without_company(self, tmp_path):
        record = tmp_path / "header_only.json"
        record.write_text(json.dumps({"type": "Sales", "invoice_number": "S-7", "total_amount": 10}))
        xml_path = tmp_path / "voucher.xml"

        code = cli.main([
            "--record", str(record),
            "--output", str(xml_path),
            "--mode", "minimal",
            "--no-company",
            "--quiet",
        ])

        assert code == 0
        xml = xml_path.read_text(encoding="utf-8")
        assert "SVCURRENTCOMPANY" not in xml
        assert voucher_node(xml).find("NARRATION") is not None

    def test_custom_config(self, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text(
            "voucher:\n"
            "  default_party_ledger: Walk-in Customer\n"
            "output:\n"
            "  write_json: false\n",
            encoding="utf-8"
        )
        record = tmp_path / "no_supplier.json"
        record.write_text(json.dumps({
            "type": "Sales",
            "invoice_number": "S-8",
            "line_items": [{"description": "Tea", "quantity": 2, "rate": 5, "amount": 10}],
            "total_amount": 10,
        }))
        xml_path = tmp_path / "voucher.xml"

        code = cli.main(["--config", str(config), "--record", str(record), "--output", str(xml_path), "--quiet"])

        assert code == 0
        assert voucher_node(xml_path.read_text(encoding="utf-8")).findtext("PARTYLEDGERNAME") == "Walk-in Customer"

    def test_missing_record_file(self, tmp_path, capsys):
        assert cli.main(["--record", str(tmp_path / "missing.json"), "--quiet"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_malformed_record(self, tmp_path, capsys):
        record = tmp_path / "bad.json"
        record.write_text(json.dumps({"line_items": [{"description": "x", "quantity": 1, "rate": 1, "amount": "abc"}]}))

        assert cli.main(["--record", str(record), "--quiet"]) == 1
        assert "line_items[0].amount" in capsys.readouterr().err

    def test_missing_api_key(self, pdf_file, capsys):
        assert cli.main(["--input", str(pdf_file), "--quiet"]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_missing_config_file(self, record_file, tmp_path):
        assert cli.main(["--config", str(tmp_path / "nope.yaml"), "--record", str(record_file)]) == 1

    def test_keyboard_interrupt(self, record_file, monkeypatch):
        def interrupted(**kwargs):
            raise KeyboardInterrupt

        monkeypatch.setattr(cli, "run_conversion", interrupted)
        assert cli.main(["--record", str(record_file), "--quiet"]) == 130

    def test_source_is_required(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 2


class TestRunConversion:
    """Tests for the programmatic entry point."""

    def test_requires_exactly_one_source(self, record_file):
        with pytest.raises(ValueError):
            cli.run_conversion()
        with pytest.raises(ValueError):
            cli.run_conversion(input_path="a.pdf", record_path=str(record_file))

    def test_returns_pipeline_result(self, record_file, tmp_path):
        result = cli.run_conversion(record_path=str(record_file), output_path=str(tmp_path / "v.xml"))

        assert result.compilation.voucher.is_balanced()
        assert result.output_paths["xml_path"] == str(tmp_path / "v.xml")
