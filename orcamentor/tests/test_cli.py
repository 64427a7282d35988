"""Regression tests for typed CLI handoff, argv isolation and command output."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch

from orcamentor.application import exports
from orcamentor.cli import main as unified_cli
from orcamentor.rendering import DocumentKind
from orcamentor.runtime.paths import get_paths


def _seed_home(home: Path) -> None:
    data = home / "data"
    data.mkdir(parents=True, exist_ok=True)
    (data / "sp_services.json").write_text(
        json.dumps([{"id": "S1", "name": "Pintura", "price": 100, "category": "Manutenção"}]), encoding="utf-8"
    )
    (data / "sp_clients.json").write_text(json.dumps([{"id": "C1", "name": "Maria Souza"}]), encoding="utf-8")
    (data / "sp_quotes.json").write_text(
        json.dumps(
            [
                {
                    "id": "Q1",
                    "clientId": "C1",
                    "items": [{"itemId": "S1", "type": "service", "quantity": 2}],
                    "discount": 0,
                    "status": "enviado",
                    "date": "2024-05-01T09:30:00",
                    "validUntil": "2024-05-16T09:30:00",
                    "total": 200,
                }
            ]
        ),
        encoding="utf-8",
    )


def test_unified_cli_export_handoff_does_not_mutate_sys_argv(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    captured_request: exports.ExportRequest | None = None

    def fake_run(request: exports.ExportRequest) -> exports.ExportResult:
        nonlocal captured_request
        captured_request = request
        return exports.ExportResult(status="exported", path=tmp_path / "out.pdf", size_bytes=10)

    sentinel_argv = ["sentinel", "keep-this"]
    monkeypatch.setattr(sys, "argv", sentinel_argv)
    monkeypatch.setattr(exports, "run_document_export", fake_run)

    exit_code = unified_cli.main(
        ["export", "quote", "Q1", "--watermark-position", "top-left", "--watermark-opacity", "30"]
    )

    assert exit_code == 0
    assert sys.argv == sentinel_argv
    assert captured_request is not None
    assert captured_request.kind is DocumentKind.QUOTE
    assert captured_request.record_id == "Q1"
    assert captured_request.watermark_position == "top-left"
    assert captured_request.watermark_opacity == 30
    assert captured_request.search == ""
    assert captured_request.output_dir is None


def test_export_requires_id_for_quotes(monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    def fake_run(request: exports.ExportRequest) -> exports.ExportResult:
        raise AssertionError("export should not run without an id")

    monkeypatch.setattr(exports, "run_document_export", fake_run)

    assert unified_cli.main(["export", "receipt"]) == 1
    assert "requires an id" in capsys.readouterr().out


def test_export_rejects_bad_opacity() -> None:
    with pytest.raises(SystemExit):
        unified_cli.main(["export", "quote", "Q1", "--watermark-opacity", "150"])


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert unified_cli.main([]) == 1
    assert "Commands:" in capsys.readouterr().out


def test_home_option_points_paths_at_directory(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    home = tmp_path / "elsewhere"
    _seed_home(home)

    exit_code = unified_cli.main(["--home", str(home), "quotes"])

    assert exit_code == 0
    assert get_paths().root == home.resolve()
    out = capsys.readouterr().out
    assert "#Q1" in out
    assert "Maria Souza" in out
    assert "R$ 200,00" in out


def test_quote_status_command_persists(isolated_home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _seed_home(isolated_home)

    assert unified_cli.main(["quote-status", "Q1", "approved"]) == 0
    stored = json.loads((isolated_home / "data" / "sp_quotes.json").read_text(encoding="utf-8"))
    assert stored[0]["status"] == "aprovado"
    assert "Orçamento #Q1: Aprovado" in capsys.readouterr().out

    assert unified_cli.main(["quote-status", "Q1", "rascunho", "--strict"]) == 1
    assert unified_cli.main(["quote-status", "NOPE", "enviado"]) == 1


def test_export_command_writes_file(isolated_home: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _seed_home(isolated_home)
    out_dir = tmp_path / "pdfs"

    assert unified_cli.main(["export", "quote", "Q1", "--output-dir", str(out_dir)]) == 0

    files = list(out_dir.glob("Orcamento_Q1_*.pdf"))
    assert len(files) == 1
    assert files[0].read_bytes().startswith(b"%PDF")
    assert "Saved:" in capsys.readouterr().out


def test_dashboard_command(isolated_home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _seed_home(isolated_home)

    assert unified_cli.main(["dashboard"]) == 0
    out = capsys.readouterr().out
    assert "Faturamento realizado:  R$ 0,00" in out
    assert "Conversão:              0% (0/1)" in out


def test_message_command_offline(isolated_home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _seed_home(isolated_home)

    assert unified_cli.main(["message", "Q1"]) == 0
    assert "Olá, segue o orçamento solicitado." in capsys.readouterr().out
    assert unified_cli.main(["message", "NOPE"]) == 1


def test_improve_command_offline_keeps_description(isolated_home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _seed_home(isolated_home)

    assert unified_cli.main(["improve", "S1", "--apply"]) == 0
    assert "descrição mantida" in capsys.readouterr().out
