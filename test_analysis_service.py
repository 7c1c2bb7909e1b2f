import io
import json

import pytest
from PIL import Image

from phishcheck.cli import EXIT_NO_INPUT, main
from phishcheck.core.text_extractor import TextExtractor
from phishcheck.exceptions import ExtractionError, FileTooLarge, NoInputError, UnsupportedFormat
from phishcheck.services.analysis_service import AnalysisService


def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (20, 20), "white").save(buffer, format="PNG")
    return buffer.getvalue()


PHISHING_TEXT = (
    "From: PayPal Support <no-reply@paypa1-secure.xyz>\n"
    "Ingrese su tarjeta y contraseña para confirmar."
)


@pytest.fixture
def service():
    return AnalysisService(text_extractor=TextExtractor(max_bytes=1024))


# ===== DOCUMENT PIPELINE =====

def test_files_and_pasted_text_are_combined(service):
    analysis = service.analyze_documents(
        [("mail.txt", PHISHING_TEXT.encode("utf-8"), "text/plain")],
        pasted_text="  visit http://bit.ly/abc123  "
    )
    assert [source.name for source in analysis.sources] == ["mail.txt", "pasted text"]
    assert [source.kind for source in analysis.sources] == ["file", "pasted"]
    assert analysis.sources[1].characters == len("visit http://bit.ly/abc123")
    assert analysis.errors == []
    rules = {finding.rule for finding in analysis.result.findings}
    assert {"brand_similarity", "shortener"} <= rules
    assert analysis.result.urls == ["http://bit.ly/abc123"]


def test_pasted_text_only(service):
    analysis = service.analyze_documents([], pasted_text=PHISHING_TEXT)
    assert [source.kind for source in analysis.sources] == ["pasted"]
    assert analysis.result.verdict.tier == "bad"


def test_failing_file_does_not_abort_other_sources(service):
    analysis = service.analyze_documents(
        [
            ("setup.exe", b"MZ", "application/octet-stream"),
            ("huge.txt", b"x" * 2048, "text/plain"),
            ("notes.txt", b"Reunion el jueves", "text/plain"),
        ]
    )
    assert [source.name for source in analysis.sources] == ["notes.txt"]
    assert [(error.name, error.error) for error in analysis.errors] == [
        ("setup.exe", "UnsupportedFormat"),
        ("huge.txt", "FileTooLarge"),
    ]
    assert analysis.result.score == 10


def test_oversized_image_does_not_abort_other_sources(service, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
    analysis = service.analyze_documents([
        ("huge.png", png_bytes(), "image/png"),
        ("notes.txt", b"Reunion el jueves", "text/plain"),
    ])
    assert [(error.name, error.error) for error in analysis.errors] == [("huge.png", "ExtractionError")]
    assert [source.name for source in analysis.sources] == ["notes.txt"]
    assert analysis.result.score == 10


def test_read_failures_are_reported(service):
    analysis = service.analyze_documents(
        [], pasted_text="hola",
        read_failures=[ExtractionError("gone.pdf", "Cannot read file: No such file or directory")]
    )
    assert [(error.name, error.error) for error in analysis.errors] == [("gone.pdf", "ExtractionError")]
    assert [source.kind for source in analysis.sources] == ["pasted"]


def test_no_input_raises(service):
    with pytest.raises(NoInputError) as exc:
        service.analyze_documents([], pasted_text="   ")
    assert exc.value.failures == []


def test_only_failures_raises_with_failures(service):
    with pytest.raises(NoInputError) as exc:
        service.analyze_documents([
            ("a.zip", b"PK", "application/zip"),
            ("b.txt", b"y" * 4096, None),
        ])
    assert [type(failure) for failure in exc.value.failures] == [UnsupportedFormat, FileTooLarge]


def test_empty_file_is_still_listed(service):
    analysis = service.analyze_documents([("empty.txt", b"", "text/plain")])
    assert analysis.sources[0].characters == 0
    assert analysis.result.score == 10


def test_analyze_text_matches_core(service):
    assert service.analyze_text(PHISHING_TEXT).score == 100
    assert service.analyze_text("").score == 10


# ===== CLI =====

def test_cli_prints_json(tmp_path, capsys):
    path = tmp_path / "mail.txt"
    path.write_text(PHISHING_TEXT, encoding="utf-8")

    assert main([str(path), "--text", "http://bit.ly/abc123"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["result"]["verdict"]["tier"] == "bad"
    assert [source["name"] for source in output["sources"]] == ["mail.txt", "pasted text"]
    assert output["errors"] == []


def test_cli_without_input(capsys):
    assert main([]) == EXIT_NO_INPUT
    assert "Error:" in capsys.readouterr().err


def test_cli_reports_unreadable_file(tmp_path, capsys):
    missing = tmp_path / "gone.eml"
    assert main([str(missing), "--text", "hola"]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["errors"][0]["name"] == "gone.eml"
    assert output["errors"][0]["error"] == "ExtractionError"


def test_cli_unreadable_file_only(tmp_path, capsys):
    assert main([str(tmp_path / "gone.eml")]) == EXIT_NO_INPUT
    assert "gone.eml" in capsys.readouterr().err


def test_cli_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("Reunion el jueves"))
    assert main(["--stdin", "--indent", "0"]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["result"]["score"] == 10
