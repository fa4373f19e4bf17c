import json

import fitz  # PyMuPDF
import pytest

from dhtracker.ingestion import ingest_labs as IL
from dhtracker.ingestion.utils_pdf import DocumentReadError, extract_pdf_pages, page_text

HEADER = "Status: Final Lab Results Jan 19, 2026 08:59 AM"
PLT_LINES = [
    "Test Name Platelets Result 340 x10**9/L",
    "Reference Range (Units) 140-400 (x10**9/L)",
    "Abnormality -",
]
WBC_LINES = [
    "Test Name Auto WBC Result 6.1 x10**9/L",
    "Reference Range (Units) 4.0-11.0 (x10**9/L)",
    "Abnormality -",
]


def two_page_report(platelets="340"):
    plt = [PLT_LINES[0].replace("340", platelets)] + PLT_LINES[1:]
    return [[HEADER] + plt + ["Page 1 of 2"], WBC_LINES + ["Page 2 of 2"]]


def load(out):
    with open(out, "r", encoding="utf-8") as f:
        return json.load(f)


def test_page_text_joins_fragments_with_single_spaces():
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((36, 72), "  Test Name  ", fontsize=8)
    page.insert_text((36, 86), "Platelets", fontsize=8)
    page.insert_text((300, 300), "Result 340", fontsize=8)
    assert page_text(page) == "Test Name Platelets Result 340"
    doc.close()


def test_extract_pdf_pages(make_pdf):
    fp = make_pdf("labs.pdf", two_page_report())
    pages = extract_pdf_pages(str(fp))
    assert [p["page"] for p in pages] == [1, 2]
    assert pages[0]["text"].startswith(HEADER)
    assert "Test Name Auto WBC Result 6.1" in pages[1]["text"]


def test_unreadable_pdf_raises(tmp_path):
    fp = tmp_path / "broken.pdf"
    fp.write_bytes(b"this is not a pdf")
    with pytest.raises(DocumentReadError):
        extract_pdf_pages(str(fp))


def test_end_to_end_carries_header_date(inbox, make_pdf, tmp_path):
    make_pdf("labs.pdf", two_page_report(), directory=inbox)
    out = tmp_path / "data" / "biomarkers.json"
    n = IL.main(str(inbox), str(out))
    assert n == 2
    series = load(out)
    assert series["events"] == []
    assert series["generatedAt"].endswith("Z")
    assert [(p["name"], p["date"]) for p in series["points"]] == [
        ("Platelets", "2026-01-19"),
        ("WBC", "2026-01-19"),
    ]
    plt = series["points"][0]
    assert plt["value"] == 340
    assert plt["units"] == "x10**9/L"
    assert (plt["refLow"], plt["refHigh"]) == (140, 400)
    assert plt["abnormality"] is None
    assert plt["isCritical"] is False
    assert plt["source"] == "labs.pdf"


def test_first_processed_document_wins_on_overlap(inbox, make_pdf, tmp_path):
    make_pdf("a_labs.pdf", two_page_report("340"), directory=inbox)
    make_pdf("b_labs.pdf", two_page_report("250"), directory=inbox)
    out = tmp_path / "biomarkers.json"
    IL.main(str(inbox), str(out))
    plts = [p for p in load(out)["points"] if p["name"] == "Platelets"]
    assert len(plts) == 1
    assert plts[0]["value"] == 340
    assert plts[0]["source"] == "a_labs.pdf"


def test_scan_inbox_filters_and_sorts(inbox):
    for name in ["b.PDF", "a.pdf", "notes.txt", "export.HTML", "c.csv", "d.htm"]:
        (inbox / name).write_text("x")
    (inbox / "nested.pdf").mkdir()
    assert IL.scan_inbox(str(inbox)) == ["a.pdf", "b.PDF", "c.csv", "d.htm", "export.HTML"]


def test_missing_inbox(tmp_path):
    with pytest.raises(IL.InboxNotFoundError):
        IL.main(str(tmp_path / "nope"), str(tmp_path / "out.json"))
    assert IL.cli(["--src", str(tmp_path / "nope"), "--out", str(tmp_path / "out.json")]) == IL.EXIT_NO_INBOX


def test_empty_inbox_leaves_artifact_untouched(inbox, tmp_path):
    out = tmp_path / "biomarkers.json"
    out.write_text('{"keep": true}')
    (inbox / "readme.txt").write_text("not a lab file")
    assert IL.main(str(inbox), str(out)) is None
    assert load(out) == {"keep": True}
    assert IL.cli(["--src", str(inbox), "--out", str(out)]) == IL.EXIT_OK


def test_unsupported_files_are_skipped(inbox, make_pdf, tmp_path):
    make_pdf("labs.pdf", two_page_report(), directory=inbox)
    (inbox / "export.csv").write_text("name,value\nPlatelets,1\n")
    (inbox / "export.html").write_text("<html></html>")
    out = tmp_path / "biomarkers.json"
    assert IL.main(str(inbox), str(out)) == 2
    assert {p["source"] for p in load(out)["points"]} == {"labs.pdf"}


def test_only_unsupported_files_writes_empty_series(inbox, tmp_path):
    (inbox / "export.csv").write_text("name,value\n")
    out = tmp_path / "biomarkers.json"
    assert IL.main(str(inbox), str(out)) == 0
    assert load(out)["points"] == []


def test_corrupt_document_aborts_run(inbox, make_pdf, tmp_path):
    make_pdf("a_labs.pdf", two_page_report(), directory=inbox)
    (inbox / "b_broken.pdf").write_bytes(b"not a pdf at all")
    out = tmp_path / "biomarkers.json"
    out.write_text('{"keep": true}')
    with pytest.raises(DocumentReadError):
        IL.main(str(inbox), str(out))
    assert load(out) == {"keep": True}
    assert IL.cli(["--src", str(inbox), "--out", str(out)]) == IL.EXIT_FAILED
