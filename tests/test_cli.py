from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import pytest

from reconcile import build_options, main, parse_args
from inventory_reconcile.models import HeaderSearch, ReportMode
from inventory_reconcile.schema import MSG_ENGINE_UNAVAILABLE


def _write_workbook(path: Path, rows: list[list[object]]) -> None:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, header=False, index=False)


@pytest.fixture()
def workbooks(tmp_path: Path) -> tuple[Path, Path]:
    path_a = tmp_path / "a.xlsx"
    path_b = tmp_path / "b.xlsx"
    _write_workbook(path_a, [["貨號", "庫存數量"], ["A1", 10], ["A1", 5], ["B2", 8]])
    _write_workbook(
        path_b,
        [
            ["同興庫存報表", ""],
            ["貨品代號", ""],
            ["", "副單位數量"],
            ["A1", 15],
        ],
    )
    return path_a, path_b


def test_build_options_overrides_source_b_only() -> None:
    args = parse_args(
        [
            "--source-a",
            "a.xlsx",
            "--source-b",
            "b.xlsx",
            "--header-search",
            "strict",
            "--report-mode",
            "mismatches_only",
            "--data-start-row",
            "9",
        ]
    )

    options = build_options(args)

    assert options.report_mode == ReportMode.MISMATCHES_ONLY
    assert options.source_b.header_search == HeaderSearch.STRICT
    assert options.source_b.data_start_row == 9
    assert options.source_a.header_search == HeaderSearch.STRICT
    assert options.source_a.search_window == 1


def test_main_prints_summary_and_writes_report(
    workbooks: tuple[Path, Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path_a, path_b = workbooks
    report = tmp_path / "report.csv"

    code = main(["--source-a", str(path_a), "--source-b", str(path_b), "--report-path", str(report)])

    out = capsys.readouterr().out
    assert code == 0
    assert "總品項 2 項，異常品項 1 項" in out
    df = pd.read_csv(report, encoding="utf-8-sig")
    assert df.iloc[:, 0].tolist() == ["B2", "A1"]


def test_main_reports_failure_message(workbooks: tuple[Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
    path_a, path_b = workbooks

    code = main(["--source-a", str(path_a), "--source-b", str(path_b), "--header-search", "strict"])

    assert code == 1
    assert "找不到同興表的標題列" in capsys.readouterr().err


def test_main_reports_missing_xls_engine(
    workbooks: tuple[Path, Path], tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    path_a, _ = workbooks
    path_b = tmp_path / "b.xls"
    path_b.write_bytes(b"legacy workbook")
    monkeypatch.setitem(sys.modules, "xlrd", None)

    code = main(["--source-a", str(path_a), "--source-b", str(path_b)])

    err = capsys.readouterr().err
    assert code == 1
    assert MSG_ENGINE_UNAVAILABLE in err
    assert "xlrd" in err
    assert "Traceback" not in err


def test_main_runs_xlsx_without_xlrd(
    workbooks: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    path_a, path_b = workbooks
    monkeypatch.setitem(sys.modules, "xlrd", None)

    code = main(["--source-a", str(path_a), "--source-b", str(path_b)])

    assert code == 0
    assert "總品項 2 項，異常品項 1 項" in capsys.readouterr().out


def test_main_reports_unreadable_path(
    workbooks: tuple[Path, Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path_a, _ = workbooks
    folder = tmp_path / "folder.xlsx"
    folder.mkdir()

    code = main(["--source-a", str(path_a), "--source-b", str(folder)])

    assert code == 1
    assert "比對失敗" in capsys.readouterr().err
