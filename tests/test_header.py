from __future__ import annotations

import pytest

from inventory_reconcile.errors import HeaderNotFound
from inventory_reconcile.header import locate_header
from inventory_reconcile.io_utils import cell_from_value
from inventory_reconcile.models import ColumnIndex, HeaderSearch, RawSheet


def _sheet(rows: list[list[object]]) -> RawSheet:
    return tuple(tuple(cell_from_value(value) for value in row) for row in rows)


def _split_header_sheet() -> RawSheet:
    # 同興表：前 6 列為報表抬頭，標題分散在第 7、8 列。
    rows: list[list[object]] = [["同興庫存報表", "", ""]]
    rows += [[f"說明 {i}", "", ""] for i in range(1, 6)]
    rows.append(["貨品代號", "品名", ""])
    rows.append(["", "", "副單位數量"])
    rows.append(["A1", "螺絲", 15])
    return _sheet(rows)


def test_locate_header_finds_single_row_at_top() -> None:
    sheet = _sheet([["貨號", "品名", "庫存數量"], ["A1", "螺絲", 10]])

    index = locate_header(sheet, "貨號", "庫存數量", search=HeaderSearch.STRICT, window=1)

    assert index == ColumnIndex(header_row_index=0, key_column_index=0, qty_column_index=2)
    assert index.first_data_row == 1


def test_locate_header_trims_labels_and_is_case_sensitive() -> None:
    sheet = _sheet([["title"], ["  Code ", "QTY"], ["code", "Qty"]])

    index = locate_header(sheet, "code", "Qty", search=HeaderSearch.STRICT)
    assert index.header_row_index == 2

    with pytest.raises(HeaderNotFound):
        locate_header(sheet, "CODE", "qty", search=HeaderSearch.STRICT)


def test_locate_header_prefers_first_row_with_all_labels() -> None:
    sheet = _sheet(
        [
            ["貨品代號", "", ""],
            ["說明", "", ""],
            ["", "貨品代號", "副單位數量"],
            ["貨品代號", "副單位數量", ""],
        ]
    )

    index = locate_header(sheet, "貨品代號", "副單位數量")

    assert (index.header_row_index, index.key_column_index, index.qty_column_index) == (2, 1, 2)


def test_windowed_search_joins_labels_split_across_rows() -> None:
    index = locate_header(_split_header_sheet(), "貨品代號", "副單位數量", source="同興")

    assert index.header_row_index == 7
    assert index.key_column_index == 0
    assert index.qty_column_index == 2
    assert index.first_data_row == 8


def test_strict_search_rejects_split_labels() -> None:
    with pytest.raises(HeaderNotFound) as excinfo:
        locate_header(
            _split_header_sheet(),
            "貨品代號",
            "副單位數量",
            source="同興",
            search=HeaderSearch.STRICT,
        )

    assert excinfo.value.source == "同興"
    assert set(excinfo.value.missing) == {"貨品代號", "副單位數量"}
    assert "同興" in str(excinfo.value)


def test_fixed_data_start_row_overrides_last_label_row() -> None:
    index = locate_header(_split_header_sheet(), "貨品代號", "副單位數量", data_start_row=9)

    assert index.header_row_index == 7
    assert index.first_data_row == 9


def test_windowed_search_respects_span() -> None:
    sheet = _sheet([["貨品代號", ""], ["", ""], ["", "副單位數量"], ["A1", 1]])

    with pytest.raises(HeaderNotFound):
        locate_header(sheet, "貨品代號", "副單位數量", span=2)

    index = locate_header(sheet, "貨品代號", "副單位數量", span=3)
    assert index.header_row_index == 2


def test_header_outside_window_is_not_found() -> None:
    rows: list[list[object]] = [[f"說明 {i}", ""] for i in range(25)]
    rows.append(["貨品代號", "副單位數量"])

    with pytest.raises(HeaderNotFound) as excinfo:
        locate_header(_sheet(rows), "貨品代號", "副單位數量", source="同興", window=20)

    assert excinfo.value.missing == ("貨品代號", "副單位數量")


def test_missing_label_is_reported() -> None:
    sheet = _sheet([["貨號", "品名"], ["A1", "螺絲"]])

    with pytest.raises(HeaderNotFound) as excinfo:
        locate_header(sheet, "貨號", "庫存數量", source="全日")

    assert excinfo.value.missing == ("庫存數量",)
    assert "庫存數量" in str(excinfo.value)


def test_empty_sheet_raises_header_not_found() -> None:
    with pytest.raises(HeaderNotFound):
        locate_header((), "貨號", "庫存數量")


def test_header_not_found_message_without_source() -> None:
    with pytest.raises(HeaderNotFound) as excinfo:
        locate_header((), "貨號", "庫存數量")

    assert str(excinfo.value).startswith("找不到標題列")
