from __future__ import annotations

# 欄位標題沿用兩個來源系統匯出的原始文字。
SOURCE_A_NAME = "source_a"
SOURCE_A_LABEL = "全日"
SOURCE_A_KEY_COLUMN = "貨號"
SOURCE_A_QTY_COLUMN = "庫存數量"

SOURCE_B_NAME = "source_b"
SOURCE_B_LABEL = "同興"
SOURCE_B_KEY_COLUMN = "貨品代號"
SOURCE_B_QTY_COLUMN = "副單位數量"

# 用於過濾無效貨號
UNDEFINED_KEY = "undefined"

MATCH_EPSILON = 1e-4

# 同興表標題通常落在第 7-8 列，搜尋範圍放寬到 20 列。
DEFAULT_SEARCH_WINDOW = 20
DEFAULT_HEADER_SPAN = 2

STATUS_MATCH = "一致"
STATUS_MISSING_A = "全日缺漏"
STATUS_MISSING_B = "同興缺漏"
STATUS_MISMATCH = "數量不符"

REPORT_COLUMNS: list[str] = [
    "貨號 / 代號",
    "全日 (A)",
    "同興 (B)",
    "差異數",
    "狀態",
]

MSG_MISSING_INPUT = "請確認已上傳「全日」與「同興」兩份 Excel 檔案"
MSG_DECODE_FAILURE = "解析失敗，請確認檔案內容是否正確"
MSG_ENGINE_UNAVAILABLE = "無法載入 Excel 處理元件，請確認已安裝相關套件"
