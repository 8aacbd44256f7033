#!/usr/bin/env python3
"""
Generates sample-data/shift_jis_orders.csv, a Shift_JIS encoded CSV as
exported by older Japanese office software.

Run from the repo root:
    python sample-data/generate_shift_jis.py

Values baked in:
    - Japanese product and customer names (needs transcoding)
    - Zero-padded item codes and postal codes
    - A quoted field containing a comma
"""

from pathlib import Path

OUTPUT = Path(__file__).parent / "shift_jis_orders.csv"

ROWS = [
    ["受注番号", "顧客名", "商品コード", "郵便番号", "備考"],
    ["1001", "山田商店", "000123", "0600001", "至急"],
    ["1002", "株式会社さくら", "004560", "0010010", '"午前中, 指定"'],
    ["1003", "田中工業", "078900", "1000001", "再送"],
    ["1004", "鈴木電機", "000001", "0200022", "請求書同封"],
]

text = "\r\n".join(",".join(row) for row in ROWS[:1] + ROWS[1:] * 10) + "\r\n"
OUTPUT.write_bytes(text.encode("shift_jis"))
print(f"Wrote {OUTPUT}")
