#!/usr/bin/env python3
from __future__ import annotations

import re
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

import pandas as pd
import requests
import streamlit as st

from csv_clip.config import ConvertOptions
from csv_clip.converter import ConversionError, convert_text
from csv_clip.escaper import EscapePolicy
from csv_clip.loader import EncodingError, decode_bytes
from csv_clip.reader import READER_MODES, iter_records
from csv_clip.tracker import SectionTracker
from csv_clip.writer import LINE_ENDINGS

MAX_REMOTE_FILE_MB = 50
MAX_REMOTE_FILE_BYTES = MAX_REMOTE_FILE_MB * 1024 * 1024
PREVIEW_ROWS = 200


def ensure_state() -> None:
    st.session_state.setdefault("result", None)
    st.session_state.setdefault("public_url_input", "")


def normalize_public_url(raw_url: str) -> str:
    parsed = urlparse(raw_url.strip())
    if parsed.scheme not in {"http", "https"}:
        raise ValueError("URL must start with http:// or https://")

    host = parsed.netloc.lower()
    path = parsed.path
    query = parse_qs(parsed.query, keep_blank_values=True)

    if host == "github.com" and "/blob/" in path:
        owner_repo, blob_path = path.lstrip("/").split("/blob/", 1)
        return f"https://raw.githubusercontent.com/{owner_repo}/{blob_path}"

    if "dropbox.com" in host:
        query["dl"] = ["1"]
        return urlunparse(parsed._replace(query=urlencode(query, doseq=True)))

    if host == "drive.google.com":
        match = re.search(r"/file/d/([^/]+)", path)
        if match:
            return f"https://drive.google.com/uc?export=download&id={match.group(1)}"
        if "id" in query:
            return f"https://drive.google.com/uc?export=download&id={query['id'][0]}"

    return raw_url.strip()


def remote_filename(raw_url: str, response: requests.Response) -> str:
    content_disposition = response.headers.get("content-disposition", "")
    match = re.search(r'filename="([^"]+)"|filename=([^;]+)', content_disposition, re.I)
    if match:
        for group in match.groups():
            if group:
                return Path(group.strip().strip('"')).name
    redirected = response.url or raw_url
    return Path(urlparse(redirected).path).name or "downloaded.csv"


def fetch_remote_source(raw_url: str) -> dict:
    url = normalize_public_url(raw_url)
    response = requests.get(url, timeout=60, allow_redirects=True, stream=True)
    try:
        response.raise_for_status()
        chunks: list[bytes] = []
        downloaded = 0
        for chunk in response.iter_content(chunk_size=1024 * 1024):
            if not chunk:
                continue
            downloaded += len(chunk)
            if downloaded > MAX_REMOTE_FILE_BYTES:
                raise ValueError(f"Remote file is larger than {MAX_REMOTE_FILE_MB} MB.")
            chunks.append(chunk)
    finally:
        response.close()
    return {"name": remote_filename(raw_url, response), "bytes": b"".join(chunks)}


def records_preview(text: str, options: ConvertOptions, limit: int = PREVIEW_ROWS) -> pd.DataFrame:
    """Parsed (and split) records as a table; short rows are padded with blanks."""
    tracker = SectionTracker(options.sections) if options.sections.enabled else None
    rows: list[list[str]] = []
    for _, record in iter_records(text, mode=options.reader):
        if tracker is not None:
            record = tracker.apply(record)
        rows.append(record)
        if len(rows) >= limit:
            break
    width = max((len(row) for row in rows), default=0)
    padded = [row + [""] * (width - len(row)) for row in rows]
    return pd.DataFrame(padded, columns=[f"col {index + 1}" for index in range(width)], dtype=str)


def convert_source(name: str, raw: bytes, options: ConvertOptions) -> dict:
    loaded = decode_bytes(raw)
    result = convert_text(loaded["raw_text"], options)
    return {
        "name": name,
        "tsv": result.text,
        "metrics": result.as_metrics(),
        "encoding": loaded["encoding_info"],
        "transcoded": loaded["transcoded"],
        "warnings": loaded["warnings"],
        "preview": records_preview(loaded["raw_text"], options),
    }


def render_options() -> ConvertOptions:
    columns = st.columns(3)
    policy = columns[0].selectbox(
        "Escaping",
        options=[policy.value for policy in EscapePolicy],
        help="zero-preserve wraps only values like 007; formula-all wraps every value.",
    )
    reader = columns[1].selectbox("Reader", options=list(READER_MODES))
    line_ending = columns[2].selectbox("Line ending", options=sorted(LINE_ENDINGS))
    options = ConvertOptions(policy=policy, reader=reader, line_ending=line_ending)
    options.sections.enabled = st.checkbox(
        f"Split the '{options.sections.split_column}' column inside detail sections",
        value=False,
    )
    return options


def render_result(item: dict) -> None:
    st.subheader(item["name"])
    metrics = st.columns(3)
    metrics[0].metric("Records", item["metrics"]["records"])
    metrics[1].metric("Wrapped fields", item["metrics"]["wrapped_fields"])
    metrics[2].metric("Split rows", item["metrics"]["split_rows"])
    encoding = item["encoding"]
    st.caption(
        f"Detected encoding: {encoding['detected']} (confidence {encoding['confidence']})"
        + (", converted from Shift_JIS" if item["transcoded"] else "")
    )
    for warning in item["warnings"]:
        st.warning(warning)
    st.dataframe(item["preview"], width="stretch")
    st.caption("Use the copy button on the block below, then paste into the spreadsheet.")
    st.code(item["tsv"], language=None)
    st.download_button(
        "Download .tsv",
        data=item["tsv"].encode("utf-8"),
        file_name=f"{Path(item['name']).stem}.tsv",
        mime="text/tab-separated-values",
        width="stretch",
    )


def main() -> None:
    st.set_page_config(page_title="csv-clip", page_icon="📋", layout="wide", initial_sidebar_state="collapsed")
    ensure_state()

    st.title("csv-clip")
    st.caption("Turn a CSV file into text that pastes into a spreadsheet without losing leading zeros or quotes.")

    upload = st.file_uploader("Upload a CSV file", type=["csv", "txt"], accept_multiple_files=False)
    st.text_input("…or a public file URL", key="public_url_input")
    options = render_options()
    submit = st.button("Convert", type="primary", width="stretch")

    if submit:
        source: Optional[dict] = None
        try:
            if upload is not None:
                source = {"name": upload.name, "bytes": upload.getvalue()}
            elif st.session_state["public_url_input"].strip():
                source = fetch_remote_source(st.session_state["public_url_input"])
            else:
                st.info("Upload a file or paste a URL first.")
            if source is not None:
                st.session_state["result"] = convert_source(source["name"], source["bytes"], options)
        except (EncodingError, ConversionError, ValueError, requests.RequestException) as exc:
            st.session_state["result"] = None
            st.error(str(exc))

    if st.session_state.get("result"):
        render_result(st.session_state["result"])


if __name__ == "__main__":
    main()
