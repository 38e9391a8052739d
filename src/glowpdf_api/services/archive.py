from __future__ import annotations

import time
import zipfile
from dataclasses import dataclass
from io import BytesIO
from pathlib import PurePath


@dataclass(frozen=True)
class NamedFile:
    filename: str
    data: bytes


def file_stem(filename: str | None, default: str = "document") -> str:
    if not filename:
        return default
    name = PurePath(filename.replace("\\", "/")).name
    if name.lower().endswith(".pdf"):
        name = name[:-4]
    return name or default


def build_zip(files: list[NamedFile]) -> bytes:
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for item in files:
            archive.writestr(item.filename, item.data)
    return buffer.getvalue()


def download_name(operation: str, original: str | None = None, extension: str = "pdf") -> str:
    """``<operation>-<original>`` when the upload had a name, else a timestamped name."""
    if original:
        name = PurePath(original.replace("\\", "/")).name
        if name:
            return f"{operation}-{name}"
    return f"{operation}-{int(time.time() * 1000)}.{extension}"
