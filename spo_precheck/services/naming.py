from __future__ import annotations

import re
from datetime import datetime

ARTIFACT_EXTENSION = "xlsx"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def sanitize_title(title: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "_", title or "")


def artifact_name(title: str, created: datetime, *, fallback: str = "", extension: str = ARTIFACT_EXTENSION) -> str:
    """
    {sanitizedSiteTitle}_PreCheck_{yyyyMMdd_HHmmss}.{ext}

    A blank title is replaced by `fallback` (usually the site URL) before sanitizing.
    """
    base = (title or "").strip() or (fallback or "").strip()
    return f"{sanitize_title(base)}_PreCheck_{created.strftime(TIMESTAMP_FORMAT)}.{extension}"
