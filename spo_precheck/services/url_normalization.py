import re
from dataclasses import dataclass
from urllib.parse import urlsplit


class UrlNormalizer:
    """Strategy interface."""
    def normalize(self, s: str) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class SiteUrlNormalizer(UrlNormalizer):
    """
    Cleans up a SharePoint site URL from the site list.
    Returns "" when the value is blank or cannot be a site URL.
    """
    default_scheme: str = "https"

    def normalize(self, s: str) -> str:
        s = (s or "").strip()
        if not s or re.search(r"\s", s):
            return ""

        if not re.match(r"^[a-z][a-z0-9+.-]*://", s, flags=re.IGNORECASE):
            s = f"{self.default_scheme}://" + s

        try:
            parts = urlsplit(s)
            hostname = parts.hostname
        except ValueError:
            # unbalanced IPv6 brackets
            return ""
        if parts.scheme.lower() not in ("http", "https"):
            return ""
        if not hostname:
            return ""

        return s.rstrip("/")
