########## ini_config.py

import os
import shlex
from configparser import ConfigParser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


INI_DEFAULT_NAME = "SPOPreCheck.ini"
INI_ENV_VAR = "PRECHECK_INI"
PASSWORD_ENV_VAR = "PRECHECK_PASSWORD"


@dataclass(frozen=True)
class AppSettings:
    source_list_path: Path
    report_path: Path
    consolidated_output_file: Path
    log_file: Optional[Path]

    destination_url: str
    username: str
    password: str = field(repr=False)

    source_column: str = "SourceSite"
    delimiter: str = ","

    engine_command: tuple[str, ...] = ()
    engine_timeout_seconds: int = 1800

    default_scheme: str = "https"


class IniConfig:
    """
    Adapter around ConfigParser and filesystem resolution.
    Keeps INI handling out of the services. A missing INI file is not an
    error: every option has a built-in default.
    """

    def __init__(self, ini_path: Path):
        self._ini_path = ini_path
        self._cfg = ConfigParser(interpolation=None)
        read_ok = self._cfg.read(str(ini_path), encoding="utf-8-sig")
        self.found = bool(read_ok)

    @property
    def ini_path(self) -> Path:
        return self._ini_path

    @staticmethod
    def from_env_or_default(explicit: Optional[str] = None) -> "IniConfig":
        ini_raw = (explicit or os.getenv(INI_ENV_VAR) or "").strip()
        # Neither --config nor PRECHECK_INI: look next to the package
        ini_path = Path(ini_raw) if ini_raw else (Path(__file__).resolve().parents[2] / INI_DEFAULT_NAME)
        return IniConfig(ini_path)

    def _get(self, section: str, key: str, default: str = "") -> str:
        return (self._cfg.get(section, key, fallback=default) or "").strip()

    def _cfg_path(self, section: str, key: str, default: str) -> Path:
        """
        Reads a filesystem path from INI and resolves it.
        Tries [paths] and [path] interchangeably for convenience.
        """
        sections_to_try = [section]
        if section == "paths":
            sections_to_try.append("path")

        raw = ""
        for sec in sections_to_try:
            if self._cfg.has_section(sec):
                raw = self._get(sec, key)
                if raw:
                    break

        raw = os.path.expandvars(os.path.expanduser(raw or default))
        return Path(raw).resolve()

    def load_settings(self) -> AppSettings:
        # Paths
        source_list_path = self._cfg_path("paths", "source_list_path", "sites.csv")
        report_path = self._cfg_path("paths", "report_path", "Reports")
        consolidated_output_file = self._cfg_path("paths", "consolidated_output_file", "ConsolidatedPreCheckReport.xlsx")
        log_file_raw = self._get("paths", "log_file", "PreCheck.log")
        log_file = self._cfg_path("paths", "log_file", log_file_raw) if log_file_raw else None

        # SharePoint
        destination_url = self._get("sharepoint", "destination_url")
        username = self._get("credentials", "username")
        password = os.getenv(PASSWORD_ENV_VAR) or self._get("credentials", "password")

        # Site list
        source_column = self._get("site_list", "source_column", "SourceSite") or "SourceSite"
        delimiter = self._cfg.get("site_list", "delimiter", fallback=",") or ","
        if delimiter.lower() in ("tab", "\\t"):
            delimiter = "\t"

        # Engine
        engine_command = tuple(shlex.split(self._get("engine", "command"), posix=(os.name != "nt")))
        engine_timeout_seconds = self._cfg.getint("engine", "timeout_seconds", fallback=1800)

        default_scheme = self._get("url_normalization", "default_scheme", "https") or "https"

        # Validate
        if engine_timeout_seconds <= 0:
            raise ValueError(f"engine.timeout_seconds must be positive, got {engine_timeout_seconds}")

        return AppSettings(
            source_list_path=source_list_path,
            report_path=report_path,
            consolidated_output_file=consolidated_output_file,
            log_file=log_file,
            destination_url=destination_url,
            username=username,
            password=password,
            source_column=source_column,
            delimiter=delimiter,
            engine_command=engine_command,
            engine_timeout_seconds=engine_timeout_seconds,
            default_scheme=default_scheme,
        )
