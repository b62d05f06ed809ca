from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from spo_precheck.domain.errors import EngineError, EngineUnavailableError
from spo_precheck.domain.models import Credential, PreCheckResult

logger = logging.getLogger(__name__)

PASSWORD_ENV_VAR = "PRECHECK_ENGINE_PASSWORD"


@dataclass
class SiteConnection:
    """
    Handle returned by PreCheckEngine.connect().
    Usable as a context manager; close() may be called any number of times.
    """
    url: str
    title: str = ""
    credential: Optional[Credential] = field(default=None, repr=False, compare=False)
    closed: bool = field(default=False, compare=False)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            logger.debug("Closed connection to %s", self.url)

    def __enter__(self) -> "SiteConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class PreCheckEngine:
    """Strategy interface for the vendor migration-check engine."""

    def ensure_available(self) -> None:
        raise NotImplementedError

    def connect(self, url: str, credential: Credential) -> SiteConnection:
        raise NotImplementedError

    def check(self, source: SiteConnection, destination: SiteConnection) -> PreCheckResult:
        raise NotImplementedError

    def export(self, result: PreCheckResult, path: Path) -> None:
        raise NotImplementedError


def _tail(text: Optional[str], lines: int = 60) -> str:
    return "\n".join((text or "").splitlines()[-lines:])


@dataclass
class CommandPreCheckEngine(PreCheckEngine):
    """
    Drives the vendor engine through a bridge command (typically a PowerShell
    script wrapping the vendor module).

    The bridge is invoked once per verb:

        <command> connect --url URL --username USER
        <command> check --source URL --destination URL --username USER
        <command> export --report REF --path PATH

    The password travels in the PRECHECK_ENGINE_PASSWORD environment variable.
    On success the bridge exits 0 and prints a JSON object on its last
    non-blank stdout line:

        connect -> {"title": "..."}
        check   -> {"title": "...", "warnings": 0, "errors": 0, "report": "..."}
        export  -> {}
    """
    command: tuple[str, ...]
    timeout_seconds: int = 1800

    def ensure_available(self) -> None:
        if not self.command:
            raise EngineUnavailableError("No pre-check engine command configured.")

        exe = self.command[0]
        if Path(exe).exists() or shutil.which(exe):
            return
        raise EngineUnavailableError(f"Pre-check engine not found: {exe}")

    def connect(self, url: str, credential: Credential) -> SiteConnection:
        payload = self._invoke("connect", ["--url", url, "--username", credential.username], credential)
        return SiteConnection(url=url, title=str(payload.get("title") or ""), credential=credential)

    def check(self, source: SiteConnection, destination: SiteConnection) -> PreCheckResult:
        credential = source.credential or Credential(username="")
        payload = self._invoke(
            "check",
            ["--source", source.url, "--destination", destination.url, "--username", credential.username],
            credential,
        )
        try:
            warnings = int(payload.get("warnings") or 0)
            errors = int(payload.get("errors") or 0)
        except (TypeError, ValueError) as e:
            raise EngineError(f"Engine returned non-numeric counts for {source.url}: {e}") from e

        return PreCheckResult(
            title=str(payload.get("title") or source.title or ""),
            warnings=warnings,
            errors=errors,
            report_ref=str(payload.get("report") or ""),
        )

    def export(self, result: PreCheckResult, path: Path) -> None:
        self._invoke("export", ["--report", result.report_ref, "--path", str(path)], None)
        if not path.exists():
            raise EngineError(f"Engine reported success but wrote no file: {path}")

    def _invoke(self, verb: str, args: list[str], credential: Optional[Credential]) -> dict:
        cmd = [*self.command, verb, *args]

        env = dict(os.environ)
        if credential is not None:
            env[PASSWORD_ENV_VAR] = credential.password

        logger.debug("Engine call: %s %s", verb, " ".join(args))

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                env=env,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            raise EngineError(f"Engine '{verb}' timed out after {self.timeout_seconds}s.") from e
        except OSError as e:
            raise EngineError(f"Failed to execute engine '{verb}': {e}") from e

        stderr_tail = _tail(proc.stderr)
        if proc.returncode != 0:
            raise EngineError(
                f"Engine '{verb}' failed with exit code {proc.returncode}: {stderr_tail or 'no output'}",
                stderr_tail=stderr_tail,
            )

        lines = [ln for ln in (proc.stdout or "").splitlines() if ln.strip()]
        if not lines:
            return {}

        try:
            payload = json.loads(lines[-1])
        except ValueError as e:
            raise EngineError(f"Engine '{verb}' returned unparsable output: {lines[-1][:200]}", stderr_tail) from e

        if not isinstance(payload, dict):
            raise EngineError(f"Engine '{verb}' returned {type(payload).__name__}, expected an object.", stderr_tail)
        return payload
