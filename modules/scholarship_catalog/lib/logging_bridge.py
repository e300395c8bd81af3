from __future__ import annotations

import logging
from typing import Any

# JSONL writer from the service package when present, stdlib logging otherwise.
_logging_backend = None
try:
    from service import logging_utils as _svc_logging  # type: ignore

    _logging_backend = _svc_logging
except Exception:
    _logging_backend = None

# Top-level keys scrubbed before a record leaves the catalog
_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "authorization",
    "auth",
    "bearer",
    "access_token",
    "refresh_token",
}

_FALLBACK_LOGGERS = {
    "activity": (logging.getLogger("scholarship_catalog.activity"), logging.INFO),
    "error": (logging.getLogger("scholarship_catalog.error"), logging.ERROR),
}


def _redact_record(record: dict[str, Any]) -> dict[str, Any]:
    """Copy of `record` with secret-looking top-level values replaced."""
    out: dict[str, Any] = {}
    for k, v in record.items():
        lk = str(k).lower()
        out[k] = "***REDACTED***" if lk in _REDACT_KEYS or lk.endswith("_secret") else v
    return out


def _emit(kind: str, record: dict[str, Any]) -> None:
    payload = _redact_record(record)
    writer = getattr(_logging_backend, f"write_{kind}_log", None) if _logging_backend else None
    if writer is not None:
        try:
            writer(payload)
            return
        except Exception:
            pass
    logger, level = _FALLBACK_LOGGERS[kind]
    logger.log(level, payload)


def activity(record: dict[str, Any]) -> None:
    """Structured activity record (component, op, ...): loads, saves, renders."""
    _emit("activity", record)


def error(record: dict[str, Any]) -> None:
    """Structured error record for a degraded remote call; never raises."""
    _emit("error", record)
