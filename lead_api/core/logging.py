"""Structured logging for the lead API.

A submission log line may touch three kinds of data:

- credentials (Resend API key, authorization headers), never written;
- submitter personal data (email, phone, notes, reply-to), never written;
- client identifiers (peer address / forwarded-for value), written only as a
  short SHA-256 pseudonym under ``client_hash`` so rate-limit decisions for
  one client can still be correlated.

``LeadLogScrubber`` applies those rules to the ``extra`` fields of a record.
Handlers built by ``configure_logging`` scrub in a filter, so the rules hold
for the plain formatter as well as for ``JsonFormatter``. The request id
stored by the middleware is attached to every record emitted while a request
is being handled.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from lead_api.core.config import LogSettings, settings

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

REDACTED = "[REDACTED]"
CLIENT_HASH_FIELD = "client_hash"

CREDENTIAL_KEYS: frozenset[str] = frozenset(
    {"api_key", "resend_api_key", "authorization", "token", "secret", "password", "cookie", "set-cookie"}
)
SUBMITTER_KEYS: frozenset[str] = frozenset({"email", "phone", "notes", "reply_to", "to"})
CLIENT_ID_KEYS: frozenset[str] = frozenset({"client_id", "client_ip", "x-forwarded-for"})

# Attributes every LogRecord has; only what callers pass via ``extra`` is output
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def set_request_id(request_id: str | None) -> None:
    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    return _request_id_var.get()


def clear_request_id() -> None:
    _request_id_var.set(None)


def hash_identifier(value: Any) -> str:
    """Short, stable pseudonym for a client identifier."""

    return hashlib.sha256(str(value).encode()).hexdigest()[:16]


class LeadLogScrubber:
    """Apply the redaction and pseudonymisation rules to log fields.

    Keys are matched case-insensitively. Nested mappings and sequences are
    scrubbed too, so a logged payload dict cannot smuggle an email address
    past the filter. Client identifiers are replaced by ``client_hash``; a
    ``client_hash`` that is already present is left untouched, which keeps
    scrubbing idempotent when both the filter and the formatter run.
    """

    def __init__(
        self,
        redacted_keys: Iterable[str] | None = None,
        hashed_keys: Iterable[str] | None = None,
    ) -> None:
        self.redacted_keys = {k.lower() for k in (redacted_keys or CREDENTIAL_KEYS | SUBMITTER_KEYS)}
        self.hashed_keys = {k.lower() for k in (hashed_keys or CLIENT_ID_KEYS)}

    def _scrub_value(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return self.scrub(value)
        if isinstance(value, (list, tuple)):
            return type(value)(self._scrub_value(v) for v in value)
        return value

    def scrub(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Return a scrubbed copy of ``fields``."""

        clean: dict[str, Any] = {}
        for key, value in fields.items():
            lowered = str(key).lower()
            if lowered in self.hashed_keys:
                clean.setdefault(CLIENT_HASH_FIELD, hash_identifier(value))
            elif lowered in self.redacted_keys:
                clean[key] = REDACTED
            else:
                clean[key] = self._scrub_value(value)
        return clean

    def extra_fields(self, record: LogRecord) -> dict[str, Any]:
        """Scrubbed ``extra`` fields of a record."""

        return self.scrub(
            {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS and not k.startswith("_")}
        )


class RequestIdFilter(logging.Filter):
    """Attach request_id from context when absent on the record."""

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        if getattr(record, "request_id", None) is None:
            request_id = get_request_id()
            if request_id:
                record.request_id = request_id
        return True


class SensitiveDataFilter(logging.Filter):
    """Scrub a record in place before any formatter sees it."""

    def __init__(self, scrubber: LeadLogScrubber | None = None) -> None:
        super().__init__()
        self.scrubber = scrubber or LeadLogScrubber()

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        raw_keys = [k for k in vars(record) if k not in _RECORD_ATTRS and not k.startswith("_")]
        clean = self.scrubber.extra_fields(record)
        for key in raw_keys:
            if key not in clean:
                delattr(record, key)
        for key, value in clean.items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; extras are scrubbed again on output."""

    def __init__(self, *, scrubber: LeadLogScrubber | None = None, ensure_ascii: bool = False) -> None:
        super().__init__()
        self.scrubber = scrubber or LeadLogScrubber()
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None) or get_request_id()
        if request_id:
            payload["request_id"] = request_id

        payload.update(self.scrubber.extra_fields(record))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=self.ensure_ascii)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/lead_api.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if log_settings.max_bytes:
        return RotatingFileHandler(
            file_path,
            maxBytes=log_settings.max_bytes,
            backupCount=log_settings.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(file_path, encoding="utf-8")


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Install a single scrubbing handler on the root logger.

    Args:
        log_settings: Optional log settings; defaults to global settings if omitted.
    """

    cfg = log_settings or settings.log
    scrubber = LeadLogScrubber()

    handler = _build_handler(cfg)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter(scrubber))
    if cfg.format.lower() == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(JsonFormatter(scrubber=scrubber))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, cfg.level.upper(), logging.INFO))

    # uvicorn installs its own handlers; keep its records off the root handler
    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.access").propagate = False
