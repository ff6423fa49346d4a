"""Listener configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator


class ListenOptions(BaseModel):
    """Options accepted by :meth:`Replicax.listen`.

    ``cert_file`` and ``key_file`` are PEM files and are required when
    ``https`` is enabled.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    host: str = "127.0.0.1"
    https: bool = False
    cert_file: Path | None = None
    key_file: Path | None = None
    key_password: str | None = None
    log_level: Literal["critical", "error", "warning", "info", "debug", "trace"] = "info"

    @model_validator(mode="after")
    def _check_tls(self) -> ListenOptions:
        if self.https and (self.cert_file is None or self.key_file is None):
            raise ValueError("https=True requires both cert_file and key_file")
        return self
