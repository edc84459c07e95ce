"""tools/engine/versions.py

VersionResolver: which engine release is the newest one published.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .client import fetch_latest_version

logger = logging.getLogger(__name__)


class VersionResolver:
    def __init__(
        self,
        url: str,
        *,
        connect_timeout: float = 10,
        total_timeout: float = 30,
        session: Optional[Any] = None,
    ) -> None:
        self.url = url
        self.connect_timeout = connect_timeout
        self.total_timeout = total_timeout
        self.session = session

    def fetch_latest(self) -> str:
        """Return the latest version token; raises NetworkError on failure."""
        logger.info("Fetching latest engine version from %s...", self.url)
        version = fetch_latest_version(
            self.url,
            connect_timeout=self.connect_timeout,
            total_timeout=self.total_timeout,
            session=self.session,
        )
        logger.info("Latest version: %s", version)
        return version
