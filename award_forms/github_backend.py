"""Publishing award configurations through GitHub's Contents API."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10


@dataclass
class GitHubBackend:
    """Read and write one JSON file in a GitHub repository."""

    token: str
    repo: str
    path: str
    branch: str = "main"
    api_url: str = "https://api.github.com"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "Content-Type": "application/json",
        }

    def _url(self) -> str:
        return f"{self.api_url.rstrip('/')}/repos/{self.repo}/contents/{self.path}"

    def _fetch(self) -> Optional[Dict[str, Any]]:
        """Return the raw contents record, or ``None`` when the file is missing."""

        response = requests.get(
            self._url(),
            headers=self._headers(),
            params={"ref": self.branch},
            timeout=REQUEST_TIMEOUT,
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    def get_file_sha(self) -> Optional[str]:
        """Return the blob SHA of the file, needed to overwrite it."""

        record = self._fetch()
        return record.get("sha") if record else None

    def read_json(self) -> Optional[Dict[str, Any]]:
        """Return the decoded JSON document, or ``None`` if it doesn't exist yet."""

        record = self._fetch()
        if record is None:
            return None
        encoding = record.get("encoding", "base64")
        if encoding != "base64":
            raise ValueError(f"Unsupported encoding: {encoding}")
        decoded = base64.b64decode(record.get("content", "")).decode("utf-8")
        return json.loads(decoded)

    def write_json(self, data: Dict[str, Any], message: str) -> Dict[str, Any]:
        """Create or replace the file with ``data`` as a single commit."""

        payload: Dict[str, Any] = {
            "message": message,
            "branch": self.branch,
            "content": base64.b64encode(json.dumps(data, indent=2).encode("utf-8")).decode("utf-8"),
        }
        sha = self.get_file_sha()
        if sha:
            payload["sha"] = sha

        response = requests.put(
            self._url(),
            headers=self._headers(),
            json=payload,
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        logger.info("Committed %s to %s@%s", self.path, self.repo, self.branch)
        return response.json()
