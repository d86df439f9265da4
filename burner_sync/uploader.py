"""
Upload client for the Bitburner remote file API.

Posts one transpiled file per request and classifies the reply into a
small set of result types.  There are no retries: every failure is
final for that attempt and the caller simply waits for the next save.
"""

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteFile:
    """A file as the remote API receives it."""
    filename: str
    code_base64: str

    @classmethod
    def from_code(cls, filename: str, code: str) -> "RemoteFile":
        encoded = base64.b64encode(code.encode("utf-8")).decode("ascii")
        return cls(filename=filename, code_base64=encoded)

    def to_json(self) -> str:
        return json.dumps({"filename": self.filename, "code": self.code_base64})


@dataclass(frozen=True)
class UploadSuccess:
    """The game accepted the file and reported its RAM cost in GB."""
    ram_usage: float


@dataclass(frozen=True)
class UploadRejected:
    """2xx reply whose ``success`` flag is not true (or not JSON at all)."""
    body: Any = None


@dataclass(frozen=True)
class UploadHttpError:
    """Non-2xx status from the remote API."""
    status: int
    reason: str = ""


@dataclass(frozen=True)
class UploadTransportError:
    """The request never got a response (refused, DNS, timeout...)."""
    error: str


UploadResult = UploadSuccess | UploadRejected | UploadHttpError | UploadTransportError


class Uploader:
    """
    Sends files to the game over HTTP.

    Parameters
    ----------
    host, port : str
        Where the remote file API listens.
    token : str
        Bearer token issued by the game.
    timeout : float, optional
        Request timeout in seconds.  None (the default) waits forever.
    session : requests.Session, optional
        Session to reuse; one is created if not given.
    """

    def __init__(
        self,
        host: str,
        port: str | int,
        token: str,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.host = host
        self.port = str(port)
        self._token = token
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"http://{self.host}:{self.port}/"

    def _headers(self, body: bytes) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
            "Authorization": f"Bearer {self._token}",
        }

    def upload(self, filename: str, code: str) -> UploadResult:
        """POST *code* under *filename* and return the classified result."""
        body = RemoteFile.from_code(filename, code).to_json().encode("utf-8")

        try:
            res = self._session.post(
                self.endpoint,
                data=body,
                headers=self._headers(body),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.error("Upload of %s failed: %s", filename, exc)
            return UploadTransportError(error=str(exc))

        if not 200 <= res.status_code < 300:
            logger.error("Upload of %s failed: %s %s", filename, res.status_code, res.reason)
            return UploadHttpError(status=res.status_code, reason=res.reason or "")

        try:
            payload = res.json()
        except ValueError:
            logger.error("Upload of %s returned a non-JSON body", filename)
            return UploadRejected(body=res.text)

        if not isinstance(payload, dict) or payload.get("success") is not True:
            logger.warning("Game rejected %s: %s", filename, payload)
            return UploadRejected(body=payload)

        try:
            ram_usage = float(payload["data"]["ramUsage"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Game accepted %s but sent no RAM usage: %s", filename, payload)
            return UploadRejected(body=payload)

        return UploadSuccess(ram_usage=ram_usage)

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self._session.close()
