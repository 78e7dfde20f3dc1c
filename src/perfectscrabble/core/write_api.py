"""POST /api/write — server handler, HTTP host and client.

The handler verifies the bearer token, validates the body, attaches the
caller's user id and a server timestamp, and appends the record to the
requested collection. Responses:

    200 {"success": true, "docId": "..."}
    400 {"error": "Invalid request: ..."}
    401 {"error": "Unauthorized: Missing or invalid token"}
    405 {"error": "Method not allowed"}
    500 {"error": "Internal server error"}
"""

from __future__ import annotations

import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Mapping

import requests

from perfectscrabble.core.auth import TokenAuthority
from perfectscrabble.core.errors import (
    NetworkFailure,
    ScrabbleError,
    Unauthenticated,
    ValidationError,
)
from perfectscrabble.core.store import GameStore
from perfectscrabble.turns import validate_game_record

logger = logging.getLogger(__name__)

WRITE_PATH = "/api/write"

_UNAUTHORIZED = {"error": "Unauthorized: Missing or invalid token"}
_MISSING_FIELDS = {"error": "Invalid request: Missing collection or data"}

# collection name -> GameStore
StoreFactory = Callable[[str], GameStore]


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return None


def handle_write(
    method: str,
    headers: Mapping[str, str],
    body: Any,
    *,
    stores: StoreFactory,
    authority: TokenAuthority,
) -> tuple[int, dict]:
    """Process one write request. Returns (status, json payload)."""
    if method.upper() != "POST":
        return 405, {"error": "Method not allowed"}

    auth_header = _header(headers, "Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return 401, dict(_UNAUTHORIZED)
    token = auth_header[len("Bearer "):].strip()

    try:
        user_id = authority.verify(token)
    except Unauthenticated as exc:
        logger.info("Rejected write: %s", exc)
        return 401, dict(_UNAUTHORIZED)

    if not isinstance(body, dict):
        return 400, dict(_MISSING_FIELDS)
    collection = body.get("collection")
    data = body.get("data")
    if not collection or not data:
        return 400, dict(_MISSING_FIELDS)

    try:
        validate_game_record(data)
    except ValidationError as exc:
        return 400, {"error": f"Invalid request: {exc}"}

    try:
        doc_id = stores(collection).insert_game(data, user_id)
    except Exception:
        logger.exception("Error in server-side write")
        return 500, {"error": "Internal server error"}

    logger.info("Stored game %s for %s in %s", doc_id, user_id, collection)
    return 200, {"success": True, "docId": doc_id}


def make_handler(stores: StoreFactory, authority: TokenAuthority):
    """Build a request handler class bound to a store factory and authority."""

    class WriteRequestHandler(BaseHTTPRequestHandler):
        def _respond(self, status: int, payload: dict) -> None:
            body = json.dumps(payload).encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _dispatch(self, method: str) -> None:
            if self.path.split("?", 1)[0] != WRITE_PATH:
                self._respond(404, {"error": "Not found"})
                return

            body: Any = None
            try:
                length = int(self.headers.get("Content-Length") or 0)
                if length < 0:
                    raise ValueError(f"negative Content-Length {length}")
            except ValueError:
                self._respond(400, {"error": "Invalid request: bad Content-Length"})
                return

            if length:
                raw = self.rfile.read(length)
                try:
                    body = json.loads(raw)
                except ValueError:
                    # JSONDecodeError and UnicodeDecodeError
                    if method == "POST":
                        self._respond(400, {"error": "Invalid request: body is not JSON"})
                        return

            status, payload = handle_write(
                method, dict(self.headers.items()), body,
                stores=stores, authority=authority,
            )
            self._respond(status, payload)

        def do_POST(self):
            self._dispatch("POST")

        def do_GET(self):
            self._dispatch("GET")

        def do_PUT(self):
            self._dispatch("PUT")

        def do_DELETE(self):
            self._dispatch("DELETE")

        def log_message(self, format, *args):
            logger.debug("%s - %s", self.address_string(), format % args)

    return WriteRequestHandler


def serve(
    host: str,
    port: int,
    stores: StoreFactory,
    authority: TokenAuthority,
) -> ThreadingHTTPServer:
    """Create (but do not start) the write server."""
    server = ThreadingHTTPServer((host, port), make_handler(stores, authority))
    logger.info("Write endpoint listening on http://%s:%d%s", host, port, WRITE_PATH)
    return server


class WriteClient:
    """Client for the write endpoint. One request per call, no retries."""

    def __init__(
        self,
        url: str,
        timeout_s: float = 30.0,
        session: requests.Session | None = None,
    ):
        self._url = url
        self._timeout_s = timeout_s
        self._session = session or requests.Session()

    def write(self, collection: str, data: dict, token: str) -> str:
        """Submit ``data`` to ``collection``; returns the stored document id."""
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }
        try:
            response = self._session.post(
                self._url,
                json={"collection": collection, "data": data},
                headers=headers,
                timeout=self._timeout_s,
            )
        except requests.RequestException as exc:
            raise NetworkFailure(f"Failed to save: {exc}") from exc

        if not response.ok:
            raise NetworkFailure(
                f"Failed to save: {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            doc_id = response.json()["docId"]
        except (ValueError, KeyError, TypeError) as exc:
            raise ScrabbleError(f"Unexpected write response: {exc}") from exc
        return str(doc_id)


def _error_message(response: requests.Response) -> str:
    try:
        error = response.json().get("error")
    except (ValueError, AttributeError):
        error = None
    return error or response.reason or str(response.status_code)
