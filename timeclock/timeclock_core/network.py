"""
Network utilities — connectivity check and the offline buffer.

Offline buffer: JSON-lines file that stores failed API calls and replays
them when connectivity is restored. Entries hold a path relative to the
server URL so a changed server address still gets the data.
"""

import json
import time
import socket
import threading
from urllib.parse import urlparse

import requests

from .config import log, OFFLINE_BUFFER_FILE
from . import http_client


# ─── Connectivity check (network-interface agnostic) ─────────────

def is_online(server_url):
    """Quick connectivity check via socket connect to the server's host."""
    try:
        parsed = urlparse(server_url)
        host = parsed.hostname
        if not host:
            return False
        port = parsed.port or (443 if parsed.scheme == "https" else 80)
        sock = socket.create_connection((host, port), timeout=4)
        sock.close()
        return True
    except OSError:
        return False


# ─── Offline buffer (local persistence) ──────────────────────────
# Record sync and buffer replay run on separate worker threads. _buffer_lock
# guards every read/append/rewrite of the file; _flush_lock keeps replays
# one at a time. Neither is held while a request is in flight.

_buffer_lock = threading.Lock()
_flush_lock = threading.Lock()

# 4xx replies that may succeed later; any other 4xx is a permanent rejection.
_RETRYABLE_4XX = (401, 408, 429)


def _read_lines(path):
    try:
        return [l for l in path.read_text(encoding="utf-8").split("\n") if l.strip()]
    except OSError:
        return []


def buffer_request(method, path, payload, buffer_file=None):
    """Save a failed API call to disk for later replay."""
    buffer_file = buffer_file or OFFLINE_BUFFER_FILE
    entry = {"method": method, "path": path, "payload": payload, "ts": time.time()}
    with _buffer_lock:
        try:
            # Avoid back-to-back duplicate entries for the same request payload.
            lines = _read_lines(buffer_file) if buffer_file.exists() else []
            if lines:
                try:
                    last = json.loads(lines[-1])
                    if (
                        last.get("method") == method
                        and last.get("path") == path
                        and last.get("payload") == payload
                    ):
                        return
                except json.JSONDecodeError:
                    pass
            with open(buffer_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
            log.info("Buffered offline request: %s %s", method, path)
        except OSError as e:
            log.warning("Failed to buffer request: %s", e)


def has_buffered_requests(buffer_file=None):
    """Check if there are pending offline requests."""
    buffer_file = buffer_file or OFFLINE_BUFFER_FILE
    try:
        return buffer_file.exists() and buffer_file.stat().st_size > 0
    except OSError:
        return False


def _replay(config, line):
    """Send one buffered entry. Returns "sent", "keep" or "drop"."""
    try:
        entry = json.loads(line)
        method = entry["method"].upper()
        resp = http_client.request(config, method, entry["path"], json=entry["payload"], timeout=30)
    except (json.JSONDecodeError, KeyError, AttributeError):
        log.warning("Dropping malformed buffer entry")
        return "drop"
    except requests.RequestException:
        return "keep"

    status = resp.status_code
    if 200 <= status < 300:
        return "sent"
    if 400 <= status < 500 and status not in _RETRYABLE_4XX:
        log.warning("Dropping buffered %s %s: server rejected it (HTTP %d)",
                    method, entry["path"], status)
        return "drop"
    return "keep"


def flush_buffer(config, buffer_file=None):
    """
    Replay all buffered requests in order. Returns (flushed, remaining).
    Requests that fail with a network error, a 5xx or a retryable 4xx are
    kept for the next attempt. Entries buffered while the replay runs are
    kept as well.
    """
    buffer_file = buffer_file or OFFLINE_BUFFER_FILE
    with _flush_lock:
        with _buffer_lock:
            if not has_buffered_requests(buffer_file):
                return 0, 0
            lines = _read_lines(buffer_file)
        if not lines:
            return 0, 0

        flushed = 0
        still_failed = []
        for line in lines:
            outcome = _replay(config, line)
            if outcome == "sent":
                flushed += 1
            elif outcome == "keep":
                still_failed.append(line)

        with _buffer_lock:
            # Only buffer_request() touches the file meanwhile, and it appends.
            current = _read_lines(buffer_file)
            keep = still_failed + current[len(lines):]
            try:
                if keep:
                    buffer_file.write_text("\n".join(keep) + "\n", encoding="utf-8")
                else:
                    buffer_file.unlink(missing_ok=True)
            except OSError as e:
                log.warning("Could not rewrite offline buffer: %s", e)

    if flushed:
        log.info("Flushed %d buffered requests (%d still pending)", flushed, len(keep))
    return flushed, len(keep)
