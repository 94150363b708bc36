"""
Server API calls — sign-in and daily record sync.

All functions are blocking (called from worker threads, never from the Tk
main thread). On failure, the record is saved to the offline buffer for
later replay; sync never raises.
"""

import requests

from .config import log
from .constants import API_TIMEOUT, API_TIMEOUT_SYNC
from . import http_client
from . import network

DAILY_RECORD_PATH = "/attendance/time-tracking"


def sign_in(server_url, email, password):
    """Log in against the HR backend. Returns a config dict with tokens."""
    url = f"{server_url.rstrip('/')}/auth/login"
    log.info("Signing in %s at %s ...", email, url)
    resp = http_client.http.post(
        url, json={"email": email, "password": password}, timeout=API_TIMEOUT,
    )
    resp.raise_for_status()
    body = resp.json()
    data = body.get("data", body)

    token = data.get("accessToken") or data.get("token")
    if not token:
        raise RuntimeError(f"Sign-in failed: {body.get('message', 'no access token returned')}")

    return {
        "serverUrl": server_url.rstrip("/"),
        "email": email,
        "accessToken": token,
        "refreshToken": data.get("refreshToken"),
        "syncEnabled": True,
    }


def send_daily_record(config, record):
    """POST one archived day to the backend. Returns True on success."""
    payload = record.to_dict()
    try:
        resp = http_client.request(
            config, "POST", DAILY_RECORD_PATH, json=payload, timeout=API_TIMEOUT_SYNC,
        )
    except requests.RequestException as e:
        log.warning("Daily record sync network error: %s", e)
        network.buffer_request("POST", DAILY_RECORD_PATH, payload)
        return False

    if 200 <= resp.status_code < 300:
        log.info("Daily record synced for %s", record.date)
        return True

    if resp.status_code == 401:
        log.error("Daily record sync REJECTED (401) — sign in again")
    else:
        log.warning("Daily record sync failed: HTTP %d — %s", resp.status_code, resp.text[:200])
    network.buffer_request("POST", DAILY_RECORD_PATH, payload)
    return False
