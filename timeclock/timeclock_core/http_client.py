"""
HTTP session with connection pooling, automatic retry, and bearer auth.

request() attaches the access token from config. A 401 triggers one
token refresh via /auth/refresh and one retry of the original request;
a second 401 (or a failed refresh) is returned to the caller as-is.
"""

import os
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import log, save_config
from .constants import API_TIMEOUT

_retry_strategy = Retry(
    total=3,
    backoff_factor=2,                           # Wait 2s, 4s, 8s between retries
    status_forcelist=[502, 503, 504],
    allowed_methods=["HEAD", "GET", "POST", "PATCH"],
)


def _get_ca_bundle():
    """Get the CA bundle path. Priority: env var → certifi → system default."""
    env_ca = os.environ.get('REQUESTS_CA_BUNDLE') or os.environ.get('SSL_CERT_FILE')
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    try:
        import certifi
        return certifi.where()
    except ImportError:
        return True


def create_session():
    """Create a new requests.Session with connection pooling, retry, and SSL."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=3,
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers["Content-Type"] = "application/json"
    session.verify = _get_ca_bundle()
    return session


def reset_session(session):
    """Close and recreate the HTTP session (fixes stale connections)."""
    try:
        session.close()
    except Exception:
        pass
    return create_session()


# Global shared session
http = create_session()


def api_url(config, path):
    return f"{config['serverUrl'].rstrip('/')}/{path.lstrip('/')}"


def _auth_headers(config):
    token = config.get("accessToken")
    return {"Authorization": f"Bearer {token}"} if token else {}


def refresh_access_token(config):
    """
    Exchange the refresh token for a new access token. Updates config in
    place (and on disk). Returns True on success.
    """
    refresh_token = config.get("refreshToken")
    if not refresh_token:
        log.warning("Token refresh skipped: no refresh token")
        return False

    try:
        resp = http.post(
            api_url(config, "/auth/refresh"),
            json={"refreshToken": refresh_token},
            timeout=API_TIMEOUT,
        )
    except requests.RequestException as e:
        log.warning("Token refresh network error: %s", e)
        return False

    if resp.status_code != 200:
        log.error("Token refresh REJECTED (HTTP %d)", resp.status_code)
        return False

    data = resp.json()
    new_token = data.get("token") or data.get("accessToken")
    if not new_token:
        log.error("Token refresh returned no access token")
        return False

    config["accessToken"] = new_token
    if data.get("refreshToken"):
        config["refreshToken"] = data["refreshToken"]
    try:
        save_config(config)
    except OSError as e:
        log.warning("Could not persist refreshed token: %s", e)
    log.info("Access token refreshed")
    return True


def request(config, method, path, **kwargs):
    """
    Authenticated request against the HR backend. Raises
    requests.RequestException on network failure, like requests does.
    """
    kwargs.setdefault("timeout", API_TIMEOUT)
    url = api_url(config, path)
    extra_headers = kwargs.pop("headers", None) or {}

    resp = http.request(method, url, headers={**extra_headers, **_auth_headers(config)}, **kwargs)
    if resp.status_code != 401:
        return resp

    log.info("%s %s → 401, refreshing token", method, path)
    if not refresh_access_token(config):
        return resp
    return http.request(method, url, headers={**extra_headers, **_auth_headers(config)}, **kwargs)
