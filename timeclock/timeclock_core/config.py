"""
Paths, logging setup, config load/save, safe_print.
"""

import os
import json
import sys
import logging
from pathlib import Path


# ─── Paths ───────────────────────────────────────────────────────
# One data folder per OS user. TIMECLOCK_HOME overrides it (tests, portable
# installs).
_FOLDER_NAME = "TimeClock"

if os.environ.get("TIMECLOCK_HOME"):
    BASE_DIR = Path(os.environ["TIMECLOCK_HOME"])
elif sys.platform == "win32":
    BASE_DIR = Path(os.environ.get("APPDATA", Path.home())) / _FOLDER_NAME
else:
    BASE_DIR = Path.home() / ".timeclock"

BASE_DIR.mkdir(parents=True, exist_ok=True)

CONFIG_FILE = BASE_DIR / "config.json"
LOG_FILE = BASE_DIR / "timeclock.log"
OFFLINE_BUFFER_FILE = BASE_DIR / "pending.jsonl"
DATA_DIR = BASE_DIR / "data"


# ─── Safe print (no crash when --noconsole) ──────────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except Exception:
        pass


# ─── Logging ─────────────────────────────────────────────────────

try:
    if LOG_FILE.exists() and LOG_FILE.stat().st_size > 1_000_000:
        LOG_FILE.write_text("")
except OSError:
    pass

log = logging.getLogger("timeclock")
log.setLevel(logging.INFO)

if not log.handlers:
    _formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    try:
        file_handler = logging.FileHandler(str(LOG_FILE), encoding="utf-8")
        file_handler.setFormatter(_formatter)
        log.addHandler(file_handler)
    except OSError:
        pass

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(_formatter)
    log.addHandler(console_handler)


# ─── Config Management ──────────────────────────────────────────

def load_config():
    """Load config from disk. Returns dict or None."""
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return None
    return None


def save_config(config):
    """Save config dict to disk."""
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
    log.info("Config saved to %s", CONFIG_FILE)


def sync_enabled(config):
    """True when the config carries a server and a token to sync with."""
    return bool(
        config
        and config.get("syncEnabled", True)
        and config.get("serverUrl")
        and config.get("accessToken")
    )
