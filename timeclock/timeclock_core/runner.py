"""
Entry point and auto-restart wrapper.
"""

import sys
import time

from .constants import APP_VERSION
from .config import log, safe_print, load_config, sync_enabled
from . import http_client
from . import network
from .app import TimeClockApp


def main(argv=None):
    """Primary entry point. `--offline` skips the sign-in prompt."""
    argv = sys.argv[1:] if argv is None else argv
    safe_print("HR Portal Time Clock v" + APP_VERSION)
    safe_print()

    config = load_config()

    if not config and "--offline" not in argv:
        from .enrollment import gui_sign_in
        config = gui_sign_in()

    if sync_enabled(config):
        log.info("Loaded config for %s (%s)", config.get("email", "?"), config["serverUrl"])
        # ── Flush any offline-buffered records ──
        if network.has_buffered_requests():
            log.info("Flushing offline buffer from previous session...")
            try:
                network.flush_buffer(config)
            except Exception as e:
                log.warning("Buffer flush failed: %s", e)
    else:
        log.info("No server configured — working offline")

    TimeClockApp(config).run()


def run_with_auto_restart():
    """
    Wrapper that auto-restarts on crash. Never gives up.
    Crash counter resets if the app ran for 2+ minutes (not a boot-loop).
    """
    crash_count = 0
    crash_window = 120
    max_rapid_crashes = 10

    while True:
        start_time = time.time()
        try:
            main()
            break
        except KeyboardInterrupt:
            safe_print("\nTime clock stopped by user.")
            break
        except SystemExit as e:
            if str(e) in ("0", "None"):
                break
            log.error("SystemExit: %s", e)
        except Exception as e:
            elapsed = time.time() - start_time
            log.error("Crashed after %.0fs: %s", elapsed, e, exc_info=True)

            if elapsed > crash_window:
                crash_count = 0
            crash_count += 1

            if crash_count >= max_rapid_crashes:
                wait = 120
                log.warning("Many rapid crashes (%d). Waiting %ds...", crash_count, wait)
            else:
                wait = min(10 * crash_count, 60)

            log.info("Restarting in %ds (crash %d)...", wait, crash_count)
            time.sleep(wait)

            http_client.http = http_client.reset_session(http_client.http)
