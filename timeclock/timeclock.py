"""
HR Portal Time Clock — Desktop Widget
=====================================
Check in, take breaks, check out. Worked time is tracked locally and
survives restarts; each finished day is archived and, when signed in,
synced to the HR backend.

Usage:
    python timeclock.py [--offline]
"""

from timeclock_core.runner import run_with_auto_restart

if __name__ == "__main__":
    run_with_auto_restart()
