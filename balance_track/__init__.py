"""
Balance Track - Source Package

Personal income and expense tracking built around a temporal
projection engine.

DESIGN PRINCIPLES:
1. Rules are declarative, ledgers are derived
2. Snapshots are immutable - every edit returns a new one
3. Fail loudly on malformed data
4. No file I/O in the engine - persistence is the host's job
"""

__version__ = "1.0.0"
__author__ = "Balance Track Team"
