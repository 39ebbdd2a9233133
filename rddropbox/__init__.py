"""
rd-dropbox — Rivendell dropbox reconciliation.

Checks the dropbox paths and log files configured for this station, matches
them against running rdimport(1) processes, and restarts rdcatchd(8) when a
dropbox has no worker.
"""

__version__ = "0.1.2"
