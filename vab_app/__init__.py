"""
VAB App - Value Area Breakout Backtester

Computes previous-session value areas from intraday volume profiles and
backtests the open-outside / close-back-inside entry against historical
cryptocurrency bars.
"""

__version__ = "0.1.0"
__author__ = "VAB Team"
