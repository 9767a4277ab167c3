"""
Utility functions module.

Calendar helpers for UTC trading days and request pacing shared by the bar
sources and the backtest engine.
"""
