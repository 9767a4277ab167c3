"""Value area re-entry signal evaluation"""

from .evaluator import SignalEvaluator, calculate_roi, evaluate_day

__all__ = ["SignalEvaluator", "calculate_roi", "evaluate_day"]
