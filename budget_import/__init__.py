"""Bank statement import pipeline for the budget tracker."""

__version__ = "1.0.0"
