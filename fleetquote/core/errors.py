"""Typed errors raised by the cost and pricing engine"""
from typing import Optional


class PricingEngineError(Exception):
    """Base exception for pricing engine errors"""
    pass


class ValidationError(PricingEngineError, ValueError):
    """Malformed or missing input, raised before any computation starts"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class CalculationError(PricingEngineError):
    """An arithmetic precondition failed inside a calculation stage"""

    def __init__(self, message: str, stage: str = "unknown"):
        super().__init__(f"{stage}: {message}")
        self.message = message
        self.stage = stage
