"""Exception hierarchy for the AVM engine."""


class ValuationError(Exception):
    """Base exception for all valuation errors."""


class InvalidCoordinates(ValuationError, ValueError):
    """Raised when a latitude or longitude is out of range."""


class InvalidSubject(ValuationError, ValueError):
    """Raised when a subject property fails validation."""


class InvalidComparable(ValuationError, ValueError):
    """Raised when a comparable sale record is malformed."""


class InsufficientComparables(ValuationError, ValueError):
    """Raised when a pricing model is given no comparables to work from."""


class ComputationError(ValuationError, ArithmeticError):
    """Raised when a calculation produces a non-finite or undefined result."""
