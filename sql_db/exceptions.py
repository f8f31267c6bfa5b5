"""
Errors raised while building SQL fragments.
"""


class InvalidArgumentError(ValueError):
    """Raised when a builder receives structurally invalid input (e.g. nothing to update)."""
