"""Custom exception types for canvasform.

The compiler itself is fail-soft and never raises for bad canvas data. These
exceptions are raised at the I/O boundary only: loading a snapshot document,
loading configuration and checking generated HCL.

Exception Hierarchy:
    CanvasFormError (base)
    ├── SnapshotError - Snapshot document is not in the expected shape
    └── HCLSyntaxError - Generated HCL rejected by the HCL parser
"""

from typing import Any, Dict, Optional


class CanvasFormError(Exception):
    """Base exception for all canvasform-specific errors.

    Attributes:
        message: Human-readable error description
        context: Additional contextual information (e.g., file paths, node IDs)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class SnapshotError(CanvasFormError):
    """Raised when a snapshot document cannot be interpreted.

    Examples:
        - Top-level JSON value is not an object
        - ``nodes`` is present but not a list
        - File is not valid JSON
    """

    pass


class HCLSyntaxError(CanvasFormError):
    """Raised when generated Terraform text does not parse as HCL2."""

    pass
