"""Exceptions for the deck-canvas layout engine."""

from typing import Any, Dict, List, Optional


class LayoutViolationError(Exception):
    """Raised when strict layout validation finds violations in rendered frames."""

    def __init__(
        self,
        message: str,
        slide_number: Optional[int] = None,
        node_name: Optional[str] = None,
        violations: Optional[List[Dict[str, Any]]] = None
    ):
        """
        Initialize LayoutViolationError.

        Args:
            message: Human-readable error message
            slide_number: Slide where the violation occurred
            node_name: Name of the node that violated a rule
            violations: List of detailed violation information
        """
        super().__init__(message)
        self.slide_number = slide_number
        self.node_name = node_name
        self.violations = violations or []

    def __str__(self) -> str:
        """Return formatted error message."""
        msg = super().__str__()

        if self.slide_number is not None:
            msg = f"Slide {self.slide_number}: {msg}"

        if self.node_name:
            msg = f"{msg} (Node: {self.node_name})"

        if self.violations:
            violation_details = []
            for violation in self.violations:
                violation_str = f"  - {violation.get('category', 'Unknown')}: {violation.get('message', 'No description')}"
                if 'expected' in violation and 'actual' in violation:
                    violation_str += f" (expected: {violation['expected']}, actual: {violation['actual']})"
                violation_details.append(violation_str)

            if violation_details:
                msg += "\nViolations:\n" + "\n".join(violation_details)

        return msg

    def add_violation(
        self,
        category: str,
        message: str,
        expected: Optional[Any] = None,
        actual: Optional[Any] = None,
        **kwargs
    ) -> None:
        """
        Add a layout violation to this error.

        Args:
            category: Violation category (bounds, palette, overlay)
            message: Human-readable description of the violation
            expected: Expected value
            actual: Actual value found
            **kwargs: Additional violation details
        """
        violation = {
            'category': category,
            'message': message
        }

        if expected is not None:
            violation['expected'] = expected
        if actual is not None:
            violation['actual'] = actual

        violation.update(kwargs)
        self.violations.append(violation)


class ImageFetchError(Exception):
    """Raised internally when a remote image cannot be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Could not load image {url}: {reason}")
        self.url = url
        self.reason = reason


class ExportError(Exception):
    """Raised when rendered frames cannot be written to an output format."""
    pass


class PayloadError(Exception):
    """Raised when a deck payload file cannot be read or validated."""
    pass
