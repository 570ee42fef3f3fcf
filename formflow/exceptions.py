"""formflow Exception Classes

Base exception hierarchy for the form/flow engine.
All custom exceptions include help_text for actionable author guidance.

Navigation, scoring and rule evaluation never raise: these errors belong to
authoring (validation, documents) and persistence surfaces only.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models.validation_result import ValidationReport


class FormFlowError(Exception):
    """Base exception for all formflow errors
    
    Attributes:
        message: Human-readable error description
        help_text: Optional actionable guidance for resolving the error
    """
    
    def __init__(self, message: str, help_text: str = None):
        """Initialize error with message and optional help text
        
        Args:
            message: Error description
            help_text: Optional remediation guidance
        """
        self.message = message
        self.help_text = help_text
        super().__init__(message)
    
    def __str__(self) -> str:
        """Format error message with help text if available"""
        if self.help_text:
            return f"{self.message}\n\nHelp: {self.help_text}"
        return self.message


class FlowValidationError(FormFlowError):
    """Raised when a flow fails structural validation and cannot be saved
    
    Carries the full report so callers can show every offending id.
    """
    
    def __init__(self, report: "ValidationReport", blocked_on_warnings: bool = False):
        """Initialize validation error from a report
        
        Args:
            report: Validation report produced by the graph validator
            blocked_on_warnings: True when only warnings caused the rejection
        """
        issues = report.warnings if blocked_on_warnings and report.valid else report.errors
        kind = "warning" if blocked_on_warnings and report.valid else "error"
        message = f"Flow has {len(issues)} validation {kind}(s)"
        
        help_text = "Fix the following before saving:\n"
        help_text += "\n".join(f"  - {issue.message}" for issue in issues)
        
        super().__init__(message, help_text)
        self.report = report
        self.blocked_on_warnings = blocked_on_warnings


class FlowDocumentError(FormFlowError):
    """Raised when a flow document cannot be parsed or has the wrong shape"""
    
    def __init__(self, message: str, line_number: Optional[int] = None, help_text: str = None):
        self.line_number = line_number
        if line_number:
            message = f"{message} (line {line_number})"
        super().__init__(message, help_text)


class UnknownNodeError(FormFlowError):
    """Raised when a workflow edit targets a node or edge id that does not exist"""
    
    def __init__(self, node_id: str, kind: str = "node"):
        super().__init__(
            f"No {kind} with id '{node_id}' in this flow",
            help_text="Re-derive the workflow graph from the saved flow and retry the edit"
        )
        self.node_id = node_id
        self.kind = kind


class PersistenceError(FormFlowError):
    """Raised when the graph persistence collaborator fails
    
    The auto-save pipeline never raises this; it turns exhausted retries into
    a "not saved" outcome instead.
    """
    
    def __init__(self, operation: str, flow_id: Optional[str] = None, reason: Optional[str] = None):
        message = f"Failed to {operation} flow"
        if flow_id:
            message += f" '{flow_id}'"
        if reason:
            message += f": {reason}"
        
        super().__init__(message, help_text="Check the flow store location or endpoint and try again")
        self.operation = operation
        self.flow_id = flow_id
        self.reason = reason
