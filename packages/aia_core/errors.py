from typing import Optional, Dict, Any

class AIABaseError(Exception):
    """
    Root exception of the AI Interview Assistant.
    Every custom exception must inherit from this class.

    Attributes:
        code (str): Error identifier (e.g. 'CONF_ERROR')
        message (str): Human readable message
        details (Optional[Dict[str, Any]]): Extra debugging information
    """
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code}] {message}")

class ConfigurationError(AIABaseError):
    """Raised when settings cannot be loaded or validated."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="CONF_ERROR", message=message, details=details)

class InputValidationError(AIABaseError):
    """Raised when caller input is rejected. No state is mutated."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="VALIDATION_ERROR", message=message, details=details)

class CollaboratorError(AIABaseError):
    """
    Raised when an external collaborator (resume parser, question generator,
    scorer, report generator) fails. The session is left unchanged.
    """
    def __init__(self, collaborator: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.collaborator = collaborator
        super().__init__(code="COLLABORATOR_ERROR", message=f"{collaborator}: {message}", details=details)

class PersistenceError(AIABaseError):
    """Raised by snapshot repositories when durable storage fails."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="PERSISTENCE_ERROR", message=message, details=details)

class InvariantViolationError(AIABaseError):
    """Raised when the session data breaks a structural invariant."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="INVARIANT_VIOLATION", message=message, details=details)
