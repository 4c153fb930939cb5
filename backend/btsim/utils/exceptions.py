"""
BTSim Custom Exceptions

Centralized exception classes for error handling.
"""


class BTSimBaseException(Exception):
    """Base exception for all BTSim errors."""
    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


# ============================================================================
# Validation Exceptions
# ============================================================================

class ValidationError(BTSimBaseException):
    """Input validation failed."""
    pass


# ============================================================================
# Detection Exceptions
# ============================================================================

class DetectionError(BTSimBaseException):
    """Error during credential-risk detection."""
    pass


class ModelUnavailableError(DetectionError):
    """Trainable model is disabled or has not been fitted yet."""
    pass


# ============================================================================
# Simulation Exceptions
# ============================================================================

class SimulationError(BTSimBaseException):
    """Error planning a simulation."""
    pass


class UnauthorizedOperatorError(SimulationError):
    """Red-team request without a valid operator key."""
    pass


# ============================================================================
# Storage Exceptions
# ============================================================================

class StorageError(BTSimBaseException):
    """State store operation failed."""
    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================

class ConfigurationError(BTSimBaseException):
    """Application configuration error."""
    pass
