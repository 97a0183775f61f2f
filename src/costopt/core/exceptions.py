"""Custom exceptions for the cost optimization runbooks."""

from typing import Optional, Dict, Any


class CostOptimizationException(Exception):
    """Base exception for the runbooks."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationException(CostOptimizationException):
    """Raised when configuration is invalid."""
    pass


class AuthenticationException(CostOptimizationException):
    """Raised when no credential can be acquired. Aborts the whole run."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Authentication failed: {message}", details)


class ClientConnectionException(CostOptimizationException):
    """Raised when client connections fail."""
    
    def __init__(self, client_type: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.client_type = client_type
        super().__init__(f"{client_type} connection failed: {message}", details)


class MetricsException(CostOptimizationException):
    """Raised when metrics collection fails."""
    pass


class ResourceNotFoundException(CostOptimizationException):
    """Raised when a named target resource does not exist in the scope."""
    
    def __init__(self, resource_type: str, name: str, scope: Optional[str] = None):
        self.resource_type = resource_type
        self.name = name
        where = f" in {scope}" if scope else ""
        super().__init__(f"{resource_type} '{name}' not found{where}")


class MutationException(CostOptimizationException):
    """Raised when a resize, tier change or scale operation fails."""
    
    def __init__(self, resource_name: str, operation: str, message: str,
                 details: Optional[Dict[str, Any]] = None):
        self.resource_name = resource_name
        self.operation = operation
        super().__init__(f"{operation} failed for {resource_name}: {message}", details)


class DeallocationTimeoutException(MutationException):
    """Raised when a VM does not reach the deallocated state within the poll budget."""
    
    def __init__(self, resource_name: str, attempts: int, last_power_state: Optional[str]):
        self.attempts = attempts
        self.last_power_state = last_power_state
        super().__init__(
            resource_name,
            "deallocate",
            f"still '{last_power_state}' after {attempts} polls",
            {"attempts": attempts, "last_power_state": last_power_state}
        )
