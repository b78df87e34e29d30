"""
Custom exceptions for SERVICE_LIFETIMES.

Every error raised by the container, the scopes and the settings layer derives
from ServiceLifetimesError, which stays compatible with RuntimeError.
Wiring errors are static defects: they are never retried.
"""

from typing import Any, Dict, List, Optional


def _type_name(value: Any) -> str:
    return getattr(value, "__name__", repr(value))


class ServiceLifetimesError(RuntimeError):
    """
    Base exception for SERVICE_LIFETIMES errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (service_type,
                 scope_id, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ConfigurationError(ServiceLifetimesError):
    """
    Raised when the service graph or the settings are invalid.

    Covers captive dependencies (a Scoped service reachable from a Singleton),
    unbuildable graphs and bad option values.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        service_type: Service whose graph failed validation (if available)
        dependency: Offending dependency (if available)
        chain: Dependency chain from service_type to dependency (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        service_type: Optional[type] = None,
        dependency: Optional[type] = None,
        chain: Optional[List[type]] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        if service_type is not None:
            context["service_type"] = _type_name(service_type)
        if dependency is not None:
            context["dependency"] = _type_name(dependency)
        if chain:
            context["chain"] = " -> ".join(_type_name(t) for t in chain)
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value
        self.service_type = service_type
        self.dependency = dependency
        self.chain = chain or []


class InvalidOperationError(ServiceLifetimesError):
    """
    Raised when the container or a scope is used in a way its state forbids.

    Examples: registering after build, resolving from an ended scope.
    """


class MissingScopeError(InvalidOperationError):
    """
    Raised when a Scoped service is resolved outside of any request scope.

    Never falls back to a different lifetime.
    """

    def __init__(
        self,
        message: str,
        service_type: Optional[type] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if service_type is not None:
            context["service_type"] = _type_name(service_type)
        super().__init__(message, context=context)
        self.service_type = service_type


class ServiceNotRegisteredError(ServiceLifetimesError, KeyError):
    """Raised when a service type has no registration in the container."""

    def __init__(self, service_type: Any, context: Optional[Dict[str, Any]] = None) -> None:
        name = _type_name(service_type)
        super().__init__(
            f"Service {name} is not registered. Call container.register({name}) first.",
            context=context,
        )
        self.service_type = service_type
