"""
Custom exception hierarchy for the container.

Provides specific exception types so callers can tell a missing service
apart from a broken one.
"""

from typing import List, Optional, Sequence


class ContainerError(Exception):
    """Base exception for all container errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.trail: List[str] = []

    def add_context(self, class_name: str):
        """
        Record a class that was being built when this error propagated.

        Outer classes are prepended, so the trail reads from the requested
        service down to the one that failed.

        Args:
            class_name: Name of the class being autowired
        """
        self.trail.insert(0, class_name)

    def __str__(self) -> str:
        if not self.trail:
            return self.message
        return f"{self.message} (while building {' -> '.join(self.trail)})"


class NotFoundError(ContainerError):
    """Raised when no definition and no loadable type exist for an identifier."""

    def __init__(self, service_id: str):
        super().__init__(f'Service or class "{service_id}" not found.')
        self.service_id = service_id


class CircularDependencyError(ContainerError):
    """Raised when an identifier is requested again while it is being resolved."""

    def __init__(self, service_id: str, path: Optional[Sequence[str]] = None):
        self.service_id = service_id
        self.path = list(path or []) + [service_id]
        super().__init__(
            f'Circular dependency detected while resolving service "{service_id}": '
            f"{' -> '.join(self.path)}."
        )


class NotInstantiableError(ContainerError):
    """Raised when a class exists but cannot be constructed directly."""

    def __init__(self, class_name: str):
        super().__init__(f'Class "{class_name}" is not instantiable.')
        self.class_name = class_name


class UnresolvablePrimitiveError(ContainerError):
    """Raised for a parameter with no named class type and no default value."""

    def __init__(self, parameter: str):
        super().__init__(f'Cannot resolve primitive parameter "{parameter}".')
        self.parameter = parameter


class UnresolvedDependencyError(ContainerError):
    """
    Raised when a named dependency is missing and the parameter disallows None.

    The original NotFoundError is available as ``__cause__``.
    """

    def __init__(self, dependency: str, parameter: str):
        super().__init__(
            f'Dependency "{dependency}" required by parameter "{parameter}" '
            f"could not be resolved."
        )
        self.dependency = dependency
        self.parameter = parameter


class AutowiringError(ContainerError):
    """Raised when a class cannot be introspected for autowiring."""

    def __init__(self, class_name: str, reason: str):
        super().__init__(f'Failed to autowire class "{class_name}": {reason}')
        self.class_name = class_name
