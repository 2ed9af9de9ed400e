"""
Interface definitions using Python Protocols.

Two contracts meet at the container:

- IContainer is what application code depends on to look services up. Any
  object with ``get`` and ``has`` satisfies it, so factories and services can
  be written against the protocol and tested with a stub.
- ITypeIntrospector is what the container depends on to learn about classes.
  The container never inspects a class itself; it asks the introspector
  whether a name is loadable, whether it can be built, what its constructor
  parameters are, and finally asks it to build the instance.

Example usage:
    class StaticIntrospector:
        # Describes a fixed set of classes, e.g. generated ahead of time
        ...

    container = DIContainer(introspector=StaticIntrospector())
"""

from typing import Any, Dict, List, Protocol, Sequence, runtime_checkable

from .introspection import ParameterDescriptor


@runtime_checkable
class IContainer(Protocol):
    """
    Protocol for service containers.

    Implementations:
    - DIContainer: autowiring singleton container
    """

    def get(self, name: str) -> Any:
        """
        Find a service by its identifier and return it.

        Args:
            name: Service identifier

        Returns:
            The service instance

        Raises:
            NotFoundError: No entry exists for the identifier
            ContainerError: The entry exists but could not be built
        """
        ...

    def has(self, name: str) -> bool:
        """
        Check if the container can return an entry for the identifier.

        A True result does not guarantee that ``get`` will succeed. This
        method never raises.
        """
        ...


@runtime_checkable
class ITypeIntrospector(Protocol):
    """
    Protocol for the constructor metadata provider used by autowiring.

    Implementations:
    - RuntimeTypeIntrospector: reads live classes via inspect/typing

    All methods except ``is_loadable`` are only called for names that
    ``is_loadable`` accepted.
    """

    def is_loadable(self, name: str) -> bool:
        """Check if a name denotes a loadable type."""
        ...

    def is_instantiable(self, name: str) -> bool:
        """Check if the type can be constructed directly."""
        ...

    def has_constructor(self, name: str) -> bool:
        """Check if the type declares a constructor."""
        ...

    def constructor_parameters(self, name: str) -> List[ParameterDescriptor]:
        """Describe the constructor parameters in declaration order."""
        ...

    def instantiate(self, name: str, args: Sequence[Any], kwargs: Dict[str, Any]) -> Any:
        """Construct the type with positional and keyword arguments."""
        ...
