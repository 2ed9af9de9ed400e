"""
Core module providing the container and its collaborators.

Includes the container, definitions, type introspection, interfaces,
exceptions and supporting utilities.
"""

from .container import DIContainer
from .definitions import ClassName, Factory, Instance
from .exceptions import (
    AutowiringError,
    CircularDependencyError,
    ContainerError,
    NotFoundError,
    NotInstantiableError,
    UnresolvablePrimitiveError,
    UnresolvedDependencyError,
)
from .interfaces import IContainer, ITypeIntrospector
from .introspection import (
    ParameterDescriptor,
    RuntimeTypeIntrospector,
    TypeKind,
    not_instantiable,
    service_id,
)
from .results import Result

__all__ = [
    'DIContainer',
    'ClassName',
    'Factory',
    'Instance',
    'AutowiringError',
    'CircularDependencyError',
    'ContainerError',
    'NotFoundError',
    'NotInstantiableError',
    'UnresolvablePrimitiveError',
    'UnresolvedDependencyError',
    'IContainer',
    'ITypeIntrospector',
    'ParameterDescriptor',
    'RuntimeTypeIntrospector',
    'TypeKind',
    'not_instantiable',
    'service_id',
    'Result',
]
