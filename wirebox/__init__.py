"""
wirebox: an autowiring dependency-injection container.
"""

from .core import (
    ClassName,
    ContainerError,
    DIContainer,
    Factory,
    Instance,
    NotFoundError,
    not_instantiable,
    service_id,
)

__version__ = '1.0.0'

__all__ = [
    'ClassName',
    'ContainerError',
    'DIContainer',
    'Factory',
    'Instance',
    'NotFoundError',
    'not_instantiable',
    'service_id',
]
