"""
Service definitions.

A definition is what the container holds for an identifier: a pre-built
instance, a factory, or the name of a class to autowire.
"""

import functools
import inspect
import types
from dataclasses import dataclass
from typing import Any, Callable, Union

from .introspection import service_id


@dataclass(frozen=True)
class Instance:
    """A pre-built value returned as-is."""
    value: Any


@dataclass(frozen=True)
class Factory:
    """A callable invoked once with the container as its only argument."""
    func: Callable[[Any], Any]


@dataclass(frozen=True)
class ClassName:
    """The name of a class to autowire."""
    name: str


Definition = Union[Instance, Factory, ClassName]

_FACTORY_TYPES = (
    types.FunctionType,
    types.MethodType,
    functools.partial,
)


def to_definition(concrete: Any) -> Definition:
    """
    Normalize a raw registration into a tagged definition.

    Strings and classes become class names, plain functions become
    factories, everything else is an instance. Wrap a value in ``Instance``
    explicitly to register a string or a function as the service itself.

    Args:
        concrete: Raw value passed to ``DIContainer.set``

    Returns:
        Tagged definition
    """
    if isinstance(concrete, (Instance, Factory, ClassName)):
        return concrete
    if isinstance(concrete, str):
        return ClassName(concrete)
    if inspect.isclass(concrete):
        return ClassName(service_id(concrete))
    if isinstance(concrete, _FACTORY_TYPES):
        return Factory(concrete)
    return Instance(concrete)
