"""
Runtime type introspection.

Loads classes by dotted name and describes their constructor parameters
using ``importlib``, ``inspect`` and ``typing``. This is the only place that
looks at Python classes directly; the container works with names and
ParameterDescriptor values.
"""

import builtins
import importlib
import inspect
import types
import typing
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .logging_config import get_logger

logger = get_logger(__name__)

_NOT_INSTANTIABLE = '__wirebox_not_instantiable__'

# Python 3.10+ ``X | Y`` annotations
_UnionType = getattr(types, 'UnionType', None)

# Classes already named by service_id(), so locally defined classes stay loadable
_known_types: 'weakref.WeakValueDictionary[str, type]' = weakref.WeakValueDictionary()

# Builtin value types are parameter types, never services
_VALUE_TYPES = frozenset({
    bool, int, float, complex, str, bytes, bytearray, memoryview,
    list, tuple, dict, set, frozenset, range, slice, type,
})


class TypeKind(Enum):
    """Kind of type declared for a constructor parameter."""
    NO_TYPE = 'no_type'
    BUILTIN = 'builtin'
    NAMED = 'named'
    UNION = 'union'
    INTERSECTION = 'intersection'


@dataclass(frozen=True)
class ParameterDescriptor:
    """
    Constructor parameter metadata consumed by the container.

    ``members`` lists the member types of a union or intersection; the
    container never looks them up and only shows them in diagnostics.
    """
    name: str
    kind: TypeKind
    type_name: Optional[str] = None
    members: Tuple[str, ...] = ()
    nullable: bool = False
    has_default: bool = False
    default: Any = None
    variadic: bool = False
    keyword_only: bool = False


def service_id(cls: type) -> str:
    """
    Get the service identifier conventionally used for a class.

    Builtin classes are named bare (``object``, ``int``); everything else is
    ``module.QualifiedName``. The class is remembered so the name stays
    loadable even when it cannot be imported (classes defined in functions).

    Args:
        cls: Class to name

    Returns:
        Service identifier
    """
    if cls.__module__ == 'builtins':
        name = cls.__qualname__
    else:
        name = f"{cls.__module__}.{cls.__qualname__}"
    _known_types[name] = cls
    return name


def not_instantiable(target):
    """
    Mark a class, or its ``__init__``/``__new__``, as closed to autowiring.

    This is how a class declares that it must not be constructed directly,
    e.g. because instances come from a classmethod constructor.
    """
    setattr(target, _NOT_INSTANTIABLE, True)
    return target


def _is_protocol(cls: type) -> bool:
    return bool(getattr(cls, '_is_protocol', False))


class RuntimeTypeIntrospector:
    """
    Type introspector backed by the running interpreter.

    Protocol classes are treated as unloadable: like interfaces, they name a
    contract rather than something that can be built, so a nullable
    parameter typed with an unbound protocol receives None.
    """

    def find_type(self, name: str) -> Optional[type]:
        """
        Find the class a name refers to.

        Args:
            name: Builtin class name or dotted ``module.QualifiedName``

        Returns:
            The class, or None if the name does not denote a loadable class
        """
        cls = _known_types.get(name)
        if cls is None:
            cls = self._import_type(name)
            if cls is not None:
                _known_types[name] = cls
        if cls is None or _is_protocol(cls):
            return None
        return cls

    def _import_type(self, name: str) -> Optional[type]:
        if '.' not in name:
            candidate = getattr(builtins, name, None)
            if not inspect.isclass(candidate) or candidate in _VALUE_TYPES:
                return None
            return candidate

        parts = name.split('.')
        # Try the longest module path first so nested classes also resolve
        for split in range(len(parts) - 1, 0, -1):
            module_name = '.'.join(parts[:split])
            try:
                target = importlib.import_module(module_name)
            except (ImportError, TypeError, ValueError):
                continue

            for attribute in parts[split:]:
                target = getattr(target, attribute, None)
                if target is None:
                    break

            if inspect.isclass(target):
                logger.debug(f"Loaded type {name} from module {module_name}")
                return target
            return None
        return None

    def _require_type(self, name: str) -> type:
        cls = self.find_type(name)
        if cls is None:
            raise LookupError(f"Type '{name}' is not loadable")
        return cls

    def is_loadable(self, name: str) -> bool:
        """Check if a name denotes a loadable class."""
        return self.find_type(name) is not None

    def is_instantiable(self, name: str) -> bool:
        """Check if a class can be constructed directly."""
        cls = self._require_type(name)
        if inspect.isabstract(cls) or issubclass(cls, Enum):
            return False
        if vars(cls).get(_NOT_INSTANTIABLE, False):
            return False
        return not (
            getattr(cls.__init__, _NOT_INSTANTIABLE, False)
            or getattr(cls.__new__, _NOT_INSTANTIABLE, False)
        )

    def has_constructor(self, name: str) -> bool:
        """Check if a class declares a constructor of its own or inherits one."""
        cls = self._require_type(name)
        return cls.__init__ is not object.__init__ or cls.__new__ is not object.__new__

    def constructor_parameters(self, name: str) -> List[ParameterDescriptor]:
        """
        Describe the constructor parameters of a class in declaration order.

        ``**kwargs`` is not described. Forward references that cannot be
        evaluated are reported as named types using the reference text.

        Args:
            name: Class name

        Returns:
            List of parameter descriptors

        Raises:
            ValueError, TypeError: If the class has no inspectable signature
        """
        cls = self._require_type(name)
        signature = inspect.signature(cls)
        hints = self._type_hints(cls)

        descriptors = []
        for parameter in signature.parameters.values():
            if parameter.kind is inspect.Parameter.VAR_KEYWORD:
                continue

            annotation = hints.get(parameter.name, parameter.annotation)
            kind, type_name, members, nullable = self._describe(annotation)
            has_default = parameter.default is not inspect.Parameter.empty

            descriptors.append(ParameterDescriptor(
                name=parameter.name,
                kind=kind,
                type_name=type_name,
                members=members,
                nullable=nullable or (has_default and parameter.default is None),
                has_default=has_default,
                default=parameter.default if has_default else None,
                variadic=parameter.kind is inspect.Parameter.VAR_POSITIONAL,
                keyword_only=parameter.kind is inspect.Parameter.KEYWORD_ONLY,
            ))
        return descriptors

    def instantiate(self, name: str, args: Sequence[Any], kwargs: Dict[str, Any]) -> Any:
        """Construct a class with the given arguments."""
        cls = self._require_type(name)
        return cls(*args, **kwargs)

    def _type_hints(self, cls: type) -> Dict[str, Any]:
        """
        Evaluate constructor annotations one parameter at a time.

        A reference that cannot be evaluated (e.g. a name imported only
        under ``TYPE_CHECKING``) leaves just that parameter with its raw
        annotation.
        """
        constructor = cls.__init__ if cls.__init__ is not object.__init__ else cls.__new__
        constructor = inspect.unwrap(constructor)
        annotations = getattr(constructor, '__annotations__', None) or {}
        globalns = getattr(constructor, '__globals__', {})

        hints = {}
        for name, annotation in annotations.items():
            holder = types.SimpleNamespace(__annotations__={name: annotation})
            try:
                hints.update(typing.get_type_hints(holder, globalns=globalns))
            except (NameError, TypeError, SyntaxError) as e:
                logger.debug(f"Keeping raw annotation of {cls.__qualname__}.{name}: {e}")
        return hints

    def _describe(self, annotation: Any) -> Tuple[TypeKind, Optional[str], Tuple[str, ...], bool]:
        """Map an annotation to (kind, type_name, members, nullable)."""
        if annotation is inspect.Parameter.empty or annotation is Any:
            return TypeKind.NO_TYPE, None, (), False

        if isinstance(annotation, str):
            if inspect.isclass(getattr(builtins, annotation, None)):
                return TypeKind.BUILTIN, None, (), False
            return TypeKind.NAMED, annotation, (), False
        if isinstance(annotation, typing.ForwardRef):
            return TypeKind.NAMED, annotation.__forward_arg__, (), False

        origin = typing.get_origin(annotation)
        if origin is typing.Union or (_UnionType is not None and origin is _UnionType):
            args = typing.get_args(annotation)
            members = [arg for arg in args if arg is not type(None)]
            nullable = len(members) < len(args)
            if len(members) == 1:
                kind, type_name, inner, inner_nullable = self._describe(members[0])
                return kind, type_name, inner, nullable or inner_nullable
            return TypeKind.UNION, None, tuple(self._label(m) for m in members), nullable

        # Parameterized generics, Literal, Callable and friends
        if origin is not None:
            return TypeKind.BUILTIN, None, (), False

        if inspect.isclass(annotation) and annotation.__module__ != 'builtins':
            return TypeKind.NAMED, service_id(annotation), (), False

        return TypeKind.BUILTIN, None, (), False

    def _label(self, annotation: Any) -> str:
        if inspect.isclass(annotation):
            return service_id(annotation)
        if isinstance(annotation, typing.ForwardRef):
            return annotation.__forward_arg__
        return str(annotation)
