"""
Dependency Injection Container.

Resolves services by identifier, autowiring constructor dependencies from
their type annotations, and caches every service for the container's
lifetime.
"""

import contextlib
import inspect
import threading
from typing import Dict, Any, List, Optional, Tuple

from .definitions import ClassName, Definition, Factory, Instance, to_definition
from .exceptions import (
    AutowiringError,
    CircularDependencyError,
    ContainerError,
    NotFoundError,
    NotInstantiableError,
    UnresolvablePrimitiveError,
    UnresolvedDependencyError,
)
from .interfaces import ITypeIntrospector
from .introspection import ParameterDescriptor, RuntimeTypeIntrospector, TypeKind, service_id
from .logging_config import get_logger
from .metrics import BUILD, BUILDS, CACHE_HITS, GET, MetricsCollector, Timer
from .results import Result
from ..config.settings import Settings, get_settings

logger = get_logger(__name__)


class DIContainer:
    """
    Dependency Injection Container.

    Every identifier is built at most once; ``get`` returns the same object
    for it afterwards. Identifiers may also be given as classes, which are
    converted with ``service_id``.

    Example:
        container = DIContainer()
        container.set('mailer.transport', lambda c: SmtpTransport(host='localhost'))
        service = container.get(NewsletterService)
    """

    def __init__(
        self,
        definitions: Optional[Dict[Any, Any]] = None,
        introspector: Optional[ITypeIntrospector] = None,
        metrics: Optional[MetricsCollector] = None,
        thread_safe: Optional[bool] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize the container.

        Args:
            definitions: Initial mapping of identifiers to definitions
            introspector: Type introspector (RuntimeTypeIntrospector if None)
            metrics: Metrics collector (created when settings enable metrics)
            thread_safe: Serialize resolution with a lock (settings if None)
            settings: Settings object (global settings if None)
        """
        settings = settings or get_settings()

        self._definitions: Dict[str, Definition] = {}
        self._instances: Dict[str, Any] = {}
        # Ordered so a cycle can be reported as a path
        self._resolving: Dict[str, None] = {}
        self._introspector = introspector or RuntimeTypeIntrospector()

        if metrics is None and settings.collect_metrics:
            metrics = MetricsCollector()
        self.metrics = metrics

        if thread_safe is None:
            thread_safe = settings.thread_safe
        self._lock = threading.RLock() if thread_safe else contextlib.nullcontext()

        for name, concrete in (definitions or {}).items():
            self.set(name, concrete)

    def _key(self, name: Any) -> str:
        return service_id(name) if inspect.isclass(name) else name

    def get(self, name: Any) -> Any:
        """
        Get a service instance.

        Args:
            name: Service identifier or class

        Returns:
            Service instance

        Raises:
            NotFoundError: No definition and no loadable class for the identifier
            ContainerError: The service exists but could not be built
        """
        name = self._key(name)

        with self._lock:
            if name in self._instances:
                if self.metrics:
                    self.metrics.increment(CACHE_HITS)
                return self._instances[name]

            if name in self._resolving:
                raise CircularDependencyError(name, list(self._resolving))

            self._resolving[name] = None
            try:
                logger.debug(f"Resolving service {name}")
                with Timer(BUILD, self.metrics, {'service': name}):
                    instance = self._build(name)
            except ContainerError as e:
                if self.metrics and len(self._resolving) == 1:
                    self.metrics.record_error(GET, type(e).__name__)
                raise
            finally:
                del self._resolving[name]

            self._instances[name] = instance
            if self.metrics:
                self.metrics.increment(BUILDS)
            return instance

    def try_get(self, name: Any) -> Result[Any]:
        """
        Get a service instance without raising container errors.

        Args:
            name: Service identifier or class

        Returns:
            Result with the instance, or with the ContainerError on failure
        """
        try:
            return Result.success_result(self.get(name))
        except ContainerError as e:
            logger.debug(f"Service {self._key(name)} unavailable: {e}")
            return Result.failure_result(e)

    def has(self, name: Any) -> bool:
        """
        Check if a service is registered or names a loadable class.

        The class may still fail to build; this never raises.
        """
        name = self._key(name)
        if name in self._definitions:
            return True
        try:
            return self._introspector.is_loadable(name)
        except Exception as e:
            logger.warning(f"Could not load type {name}: {e}")
            return False

    def set(self, name: Any, concrete: Any):
        """
        Register a service definition, replacing any previous one.

        An instance that was already built for the identifier stays cached.

        Args:
            name: Service identifier or class
            concrete: Instance, factory taking the container, class, or class name
        """
        with self._lock:
            self._definitions[self._key(name)] = to_definition(concrete)

    def is_resolved(self, name: Any) -> bool:
        """Check if an instance has already been built for the identifier."""
        return self._key(name) in self._instances

    def _build(self, name: str) -> Any:
        definition = self._definitions.get(name, ClassName(name))

        if isinstance(definition, Factory):
            return definition.func(self)

        if isinstance(definition, Instance):
            return definition.value

        if isinstance(definition, ClassName) and self._introspector.is_loadable(definition.name):
            return self._autowire(definition.name)

        raise NotFoundError(name)

    def _autowire(self, class_name: str) -> Any:
        """
        Build a class by resolving its constructor parameters.

        Args:
            class_name: Loadable class name

        Returns:
            New instance
        """
        if not self._introspector.is_instantiable(class_name):
            raise NotInstantiableError(class_name)

        if not self._introspector.has_constructor(class_name):
            return self._introspector.instantiate(class_name, [], {})

        try:
            parameters = self._introspector.constructor_parameters(class_name)
        except (TypeError, ValueError) as e:
            raise AutowiringError(class_name, str(e)) from e

        try:
            args, kwargs = self._resolve_arguments(parameters)
        except ContainerError as e:
            e.add_context(class_name)
            raise

        logger.debug(f"Autowiring {class_name} with {len(args) + len(kwargs)} arguments")
        return self._introspector.instantiate(class_name, args, kwargs)

    def _resolve_arguments(self, parameters: List[ParameterDescriptor]) -> Tuple[List[Any], Dict[str, Any]]:
        args: List[Any] = []
        kwargs: Dict[str, Any] = {}

        for parameter in parameters:
            value = self._resolve_parameter(parameter)
            if parameter.keyword_only:
                kwargs[parameter.name] = value
            elif parameter.variadic:
                # *args receives exactly this one value
                args.append(value)
            else:
                args.append(value)

        return args, kwargs

    def _resolve_parameter(self, parameter: ParameterDescriptor) -> Any:
        """
        Resolve one constructor parameter.

        Only a single named class is looked up in the container. Untyped,
        builtin, union and intersection parameters fall back to their
        default value.
        """
        if parameter.kind is not TypeKind.NAMED:
            if parameter.has_default:
                return parameter.default
            raise UnresolvablePrimitiveError(parameter.name)

        try:
            return self.get(parameter.type_name)
        except NotFoundError as e:
            if parameter.nullable:
                logger.debug(f"Injecting None for parameter {parameter.name}: {e}")
                return None
            raise UnresolvedDependencyError(parameter.type_name, parameter.name) from e
