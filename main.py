#!/usr/bin/env python3
"""
Wiring check entry point.

Resolves service identifiers from the command line, optionally after a
bootstrap function has registered definitions, and reports which ones fail.
"""

import argparse
import importlib
import sys
from typing import Callable, List, Optional

from wirebox.core.container import DIContainer
from wirebox.core.exceptions import ContainerError
from wirebox.core.logging_config import configure_from_settings, get_logger
from wirebox.core.metrics import MetricsCollector
from wirebox.config.settings import get_settings

logger = get_logger(__name__)


def load_bootstrap(reference: str) -> Callable[[DIContainer], None]:
    """
    Load a bootstrap function from a ``module:function`` reference.

    Args:
        reference: Reference such as ``myapp.wiring:configure``

    Returns:
        Function taking the container
    """
    module_name, _, attribute = reference.partition(':')
    if not module_name or not attribute:
        raise ValueError(f"Bootstrap must look like 'module:function', got '{reference}'")
    module = importlib.import_module(module_name)
    return getattr(module, attribute)


def check_services(container: DIContainer, services: List[str]) -> bool:
    """
    Resolve every service and log the outcome.

    Args:
        container: Configured container
        services: Service identifiers to resolve

    Returns:
        True if all services resolved, False otherwise
    """
    all_resolved = True
    for name in services:
        try:
            instance = container.get(name)
            logger.info(f"{name}: OK ({type(instance).__name__})")
        except ContainerError as e:
            logger.error(f"{name}: {e}")
            all_resolved = False
    return all_resolved


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description='Check that services can be resolved by the container'
    )

    parser.add_argument(
        'services',
        nargs='+',
        help='Service identifiers (dotted class names or registered ids)'
    )

    parser.add_argument(
        '--bootstrap',
        type=str,
        default=settings.bootstrap,
        help='module:function called with the container before resolving'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default=settings.log_level,
        help=f'Logging level (default: {settings.log_level})'
    )

    parser.add_argument(
        '--metrics',
        action='store_true',
        help='Log resolution metrics when done'
    )

    args = parser.parse_args(argv)

    configure_from_settings(settings, level=args.log_level)

    container = DIContainer(
        metrics=MetricsCollector() if args.metrics else None,
        settings=settings
    )

    try:
        if args.bootstrap:
            load_bootstrap(args.bootstrap)(container)

        success = check_services(container, args.services)

        if container.metrics:
            container.metrics.log_summary()

        return 0 if success else 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {str(e)}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
