"""
Tests for core infrastructure components.

Tests metrics, result objects, settings and logging configuration.
"""

import logging
import time

import pytest

from wirebox.config.settings import Settings, get_settings, set_settings
from wirebox.core.container import DIContainer
from wirebox.core.exceptions import (
    CircularDependencyError,
    ContainerError,
    NotFoundError,
    UnresolvablePrimitiveError,
)
from wirebox.core.logging_config import configure_from_settings, get_logger, setup_logging
from wirebox.core.metrics import BUILD, BUILDS, CACHE_HITS, GET, MetricsCollector, Timer
from wirebox.core.results import Result


class Leaf:
    pass


class Branch:
    def __init__(self, leaf: Leaf):
        self.leaf = leaf


class NeedsHost:
    def __init__(self, host: str):
        self.host = host


class NeedsBrokenChild:
    def __init__(self, child: NeedsHost):
        self.child = child


class TestMetricsCollector:
    """Test MetricsCollector functionality."""

    def setup_method(self):
        """Set up test fixtures."""
        self.metrics = MetricsCollector()

    def test_increment(self):
        self.metrics.increment('resolved')
        self.metrics.increment('resolved', 2)

        assert self.metrics.get_counter('resolved') == 3
        assert self.metrics.get_counter('unknown') == 0

    def test_record_timing(self):
        self.metrics.record_timing('build', 0.2)
        self.metrics.record_timing('build', 0.4)

        assert self.metrics.get_avg_timing('build') == pytest.approx(0.3)
        assert self.metrics.get_avg_timing('missing') is None

    def test_record_error(self):
        self.metrics.record_error('get', 'NotFoundError')
        self.metrics.record_error('get', 'NotFoundError')
        self.metrics.record_error('get', 'CircularDependencyError')

        assert self.metrics.get_error_count('get') == 3
        assert self.metrics.get_error_count('get', 'NotFoundError') == 2
        assert self.metrics.get_counter('get_errors') == 3

    def test_summary_and_reset(self):
        self.metrics.increment('builds')
        self.metrics.record_timing('build', 0.1)

        summary = self.metrics.get_summary()
        assert summary['counters'] == {'builds': 1}
        assert summary['total_metrics'] == 2

        self.metrics.reset()
        assert self.metrics.get_summary()['total_metrics'] == 0

    def test_log_summary(self, caplog):
        self.metrics.increment(BUILDS, 2)
        self.metrics.increment(CACHE_HITS)

        with caplog.at_level(logging.INFO, logger='wirebox.core.metrics'):
            self.metrics.log_summary()

        assert '2 builds, 1 cache hits, 0 errors' in caplog.text


class TestTimer:
    """Test Timer context manager."""

    def test_records_duration(self):
        metrics = MetricsCollector()

        with Timer('work', metrics, {'service': 'x'}) as timer:
            time.sleep(0.01)

        assert timer.elapsed() > 0
        assert metrics.get_avg_timing('work') >= 0.01
        assert metrics.metrics[-1].tags == {'service': 'x'}

    def test_records_on_exception(self):
        metrics = MetricsCollector()

        with pytest.raises(ValueError):
            with Timer('work', metrics):
                raise ValueError('failed')

        assert len(metrics.timings['work']) == 1

    def test_without_collector(self):
        timer = Timer('work')

        assert timer.elapsed() == 0.0
        with timer:
            pass


class TestContainerMetrics:
    """Test metrics reported by the container."""

    def setup_method(self):
        """Set up test fixtures."""
        self.metrics = MetricsCollector()
        self.container = DIContainer(metrics=self.metrics, thread_safe=False)

    def test_builds_and_cache_hits(self):
        self.container.get(Branch)
        self.container.get(Branch)
        self.container.get(Leaf)

        assert self.metrics.get_counter(BUILDS) == 2
        assert self.metrics.get_counter(CACHE_HITS) == 2
        assert len(self.metrics.timings[BUILD]) == 2

    def test_nested_failure_counted_once(self):
        with pytest.raises(UnresolvablePrimitiveError):
            self.container.get(NeedsBrokenChild)

        assert self.metrics.get_error_count(GET) == 1
        assert self.metrics.get_error_count(GET, 'UnresolvablePrimitiveError') == 1

    def test_not_found_counted(self):
        with pytest.raises(NotFoundError):
            self.container.get('missing.Service')

        assert self.metrics.get_error_count(GET, 'NotFoundError') == 1

    def test_metrics_enabled_from_settings(self, monkeypatch):
        monkeypatch.setenv('CONTAINER_COLLECT_METRICS', 'true')

        container = DIContainer(settings=Settings())

        assert isinstance(container.metrics, MetricsCollector)

    def test_metrics_disabled_by_default(self, monkeypatch):
        monkeypatch.delenv('CONTAINER_COLLECT_METRICS', raising=False)

        container = DIContainer(settings=Settings())

        assert container.metrics is None


class TestResult:
    """Test Result objects."""

    def test_result_success(self):
        result = Result.success_result('test_value')

        assert result.is_success()
        assert result.get_value() == 'test_value'
        assert result.get_error() is None

    def test_result_failure(self):
        error = CircularDependencyError('a', ['a', 'b'])
        result = Result.failure_result(error)

        assert result.is_failure()
        assert 'a -> b -> a' in result.get_error()

        with pytest.raises(CircularDependencyError) as exc_info:
            result.get_value()
        assert exc_info.value is error


class TestExceptions:
    """Test exception messages and context."""

    def test_trail_is_rendered(self):
        error = ContainerError('broken')
        error.add_context('app.Inner')
        error.add_context('app.Outer')

        assert error.trail == ['app.Outer', 'app.Inner']
        assert str(error) == 'broken (while building app.Outer -> app.Inner)'

    def test_message_without_trail(self):
        assert str(NotFoundError('x')) == 'Service or class "x" not found.'


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for name in ('LOG_LEVEL', 'LOG_FILE', 'CONTAINER_THREAD_SAFE',
                     'CONTAINER_COLLECT_METRICS', 'CONTAINER_BOOTSTRAP'):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.log_level == 'INFO'
        assert settings.log_file is None
        assert settings.thread_safe is False
        assert settings.collect_metrics is False
        assert settings.bootstrap is None

    @pytest.mark.parametrize('raw, expected', [
        ('true', True),
        ('1', True),
        ('Yes', True),
        ('false', False),
        ('0', False),
        ('', False),
    ])
    def test_flag_parsing(self, monkeypatch, raw, expected):
        monkeypatch.setenv('CONTAINER_THREAD_SAFE', raw)

        assert Settings().thread_safe is expected

    def test_get_and_to_dict(self, monkeypatch):
        monkeypatch.setenv('CONTAINER_BOOTSTRAP', 'app.wiring:configure')
        monkeypatch.delenv('LOG_FILE', raising=False)
        settings = Settings()

        assert settings.get('bootstrap') == 'app.wiring:configure'
        assert settings.get('log_file', 'fallback.log') == 'fallback.log'
        assert settings.get('unknown', 42) == 42
        assert settings.to_dict()['bootstrap'] == 'app.wiring:configure'

    def test_thread_safe_container_from_settings(self, monkeypatch):
        monkeypatch.setenv('CONTAINER_THREAD_SAFE', 'true')

        container = DIContainer(settings=Settings())

        assert container.get(Branch).leaf is container.get(Leaf)

    def test_global_settings_override(self):
        custom = Settings()
        set_settings(custom)
        try:
            assert get_settings() is custom
        finally:
            set_settings(None)

        assert get_settings() is not custom


class TestLogging:
    """Test logging configuration."""

    def test_get_logger(self):
        assert get_logger('wirebox.test').name == 'wirebox.test'

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / 'logs' / 'container.log'

        setup_logging(level='DEBUG', log_file=str(log_file))
        get_logger('wirebox.test').debug('resolution step')
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert log_file.exists()
        assert 'resolution step' in log_file.read_text()

        setup_logging(level='WARNING')

    def test_configure_from_settings_with_level_override(self, monkeypatch, tmp_path):
        log_file = tmp_path / 'wiring.log'
        monkeypatch.setenv('LOG_LEVEL', 'ERROR')
        monkeypatch.setenv('LOG_FORMAT', '%(levelname)s|%(message)s')
        monkeypatch.setenv('LOG_FILE', str(log_file))
        settings = Settings()

        configure_from_settings(settings, level='DEBUG')
        get_logger('wirebox.test').debug('overridden level')
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert logging.getLogger().level == logging.DEBUG
        assert 'DEBUG|overridden level' in log_file.read_text()

        configure_from_settings(settings)
        assert logging.getLogger().level == logging.ERROR

        setup_logging(level='WARNING')
