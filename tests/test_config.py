import pytest
import logging
from pathlib import Path
import sys

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from incident_analytics.config import AnalyticsConfig, DEFAULT_REPORTS_URL
from incident_analytics.utils.exceptions import ConfigError, IncidentAnalyticsError
from incident_analytics.utils.logger_config import setup_logger


class TestAnalyticsConfig:
    def test_defaults(self):
        config = AnalyticsConfig.from_env({})
        assert config.reports_url == DEFAULT_REPORTS_URL
        assert config.anchor == (19.0760, 72.8777)
        assert config.jitter_radius == 0.05
        assert config.request_retries == 3
        assert config.log_dir == 'logs'

    def test_values_from_env(self):
        config = AnalyticsConfig.from_env({
            'INCIDENT_REPORTS_URL': 'http://analysis:9000/reports',
            'INCIDENT_REQUEST_TIMEOUT': '12.5',
            'INCIDENT_REQUEST_RETRIES': '5',
            'INCIDENT_RATE_LIMIT': '0',
            'INCIDENT_ANCHOR_LAT': '41.8781',
            'INCIDENT_ANCHOR_LNG': '-87.6298',
            'INCIDENT_JITTER_RADIUS': '0.01',
            'INCIDENT_LOG_DIR': '',
        })
        assert config.reports_url == 'http://analysis:9000/reports'
        assert config.request_timeout == 12.5
        assert config.request_retries == 5
        assert config.rate_limit == 0.0
        assert config.anchor == (41.8781, -87.6298)
        assert config.jitter_radius == 0.01
        assert config.log_dir is None

    @pytest.mark.parametrize('key, value', [
        ('INCIDENT_REQUEST_TIMEOUT', 'soon'),
        ('INCIDENT_REQUEST_RETRIES', '0'),
        ('INCIDENT_REQUEST_RETRIES', '2.5'),
        ('INCIDENT_RATE_LIMIT', '-1'),
        ('INCIDENT_ANCHOR_LAT', '91'),
        ('INCIDENT_ANCHOR_LNG', '-181'),
        ('INCIDENT_JITTER_RADIUS', 'nan'),
        ('INCIDENT_JITTER_RADIUS', '-0.1'),
    ])
    def test_invalid_values(self, key, value):
        with pytest.raises(ConfigError):
            AnalyticsConfig.from_env({key: value})

    def test_config_error_is_package_error(self):
        assert issubclass(ConfigError, IncidentAnalyticsError)


class TestLogger:
    def test_console_only(self):
        logger = setup_logger('incident_analytics.tests.console', log_dir=None)
        assert len(logger.handlers) == 1

    def test_file_handler_and_no_duplicates(self, tmp_path):
        log_dir = tmp_path / 'logs'
        logger = setup_logger('incident_analytics.tests.file', log_dir=str(log_dir))
        again = setup_logger('incident_analytics.tests.file', log_dir=str(log_dir))
        assert logger is again
        assert len(logger.handlers) == 2
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
        assert list(log_dir.glob('incident_analytics_*.log'))
        for handler in logger.handlers:
            handler.close()
