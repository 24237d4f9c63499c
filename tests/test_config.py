"""
cwdatasource/config.py 단위 테스트

Settings 환경 변수 로딩, load_datasource_config, InstanceManager 테스트.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from cwdatasource.auth.types import AuthType, ConfigurationError
from cwdatasource.config import (
    InstanceManager,
    Settings,
    datasource_config_factory,
    get_version,
    load_datasource_config,
)
from cwdatasource.models import DataSourceInstanceSettings, PluginContext

# =============================================================================
# Settings 테스트
# =============================================================================


class TestSettings:
    """Settings 테스트"""

    def test_defaults(self, monkeypatch):
        for name in ("CWDS_LOG_POLL_INTERVAL_MS", "CWDS_LOG_MAX_ATTEMPTS", "CWDS_MAX_WORKERS", "CWDS_DEFAULT_REGION"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.log_poll_interval_ms == 1000
        assert settings.log_poll_interval == 1.0
        assert settings.log_max_attempts == 8
        assert settings.max_workers == 10
        assert settings.default_region == ""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CWDS_LOG_POLL_INTERVAL_MS", "250")
        monkeypatch.setenv("CWDS_LOG_MAX_ATTEMPTS", "3")
        monkeypatch.setenv("CWDS_MAX_WORKERS", "2")
        monkeypatch.setenv("CWDS_DEFAULT_REGION", "eu-west-1")

        settings = Settings.from_env()

        assert settings.log_poll_interval == 0.25
        assert settings.log_max_attempts == 3
        assert settings.max_workers == 2
        assert settings.default_region == "eu-west-1"

    def test_invalid_env(self, monkeypatch):
        monkeypatch.setenv("CWDS_LOG_MAX_ATTEMPTS", "many")

        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_env()

        assert exc_info.value.config_key == "CWDS_LOG_MAX_ATTEMPTS"

    def test_negative_env(self, monkeypatch):
        monkeypatch.setenv("CWDS_MAX_WORKERS", "-1")

        with pytest.raises(ConfigurationError):
            Settings.from_env()

    def test_settings_is_frozen(self):
        """설정이 불변인지 확인"""
        with pytest.raises(AttributeError):
            Settings().max_workers = 1

    def test_version(self):
        assert get_version().count(".") == 2


# =============================================================================
# load_datasource_config 테스트
# =============================================================================


class TestLoadDatasourceConfig:
    """load_datasource_config 테스트"""

    def test_full(self):
        config = load_datasource_config(
            {
                "authType": "credentials",
                "profile": "monitoring",
                "defaultRegion": "us-east-1",
                "assumeRoleArn": "arn:aws:iam::123456789012:role/R",
                "externalId": "ext",
                "customMetricsNamespaces": "App/A,App/B",
            },
            {"accessKey": "AKIA", "secretKey": "secret"},
        )

        assert config.auth_type is AuthType.SHARED_PROFILE
        assert config.profile == "monitoring"
        assert config.region == "us-east-1"
        assert config.assume_role_arn == "arn:aws:iam::123456789012:role/R"
        assert config.external_id == "ext"
        assert config.namespaces == ["App/A", "App/B"]
        assert config.access_key == "AKIA"
        assert config.secret_key == "secret"

    def test_json_string(self):
        config = load_datasource_config('{"authType": "keys", "defaultRegion": "eu-west-1"}')

        assert config.auth_type is AuthType.STATIC_KEYS
        assert config.region == "eu-west-1"

    def test_empty(self):
        config = load_datasource_config(b"")
        assert config.auth_type is AuthType.DEFAULT

    def test_legacy_database_profile(self):
        """profile이 비어 있으면 database 필드 사용"""
        config = load_datasource_config({"authType": "credentials"}, database="legacy")
        assert config.profile == "legacy"

    def test_default_region_from_settings(self, monkeypatch):
        """defaultRegion이 없으면 CWDS_DEFAULT_REGION 사용"""
        import cwdatasource.config as config_module

        monkeypatch.setattr(config_module, "settings", Settings(default_region="sa-east-1"))

        assert load_datasource_config({}).region == "sa-east-1"
        assert load_datasource_config({"defaultRegion": "us-east-1"}).region == "us-east-1"

    def test_invalid_json(self):
        with pytest.raises(ConfigurationError):
            load_datasource_config("{not json")

    def test_non_object_json(self):
        with pytest.raises(ConfigurationError):
            load_datasource_config("[1, 2]")

    def test_unknown_auth_type(self):
        with pytest.raises(ConfigurationError):
            load_datasource_config({"authType": "ec2_iam_role"})


# =============================================================================
# InstanceManager 테스트
# =============================================================================


def _ctx(uid="ds-1", updated=None, **json_data):
    return PluginContext(DataSourceInstanceSettings(uid=uid, json_data=json_data, updated=updated))


class TestInstanceManager:
    """InstanceManager 테스트"""

    def test_cached_per_uid(self):
        factory = MagicMock(side_effect=lambda ds: object())
        manager = InstanceManager(factory=factory)

        a = manager.get(_ctx("ds-1"))
        b = manager.get(_ctx("ds-1"))
        c = manager.get(_ctx("ds-2"))

        assert a is b
        assert a is not c
        assert factory.call_count == 2

    def test_rebuilt_when_updated_changes(self):
        manager = InstanceManager(factory=datasource_config_factory)
        t1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        t2 = datetime(2024, 1, 2, tzinfo=timezone.utc)

        first = manager.get(_ctx(updated=t1, defaultRegion="us-east-1"))
        second = manager.get(_ctx(updated=t2, defaultRegion="eu-west-1"))

        assert first.region == "us-east-1"
        assert second.region == "eu-west-1"

    def test_factory_error_not_cached(self):
        manager = InstanceManager(factory=datasource_config_factory)

        with pytest.raises(ConfigurationError):
            manager.get(_ctx(authType="bogus"))

        assert manager.get(_ctx(uid="ds-1", authType="keys")).auth_type is AuthType.STATIC_KEYS

    def test_dispose(self):
        factory = MagicMock(side_effect=lambda ds: object())
        manager = InstanceManager(factory=factory)

        manager.get(_ctx())
        manager.dispose("ds-1")
        manager.get(_ctx())

        assert factory.call_count == 2
