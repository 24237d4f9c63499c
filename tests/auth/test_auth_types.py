"""
cwdatasource/auth/types 단위 테스트

AuthType 파싱, DataSourceConfig, 인증 에러 계층 테스트.
"""

import logging

import pytest

from cwdatasource.auth.types import (
    AssumeRoleError,
    AuthenticationError,
    AuthError,
    AuthType,
    ConfigurationError,
    DataSourceConfig,
)
from cwdatasource.exceptions import CWDSError

# =============================================================================
# AuthType 테스트
# =============================================================================


class TestAuthType:
    """AuthType 테스트"""

    def test_cache_tags(self):
        """캐시 키 태그 값"""
        assert str(AuthType.DEFAULT) == "default"
        assert str(AuthType.SHARED_PROFILE) == "sharedCreds"
        assert str(AuthType.STATIC_KEYS) == "keys"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("default", AuthType.DEFAULT),
            ("credentials", AuthType.SHARED_PROFILE),
            ("keys", AuthType.STATIC_KEYS),
            ("", AuthType.DEFAULT),
            (None, AuthType.DEFAULT),
        ],
    )
    def test_parse(self, raw, expected):
        """설정 문자열 변환"""
        assert AuthType.parse(raw) is expected

    def test_parse_legacy_arn(self, caplog):
        """레거시 arn은 경고와 함께 default"""
        with caplog.at_level(logging.WARNING):
            assert AuthType.parse("arn") is AuthType.DEFAULT

        assert "arn" in caplog.text

    def test_parse_unknown_raises(self):
        """알 수 없는 값은 기본값으로 대체하지 않음"""
        with pytest.raises(ConfigurationError) as exc_info:
            AuthType.parse("sso")

        assert exc_info.value.config_key == "authType"

    def test_cache_tag_is_not_settings_value(self):
        """캐시 태그 sharedCreds는 설정 문자열이 아님"""
        with pytest.raises(ConfigurationError):
            AuthType.parse("sharedCreds")


# =============================================================================
# DataSourceConfig 테스트
# =============================================================================


class TestDataSourceConfig:
    """DataSourceConfig 테스트"""

    def test_defaults(self):
        config = DataSourceConfig()

        assert config.auth_type is AuthType.DEFAULT
        assert config.profile == ""
        assert config.assumes_role is False

    def test_secret_not_in_repr(self, static_config):
        """시크릿 키는 repr에 노출되지 않음"""
        assert static_config.secret_key not in repr(static_config)
        assert static_config.access_key in repr(static_config)

    def test_namespaces(self):
        config = DataSourceConfig(namespace="App/Orders, App/Payments,,")
        assert config.namespaces == ["App/Orders", "App/Payments"]

    def test_frozen(self, default_config):
        with pytest.raises(AttributeError):
            default_config.region = "us-east-1"

    def test_assumes_role(self, role_config):
        assert role_config.assumes_role is True


# =============================================================================
# 에러 계층 테스트
# =============================================================================


class TestAuthErrors:
    """인증 에러 계층 테스트"""

    def test_hierarchy(self):
        assert issubclass(AuthError, CWDSError)
        assert issubclass(ConfigurationError, AuthError)
        assert issubclass(AuthenticationError, AuthError)
        assert issubclass(AssumeRoleError, AuthenticationError)

    def test_assume_role_error_details(self):
        cause = RuntimeError("denied")
        error = AssumeRoleError("arn:aws:iam::123456789012:role/R", cause=cause)

        assert error.role_arn == "arn:aws:iam::123456789012:role/R"
        assert error.cause is cause
        assert error.to_dict()["details"]["role_arn"] == "arn:aws:iam::123456789012:role/R"
