"""
cwdatasource/auth/provider 단위 테스트

resolve_credentials, 기본 Provider들, AssumeRoleProvider 테스트.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from cwdatasource.auth.provider import (
    AssumeRoleProvider,
    DefaultChainProvider,
    SharedProfileProvider,
    StaticKeysProvider,
    build_assume_role_provider,
    resolve_credentials,
)
from cwdatasource.auth.provider.assume_role import DEFAULT_ROLE_DURATION
from cwdatasource.auth.types import AssumeRoleError, AuthType, ConfigurationError, DataSourceConfig


def _sts_response(expiration=None):
    return {
        "Credentials": {
            "AccessKeyId": "ASIATEMP",
            "SecretAccessKey": "temp-secret",
            "SessionToken": "temp-token",
            "Expiration": expiration or datetime(2030, 1, 1, tzinfo=timezone.utc),
        }
    }


# =============================================================================
# resolve_credentials 테스트
# =============================================================================


class TestResolveCredentials:
    """resolve_credentials 테스트"""

    def test_default_chain(self, default_config):
        """DEFAULT는 명시적 자격증명 없음"""
        provider = resolve_credentials(default_config)

        assert isinstance(provider, DefaultChainProvider)
        assert provider.session_kwargs() == {}
        assert provider.get_credentials() is None

    def test_shared_profile(self):
        config = DataSourceConfig(auth_type=AuthType.SHARED_PROFILE, profile="monitoring")
        provider = resolve_credentials(config)

        assert isinstance(provider, SharedProfileProvider)
        assert provider.session_kwargs() == {"profile_name": "monitoring"}

    def test_shared_profile_empty_uses_default_label(self):
        """빈 프로파일은 레거시 라벨 default"""
        config = DataSourceConfig(auth_type=AuthType.SHARED_PROFILE)
        provider = resolve_credentials(config)

        assert provider.session_kwargs() == {"profile_name": "default"}

    def test_static_keys_yield_exact_pair(self, static_config):
        """정적 키는 설정된 (K, S) 그대로"""
        provider = resolve_credentials(static_config)

        assert isinstance(provider, StaticKeysProvider)
        creds = provider.get_credentials()
        assert creds.access_key == static_config.access_key
        assert creds.secret_key == static_config.secret_key
        assert creds.token is None

    def test_static_secret_not_in_repr(self, static_config):
        provider = resolve_credentials(static_config)
        assert static_config.secret_key not in repr(provider)

    def test_non_auth_type_raises(self):
        """AuthType이 아닌 값은 설정 오류"""
        config = DataSourceConfig(auth_type="keys")  # type: ignore[arg-type]

        with pytest.raises(ConfigurationError):
            resolve_credentials(config)

    def test_does_not_assume_role(self, role_config):
        """역할 설정이 있어도 기본 Provider만 반환"""
        provider = resolve_credentials(role_config)
        assert isinstance(provider, DefaultChainProvider)


# =============================================================================
# AssumeRoleProvider 테스트
# =============================================================================


class TestAssumeRoleProvider:
    """AssumeRoleProvider 테스트"""

    def test_default_duration(self):
        provider = AssumeRoleProvider(role_arn="arn:aws:iam::123456789012:role/R")

        assert provider.duration == DEFAULT_ROLE_DURATION == timedelta(minutes=15)
        assert provider.assume_role_params()["DurationSeconds"] == 900

    def test_expiration_computed_at_construction(self):
        before = datetime.now(timezone.utc)
        provider = AssumeRoleProvider(role_arn="arn:aws:iam::123456789012:role/R")
        after = datetime.now(timezone.utc)

        assert before + DEFAULT_ROLE_DURATION <= provider.expiration <= after + DEFAULT_ROLE_DURATION

    def test_external_id_omitted_when_unset(self):
        provider = AssumeRoleProvider(role_arn="arn:aws:iam::123456789012:role/R")
        assert "ExternalId" not in provider.assume_role_params()

    def test_external_id_passed_verbatim(self):
        sts = MagicMock()
        sts.assume_role.return_value = _sts_response()
        provider = AssumeRoleProvider(role_arn="arn:aws:iam::123456789012:role/R", external_id="a b:c")

        provider.fetch_credentials(sts)

        kwargs = sts.assume_role.call_args.kwargs
        assert kwargs["ExternalId"] == "a b:c"
        assert kwargs["RoleArn"] == "arn:aws:iam::123456789012:role/R"

    def test_fetch_credentials_metadata(self):
        sts = MagicMock()
        sts.assume_role.return_value = _sts_response()
        provider = AssumeRoleProvider(role_arn="arn:aws:iam::123456789012:role/R")

        metadata = provider.fetch_credentials(sts)

        assert metadata["access_key"] == "ASIATEMP"
        assert metadata["secret_key"] == "temp-secret"
        assert metadata["token"] == "temp-token"
        assert metadata["expiry_time"].startswith("2030-01-01")

    def test_fetch_credentials_denied(self):
        """거부는 AssumeRoleError로 전파, 재시도 없음"""
        sts = MagicMock()
        sts.assume_role.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "not authorized"}}, "AssumeRole"
        )
        provider = AssumeRoleProvider(role_arn="arn:aws:iam::123456789012:role/R")

        with pytest.raises(AssumeRoleError) as exc_info:
            provider.fetch_credentials(sts)

        assert sts.assume_role.call_count == 1
        assert exc_info.value.role_arn == provider.role_arn


class TestBuildAssumeRoleProvider:
    """build_assume_role_provider 테스트"""

    def test_no_role(self, default_config):
        assert build_assume_role_provider(default_config) is None

    def test_with_role(self, role_config):
        provider = build_assume_role_provider(role_config)

        assert provider.role_arn == role_config.assume_role_arn
        assert provider.external_id == "ext-123"

    def test_empty_external_id_is_none(self):
        config = DataSourceConfig(assume_role_arn="arn:aws:iam::123456789012:role/R", external_id="")
        assert build_assume_role_provider(config).external_id is None
