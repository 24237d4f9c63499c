# cwdatasource/auth/provider/resolver.py
"""
기본 자격증명 Provider 해석

DataSourceConfig의 인증 방식에 따라 boto3 Session 생성에 사용할
자격증명 Provider를 만듭니다.

Provider 목록:
- DefaultChainProvider: SDK 기본 체인 (명시적 시크릿 없음)
- SharedProfileProvider: 명명된 프로파일
- StaticKeysProvider: 설정에 저장된 액세스 키 쌍

Example:
    provider = resolve_credentials(config)
    session = boto3.Session(region_name="us-east-1", **provider.session_kwargs())
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from botocore.credentials import Credentials

from ..types import AuthType, ConfigurationError, DataSourceConfig

logger = logging.getLogger(__name__)

# 프로파일 이름이 비어 있을 때 사용하는 레거시 호환 라벨
LEGACY_DEFAULT_PROFILE = "default"


class CredentialProvider(ABC):
    """기본 자격증명 Provider 인터페이스"""

    @property
    @abstractmethod
    def auth_type(self) -> AuthType:
        """이 Provider의 인증 방식"""

    @abstractmethod
    def session_kwargs(self) -> dict[str, Any]:
        """boto3.Session 생성자에 전달할 인자를 반환합니다."""

    def get_credentials(self) -> Credentials | None:
        """명시적 자격증명 (호출 시점에 해석되는 방식은 None)"""
        return None


@dataclass(frozen=True)
class DefaultChainProvider(CredentialProvider):
    """SDK 기본 자격증명 체인

    환경 변수, 공유 설정, 컨테이너/인스턴스 메타데이터 순으로
    boto3가 호출 시점에 자격증명을 찾습니다.
    """

    @property
    def auth_type(self) -> AuthType:
        return AuthType.DEFAULT

    def session_kwargs(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class SharedProfileProvider(CredentialProvider):
    """공유 자격증명 파일의 명명된 프로파일"""

    profile: str = LEGACY_DEFAULT_PROFILE

    @property
    def auth_type(self) -> AuthType:
        return AuthType.SHARED_PROFILE

    def session_kwargs(self) -> dict[str, Any]:
        return {"profile_name": self.profile}


@dataclass(frozen=True)
class StaticKeysProvider(CredentialProvider):
    """설정에 저장된 정적 액세스 키 쌍

    시크릿 키는 repr에 포함되지 않으며 로그로 남기지 않습니다.
    """

    access_key: str
    secret_key: str = field(repr=False)

    @property
    def auth_type(self) -> AuthType:
        return AuthType.STATIC_KEYS

    def session_kwargs(self) -> dict[str, Any]:
        return {
            "aws_access_key_id": self.access_key,
            "aws_secret_access_key": self.secret_key,
        }

    def get_credentials(self) -> Credentials:
        return Credentials(self.access_key, self.secret_key)


def resolve_credentials(config: DataSourceConfig) -> CredentialProvider:
    """인증 방식에 맞는 기본 자격증명 Provider 생성

    Args:
        config: 데이터 소스 설정

    Returns:
        CredentialProvider

    Raises:
        ConfigurationError: auth_type이 AuthType이 아닌 경우
    """
    auth_type = config.auth_type

    if auth_type is AuthType.SHARED_PROFILE:
        profile = config.profile or LEGACY_DEFAULT_PROFILE
        logger.debug(f"공유 자격증명으로 인증: profile={profile}, region={config.region}")
        return SharedProfileProvider(profile=profile)

    if auth_type is AuthType.STATIC_KEYS:
        logger.debug(f"액세스 키 쌍으로 인증: region={config.region}")
        return StaticKeysProvider(access_key=config.access_key, secret_key=config.secret_key)

    if auth_type is AuthType.DEFAULT:
        logger.debug(f"SDK 기본 방식으로 인증: region={config.region}")
        return DefaultChainProvider()

    raise ConfigurationError(f"알 수 없는 인증 방식: {auth_type!r}", config_key="authType")
