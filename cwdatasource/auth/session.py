# cwdatasource/auth/session.py
"""
boto3 Session 생성

데이터 소스 설정 → 기본 자격증명 Provider → (옵션) 역할 위임 순서로
인증된 boto3 Session을 만듭니다. 캐시는 SessionCache가 담당하며
이 모듈은 네트워크 I/O가 발생하는 실제 생성만 수행합니다.

흐름:
    1. resolve_credentials(config) 로 기본 Provider 해석
    2. 기본 Provider로 첫 번째 Session 생성
    3. 역할 ARN이 있으면 STS AssumeRole 후 두 번째 Session 생성
       (새 자격증명은 이전 리전 설정을 물려받지 않으므로 리전을 다시 지정)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

import boto3
from botocore.exceptions import BotoCoreError

from cwdatasource.parallel.client import new_sts_client

from .provider.assume_role import DEFAULT_ROLE_DURATION, AssumeRoleProvider, build_assume_role_provider
from .provider.resolver import CredentialProvider, resolve_credentials
from .types import AuthenticationError, DataSourceConfig

logger = logging.getLogger(__name__)


@dataclass
class BuiltSession:
    """생성된 세션과 만료 정보

    Attributes:
        session: 인증된 boto3 Session
        expires_at: 만료 시각 (None이면 만료되지 않음)
        assumed_role: 역할 위임에 사용된 Provider (없으면 None)
    """

    session: boto3.Session
    expires_at: datetime | None = None
    assumed_role: AssumeRoleProvider | None = None


def new_session(provider: CredentialProvider, region: str | None = None) -> boto3.Session:
    """기본 자격증명으로 boto3 Session 생성

    Raises:
        AuthenticationError: 프로파일 없음 등 세션 생성 실패
    """
    try:
        return boto3.Session(region_name=region or None, **provider.session_kwargs())
    except BotoCoreError as e:
        raise AuthenticationError(f"세션 생성 실패 ({provider.auth_type})", cause=e) from e


def new_assumed_role_session(
    base_session: boto3.Session,
    role: AssumeRoleProvider,
    region: str | None = None,
) -> boto3.Session:
    """위임 역할 자격증명으로 두 번째 Session 생성

    임시 자격증명은 한 번만 조회하며 자동 갱신하지 않습니다.
    만료 후 재생성은 SessionCache가 role.expiration 기준으로 수행합니다.

    Raises:
        AssumeRoleError: sts:AssumeRole 실패
    """
    sts = new_sts_client(base_session, region_name=region or None)
    creds = role.fetch_credentials(sts)

    return boto3.Session(
        aws_access_key_id=creds["access_key"],
        aws_secret_access_key=creds["secret_key"],
        aws_session_token=creds["token"],
        region_name=region or None,
    )


class SessionFactory:
    """데이터 소스 설정으로부터 인증된 세션을 만드는 팩토리

    SessionCache에 주입되어 캐시 미스 시에만 호출됩니다.
    """

    def __init__(self, role_duration: timedelta = DEFAULT_ROLE_DURATION):
        self.role_duration = role_duration

    def build(self, config: DataSourceConfig, region: str | None = None) -> BuiltSession:
        """세션 생성

        Args:
            config: 데이터 소스 설정
            region: 세션 리전 (빈 값이면 SDK 기본값)

        Returns:
            BuiltSession
        """
        provider = resolve_credentials(config)
        session = new_session(provider, region)

        role = build_assume_role_provider(config, self.role_duration)
        if role is None:
            logger.debug("AWS 세션 생성 완료")
            return BuiltSession(session=session)

        session = new_assumed_role_session(session, role, region)
        logger.debug(f"AWS 세션 생성 완료 (위임 역할: {role.role_arn})")
        return BuiltSession(session=session, expires_at=role.expiration, assumed_role=role)
