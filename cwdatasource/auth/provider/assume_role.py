# cwdatasource/auth/provider/assume_role.py
"""
역할 위임(AssumeRole) Provider

기본 자격증명으로 만든 세션 위에서 sts:AssumeRole을 호출하여
짧은 수명의 임시 자격증명을 얻습니다.

- 만료 시각은 Provider 생성 시점 기준 now + duration 으로 고정됩니다.
- External ID는 설정된 경우에만 요청에 포함됩니다.
- 실패 시 재시도하지 않고 AssumeRoleError로 전파합니다.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from ..types import AssumeRoleError, DataSourceConfig

logger = logging.getLogger(__name__)

# STS 역할 위임 기본 유지 시간 (SDK 기본값과 동일한 15분)
DEFAULT_ROLE_DURATION = timedelta(minutes=15)


def _default_session_name() -> str:
    return f"cwdatasource-{time.time_ns()}"


@dataclass
class AssumeRoleProvider:
    """위임 역할 자격증명 Provider

    Attributes:
        role_arn: 위임받을 역할 ARN
        external_id: External ID (None이면 요청에서 생략)
        duration: 위임 유지 시간
        role_session_name: STS 세션 이름
        expiration: 만료 시각 (UTC, 생성 시점 + duration)
    """

    role_arn: str
    external_id: str | None = None
    duration: timedelta = DEFAULT_ROLE_DURATION
    role_session_name: str = field(default_factory=_default_session_name)
    expiration: datetime = field(init=False)

    def __post_init__(self) -> None:
        self.expiration = datetime.now(timezone.utc) + self.duration

    def assume_role_params(self) -> dict[str, Any]:
        """sts.assume_role 요청 인자"""
        params: dict[str, Any] = {
            "RoleArn": self.role_arn,
            "RoleSessionName": self.role_session_name,
            "DurationSeconds": int(self.duration.total_seconds()),
        }
        if self.external_id:
            params["ExternalId"] = self.external_id
        return params

    def fetch_credentials(self, sts_client: Any) -> dict[str, str]:
        """임시 자격증명 조회

        두 번째 Session 생성에 쓰이는 딕셔너리 형식으로 반환합니다.

        Args:
            sts_client: 기본 자격증명으로 만든 STS 클라이언트

        Returns:
            access_key, secret_key, token, expiry_time 딕셔너리

        Raises:
            AssumeRoleError: 위임 거부, 잘못된 ARN 등
        """
        logger.debug(f"역할 위임 시도: {self.role_arn}")
        try:
            response = sts_client.assume_role(**self.assume_role_params())
        except (ClientError, BotoCoreError) as e:
            raise AssumeRoleError(self.role_arn, cause=e) from e

        creds = response.get("Credentials")
        if not creds:
            raise AssumeRoleError(self.role_arn, cause=ValueError("AssumeRole 응답에 자격증명이 없습니다"))

        expiry = creds.get("Expiration")
        if isinstance(expiry, datetime):
            expiry_time = expiry.astimezone(timezone.utc).isoformat()
        else:
            expiry_time = self.expiration.isoformat()

        return {
            "access_key": creds["AccessKeyId"],
            "secret_key": creds["SecretAccessKey"],
            "token": creds["SessionToken"],
            "expiry_time": expiry_time,
        }


def build_assume_role_provider(
    config: DataSourceConfig,
    duration: timedelta = DEFAULT_ROLE_DURATION,
) -> AssumeRoleProvider | None:
    """설정에 역할 ARN이 있으면 AssumeRoleProvider 생성

    Args:
        config: 데이터 소스 설정
        duration: 위임 유지 시간

    Returns:
        AssumeRoleProvider 또는 None (역할 ARN 미설정)
    """
    if not config.assume_role_arn:
        return None

    return AssumeRoleProvider(
        role_arn=config.assume_role_arn,
        external_id=config.external_id or None,
        duration=duration,
    )
