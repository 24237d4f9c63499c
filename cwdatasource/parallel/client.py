"""
cwdatasource/parallel/client.py - boto3 client 생성 헬퍼

Retry + 타임아웃 + 연결 풀 + User-Agent 가 설정된 boto3 client를 생성합니다.
서비스별 팩토리(CloudWatch, Logs, EC2, 태그 검색, STS)는 테스트에서
교체할 수 있도록 모듈 수준 함수로 둡니다.

주요 구성 요소:
- get_client: retry/User-Agent 설정이 적용된 boto3 client 생성
- new_cw_client / new_logs_client / new_ec2_client / new_rgta_client / new_sts_client

Example:
    from cwdatasource.parallel.client import new_logs_client

    logs = new_logs_client(session)
    logs.start_query(...)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, cast

if TYPE_CHECKING:
    import boto3

# Retry mode 타입 (botocore TypedDict와 호환)
RetryMode = Literal["legacy", "standard", "adaptive"]

# 기본 retry 설정
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_MODE: RetryMode = "adaptive"
DEFAULT_CONNECT_TIMEOUT = 10  # 초
DEFAULT_READ_TIMEOUT = 30  # 초
DEFAULT_MAX_POOL_CONNECTIONS = 25

# 로그 결과 폴링은 재시도하지 않음 (전송 오류는 해당 쿼리에 치명적)
LOGS_MAX_ATTEMPTS = 1


def user_agent_extra() -> str:
    """모든 client 요청에 덧붙는 User-Agent 토큰"""
    from cwdatasource.config import get_version

    return f"cwdatasource/{get_version()}"


def get_client(
    session: boto3.Session,
    service_name: str,
    region_name: str | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_mode: RetryMode = DEFAULT_RETRY_MODE,
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
    read_timeout: int = DEFAULT_READ_TIMEOUT,
    max_pool_connections: int = DEFAULT_MAX_POOL_CONNECTIONS,
    **kwargs: Any,
) -> Any:
    """Retry와 User-Agent가 적용된 boto3 client 생성

    User-Agent 토큰은 client 생성 시 botocore Config로 한 번만 적용됩니다.

    Args:
        session: boto3 Session
        service_name: AWS 서비스 이름 (cloudwatch, logs, ec2 등)
        region_name: 리전 (None이면 세션 기본값)
        max_attempts: 최초 요청을 포함한 최대 시도 횟수 (기본: 5)
        retry_mode: 재시도 모드
        connect_timeout: 연결 타임아웃 (초)
        read_timeout: 읽기 타임아웃 (초)
        max_pool_connections: HTTP 연결 풀 크기
        **kwargs: session.client()에 전달할 추가 인자

    Returns:
        boto3 client
    """
    from botocore.config import Config

    config = Config(
        retries={"total_max_attempts": max_attempts, "mode": retry_mode},  # pyright: ignore[reportArgumentType]
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        max_pool_connections=max_pool_connections,
        user_agent_extra=user_agent_extra(),
    )

    # 기존 config가 있으면 병합
    if "config" in kwargs:
        existing = kwargs.pop("config")
        config = config.merge(existing)

    # cast to Any to bypass boto3-stubs Literal type requirements
    return session.client(  # pyright: ignore[reportCallIssue]
        cast(Any, service_name),
        region_name=region_name,
        config=config,
        **kwargs,
    )


def new_cw_client(session: boto3.Session) -> Any:
    """CloudWatch 메트릭 client"""
    return get_client(session, "cloudwatch")


def new_logs_client(session: boto3.Session) -> Any:
    """CloudWatch Logs client (재시도 없음)"""
    return get_client(session, "logs", max_attempts=LOGS_MAX_ATTEMPTS, retry_mode="standard")


def new_ec2_client(session: boto3.Session) -> Any:
    """EC2 인벤토리 client"""
    return get_client(session, "ec2")


def new_rgta_client(session: boto3.Session) -> Any:
    """Resource Groups Tagging API client"""
    return get_client(session, "resourcegroupstaggingapi")


def new_sts_client(session: boto3.Session, region_name: str | None = None) -> Any:
    """역할 위임용 STS client"""
    return get_client(session, "sts", region_name=region_name)
