"""
cwdatasource/config.py - 중앙 설정 관리

런타임 설정(폴링 주기, 최대 시도 횟수, 워커 수)과 데이터 소스 설정 로딩,
데이터 소스 인스턴스 조회를 담당합니다.

Usage:
    from cwdatasource.config import settings, load_datasource_config

    interval = settings.log_poll_interval  # 초
    config = load_datasource_config(json_data, secure_json_data)

환경 변수:
    CWDS_LOG_POLL_INTERVAL_MS: 로그 결과 폴링 주기 (기본 1000)
    CWDS_LOG_MAX_ATTEMPTS: 로그 결과 최대 폴링 횟수 (기본 8)
    CWDS_MAX_WORKERS: 배치 내 쿼리 동시 실행 수 (기본 10)
    CWDS_DEFAULT_REGION: 리전 미지정 시 사용할 리전 (기본 없음)
"""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

from cwdatasource.auth.types import AuthType, ConfigurationError, DataSourceConfig
from cwdatasource.models import DataSourceInstanceSettings, PluginContext

logger = logging.getLogger(__name__)

__version__ = "0.3.0"

DEFAULT_LOG_POLL_INTERVAL_MS = 1000
DEFAULT_LOG_MAX_ATTEMPTS = 8
DEFAULT_MAX_WORKERS = 10


def get_version() -> str:
    """패키지 버전 문자열 반환"""
    return __version__


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"정수가 아닌 환경 변수 값: {name}={raw!r}", config_key=name, cause=e) from e
    if value < 0:
        raise ConfigurationError(f"음수 환경 변수 값: {name}={value}", config_key=name)
    return value


@dataclass(frozen=True)
class Settings:
    """런타임 설정

    Attributes:
        log_poll_interval_ms: 로그 결과 폴링 주기 (밀리초)
        log_max_attempts: 로그 결과 최대 폴링 횟수
        max_workers: 배치 내 쿼리 동시 실행 수
        default_region: 리전 미지정 시 사용할 리전
    """

    log_poll_interval_ms: int = DEFAULT_LOG_POLL_INTERVAL_MS
    log_max_attempts: int = DEFAULT_LOG_MAX_ATTEMPTS
    max_workers: int = DEFAULT_MAX_WORKERS
    default_region: str = ""

    @property
    def log_poll_interval(self) -> float:
        """폴링 주기 (초)"""
        return self.log_poll_interval_ms / 1000

    @classmethod
    def from_env(cls) -> Settings:
        """환경 변수에서 설정 로드"""
        return cls(
            log_poll_interval_ms=_env_int("CWDS_LOG_POLL_INTERVAL_MS", DEFAULT_LOG_POLL_INTERVAL_MS),
            log_max_attempts=max(1, _env_int("CWDS_LOG_MAX_ATTEMPTS", DEFAULT_LOG_MAX_ATTEMPTS)),
            max_workers=max(1, _env_int("CWDS_MAX_WORKERS", DEFAULT_MAX_WORKERS)),
            default_region=os.getenv("CWDS_DEFAULT_REGION", ""),
        )


settings = Settings.from_env()


# =============================================================================
# 데이터 소스 설정 로딩
# =============================================================================


def load_datasource_config(
    json_data: dict[str, Any] | str | bytes,
    decrypted_secure_json_data: dict[str, str] | None = None,
    database: str = "",
) -> DataSourceConfig:
    """데이터 소스 설정 생성

    Args:
        json_data: 평문 설정 (dict 또는 JSON)
        decrypted_secure_json_data: 복호화된 민감 설정 (accessKey, secretKey)
        database: 레거시 필드 (profile이 비어 있으면 대신 사용)

    Returns:
        DataSourceConfig

    Raises:
        ConfigurationError: JSON 파싱 실패, 알 수 없는 인증 방식
    """
    if isinstance(json_data, (str, bytes)):
        try:
            json_data = json.loads(json_data) if json_data else {}
        except json.JSONDecodeError as e:
            raise ConfigurationError("설정 JSON을 읽을 수 없습니다", config_key="jsonData", cause=e) from e
    if not isinstance(json_data, dict):
        raise ConfigurationError("설정 JSON은 객체여야 합니다", config_key="jsonData")

    secure = decrypted_secure_json_data or {}

    def _str(key: str) -> str:
        value = json_data.get(key)
        return "" if value is None else str(value)

    return DataSourceConfig(
        auth_type=AuthType.parse(_str("authType")),
        profile=_str("profile") or database,
        access_key=secure.get("accessKey", ""),
        secret_key=secure.get("secretKey", ""),
        region=_str("defaultRegion") or settings.default_region,
        assume_role_arn=_str("assumeRoleArn"),
        external_id=_str("externalId"),
        namespace=_str("customMetricsNamespaces"),
    )


# =============================================================================
# 데이터 소스 인스턴스 조회
# =============================================================================

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class ConfigLookup(Protocol[T_co]):
    """PluginContext로 구체 설정 타입을 조회하는 인터페이스"""

    def get(self, plugin_ctx: PluginContext) -> T_co: ...


@dataclass
class _Instance(Generic[T]):
    value: T
    updated: datetime | None = None


@dataclass
class InstanceManager(Generic[T]):
    """데이터 소스 uid 단위 설정 인스턴스 관리자

    인스턴스는 처음 조회할 때 factory로 생성되고, 호스트가 전달한
    updated 시각이 바뀌면 다시 생성됩니다.

    Example:
        instances = InstanceManager(factory=datasource_config_factory)
        config: DataSourceConfig = instances.get(plugin_ctx)
    """

    factory: Callable[[DataSourceInstanceSettings], T]
    _instances: dict[str, _Instance[T]] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def get(self, plugin_ctx: PluginContext) -> T:
        """PluginContext에 해당하는 설정 인스턴스 반환

        Raises:
            ConfigurationError: factory가 설정을 만들 수 없는 경우
        """
        ds = plugin_ctx.datasource_settings
        with self._lock:
            instance = self._instances.get(ds.uid)
            if instance is not None and instance.updated == ds.updated:
                return instance.value

            value = self.factory(ds)
            self._instances[ds.uid] = _Instance(value=value, updated=ds.updated)
            if instance is not None:
                logger.debug(f"데이터 소스 설정 갱신: {ds.uid}")
            return value

    def dispose(self, uid: str) -> None:
        """인스턴스 제거"""
        with self._lock:
            self._instances.pop(uid, None)


def datasource_config_factory(ds: DataSourceInstanceSettings) -> DataSourceConfig:
    """DataSourceInstanceSettings → DataSourceConfig"""
    return load_datasource_config(ds.json_data, ds.decrypted_secure_json_data, ds.database)
