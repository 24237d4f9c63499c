# cwdatasource/auth/cache/cache.py
"""
AWS 세션 캐시 구현

- CacheEntry: 만료 시각이 있는 캐시 항목
- ReadWriteLock: 읽기 다중/쓰기 단일 락
- CacheStats: 히트/미스/저장 통계
- make_cache_key: 인증 파라미터 튜플 → 충돌 없는 캐시 키
- SessionCache: (인증 방식, 액세스 키, 프로파일, 역할 ARN, 리전) 단위 세션 캐시

설계 원칙:
- 락은 딕셔너리 접근 구간에만 잡고, 세션 생성(네트워크 I/O) 중에는 잡지 않음
- 동시에 두 호출자가 재생성하면 마지막 쓰기가 이김
- 생성 실패는 캐시에 남기지 않음
- 메모리 캐시만 사용 (자격증명은 디스크에 저장하지 않음)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    import boto3

    from ..session import SessionFactory
    from ..types import DataSourceConfig

logger = logging.getLogger(__name__)

# 리전 설정값 "default"는 SDK가 거부하므로 미설정으로 취급
DEFAULT_REGION = "default"

KEY_SEPARATOR = ":"

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Generic Cache Entry
# =============================================================================


@dataclass
class CacheEntry(Generic[T]):
    """캐시 항목을 나타내는 제네릭 데이터 클래스

    Attributes:
        value: 캐시된 값
        created_at: 생성 시간 (UTC)
        expires_at: 만료 시간 (UTC, None이면 만료되지 않음)
    """

    value: T
    created_at: datetime = field(default_factory=_utcnow)
    expires_at: datetime | None = None

    def is_valid(self, now: datetime | None = None) -> bool:
        """만료 시각이 현재보다 엄격히 뒤인지 확인"""
        if self.expires_at is None:
            return True
        return self.expires_at > (now or _utcnow())


# =============================================================================
# Read/Write Lock
# =============================================================================


class ReadWriteLock:
    """읽기 다중, 쓰기 단일 락

    쓰기 대기자가 있으면 새 읽기를 막아 쓰기 기아를 방지합니다.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


# =============================================================================
# Cache Stats
# =============================================================================


@dataclass
class CacheStats:
    """캐시 통계 (스레드 안전)

    Attributes:
        hits: 캐시 히트 횟수
        misses: 캐시 미스 횟수 (만료 포함)
        sets: 세션 저장 횟수
    """

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    hits: int = 0
    misses: int = 0
    sets: int = 0

    def add_hit(self) -> None:
        with self._lock:
            self.hits += 1

    def add_miss(self) -> None:
        with self._lock:
            self.misses += 1

    def add_set(self) -> None:
        with self._lock:
            self.sets += 1

    def summary(self) -> str:
        total = self.hits + self.misses
        hit_rate = self.hits / total if total > 0 else 0.0
        return f"hits={self.hits}, misses={self.misses}, sets={self.sets}, hit_rate={hit_rate:.1%}"


# =============================================================================
# Cache Key
# =============================================================================


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace(KEY_SEPARATOR, "\\" + KEY_SEPARATOR)


def make_cache_key(auth_type: str, access_key: str, profile: str, role_arn: str, region: str) -> str:
    """세션 캐시 키 생성

    각 필드의 역슬래시와 구분자를 이스케이프한 뒤 구분자로 연결합니다.
    서로 다른 파라미터 튜플은 항상 다른 키가 됩니다.

    Example:
        make_cache_key("sharedCreds", "", "a:b", "", "") != make_cache_key("sharedCreds", "b", "a", "", "")
    """
    return KEY_SEPARATOR.join(_escape(part or "") for part in (auth_type, access_key, profile, role_arn, region))


def resolve_session_region(region: str | None, config: DataSourceConfig) -> str:
    """세션에 사용할 실제 리전 결정

    빈 값이나 "default"는 데이터 소스 기본 리전으로 대체하고,
    그 값도 "default"이면 경고 후 미설정으로 처리합니다.
    """
    if not region or region == DEFAULT_REGION:
        region = config.region
    if region == DEFAULT_REGION:
        logger.warning('리전이 "default"로 설정되어 있어 지원되지 않으므로 무시합니다')
        region = ""
    return region or ""


# =============================================================================
# Session Cache
# =============================================================================


class SessionCache:
    """프로세스 범위 AWS 세션 캐시

    서비스 시작 시 한 번 생성해 주입하고, 종료 시 close()로 정리합니다.
    테스트에서는 인스턴스를 새로 만들어 격리합니다.

    Thread-safety:
        - ReadWriteLock으로 딕셔너리 접근만 보호
        - 세션 생성은 락 밖에서 수행 (동시 재생성은 허용, 마지막 쓰기 우선)

    Usage:
        with SessionCache(SessionFactory()) as cache:
            session = cache.get_session("us-east-1", config)
    """

    def __init__(self, factory: SessionFactory | None = None) -> None:
        if factory is None:
            from ..session import SessionFactory

            factory = SessionFactory()
        self._factory = factory
        self._entries: dict[str, CacheEntry[boto3.Session]] = {}
        self._lock = ReadWriteLock()
        self._stats = CacheStats()

    def __enter__(self) -> SessionCache:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @staticmethod
    def key_for(region: str, config: DataSourceConfig) -> str:
        """설정과 (해석된) 리전으로 캐시 키 생성"""
        return make_cache_key(
            str(config.auth_type),
            config.access_key,
            config.profile,
            config.assume_role_arn,
            region,
        )

    def get_session(self, region: str | None, config: DataSourceConfig) -> boto3.Session:
        """인증된 세션 반환 (캐시 우선)

        Args:
            region: 대상 리전 (빈 값/"default"면 데이터 소스 기본 리전)
            config: 데이터 소스 설정

        Returns:
            boto3.Session

        Raises:
            ConfigurationError: 알 수 없는 인증 방식
            AuthenticationError: 자격증명/역할 위임 실패
        """
        region = resolve_session_region(region, config)
        key = self.key_for(region, config)

        with self._lock.read():
            entry = self._entries.get(key)
            if entry is not None and entry.is_valid(_utcnow()):
                self._stats.add_hit()
                return entry.value

        self._stats.add_miss()

        # 락 밖에서 생성 (실패 시 예외 그대로 전파, 캐시 미저장)
        built = self._factory.build(config, region)

        with self._lock.write():
            self._entries[key] = CacheEntry(value=built.session, expires_at=built.expires_at)
        self._stats.add_set()

        return built.session

    def invalidate(self, key: str) -> bool:
        """특정 캐시 키 무효화"""
        with self._lock.write():
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """모든 캐시 클리어"""
        with self._lock.write():
            self._entries.clear()

    def close(self) -> None:
        """캐시 종료 및 정리"""
        size = len(self)
        self.clear()
        logger.debug(f"SessionCache: 캐시 종료 (size={size}, {self._stats.summary()})")

    def __len__(self) -> int:
        """유효한 캐시 항목 수"""
        now = _utcnow()
        with self._lock.read():
            return sum(1 for entry in self._entries.values() if entry.is_valid(now))
