# cwdatasource/auth/cache/__init__.py
"""
AWS 세션 캐시 모듈

데이터 소스 인증 파라미터와 리전 단위로 인증된 boto3 Session을 메모리에
캐시하여 불필요한 자격증명 조회/역할 위임을 줄입니다.

캐시 전략:
- SessionCache: 메모리 기반, 역할 위임 만료 시각까지 유효
- 역할 위임이 없으면 만료되지 않음 (자격증명 갱신은 boto3가 담당)

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    "SessionCache",
    "CacheEntry",
    "CacheStats",
    "ReadWriteLock",
    "make_cache_key",
    "resolve_session_region",
    "DEFAULT_REGION",
]

_IMPORT_MAPPING = {
    "SessionCache": (".cache", "SessionCache"),
    "CacheEntry": (".cache", "CacheEntry"),
    "CacheStats": (".cache", "CacheStats"),
    "ReadWriteLock": (".cache", "ReadWriteLock"),
    "make_cache_key": (".cache", "make_cache_key"),
    "resolve_session_region": (".cache", "resolve_session_region"),
    "DEFAULT_REGION": (".cache", "DEFAULT_REGION"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
