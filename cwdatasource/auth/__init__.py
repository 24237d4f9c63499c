# cwdatasource/auth/__init__.py
"""
CloudWatch 데이터 소스 인증 모듈 (cwdatasource/auth)

데이터 소스 설정 하나를 시간 제한이 있는 재사용 가능한 boto3 Session으로
바꾸는 계층입니다.

구성:
- types: AuthType, DataSourceConfig, 인증 에러
- provider: 기본 자격증명 Provider 해석, 역할 위임 Provider
- session: SessionFactory (실제 세션 생성)
- cache: SessionCache (읽기/쓰기 락 기반 세션 캐시)

사용 예시:
    from cwdatasource.auth import SessionCache, SessionFactory, DataSourceConfig, AuthType

    config = DataSourceConfig(
        auth_type=AuthType.SHARED_PROFILE,
        profile="monitoring",
        region="ap-northeast-2",
        assume_role_arn="arn:aws:iam::123456789012:role/CloudWatchRead",
    )

    cache = SessionCache(SessionFactory())
    session = cache.get_session("default", config)

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
    실제 사용 시점에만 하위 모듈(boto3 포함)이 로드됩니다.
"""

__all__ = [
    # Types
    "AuthType",
    "DataSourceConfig",
    "AuthError",
    "ConfigurationError",
    "AuthenticationError",
    "AssumeRoleError",
    # Providers
    "CredentialProvider",
    "DefaultChainProvider",
    "SharedProfileProvider",
    "StaticKeysProvider",
    "AssumeRoleProvider",
    "resolve_credentials",
    "build_assume_role_provider",
    # Session
    "SessionFactory",
    "BuiltSession",
    # Cache
    "SessionCache",
    "make_cache_key",
]

_IMPORT_MAPPING = {
    # Types
    "AuthType": (".types", "AuthType"),
    "DataSourceConfig": (".types", "DataSourceConfig"),
    "AuthError": (".types", "AuthError"),
    "ConfigurationError": (".types", "ConfigurationError"),
    "AuthenticationError": (".types", "AuthenticationError"),
    "AssumeRoleError": (".types", "AssumeRoleError"),
    # Providers
    "CredentialProvider": (".provider", "CredentialProvider"),
    "DefaultChainProvider": (".provider", "DefaultChainProvider"),
    "SharedProfileProvider": (".provider", "SharedProfileProvider"),
    "StaticKeysProvider": (".provider", "StaticKeysProvider"),
    "AssumeRoleProvider": (".provider", "AssumeRoleProvider"),
    "resolve_credentials": (".provider", "resolve_credentials"),
    "build_assume_role_provider": (".provider", "build_assume_role_provider"),
    # Session
    "SessionFactory": (".session", "SessionFactory"),
    "BuiltSession": (".session", "BuiltSession"),
    # Cache
    "SessionCache": (".cache", "SessionCache"),
    "make_cache_key": (".cache", "make_cache_key"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드

    무거운 의존성(boto3 등)을 실제 필요한 시점에만 로드합니다.
    """
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
