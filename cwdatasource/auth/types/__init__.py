# cwdatasource/auth/types/__init__.py
"""
AWS 인증 모듈의 공통 타입 정의

인증 방식 열거형, 데이터 소스 설정, 인증 에러 클래스를 제공합니다.

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    # Enums
    "AuthType",
    # Data classes
    "DataSourceConfig",
    # Errors
    "AuthError",
    "ConfigurationError",
    "AuthenticationError",
    "AssumeRoleError",
]

_IMPORT_MAPPING = {
    "AuthType": (".types", "AuthType"),
    "DataSourceConfig": (".types", "DataSourceConfig"),
    "AuthError": (".types", "AuthError"),
    "ConfigurationError": (".types", "ConfigurationError"),
    "AuthenticationError": (".types", "AuthenticationError"),
    "AssumeRoleError": (".types", "AssumeRoleError"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
