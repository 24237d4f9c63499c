# cwdatasource/auth/provider/__init__.py
"""
AWS 자격증명 Provider 구현 모듈

Provider 목록:
- DefaultChainProvider: SDK 기본 체인
- SharedProfileProvider: 명명된 프로파일
- StaticKeysProvider: 정적 액세스 키
- AssumeRoleProvider: 기본 자격증명 위의 역할 위임

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    # Base
    "CredentialProvider",
    "DefaultChainProvider",
    "SharedProfileProvider",
    "StaticKeysProvider",
    "resolve_credentials",
    "LEGACY_DEFAULT_PROFILE",
    # Assume Role
    "AssumeRoleProvider",
    "build_assume_role_provider",
    "DEFAULT_ROLE_DURATION",
]

_IMPORT_MAPPING = {
    "CredentialProvider": (".resolver", "CredentialProvider"),
    "DefaultChainProvider": (".resolver", "DefaultChainProvider"),
    "SharedProfileProvider": (".resolver", "SharedProfileProvider"),
    "StaticKeysProvider": (".resolver", "StaticKeysProvider"),
    "resolve_credentials": (".resolver", "resolve_credentials"),
    "LEGACY_DEFAULT_PROFILE": (".resolver", "LEGACY_DEFAULT_PROFILE"),
    "AssumeRoleProvider": (".assume_role", "AssumeRoleProvider"),
    "build_assume_role_provider": (".assume_role", "build_assume_role_provider"),
    "DEFAULT_ROLE_DURATION": (".assume_role", "DEFAULT_ROLE_DURATION"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
