"""
cwdatasource - CloudWatch 데이터 소스 백엔드

구성:
- auth: 자격증명 해석, 역할 위임, 세션 캐시
- logs: Logs Insights 쿼리 폴링, 경보용 로그 쿼리 실행
- parallel: 쿼리 배치 병렬 실행, client 생성, 에러 분류
- executor: 쿼리 배치 진입점 (CloudWatchExecutor)
- config: 런타임 설정, 데이터 소스 설정 로딩

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    "CloudWatchExecutor",
    "SessionCache",
    "SessionFactory",
    "DataSourceConfig",
    "AuthType",
    "InstanceManager",
    "load_datasource_config",
    "settings",
    "__version__",
]

_IMPORT_MAPPING = {
    "CloudWatchExecutor": (".executor", "CloudWatchExecutor"),
    "SessionCache": (".auth", "SessionCache"),
    "SessionFactory": (".auth", "SessionFactory"),
    "DataSourceConfig": (".auth", "DataSourceConfig"),
    "AuthType": (".auth", "AuthType"),
    "InstanceManager": (".config", "InstanceManager"),
    "load_datasource_config": (".config", "load_datasource_config"),
    "settings": (".config", "settings"),
    "__version__": (".config", "__version__"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
