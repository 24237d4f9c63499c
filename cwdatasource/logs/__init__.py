"""
cwdatasource/logs - CloudWatch Logs Insights 쿼리

구성:
- poller: 제출/폴링 API를 블로킹 호출로 변환 (LogQueryPoller)
- frames: 결과 행 → ResultTable 변환, 그룹 분리
- alert: 경보 평가용 로그 쿼리 실행 (AlertQueryOrchestrator)
"""

__all__ = [
    "LogQueryPoller",
    "QueryHandle",
    "PollResult",
    "QueryStatus",
    "ResultTable",
    "logs_results_to_table",
    "group_results",
    "AlertQueryOrchestrator",
]

_IMPORT_MAPPING = {
    "LogQueryPoller": (".poller", "LogQueryPoller"),
    "QueryHandle": (".poller", "QueryHandle"),
    "PollResult": (".poller", "PollResult"),
    "QueryStatus": (".poller", "QueryStatus"),
    "ResultTable": (".frames", "ResultTable"),
    "logs_results_to_table": (".frames", "logs_results_to_table"),
    "group_results": (".frames", "group_results"),
    "AlertQueryOrchestrator": (".alert", "AlertQueryOrchestrator"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
