"""
cwdatasource/logs/alert.py - 경보 평가용 로그 쿼리 실행

대시보드 요청은 클라이언트가 직접 폴링하지만, 경보 평가는 백엔드에서 실행되므로
제출 → 폴링 → 결과 테이블 변환까지 여기서 한 번에 처리합니다.

쿼리 모델에서 사용하는 필드:
    expression: Logs Insights 쿼리 문자열
    logGroupNames: 대상 로그 그룹 목록
    region: 대상 리전 ("default"거나 없으면 데이터 소스 기본 리전)
    statsGroups: stats ... by 그룹 필드 목록 (있으면 그룹별 테이블)
    limit: 최대 결과 행 수 (선택)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from cwdatasource.auth.cache import DEFAULT_REGION
from cwdatasource.exceptions import QueryFailedError

from .frames import ResultTable, group_results, logs_results_to_table
from .poller import LogQueryPoller, QueryStatus

if TYPE_CHECKING:
    from cwdatasource.auth.types import DataSourceConfig
    from cwdatasource.models import DataQuery, PluginContext

logger = logging.getLogger(__name__)

LogsClientGetter = Callable[[str, "PluginContext"], Any]


def resolve_query_region(model: dict[str, Any], config: DataSourceConfig) -> str:
    """쿼리 모델의 리전 해석 (없거나 "default"면 데이터 소스 기본 리전)"""
    region = model.get("region") or DEFAULT_REGION
    if region == DEFAULT_REGION:
        region = config.region
    return str(region or "")


class AlertQueryOrchestrator:
    """경보용 로그 쿼리 실행기

    쿼리는 한 번만 제출하며, 어떤 실패도 빈 성공으로 바꾸지 않고 전파합니다.

    Args:
        get_logs_client: (region, plugin_ctx) → logs client (세션 캐시 경유)
        poll_interval: 조회 사이 대기 시간 (초, None이면 설정값)
        max_attempts: 최대 조회 횟수 (None이면 설정값)
        formatter: PollResult → ResultTable 변환 함수
    """

    def __init__(
        self,
        get_logs_client: LogsClientGetter,
        poll_interval: float | None = None,
        max_attempts: int | None = None,
        formatter: Callable[..., ResultTable] = logs_results_to_table,
    ):
        self._get_logs_client = get_logs_client
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.formatter = formatter

    def execute(
        self,
        query: DataQuery,
        plugin_ctx: PluginContext,
        config: DataSourceConfig,
        cancel_event: threading.Event | None = None,
    ) -> list[ResultTable]:
        """경보용 로그 쿼리 하나 실행

        Returns:
            결과 테이블 목록 (statsGroups가 있으면 그룹별)

        Raises:
            AuthError: 세션/client 생성 실패
            QuerySubmissionError: 제출 거부
            PollingError, PollAttemptsExceededError, QueryCancelledError: 폴링 실패
            QueryFailedError: Complete 이외의 종료 상태
        """
        model = query.model
        region = resolve_query_region(model, config)

        logs_client = self._get_logs_client(region, plugin_ctx)
        poller = LogQueryPoller(
            logs_client,
            poll_interval=self.poll_interval,
            max_attempts=self.max_attempts,
            cancel_event=cancel_event,
        )

        limit = model.get("limit")
        handle = poller.start(
            expression=str(model.get("expression") or ""),
            time_range=query.time_range,
            log_group_names=list(model.get("logGroupNames") or []),
            region=region,
            limit=int(limit) if limit else None,
            metadata={"ref_id": query.ref_id},
        )
        result = poller.wait(handle)

        if result.status is not QueryStatus.COMPLETE:
            raise QueryFailedError(handle.query_id, result.status.value)

        table = self.formatter(result, name=query.ref_id)
        stats_groups = list(model.get("statsGroups") or [])
        if stats_groups and table.fields:
            tables = group_results(table, stats_groups)
        else:
            tables = [table]

        logger.debug(f"경보 로그 쿼리 완료: {query.ref_id} ({table.row_count}행, 테이블 {len(tables)}개)")
        return tables
