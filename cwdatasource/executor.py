"""
cwdatasource/executor.py - 쿼리 배치 실행 진입점

호스트가 보낸 쿼리 배치를 쿼리별로 라우팅하고 병렬 실행합니다.

라우팅:
    FromAlert 헤더 + queryMode == "Logs"  → AlertQueryOrchestrator
    그 외                                   → type(기본 timeSeriesQuery)에 등록된 핸들러
    등록되지 않은 type                       → 쿼리별 UnsupportedQueryTypeError

Example:
    executor = CloudWatchExecutor(
        session_cache=SessionCache(),
        instances=InstanceManager(factory=datasource_config_factory),
    )
    executor.register_handler("timeSeriesQuery", run_time_series)
    response = executor.query_data(request)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from cwdatasource.config import Settings, settings as default_settings
from cwdatasource.exceptions import UnsupportedQueryTypeError
from cwdatasource.logs.alert import AlertQueryOrchestrator
from cwdatasource.parallel import (
    ParallelConfig,
    QueryBatchExecutor,
    new_cw_client,
    new_ec2_client,
    new_logs_client,
    new_rgta_client,
)

if TYPE_CHECKING:
    import boto3

    from cwdatasource.auth.cache import SessionCache
    from cwdatasource.auth.types import DataSourceConfig
    from cwdatasource.config import ConfigLookup
    from cwdatasource.logs.frames import ResultTable
    from cwdatasource.models import DataQuery, PluginContext, QueryDataRequest, QueryDataResponse

logger = logging.getLogger(__name__)

LOGS_QUERY_MODE = "Logs"

# (query, plugin_ctx, executor) → 결과 테이블 목록
QueryHandler = Callable[["DataQuery", "PluginContext", "CloudWatchExecutor"], "list[ResultTable]"]


class CloudWatchExecutor:
    """CloudWatch 데이터 소스 쿼리 실행기

    Args:
        session_cache: 프로세스 범위 세션 캐시
        instances: PluginContext → DataSourceConfig 조회
        handlers: 쿼리 타입 → 핸들러 (메트릭 조회, 어노테이션 등)
        parallel_config: 배치 병렬 실행 설정 (None이면 settings.max_workers)
        settings: 런타임 설정 (None이면 모듈 기본값)
    """

    def __init__(
        self,
        session_cache: SessionCache,
        instances: ConfigLookup[DataSourceConfig],
        handlers: dict[str, QueryHandler] | None = None,
        parallel_config: ParallelConfig | None = None,
        settings: Settings | None = None,
    ):
        self.session_cache = session_cache
        self.instances = instances
        self.settings = settings or default_settings
        self.handlers: dict[str, QueryHandler] = dict(handlers or {})
        self.batch_executor = QueryBatchExecutor(parallel_config or ParallelConfig(max_workers=self.settings.max_workers))
        self.alert_orchestrator = AlertQueryOrchestrator(
            self.get_logs_client,
            poll_interval=self.settings.log_poll_interval,
            max_attempts=self.settings.log_max_attempts,
        )

        # 인벤토리 client는 실행기당 한 번만 생성
        self._client_lock = threading.Lock()
        self._ec2_client: Any = None
        self._rgta_client: Any = None

    def register_handler(self, query_type: str, handler: QueryHandler) -> None:
        """쿼리 타입 핸들러 등록 (같은 타입은 덮어씀)"""
        self.handlers[query_type] = handler

    # =========================================================================
    # 설정 / 세션 / client
    # =========================================================================

    def get_datasource_config(self, plugin_ctx: PluginContext) -> DataSourceConfig:
        return self.instances.get(plugin_ctx)

    def new_session(self, region: str, plugin_ctx: PluginContext) -> boto3.Session:
        """데이터 소스 설정으로 인증된 세션 조회 (캐시 경유)"""
        config = self.get_datasource_config(plugin_ctx)
        return self.session_cache.get_session(region, config)

    def get_cw_client(self, region: str, plugin_ctx: PluginContext) -> Any:
        return new_cw_client(self.new_session(region, plugin_ctx))

    def get_logs_client(self, region: str, plugin_ctx: PluginContext) -> Any:
        return new_logs_client(self.new_session(region, plugin_ctx))

    def get_ec2_client(self, region: str, plugin_ctx: PluginContext) -> Any:
        """EC2 client (최초 호출 시 한 번 생성)"""
        if self._ec2_client is not None:
            return self._ec2_client
        # 세션 조회는 락 밖에서 (캐시 미스 시 네트워크 I/O)
        session = self.new_session(region, plugin_ctx)
        with self._client_lock:
            if self._ec2_client is None:
                self._ec2_client = new_ec2_client(session)
            return self._ec2_client

    def get_rgta_client(self, region: str, plugin_ctx: PluginContext) -> Any:
        """Resource Groups Tagging API client (최초 호출 시 한 번 생성)"""
        if self._rgta_client is not None:
            return self._rgta_client
        session = self.new_session(region, plugin_ctx)
        with self._client_lock:
            if self._rgta_client is None:
                self._rgta_client = new_rgta_client(session)
            return self._rgta_client

    # =========================================================================
    # 쿼리 실행
    # =========================================================================

    def query_data(
        self,
        request: QueryDataRequest,
        cancel_event: threading.Event | None = None,
    ) -> QueryDataResponse:
        """쿼리 배치 실행

        각 쿼리는 독립적으로 실행되며, 실패한 쿼리는 해당 ref_id의
        DataResponse.error로 기록되고 다른 쿼리에는 영향을 주지 않습니다.
        """
        plugin_ctx = request.plugin_context
        from_alert = request.from_alert

        def run_query(query: DataQuery) -> list[ResultTable]:
            return self._execute_query(query, plugin_ctx, from_alert, cancel_event)

        def region_of(query: DataQuery) -> str:
            return str(query.model.get("region") or "")

        response = self.batch_executor.execute(request.queries, run_query, region_of)
        if response.error_count:
            logger.info(f"쿼리 배치 {len(request.queries)}개 중 {response.error_count}개 실패")
        return response

    def _execute_query(
        self,
        query: DataQuery,
        plugin_ctx: PluginContext,
        from_alert: bool,
        cancel_event: threading.Event | None,
    ) -> list[ResultTable]:
        if from_alert and query.query_mode == LOGS_QUERY_MODE:
            config = self.get_datasource_config(plugin_ctx)
            return self.alert_orchestrator.execute(query, plugin_ctx, config, cancel_event)

        handler = self.handlers.get(query.query_type)
        if handler is None:
            raise UnsupportedQueryTypeError(query.query_type)
        return handler(query, plugin_ctx, self)
