"""
cwdatasource/logs/poller.py - CloudWatch Logs Insights 쿼리 폴링

StartQuery / GetQueryResults의 제출-폴링 API를 정해진 횟수 안에서 끝나는
단일 블로킹 호출로 바꿉니다.

흐름:
    handle = poller.start(expression, time_range, log_groups, region)
    result = poller.wait(handle)   # 대기 → 조회 → 종료 상태면 반환

규칙:
    - 조회 전에 항상 poll_interval 만큼 대기 (취소 신호로 즉시 중단 가능)
    - 시도 횟수는 완료된 GetQueryResults 왕복 수
    - max_attempts 번 조회해도 종료 상태가 아니면 PollAttemptsExceededError
    - 조회 중 전송/프로토콜 오류는 재시도 없이 PollingError
    - Failed / Cancelled / Timeout 은 예외가 아니라 결과로 반환
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from cwdatasource.config import settings
from cwdatasource.exceptions import (
    APICallError,
    PollAttemptsExceededError,
    PollingError,
    QueryCancelledError,
    QuerySubmissionError,
)

if TYPE_CHECKING:
    from cwdatasource.models import TimeRange

logger = logging.getLogger(__name__)


class QueryStatus(Enum):
    """Logs Insights 쿼리 상태"""

    SCHEDULED = "Scheduled"
    RUNNING = "Running"
    COMPLETE = "Complete"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    TIMEOUT = "Timeout"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {QueryStatus.COMPLETE, QueryStatus.FAILED, QueryStatus.CANCELLED, QueryStatus.TIMEOUT}
)


@dataclass(frozen=True)
class QueryHandle:
    """제출된 쿼리 식별 정보

    Attributes:
        query_id: 서비스가 발급한 쿼리 ID
        region: 쿼리를 제출한 리전
        metadata: 호출자가 붙인 부가 정보 (ref_id 등)
    """

    query_id: str
    region: str = ""
    metadata: dict[str, Any] = field(default_factory=dict, hash=False)


@dataclass
class PollResult:
    """GetQueryResults 한 번의 결과

    Attributes:
        status: 쿼리 상태
        rows: 결과 행 목록 (Complete일 때만 의미 있음).
            각 행은 [{"field": ..., "value": ...}, ...] 형태
        statistics: 스캔/매칭 통계
        raw: 원본 응답
    """

    status: QueryStatus
    rows: list[list[dict[str, str]]] = field(default_factory=list)
    statistics: dict[str, float] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: dict[str, Any], query_id: str = "") -> PollResult:
        """GetQueryResults 응답 → PollResult

        Raises:
            PollingError: 알 수 없는 상태값
        """
        raw_status = response.get("status")
        try:
            status = QueryStatus(raw_status)
        except ValueError as e:
            raise PollingError(query_id, f"알 수 없는 쿼리 상태: {raw_status!r}", cause=e) from e

        return cls(
            status=status,
            rows=response.get("results") or [],
            statistics=response.get("statistics") or {},
            raw=response,
        )


class LogQueryPoller:
    """Logs Insights 쿼리 제출 및 종료 상태까지 폴링

    Args:
        logs_client: boto3 logs client
        poll_interval: 조회 사이 대기 시간 (초)
        max_attempts: 최대 조회 횟수
        cancel_event: 설정되면 대기 중인 폴링을 중단하는 이벤트

    Example:
        poller = LogQueryPoller(session.client("logs"))
        result = poller.run("fields @message | limit 20", time_range, ["/aws/lambda/app"])
    """

    def __init__(
        self,
        logs_client: Any,
        poll_interval: float | None = None,
        max_attempts: int | None = None,
        cancel_event: threading.Event | None = None,
    ):
        self.logs_client = logs_client
        self.poll_interval = settings.log_poll_interval if poll_interval is None else poll_interval
        self.max_attempts = settings.log_max_attempts if max_attempts is None else max_attempts
        self.cancel_event = cancel_event or threading.Event()

        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.poll_interval < 0:
            raise ValueError(f"poll_interval must be >= 0, got {self.poll_interval}")

    def start(
        self,
        expression: str,
        time_range: TimeRange,
        log_group_names: list[str] | None = None,
        region: str = "",
        limit: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> QueryHandle:
        """쿼리 제출

        Raises:
            QuerySubmissionError: 서비스가 제출을 거부한 경우 (재시도 없음)
        """
        params: dict[str, Any] = {
            "queryString": expression,
            "startTime": time_range.start_epoch,
            "endTime": time_range.end_epoch,
        }
        if log_group_names:
            params["logGroupNames"] = list(log_group_names)
        if limit is not None:
            params["limit"] = limit

        try:
            response = self.logs_client.start_query(**params)
        except ClientError as e:
            api_error = APICallError.from_client_error("logs", "start_query", e)
            raise QuerySubmissionError(expression, cause=api_error) from e
        except BotoCoreError as e:
            raise QuerySubmissionError(expression, cause=e) from e

        query_id = response.get("queryId")
        if not query_id:
            raise QuerySubmissionError(expression)

        logger.debug(f"로그 쿼리 제출: {query_id} (region={region or '-'})")
        return QueryHandle(query_id=query_id, region=region, metadata=dict(metadata or {}))

    def poll(self, handle: QueryHandle, attempt: int = 0) -> PollResult:
        """GetQueryResults 한 번 호출

        Raises:
            PollingError: 전송 오류 또는 알 수 없는 상태값
        """
        try:
            response = self.logs_client.get_query_results(queryId=handle.query_id)
        except ClientError as e:
            api_error = APICallError.from_client_error("logs", "get_query_results", e)
            raise PollingError(handle.query_id, attempt=attempt, cause=api_error) from e
        except BotoCoreError as e:
            raise PollingError(handle.query_id, attempt=attempt, cause=e) from e

        result = PollResult.from_response(response, handle.query_id)
        logger.debug(f"로그 쿼리 상태: {handle.query_id} {result.status.value} ({attempt}/{self.max_attempts})")
        return result

    def wait(self, handle: QueryHandle, cancel_event: threading.Event | None = None) -> PollResult:
        """종료 상태가 될 때까지 폴링

        Args:
            handle: start()가 반환한 핸들
            cancel_event: 이 호출에만 적용할 취소 이벤트 (없으면 생성자 값)

        Returns:
            종료 상태의 PollResult

        Raises:
            QueryCancelledError: 취소 신호
            PollingError: 조회 실패
            PollAttemptsExceededError: max_attempts 초과
        """
        cancel = cancel_event or self.cancel_event
        attempt = 0

        while True:
            if cancel.wait(self.poll_interval):
                logger.debug(f"로그 쿼리 폴링 취소: {handle.query_id} (attempt={attempt})")
                raise QueryCancelledError(handle.query_id, attempt=attempt)

            result = self.poll(handle, attempt + 1)
            attempt += 1

            if result.status.is_terminal:
                return result
            if attempt >= self.max_attempts:
                raise PollAttemptsExceededError(handle.query_id, self.max_attempts, last_result=result)

    def run(
        self,
        expression: str,
        time_range: TimeRange,
        log_group_names: list[str] | None = None,
        region: str = "",
        limit: int | None = None,
        metadata: dict[str, Any] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> PollResult:
        """start() + wait()"""
        handle = self.start(expression, time_range, log_group_names, region, limit, metadata)
        return self.wait(handle, cancel_event)
