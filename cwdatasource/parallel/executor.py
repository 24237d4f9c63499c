"""
cwdatasource/parallel/executor.py - 쿼리 배치 병렬 실행기

배치 안의 쿼리들을 ThreadPoolExecutor로 병렬 처리하고,
결과를 ref_id 기준으로 모읍니다. 한 쿼리의 실패는 다른 쿼리에 영향을 주지 않으며
각 쿼리 슬롯은 데이터 또는 에러 중 하나를 가집니다.

주요 구성 요소:
- ParallelConfig: 병렬 실행 설정 (워커 수)
- QueryBatchExecutor: ref_id 단위 병렬 실행기

Example:
    def run_query(query):
        return [table]

    executor = QueryBatchExecutor(ParallelConfig(max_workers=4))
    response = executor.execute(request.queries, run_query)
    response.responses["A"].frames
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cwdatasource.models import DataResponse, QueryDataResponse

from .errors import to_task_error

if TYPE_CHECKING:
    from cwdatasource.logs.frames import ResultTable
    from cwdatasource.models import DataQuery

logger = logging.getLogger(__name__)


def _clear_exception_chain(e: BaseException) -> None:
    """traceback + chained exception 메모리 누수 방지"""
    e.__traceback__ = None
    if e.__context__ is not None:
        e.__context__.__traceback__ = None
    if e.__cause__ is not None:
        e.__cause__.__traceback__ = None


@dataclass
class ParallelConfig:
    """병렬 실행 설정

    Attributes:
        max_workers: 최대 동시 스레드 수 (1~100)
    """

    max_workers: int = 10

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_workers > 100:
            self.max_workers = 100


class QueryBatchExecutor:
    """쿼리 배치 병렬 실행기

    특징:
    - ThreadPoolExecutor 기반 병렬 처리 (쿼리 1개면 호출 스레드에서 직접 실행)
    - 쿼리별 에러 격리 (DataResponse.error)
    - 응답은 ref_id로 키잉
    """

    def __init__(self, config: ParallelConfig | None = None):
        self.config = config or ParallelConfig()

    def execute(
        self,
        queries: Sequence[DataQuery],
        func: Callable[[DataQuery], list[ResultTable]],
        region_of: Callable[[DataQuery], str] | None = None,
    ) -> QueryDataResponse:
        """모든 쿼리에 func 실행

        Args:
            queries: 실행할 쿼리 목록
            func: 쿼리 → 결과 테이블 목록
            region_of: 에러 기록용 리전 추출 함수 (선택사항)

        Returns:
            QueryDataResponse (ref_id → DataResponse)
        """
        response = QueryDataResponse()
        if not queries:
            return response

        start_time = time.monotonic()

        if len(queries) == 1 or self.config.max_workers == 1:
            for query in queries:
                response.responses[query.ref_id] = self._execute_single(func, query, region_of)
        else:
            workers = min(self.config.max_workers, len(queries))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {executor.submit(self._execute_single, func, q, region_of): q for q in queries}
                for future in as_completed(futures):
                    query = futures[future]
                    response.responses[query.ref_id] = future.result()

        total_time = (time.monotonic() - start_time) * 1000
        logger.debug(
            f"쿼리 배치 완료: {len(queries)}개, 실패 {response.error_count}개, 총 {total_time:.0f}ms"
        )
        return response

    @staticmethod
    def _execute_single(
        func: Callable[[DataQuery], list[ResultTable]],
        query: DataQuery,
        region_of: Callable[[DataQuery], str] | None,
    ) -> DataResponse:
        """단일 쿼리 실행 (워커 스레드 내에서 호출)"""
        try:
            return DataResponse(frames=func(query))
        except Exception as e:
            region = region_of(query) if region_of else ""
            _clear_exception_chain(e)
            return DataResponse(error=to_task_error(e, query.ref_id, region))
