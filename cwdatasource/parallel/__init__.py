"""
cwdatasource/parallel - 병렬 처리 모듈

쿼리 배치를 병렬로 안전하게 처리하고, 서비스별 boto3 client를 생성합니다.

주요 구성 요소:
- QueryBatchExecutor: ref_id 단위 병렬 실행기 (쿼리별 에러 격리)
- get_client: retry/User-Agent 설정이 적용된 boto3 client 생성
- categorize_error / to_task_error: 예외 분류

Example:
    from cwdatasource.parallel import ParallelConfig, QueryBatchExecutor

    executor = QueryBatchExecutor(ParallelConfig(max_workers=4))
    response = executor.execute(request.queries, run_query)

    for ref_id, result in response.responses.items():
        if result.error:
            print(ref_id, result.error)
"""

from .client import (
    get_client,
    new_cw_client,
    new_ec2_client,
    new_logs_client,
    new_rgta_client,
    new_sts_client,
)
from .errors import categorize_error, categorize_error_code, get_error_code, to_task_error
from .executor import ParallelConfig, QueryBatchExecutor
from .types import ErrorCategory, TaskError

__all__: list[str] = [
    # Executor
    "QueryBatchExecutor",
    "ParallelConfig",
    # Client
    "get_client",
    "new_cw_client",
    "new_logs_client",
    "new_ec2_client",
    "new_rgta_client",
    "new_sts_client",
    # Error handling
    "categorize_error",
    "categorize_error_code",
    "get_error_code",
    "to_task_error",
    # Types
    "ErrorCategory",
    "TaskError",
]
