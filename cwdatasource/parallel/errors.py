"""
cwdatasource/parallel/errors.py - 에러 분류

쿼리 실행 중 발생한 예외를 ErrorCategory와 에러 코드로 분류하여
쿼리별 응답(TaskError)으로 변환합니다.

주요 구성 요소:
- categorize_error: 예외 → ErrorCategory
- get_error_code: 예외 → 에러 코드 문자열
- to_task_error: 예외 → TaskError
"""

from __future__ import annotations

import logging

from cwdatasource.auth.types import AuthenticationError, ConfigurationError
from cwdatasource.exceptions import (
    APICallError,
    CWDSError,
    QueryCancelledError,
    QueryError,
    is_access_denied,
    is_not_found,
    is_throttling,
)

from .types import ErrorCategory, TaskError

logger = logging.getLogger(__name__)


def categorize_error_code(error_code: str) -> ErrorCategory:
    """에러 코드 문자열을 기반으로 ErrorCategory 분류

    Args:
        error_code: AWS 에러 코드 문자열 (예: "AccessDenied", "ThrottlingException")

    Returns:
        분류된 에러 카테고리. 매칭되는 키워드가 없으면 UNKNOWN 반환.
    """
    code = error_code.lower()

    if any(x in code for x in ["accessdenied", "unauthorized", "forbidden"]):
        return ErrorCategory.ACCESS_DENIED
    if any(x in code for x in ["notfound", "nosuch", "doesnotexist"]):
        return ErrorCategory.NOT_FOUND
    if any(x in code for x in ["throttl", "ratelimit", "toomanyrequests"]):
        return ErrorCategory.THROTTLING
    if any(x in code for x in ["expiredtoken"]):
        return ErrorCategory.EXPIRED_TOKEN
    if any(x in code for x in ["timeout", "timedout"]):
        return ErrorCategory.TIMEOUT
    if any(x in code for x in ["invalid", "validation", "malformed"]):
        return ErrorCategory.INVALID_REQUEST
    if any(x in code for x in ["internal", "serviceunavailable", "serviceerror"]):
        return ErrorCategory.SERVICE_ERROR

    return ErrorCategory.UNKNOWN


def _root_cause(error: Exception) -> Exception:
    while isinstance(error, CWDSError) and error.cause is not None:
        error = error.cause
    return error


def get_error_code(error: Exception) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    ClientError(또는 이를 감싼 예외)는 response의 Code를,
    그 외에는 예외 클래스명을 반환합니다.
    """
    if isinstance(error, APICallError) and error.error_code:
        return error.error_code

    root = _root_cause(error)
    response = getattr(root, "response", None)
    if isinstance(response, dict):
        code: str = response.get("Error", {}).get("Code", "Unknown")
        return code
    return error.__class__.__name__


def categorize_error(error: Exception) -> ErrorCategory:
    """예외 객체를 분석하여 ErrorCategory로 분류

    Args:
        error: 분류할 예외

    Returns:
        에러 카테고리
    """
    if isinstance(error, QueryCancelledError):
        return ErrorCategory.CANCELLED
    if isinstance(error, ConfigurationError):
        return ErrorCategory.CONFIGURATION
    if is_throttling(error):
        return ErrorCategory.THROTTLING
    if is_access_denied(error):
        return ErrorCategory.ACCESS_DENIED
    if is_not_found(error):
        return ErrorCategory.NOT_FOUND
    if isinstance(error, AuthenticationError):
        return ErrorCategory.AUTHENTICATION

    code_category = categorize_error_code(get_error_code(error))
    if code_category is not ErrorCategory.UNKNOWN:
        return code_category

    root = _root_cause(error)
    if isinstance(root, (ConnectionError, TimeoutError, OSError)):
        return ErrorCategory.NETWORK

    if isinstance(error, QueryError):
        return ErrorCategory.QUERY

    return ErrorCategory.UNKNOWN


def to_task_error(error: Exception, identifier: str, region: str = "") -> TaskError:
    """예외를 쿼리별 TaskError로 변환하고 로깅"""
    task_error = TaskError(
        identifier=identifier,
        region=region,
        category=categorize_error(error),
        error_code=get_error_code(error),
        message=str(error),
        original_exception=error,
    )

    if task_error.category in (ErrorCategory.ACCESS_DENIED, ErrorCategory.CANCELLED):
        logger.info(f"쿼리 실패 {task_error}")
    else:
        logger.warning(f"쿼리 실패 {task_error}")

    return task_error
