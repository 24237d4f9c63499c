"""
cwdatasource/exceptions.py - 통합 예외 계층 구조

CloudWatch 데이터 소스 백엔드 전체에서 사용되는 예외 클래스들을 정의합니다.
쿼리 단위 에러 응답과 사용자 메시지가 일관되도록 공통 베이스를 제공합니다.

예외 계층 구조:
    CWDSError (베이스)
    ├── AuthError (인증 관련) - cwdatasource.auth.types에서 정의
    │   ├── ConfigurationError
    │   └── AuthenticationError
    │       └── AssumeRoleError
    ├── QueryError (쿼리 실행)
    │   ├── QuerySubmissionError
    │   ├── PollingError
    │   ├── PollAttemptsExceededError
    │   ├── QueryCancelledError
    │   ├── QueryFailedError
    │   └── UnsupportedQueryTypeError
    └── APICallError (AWS API 호출)

Usage:
    from cwdatasource.exceptions import APICallError

    try:
        logs.start_query(...)
    except ClientError as e:
        raise APICallError.from_client_error("logs", "start_query", e) from e
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cwdatasource.logs.poller import PollResult

# =============================================================================
# 베이스 예외
# =============================================================================


class CWDSError(Exception):
    """CloudWatch 데이터 소스 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 쿼리 실행 관련 예외
# =============================================================================


class QueryError(CWDSError):
    """쿼리 실행 관련 예외"""

    def __init__(
        self,
        message: str,
        query_id: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.query_id = query_id
        if query_id:
            self.details["query_id"] = query_id


class QuerySubmissionError(QueryError):
    """StartQuery가 거부된 경우 (문법 오류, 권한 없음 등)

    재시도하지 않고 해당 쿼리를 즉시 실패 처리합니다.
    """

    def __init__(self, expression: str, cause: Exception | None = None):
        super().__init__("로그 쿼리 제출 실패", cause=cause)
        self.expression = expression


class PollingError(QueryError):
    """GetQueryResults 왕복 중 발생한 전송/프로토콜 오류

    폴링 루프는 이 에러를 만나면 재시도 없이 즉시 중단합니다.
    """

    def __init__(
        self,
        query_id: str,
        message: str = "쿼리 결과 조회 실패",
        attempt: int = 0,
        cause: Exception | None = None,
    ):
        super().__init__(message, query_id=query_id, cause=cause)
        self.attempt = attempt
        self.details["attempt"] = attempt


class PollAttemptsExceededError(QueryError):
    """최대 폴링 횟수 내에 종료 상태에 도달하지 못한 경우

    전송 실패가 아니라 "포기" 결과입니다.
    마지막으로 관측한 (비종료) 결과를 last_result로 함께 전달합니다.
    """

    def __init__(
        self,
        query_id: str,
        max_attempts: int,
        last_result: PollResult | None = None,
    ):
        super().__init__(
            f"쿼리 결과 조회가 최대 시도 횟수({max_attempts})를 초과했습니다",
            query_id=query_id,
        )
        self.max_attempts = max_attempts
        self.last_result = last_result
        self.details["max_attempts"] = max_attempts
        if last_result is not None:
            self.details["last_status"] = last_result.status.value


class QueryCancelledError(QueryError):
    """호출자가 취소 신호를 보내 폴링을 중단한 경우"""

    def __init__(self, query_id: str | None = None, attempt: int = 0):
        super().__init__("쿼리 실행이 취소되었습니다", query_id=query_id)
        self.attempt = attempt


class QueryFailedError(QueryError):
    """쿼리가 Complete 이외의 종료 상태로 끝난 경우 (Failed, Cancelled, Timeout)

    인프라 오류와 구분하기 위해 원격 상태값을 그대로 보관합니다.
    """

    def __init__(self, query_id: str, status: str):
        super().__init__(f"로그 쿼리가 {status} 상태로 종료되었습니다", query_id=query_id)
        self.status = status
        self.details["status"] = status


class UnsupportedQueryTypeError(QueryError):
    """등록된 핸들러가 없는 쿼리 타입"""

    def __init__(self, query_type: str):
        super().__init__(f"지원하지 않는 쿼리 타입: {query_type}")
        self.query_type = query_type
        self.details["query_type"] = query_type


# =============================================================================
# AWS API 호출 관련 예외
# =============================================================================


class APICallError(CWDSError):
    """AWS API 호출 관련 예외

    boto3/botocore의 ClientError를 래핑하여 일관된 예외 처리를 제공합니다.
    """

    def __init__(
        self,
        service: str,
        operation: str,
        error_code: str | None = None,
        error_message: str | None = None,
        cause: Exception | None = None,
    ):
        message = f"{service}.{operation}"
        if error_code:
            message = f"{message} 실패 ({error_code})"
        if error_message:
            message = f"{message}: {error_message}"

        super().__init__(message, cause)
        self.service = service
        self.operation = operation
        self.error_code = error_code
        self.error_message = error_message
        self.details.update(
            {
                "service": service,
                "operation": operation,
                "error_code": error_code,
            }
        )

    @classmethod
    def from_client_error(
        cls,
        service: str,
        operation: str,
        client_error: Exception,
    ) -> APICallError:
        """botocore.exceptions.ClientError로부터 생성

        Args:
            service: AWS 서비스 이름
            operation: API 작업 이름
            client_error: ClientError 예외

        Returns:
            APICallError 인스턴스
        """
        error_code = None
        error_message = None

        if hasattr(client_error, "response"):
            error_info = client_error.response.get("Error", {})
            error_code = error_info.get("Code")
            error_message = error_info.get("Message")

        return cls(
            service=service,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
            cause=client_error,
        )


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================

ACCESS_DENIED_CODES = {
    "AccessDenied",
    "AccessDeniedException",
    "UnauthorizedAccess",
    "UnrecognizedClientException",
}

THROTTLING_CODES = {
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
    "RateExceeded",
    "LimitExceededException",
}

NOT_FOUND_CODES = {
    "ResourceNotFoundException",
    "NotFoundException",
    "NoSuchEntity",
}


def _error_code(error: Exception) -> str | None:
    if isinstance(error, APICallError):
        return error.error_code
    if isinstance(error, CWDSError) and error.cause is not None:
        return _error_code(error.cause)
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        return response.get("Error", {}).get("Code", "")
    return None


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        액세스 거부 오류이면 True
    """
    return _error_code(error) in ACCESS_DENIED_CODES


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인"""
    return _error_code(error) in THROTTLING_CODES


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인"""
    return _error_code(error) in NOT_FOUND_CODES


FRIENDLY_MESSAGES = {
    "AccessDenied": "권한이 없습니다. IAM 정책을 확인하세요.",
    "AccessDeniedException": "권한이 없습니다. IAM 정책을 확인하세요.",
    "ExpiredToken": "인증 토큰이 만료되었습니다. 자격 증명을 갱신하세요.",
    "InvalidClientTokenId": "잘못된 자격 증명입니다.",
    "MalformedQueryException": "로그 쿼리 문법이 올바르지 않습니다.",
    "ResourceNotFoundException": "로그 그룹을 찾을 수 없습니다.",
    "ThrottlingException": "요청이 너무 많습니다. 잠시 후 다시 시도하세요.",
}


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    원인 체인에 AWS 에러 코드가 있으면 안내 문구를 덧붙입니다.

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    code = _error_code(error)
    hint = FRIENDLY_MESSAGES.get(code or "")

    if isinstance(error, CWDSError):
        return f"{error} ({hint})" if hint else str(error)

    response = getattr(error, "response", None)
    if isinstance(response, dict):
        message = response.get("Error", {}).get("Message", str(error))
        return hint or f"{code or 'UnknownError'}: {message}"

    return str(error)
