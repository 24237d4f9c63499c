"""
cwdatasource/parallel/types.py - 병렬 실행 결과 타입

쿼리 배치를 병렬 실행할 때 쿼리별 결과와 에러를 표현합니다.

주요 구성 요소:
- ErrorCategory: 에러 카테고리 (권한, 쓰로틀링, 인증, 설정 등)
- TaskError: 쿼리 하나의 실패 정보
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """에러 카테고리"""

    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    THROTTLING = "throttling"
    TIMEOUT = "timeout"
    INVALID_REQUEST = "invalid_request"
    EXPIRED_TOKEN = "expired_token"
    NETWORK = "network"
    SERVICE_ERROR = "service_error"
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    QUERY = "query"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


@dataclass
class TaskError:
    """쿼리 실행 실패 정보

    Attributes:
        identifier: 쿼리 ref_id
        region: 대상 리전 (알 수 없으면 빈 문자열)
        category: 에러 카테고리
        error_code: 에러 코드 (AWS 코드 또는 예외 클래스명)
        message: 에러 메시지
        original_exception: 원본 예외
    """

    identifier: str
    region: str
    category: ErrorCategory
    error_code: str
    message: str
    original_exception: Exception | None = None

    def __str__(self) -> str:
        return f"[{self.identifier}] {self.error_code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "region": self.region,
            "category": self.category.value,
            "error_code": self.error_code,
            "message": self.message,
        }
