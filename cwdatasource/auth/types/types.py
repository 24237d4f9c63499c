# cwdatasource/auth/types/types.py
"""
cwdatasource/auth/types/types.py - AWS 인증 모듈의 핵심 타입 정의

이 모듈은 인증 시스템 전체에서 사용되는 기본 타입들을 정의합니다.

포함 항목:
    - AuthType: 인증 방식 열거형 (DEFAULT, SHARED_PROFILE, STATIC_KEYS)
    - DataSourceConfig: 데이터 소스 단위 불변 인증 설정
    - 에러 클래스: AuthError, ConfigurationError, AuthenticationError, AssumeRoleError
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from cwdatasource.exceptions import CWDSError

logger = logging.getLogger(__name__)


# =============================================================================
# Auth Type Enum
# =============================================================================


class AuthType(Enum):
    """데이터 소스 인증 방식을 나타내는 열거형

    - DEFAULT: SDK 기본 자격증명 체인 (환경 변수, 인스턴스 역할 등)
    - SHARED_PROFILE: ~/.aws/credentials 의 명명된 프로파일
    - STATIC_KEYS: 설정에 저장된 액세스 키 쌍

    Note:
        값은 세션 캐시 키에 들어가는 태그입니다. 설정 파일의 문자열과는
        다르므로 외부 입력은 반드시 parse()를 거쳐야 합니다.
    """

    DEFAULT = "default"
    SHARED_PROFILE = "sharedCreds"
    STATIC_KEYS = "keys"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: str | None) -> AuthType:
        """설정 문자열을 AuthType으로 변환

        Args:
            raw: jsonData.authType 값

        Returns:
            AuthType

        Raises:
            ConfigurationError: 알 수 없는 인증 방식인 경우
        """
        if not raw:
            return cls.DEFAULT

        mapping = {
            "default": cls.DEFAULT,
            "credentials": cls.SHARED_PROFILE,
            "keys": cls.STATIC_KEYS,
        }
        if raw in mapping:
            return mapping[raw]

        if raw == "arn":
            logger.warning('인증 방식 "arn"은 더 이상 지원되지 않아 default로 대체합니다')
            return cls.DEFAULT

        raise ConfigurationError(f"알 수 없는 AWS 인증 방식: {raw}", config_key="authType")


# =============================================================================
# Data Source Config
# =============================================================================


@dataclass(frozen=True)
class DataSourceConfig:
    """데이터 소스 인증 설정

    데이터 소스가 구성될 때 한 번 생성되며, 쿼리 실행 중에는 변경되지 않습니다.

    Attributes:
        auth_type: 인증 방식
        profile: 공유 자격증명 프로파일 이름
        access_key: 정적 액세스 키 ID
        secret_key: 정적 시크릿 키 (repr/로그에 노출하지 않음)
        region: 기본 리전
        assume_role_arn: 위임받을 역할 ARN (옵션)
        external_id: 역할 위임 시 External ID (옵션)
        namespace: 커스텀 메트릭 네임스페이스 (쉼표 구분)
    """

    auth_type: AuthType = AuthType.DEFAULT
    profile: str = ""
    access_key: str = ""
    secret_key: str = field(default="", repr=False)
    region: str = ""
    assume_role_arn: str = ""
    external_id: str = ""
    namespace: str = ""

    @property
    def namespaces(self) -> list[str]:
        """커스텀 네임스페이스 목록"""
        return [ns.strip() for ns in self.namespace.split(",") if ns.strip()]

    @property
    def assumes_role(self) -> bool:
        return bool(self.assume_role_arn)


# =============================================================================
# Error Classes
# =============================================================================


class AuthError(CWDSError):
    """인증 관련 기본 에러 클래스

    모든 인증 에러의 부모 클래스입니다.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, cause)


class ConfigurationError(AuthError):
    """설정 오류가 발생했을 때 발생하는 에러

    알 수 없는 인증 방식, 잘못된 설정 JSON 등 프로그래밍/설정 오류입니다.
    기본값으로 조용히 대체하지 않습니다.

    Attributes:
        config_key: 문제가 된 설정 키 이름 (옵션)
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key


class AuthenticationError(AuthError):
    """자격증명 또는 세션 생성이 거부되었을 때 발생하는 에러

    로컬 재시도나 다른 인증 방식으로의 폴백 없이 호출자에게 전파됩니다.
    """

    def __init__(
        self,
        message: str = "AWS 인증에 실패했습니다",
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)


class AssumeRoleError(AuthenticationError):
    """역할 위임(sts:AssumeRole)이 실패했을 때 발생하는 에러

    Attributes:
        role_arn: 위임을 시도한 역할 ARN
    """

    def __init__(self, role_arn: str, cause: Exception | None = None):
        super().__init__(f"역할 위임 실패 [{role_arn}]", cause)
        self.role_arn = role_arn
        self.details["role_arn"] = role_arn
