"""
cwdatasource/models.py - 쿼리 요청/응답 데이터 모델

호스트(모니터링 도구)가 전달하는 쿼리 배치와, 쿼리별 결과를 담는 응답 타입입니다.

요청:
    QueryDataRequest
    ├── plugin_context: PluginContext
    │   └── datasource_settings: DataSourceInstanceSettings
    ├── headers: {"FromAlert": "true", ...}
    └── queries: [DataQuery(ref_id, model, time_range), ...]

응답:
    QueryDataResponse
    └── responses: {ref_id: DataResponse(frames | error)}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cwdatasource.logs.frames import ResultTable
    from cwdatasource.parallel.types import TaskError

# 경보 평가에서 온 요청임을 나타내는 헤더
FROM_ALERT_HEADER = "FromAlert"


@dataclass(frozen=True)
class TimeRange:
    """쿼리 시간 범위 (UTC)"""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"시간 범위가 올바르지 않습니다: {self.start} > {self.end}")

    @property
    def start_epoch(self) -> int:
        return int(self.start.timestamp())

    @property
    def end_epoch(self) -> int:
        return int(self.end.timestamp())

    @classmethod
    def from_epoch_ms(cls, start_ms: int, end_ms: int) -> TimeRange:
        return cls(
            start=datetime.fromtimestamp(start_ms / 1000, tz=timezone.utc),
            end=datetime.fromtimestamp(end_ms / 1000, tz=timezone.utc),
        )


@dataclass
class DataQuery:
    """개별 쿼리

    Attributes:
        ref_id: 응답을 매칭하는 쿼리 식별자
        model: 쿼리 JSON 모델 (queryMode, type, expression, region 등)
        time_range: 시간 범위
    """

    ref_id: str
    model: dict[str, Any]
    time_range: TimeRange

    @classmethod
    def from_json(cls, ref_id: str, raw: str | bytes | dict[str, Any], time_range: TimeRange) -> DataQuery:
        """JSON 문자열/바이트 또는 dict에서 생성

        Raises:
            ValueError: JSON 파싱 실패 또는 객체가 아닌 경우
        """
        model = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        if not isinstance(model, dict):
            raise ValueError(f"쿼리 모델은 JSON 객체여야 합니다: {ref_id}")
        return cls(ref_id=ref_id, model=model, time_range=time_range)

    @property
    def query_type(self) -> str:
        return str(self.model.get("type") or "timeSeriesQuery")

    @property
    def query_mode(self) -> str:
        return str(self.model.get("queryMode") or "")


@dataclass(frozen=True)
class DataSourceInstanceSettings:
    """호스트가 관리하는 데이터 소스 인스턴스 설정

    Attributes:
        uid: 데이터 소스 고유 ID
        json_data: 평문 설정 (authType, defaultRegion 등)
        decrypted_secure_json_data: 복호화된 민감 설정 (accessKey, secretKey)
        database: 레거시 필드 (프로파일 이름 대체값)
        updated: 마지막 수정 시각 (인스턴스 재생성 판단용)
    """

    uid: str
    json_data: dict[str, Any] = field(default_factory=dict)
    decrypted_secure_json_data: dict[str, str] = field(default_factory=dict, repr=False)
    database: str = ""
    updated: datetime | None = None


@dataclass(frozen=True)
class PluginContext:
    """요청을 보낸 데이터 소스 컨텍스트"""

    datasource_settings: DataSourceInstanceSettings


@dataclass
class QueryDataRequest:
    """쿼리 배치 요청"""

    plugin_context: PluginContext
    queries: list[DataQuery] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def from_alert(self) -> bool:
        return FROM_ALERT_HEADER in self.headers


@dataclass
class DataResponse:
    """쿼리 하나의 결과 (테이블 목록 또는 에러)"""

    frames: list[ResultTable] = field(default_factory=list)
    error: TaskError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class QueryDataResponse:
    """쿼리 배치 응답 (ref_id → DataResponse)"""

    responses: dict[str, DataResponse] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.responses.values() if r.error is not None)
