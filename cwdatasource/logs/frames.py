"""
cwdatasource/logs/frames.py - 로그 쿼리 결과 → 결과 테이블 변환

GetQueryResults의 행 목록을 컬럼 단위 테이블로 바꾸고,
stats ... by 절의 그룹 필드 기준으로 테이블을 나눕니다.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .poller import PollResult

# 결과 행 포인터 (표시 대상 아님)
POINTER_FIELD = "@ptr"

# Logs Insights 타임스탬프 형식
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


@dataclass
class ResultTable:
    """컬럼 단위 결과 테이블

    Attributes:
        name: 테이블 이름 (그룹 결과면 그룹 키)
        fields: 컬럼 이름 → 값 목록 (모든 컬럼 길이가 같음)
    """

    name: str = ""
    fields: dict[str, list[Any]] = field(default_factory=dict)

    @property
    def row_count(self) -> int:
        return len(next(iter(self.fields.values()), []))

    def rows(self) -> list[dict[str, Any]]:
        names = list(self.fields)
        return [{n: self.fields[n][i] for n in names} for i in range(self.row_count)]


def _parse_timestamp(value: str) -> datetime | None:
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _parse_number(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def _convert_column(values: list[str | None]) -> list[Any]:
    """컬럼 값 변환: 전부 타임스탬프면 datetime, 전부 숫자면 float, 아니면 문자열"""
    present = [v for v in values if v is not None]
    if not present:
        return values

    for parse in (_parse_timestamp, _parse_number):
        parsed = [parse(v) for v in present]
        if all(p is not None for p in parsed):
            it = iter(parsed)
            return [None if v is None else next(it) for v in values]

    return values


def logs_results_to_table(result: PollResult | Iterable[list[dict[str, str]]], name: str = "") -> ResultTable:
    """결과 행 목록을 ResultTable로 변환

    컬럼은 처음 등장한 순서대로 만들어지고, 행에 없는 값은 None입니다.
    @ptr 필드는 제외합니다.
    """
    rows = getattr(result, "rows", result)

    columns: dict[str, list[str | None]] = {}
    row_count = 0
    for row in rows:
        cells = {c.get("field"): c.get("value") for c in row if c.get("field") and c.get("field") != POINTER_FIELD}
        for field_name in cells:
            if field_name not in columns:
                columns[field_name] = [None] * row_count
        for field_name, values in columns.items():
            values.append(cells.get(field_name))
        row_count += 1

    return ResultTable(name=name, fields={k: _convert_column(v) for k, v in columns.items()})


def group_results(table: ResultTable, stats_groups: list[str]) -> list[ResultTable]:
    """그룹 필드 값 조합별로 테이블 분리

    그룹 키는 그룹 필드 값을 공백으로 이은 문자열이며 테이블 이름이 됩니다.
    그룹 필드 자체는 결과 테이블에서 제외하고, 그룹 순서는 처음 등장한 순서입니다.
    """
    group_fields = [g for g in stats_groups if g in table.fields]
    if not group_fields:
        return [table]

    value_fields = [f for f in table.fields if f not in group_fields]
    groups: dict[str, ResultTable] = {}

    for i in range(table.row_count):
        key = " ".join("" if table.fields[g][i] is None else str(table.fields[g][i]) for g in group_fields)
        group = groups.get(key)
        if group is None:
            group = ResultTable(name=key, fields={f: [] for f in value_fields})
            groups[key] = group
        for f in value_fields:
            group.fields[f].append(table.fields[f][i])

    return list(groups.values())
