"""
cwdatasource/cli/app.py - 메인 CLI 엔트리포인트

Click 기반 CLI입니다. 데이터 소스 설정을 명령줄 옵션으로 받아
경보 평가와 같은 경로(세션 캐시 → 로그 쿼리 제출 → 폴링)로 로그 쿼리를 실행합니다.

명령어 구조:
    cwds --version                        # 버전 표시
    cwds logs "fields @message" -g /aws/lambda/app -r ap-northeast-2
    cwds logs "stats count(*) by level" -g app --stats-group level --json

Usage:
    $ cwds logs --help
    $ python -m cwdatasource.cli.app logs ...
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import click
from click import Context

from cwdatasource.config import get_version

VERSION = get_version()

# botocore 노이즈 로그 제한
logging.getLogger("botocore.credentials").setLevel(logging.WARNING)
logging.getLogger("botocore.loaders").setLevel(logging.WARNING)


def _configure_logging(debug: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING, handlers=[handler], force=True)


@click.group()
@click.version_option(VERSION, prog_name="cwds")
@click.option("--debug", is_flag=True, help="디버그 로그 출력")
@click.pass_context
def cli(ctx: Context, debug: bool) -> None:
    """CWDS - CloudWatch 데이터 소스 백엔드 CLI"""
    _configure_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command("logs")
@click.argument("expression")
@click.option("-g", "--log-group", "log_groups", multiple=True, required=True, help="로그 그룹 (다중 가능)")
@click.option("-r", "--region", default="default", show_default=True, help="리전 (default면 --default-region)")
@click.option("--default-region", default="", envvar="AWS_REGION", help="데이터 소스 기본 리전")
@click.option(
    "--auth-type",
    type=click.Choice(["default", "credentials", "keys"]),
    default="default",
    show_default=True,
    help="인증 방식",
)
@click.option("-p", "--profile", default="", help="공유 자격증명 프로파일 (--auth-type credentials)")
@click.option("--access-key", default="", envvar="AWS_ACCESS_KEY_ID", help="Access Key (--auth-type keys)")
@click.option(
    "--secret-key", default="", envvar="AWS_SECRET_ACCESS_KEY", show_envvar=True, help="Secret Key (--auth-type keys)"
)
@click.option("--role-arn", default="", help="위임할 역할 ARN")
@click.option("--external-id", default="", help="역할 위임 External ID")
@click.option("--since", default=60, show_default=True, type=click.IntRange(min=1), help="조회 기간 (분)")
@click.option("--limit", default=None, type=click.IntRange(min=1), help="최대 결과 행 수")
@click.option("--stats-group", "stats_groups", multiple=True, help="그룹 필드 (stats ... by)")
@click.option("--max-attempts", default=None, type=click.IntRange(min=1), help="최대 폴링 횟수")
@click.option("--interval", default=None, type=click.FloatRange(min=0), help="폴링 주기 (초)")
@click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
def logs_command(
    expression: str,
    log_groups: tuple[str, ...],
    region: str,
    default_region: str,
    auth_type: str,
    profile: str,
    access_key: str,
    secret_key: str,
    role_arn: str,
    external_id: str,
    since: int,
    limit: int | None,
    stats_groups: tuple[str, ...],
    max_attempts: int | None,
    interval: float | None,
    as_json: bool,
) -> None:
    """Logs Insights 쿼리를 실행하고 결과를 출력"""
    from dataclasses import replace

    from cwdatasource.auth import SessionCache, SessionFactory
    from cwdatasource.config import InstanceManager, load_datasource_config, settings
    from cwdatasource.exceptions import format_error_for_user
    from cwdatasource.executor import CloudWatchExecutor
    from cwdatasource.models import (
        FROM_ALERT_HEADER,
        DataQuery,
        DataSourceInstanceSettings,
        PluginContext,
        QueryDataRequest,
        TimeRange,
    )

    config = load_datasource_config(
        {
            "authType": auth_type,
            "profile": profile,
            "defaultRegion": default_region,
            "assumeRoleArn": role_arn,
            "externalId": external_id,
        },
        {"accessKey": access_key, "secretKey": secret_key},
    )

    run_settings = settings
    if max_attempts is not None:
        run_settings = replace(run_settings, log_max_attempts=max_attempts)
    if interval is not None:
        run_settings = replace(run_settings, log_poll_interval_ms=int(interval * 1000))

    end = datetime.now(timezone.utc)
    model: dict[str, Any] = {
        "queryMode": "Logs",
        "expression": expression,
        "logGroupNames": list(log_groups),
        "region": region,
        "statsGroups": list(stats_groups),
    }
    if limit is not None:
        model["limit"] = limit

    request = QueryDataRequest(
        plugin_context=PluginContext(DataSourceInstanceSettings(uid="cli")),
        queries=[DataQuery("A", model, TimeRange(start=end - timedelta(minutes=since), end=end))],
        headers={FROM_ALERT_HEADER: "true"},
    )

    with SessionCache(SessionFactory()) as cache:
        executor = CloudWatchExecutor(
            session_cache=cache,
            instances=InstanceManager(factory=lambda _ds: config),
            settings=run_settings,
        )
        response = executor.query_data(request)

    result = response.responses["A"]
    if result.error is not None:
        error = result.error.original_exception
        message = format_error_for_user(error) if error is not None else result.error.message
        click.echo(f"쿼리 실패 [{result.error.error_code}]: {message}", err=True)
        raise SystemExit(1)

    if as_json:
        payload = [{"name": table.name, "rows": table.rows()} for table in result.frames]
        click.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))
        return

    _print_tables(result.frames)


def _print_tables(tables: list) -> None:
    from rich.console import Console
    from rich.table import Table

    console = Console()
    for table in tables:
        view = Table(title=table.name or None, show_header=True)
        for name in table.fields:
            view.add_column(name)
        for row in table.rows():
            view.add_row(*("" if v is None else str(v) for v in row.values()))
        console.print(view)
        console.print(f"[dim]{table.row_count}행[/dim]")


if __name__ == "__main__":
    cli()
