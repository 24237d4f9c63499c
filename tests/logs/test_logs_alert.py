"""
cwdatasource/logs/alert.py 단위 테스트

AlertQueryOrchestrator 리전 해석, 단일 제출, 그룹화, 에러 전파 테스트.
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from cwdatasource.auth.types import AuthenticationError, DataSourceConfig
from cwdatasource.exceptions import PollAttemptsExceededError, QueryFailedError, QuerySubmissionError
from cwdatasource.logs.alert import AlertQueryOrchestrator, resolve_query_region


@pytest.fixture
def orchestrator(fake_logs_client):
    get_client = MagicMock(return_value=fake_logs_client)
    return AlertQueryOrchestrator(get_client, poll_interval=0, max_attempts=8)


class TestResolveQueryRegion:
    """resolve_query_region 테스트"""

    def test_explicit(self, default_config):
        assert resolve_query_region({"region": "us-east-1"}, default_config) == "us-east-1"

    @pytest.mark.parametrize("model", [{}, {"region": "default"}, {"region": ""}])
    def test_default(self, model, default_config):
        assert resolve_query_region(model, default_config) == "ap-northeast-2"


class TestAlertQueryOrchestrator:
    """AlertQueryOrchestrator 테스트"""

    def test_single_table(self, orchestrator, fake_logs_client, logs_response, make_query, plugin_ctx, default_config):
        fake_logs_client.get_query_results.side_effect = [
            logs_response("Running"),
            logs_response("Complete", [[{"field": "@message", "value": "boom"}]]),
        ]
        query = make_query("A", queryMode="Logs", expression="fields @message", logGroupNames=["app"])

        tables = orchestrator.execute(query, plugin_ctx, default_config)

        assert len(tables) == 1
        assert tables[0].name == "A"
        assert tables[0].fields == {"@message": ["boom"]}
        fake_logs_client.start_query.assert_called_once()
        assert fake_logs_client.get_query_results.call_count == 2

    def test_region_sentinel_uses_default_region(self, orchestrator, make_query, plugin_ctx, default_config):
        query = make_query("A", queryMode="Logs", expression="fields @message", region="default")

        orchestrator.execute(query, plugin_ctx, default_config)

        orchestrator._get_logs_client.assert_called_once_with("ap-northeast-2", plugin_ctx)

    def test_grouped(self, orchestrator, fake_logs_client, logs_response, make_query, plugin_ctx, default_config):
        rows = [
            [{"field": "level", "value": "INFO"}, {"field": "count", "value": "3"}],
            [{"field": "level", "value": "ERROR"}, {"field": "count", "value": "1"}],
        ]
        fake_logs_client.get_query_results.side_effect = [logs_response("Complete", rows)]
        query = make_query("A", queryMode="Logs", expression="stats count(*) by level", statsGroups=["level"])

        tables = orchestrator.execute(query, plugin_ctx, default_config)

        assert [t.name for t in tables] == ["INFO", "ERROR"]

    def test_limit_passed(self, orchestrator, fake_logs_client, make_query, plugin_ctx, default_config):
        query = make_query("A", queryMode="Logs", expression="fields @message", limit=50)

        orchestrator.execute(query, plugin_ctx, default_config)

        assert fake_logs_client.start_query.call_args.kwargs["limit"] == 50

    @pytest.mark.parametrize("status", ["Failed", "Cancelled", "Timeout"])
    def test_terminal_failure_raises(
        self, orchestrator, fake_logs_client, logs_response, make_query, plugin_ctx, default_config, status
    ):
        """Complete 이외의 종료 상태는 빈 성공이 아니라 에러"""
        fake_logs_client.get_query_results.side_effect = [logs_response(status)]
        query = make_query("A", queryMode="Logs", expression="fields @message")

        with pytest.raises(QueryFailedError) as exc_info:
            orchestrator.execute(query, plugin_ctx, default_config)

        assert exc_info.value.status == status

    def test_attempts_exceeded_propagates(
        self, orchestrator, fake_logs_client, logs_response, make_query, plugin_ctx, default_config
    ):
        fake_logs_client.get_query_results.return_value = logs_response("Running")
        query = make_query("A", queryMode="Logs", expression="fields @message")

        with pytest.raises(PollAttemptsExceededError):
            orchestrator.execute(query, plugin_ctx, default_config)

        fake_logs_client.start_query.assert_called_once()

    def test_submission_error_propagates(self, orchestrator, fake_logs_client, make_query, plugin_ctx, default_config):
        fake_logs_client.start_query.side_effect = ClientError(
            {"Error": {"Code": "InvalidParameterException", "Message": "bad"}}, "StartQuery"
        )
        query = make_query("A", queryMode="Logs", expression="bad query")

        with pytest.raises(QuerySubmissionError):
            orchestrator.execute(query, plugin_ctx, default_config)

    def test_client_error_propagates(self, make_query, plugin_ctx):
        get_client = MagicMock(side_effect=AuthenticationError("no credentials"))
        orchestrator = AlertQueryOrchestrator(get_client, poll_interval=0)
        query = make_query("A", queryMode="Logs", expression="fields @message")

        with pytest.raises(AuthenticationError):
            orchestrator.execute(query, plugin_ctx, DataSourceConfig(region="us-east-1"))
