import io
import logging

import httpx
import pytest
import respx
from httpx import Response
from youtrack_client import YouTrackClient
from youtrack_client.errors import UnreachableError
from youtrack_client.logging import LogfmtFormatter, setup_logging
from youtrack_client.observability import log_event
from youtrack_client.transport import RetryConfig


def test_log_event_puts_fields_in_extra(caplog):
    caplog.set_level(logging.INFO, logger="youtrack_client.observability")

    log_event("api_call", operation="issues.get_issue", name="clobbered")

    record = next(r for r in caplog.records if r.getMessage() == "api_call")
    assert record.event == "api_call"
    assert record.operation == "issues.get_issue"
    # reserved LogRecord attributes are dropped, not overwritten
    assert record.name == "youtrack_client.observability"


def test_logfmt_formatter_renders_known_extras():
    record = logging.LogRecord(
        name="youtrack_client.transport",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="api_retry",
        args=(),
        exc_info=None,
    )
    record.operation = "issues.query_issues"
    record.endpoint = "/api/issues"
    record.status = 429
    record.delay_s = 0.2
    record.ignored = "not rendered"

    line = LogfmtFormatter().format(record)

    assert line == (
        "level=warning logger=youtrack_client.transport event=api_retry "
        "operation=issues.query_issues endpoint=/api/issues status=429 delay_s=0.2"
    )


def test_logfmt_formatter_quotes_values_with_spaces():
    assert LogfmtFormatter._fmt_val("a b") == '"a b"'
    assert LogfmtFormatter._fmt_val("k=v") == '"k=v"'
    assert LogfmtFormatter._fmt_val(True) == "True"


def test_setup_logging_scopes_to_package_logger():
    root = logging.getLogger()
    logger = logging.getLogger("youtrack_client")
    saved_root = list(root.handlers)
    saved_handlers, saved_level = list(logger.handlers), logger.level
    app_handler = logging.NullHandler()
    logger.addHandler(app_handler)
    stream = io.StringIO()
    try:
        setup_logging("debug", stream=stream)
        setup_logging("debug", stream=stream)

        ours = [h for h in logger.handlers if h is not app_handler]
        assert len(ours) == 1
        assert isinstance(ours[0].formatter, LogfmtFormatter)
        assert app_handler in logger.handlers
        assert logger.level == logging.DEBUG
        assert root.handlers == saved_root

        logging.getLogger("youtrack_client.transport").debug(
            "api_call", extra={"status": 200}
        )
        assert stream.getvalue() == (
            "level=debug logger=youtrack_client.transport event=api_call status=200\n"
        )
    finally:
        logger.handlers[:] = saved_handlers
        logger.setLevel(saved_level)


def test_from_env_log_level_installs_handler(monkeypatch):
    logger = logging.getLogger("youtrack_client")
    saved_handlers, saved_level = list(logger.handlers), logger.level
    monkeypatch.setenv("YOUTRACK_URL", "https://env.example.com")
    monkeypatch.setenv("YOUTRACK_TOKEN", "perm:env")
    monkeypatch.setenv("YOUTRACK_LOG_LEVEL", "warning")
    try:
        YouTrackClient.from_env(use_dotenv=False)

        assert logger.level == logging.WARNING
        assert any(isinstance(h.formatter, LogfmtFormatter) for h in logger.handlers)
    finally:
        logger.handlers[:] = saved_handlers
        logger.setLevel(saved_level)


@pytest.mark.asyncio
@respx.mock
async def test_transport_logs_each_attempt(caplog):
    caplog.set_level(logging.DEBUG, logger="youtrack_client.transport")
    respx.get("https://yt.example.com/api/issues").mock(
        side_effect=[Response(503), Response(200, json=[])]
    )

    async with YouTrackClient(
        base_url="https://yt.example.com",
        token="t",
        retry=RetryConfig(backoff_base_seconds=0.01),
    ) as client:
        await client.issues.query_issues().to_list()

    calls = [r for r in caplog.records if r.getMessage() == "api_call"]
    retries = [r for r in caplog.records if r.getMessage() == "api_retry"]
    assert [r.status for r in calls] == [503, 200]
    assert [r.attempt for r in calls] == [0, 1]
    assert calls[0].operation == "issues.query_issues"
    assert calls[0].endpoint == "/api/issues"
    assert len(retries) == 1
    assert retries[0].levelno == logging.WARNING
    assert retries[0].error_type == "ServerError"


@pytest.mark.asyncio
@respx.mock
async def test_transport_logs_network_exception(caplog):
    caplog.set_level(logging.DEBUG, logger="youtrack_client.transport")
    respx.get("https://yt.example.com/api/users/me").mock(
        side_effect=httpx.ConnectTimeout("boom")
    )

    async with YouTrackClient(
        base_url="https://yt.example.com",
        token="t",
        retry=RetryConfig(max_retries=0),
    ) as client:
        with pytest.raises(UnreachableError):
            await client.admin.get_current_user()

    record = next(r for r in caplog.records if r.getMessage() == "api_call")
    assert record.status == "exception"
    assert record.error_type == "ConnectTimeout"
