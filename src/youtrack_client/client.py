import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from .config import (
    DEFAULT_TIMEOUT_SECONDS,
    ClientConfig,
    config_from_env,
    log_level_from_env,
)
from .domains import (
    AdminClient,
    AgileClient,
    IssuesClient,
    KnowledgeBaseClient,
    ProjectsClient,
    WorkItemsClient,
)
from .errors import ApiError, UnreachableError
from .logging import setup_logging
from .models import HealthState, HealthStatus
from .observability import log_event
from .transport import RetryConfig, Transport

HEALTH_PATH = "/api/users/me"


class YouTrackClient:
    """
    Entry point for the YouTrack REST API.
    - One Transport shared by every domain client
    - Construction validates config and performs no I/O
    - Use as an async context manager, or call aclose() when done
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        retry: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self._config = ClientConfig(
            base_url=base_url, token=token, timeout_seconds=timeout_seconds
        )
        self.log = logger or logging.getLogger("youtrack_client")
        self.transport = Transport(
            self._config,
            retry=retry,
            logger=logger,
            http=http,
        )

        self.issues = IssuesClient(self.transport)
        self.projects = ProjectsClient(self.transport)
        self.agile = AgileClient(self.transport)
        self.work_items = WorkItemsClient(self.transport)
        self.admin = AdminClient(self.transport)
        self.knowledge_base = KnowledgeBaseClient(self.transport)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        retry: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ) -> "YouTrackClient":
        return cls(
            base_url=config.base_url,
            token=config.token,
            timeout_seconds=config.timeout_seconds,
            retry=retry,
            logger=logger,
            http=http,
        )

    @classmethod
    def from_env(
        cls,
        *,
        use_dotenv: bool = True,
        retry: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "YouTrackClient":
        """
        Build a client from YOUTRACK_URL / YOUTRACK_TOKEN / YOUTRACK_TIMEOUT.
        YOUTRACK_LOG_LEVEL, when set, turns on logfmt output for the package logger.
        """
        config = config_from_env(use_dotenv=use_dotenv)
        level = log_level_from_env()
        if level:
            setup_logging(level)
        return cls.from_config(config, retry=retry, logger=logger)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def get_health(self) -> HealthStatus:
        """
        Check the server with the current token.
        Never raises ApiError: failures are reported as degraded or unreachable.
        """
        detail: Optional[str] = None
        try:
            await self.transport.get(
                HEALTH_PATH, params={"fields": "id"}, operation="health"
            )
            state = HealthState.OK
        except UnreachableError as exc:
            state = HealthState.UNREACHABLE
            detail = str(exc)
        except ApiError as exc:
            state = HealthState.DEGRADED
            detail = str(exc)

        log_event(
            "health_check",
            self.log,
            level=logging.INFO if state is HealthState.OK else logging.WARNING,
            operation="health",
            endpoint=HEALTH_PATH,
            status=state.value,
        )
        return HealthStatus(
            status=state,
            base_url=self._config.base_url,
            last_checked_at=datetime.now(timezone.utc),
            detail=detail,
        )

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "YouTrackClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["YouTrackClient", "HEALTH_PATH"]
