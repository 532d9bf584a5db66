"""youtrack_client package exports."""

from .client import YouTrackClient
from .config import ClientConfig, config_from_env, load_env_config
from .errors import (
    ApiError,
    BadRequestError,
    ConfigError,
    ErrorKind,
    ForbiddenError,
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
    UnreachableError,
)
from .logging import setup_logging
from .models import (
    HealthState,
    HealthStatus,
    IssueCreateInput,
    IssueUpdateInput,
    TimeReport,
)
from .paging import Page, Pager
from .query import ArticleFilter, IssueFilter, QueryBuilder, WorkItemFilter, build_query
from .transport import RequestDescriptor, RetryConfig, Transport

__version__ = "0.1.0"

__all__ = [
    # Client
    "YouTrackClient",
    "ClientConfig",
    "RetryConfig",
    "Transport",
    "RequestDescriptor",
    "config_from_env",
    "load_env_config",
    "setup_logging",
    # Exceptions
    "ApiError",
    "ErrorKind",
    "ConfigError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "UnreachableError",
    "MalformedResponseError",
    # Query / paging
    "QueryBuilder",
    "IssueFilter",
    "WorkItemFilter",
    "ArticleFilter",
    "build_query",
    "Page",
    "Pager",
    # Models
    "IssueCreateInput",
    "IssueUpdateInput",
    "HealthState",
    "HealthStatus",
    "TimeReport",
]
