from .admin import AdminClient
from .agile import AgileClient
from .issues import IssuesClient
from .knowledge_base import KnowledgeBaseClient
from .projects import ProjectsClient
from .work_items import WorkItemsClient

__all__ = [
    "AdminClient",
    "AgileClient",
    "IssuesClient",
    "KnowledgeBaseClient",
    "ProjectsClient",
    "WorkItemsClient",
]
