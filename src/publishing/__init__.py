"""CMS publishing: job queue service and worker."""

from seo_agent.publishing.connection import make_connection_resolver  # noqa: F401
from seo_agent.publishing.jobs import PublishJobService, build_payload  # noqa: F401
from seo_agent.publishing.models import (  # noqa: F401
    CmsConnection,
    CmsSettings,
    HeroImageAsset,
    JobStatus,
    PublishJob,
)
from seo_agent.publishing.slug import slugify  # noqa: F401
from seo_agent.publishing.worker import PublishWorker  # noqa: F401
