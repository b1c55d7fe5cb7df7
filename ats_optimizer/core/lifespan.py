import logging
from contextlib import asynccontextmanager

from ats_optimizer.core.config.scoring import get_scoring_config
from ats_optimizer.services.rewrite_oracle import oracle_enabled
from ats_optimizer.taxonomy import get_default_taxonomy_provider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    _ = app
    provider = get_default_taxonomy_provider()
    config = get_scoring_config()
    logger.info(
        "optimizer_startup categories=%s scoring_version=%s oracle_enabled=%s",
        len(provider.category_order()),
        config.get("version"),
        oracle_enabled(),
    )
    yield
    logger.info("optimizer_shutdown")
