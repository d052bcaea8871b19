#!/usr/bin/env python3
"""
Interactive Officials Pipeline

Fetches federal officials from Congress.gov and state officials from
OpenStates, then asks for one Y/n confirmation per state before queueing
change requests.

Usage:
    officials-pipeline

Configuration is read from the environment (see officials_pipeline.lib.config).
Exit code 0 on completion, 1 on missing or invalid configuration.
"""

import logging
import sys

from officials_pipeline.lib.archive_cache import ArchiveCache
from officials_pipeline.lib.checksums import ChecksumEngine
from officials_pipeline.lib.config import ConfigError, PipelineConfig, load_config
from officials_pipeline.lib.congress_api_client import CongressAPIClient
from officials_pipeline.lib.notifier import build_notifier
from officials_pipeline.lib.openstates_api_client import OpenStatesAPIClient
from officials_pipeline.lib.review import ReviewSession, TerminalConfirmer
from officials_pipeline.lib.source_adapters import FederalAdapter, StateAdapter
from officials_pipeline.lib.stores import PersistenceError, build_stores
from officials_pipeline.orchestrator import RunOrchestrator

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def build_orchestrator(config: PipelineConfig, confirmer=None) -> RunOrchestrator:
    """Wire the production collaborators for ``config``."""
    cache = ArchiveCache(config.archive_dir)
    congress = CongressAPIClient(
        api_key=config.congress_api_key,
        base_url=config.congress_api_base_url,
        timeout=config.http_timeout,
        max_attempts=config.http_max_attempts,
    )
    openstates = OpenStatesAPIClient(
        api_key=config.openstates_api_key,
        base_url=config.openstates_api_base_url,
        timeout=config.http_timeout,
        max_attempts=config.http_max_attempts,
    )
    checksum_store, sink = build_stores(config)

    return RunOrchestrator(
        sources=[FederalAdapter(congress, cache), StateAdapter(openstates, cache)],
        engine=ChecksumEngine(checksum_store),
        review=ReviewSession(confirmer or TerminalConfirmer()),
        sink=sink,
        checksum_store=checksum_store,
        notifier=build_notifier(config.alert_sns_topic_arn, config.aws_region),
    )


def main() -> int:
    configure_logging()

    try:
        config = load_config()
        logging.getLogger().setLevel(config.log_level)
        orchestrator = build_orchestrator(config)
    except (ConfigError, PersistenceError) as e:
        logger.error(f"Startup failed: {e}")
        return 1

    summary = orchestrator.run(config.jurisdictions)
    print(f"\n{summary.render()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
