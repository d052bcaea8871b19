"""
Source adapters for the federal and state officials directories.

Each adapter resolves one jurisdiction to a list of canonical Officials:

    archive hit  -> parse the snapshot, no network
    archive miss -> one HTTP request -> validate -> archive raw bytes -> parse

Any fetch or parse failure is logged and degrades that source to an empty
list, so a Congress.gov outage never blocks OpenStates updates for the same
jurisdiction (and vice versa). Nothing raises past the adapter boundary
except programming errors in normalization.
"""

import logging
from datetime import date
from typing import Callable, List, Optional, Type

import requests
from pydantic import BaseModel, ValidationError

from officials_pipeline.lib.api_contracts import (
    FederalMemberList,
    Official,
    OpenStatesPeopleResponse,
)
from officials_pipeline.lib.archive_cache import ArchiveCache, ArchiveWriteError
from officials_pipeline.lib.congress_api_client import CongressAPIClient
from officials_pipeline.lib.http_client import DirectoryAPIError
from officials_pipeline.lib.official_mappers import normalize_federal, normalize_state
from officials_pipeline.lib.openstates_api_client import OpenStatesAPIClient

logger = logging.getLogger(__name__)

FETCH_ERRORS = (DirectoryAPIError, requests.exceptions.RequestException, ValidationError)

FEDERAL_CHAMBERS = ("senate", "house")


class ArchivedSource:
    """Read-through archive logic shared by both adapters."""

    def __init__(self, cache: ArchiveCache):
        self.cache = cache

    def _load(
        self,
        jurisdiction: str,
        source: str,
        run_date: date,
        download: Callable[[], bytes],
        model: Type[BaseModel],
    ) -> Optional[BaseModel]:
        """Return the validated payload for a key, or None on any failure."""
        raw = self.cache.get(jurisdiction, source, run_date)

        if raw is not None:
            logger.info(f"Using cached {source} data for {jurisdiction}")
            try:
                return model.model_validate_json(raw)
            except ValidationError as e:
                logger.error(f"Archived {source} snapshot for {jurisdiction} is unreadable: {e}")
                return None

        logger.info(f"Fetching {source} data for {jurisdiction}...")
        try:
            raw = download()
            payload = model.model_validate_json(raw)
        except FETCH_ERRORS as e:
            logger.error(f"Failed to fetch {source} data for {jurisdiction}: {e}")
            return None

        try:
            self.cache.put(jurisdiction, source, run_date, raw)
        except ArchiveWriteError as e:
            # Next run simply fetches again
            logger.warning(str(e))

        return payload


class FederalAdapter(ArchivedSource):
    """Senators and representatives from Congress.gov.

    The member list covers every state, so it is downloaded at most once per
    adapter instance and archived under each jurisdiction's senate and house
    keys as they are requested.
    """

    def __init__(self, client: CongressAPIClient, cache: ArchiveCache):
        super().__init__(cache)
        self.client = client
        self._member_list_raw: Optional[bytes] = None

    def fetch(self, jurisdiction: str, run_date: date) -> List[Official]:
        officials = []
        for chamber in FEDERAL_CHAMBERS:
            payload = self._load(
                jurisdiction, chamber, run_date, self._download_member_list, FederalMemberList
            )
            if payload is not None:
                officials.extend(normalize_federal(payload, jurisdiction, chamber=chamber))
        return officials

    def _download_member_list(self) -> bytes:
        if self._member_list_raw is None:
            raw = self.client.list_members_raw()
            FederalMemberList.model_validate_json(raw)
            self._member_list_raw = raw
        return self._member_list_raw


class StateAdapter(ArchivedSource):
    """State-level officials from OpenStates."""

    source = "openstates"

    def __init__(self, client: OpenStatesAPIClient, cache: ArchiveCache):
        super().__init__(cache)
        self.client = client

    def fetch(self, jurisdiction: str, run_date: date) -> List[Official]:
        payload = self._load(
            jurisdiction,
            self.source,
            run_date,
            lambda: self.client.search_people_raw(jurisdiction),
            OpenStatesPeopleResponse,
        )
        if payload is None:
            return []
        return normalize_state(payload, jurisdiction)
