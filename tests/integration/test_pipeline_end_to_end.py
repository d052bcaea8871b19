"""
End-to-end pipeline run for Pennsylvania with mocked upstream APIs.

Real clients, adapters, archive and checksum engine; only requests.get is
patched. Stores are in memory.
"""

from unittest.mock import patch

import pytest

from conftest import http_response
from officials_pipeline.lib.archive_cache import ArchiveCache
from officials_pipeline.lib.checksums import ChecksumEngine
from officials_pipeline.lib.congress_api_client import CongressAPIClient
from officials_pipeline.lib.openstates_api_client import OpenStatesAPIClient
from officials_pipeline.lib.review import ReviewSession, ScriptedConfirmer
from officials_pipeline.lib.source_adapters import FederalAdapter, StateAdapter
from officials_pipeline.lib.stores import InMemoryChangeRequestSink, InMemoryChecksumStore
from officials_pipeline.orchestrator import RunOrchestrator


@pytest.fixture
def fake_get(pa_senators_payload):
    def respond(url, params=None, timeout=None):
        if url.endswith("/member"):
            return http_response(pa_senators_payload)
        return http_response({"results": [], "pagination": {"page": 1}})

    with patch("officials_pipeline.lib.http_client.requests.get", side_effect=respond) as mock_get:
        yield mock_get


@pytest.fixture
def stores():
    return InMemoryChecksumStore(), InMemoryChangeRequestSink()


def build_orchestrator(tmp_path, stores, confirmer, run_date):
    checksum_store, sink = stores
    cache = ArchiveCache(tmp_path / "archives")
    congress = CongressAPIClient(api_key="congress-key")
    openstates = OpenStatesAPIClient(api_key="openstates-key")
    return RunOrchestrator(
        sources=[FederalAdapter(congress, cache), StateAdapter(openstates, cache)],
        engine=ChecksumEngine(checksum_store),
        review=ReviewSession(confirmer),
        sink=sink,
        checksum_store=checksum_store,
        run_date=run_date,
    )


class TestPennsylvaniaRun:
    def test_first_run_creates_change_requests(self, tmp_path, stores, fake_get, run_date):
        confirmer = ScriptedConfirmer(True)
        checksum_store, sink = stores

        summary = build_orchestrator(tmp_path, stores, confirmer, run_date).run(["PA"])

        batch = confirmer.seen[0]
        assert [d.is_new for d in batch.diffs] == [True, True]
        assert {d.external_id for d in batch.diffs} == {"M001243", "F000479"}
        assert {r.external_id for r in sink.requests} == {"M001243", "F000479"}
        assert all(r.status == "pending" for r in sink.requests)
        assert set(checksum_store.records) == {"M001243", "F000479"}
        assert summary.change_requests_created == 2

        offices = {r.payload["new_official"]["office_identifier"] for r in sink.requests}
        assert offices == {"U.S. Senator—PA"}

        archive_dir = tmp_path / "archives" / run_date.isoformat()
        assert sorted(p.name for p in archive_dir.iterdir()) == [
            "PA-house.json", "PA-openstates.json", "PA-senate.json",
        ]
        # one member list download, one OpenStates call
        assert fake_get.call_count == 2

    def test_second_run_is_idempotent(self, tmp_path, stores, fake_get, run_date):
        build_orchestrator(tmp_path, stores, ScriptedConfirmer(True), run_date).run(["PA"])
        fake_get.reset_mock()
        confirmer = ScriptedConfirmer(True)

        summary = build_orchestrator(tmp_path, stores, confirmer, run_date).run(["PA"])

        assert fake_get.call_count == 0
        assert confirmer.seen == []
        assert summary.change_requests_created == 0
        assert len(stores[1].requests) == 2

    def test_rejected_run_leaves_stores_untouched(self, tmp_path, stores, fake_get, run_date):
        checksum_store, sink = stores

        summary = build_orchestrator(tmp_path, stores, ScriptedConfirmer(False), run_date).run(["PA"])

        assert sink.requests == []
        assert checksum_store.records == {}
        assert summary.jurisdictions_rejected == ["PA"]
