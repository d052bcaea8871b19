"""Shared pytest fixtures for officials pipeline tests."""

import json
from datetime import date
from unittest.mock import Mock

import pytest

from officials_pipeline.lib.archive_cache import ArchiveCache

RUN_DATE = date(2025, 3, 1)


def make_member(bioguide_id, name, party, state, chamber, start_year, state_code, district=None):
    term = {"chamber": chamber, "startYear": start_year, "stateCode": state_code}
    if district is not None:
        term["district"] = district
    return {
        "bioguideId": bioguide_id,
        "name": name,
        "partyName": party,
        "state": state,
        "url": f"https://api.congress.gov/v3/member/{bioguide_id}",
        "terms": {"item": [term]},
    }


@pytest.fixture
def run_date():
    return RUN_DATE


@pytest.fixture
def pa_senators_payload():
    """Congress.gov /member response holding the two Pennsylvania senators."""
    return {
        "members": [
            make_member("M001243", "McCormick, Dave", "Republican", "Pennsylvania", "Senate", 2025, "PA"),
            make_member("F000479", "Fetterman, John", "Democratic", "Pennsylvania", "Senate", 2023, "PA"),
        ],
        "pagination": {"count": 2},
    }


@pytest.fixture
def federal_payload(pa_senators_payload):
    """Member list spanning several states and both chambers."""
    members = list(pa_senators_payload["members"])
    members.append(make_member(
        "F000466", "Fitzpatrick, Brian K.", "Republican", "Pennsylvania",
        "House of Representatives", 2017, "PA", district=1,
    ))
    members.append(make_member(
        "B001288", "Booker, Cory A.", "Democratic", "New Jersey", "Senate", 2013, "NJ",
    ))
    members.append({
        "bioguideId": "J000294",
        "name": "Johnson, Dusty",
        "partyName": "Republican",
        "state": "South Dakota",
        "terms": {"item": [
            {"chamber": "House of Representatives", "startYear": 2019, "stateCode": "SD"},
        ]},
    })
    return {"members": members, "pagination": {"count": len(members)}}


@pytest.fixture
def openstates_payload():
    """OpenStates /people response for Pennsylvania."""
    return {
        "results": [
            {
                "id": "ocd-person/0001",
                "name": "Joanna McClinton",
                "party": [{"name": "Democratic"}],
                "current_role": {
                    "title": "Representative",
                    "type": "lower",
                    "district": "191",
                    "start_date": "2015-06-01",
                },
                "email": "jmcclinton@pahouse.net",
                "links": [{"url": "https://www.pahouse.com/mcclinton"}],
            },
            {
                "id": "ocd-person/0002",
                "name": "Josh Shapiro",
                "party": "Democratic",
                "current_role": {"title": "Governor", "type": "governor", "start_date": "2023-01-17"},
            },
            {
                "id": "ocd-person/0003",
                "name": "Retired Member",
                "party": [{"name": "Republican"}],
                "current_role": None,
            },
        ],
        "pagination": {"page": 1},
    }


@pytest.fixture
def archive(tmp_path):
    return ArchiveCache(tmp_path / "archives")


def json_bytes(payload):
    return json.dumps(payload).encode("utf-8")


def http_response(payload=None, status_code=200, content=None):
    """Mock requests.Response carrying a JSON body."""
    response = Mock()
    response.status_code = status_code
    response.content = content if content is not None else json_bytes(payload)
    response.raise_for_status.return_value = None
    return response
