"""Unit tests for upstream payload to Official normalization."""

import pytest
from pydantic import ValidationError

from officials_pipeline.lib.api_contracts import (
    FederalMemberList,
    Level,
    OfficeType,
    OpenStatesPeopleResponse,
    Party,
)
from officials_pipeline.lib.official_mappers import (
    format_member_name,
    house_office_identifier,
    normalize_federal,
    normalize_party,
    normalize_state,
    senate_office_identifier,
    state_office_identifier,
)


class TestFormatMemberName:
    def test_last_first_is_reordered(self):
        assert format_member_name("McCormick, Dave") == "Dave McCormick"

    def test_middle_initial_kept(self):
        assert format_member_name("Fitzpatrick, Brian K.") == "Brian K. Fitzpatrick"

    def test_name_without_comma_passes_through(self):
        assert format_member_name("John Fetterman") == "John Fetterman"

    def test_none_passes_through(self):
        assert format_member_name(None) is None


class TestNormalizeParty:
    @pytest.mark.parametrize("raw,expected", [
        ("Republican", Party.REPUBLICAN),
        ("REPUBLICAN PARTY", Party.REPUBLICAN),
        ("Democratic", Party.DEMOCRATIC),
        ("democrat", Party.DEMOCRATIC),
        ("Democratic-Farmer-Labor", Party.DEMOCRATIC),
        ("Independent", Party.INDEPENDENT),
        ("Libertarian", Party.UNKNOWN),
        ("", Party.UNKNOWN),
        (None, Party.UNKNOWN),
    ])
    def test_closed_party_set(self, raw, expected):
        assert normalize_party(raw) == expected


class TestOfficeIdentifiers:
    def test_senate_identifier_ignores_person(self):
        assert senate_office_identifier("PA") == "U.S. Senator—PA"

    def test_house_identifier_includes_district(self):
        assert house_office_identifier("PA", "1") == "U.S. House—PA-1"

    def test_state_identifier_without_district(self):
        assert state_office_identifier("Governor", "PA", None) == "Governor—PA"

    def test_state_identifier_with_district(self):
        assert state_office_identifier("Senator", "PA", "12") == "Senator—PA-12"


class TestNormalizeFederal:
    def test_pa_senators(self, pa_senators_payload):
        payload = FederalMemberList.model_validate(pa_senators_payload)

        officials = normalize_federal(payload, "PA", chamber="senate")

        assert [o.name for o in officials] == ["Dave McCormick", "John Fetterman"]
        mccormick = officials[0]
        assert mccormick.external_id == "M001243"
        assert mccormick.party == Party.REPUBLICAN
        assert mccormick.office == "U.S. Senator"
        assert mccormick.office_identifier == "U.S. Senator—PA"
        assert mccormick.level == Level.FEDERAL
        assert mccormick.office_type == OfficeType.LEGISLATIVE
        assert mccormick.start_date == "2025"
        assert mccormick.district is None

    def test_house_member(self, federal_payload):
        payload = FederalMemberList.model_validate(federal_payload)

        officials = normalize_federal(payload, "PA", chamber="house")

        assert len(officials) == 1
        assert officials[0].office == "U.S. Representative"
        assert officials[0].district == "1"
        assert officials[0].office_identifier == "U.S. House—PA-1"

    def test_house_member_without_district_is_at_large(self, federal_payload):
        payload = FederalMemberList.model_validate(federal_payload)

        officials = normalize_federal(payload, "SD")

        assert officials[0].district == "At-Large"
        assert officials[0].office_identifier == "U.S. House—SD-At-Large"

    @pytest.mark.parametrize("district", [0, "0", ""])
    def test_house_district_zero_is_at_large(self, district):
        payload = FederalMemberList.model_validate({"members": [{
            "bioguideId": "H001096",
            "name": "Hageman, Harriet M.",
            "partyName": "Republican",
            "state": "Wyoming",
            "terms": {"item": [{
                "chamber": "House of Representatives",
                "startYear": 2023,
                "stateCode": "WY",
                "district": district,
            }]},
        }]})

        officials = normalize_federal(payload, "WY")

        assert officials[0].district == "At-Large"
        assert officials[0].office_identifier == "U.S. House—WY-At-Large"

    def test_filters_other_jurisdictions(self, federal_payload):
        payload = FederalMemberList.model_validate(federal_payload)

        officials = normalize_federal(payload, "NJ")

        assert [o.external_id for o in officials] == ["B001288"]

    def test_both_chambers_when_unfiltered(self, federal_payload):
        payload = FederalMemberList.model_validate(federal_payload)

        officials = normalize_federal(payload, "PA")

        assert {o.external_id for o in officials} == {"M001243", "F000479", "F000466"}

    def test_only_last_term_is_current(self):
        payload = FederalMemberList.model_validate({"members": [{
            "bioguideId": "X000001",
            "name": "Mover, Sam",
            "partyName": "Independent",
            "state": "Ohio",
            "terms": {"item": [
                {"chamber": "House of Representatives", "startYear": 2015, "stateCode": "OH", "district": 3},
                {"chamber": "Senate", "startYear": 2021, "stateCode": "OH"},
            ]},
        }]})

        assert normalize_federal(payload, "OH", chamber="house") == []
        senators = normalize_federal(payload, "OH", chamber="senate")
        assert senators[0].start_date == "2021"
        assert senators[0].office_identifier == "U.S. Senator—OH"

    def test_state_name_used_when_term_lacks_code(self):
        payload = FederalMemberList.model_validate({"members": [{
            "bioguideId": "X000002",
            "name": "Plain, Pat",
            "partyName": "Republican",
            "state": "Texas",
            "terms": {"item": [{"chamber": "Senate", "startYear": 2019}]},
        }]})

        assert len(normalize_federal(payload, "TX")) == 1

    def test_member_without_terms_is_skipped(self):
        payload = FederalMemberList.model_validate({"members": [{
            "bioguideId": "X000003", "name": "Gone, Al", "state": "Ohio",
        }]})

        assert normalize_federal(payload, "OH") == []

    def test_same_person_new_seat_changes_identifier(self, pa_senators_payload):
        house = dict(pa_senators_payload["members"][0])
        house["terms"] = {"item": [
            {"chamber": "House of Representatives", "startYear": 2025, "stateCode": "PA", "district": 7},
        ]}
        senate = FederalMemberList.model_validate(pa_senators_payload)
        moved = FederalMemberList.model_validate({"members": [house]})

        before = normalize_federal(senate, "PA")[0]
        after = normalize_federal(moved, "PA")[0]

        assert before.external_id == after.external_id
        assert before.office_identifier != after.office_identifier


class TestNormalizeState:
    def test_maps_people_with_current_role(self, openstates_payload):
        payload = OpenStatesPeopleResponse.model_validate(openstates_payload)

        officials = normalize_state(payload, "PA")

        assert [o.external_id for o in officials] == ["ocd-person/0001", "ocd-person/0002"]

        rep = officials[0]
        assert rep.name == "Joanna McClinton"
        assert rep.party == Party.DEMOCRATIC
        assert rep.level == Level.STATE
        assert rep.office_type == OfficeType.LEGISLATIVE
        assert rep.office_identifier == "Representative—PA-191"
        assert rep.start_date == "2015-06-01"
        assert rep.email == "jmcclinton@pahouse.net"
        assert rep.website == "https://www.pahouse.com/mcclinton"

    def test_executive_role_and_string_party(self, openstates_payload):
        payload = OpenStatesPeopleResponse.model_validate(openstates_payload)

        governor = normalize_state(payload, "PA")[1]

        assert governor.office_type == OfficeType.EXECUTIVE
        assert governor.party == Party.DEMOCRATIC
        assert governor.office_identifier == "Governor—PA"
        assert governor.district is None

    def test_unknown_party_degrades(self):
        payload = OpenStatesPeopleResponse.model_validate({"results": [{
            "id": "ocd-person/0009",
            "name": "Green Member",
            "party": [{"name": "Green"}],
            "current_role": {"title": "Senator", "type": "upper", "district": 4},
        }]})

        official = normalize_state(payload, "ME")[0]

        assert official.party == Party.UNKNOWN
        assert official.district == "4"


class TestPayloadValidation:
    def test_federal_payload_requires_members(self):
        with pytest.raises(ValidationError):
            FederalMemberList.model_validate_json(b'{"error": "bad key"}')

    def test_state_payload_rejects_malformed_json(self):
        with pytest.raises(ValidationError):
            OpenStatesPeopleResponse.model_validate_json(b"<html>oops</html>")
