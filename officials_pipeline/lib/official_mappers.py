"""Schema mappers for upstream directory payloads to canonical Officials.

Transforms validated Congress.gov and OpenStates responses into the single
``Official`` shape the checksum engine works on. Everything here is pure:
no network, no disk, no swallowed exceptions.

Example:
    from officials_pipeline.lib.official_mappers import normalize_federal

    payload = FederalMemberList.model_validate_json(raw)
    senators = normalize_federal(payload, "PA", chamber="senate")
"""

import logging
from typing import Any, List, Optional

from officials_pipeline.lib.api_contracts import (
    FederalMember,
    FederalMemberList,
    Level,
    Official,
    OfficeType,
    OpenStatesPeopleResponse,
    OpenStatesPerson,
    Party,
)
from officials_pipeline.lib.reference_data import to_state_code

logger = logging.getLogger(__name__)

SENATE_OFFICE = "U.S. Senator"
HOUSE_OFFICE = "U.S. Representative"
AT_LARGE = "At-Large"

LEGISLATIVE_ROLE_TYPES = ("upper", "lower", "legislature")
JUDICIAL_ROLE_TYPES = ("judicial", "judge", "justice", "chief_justice")


def format_member_name(name: Optional[str]) -> Optional[str]:
    """Convert ``"Last, First"`` to ``"First Last"``.

    >>> format_member_name("McCormick, Dave")
    'Dave McCormick'
    >>> format_member_name("John Fetterman")
    'John Fetterman'
    """
    if name and "," in name:
        parts = [part.strip() for part in name.split(",")]
        if len(parts) >= 2:
            return f"{parts[1]} {parts[0]}"
    return name


def normalize_party(party: Optional[str]) -> Party:
    """Map a free-form party label onto the closed ``Party`` set.

    Never raises; anything unrecognized becomes ``Party.UNKNOWN``.
    """
    if not party:
        return Party.UNKNOWN

    normalized = str(party).lower()
    if "republican" in normalized:
        return Party.REPUBLICAN
    if "democratic" in normalized or "democrat" in normalized:
        return Party.DEMOCRATIC
    if "independent" in normalized:
        return Party.INDEPENDENT
    return Party.UNKNOWN


def senate_office_identifier(state: str) -> str:
    return f"{SENATE_OFFICE}—{state}"


def house_office_identifier(state: str, district: str) -> str:
    return f"U.S. House—{state}-{district}"


def state_office_identifier(title: str, state: str, district: Optional[str]) -> str:
    suffix = f"-{district}" if district else ""
    return f"{title}—{state}{suffix}"


# =============================================================================
# Federal (Congress.gov)
# =============================================================================


def normalize_federal(
    payload: FederalMemberList, jurisdiction: str, chamber: Optional[str] = None
) -> List[Official]:
    """Map a Congress.gov member list to Officials for one jurisdiction.

    Args:
        payload: Validated /member response
        jurisdiction: Two-letter state code (e.g. "PA")
        chamber: "senate" or "house" to restrict the result, None for both

    Returns:
        Officials whose current (last) term is in this jurisdiction
    """
    officials = []

    for member in payload.members:
        if not _in_jurisdiction(member, jurisdiction):
            continue

        term = member.current_term()
        member_chamber = _normalize_chamber(term.chamber if term else None)
        if member_chamber not in ("senate", "house"):
            continue
        if chamber and member_chamber != chamber:
            continue

        start_date = _safe_str(term.startYear)
        end_date = _safe_str(term.endYear)
        common = {
            "external_id": member.bioguideId,
            "name": format_member_name(member.name) or member.bioguideId,
            "party": normalize_party(member.partyName),
            "state": jurisdiction,
            "level": Level.FEDERAL,
            "office_type": OfficeType.LEGISLATIVE,
            "start_date": start_date,
            "end_date": end_date,
            "url": member.url,
        }

        if member_chamber == "senate":
            officials.append(Official(
                office=SENATE_OFFICE,
                office_identifier=senate_office_identifier(jurisdiction),
                **common,
            ))
        else:
            district = _district_str(term.district) or _district_str(member.district) or AT_LARGE
            officials.append(Official(
                office=HOUSE_OFFICE,
                office_identifier=house_office_identifier(jurisdiction, district),
                district=district,
                **common,
            ))

    return officials


def _in_jurisdiction(member: FederalMember, jurisdiction: str) -> bool:
    term = member.current_term()
    if term and term.stateCode:
        return term.stateCode.upper() == jurisdiction
    return to_state_code(member.state) == jurisdiction


# =============================================================================
# State (OpenStates)
# =============================================================================


def normalize_state(payload: OpenStatesPeopleResponse, jurisdiction: str) -> List[Official]:
    """Map an OpenStates people response to Officials.

    People without a ``current_role`` are skipped.
    """
    officials = []

    for person in payload.results:
        official = _map_state_person(person, jurisdiction)
        if official is not None:
            officials.append(official)

    return officials


def _map_state_person(person: OpenStatesPerson, jurisdiction: str) -> Optional[Official]:
    role = person.current_role
    if role is None:
        return None

    title = role.title or "Unknown Office"
    district = _safe_str(role.district)
    website = person.links[0].url if person.links else None

    return Official(
        external_id=person.id,
        office_identifier=state_office_identifier(title, jurisdiction, district),
        name=person.name,
        party=normalize_party(person.party_name()),
        office=title,
        state=jurisdiction,
        level=Level.STATE,
        office_type=_classify_role_type(role.type),
        district=district,
        start_date=role.start_date,
        end_date=role.end_date,
        email=person.email,
        website=website,
    )


# =============================================================================
# Helper Functions
# =============================================================================


def _classify_role_type(role_type: Optional[str]) -> OfficeType:
    role_type = (role_type or "").strip().lower()
    if role_type in LEGISLATIVE_ROLE_TYPES:
        return OfficeType.LEGISLATIVE
    if role_type in JUDICIAL_ROLE_TYPES:
        return OfficeType.JUDICIAL
    return OfficeType.EXECUTIVE


def _normalize_chamber(chamber: Optional[str]) -> str:
    """Normalize chamber name to lowercase."""
    if not chamber:
        return "unknown"

    chamber = str(chamber).strip().lower()

    if "house" in chamber:
        return "house"
    elif "senate" in chamber:
        return "senate"
    else:
        return chamber


def _safe_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _district_str(value: Any) -> Optional[str]:
    # Congress.gov reports at-large seats as district 0
    district = _safe_str(value)
    if district is None or district.lstrip("0") == "":
        return None
    return district
