"""
API Contracts for the Officials Sync Pipeline.

Typed schemas for the two upstream directory payloads (Congress.gov member
list, OpenStates people search) and the canonical ``Official`` record every
source is normalized into. Validating raw responses against these models is
what turns a schema mismatch into a per-source failure instead of a crash
deep inside normalization.

Usage:
    from officials_pipeline.lib.api_contracts import FederalMemberList

    payload = FederalMemberList.model_validate_json(raw_bytes)
    for member in payload.members:
        print(member.bioguideId, member.current_term())
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Canonical Enums
# ============================================================================


class Party(str, Enum):
    """Normalized political party"""

    REPUBLICAN = "Republican"
    DEMOCRATIC = "Democratic"
    INDEPENDENT = "Independent"
    UNKNOWN = "Unknown"


class Level(str, Enum):
    """Level of government"""

    FEDERAL = "federal"
    STATE = "state"


class OfficeType(str, Enum):
    """Branch of government the office belongs to"""

    EXECUTIVE = "executive"
    LEGISLATIVE = "legislative"
    JUDICIAL = "judicial"


# ============================================================================
# Congress.gov /member
# ============================================================================


class FederalTerm(BaseModel):
    """One entry of a member's ``terms.item`` service history."""

    chamber: Optional[str] = None
    startYear: Optional[int] = None
    endYear: Optional[int] = None
    district: Optional[Union[int, str]] = None
    stateCode: Optional[str] = None


class FederalTerms(BaseModel):
    item: List[FederalTerm] = Field(default_factory=list)


class FederalMember(BaseModel):
    """Member summary as returned by the /member list endpoint."""

    bioguideId: str
    name: Optional[str] = None
    partyName: Optional[str] = None
    state: Optional[str] = None
    district: Optional[Union[int, str]] = None
    url: Optional[str] = None
    terms: FederalTerms = Field(default_factory=FederalTerms)

    def current_term(self) -> Optional[FederalTerm]:
        """Last entry of the terms history; gaps in service are not handled."""
        if not self.terms.item:
            return None
        return self.terms.item[-1]


class FederalMemberList(BaseModel):
    """Schema for /member list endpoint response."""

    members: List[FederalMember]


# ============================================================================
# OpenStates /people
# ============================================================================


class OpenStatesParty(BaseModel):
    name: Optional[str] = None


class OpenStatesLink(BaseModel):
    url: Optional[str] = None


class OpenStatesRole(BaseModel):
    """The ``current_role`` block of an OpenStates person."""

    title: Optional[str] = None
    type: Optional[str] = None
    district: Optional[Union[int, str]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    party: Optional[str] = None


class OpenStatesPerson(BaseModel):
    id: str
    name: str
    # v3 returns a plain string; older exports return [{"name": ...}]
    party: Optional[Union[str, List[OpenStatesParty]]] = None
    current_role: Optional[OpenStatesRole] = None
    email: Optional[str] = None
    links: List[OpenStatesLink] = Field(default_factory=list)

    def party_name(self) -> Optional[str]:
        if isinstance(self.party, str):
            return self.party
        if self.party and self.party[0].name:
            return self.party[0].name
        if self.current_role:
            return self.current_role.party
        return None


class OpenStatesPeopleResponse(BaseModel):
    """Schema for /people search response."""

    results: List[OpenStatesPerson]


# ============================================================================
# Canonical record
# ============================================================================


class Official(BaseModel):
    """An officeholder normalized from either directory.

    ``external_id`` identifies the person (source-scoped: bioguide ID or
    OpenStates person ID). ``office_identifier`` identifies the seat and is
    derived only from office title, state and district.
    """

    external_id: str
    office_identifier: str
    name: str
    party: Party = Party.UNKNOWN
    office: str
    state: str
    level: Level
    office_type: OfficeType
    district: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    url: Optional[str] = None

    model_config = ConfigDict(frozen=True)
