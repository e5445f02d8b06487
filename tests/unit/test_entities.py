"""Unit tests for domain entities and value objects."""

import pytest

from contentgov.domain.entities import ContentRef, Grant, Grantee, ensure_unique_capabilities, find_grant
from contentgov.domain.value_objects import (
    Capability,
    CapabilityGrant,
    CapabilityMode,
    ContentType,
    GranteeType,
)


def test_capability_grant_coerces_strings() -> None:
    item = CapabilityGrant("Read", "Deny")
    assert item.capability is Capability.READ
    assert item.mode is CapabilityMode.DENY
    assert item.to_dict() == {"capability": "Read", "mode": "Deny"}


def test_capability_grant_rejects_unknown_name() -> None:
    with pytest.raises(ValueError):
        CapabilityGrant("Teleport")


def test_grantee_identity_ignores_name() -> None:
    plain = Grantee(GranteeType.USER, "user-9")
    named = plain.with_name("Ann")
    assert plain == named
    assert hash(plain) == hash(named)
    assert named.name == "Ann"
    assert Grantee("group", "user-9") != plain


def test_content_ref_identity_ignores_name() -> None:
    assert ContentRef("workbook", "wb-1") == ContentRef(ContentType.WORKBOOK, "wb-1", "Sales")
    assert ContentRef("workbook", "wb-1") != ContentRef("view", "wb-1")


def test_grant_rejects_allow_and_deny_for_same_capability() -> None:
    with pytest.raises(ValueError, match="Read"):
        Grant(
            grantee=Grantee("user", "u"),
            capabilities=frozenset(
                {CapabilityGrant("Read", "Allow"), CapabilityGrant("Read", "Deny")}
            ),
        )


def test_ensure_unique_collapses_exact_duplicates() -> None:
    result = ensure_unique_capabilities([CapabilityGrant("Read"), CapabilityGrant("Read")])
    assert result == frozenset({CapabilityGrant("Read")})


def test_grant_helpers() -> None:
    grant = Grant(
        grantee=Grantee("user", "u"),
        capabilities=frozenset(
            {
                CapabilityGrant("Write"),
                CapabilityGrant("Read"),
                CapabilityGrant("Delete", "Deny"),
            }
        ),
    )
    assert grant.capability_names == {Capability.READ, Capability.WRITE, Capability.DELETE}
    assert grant.mode_of(Capability.DELETE) == CapabilityMode.DENY
    assert grant.mode_of(Capability.FILTER) is None
    assert grant.with_mode(CapabilityMode.ALLOW) == [Capability.READ, Capability.WRITE]
    restricted = grant.restricted_to({Capability.READ, Capability.DELETE})
    assert restricted.capability_names == {Capability.READ, Capability.DELETE}
    assert grant.to_dict()["capabilities"][0] == {"capability": "Delete", "mode": "Deny"}


def test_find_grant_matches_on_identity() -> None:
    grant = Grant(grantee=Grantee("user", "u", "Ann"), capabilities=frozenset({CapabilityGrant("Read")}))
    assert find_grant([grant], Grantee("user", "u")) is grant
    assert find_grant([grant], Grantee("group", "u")) is None
