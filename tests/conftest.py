"""Pytest fixtures for contentgov tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Collection
from contextlib import asynccontextmanager

import pytest

from contentgov.domain.entities import ContentRef, Grant, Grantee
from contentgov.domain.exceptions import (
    ContentNotFound,
    GranteeNotFound,
    RepositoryError,
)
from contentgov.domain.value_objects import (
    Capability,
    CapabilityGrant,
    ContentType,
    GranteeType,
)

SITE_ID = "site-1"


# --- Fake repository ---


class FakeContentRepository:
    """In-memory content repository for one site.

    Grants are stored per content item as ``{grantee: {capability: grant}}``;
    applying a capability the grantee already holds overwrites its mode.
    """

    def __init__(self, site_id: str = SITE_ID) -> None:
        self.site_id = site_id
        self._content: dict[tuple[ContentType, str], str] = {}
        self._grants: dict[tuple[ContentType, str], dict[Grantee, dict[Capability, CapabilityGrant]]] = {}
        self._names: dict[tuple[GranteeType, str], str] = {}
        self.fail_apply_for: set[str] = set()
        self.fail_apply_pairs: set[CapabilityGrant] = set()
        self.resolve_errors: set[str] = set()
        self.calls: list[tuple] = []

    # --- seeding ---

    def add_content(self, content_type: ContentType | str, content_id: str, name: str = "") -> None:
        key = (ContentType(content_type), content_id)
        self._content[key] = name or content_id
        self._grants.setdefault(key, {})

    def add_user(self, user_id: str, name: str = "") -> None:
        self._names[(GranteeType.USER, user_id)] = name or user_id

    def add_group(self, group_id: str, name: str = "") -> None:
        self._names[(GranteeType.GROUP, group_id)] = name or group_id

    def set_grant(
        self,
        content_type: ContentType | str,
        content_id: str,
        grantee: Grantee,
        capabilities: Collection[CapabilityGrant],
    ) -> None:
        grants = self._grants.setdefault((ContentType(content_type), content_id), {})
        grants[grantee] = {c.capability: c for c in capabilities}

    def grant_state(
        self, content_type: ContentType | str, content_id: str
    ) -> dict[Grantee, frozenset[CapabilityGrant]]:
        """Current grants of an item as ``{grantee: frozenset}``, empty grantees dropped."""
        grants = self._grants.get((ContentType(content_type), content_id), {})
        return {g: frozenset(caps.values()) for g, caps in grants.items() if caps}

    # --- port ---

    def _check_site(self, site_id: str) -> None:
        if site_id != self.site_id:
            raise RepositoryError(f"Unknown site {site_id}", status_code=404)

    def _item(self, content_type: ContentType, content_id: str) -> tuple[ContentType, str]:
        key = (ContentType(content_type), content_id)
        if key not in self._content:
            raise ContentNotFound(key[0].value, content_id)
        return key

    async def get_content(
        self, site_id: str, content_type: ContentType, content_id: str
    ) -> ContentRef:
        self._check_site(site_id)
        self.calls.append(("get_content", content_type, content_id))
        key = self._item(content_type, content_id)
        return ContentRef(key[0], content_id, self._content[key])

    async def get_grants(
        self, site_id: str, content_type: ContentType, content_id: str
    ) -> list[Grant]:
        self._check_site(site_id)
        self.calls.append(("get_grants", content_type, content_id))
        key = self._item(content_type, content_id)
        return [
            Grant(grantee=g, capabilities=frozenset(caps.values()))
            for g, caps in self._grants[key].items()
            if caps
        ]

    async def apply_grant(
        self,
        site_id: str,
        content_type: ContentType,
        content_id: str,
        grantee: Grantee,
        capabilities: Collection[CapabilityGrant],
    ) -> None:
        self._check_site(site_id)
        self.calls.append(("apply_grant", content_type, content_id, grantee.id))
        key = self._item(content_type, content_id)
        if grantee.id in self.fail_apply_for:
            raise RepositoryError(f"Backend rejected {grantee.id}", status_code=500)
        if self.fail_apply_pairs.intersection(capabilities):
            raise RepositoryError("Backend rejected capability change", status_code=500)
        if (grantee.type, grantee.id) not in self._names:
            raise GranteeNotFound(grantee.type.value, grantee.id)
        held = self._grants[key].setdefault(Grantee(grantee.type, grantee.id), {})
        for item in capabilities:
            held[item.capability] = item

    async def revoke_capabilities(
        self,
        site_id: str,
        content_type: ContentType,
        content_id: str,
        grantee: Grantee,
        capabilities: list[Capability],
    ) -> None:
        self._check_site(site_id)
        self.calls.append(("revoke_capabilities", content_type, content_id, grantee.id))
        key = self._item(content_type, content_id)
        held = self._grants[key].get(grantee, {})
        for name in capabilities:
            held.pop(Capability(name), None)

    async def revoke_all_for_grantee(
        self,
        site_id: str,
        content_type: ContentType,
        content_id: str,
        grantee: Grantee,
    ) -> None:
        self._check_site(site_id)
        self.calls.append(("revoke_all_for_grantee", content_type, content_id, grantee.id))
        key = self._item(content_type, content_id)
        self._grants[key].pop(grantee, None)

    async def resolve_grantee(
        self, site_id: str, grantee_type: GranteeType, grantee_id: str
    ) -> str:
        self._check_site(site_id)
        if grantee_id in self.resolve_errors:
            raise RepositoryError("Directory unavailable", status_code=503)
        try:
            return self._names[(GranteeType(grantee_type), grantee_id)]
        except KeyError:
            raise GranteeNotFound(str(grantee_type), grantee_id) from None


class FakePlatformSession:
    """Session pairing the fake repository with its site id."""

    def __init__(self, content: FakeContentRepository) -> None:
        self.content = content

    @property
    def site_id(self) -> str:
        return self.content.site_id


# --- Fixtures ---


@pytest.fixture
def fake_repo() -> FakeContentRepository:
    """Repository seeded with a small site: workbooks, a data source, users and a group."""
    repo = FakeContentRepository()
    repo.add_content(ContentType.WORKBOOK, "wb-1", "Sales")
    repo.add_content(ContentType.WORKBOOK, "wb-2", "Finance")
    repo.add_content(ContentType.WORKBOOK, "wb-3", "Ops")
    repo.add_content(ContentType.DATASOURCE, "ds-2", "Orders")
    repo.add_content(ContentType.VIEW, "vw-1", "Overview")
    repo.add_content(ContentType.FLOW, "fl-1", "Nightly")
    repo.add_user("user-9", "Ann")
    repo.add_user("user-7", "Bob")
    repo.add_group("group-1", "Analysts")
    return repo


@pytest.fixture
def session(fake_repo: FakeContentRepository) -> FakePlatformSession:
    return FakePlatformSession(fake_repo)


@pytest.fixture
def session_factory(session: FakePlatformSession):
    """Factory returning async context manager with the shared fake session."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakePlatformSession]:
        yield session

    return _factory


@pytest.fixture
def user9() -> Grantee:
    return Grantee(GranteeType.USER, "user-9")


@pytest.fixture
def user7() -> Grantee:
    return Grantee(GranteeType.USER, "user-7")


@pytest.fixture
def group1() -> Grantee:
    return Grantee(GranteeType.GROUP, "group-1")
