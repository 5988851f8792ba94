"""Unit tests for the resolve lead use case."""

from datetime import datetime, timezone
from typing import Optional

import pytest

from lead_funnel.adapters.outbound.lead import InMemoryLeadRepository
from lead_funnel.adapters.outbound.task import InMemoryTaskRepository
from lead_funnel.application.dtos.lead import Lead
from lead_funnel.application.dtos.task import Task
from lead_funnel.application.use_cases.resolve_lead_use_case import ResolveLead
from lead_funnel.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def task_repository():
    """Create task repository with tasks T1 and T2."""
    return InMemoryTaskRepository(
        tasks=[Task(id="T1", title="Lead magnet"), Task(id="T2", title="Other magnet")]
    )


@pytest.fixture
def lead_repository():
    """Create empty lead repository."""
    return InMemoryLeadRepository()


@pytest.fixture
def resolver(task_repository, lead_repository):
    """Create resolve lead use case."""
    return ResolveLead(task_repository, lead_repository)


@pytest.mark.asyncio
async def test_first_submission_creates_lead(resolver, lead_repository):
    """Test a new identity inserts a lead with was_updated=False."""
    result = await resolver.execute("T1", "0501234567", name="Dana", email="a@b.com")

    assert result.was_updated is False
    assert result.lead.task_id == "T1"
    assert result.lead.phone == "0501234567"
    assert result.lead.name == "Dana"
    assert result.lead.email == "a@b.com"
    assert result.lead.notified is False
    assert len(await lead_repository.list()) == 1


@pytest.mark.asyncio
async def test_same_phone_different_email_merges(resolver, lead_repository):
    """Test the same phone under a task merges into the first lead."""
    first = await resolver.execute("T1", "0501234567", name="Dana", email="a@b.com")
    second = await resolver.execute("T1", "0501234567", email="other@b.com")

    assert second.was_updated is True
    assert second.lead.id == first.lead.id
    assert second.lead.email == "other@b.com"
    assert second.lead.name == "Dana"
    assert len(await lead_repository.list(task_id="T1")) == 1


@pytest.mark.asyncio
async def test_same_email_different_phone_merges_and_refreshes_phone(resolver, lead_repository):
    """Test an email match merges and always takes the latest phone."""
    first = await resolver.execute("T1", "0501234567", name="Dana", email="a@b.com")
    second = await resolver.execute("T1", "0529876543", email="a@b.com")

    assert second.was_updated is True
    assert second.lead.id == first.lead.id
    assert second.lead.phone == "0529876543"
    assert len(await lead_repository.list()) == 1


@pytest.mark.asyncio
async def test_empty_values_never_blank_out_stored_fields(resolver):
    """Test blank name/email keep the stored values."""
    await resolver.execute("T1", "0501234567", name="Dana", email="a@b.com")
    result = await resolver.execute("T1", "0501234567", name="  ", email="")

    assert result.lead.name == "Dana"
    assert result.lead.email == "a@b.com"


@pytest.mark.asyncio
async def test_phone_is_normalized_before_matching(resolver, lead_repository):
    """Test formatting differences do not create duplicates."""
    first = await resolver.execute("T1", "050-123-4567")
    second = await resolver.execute("T1", "0501234567")

    assert first.lead.phone == "0501234567"
    assert second.lead.id == first.lead.id
    assert len(await lead_repository.list()) == 1


@pytest.mark.asyncio
async def test_country_code_and_local_phone_resolve_to_one_lead(resolver, lead_repository):
    """Test +972 and 972 spellings match the lead stored with the local form."""
    first = await resolver.execute("T1", "0501234567", name="Dana")
    second = await resolver.execute("T1", "+972501234567", email="a@b.com")
    third = await resolver.execute("T1", "972501234567")

    assert second.was_updated is True
    assert second.lead.id == first.lead.id
    assert third.lead.id == first.lead.id
    assert third.lead.phone == "0501234567"
    assert len(await lead_repository.list()) == 1


@pytest.mark.asyncio
async def test_same_phone_under_other_task_is_separate(resolver, lead_repository):
    """Test identity only merges within one task."""
    first = await resolver.execute("T1", "0501234567")
    second = await resolver.execute("T2", "0501234567")

    assert second.was_updated is False
    assert second.lead.id != first.lead.id
    assert len(await lead_repository.list()) == 2


@pytest.mark.asyncio
async def test_missing_task_raises_not_found(resolver):
    """Test an unknown task is rejected."""
    with pytest.raises(NotFoundError):
        await resolver.execute("missing", "0501234567")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "phone,email",
    [("", None), ("12345", None), ("0501234567", "not-an-email")],
)
async def test_invalid_input_raises_validation_error(resolver, phone, email):
    """Test missing or malformed phone and malformed email are rejected."""
    with pytest.raises(ValidationError):
        await resolver.execute("T1", phone, email=email)


class _FailingUpdateLeadRepository(InMemoryLeadRepository):
    async def update_identity(
        self, lead_id: str, name: Optional[str], email: Optional[str], phone: str
    ) -> Lead:
        raise RuntimeError("database unavailable")


@pytest.mark.asyncio
async def test_update_failure_returns_original_match(task_repository):
    """Test an update failure degrades to the stored record with was_updated=False."""
    lead_repository = _FailingUpdateLeadRepository()
    resolver = ResolveLead(task_repository, lead_repository)
    first = await resolver.execute("T1", "0501234567", name="Dana", email="a@b.com")

    result = await resolver.execute("T1", "0501234567", name="Dana Levi")

    assert result.was_updated is False
    assert result.lead == first.lead


class _RacingLeadRepository(InMemoryLeadRepository):
    """Lets a competing submission insert between the lookup and the insert."""

    def __init__(self) -> None:
        super().__init__()
        self.raced = False

    async def insert(self, lead: Lead) -> Lead:
        if not self.raced:
            self.raced = True
            await super().insert(
                Lead(
                    id="winner",
                    task_id=lead.task_id,
                    phone=lead.phone,
                    name="Winner",
                    created_at=datetime.now(timezone.utc),
                )
            )
        return await super().insert(lead)


@pytest.mark.asyncio
async def test_insert_conflict_race_merges_into_winner(task_repository):
    """Test a duplicate-key race re-queries and follows the found branch."""
    lead_repository = _RacingLeadRepository()
    resolver = ResolveLead(task_repository, lead_repository)

    result = await resolver.execute("T1", "0501234567", name="Dana", email="a@b.com")

    assert result.was_updated is True
    assert result.lead.id == "winner"
    assert result.lead.email == "a@b.com"
    assert result.lead.name == "Dana"
    assert len(await lead_repository.list()) == 1


@pytest.mark.asyncio
async def test_find_matches_phone_or_email(resolver):
    """Test lookup by either identity key."""
    created = await resolver.execute("T1", "0501234567", email="a@b.com")

    by_phone = await resolver.find("T1", phone="050-123-4567")
    by_email = await resolver.find("T1", email="a@b.com")
    missing = await resolver.find("T1", phone="0520000000", email="z@b.com")

    assert by_phone.id == created.lead.id
    assert by_email.id == created.lead.id
    assert missing is None


@pytest.mark.asyncio
async def test_find_without_keys_returns_none(resolver):
    """Test lookup with no phone and no email matches nothing."""
    await resolver.execute("T1", "0501234567")

    assert await resolver.find("T1") is None
