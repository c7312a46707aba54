"""Tests specific to InMemoryIdentityRepository."""

import asyncio
from datetime import timedelta

import pytest

from sso_identity.domain.principal import (
    CodeAlreadyUsedError,
    CodePurpose,
    Principal,
)
from sso_identity.domain.shared import utc_now
from sso_identity.infrastructure.persistence.memory import InMemoryIdentityRepository
from sso_identity.services import hash_code

TEST_EMAIL = "test@example.com"
CODE_KEY = "code-test-key"
HASH = "$2b$04$" + "x" * 53


class TestInMemoryIdentityRepository:
    """Atomicity and storage format of the in-memory adapter."""

    def setup_method(self):
        self.repo = InMemoryIdentityRepository()

    @pytest.mark.asyncio
    async def test_concurrent_redemptions_consume_once(self):
        """Of many simultaneous redemptions of one code exactly one wins."""
        await self.repo.register(Principal.create(TEST_EMAIL, HASH))
        await self.repo.email_add_code(
            hash_code("1234", CODE_KEY),
            TEST_EMAIL,
            CodePurpose.RECOVERY,
            utc_now() + timedelta(minutes=10),
        )

        results = await asyncio.gather(
            *(
                self.repo.email_verify_code(
                    hash_code("1234", CODE_KEY), TEST_EMAIL, CodePurpose.RECOVERY,
                )
                for _ in range(10)
            ),
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 1
        assert all(isinstance(f, CodeAlreadyUsedError) for f in failures)

    @pytest.mark.asyncio
    async def test_only_digests_are_stored(self):
        await self.repo.email_add_code(
            hash_code("1234", CODE_KEY),
            TEST_EMAIL,
            CodePurpose.REGISTRATION,
            utc_now() + timedelta(minutes=10),
        )

        [stored] = self.repo.codes
        assert stored.code_hash == hash_code("1234", CODE_KEY)
        assert stored.code_hash != "1234"
        assert stored.email == TEST_EMAIL
        assert not stored.is_used()

    @pytest.mark.asyncio
    async def test_superseded_code_is_marked_used(self):
        for code in ("1111", "2222"):
            await self.repo.email_add_code(
                hash_code(code, CODE_KEY),
                TEST_EMAIL,
                CodePurpose.RECOVERY,
                utc_now() + timedelta(minutes=10),
            )

        first, second = self.repo.codes
        assert first.is_used()
        assert not second.is_used()

    @pytest.mark.asyncio
    async def test_spent_and_expired_codes_are_pruned(self):
        """Used, superseded and expired codes do not pile up."""
        await self.repo.register(Principal.create(TEST_EMAIL, HASH))
        await self.repo.email_add_code(
            hash_code("1111", CODE_KEY),
            TEST_EMAIL,
            CodePurpose.REGISTRATION,
            utc_now() + timedelta(minutes=10),
        )
        await self.repo.email_verify_code(
            hash_code("1111", CODE_KEY), TEST_EMAIL, CodePurpose.REGISTRATION,
        )
        await self.repo.email_add_code(
            hash_code("2222", CODE_KEY),
            "other@example.com",
            CodePurpose.RECOVERY,
            utc_now() - timedelta(seconds=1),
        )
        for code in ("3333", "4444", "5555"):
            await self.repo.email_add_code(
                hash_code(code, CODE_KEY),
                TEST_EMAIL,
                CodePurpose.RECOVERY,
                utc_now() + timedelta(minutes=10),
            )

        # Only the latest superseded code survives until the next write
        assert [c.code_hash for c in self.repo.codes] == [
            hash_code("4444", CODE_KEY),
            hash_code("5555", CODE_KEY),
        ]

    @pytest.mark.asyncio
    async def test_lookups_return_copies(self):
        principal = Principal.create(TEST_EMAIL, HASH, refresh_token="r1")
        await self.repo.register(principal)

        found = await self.repo.find_by_email(TEST_EMAIL)
        found.rotate_refresh_token("tampered")
        found.grant_recovery()
        principal.rotate_refresh_token("tampered")

        stored = await self.repo.find_by_id(principal.id)
        assert stored.refresh_token == "r1"
        assert stored.recovery_verified_at is None
        assert stored is not found
