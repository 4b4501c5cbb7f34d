"""
Tests for accounts, profiles and the session pointer.
"""

import asyncio

import pytest

from practice_core import (
    Collection,
    CredentialHasher,
    DuplicateAccountError,
    IdentityManager,
    InvalidCredentialError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)


class TestSignUp:
    """Tests for account creation."""

    async def test_sign_up_creates_account_profile_and_session(self, identity, store):
        account, profile = await identity.sign_up("Ada@Example.com", "pw-123456", "ada")

        assert (await identity.get_session()) == account
        assert profile.id == account.id
        assert profile.username == "ada"
        assert (profile.total_debates, profile.wins, profile.total_score) == (0, 0, 0)
        assert profile.rank == "Novice"

        profiles = await store.load(Collection.PROFILES)
        assert [p["id"] for p in profiles] == [account.id]

    async def test_avatar_is_derived_from_username(self, identity):
        _, profile = await identity.sign_up("bob@example.com", "pw", "Bob Smith")
        assert profile.avatar_url.endswith("seed=Bob%20Smith")

    async def test_secret_is_not_stored_in_clear(self, identity, store):
        await identity.sign_up("c@example.com", "plain-secret", "c")
        stored = (await store.load(Collection.ACCOUNTS))[0]
        assert "plain-secret" not in stored["secret_hash"]
        assert stored["secret_hash"].startswith("$pbkdf2-sha256$")

    async def test_public_account_has_no_secret(self, identity):
        account, _ = await identity.sign_up("d@example.com", "pw", "d")
        assert "secret_hash" not in account.to_dict()

    async def test_duplicate_email_differing_in_case(self, identity, store):
        """Emails are unique regardless of case, and nothing is created on conflict."""
        await identity.sign_up("ada@example.com", "pw", "ada")

        with pytest.raises(DuplicateAccountError):
            await identity.sign_up("ADA@example.COM", "other", "ada2")

        assert len(await store.load(Collection.ACCOUNTS)) == 1
        assert len(await store.load(Collection.PROFILES)) == 1

    @pytest.mark.parametrize(
        "email,secret,username,field",
        [
            ("", "pw", "ada", "email"),
            ("ada@example.com", "", "ada", "password"),
            ("ada@example.com", "pw", "   ", "username"),
        ],
    )
    async def test_empty_fields_rejected(self, identity, store, email, secret, username, field):
        with pytest.raises(ValidationError) as exc_info:
            await identity.sign_up(email, secret, username)
        assert exc_info.value.field == field
        assert await store.load(Collection.ACCOUNTS) == []

    async def test_profile_write_failure_rolls_back_account(self, identity, store, medium):
        medium.fail_keys.add("debate_practice.profiles")

        with pytest.raises(StoreUnavailableError):
            await identity.sign_up("e@example.com", "pw", "e")

        assert await store.load(Collection.ACCOUNTS) == []
        assert await identity.get_session() is None

    async def test_concurrent_duplicate_sign_ups(self, slow_store):
        """Only one of two simultaneous sign-ups with the same email succeeds."""
        manager = IdentityManager(slow_store)
        results = await asyncio.gather(
            manager.sign_up("x@example.com", "pw", "x"),
            manager.sign_up("X@example.com", "pw", "x2"),
            return_exceptions=True,
        )
        assert sum(isinstance(r, DuplicateAccountError) for r in results) == 1
        assert len(await manager.list_profiles()) == 1


class TestSignIn:
    """Tests for sign-in and sign-out."""

    async def test_sign_in_sets_session(self, identity, account):
        await identity.sign_out()
        assert await identity.get_session() is None

        signed_in = await identity.sign_in("ADA@example.com", "s3cret-pass")
        assert signed_in == account
        assert await identity.get_session() == account

    async def test_wrong_secret(self, identity, account):
        await identity.sign_out()
        with pytest.raises(InvalidCredentialError):
            await identity.sign_in("ada@example.com", "wrong")
        assert await identity.get_session() is None

    async def test_unknown_email_has_same_error(self, identity, account):
        with pytest.raises(InvalidCredentialError) as exc_info:
            await identity.sign_in("nobody@example.com", "s3cret-pass")
        assert str(exc_info.value) == "Invalid email or password"

    async def test_sign_out_keeps_data(self, identity, store, account):
        await identity.sign_out()
        assert len(await store.load(Collection.ACCOUNTS)) == 1
        assert await identity.get_profile(account.id) is not None

    async def test_dangling_pointer_resolves_to_none(self, identity, store):
        await store.set_current_account("missing")
        assert await identity.get_session() is None


class TestProfiles:
    """Tests for profile reads and edits."""

    async def test_update_merges_and_stamps(self, identity, account):
        before = await identity.get_profile(account.id)
        updated = await identity.update_profile(account.id, {"username": "ada-l"})

        assert updated.username == "ada-l"
        assert updated.total_score == before.total_score
        assert updated.updated_at >= before.updated_at
        assert (await identity.get_profile(account.id)).username == "ada-l"

    async def test_update_cannot_change_id(self, identity, account):
        updated = await identity.update_profile(account.id, {"id": "other"})
        assert updated.id == account.id

    async def test_update_missing_profile(self, identity):
        with pytest.raises(NotFoundError):
            await identity.update_profile("nope", {"username": "x"})

    async def test_record_result_counts_and_ranks(self, identity, account):
        await identity.record_result(account.id, 80, 40)
        profile = await identity.record_result(account.id, 30, 60)

        assert (profile.total_debates, profile.wins, profile.total_score) == (2, 1, 110)
        assert profile.rank == "Apprentice"

    async def test_concurrent_results_all_count(self, slow_store, account):
        manager = IdentityManager(slow_store)
        await asyncio.gather(*(manager.record_result(account.id, 10, 0) for _ in range(4)))
        profile = await manager.get_profile(account.id)
        assert (profile.total_debates, profile.wins, profile.total_score) == (4, 4, 40)

    async def test_record_result_missing_profile(self, identity):
        with pytest.raises(NotFoundError):
            await identity.record_result("nope", 1, 0)

    async def test_list_profiles(self, identity, account):
        await identity.sign_up("b@example.com", "pw", "b")
        names = {p.username for p in await identity.list_profiles()}
        assert names == {"ada", "b"}

    async def test_current_profile(self, identity, account):
        assert (await identity.current_profile()).id == account.id
        await identity.sign_out()
        assert await identity.current_profile() is None


class TestCredentialHasher:
    """Tests for the one-way credential hash."""

    def test_hash_is_salted(self):
        hasher = CredentialHasher()
        assert hasher.hash("same") != hasher.hash("same")

    def test_verify(self):
        hasher = CredentialHasher()
        hashed = hasher.hash("secret")
        assert hasher.verify("secret", hashed)
        assert not hasher.verify("Secret", hashed)

    def test_unknown_hash_format_does_not_verify(self):
        assert not CredentialHasher().verify("secret", "c2VjcmV0")
