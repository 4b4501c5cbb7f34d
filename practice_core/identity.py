"""Accounts, profiles and the current-session pointer"""

import logging
from typing import Callable, Optional
from urllib.parse import quote

from passlib.context import CryptContext

from .config import AVATAR_URL, DEFAULT_RANK
from .exceptions import (
    DuplicateAccountError,
    InvalidCredentialError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .ranking import rank_label
from .repository import load_records, update_records
from .store import Collection, Store
from .types import Account, AccountRecord, Profile, new_id, utc_now

logger = logging.getLogger(__name__)

# Fields an account owner may not overwrite through update_profile
_PROTECTED_FIELDS = {"id", "created_at", "updated_at"}


class CredentialHasher:
    """One-way, salted credential hashing"""

    def __init__(self, schemes: Optional[list[str]] = None):
        self._context = CryptContext(schemes=schemes or ["pbkdf2_sha256"], deprecated="auto")

    def hash(self, secret: str) -> str:
        return self._context.hash(secret)

    def verify(self, secret: str, hashed: str) -> bool:
        try:
            return self._context.verify(secret, hashed)
        except (ValueError, TypeError):
            # Unrecognized hash format
            return False


def default_avatar(seed: str) -> str:
    return AVATAR_URL.format(seed=quote(seed, safe=""))


def _require(value: str, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    return value


class IdentityManager:
    """Sign-up, sign-in and profile access on top of the store"""

    def __init__(self, store: Store, hasher: Optional[CredentialHasher] = None):
        self.store = store
        self.hasher = hasher or CredentialHasher()

    async def _accounts(self) -> list[AccountRecord]:
        return await load_records(self.store, Collection.ACCOUNTS, AccountRecord)

    async def _profiles(self) -> list[Profile]:
        return await load_records(self.store, Collection.PROFILES, Profile)

    async def get_session(self) -> Optional[Account]:
        """Resolve the session pointer to an account

        Returns:
            The signed-in account, or None if nobody is signed in or the
            pointer refers to a missing account
        """
        account_id = await self.store.get_current_account()
        if account_id is None:
            return None
        for record in await self._accounts():
            if record.id == account_id:
                return record.public()
        logger.warning("Session pointer refers to unknown account %s", account_id)
        return None

    async def sign_up(self, email: str, secret: str, username: str) -> tuple[Account, Profile]:
        """Create an account and its profile, then sign in

        Raises:
            ValidationError: If email, secret or username is empty
            DuplicateAccountError: If the email is registered (case-insensitive)
        """
        email = _require(email, "email")
        if not secret:
            raise ValidationError("Password is required", field="password")
        username = _require(username, "username")

        now = utc_now()
        record = AccountRecord(
            id=new_id(),
            email=email,
            secret_hash=self.hasher.hash(secret),
            created_at=now,
        )
        profile = Profile(
            id=record.id,
            username=username,
            avatar_url=default_avatar(username or email),
            rank=DEFAULT_RANK,
            created_at=now,
            updated_at=now,
        )

        def add_account(accounts: list[AccountRecord]) -> list[AccountRecord]:
            if any(a.email.lower() == email.lower() for a in accounts):
                raise DuplicateAccountError()
            return accounts + [record]

        await update_records(self.store, Collection.ACCOUNTS, AccountRecord, add_account)
        try:
            await update_records(
                self.store, Collection.PROFILES, Profile, lambda profiles: profiles + [profile]
            )
        except PersistenceError:
            logger.error("Profile write failed, rolling back account %s", record.id)
            await update_records(
                self.store,
                Collection.ACCOUNTS,
                AccountRecord,
                lambda accounts: [a for a in accounts if a.id != record.id],
            )
            raise
        await self.store.set_current_account(record.id)

        logger.info("Signed up account %s", record.id)
        return record.public(), profile

    async def sign_in(self, email: str, secret: str) -> Account:
        """Check credentials and point the session at the account

        Raises:
            InvalidCredentialError: If the email is unknown or the secret is wrong
        """
        email = (email or "").strip().lower()
        for record in await self._accounts():
            if record.email.lower() == email:
                break
        else:
            raise InvalidCredentialError()

        if not self.hasher.verify(secret or "", record.secret_hash):
            raise InvalidCredentialError()

        await self.store.set_current_account(record.id)
        logger.info("Signed in account %s", record.id)
        return record.public()

    async def sign_out(self) -> None:
        await self.store.set_current_account(None)

    async def get_profile(self, account_id: str) -> Optional[Profile]:
        for profile in await self._profiles():
            if profile.id == account_id:
                return profile
        return None

    async def current_profile(self) -> Optional[Profile]:
        account = await self.get_session()
        if account is None:
            return None
        return await self.get_profile(account.id)

    async def update_profile(self, account_id: str, updates: dict) -> Profile:
        """Merge fields into a profile and stamp updated_at

        Raises:
            NotFoundError: If no profile has that id
        """
        def merge(profile: Profile) -> Profile:
            merged = profile.to_dict()
            merged.update({k: v for k, v in updates.items() if k not in _PROTECTED_FIELDS})
            merged["updated_at"] = utc_now()
            return Profile.from_dict(merged)

        return await self._change_profile(account_id, merge)

    async def record_result(self, account_id: str, user_score: int, ai_score: int) -> Profile:
        """Count one completed debate on a profile

        The counters are incremented under the profiles lock.

        Raises:
            NotFoundError: If no profile has that id
        """
        def count(profile: Profile) -> Profile:
            total_score = profile.total_score + max(0, user_score)
            merged = profile.to_dict()
            merged.update(
                total_debates=profile.total_debates + 1,
                wins=profile.wins + (1 if user_score > ai_score else 0),
                total_score=total_score,
                rank=rank_label(total_score),
                updated_at=utc_now(),
            )
            return Profile.from_dict(merged)

        return await self._change_profile(account_id, count)

    async def _change_profile(self, account_id: str, change: Callable[[Profile], Profile]) -> Profile:
        changed: Optional[Profile] = None

        def apply(profiles: list[Profile]) -> list[Profile]:
            nonlocal changed
            for index, profile in enumerate(profiles):
                if profile.id == account_id:
                    changed = change(profile)
                    profiles[index] = changed
                    return profiles
            raise NotFoundError("Profile", account_id)

        await update_records(self.store, Collection.PROFILES, Profile, apply)
        return changed

    async def list_profiles(self) -> list[Profile]:
        """All profiles, in no particular order"""
        return await self._profiles()
