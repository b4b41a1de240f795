from __future__ import annotations

import itertools
import logging
import pandas as pd
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Dict, List, Optional

from .bonds import BondTerms, validate_terms
from .config import AppConfig
from .valuation import value_book

logger = logging.getLogger(__name__)

ROLES = ("issuer", "investor")


@dataclass(frozen=True)
class User:
    user_id: str
    username: str
    password: str
    name: str
    role: str
    email: str = ""
    # issuer profile
    company_name: Optional[str] = None
    ruc: Optional[str] = None
    sector: Optional[str] = None
    # investor profile
    investor_type: Optional[str] = None
    risk_profile: Optional[str] = None
    investment_amount: Optional[float] = None
    created_at: datetime = field(default_factory=datetime.now)
    last_login: Optional[datetime] = None


class UserStore:
    """
    In-memory user accounts with plain credential matching.

    Passed explicitly to whatever handles login; there is no module-level session.
    """

    def __init__(self, users: Optional[List[User]] = None):
        self._users: Dict[str, User] = {}
        self._ids = itertools.count(1)
        for u in users or []:
            self._users[u.user_id] = u

    @classmethod
    def with_demo_users(cls) -> "UserStore":
        store = cls()
        store.create("emisor", "emisor123", "Empresa Emisora", "issuer")
        store.create("inversor", "inversor123", "Inversor Demo", "investor")
        store.create("admin", "admin123", "Administrador", "issuer")
        return store

    def _next_id(self) -> str:
        uid = str(next(self._ids))
        while uid in self._users:
            uid = str(next(self._ids))
        return uid

    def get(self, user_id: str) -> User:
        if user_id not in self._users:
            raise KeyError(f"Unknown user: {user_id}")
        return self._users[user_id]

    def users(self) -> List[User]:
        return list(self._users.values())

    def find_by_credentials(self, username: str, password: str) -> Optional[User]:
        """Matching user with last_login stamped and the password blanked, else None."""
        for uid, u in self._users.items():
            if u.username == username and u.password == password:
                logged_in = replace(u, last_login=datetime.now())
                self._users[uid] = logged_in
                return replace(logged_in, password="")
        return None

    def create(self, username: str, password: str, name: str, role: str, **profile) -> User:
        if role not in ROLES:
            raise ValueError(f"Unsupported role: {role}")
        if not username or not password:
            raise ValueError("username and password are required")
        if any(u.username == username for u in self._users.values()):
            raise ValueError(f"Username already taken: {username}")

        user = User(user_id=self._next_id(), username=username, password=password, name=name, role=role, **profile)
        self._users[user.user_id] = user
        logger.info(f"Created {role} user {username} ({user.user_id})")
        return user

    def update(self, user_id: str, **changes) -> User:
        current = self.get(user_id)
        if "user_id" in changes or "created_at" in changes:
            raise ValueError("user_id and created_at are immutable")
        if "role" in changes and changes["role"] not in ROLES:
            raise ValueError(f"Unsupported role: {changes['role']}")
        if "username" in changes and any(
            u.username == changes["username"] and u.user_id != user_id for u in self._users.values()
        ):
            raise ValueError(f"Username already taken: {changes['username']}")

        updated = replace(current, **changes)
        self._users[user_id] = updated
        return updated


@dataclass(frozen=True)
class BondRecord:
    bond_id: str
    terms: BondTerms
    created_at: datetime
    updated_at: datetime


class BondBook:
    """In-memory bond definitions with config-driven defaults for new bonds."""

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or AppConfig()
        self._records: Dict[str, BondRecord] = {}
        self._ids = itertools.count(1)

    def new_terms(self, **fields_) -> BondTerms:
        """BondTerms pre-filled from config (currency, interest type, capitalization)."""
        defaults = {
            "currency": self.config.currency,
            "interest_type": self.config.interest_type,
        }
        if fields_.get("interest_type", self.config.interest_type) == "nominal":
            defaults["capitalization"] = self.config.capitalization
        return BondTerms(**{**defaults, **fields_})

    def add(self, terms: BondTerms) -> BondRecord:
        validate_terms(terms)
        now = datetime.now()
        rec = BondRecord(bond_id=str(next(self._ids)), terms=terms, created_at=now, updated_at=now)
        self._records[rec.bond_id] = rec
        logger.info(f"Added bond {terms.name} ({rec.bond_id})")
        return rec

    def get(self, bond_id: str) -> BondRecord:
        if bond_id not in self._records:
            raise KeyError(f"Unknown bond: {bond_id}")
        return self._records[bond_id]

    def update(self, bond_id: str, **changes) -> BondRecord:
        rec = self.get(bond_id)
        terms = replace(rec.terms, **changes)
        validate_terms(terms)

        updated = replace(rec, terms=terms, updated_at=datetime.now())
        self._records[bond_id] = updated
        return updated

    def delete(self, bond_id: str) -> None:
        rec = self.get(bond_id)
        del self._records[bond_id]
        logger.info(f"Deleted bond {rec.terms.name} ({bond_id})")

    def records(self) -> List[BondRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def to_frame(self) -> pd.DataFrame:
        term_cols = [f.name for f in fields(BondTerms)]
        rows = [
            {"bond_id": r.bond_id, **{c: getattr(r.terms, c) for c in term_cols}, "created_at": r.created_at}
            for r in self._records.values()
        ]
        return pd.DataFrame(rows, columns=["bond_id"] + term_cols + ["created_at"])

    def valuation_frame(self) -> pd.DataFrame:
        out = value_book([r.terms for r in self._records.values()])
        out.insert(0, "bond_id", [r.bond_id for r in self._records.values()])
        return out
