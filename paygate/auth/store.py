"""
store.py — Read-only credential lookup
======================================
The gatekeeper only ever reads credentials, through the narrow
CredentialStore interface. StaticCredentialStore is an immutable,
in-process implementation built from provisioned records (see seed.py).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Protocol


@dataclass(frozen=True)
class Credential:
    """A provisioned account. ``hashed_secret`` is excluded from repr."""

    subject_id: int
    id_number: str
    full_name: str
    account_number: str
    hashed_secret: str = field(repr=False)

    def public_view(self) -> Dict[str, object]:
        return {"id": self.subject_id, "fullName": self.full_name}


class CredentialStore(Protocol):
    def find_by_identity(self, identity: str) -> Optional[Credential]:
        ...


class StaticCredentialStore:
    """Immutable identity -> Credential index. Safe for concurrent reads."""

    def __init__(self, credentials: Iterable[Credential]) -> None:
        index: Dict[str, Credential] = {}
        for cred in credentials:
            if cred.id_number in index:
                raise ValueError(f"Duplicate identity for subject {cred.subject_id}.")
            index[cred.id_number] = cred
        self._by_identity = index

    def find_by_identity(self, identity: str) -> Optional[Credential]:
        return self._by_identity.get(identity)

    def __len__(self) -> int:
        return len(self._by_identity)
