from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .core import CredentialVerifier
from .store import Credential, StaticCredentialStore
from ..validation.engine import LOGIN_RULES, REGISTRATION_RULES, default_engine
from ..validation.patterns import FieldKind

logger = logging.getLogger("paygate.seed")


class ProvisioningError(ValueError):
    """A credential record failed validation. ``errors`` maps field -> message."""

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


def provision_credential(
    subject_id: int,
    full_name: str,
    id_number: str,
    account_number: str,
    password: str,
    verifier: Optional[CredentialVerifier] = None,
) -> Credential:
    """
    Build a Credential for an out-of-band provisioned account.

    The record must pass the registration rules (including password
    strength). The plaintext is hashed immediately and never stored.
    """
    result = default_engine.validate(
        {
            "fullName": full_name,
            "idNumber": id_number,
            "accountNumber": account_number,
            "password": password,
        },
        REGISTRATION_RULES,
    )
    if not result.accepted:
        raise ProvisioningError(result.errors)

    fields = result.normalized_fields
    verifier = verifier or CredentialVerifier()
    return Credential(
        subject_id=subject_id,
        id_number=fields["idNumber"],
        full_name=fields["fullName"],
        account_number=fields["accountNumber"],
        hashed_secret=verifier.hash(password),
    )


def _credential_from_entry(entry: Dict[str, Any]) -> Credential:
    id_number = str(entry.get("id_number", ""))
    # Seed entries already hold a hash; only the identity grammar is checked.
    id_rule = next(r for r in LOGIN_RULES if r.kind is FieldKind.NATIONAL_ID)
    result = default_engine.validate({id_rule.field_name: id_number}, (id_rule,))
    if not result.accepted:
        raise ProvisioningError(result.errors)
    password_hash = entry.get("password_hash")
    if not password_hash:
        raise ProvisioningError({"password_hash": "password_hash is required."})
    return Credential(
        subject_id=int(entry["id"]),
        id_number=id_number,
        full_name=str(entry["full_name"]),
        account_number=str(entry.get("account_number", "")),
        hashed_secret=str(password_hash),
    )


def load_credentials(path: str | Path) -> StaticCredentialStore:
    """Read pre-provisioned accounts from a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    entries: List[Dict[str, Any]] = data.get("credentials", [])
    store = StaticCredentialStore(_credential_from_entry(e) for e in entries)
    logger.info("Loaded %d pre-provisioned credential(s) from %s", len(store), path)
    return store
