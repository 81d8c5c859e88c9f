from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from grant_core.domain.enums import OrganizationType
from grant_core.domain.identifiers import generate_id


@dataclass
class Address:
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""


@dataclass
class Contact:
    name: str = ""
    email: str = ""
    phone: str = ""
    role: str = ""


@dataclass
class Organization:
    id: str
    name: str
    org_type: OrganizationType = OrganizationType.NON_PROFIT
    tax_id: Optional[str] = None
    address: Address = field(default_factory=Address)
    contact: Contact = field(default_factory=Contact)
    registration_date: Optional[date] = None

    @staticmethod
    def create(name: str, org_type: OrganizationType = OrganizationType.NON_PROFIT, **extra) -> "Organization":
        return Organization(
            id=generate_id(),
            name=name,
            org_type=org_type,
            **extra,
        )


__all__ = ["Address", "Contact", "Organization"]
