"""
Record types written to the JSON documents.

Stored keys are camelCase so documents stay readable by the static site.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
REVIEW_STATUSES = (APPROVED, REJECTED)

COMPLETED = "completed"


def now_iso() -> str:
    """UTC timestamp with millisecond precision, e.g. 2024-05-01T10:00:00.000Z."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def now_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class CampaignRecord:
    id: int
    title: str
    description: str
    image: str
    goal: int
    daysLeft: int
    location: str
    category: str
    raised: int = 0
    backers: int = 0
    badge: str = "New"
    status: str = PENDING
    additionalImages: list[str] = field(default_factory=list)
    createdAt: str = field(default_factory=now_iso)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "goal": self.goal,
            "raised": self.raised,
            "backers": self.backers,
            "daysLeft": self.daysLeft,
            "badge": self.badge,
            "status": self.status,
            "createdAt": self.createdAt,
            "location": self.location,
            "category": self.category,
            "additionalImages": self.additionalImages,
        }


@dataclass
class DonationRecord:
    id: int
    campaignId: int
    amount: int
    donorName: str = "Anonymous"
    donorEmail: str = ""
    status: str = COMPLETED
    createdAt: str = field(default_factory=now_iso)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "campaignId": self.campaignId,
            "amount": self.amount,
            "donorName": self.donorName,
            "donorEmail": self.donorEmail,
            "createdAt": self.createdAt,
            "status": self.status,
        }


@dataclass
class UserRecord:
    id: int
    email: str
    password: str
    firstName: str = ""
    lastName: str = ""
    phone: str = ""
    createdAt: str = field(default_factory=now_iso)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.firstName,
            "lastName": self.lastName,
            "email": self.email,
            "phone": self.phone,
            "password": self.password,
            "createdAt": self.createdAt,
        }


@dataclass
class KycRecord:
    id: int
    aadhaarNumber: Optional[str]
    fullName: Optional[str]
    panNumber: Optional[str]
    files: dict[str, str] = field(default_factory=dict)
    status: str = PENDING
    createdAt: str = field(default_factory=now_iso)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "aadhaarNumber": self.aadhaarNumber,
            "fullName": self.fullName,
            "panNumber": self.panNumber,
            "files": dict(self.files),
            "status": self.status,
            "createdAt": self.createdAt,
        }


@dataclass
class ContactMessageRecord:
    id: int
    email: str
    message: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    subject: Optional[str] = None
    createdAt: str = field(default_factory=now_iso)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.firstName,
            "lastName": self.lastName,
            "email": self.email,
            "subject": self.subject,
            "message": self.message,
            "createdAt": self.createdAt,
        }
