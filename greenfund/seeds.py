"""
Default documents written on first start.
"""

from __future__ import annotations

import logging

from greenfund.records import APPROVED, now_iso
from greenfund.store import ADMINS, CAMPAIGNS, DONATIONS, SETTINGS, USERS, JsonStore

logger = logging.getLogger(__name__)

DEFAULT_ADMIN = {"username": "admin", "password": "admin123", "code": "GREENFUND2024"}
DEFAULT_SETTINGS = {"autoApprovalThreshold": 5000, "reviewTime": 48}


def default_campaigns() -> list[dict]:
    created_at = now_iso()
    return [
        {
            "id": 1,
            "title": "Eco-Friendly Community Garden",
            "description": "Creating a sustainable green space for urban farming and education.",
            "image": "https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=800&h=400&fit=crop",
            "goal": 20000,
            "raised": 15000,
            "backers": 234,
            "daysLeft": 12,
            "badge": "Trending",
            "status": APPROVED,
            "createdAt": created_at,
        },
        {
            "id": 2,
            "title": "Portable Solar Power Bank",
            "description": "Revolutionary solar-powered charging solution for outdoor enthusiasts.",
            "image": "https://images.unsplash.com/photo-1497435334941-8c899ee9e8e9?w=800&h=400&fit=crop",
            "goal": 100000,
            "raised": 45000,
            "backers": 567,
            "daysLeft": 28,
            "badge": "New",
            "status": APPROVED,
            "createdAt": created_at,
        },
        {
            "id": 3,
            "title": "Smart Home Garden System",
            "description": "AI-powered indoor garden that grows fresh herbs and vegetables automatically.",
            "image": "https://images.unsplash.com/photo-1441986300917-64674bd600d8?w=800&h=400&fit=crop",
            "goal": 200000,
            "raised": 180000,
            "backers": 1234,
            "daysLeft": 5,
            "badge": "Popular",
            "status": APPROVED,
            "createdAt": created_at,
        },
    ]


def ensure_seeds(store: JsonStore) -> list[str]:
    """
    Write default content for each seedable document that is missing.

    Returns the names of the documents that were written.
    """
    defaults = {
        CAMPAIGNS: default_campaigns,
        DONATIONS: list,
        USERS: list,
        ADMINS: lambda: [dict(DEFAULT_ADMIN)],
        SETTINGS: lambda: dict(DEFAULT_SETTINGS),
    }
    seeded = []
    for name, factory in defaults.items():
        with store.lock(name):
            if store.load(name, None) is not None:
                continue
            store.save(name, factory())
        logger.info("Seeded %s", name)
        seeded.append(name)
    return seeded
