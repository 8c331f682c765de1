"""
Resource handlers for campaigns, donations, accounts and submissions.

Each operation loads the documents it needs, validates the input, applies
its change and writes the documents back, all while holding the document
locks. Failures raise ``ApiError`` subclasses and leave the documents as
they were.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping, Optional

from greenfund.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from greenfund.records import (
    APPROVED,
    PENDING,
    REVIEW_STATUSES,
    CampaignRecord,
    ContactMessageRecord,
    DonationRecord,
    KycRecord,
    UserRecord,
    now_iso,
    now_millis,
)
from greenfund.store import (
    ADMINS,
    CAMPAIGNS,
    DONATIONS,
    KYC,
    MESSAGES,
    USERS,
    JsonStore,
    next_id,
)
from greenfund.uploads import IncomingFile, UploadStorage

logger = logging.getLogger(__name__)

MAX_ADDITIONAL_IMAGES = 5
DEFAULT_CAMPAIGN_DAYS = 30
KYC_FILE_FIELDS = ("aadhaarFront", "aadhaarBack", "panPhoto", "selfie")

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any) -> Optional[int]:
    """
    Read an integer the way form inputs are read: the leading digits of a
    string, or the truncated value of a number. Returns None otherwise.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        return int(match.group(1)) if match else None
    return None


def _find_by_id(records: list[dict], record_id: Any) -> Optional[dict]:
    for record in records:
        if str(record.get("id")) == str(record_id):
            return record
    return None


def _text(fields: Mapping[str, Any], key: str) -> Optional[str]:
    value = fields.get(key)
    return value if value else None


# ---------- Campaigns ----------


def list_campaigns(store: JsonStore, status: Optional[str] = None) -> list[dict]:
    """Campaigns with the given status; approved ones when no status is given."""
    campaigns = store.load(CAMPAIGNS, [])
    wanted = status or APPROVED
    return [c for c in campaigns if c.get("status") == wanted]


def list_all_campaigns(store: JsonStore) -> list[dict]:
    return store.load(CAMPAIGNS, [])


def count_pending(store: JsonStore) -> int:
    return sum(1 for c in store.load(CAMPAIGNS, []) if c.get("status") == PENDING)


def get_campaign(store: JsonStore, campaign_id: Any) -> dict:
    campaign = _find_by_id(store.load(CAMPAIGNS, []), campaign_id)
    if campaign is None:
        raise NotFoundError("Not found")
    return campaign


def create_campaign(
    store: JsonStore,
    uploads: UploadStorage,
    fields: Mapping[str, Any],
    image: Optional[IncomingFile] = None,
    additional_images: Iterable[IncomingFile] = (),
) -> dict:
    """Append a new pending campaign built from submitted form fields."""
    additional_images = list(additional_images)
    if len(additional_images) > MAX_ADDITIONAL_IMAGES:
        raise ValidationError(
            f"At most {MAX_ADDITIONAL_IMAGES} additional images are allowed"
        )

    if image is not None:
        image_url = uploads.url_for(uploads.save(image.filename, image.content))
    else:
        image_url = _text(fields, "image") or ""
    gallery = [
        uploads.url_for(uploads.save(f.filename, f.content)) for f in additional_images
    ]

    with store.lock(CAMPAIGNS):
        campaigns = store.load(CAMPAIGNS, [])
        record = CampaignRecord(
            id=next_id(campaigns),
            title=_text(fields, "campaignTitle") or "Untitled Campaign",
            description=(
                _text(fields, "campaignDescription")
                or _text(fields, "shortDescription")
                or ""
            ),
            image=image_url,
            goal=parse_int(fields.get("fundingGoal")) or 0,
            daysLeft=(
                parse_int(fields.get("campaignDuration")) or DEFAULT_CAMPAIGN_DAYS
            ),
            location=_text(fields, "location") or "",
            category=_text(fields, "category") or "General",
            additionalImages=gallery,
        )
        campaign = record.as_dict()
        campaigns.append(campaign)
        store.save(CAMPAIGNS, campaigns)

    logger.info("Campaign %s submitted for review", campaign["id"])
    return campaign


def set_campaign_status(
    store: JsonStore,
    campaign_id: Any,
    status: Optional[str],
    reason: Optional[str] = None,
) -> dict:
    """Record an admin decision on a campaign."""
    if status not in REVIEW_STATUSES:
        raise ValidationError("Invalid status. Must be approved or rejected")

    with store.lock(CAMPAIGNS):
        campaigns = store.load(CAMPAIGNS, [])
        campaign = _find_by_id(campaigns, campaign_id)
        if campaign is None:
            raise NotFoundError("Campaign not found")
        campaign["status"] = status
        campaign["reviewedAt"] = now_iso()
        if reason:
            campaign["rejectionReason"] = reason
        store.save(CAMPAIGNS, campaigns)

    logger.info("Campaign %s marked %s", campaign["id"], status)
    return campaign


# ---------- Donations ----------


def create_donation(
    store: JsonStore,
    campaign_id: Any,
    amount: Any,
    donor_name: Optional[str] = None,
    donor_email: Optional[str] = None,
) -> tuple[dict, dict]:
    """
    Record a completed donation and credit it to the campaign.

    Returns the new donation and the updated campaign.
    """
    amt = parse_int(amount)
    if not amt or amt <= 0:
        raise ValidationError("Invalid amount")

    with store.lock(CAMPAIGNS, DONATIONS):
        campaigns = store.load(CAMPAIGNS, [])
        campaign = _find_by_id(campaigns, campaign_id)
        if campaign is None:
            raise NotFoundError("Campaign not found")

        donations = store.load(DONATIONS, [])
        previous_donations = list(donations)
        donation = DonationRecord(
            id=next_id(donations),
            campaignId=campaign["id"],
            amount=amt,
            donorName=donor_name or "Anonymous",
            donorEmail=donor_email or "",
        ).as_dict()
        donations.append(donation)

        campaign["raised"] = (campaign.get("raised") or 0) + amt
        campaign["backers"] = (campaign.get("backers") or 0) + 1

        store.save(DONATIONS, donations)
        try:
            store.save(CAMPAIGNS, campaigns)
        except StoreError:
            # The donation must not outlive a campaign that was never credited.
            store.save(DONATIONS, previous_donations)
            raise

    logger.info("Donation %s of %s to campaign %s", donation["id"], amt, campaign["id"])
    return donation, campaign


# ---------- Accounts ----------


def register_user(store: JsonStore, fields: Mapping[str, Any]) -> dict:
    email = _text(fields, "email")
    password = _text(fields, "password")
    if not email or not password:
        raise ValidationError("Email and password required")

    with store.lock(USERS):
        users = store.load(USERS, [])
        if any(u.get("email") == email for u in users):
            raise ConflictError("Email already registered")
        user = UserRecord(
            id=next_id(users),
            email=email,
            password=password,
            firstName=_text(fields, "firstName") or "",
            lastName=_text(fields, "lastName") or "",
            phone=_text(fields, "phone") or "",
        ).as_dict()
        users.append(user)
        store.save(USERS, users)

    return {"id": user["id"], "email": user["email"]}


def login_user(
    store: JsonStore, email: Optional[str], password: Optional[str]
) -> dict:
    users = store.load(USERS, [])
    user = next(
        (u for u in users if u.get("email") == email and u.get("password") == password),
        None,
    )
    if user is None:
        raise AuthError("Invalid credentials")
    name = f"{user.get('firstName') or ''} {user.get('lastName') or ''}".strip()
    return {"token": f"user_{now_millis()}", "name": name}


def login_admin(
    store: JsonStore,
    username: Optional[str],
    password: Optional[str],
    code: Optional[str],
) -> dict:
    admins = store.load(ADMINS, [])
    matched = any(
        a.get("username") == username
        and a.get("password") == password
        and a.get("code") == code
        for a in admins
    )
    if not matched:
        raise AuthError("Invalid credentials")
    return {"token": f"admin_{now_millis()}"}


# ---------- Submissions ----------


def submit_kyc(
    store: JsonStore,
    uploads: UploadStorage,
    fields: Mapping[str, Any],
    files: Mapping[str, Optional[IncomingFile]],
) -> dict:
    """Store identity details and documents; the record stays pending."""
    stored_files = {}
    for field_name in KYC_FILE_FIELDS:
        incoming = files.get(field_name)
        if incoming is not None:
            stored_files[field_name] = uploads.save(incoming.filename, incoming.content)

    with store.lock(KYC):
        kyc_list = store.load(KYC, [])
        record = KycRecord(
            id=next_id(kyc_list),
            aadhaarNumber=fields.get("aadhaarNumber"),
            fullName=fields.get("fullName"),
            panNumber=fields.get("panNumber"),
            files=stored_files,
        ).as_dict()
        kyc_list.append(record)
        store.save(KYC, kyc_list)

    logger.info("KYC submission %s received", record["id"])
    return record


def submit_contact(store: JsonStore, fields: Mapping[str, Any]) -> dict:
    email = _text(fields, "email")
    message = _text(fields, "message")
    if not email or not message:
        raise ValidationError("Email and message required")

    with store.lock(MESSAGES):
        messages = store.load(MESSAGES, [])
        record = ContactMessageRecord(
            id=next_id(messages),
            email=email,
            message=message,
            firstName=fields.get("firstName"),
            lastName=fields.get("lastName"),
            subject=fields.get("subject"),
        ).as_dict()
        messages.append(record)
        store.save(MESSAGES, messages)

    return record
