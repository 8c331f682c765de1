"""
HTTP routes for the crowdfunding API.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from greenfund import services
from greenfund.dependencies import get_json_store, get_upload_storage
from greenfund.records import now_iso
from greenfund.schemas import (
    AdminLoginRequest,
    AdminLoginResponse,
    CampaignStatusRequest,
    CampaignStatusResponse,
    ContactRequest,
    DonationRequest,
    DonationResponse,
    HealthResponse,
    KycResponse,
    LoginRequest,
    LoginResponse,
    PendingCountResponse,
    RegisterRequest,
    RegisterResponse,
    SuccessResponse,
)
from greenfund.store import JsonStore
from greenfund.uploads import IncomingFile, UploadStorage

router = APIRouter()


def _incoming(upload: UploadFile | None) -> IncomingFile | None:
    if upload is None:
        return None
    return IncomingFile(filename=upload.filename, content=upload.file.read())


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", time=now_iso())


# ---------- Campaigns ----------


@router.get("/campaigns")
def list_campaigns(
    status: Optional[str] = Query(None),
    store: JsonStore = Depends(get_json_store),
):
    """Public listing; only approved campaigns unless a status is requested."""
    return services.list_campaigns(store, status)


@router.get("/campaigns/{campaign_id}")
def get_campaign(campaign_id: str, store: JsonStore = Depends(get_json_store)):
    return services.get_campaign(store, campaign_id)


@router.post("/campaigns", status_code=201)
def create_campaign(
    campaign_title: Optional[str] = Form(None, alias="campaignTitle"),
    campaign_description: Optional[str] = Form(None, alias="campaignDescription"),
    short_description: Optional[str] = Form(None, alias="shortDescription"),
    image: Optional[str] = Form(None),
    funding_goal: Optional[str] = Form(None, alias="fundingGoal"),
    campaign_duration: Optional[str] = Form(None, alias="campaignDuration"),
    location: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    campaign_image: Optional[UploadFile] = File(None, alias="campaignImage"),
    additional_images: Optional[list[UploadFile]] = File(
        None, alias="additionalImages"
    ),
    store: JsonStore = Depends(get_json_store),
    uploads: UploadStorage = Depends(get_upload_storage),
):
    fields = {
        "campaignTitle": campaign_title,
        "campaignDescription": campaign_description,
        "shortDescription": short_description,
        "image": image,
        "fundingGoal": funding_goal,
        "campaignDuration": campaign_duration,
        "location": location,
        "category": category,
    }
    return services.create_campaign(
        store,
        uploads,
        fields,
        image=_incoming(campaign_image),
        additional_images=[_incoming(f) for f in additional_images or []],
    )


@router.post(
    "/campaigns/{campaign_id}/donations",
    response_model=DonationResponse,
    status_code=201,
)
def create_donation(
    campaign_id: str,
    payload: DonationRequest,
    store: JsonStore = Depends(get_json_store),
):
    donation, campaign = services.create_donation(
        store,
        campaign_id,
        payload.amount,
        donor_name=payload.donorName,
        donor_email=payload.donorEmail,
    )
    return DonationResponse(success=True, donation=donation, campaign=campaign)


# ---------- Admin ----------


@router.get("/admin/campaigns")
def list_all_campaigns(store: JsonStore = Depends(get_json_store)):
    return services.list_all_campaigns(store)


@router.put(
    "/admin/campaigns/{campaign_id}/status", response_model=CampaignStatusResponse
)
def set_campaign_status(
    campaign_id: str,
    payload: CampaignStatusRequest,
    store: JsonStore = Depends(get_json_store),
):
    campaign = services.set_campaign_status(
        store, campaign_id, payload.status, payload.reason
    )
    return CampaignStatusResponse(success=True, campaign=campaign)


@router.get("/admin/pending-count", response_model=PendingCountResponse)
def pending_count(store: JsonStore = Depends(get_json_store)):
    return PendingCountResponse(pendingCount=services.count_pending(store))


@router.post("/admin/login", response_model=AdminLoginResponse)
def admin_login(
    payload: AdminLoginRequest, store: JsonStore = Depends(get_json_store)
):
    return services.login_admin(
        store, payload.username, payload.password, payload.code
    )


# ---------- Accounts ----------


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(payload: RegisterRequest, store: JsonStore = Depends(get_json_store)):
    return services.register_user(store, payload.model_dump())


@router.post("/auth/login", response_model=LoginResponse)
def login(payload: LoginRequest, store: JsonStore = Depends(get_json_store)):
    return services.login_user(store, payload.email, payload.password)


# ---------- Submissions ----------


@router.post("/kyc", response_model=KycResponse, status_code=201)
def submit_kyc(
    aadhaar_number: Optional[str] = Form(None, alias="aadhaarNumber"),
    full_name: Optional[str] = Form(None, alias="fullName"),
    pan_number: Optional[str] = Form(None, alias="panNumber"),
    aadhaar_front: Optional[UploadFile] = File(None, alias="aadhaarFront"),
    aadhaar_back: Optional[UploadFile] = File(None, alias="aadhaarBack"),
    pan_photo: Optional[UploadFile] = File(None, alias="panPhoto"),
    selfie: Optional[UploadFile] = File(None),
    store: JsonStore = Depends(get_json_store),
    uploads: UploadStorage = Depends(get_upload_storage),
):
    record = services.submit_kyc(
        store,
        uploads,
        {
            "aadhaarNumber": aadhaar_number,
            "fullName": full_name,
            "panNumber": pan_number,
        },
        {
            "aadhaarFront": _incoming(aadhaar_front),
            "aadhaarBack": _incoming(aadhaar_back),
            "panPhoto": _incoming(pan_photo),
            "selfie": _incoming(selfie),
        },
    )
    return KycResponse(success=True, status=record["status"])


@router.post("/contact", response_model=SuccessResponse, status_code=201)
def contact(payload: ContactRequest, store: JsonStore = Depends(get_json_store)):
    services.submit_contact(store, payload.model_dump())
    return SuccessResponse(success=True)
