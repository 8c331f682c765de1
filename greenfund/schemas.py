"""
Pydantic schemas for the crowdfunding API.

Request fields are optional so that missing values are reported by the
handlers with the API's own messages rather than as schema errors.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    time: str


class PendingCountResponse(BaseModel):
    pendingCount: int


class CampaignStatusRequest(BaseModel):
    status: Optional[str] = None
    reason: Optional[str] = None


class CampaignStatusResponse(BaseModel):
    success: bool
    campaign: dict


class DonationRequest(BaseModel):
    # Kept loose: "25", 25 and 25.0 are all accepted amounts.
    amount: Any = None
    donorName: Optional[str] = None
    donorEmail: Optional[str] = None


class DonationResponse(BaseModel):
    success: bool
    donation: dict
    campaign: dict


class RegisterRequest(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class RegisterResponse(BaseModel):
    id: int
    email: str


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    name: str


class AdminLoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    code: Optional[str] = None


class AdminLoginResponse(BaseModel):
    token: str


class KycResponse(BaseModel):
    success: bool
    status: str


class ContactRequest(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool
