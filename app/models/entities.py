"""
Pydantic records returned by the entity repository
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class AccountType(str, Enum):
    BRAND = "brand"
    INFLUENCER = "influencer"
    CUSTOMER = "customer"
    ADMIN = "admin"


class CampaignStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AssignmentStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    DECLINED = "declined"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Account(BaseModel):
    """Brand, influencer, customer or admin account"""
    id: str
    account_type: AccountType
    display_name: str = ""
    categories: List[str] = []
    industry: str = ""
    audience_size: int = Field(0, ge=0)
    verified: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


class Campaign(BaseModel):
    """Brand-initiated marketing effort"""
    id: str
    brand_id: str
    title: str = ""
    budget: float = Field(0.0, ge=0)
    status: CampaignStatus = CampaignStatus.DRAFT
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class Assignment(BaseModel):
    """An influencer's participation in a campaign"""
    id: str
    campaign_id: str
    influencer_id: str
    status: AssignmentStatus = AssignmentStatus.PENDING
    engagement_rate: float = 0.0
    progress: float = 0.0
    reach: int = 0
    clicks: int = 0
    conversions: int = 0
    revenue: float = 0.0
    created_at: datetime

    class Config:
        from_attributes = True


class Payment(BaseModel):
    """Money moving from a brand to an influencer for a campaign"""
    id: str
    campaign_id: str
    brand_id: str
    influencer_id: str
    amount: float = Field(0.0, ge=0)
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: str = ""
    payment_date: Optional[datetime] = None

    class Config:
        from_attributes = True
