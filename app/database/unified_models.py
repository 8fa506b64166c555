"""
UNIFIED DATABASE MODELS - Collaboration Platform
Accounts, campaigns, influencer assignments and payments read by the
analytics layer
"""
from sqlalchemy import Column, String, Integer, BigInteger, Boolean, DateTime, Text, Float, ForeignKey, Index, CheckConstraint, JSON, Numeric
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
import uuid as uuid_lib

Base = declarative_base()


def _new_id() -> str:
    return str(uuid_lib.uuid4())

# =============================================================================
# ACCOUNTS
# =============================================================================

class Account(Base):
    """Brand, influencer, customer and admin accounts"""
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    account_type = Column(String(20), nullable=False)  # brand, influencer, customer, admin
    display_name = Column(Text, nullable=False, default='')

    # Matchmaking attributes
    categories = Column(JSON, nullable=False, default=list)
    industry = Column(Text, default='')
    audience_size = Column(BigInteger, nullable=False, default=0)

    verified = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    campaigns = relationship("Campaign", back_populates="brand")

    __table_args__ = (
        CheckConstraint("account_type IN ('brand', 'influencer', 'customer', 'admin')", name='accounts_type_check'),
        CheckConstraint("audience_size >= 0", name='accounts_audience_size_check'),
        Index('idx_accounts_type', 'account_type'),
        Index('idx_accounts_created_at', 'created_at'),
    )

# =============================================================================
# CAMPAIGNS
# =============================================================================

class Campaign(Base):
    """Brand campaigns that influencers are assigned to"""
    __tablename__ = "campaigns"

    id = Column(String(36), primary_key=True, default=_new_id)
    brand_id = Column(String(36), ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False, index=True)

    title = Column(String(255), nullable=False, default='')
    budget = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default='draft')  # draft, active, completed, cancelled

    # Campaign dates
    start_date = Column(DateTime(timezone=True))
    end_date = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    brand = relationship("Account", back_populates="campaigns")
    assignments = relationship("Assignment", back_populates="campaign", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("status IN ('draft', 'active', 'completed', 'cancelled')", name='campaigns_status_check'),
        CheckConstraint("budget >= 0", name='campaigns_budget_check'),
        Index('idx_campaigns_status', 'status'),
        Index('idx_campaigns_created_at', 'created_at'),
    )


class Assignment(Base):
    """An influencer's participation in a campaign"""
    __tablename__ = "assignments"

    id = Column(String(36), primary_key=True, default=_new_id)
    campaign_id = Column(String(36), ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False, index=True)
    influencer_id = Column(String(36), ForeignKey('accounts.id', ondelete='SET NULL'), nullable=True, index=True)

    status = Column(String(20), nullable=False, default='pending')  # pending, active, completed, declined

    # Performance counters
    engagement_rate = Column(Float, nullable=False, default=0)
    progress = Column(Float, nullable=False, default=0)
    reach = Column(BigInteger, nullable=False, default=0)
    clicks = Column(Integer, nullable=False, default=0)
    conversions = Column(Integer, nullable=False, default=0)
    revenue = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    campaign = relationship("Campaign", back_populates="assignments")

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'active', 'completed', 'declined')", name='assignments_status_check'),
        Index('idx_assignments_status', 'status'),
    )

# =============================================================================
# PAYMENTS
# =============================================================================

class Payment(Base):
    """Brand to influencer payments; only completed ones count as revenue"""
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=_new_id)
    campaign_id = Column(String(36), ForeignKey('campaigns.id', ondelete='SET NULL'), nullable=True, index=True)
    brand_id = Column(String(36), ForeignKey('accounts.id', ondelete='SET NULL'), nullable=True, index=True)
    influencer_id = Column(String(36), ForeignKey('accounts.id', ondelete='SET NULL'), nullable=True, index=True)

    amount = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default='pending')  # pending, completed, failed
    payment_method = Column(String(50), default='')
    payment_date = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'completed', 'failed')", name='payments_status_check'),
        CheckConstraint("amount >= 0", name='payments_amount_check'),
        Index('idx_payments_status', 'status'),
        Index('idx_payments_payment_date', 'payment_date'),
    )
