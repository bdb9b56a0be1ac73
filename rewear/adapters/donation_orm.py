from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import registry, relationship

from rewear.adapters import event_listeners
from rewear.domain import delivery, donation, organization
from rewear.utils import time_util

metadata = MetaData()
mapper_registry = registry(metadata=metadata)

TIMESTAMP = DateTime(timezone=True)
JSONB = JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps():
    return (
        Column("create_dt", TIMESTAMP, default=time_util.current_time),
        Column("update_dt", TIMESTAMP, default=time_util.current_time, onupdate=time_util.current_time),
    )


organizations = Table(
    "rewear_organization",
    mapper_registry.metadata,
    Column("id", String(length=36), primary_key=True),
    *_timestamps(),
    Column("name", String(length=128), nullable=False),
    Column("user_id", String(length=50), nullable=True, index=True),
    Column("business_no", String(length=32), nullable=True),
    Column("status", String(length=20), nullable=False, index=True),
    Column("phone", String(length=32), nullable=True),
    Column("address", String(length=256), nullable=True),
    Column("detail_address", String(length=256), nullable=True),
    Column("postal_code", String(length=10), nullable=True),
)

donations = Table(
    "rewear_donation",
    mapper_registry.metadata,
    Column("id", String(length=36), primary_key=True),
    *_timestamps(),
    Column("donor_id", String(length=50), nullable=False, index=True),
    Column("organization_id", ForeignKey(organizations.name + ".id"), nullable=True, index=True),
    Column("match_type", String(length=20), nullable=False),
    Column("delivery_method", String(length=20), nullable=False),
    Column("donor_name", String(length=32), nullable=True),
    Column("contact", String(length=32), nullable=True),
    Column("donor_address", String(length=256), nullable=True),
    Column("is_anonymous", Boolean, nullable=False, default=False),
    Column("desired_date", Date, nullable=True),
    Column("memo", Text, nullable=True),
    Column("admin_decision", String(length=20), nullable=False, index=True),
    Column("status", String(length=20), nullable=False, index=True),
    Column("cancel_reason", Text, nullable=True),
    Column("version", Integer, nullable=False),
)

donation_items = Table(
    "rewear_donation_item",
    mapper_registry.metadata,
    Column("id", String(length=36), primary_key=True),
    *_timestamps(),
    Column(
        "donation_id",
        ForeignKey(donations.name + ".id", ondelete="cascade"),
        nullable=False,
        unique=True,
    ),
    Column("main_category", String(length=50), nullable=False),
    Column("detail_category", String(length=50), nullable=True),
    Column("gender_type", String(length=20), nullable=True),
    Column("size", String(length=5), nullable=True),
    Column("description", Text, nullable=True),
    Column("image_url", String(length=512), nullable=True),
    Column("image_urls", JSONB, nullable=False, default=list),
    Column("quantity", Integer, CheckConstraint("quantity>=1"), nullable=False, default=1),
)

deliveries = Table(
    "rewear_delivery",
    mapper_registry.metadata,
    Column("id", String(length=36), primary_key=True),
    *_timestamps(),
    # one delivery per donation
    Column(
        "donation_id",
        ForeignKey(donations.name + ".id", ondelete="cascade"),
        nullable=False,
        unique=True,
    ),
    Column("sender_name", String(length=32), nullable=True),
    Column("sender_phone", String(length=32), nullable=True),
    Column("sender_address", String(length=256), nullable=True),
    Column("sender_detail_address", String(length=256), nullable=True),
    Column("sender_postal_code", String(length=10), nullable=True),
    Column("receiver_name", String(length=128), nullable=True),
    Column("receiver_phone", String(length=32), nullable=True),
    Column("receiver_address", String(length=256), nullable=True),
    Column("receiver_detail_address", String(length=256), nullable=True),
    Column("receiver_postal_code", String(length=10), nullable=True),
    Column("carrier", String(length=50), nullable=True),
    Column("tracking_number", String(length=50), nullable=True),
    Column("status", String(length=20), nullable=False, index=True),
    Column("shipped_at", TIMESTAMP, nullable=True),
    Column("delivered_at", TIMESTAMP, nullable=True),
    Column("version", Integer, nullable=False),
)


def start_mappers():
    mapper_registry.map_imperatively(
        organization.Organization,
        organizations,
        eager_defaults=True,
    )

    mapper_registry.map_imperatively(
        donation.DonationItem,
        donation_items,
        eager_defaults=True,
    )

    mapper_registry.map_imperatively(
        delivery.Delivery,
        deliveries,
        properties={
            "donation": relationship(
                donation.Donation,
                back_populates="delivery",
                uselist=False,
                lazy="joined",
                innerjoin=True,
            )
        },
        eager_defaults=True,
        version_id_col=deliveries.c.version,
    )

    mapper_registry.map_imperatively(
        donation.Donation,
        donations,
        properties={
            "item": relationship(
                donation.DonationItem,
                uselist=False,
                lazy="joined",
                cascade="all, delete-orphan",
            ),
            "organization": relationship(
                organization.Organization,
                uselist=False,
                lazy="joined",
            ),
            "delivery": relationship(
                delivery.Delivery,
                back_populates="donation",
                uselist=False,
                lazy="joined",
                cascade="all, delete-orphan",
            ),
        },
        eager_defaults=True,
        version_id_col=donations.c.version,
    )

    event_listeners.register_listeners()
