from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    Boolean,
    JSON,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


# --- Fee configuration ---

class Fee(Base):
    """
    One merchant-configured fee rule.

    `fee_id` is the public, stable identifier ("fee_XXXXXXXX") used by the
    checkout surfaces and order records. It is generated once and never
    regenerated on edit. `order` is rewritten from list position on every save.
    """
    __tablename__ = "fees"

    id = Column(Integer, primary_key=True, index=True)
    fee_id = Column(String, unique=True, nullable=False, index=True)

    internal_name = Column(String, nullable=False)
    public_name = Column(String, nullable=False)
    price = Column(Numeric(12, 4), nullable=False, default=0)  # tax-inclusive
    tax_class = Column(String, nullable=False, default="")     # "" = standard rate

    type = Column(String, nullable=False, default="required")  # required/optional
    checkbox_text = Column(String, nullable=False, default="")
    help_text = Column(String, nullable=False, default="")

    condition = Column(String, nullable=False, default="always")  # always/minimum
    condition_minimum = Column(Numeric(12, 4), nullable=False, default=0)

    order = Column("sort_order", Integer, nullable=False, default=0, index=True)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


# --- Tax rate table ---

class TaxRate(Base):
    """A single rate attached to a tax class. Rates of one class are summed."""
    __tablename__ = "tax_rates"

    id = Column(Integer, primary_key=True, index=True)
    tax_class = Column(String, nullable=False, default="", index=True)
    name = Column(String, nullable=False, default="")
    rate = Column(Numeric(8, 4), nullable=False)  # percentage, 21.0 = 21%
    priority = Column(Integer, nullable=False, default=1)
    active = Column(Boolean, nullable=False, default=True)


# --- Cart session model for persistence ---

class CartSession(Base):
    """
    Persists cart sessions so optional-fee selections survive server restarts.
    """
    __tablename__ = "cart_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String, unique=True, nullable=False, index=True)  # UUID string

    # Small key/value payload, e.g. {"selected_fees": ["fee_abc"]}
    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


# --- Orders and applied fee records ---

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    status = Column(String, nullable=False, default="placed", index=True)
    session_id = Column(String, nullable=True, index=True)
    customer_name = Column(String, nullable=True)
    customer_email = Column(String, nullable=True)
    subtotal = Column(Numeric(12, 4), nullable=False, default=0)
    fee_total = Column(Numeric(18, 8), nullable=False, default=0)  # sum of net fee amounts
    fees_recorded = Column(Boolean, nullable=False, default=False)  # applied fees written
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    applied_fees = relationship(
        "AppliedFee",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="AppliedFee.position",
    )

    __table_args__ = (
        Index("ix_orders_status_created_at", "status", "created_at"),
    )


class AppliedFee(Base):
    """
    Write-once record that a fee was applied to an order.

    Names, price and tax class are copied from the fee at order time so that
    later edits to the fee configuration never change a past order.
    """
    __tablename__ = "order_applied_fees"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    fee_id = Column(String, nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    internal_name = Column(String, nullable=False)
    public_name = Column(String, nullable=False)
    price = Column(Numeric(12, 4), nullable=False)
    net_amount = Column(Numeric(18, 8), nullable=False)
    tax_class = Column(String, nullable=False, default="")
    fee_type = Column(String, nullable=False, default="required")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="applied_fees")

    __table_args__ = (
        UniqueConstraint("order_id", "fee_id", name="uix_order_applied_fee"),
    )
