"""SQLAlchemy database models."""
from datetime import datetime

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    Numeric,
    DateTime,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

# Base class for all models
Base = declarative_base()


class Organization(Base):
    """
    Organization (company) owning staff members and offerings.

    ``id`` is the store's internal identifier. ``code`` is the external
    identifier callers use when attaching staff and offerings.
    """

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column("company_id", Integer, unique=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    email = Column(String(255))
    phone = Column(String(20))
    address = Column(Text)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships (no ORM cascade: deletion semantics belong to the store)
    staff = relationship("Staff", back_populates="organization", passive_deletes=True)
    offerings = relationship("Offering", back_populates="organization", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("company_id > 0", name="positive_company_code"),
    )

    def __repr__(self) -> str:
        return f"<Organization {self.code}: {self.name}>"


class Staff(Base):
    """Staff member (employee) belonging to an organization."""

    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20))
    organization_id = Column("company_id", Integer, ForeignKey("companies.id"), nullable=False, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    organization = relationship("Organization", back_populates="staff")

    @property
    def organization_code(self):
        return self.organization.code if self.organization is not None else None

    def __repr__(self) -> str:
        return f"<Staff {self.id}: {self.name}>"


class Offering(Base):
    """Bookable service with a price and a duration in minutes."""

    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    duration = Column(Integer, nullable=False)
    category = Column(String(100), index=True)
    organization_id = Column("company_id", Integer, ForeignKey("companies.id"), nullable=False, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    organization = relationship("Organization", back_populates="offerings")

    __table_args__ = (
        CheckConstraint("price > 0", name="positive_price"),
        CheckConstraint("duration > 0", name="positive_duration"),
    )

    @property
    def organization_code(self):
        return self.organization.code if self.organization is not None else None

    def __repr__(self) -> str:
        return f"<Offering {self.id}: {self.name}>"


class AuthorizedPrincipal(Base):
    """
    Requester tokens permitted to mutate an organization's offerings.

    Maintained outside this service; read-only here.
    """

    __tablename__ = "authorized_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone_number = Column(String(20), nullable=False, index=True)
    organization_id = Column("company_id", Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<AuthorizedPrincipal {self.phone_number} -> {self.organization_id}>"
