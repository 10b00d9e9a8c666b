"""SQLAlchemy models for ledgerkit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    JSON,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Tenant(Base):
    """Tenant model."""

    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    # Plain references: charts and fiscal years already point back at the tenant
    chart_of_accounts_id = Column(Integer, nullable=True)
    active_fiscal_year_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class ChartOfAccounts(Base):
    """Chart of accounts model. Templates have no tenant."""

    __tablename__ = "charts_of_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True)
    retained_earnings_account_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    groups = relationship(
        "AccountGroup",
        back_populates="chart",
        cascade="all, delete-orphan",
        order_by="AccountGroup.position",
    )


class AccountGroup(Base):
    """Account group model."""

    __tablename__ = "account_groups"

    id = Column(Integer, primary_key=True)
    chart_id = Column(Integer, ForeignKey("charts_of_accounts.id"), nullable=False)
    name = Column(String, nullable=False)
    position = Column(Integer, default=0, nullable=False)

    # Relationships
    chart = relationship("ChartOfAccounts", back_populates="groups")
    accounts = relationship(
        "Account",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="Account.number",
    )


class Account(Base):
    """Ledger account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, ForeignKey("account_groups.id"), nullable=False)
    number = Column(String, nullable=False)
    name = Column(String, nullable=False)
    main_type = Column(String, nullable=False)
    opening_balance = Column(Numeric(14, 2), default=0, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    group = relationship("AccountGroup", back_populates="accounts")


class FiscalYear(Base):
    """Fiscal year model."""

    __tablename__ = "fiscal_years"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    name = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_closed = Column(Boolean, default=False, nullable=False)
    carry_forward_source_fiscal_year_id = Column(
        Integer, ForeignKey("fiscal_years.id"), nullable=True
    )
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_tenant_fiscal_year_name"),)


class JournalEntry(Base):
    """Journal entry model."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    fiscal_year_id = Column(Integer, ForeignKey("fiscal_years.id"), nullable=True)
    entry_number = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    posted = Column(Boolean, default=False, nullable=False)
    is_carry_forward = Column(Boolean, default=False, nullable=False)
    attachments = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # Entry numbers are sequential per tenant
    __table_args__ = (UniqueConstraint("tenant_id", "entry_number", name="uq_tenant_entry_number"),)

    # Relationships
    lines = relationship(
        "JournalEntryLine",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalEntryLine.position",
    )


class JournalEntryLine(Base):
    """Journal entry line model.

    account_id is not a foreign key. Dangling references are reported by the
    balance engine rather than rejected by storage.
    """

    __tablename__ = "journal_entry_lines"

    id = Column(Integer, primary_key=True)
    entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    position = Column(Integer, default=0, nullable=False)
    account_id = Column(Integer, nullable=False)
    debit = Column(Numeric(14, 2), nullable=True)
    credit = Column(Numeric(14, 2), nullable=True)

    # Relationships
    entry = relationship("JournalEntry", back_populates="lines")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
