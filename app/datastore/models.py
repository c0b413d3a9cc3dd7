"""Database models for the data store (construction business entities)."""

from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.core.database import DSBase as Base


class Client(Base):
    """Customer a project is built for."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    client_name = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.now)

    projects = relationship("Project", back_populates="client")


class Payee(Base):
    """Vendor, subcontractor or internal worker that receives payments."""

    __tablename__ = "payees"

    id = Column(Integer, primary_key=True, index=True)
    payee_name = Column(String, nullable=False, index=True)
    employee_number = Column(String, nullable=True)  # internal workers only
    hourly_rate = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.now)


class Project(Base):
    """Project with its denormalized financial rollups."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    project_number = Column(String, nullable=False, unique=True, index=True)
    project_name = Column(String, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True)
    status = Column(String, nullable=False, default="estimating")

    contracted_amount = Column(Float, nullable=True)
    estimate_cost = Column(Float, nullable=True)
    total_expenses = Column(Float, nullable=True)
    current_margin = Column(Float, nullable=True)
    margin_percentage = Column(Float, nullable=True)
    cost_variance = Column(Float, nullable=True)
    cost_variance_percent = Column(Float, nullable=True)
    budget_utilization_percent = Column(Float, nullable=True)
    contingency_amount = Column(Float, nullable=True)
    contingency_remaining = Column(Float, nullable=True)
    contingency_utilization_percent = Column(Float, nullable=True)
    change_order_count = Column(Integer, nullable=True, default=0)
    change_order_revenue = Column(Float, nullable=True)
    change_order_cost = Column(Float, nullable=True)

    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    has_labor_internal = Column(Boolean, nullable=True)
    has_subcontractors = Column(Boolean, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    client = relationship("Client", back_populates="projects")
    estimates = relationship("Estimate", back_populates="project")
    expenses = relationship("Expense", back_populates="project")


class Estimate(Base):
    __tablename__ = "estimates"

    id = Column(Integer, primary_key=True, index=True)
    estimate_number = Column(String, nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    status = Column(String, nullable=False, default="draft")
    is_current_version = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.now)

    project = relationship("Project", back_populates="estimates")
    line_items = relationship("EstimateLineItem", back_populates="estimate", cascade="all, delete-orphan")


class EstimateLineItem(Base):
    __tablename__ = "estimate_line_items"

    id = Column(Integer, primary_key=True, index=True)
    estimate_id = Column(Integer, ForeignKey("estimates.id"), nullable=False)
    category = Column(String, nullable=True)  # labor_internal, subcontractors, materials, ...
    description = Column(Text, nullable=True)
    quantity = Column(Float, nullable=True)
    price_per_unit = Column(Float, nullable=True)
    total = Column(Float, nullable=True)
    cost_per_unit = Column(Float, nullable=True)
    total_cost = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    estimate = relationship("Estimate", back_populates="line_items")


class Expense(Base):
    """Money spent against a project. Internal labor rows double as time entries."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    payee_id = Column(Integer, ForeignKey("payees.id"), nullable=True)
    category = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    amount = Column(Float, nullable=True)
    expense_date = Column(Date, nullable=True)
    hours = Column(Float, nullable=True)
    approval_status = Column(String, nullable=True)
    start_time = Column(String, nullable=True)
    end_time = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    project = relationship("Project", back_populates="expenses")
    payee = relationship("Payee")


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    quote_number = Column(String, nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    payee_id = Column(Integer, ForeignKey("payees.id"), nullable=True)
    estimate_id = Column(Integer, ForeignKey("estimates.id"), nullable=True)
    status = Column(String, nullable=False, default="pending")
    total_amount = Column(Float, nullable=True)
    date_received = Column(Date, nullable=True)
    date_expires = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    project = relationship("Project")
    payee = relationship("Payee")
