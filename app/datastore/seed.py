"""Demo rows for the data store."""

import logging
from datetime import date
from typing import Dict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.datastore.models import Client, Estimate, EstimateLineItem, Expense, Payee, Project, Quote

logger = logging.getLogger(__name__)


def seed_sample_data(session: Session) -> Dict[str, int]:
    """Insert a small, consistent data set unless projects already exist.

    Returns the number of rows added per table.
    """
    if session.execute(select(func.count(Project.id))).scalar():
        logger.info("Data store already has projects, skipping seed")
        return {}

    acme = Client(client_name="Acme Builders")
    harbor = Client(client_name="Harbor Homes")

    lumber = Payee(payee_name="Northside Lumber")
    electric = Payee(payee_name="Bright Electric")
    maria = Payee(payee_name="Maria Lopez", employee_number="E-101", hourly_rate=45.0)
    sam = Payee(payee_name="Sam Chen", employee_number="E-102", hourly_rate=38.5)

    kitchen = Project(
        project_number="P-1001",
        project_name="Kitchen Remodel",
        client=acme,
        status="in_progress",
        contracted_amount=85000.0,
        estimate_cost=62000.0,
        total_expenses=48250.0,
        current_margin=36750.0,
        margin_percentage=43.2,
        cost_variance=-13750.0,
        cost_variance_percent=-22.2,
        budget_utilization_percent=77.8,
        contingency_amount=5000.0,
        contingency_remaining=3200.0,
        contingency_utilization_percent=36.0,
        change_order_count=2,
        change_order_revenue=6500.0,
        change_order_cost=4100.0,
        start_date=date(2024, 1, 8),
        end_date=date(2024, 4, 30),
        has_labor_internal=True,
        has_subcontractors=True,
    )
    deck = Project(
        project_number="P-1002",
        project_name="Deck Addition",
        client=harbor,
        status="approved",
        contracted_amount=24000.0,
        estimate_cost=18500.0,
        total_expenses=None,
        change_order_count=0,
        start_date=date(2024, 3, 1),
        has_labor_internal=True,
        has_subcontractors=False,
    )
    basement = Project(
        project_number="P-1003",
        project_name="Basement Finish",
        client=acme,
        status="complete",
        contracted_amount=52000.0,
        estimate_cost=41000.0,
        total_expenses=44100.0,
        current_margin=7900.0,
        margin_percentage=15.2,
        cost_variance=3100.0,
        cost_variance_percent=7.6,
        budget_utilization_percent=107.6,
        change_order_count=1,
        change_order_revenue=2500.0,
        change_order_cost=2900.0,
        start_date=date(2023, 9, 11),
        end_date=date(2023, 12, 15),
        has_labor_internal=False,
        has_subcontractors=True,
    )

    estimate = Estimate(estimate_number="EST-1001-1", project=kitchen, status="approved")
    line_items = [
        EstimateLineItem(estimate=estimate, category="labor_internal", description="Demolition",
                         quantity=40, price_per_unit=75.0, total=3000.0, cost_per_unit=45.0, total_cost=1800.0),
        EstimateLineItem(estimate=estimate, category="subcontractors", description="Electrical rough-in",
                         quantity=1, price_per_unit=7800.0, total=7800.0, cost_per_unit=6200.0, total_cost=6200.0),
    ]

    expenses = [
        Expense(project=kitchen, payee=lumber, category="materials", description="Cabinet lumber",
                amount=12850.0, expense_date=date(2024, 1, 15), approval_status="approved"),
        Expense(project=kitchen, payee=electric, category="subcontractors", description="Rough-in",
                amount=6200.0, expense_date=date(2024, 2, 2), approval_status="pending"),
        Expense(project=kitchen, payee=maria, category="labor_internal", description="Demolition",
                amount=360.0, hours=8, expense_date=date(2024, 1, 9), approval_status="approved",
                start_time="07:00", end_time="15:00"),
        Expense(project=deck, payee=sam, category="labor_internal", description="Framing",
                amount=308.0, hours=8, expense_date=date(2024, 3, 4), approval_status="pending",
                start_time="08:00", end_time="16:00"),
        Expense(project=None, payee=maria, category="management", description="Scheduling",
                amount=180.0, hours=4, expense_date=date(2024, 3, 5), approval_status="approved"),
    ]

    quotes = [
        Quote(quote_number="Q-2001", project=kitchen, payee=electric, status="accepted",
              total_amount=6200.0, date_received=date(2024, 1, 3), date_expires=date(2024, 2, 3)),
        Quote(quote_number="Q-2002", project=deck, payee=lumber, status="pending",
              total_amount=4350.0, date_received=date(2024, 2, 20), date_expires=None),
    ]

    session.add_all([acme, harbor, lumber, electric, maria, sam, kitchen, deck, basement, estimate,
                     *line_items, *expenses, *quotes])
    session.commit()

    counts = {
        "clients": 2,
        "payees": 4,
        "projects": 3,
        "estimates": 1,
        "estimate_line_items": len(line_items),
        "expenses": len(expenses),
        "quotes": len(quotes),
    }
    logger.info("Seeded data store: %s", counts)
    return counts
