"""
Pytest configuration for django-filtero tests.
"""

import os
import sys
from datetime import datetime
from decimal import Decimal

import pytest

# Add the package root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def pytest_configure():
    """Configure Django settings before tests run."""
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            SECRET_KEY="test-secret-key",
            DEBUG=True,
            INSTALLED_APPS=[
                "django.contrib.contenttypes",
                "django_filtero",
                "django_filtero.tests.testapp",
            ],
            DATABASES={
                "default": {
                    "ENGINE": "django.db.backends.sqlite3",
                    "NAME": ":memory:",
                }
            },
            DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
            USE_TZ=False,
            DJANGO_FILTERO={
                "SEARCH_KEY": "search",
                "SORT_KEY": "sort",
                "RANGE_KEY": "range",
                "INCLUDE_EQUAL_IN_RANGE_FILTER": True,
            },
        )

    import django

    django.setup()


_tables_created = False


def _create_tables():
    global _tables_created
    if _tables_created:
        return

    from django.db import connection

    from django_filtero.tests.testapp.models import Country, Currency, Payment, PaymentNote, Recipient, Tag

    with connection.schema_editor() as editor:
        for model in (Country, Currency, Recipient, Tag, Payment, PaymentNote):
            editor.create_model(model)
    _tables_created = True


@pytest.fixture
def db():
    """Create the test tables once and roll back every test's writes."""
    from django.db import transaction

    _create_tables()
    with transaction.atomic():
        yield
        transaction.set_rollback(True)


@pytest.fixture
def payments(db):
    """
    Three recipients and four payments:

    - P1 paid, 100.00 GEL, fees 5 + 1, Ana Beridze (Tbilisi), 2024-01-10
    - P2 pending, 250.00 USD, fees 2 + 2, John Doe (Batumi), 2024-02-15
    - P3 failed, 75.50 USD, fees 10 + 0, Ana Beridze (Tbilisi), 2024-03-01
    - P4 paid, 500.00 EUR, fees 1 + 1, no recipient, 2024-03-20
    """
    from django_filtero.tests.testapp.models import Country, Currency, Payment, PaymentNote, Recipient

    georgia = Country.objects.create(name="Georgia")
    gel = Currency.objects.create(code="GEL")
    usd = Currency.objects.create(code="USD")
    eur = Currency.objects.create(code="EUR")

    ana = Recipient.objects.create(
        first_name="Ana",
        last_name="Beridze",
        email="ana@example.com",
        city="Tbilisi",
        country=georgia,
        created_at=datetime(2023, 6, 1, 9, 0),
    )
    john = Recipient.objects.create(
        first_name="John",
        last_name="Doe",
        email="john@example.com",
        city="Batumi",
        created_at=datetime(2024, 1, 20, 18, 30),
    )

    p1 = Payment.objects.create(
        status="paid",
        provider_transaction_id="TX-1001",
        amount=Decimal("100.00"),
        estimated_provider_fee=Decimal("5"),
        estimated_platform_fee=Decimal("1"),
        currency=gel,
        recipient=ana,
        created_at=datetime(2024, 1, 10, 12, 0),
    )
    p2 = Payment.objects.create(
        status="pending",
        provider_transaction_id="TX-1002",
        amount=Decimal("250.00"),
        estimated_provider_fee=Decimal("2"),
        estimated_platform_fee=Decimal("2"),
        currency=usd,
        recipient=john,
        created_at=datetime(2024, 2, 15, 23, 59, 30),
    )
    p3 = Payment.objects.create(
        status="failed",
        provider_transaction_id="TX-1003",
        amount=Decimal("75.50"),
        estimated_provider_fee=Decimal("10"),
        estimated_platform_fee=Decimal("0"),
        currency=usd,
        recipient=ana,
        created_at=datetime(2024, 3, 1, 0, 0),
    )
    p4 = Payment.objects.create(
        status="paid",
        provider_transaction_id="TX-1004",
        amount=Decimal("500.00"),
        estimated_provider_fee=Decimal("1"),
        estimated_platform_fee=Decimal("1"),
        currency=eur,
        recipient=None,
        created_at=datetime(2024, 3, 20, 8, 15),
    )

    PaymentNote.objects.create(payment=p1, body="Refund requested")
    PaymentNote.objects.create(payment=p1, body="Customer called")
    PaymentNote.objects.create(payment=p2, body="Awaiting provider")

    return {"p1": p1, "p2": p2, "p3": p3, "p4": p4, "ana": ana, "john": john}
