"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules
(EmailAddress VO, password length, non-negative prices) and match the field
names expected by the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()


# ---------- Users ----------


def unique_username() -> str:
    """Usernames like 'lt-jdoe-a1b2c3d4', unique across a run, within 50 chars."""
    return f"lt-{fake.user_name()[:20]}-{uuid.uuid4().hex[:8]}"


def valid_email(username: str) -> str:
    """Emails that pass EmailAddress VO validation: one @, dotted domain, no spaces."""
    return f"{username}@{fake.free_email_domain()}"


def sign_up_data() -> dict:
    username = unique_username()
    return {
        "username": username,
        "email": valid_email(username),
        "password": fake.password(length=12),
    }


def address_data() -> dict:
    return {
        "label": random.choice(["Home", "Work", "Other"]),
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "postal_code": fake.postcode()[:20],
        "country": fake.country_code(),
    }


# ---------- Items ----------


def item_data() -> dict:
    return {
        "title": fake.catch_phrase()[:200],
        "content": fake.paragraph(nb_sentences=3),
        "price": round(random.uniform(1.0, 500.0), 2),
        "media_refs": [f"items/{uuid.uuid4().hex[:12]}/cover.jpg"],
    }


def stock_level(low: int = 1, high: int = 20) -> int:
    return random.randint(low, high)
