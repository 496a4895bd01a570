"""
Pytest configuration and fixtures for testing.

This module provides:
- Test personas per role (loaded from personas.yaml)
- Isolated cart, session and sales backend fixtures
- A checkout orchestrator wired to an in-memory backend
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

import pytest
import yaml

# Set test environment before importing app modules
os.environ["POS_ENVIRONMENT"] = "test"
os.environ["POS_TAX_RATE"] = "0"

from pharmacy_pos.config import PosConfig
from pharmacy_pos.core.audit import AuditService
from pharmacy_pos.core.cart import Cart
from pharmacy_pos.core.checkout import CheckoutOrchestrator, PosSession
from pharmacy_pos.db import MemorySalesBackend
from pharmacy_pos.models import AuthUser, Customer


# =============================================================================
# PERSONAS
# =============================================================================

PERSONAS_FILE = Path(__file__).parent / "personas.yaml"


def _load_personas() -> dict:
    """Load personas from YAML file."""
    if not PERSONAS_FILE.exists():
        raise FileNotFoundError(f"personas.yaml not found at {PERSONAS_FILE}")

    with open(PERSONAS_FILE) as f:
        return yaml.safe_load(f)


@dataclass
class PersonaRegistry:
    """Test users keyed by persona id."""
    users: dict[str, AuthUser]

    def get(self, persona_id: str) -> AuthUser:
        if persona_id not in self.users:
            raise KeyError(f"Unknown persona: {persona_id}")
        return self.users[persona_id]

    def with_role(self, role: str) -> list[AuthUser]:
        return [user for user in self.users.values() if user.role == role]


def _build_registry() -> PersonaRegistry:
    data = _load_personas()
    users = {}
    for persona in data.get("personas", []):
        created_by = persona.get("created_by")
        users[persona["id"]] = AuthUser(
            id=f"test-{persona['id']}",
            username=persona["username"],
            full_name=persona.get("full_name"),
            email=persona.get("email"),
            role=persona["role"],
            is_active=persona.get("is_active", True),
            created_by=f"test-{created_by}" if created_by else None,
        )
    return PersonaRegistry(users=users)


@pytest.fixture(scope="session")
def personas() -> PersonaRegistry:
    """All test personas."""
    return _build_registry()


@pytest.fixture
def super_admin(personas: PersonaRegistry) -> AuthUser:
    return personas.get("owner")


@pytest.fixture
def admin(personas: PersonaRegistry) -> AuthUser:
    return personas.get("admin_1")


@pytest.fixture
def manager(personas: PersonaRegistry) -> AuthUser:
    return personas.get("manager_1")


@pytest.fixture
def pharmacist(personas: PersonaRegistry) -> AuthUser:
    return personas.get("pharmacist_1")


@pytest.fixture
def cashier(personas: PersonaRegistry) -> AuthUser:
    return personas.get("cashier_1")


# =============================================================================
# CONFIG
# =============================================================================


@pytest.fixture
def config() -> PosConfig:
    """Explicit config so tests never depend on the process environment."""
    return PosConfig(
        environment="test",
        tax_rate=Decimal("5"),
        currency="USD",
        invoice_prefix="INV",
        default_payment_method="cash",
        audit_enabled=True,
    )


# =============================================================================
# CART & SESSION FIXTURES
# =============================================================================


@pytest.fixture
def paracetamol() -> dict:
    return {
        "product_id": "prod-paracetamol",
        "name": "Paracetamol 500mg",
        "price": "4.50",
        "quantity": 1,
        "barcode": "8901234567890",
        "batch_number": "B-2291",
        "expiry_date": "2027-03-31",
    }


@pytest.fixture
def vitamin_c() -> dict:
    return {
        "product_id": "prod-vitamin-c",
        "name": "Vitamin C 1000mg",
        "price": "12.00",
        "quantity": 2,
    }


@pytest.fixture
def hundred_line() -> dict:
    """A single line worth exactly 100."""
    return {
        "product_id": "prod-glucometer",
        "name": "Glucometer",
        "price": "100.00",
        "quantity": 1,
    }


@pytest.fixture
def cart() -> Cart:
    return Cart()


@pytest.fixture
def session(config: PosConfig) -> PosSession:
    return PosSession(config=config)


@pytest.fixture
def loyal_customer() -> Customer:
    return Customer(id="cust-1", name="Jane Doe", phone="555-0101", loyalty_points=50)


# =============================================================================
# CHECKOUT FIXTURES
# =============================================================================


@pytest.fixture
def backend() -> MemorySalesBackend:
    return MemorySalesBackend()


@pytest.fixture
def audit() -> AuditService:
    return AuditService(enabled=True)


@pytest.fixture
def orchestrator(backend: MemorySalesBackend, audit: AuditService, config: PosConfig) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(backend=backend, audit=audit, config=config)
