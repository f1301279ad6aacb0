"""Pytest configuration and fixtures for dupcheck tests."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dupcheck.audit import MemoryAuditStore
from dupcheck.config import DedupConfig
from dupcheck.dedup import DuplicateDetector
from dupcheck.models import TestStep
from dupcheck.sources import MemoryCandidateSource, ScriptRecord, TestCaseRecord

PROJECT_ID = "project-123"

LOGIN_SCRIPT = """
  test('user can login', async ({ page }) => {
    await page.goto('/login');
    await page.fill('#username', 'testuser');
    await page.fill('#password', 'password123');
    await page.click('button[type="submit"]');
    await expect(page).toHaveURL('/dashboard');
  });
"""

CHECKOUT_SCRIPT = """
  test('guest can check out', async ({ page }) => {
    await page.goto('/cart');
    await page.click('text=Checkout');
    await page.fill('#email', 'guest@example.com');
    await page.click('button#pay');
    await expect(page.locator('.order-confirmation')).toBeVisible();
  });
"""


@pytest.fixture
def login_test_case():
    """Stored test case used as the main duplicate candidate."""
    return TestCaseRecord(
        id="tc-123",
        title="Test user login",
        description="Verify user can log in with valid credentials",
        steps=(TestStep(action="Navigate to login", expected="Login page displayed"),),
        expected_result="User is logged in",
    )


@pytest.fixture
def login_script():
    return ScriptRecord(id="script-123", name="login.spec.ts", code=LOGIN_SCRIPT, path="tests/login.spec.ts")


@pytest.fixture
def checkout_script():
    return ScriptRecord(id="script-456", name="checkout.spec.ts", code=CHECKOUT_SCRIPT, path="tests/checkout.spec.ts")


@pytest.fixture
def source():
    """Empty in-memory candidate source."""
    return MemoryCandidateSource()


@pytest_asyncio.fixture
async def audit_store():
    store = MemoryAuditStore(name="test_memory")
    yield store
    await store.close()


@pytest.fixture
def dedup_config():
    return DedupConfig()


@pytest.fixture
def detector(source, audit_store, dedup_config):
    return DuplicateDetector(source, audit_store, config=dedup_config)
