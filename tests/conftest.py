"""Pytest fixtures for testing"""

import pytest
from fastapi.testclient import TestClient

from rate_truth.api.main import create_app
from rate_truth.domain.models import LoanParameters
from rate_truth.domain.policy import EnginePolicy


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    app = create_app()
    return TestClient(app)


@pytest.fixture
def policy() -> EnginePolicy:
    """Default engine thresholds"""
    return EnginePolicy()


@pytest.fixture
def upfront_fee_loan() -> LoanParameters:
    """10,000 advertised, 1,500 withheld up front, 12 x 900 repayments"""
    return LoanParameters(principal=10000, term=12, payment=900, upfront_fees=1500)


@pytest.fixture
def fair_loan() -> LoanParameters:
    """12,000 over 12 months at roughly 1% per month"""
    return LoanParameters(principal=12000, term=12, payment=1066.19, upfront_fees=0)


@pytest.fixture
def upfront_fee_payload() -> dict:
    """Raw parameters as the AI collaborator sends them"""
    return {"principal": 10000, "term": 12, "payment": 900, "upfrontFees": 1500}
