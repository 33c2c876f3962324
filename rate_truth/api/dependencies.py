"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from rate_truth.config import build_policy, settings
from rate_truth.domain.policy import EnginePolicy


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_engine_policy() -> EnginePolicy:
    """Provide engine thresholds built from current settings"""
    return build_policy(settings)
