"""
FastAPI Dependencies.

Provides the process-wide orchestrator to the route handlers.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from core.settings import AppSettings, get_app_settings  # noqa: E402
from orchestration import Orchestrator, create_default_orchestrator  # noqa: E402

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_orchestrator: Optional[Orchestrator] = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_settings() -> AppSettings:
    return get_app_settings()


async def get_orchestrator() -> Orchestrator:
    """Return the shared orchestrator, wiring it on first use."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = await create_default_orchestrator(get_app_settings())
        logger.info("Created Orchestrator instance")
    return _orchestrator


def current_orchestrator() -> Optional[Orchestrator]:
    """The orchestrator if one was already created, without creating it."""
    return _orchestrator


# =============================================================================
# RESET (for testing)
# =============================================================================

def reset_dependencies():
    global _orchestrator
    _orchestrator = None
    logger.info("Dependencies reset")
