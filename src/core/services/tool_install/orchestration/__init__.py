"""
L5 Orchestration — ``__init__.py`` re-exports top-level coordinators.

These are the entry points that external code calls.
"""

from src.core.services.tool_install.orchestration.orchestrator import (  # noqa: F401
    acquire_tool,
    prepare_directories,
    run_save_phase,
    save_caches,
)
