"""
Tool installation service — cache-aware acquisition of utoo.

Layers (each module depends only on layers above it):

    data           constants
    domain         errors, normalization, cache keys, tier planning (pure)
    detection      executable version probe
    execution      subprocess runner, npm install
    orchestration  acquire / save coordinators

Entry points live in ``orchestration``::

    from src.core.services.tool_install.orchestration import acquire_tool, run_save_phase
"""
