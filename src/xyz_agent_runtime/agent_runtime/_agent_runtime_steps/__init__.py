"""
@file_name: __init__.py
@author: NetMind.AI
@date: 2026-03-05
@description: Runner steps module exports

Each step of the turn loop is an independent async generator, keeping
Runner.stream() a readable sequence of step blocks.

Module structure:
    _agent_runtime_steps/
    ├── __init__.py                   # This file - unified exports
    ├── context.py                    # RunContext / RunContextView
    ├── step_0_initialize.py          # Step 0: Clock + history seeding
    ├── step_1_input_guardrails.py    # Step 1: Input guardrails (once per run)
    ├── step_2_model_call.py          # Step 2: One model round-trip
    ├── step_3_execute_tools.py       # Step 3: Tool calls of the turn
    ├── step_3_handoff.py             # Step 3: Handoff of the turn
    └── step_4_finalize_output.py     # Step 4: Output guardrails + coercion
"""

# Context class
from .context import RunContext, RunContextView

# Step 0 - Initialization
from .step_0_initialize import step_0_initialize

# Step 1 - Input guardrails
from .step_1_input_guardrails import step_1_input_guardrails

# Step 2 - Model call
from .step_2_model_call import step_2_model_call

# Step 3 series - Tools and handoff
from .step_3_execute_tools import step_3_execute_tools
from .step_3_handoff import step_3_handoff

# Step 4 - Final output
from .step_4_finalize_output import step_4_finalize_output


__all__ = [
    # Context
    "RunContext",
    "RunContextView",

    # Steps
    "step_0_initialize",
    "step_1_input_guardrails",
    "step_2_model_call",
    "step_3_execute_tools",
    "step_3_handoff",
    "step_4_finalize_output",
]
