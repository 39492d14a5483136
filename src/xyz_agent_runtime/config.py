"""
@file_name: config.py
@author: NetMind.AI
@date: 2026-03-02
@description: Global constants for the agent runtime

Global configuration, shared by all modules. Values that should be tunable per
deployment live in settings.py; values here are part of the runtime's contract
with the model (names, templates) and are not meant to change at runtime.
"""


# ==================== Turn Loop ====================

# Hard ceiling used when neither the caller nor settings provide max_turns
DEFAULT_MAX_TURNS = 10


# ==================== Handoffs ====================

# Handoffs are exposed to the model as pseudo-tools named "<prefix><agent>"
HANDOFF_TOOL_PREFIX = "transfer_to_"

HANDOFF_TOOL_DESCRIPTION_TEMPLATE = "Handoff to the {agent_name} agent to handle the request. {description}"

# Tool output recorded for the handoff call so the next agent sees a closed call
HANDOFF_TRANSFER_MESSAGE_TEMPLATE = '{{"assistant": "{agent_name}"}}'


# ==================== Tool Errors ====================

# Model-visible text for a tool error converted by the ToolErrorPolicy
TOOL_ERROR_MESSAGE_TEMPLATE = "Error running tool '{tool_name}': {error}"


# ==================== Output Schema ====================

# Non-object output types are wrapped as {"response": <value>} for the model
OUTPUT_WRAPPER_KEY = "response"

# Corrective message appended to history when a final output fails validation
OUTPUT_RETRY_MESSAGE_TEMPLATE = (
    "Your previous final answer could not be parsed as {output_name}. "
    "Fix the following problems and answer again with valid JSON only.\n\n{diagnostic}"
)


# ==================== Log Previews ====================

LOG_PREVIEW_LENGTH = 200
