"""
@file_name: step_4_finalize_output.py
@author: NetMind.AI
@date: 2026-03-05
@description: Step 4 - Guardrail check and coercion of the final candidate

- 4.1 Pick the candidate (model content, or a tool output chosen by tool_use_behavior)
- 4.2 Output guardrails (active agent's + RunConfig's) on the raw candidate
- 4.3 Coerce against the active agent's output schema
- 4.4 Success -> Done; failure -> corrective retry item or OutputParseError
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator

from loguru import logger

from xyz_agent_runtime.config import LOG_PREVIEW_LENGTH
from xyz_agent_runtime.schema import (
    AssistantMessageItem,
    BaseRuntimeMessage,
    OutputRetryItem,
    ProgressMessage,
    ProgressStatus,
    RunItemMessage,
)
from xyz_agent_runtime.utils import OutputParseError, to_text, truncate_text

if TYPE_CHECKING:
    from .context import RunContext
    from ..guardrail_engine import GuardrailEngine
    from ..hook_manager import HookManager
    from ..output_coercer import OutputCoercer


async def step_4_finalize_output(
    ctx: "RunContext",
    guardrail_engine: "GuardrailEngine",
    output_coercer: "OutputCoercer",
    hook_manager: "HookManager",
) -> AsyncGenerator[BaseRuntimeMessage, None]:
    """
    Step 4: Finalize output

    Output:
        ctx.final_output / ctx.is_done on success

    Raises:
        GuardrailTripped / GuardrailExecutionError, OutputParseError (retries exhausted)
    """
    agent = ctx.current_agent
    schema = agent.get_output_schema()

    yield ProgressMessage(
        step="4",
        title="Final output",
        description=f"Validating final output of '{agent.name}' as {schema.name}",
        status=ProgressStatus.RUNNING,
    )

    # =========================================================================
    # 4.1 Candidate
    # =========================================================================
    if ctx.has_final_candidate:
        candidate = ctx.final_candidate
    else:
        candidate = ctx.processed.content
        item = ctx.add_item(AssistantMessageItem(content=candidate, **ctx.item_meta()))
        yield RunItemMessage(item=item)
    logger.debug(f"  📝 Candidate: {truncate_text(to_text(candidate), LOG_PREVIEW_LENGTH)}")

    # =========================================================================
    # 4.2 Output guardrails
    # =========================================================================
    guardrails = [*agent.output_guardrails, *ctx.run_config.output_guardrails]
    if guardrails:
        logger.info(f"🛡️ Step 4.2: Running {len(guardrails)} output guardrail(s)")
        records = await ctx.within_budget(
            guardrail_engine.run_output_guardrails(
                guardrails,
                agent,
                candidate,
                ctx.view(),
                parallel=ctx.run_config.parallel_guardrails,
            )
        )
        ctx.output_guardrail_results.extend(records)

    # =========================================================================
    # 4.3 Coerce
    # =========================================================================
    try:
        final_output = output_coercer.coerce(schema, candidate)
    except OutputParseError as e:
        # =====================================================================
        # 4.4a Corrective retry
        # =====================================================================
        ctx.state = ctx.state.record_output_failure(e.diagnostic)
        failures = ctx.state.consecutive_output_failures
        policy = ctx.run_config.output_retry_policy
        if failures > policy.max_retries:
            logger.error(f"❌ Final output still invalid after {policy.max_retries} corrective retr(ies)")
            e.context.setdefault("attempts", failures)
            raise

        logger.warning(f"  🔁 Asking '{agent.name}' for a corrected answer (attempt {failures}/{policy.max_retries})")
        item = ctx.add_item(OutputRetryItem(
            content=policy.corrective_message(schema.name, e.diagnostic),
            attempt=failures,
            **ctx.item_meta(),
        ))
        yield RunItemMessage(item=item)
        yield ProgressMessage(
            step="4",
            title="Final output",
            description=f"Output did not match {schema.name}, corrective retry {failures}/{policy.max_retries}",
            status=ProgressStatus.FAILED,
            details={"diagnostic": e.diagnostic},
        )
        return

    # =========================================================================
    # 4.4b Done
    # =========================================================================
    ctx.final_output = final_output
    ctx.is_done = True
    ctx.state = ctx.state.reset_output_failures().finalize(agent.name, final_output)
    await hook_manager.on_agent_end(ctx, agent, final_output)

    logger.success(f"✅ Step 4: Final output accepted from '{agent.name}'")
    yield ProgressMessage(
        step="4",
        title="Final output",
        description=f"Final output accepted ({type(final_output).__name__})",
        status=ProgressStatus.COMPLETED,
    )
