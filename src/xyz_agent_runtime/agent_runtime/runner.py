"""
@file_name: runner.py
@author: NetMind.AI
@date: 2026-03-05
@description: Agent run orchestrator

Runner is essentially an Orchestrator, responsible for driving one run of the
turn loop from the starting agent to a typed RunResult.
It uses various services through dependency injection, keeping the orchestration logic clean.

Architecture:
- Runner is only responsible for flow orchestration (step sequence control)
- Specific work is delegated to injected services:
    - ResponseProcessor: Response classification
    - ToolInvoker: Concurrent tool dispatch
    - HandoffResolver: Agent swaps
    - GuardrailEngine: Input / output guardrails
    - OutputCoercer: Final output validation
    - HookManager: Lifecycle hooks
    - LoggingService: Per-run log file
- The concrete implementation of each Step is in the _agent_runtime_steps/ directory

State machine:
    Start -> AwaitingModel -> {ExecutingTools | Handoff | GuardrailCheck} -> AwaitingModel | Done | Failed
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Any, AsyncGenerator, List, Optional, Union

from loguru import logger

from xyz_agent_runtime.agent_definition import Agent, RunHooks
from xyz_agent_runtime.config import LOG_PREVIEW_LENGTH
from xyz_agent_runtime.schema import BaseRuntimeMessage, RunItem, RunResult
from xyz_agent_runtime.settings import settings
from xyz_agent_runtime.utils import AgentRuntimeError, ConfigurationError, to_text, truncate_text

# Extracted services
from xyz_agent_runtime.agent_runtime.guardrail_engine import GuardrailEngine
from xyz_agent_runtime.agent_runtime.handoff_resolver import HandoffResolver
from xyz_agent_runtime.agent_runtime.hook_manager import HookManager
from xyz_agent_runtime.agent_runtime.logging_service import LoggingService
from xyz_agent_runtime.agent_runtime.output_coercer import OutputCoercer
from xyz_agent_runtime.agent_runtime.response_processor import ResponseProcessor, ResponseType
from xyz_agent_runtime.agent_runtime.run_config import RunConfig
from xyz_agent_runtime.agent_runtime.tool_invoker import ToolInvoker

# Step functions
from xyz_agent_runtime.agent_runtime._agent_runtime_steps import (
    RunContext,
    step_0_initialize,
    step_1_input_guardrails,
    step_2_model_call,
    step_3_execute_tools,
    step_3_handoff,
    step_4_finalize_output,
)

RunInput = Union[str, List[RunItem]]
StreamEvent = Union[BaseRuntimeMessage, RunResult]


class Runner:
    """
    Agent run orchestrator

    Usage:
        # One-shot helpers (a fresh Runner per call)
        >>> result = await Runner.run(agent, "What is the weather in Paris?")
        >>> result = Runner.run_sync(agent, "Hello")
        >>> async for event in Runner.run_streamed(agent, "Hello"):
        ...     print(event)

        # Using custom services (for testing or special configuration)
        >>> runner = Runner(
        ...     logging_service=LoggingService(log_dir="./custom_logs", enabled=True),
        ...     guardrail_engine=GuardrailEngine(parallel=True),
        ... )
        >>> result = await runner.execute(agent, "Hello")
    """

    def __init__(
        self,
        logging_service: Optional[LoggingService] = None,
        response_processor: Optional[ResponseProcessor] = None,
        hook_manager: Optional[HookManager] = None,
        guardrail_engine: Optional[GuardrailEngine] = None,
        output_coercer: Optional[OutputCoercer] = None,
    ):
        """
        Initialize Runner

        Args:
            logging_service: Logging service, creates a new instance by default.
            response_processor: Response processor, creates a new instance by default.
            hook_manager: Hook manager, creates a new instance by default.
            guardrail_engine: Guardrail engine, creates a new instance by default.
            output_coercer: Output coercer, creates a new instance by default.
        """
        # Injected services (dependency injection, optional parameters)
        self._logging_service = logging_service or LoggingService()
        self._response_processor = response_processor or ResponseProcessor()
        self.hook_manager = hook_manager or HookManager()
        self._guardrail_engine = guardrail_engine or GuardrailEngine()
        self._output_coercer = output_coercer or OutputCoercer()

        # Services that report through the hook manager
        self._tool_invoker = ToolInvoker(self.hook_manager)
        self._handoff_resolver = HandoffResolver(self.hook_manager)

    # =========================================================================
    # Entry points
    # =========================================================================

    @classmethod
    async def run(
        cls,
        starting_agent: Agent,
        input: RunInput,
        *,
        context: Any = None,
        max_turns: Optional[int] = None,
        run_config: Optional[RunConfig] = None,
        hooks: Optional[RunHooks] = None,
    ) -> RunResult:
        """
        Run starting_agent on input until it produces a valid final output

        Raises:
            AgentRuntimeError subclasses, see utils.exceptions
        """
        return await cls().execute(
            starting_agent,
            input,
            context=context,
            max_turns=max_turns,
            run_config=run_config,
            hooks=hooks,
        )

    @classmethod
    def run_sync(
        cls,
        starting_agent: Agent,
        input: RunInput,
        *,
        context: Any = None,
        max_turns: Optional[int] = None,
        run_config: Optional[RunConfig] = None,
        hooks: Optional[RunHooks] = None,
    ) -> RunResult:
        """
        Blocking variant of run() for code without an event loop

        Raises:
            RuntimeError: Called while an event loop is running in this thread
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(cls.run(
                starting_agent,
                input,
                context=context,
                max_turns=max_turns,
                run_config=run_config,
                hooks=hooks,
            ))
        raise RuntimeError("Runner.run_sync() cannot be called from a running event loop, use 'await Runner.run()'")

    @classmethod
    def run_streamed(
        cls,
        starting_agent: Agent,
        input: RunInput,
        *,
        context: Any = None,
        max_turns: Optional[int] = None,
        run_config: Optional[RunConfig] = None,
        hooks: Optional[RunHooks] = None,
    ) -> AsyncGenerator[StreamEvent, None]:
        """
        Streamed run: yields runtime messages, the last element is the RunResult

        Usage:
            >>> async for event in Runner.run_streamed(agent, "Hello"):
            ...     if isinstance(event, RunResult):
            ...         print(event.final_output)
        """
        return cls().stream(
            starting_agent,
            input,
            context=context,
            max_turns=max_turns,
            run_config=run_config,
            hooks=hooks,
        )

    async def execute(
        self,
        starting_agent: Agent,
        input: RunInput,
        *,
        context: Any = None,
        max_turns: Optional[int] = None,
        run_config: Optional[RunConfig] = None,
        hooks: Optional[RunHooks] = None,
    ) -> RunResult:
        """Consume stream() and return its RunResult"""
        result: Optional[RunResult] = None
        async for event in self.stream(
            starting_agent,
            input,
            context=context,
            max_turns=max_turns,
            run_config=run_config,
            hooks=hooks,
        ):
            if isinstance(event, RunResult):
                result = event
        return result

    # =========================================================================
    # Main flow
    # =========================================================================

    async def stream(
        self,
        starting_agent: Agent,
        input: RunInput,
        *,
        context: Any = None,
        max_turns: Optional[int] = None,
        run_config: Optional[RunConfig] = None,
        hooks: Optional[RunHooks] = None,
    ) -> AsyncGenerator[StreamEvent, None]:
        """
        Execute the main flow of a run

        Overall flow:
        ```
        ┌─────────────────────────────────────────────────────────────────────┐
        │                         Runner.stream() Flow                        │
        ├─────────────────────────────────────────────────────────────────────┤
        │  [Initialization Phase]                                             │
        │    Step 0: Start the clock, seed the history                        │
        │    Step 1: Input guardrails (zero model calls when one trips)       │
        │                                                                     │
        │  [Turn Loop] until Done                                             │
        │    Step 2: Model call (turn += 1, bounded by max_turns)             │
        │    Step 3: Tool calls, then the handoff (if requested)              │
        │    Step 4: Output guardrails + coercion (final candidates only)     │
        │                                                                     │
        │  [Result]                                                           │
        │    RunResult (last yielded element)                                 │
        └─────────────────────────────────────────────────────────────────────┘
        ```

        Yields:
            ProgressMessage / AgentUpdatedMessage / RunItemMessage, then the RunResult
        """
        # =============================================================================
        # Initialization
        # =============================================================================
        if not isinstance(starting_agent, Agent):
            raise ConfigurationError(f"starting_agent must be an Agent, got {type(starting_agent).__name__}")

        max_turns = settings.default_max_turns if max_turns is None else max_turns
        if max_turns < 1:
            raise ConfigurationError(f"max_turns must be >= 1, got {max_turns}", agent_name=starting_agent.name)

        run_config = run_config or RunConfig()
        if run_config.model_client is None:
            from xyz_agent_runtime.agent_framework import OpenAIChatModelClient
            run_config = dataclasses.replace(run_config, model_client=OpenAIChatModelClient())

        self._logging_service.setup(run_config.workflow_name)

        logger.info("\n" + "=" * 80)
        logger.info("🚀 Runner.stream() started")
        logger.info(f"📋 Parameters: agent={starting_agent.name}, max_turns={max_turns}, workflow={run_config.workflow_name}")
        logger.info(f"💬 Input: {truncate_text(to_text(input), LOG_PREVIEW_LENGTH)}")
        logger.info("=" * 80)

        # =============================================================================
        # Create run context
        # =============================================================================
        ctx = RunContext(
            starting_agent=starting_agent,
            input=input,
            context=context,
            run_config=run_config,
            max_turns=max_turns,
            model_client=run_config.model_client,
            hooks=hooks,
        )

        try:
            # =========================================================================
            # Step 0: Initialization
            # =========================================================================
            # [Function] Start the wall-clock budget and seed the history
            #
            # [Output]
            #   - ctx.deadline: monotonic deadline (None = unbounded)
            #   - ctx.history: run input as history items
            #   - ctx.input_item_count: length of the input prefix (handoff filters need it)
            # =========================================================================
            async for msg in step_0_initialize(ctx):
                yield msg

            # =========================================================================
            # Step 1: Input guardrails
            # =========================================================================
            # [Function] Starting agent's + RunConfig's input guardrails on the raw input
            #
            # [Output]
            #   - ctx.input_guardrail_results
            #   - GuardrailTripped before any model call when one trips
            # =========================================================================
            async for msg in step_1_input_guardrails(ctx, self._guardrail_engine):
                yield msg

            # =========================================================================
            # Turn Loop
            # =========================================================================
            while not ctx.is_done:
                # =====================================================================
                # Step 2: Model call
                # =====================================================================
                # [Function] One round-trip with the active agent
                #
                # [Internal Logic]
                #   2.1 turn += 1 (MaxTurnsExceeded past max_turns)
                #   2.2 request = instructions + history + tool/handoff schemas + output schema
                #   2.3 Model Client call within the remaining budget
                #   2.4 classify: FINAL_OUTPUT | TOOL_CALLS | HANDOFF
                #
                # [Output] ctx.processed: ProcessedResponse
                # =====================================================================
                async for msg in step_2_model_call(ctx, self._response_processor, self.hook_manager):
                    yield msg

                processed = ctx.processed

                if processed.type != ResponseType.FINAL_OUTPUT:
                    ctx.state = ctx.state.reset_output_failures()

                    # =================================================================
                    # Step 3: Tool calls (request order), then the handoff
                    # =================================================================
                    # [Function] Execute every ordinary tool call of the turn, then
                    #            swap agents if a handoff was requested
                    #
                    # [Output]
                    #   - tool_call / tool_output items in request order
                    #   - ctx.current_agent swapped on an accepted handoff
                    #   - ctx.final_candidate when tool_use_behavior ends the run
                    # =================================================================
                    if processed.has_tool_calls:
                        async for msg in step_3_execute_tools(ctx, self._tool_invoker):
                            yield msg

                    if processed.handoff is not None:
                        async for msg in step_3_handoff(ctx, self._handoff_resolver):
                            yield msg

                    if not ctx.has_final_candidate:
                        continue

                # =====================================================================
                # Step 4: Final output
                # =====================================================================
                # [Function] Output guardrails, then coercion to the agent's output type
                #
                # [Output]
                #   - ctx.final_output / ctx.is_done on success
                #   - output_retry item (corrective retry) or OutputParseError on failure
                # =====================================================================
                async for msg in step_4_finalize_output(
                    ctx, self._guardrail_engine, self._output_coercer, self.hook_manager
                ):
                    yield msg

            logger.success(
                f"✅ Run completed: agent={ctx.current_agent.name}, turns={ctx.turn}, "
                f"tool_calls={ctx.state.tool_call_count}, handoffs={ctx.state.handoff_count}, "
                f"tokens={ctx.state.usage.total_tokens}"
            )
        except AgentRuntimeError as e:
            e.attach_run_state(ctx.current_agent.name, ctx.turn, ctx.history)
            logger.error(f"❌ Run failed: {type(e).__name__}: {e.message}", extra=e.to_dict())
            raise
        finally:
            # Clean up log handlers
            self._logging_service.cleanup()

        yield RunResult(
            input=input,
            final_output=ctx.final_output,
            history=list(ctx.history),
            last_agent=ctx.current_agent,
            guardrail_records=[
                record
                for record in ctx.input_guardrail_results + ctx.output_guardrail_results
                if record.tripped
            ],
            input_guardrail_results=list(ctx.input_guardrail_results),
            output_guardrail_results=list(ctx.output_guardrail_results),
            raw_responses=list(ctx.raw_responses),
            usage=ctx.state.usage,
            turns=ctx.turn,
        )
