"""
Turn Orchestrator for the Alchemist market.

Drives the day loop as an explicit state machine:

    INITIALIZING -> RUNNING(day 1) -> ... -> RUNNING(total_days) -> COMPLETED

Each day:
1. DECISIONS: one concurrent request per non-disqualified participant
   (fan-out with asyncio.gather). A participant that raises, times out
   or returns a schema-invalid action is disqualified for the rest of the
   run; this never aborts the day or the run.
2. TRANSITION: sanitize, clear the market and settle (engine.transition)
3. PUBLISH: append the new GameState to the stream (and checkpoint log)

The round cannot advance until every requested decision has resolved.
Within a round, processing is by participant index, independent of the
order in which decisions arrived.
"""

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from engine.action_parser import EMPTY_ACTION, RequestedAction, parse_action
from engine.config import RunConfig
from engine.decision import DecisionRequest, DecisionResult
from engine.economy import EconomySchedule, generate_schedule
from engine.errors import ActionSchemaError, ConfigError
from engine.event_logger import CheckpointLogger
from engine.state import GameState, RunPhase, Usage
from engine.stream import StateStream
from engine.transition import apply_day, build_decision_request, initial_state

if TYPE_CHECKING:
    from players.base import DecisionProvider

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 200


@dataclass(frozen=True)
class DecisionFailure:
    """A decision that could not be obtained; carried as a value, not raised."""

    reason: str
    usage: Usage


class GameRunner:
    """
    Runs one game from initialization to completion.

    Attributes:
        config: Validated run configuration
        providers: One DecisionProvider per seat, by participant index
        schedule: The run's economy schedule (generated at construction)
        stream: Observable stream of GameState snapshots
        phase: Current RunPhase
        state: Latest GameState (None before initialization)
    """

    def __init__(
        self,
        config: RunConfig,
        providers: Sequence["DecisionProvider"],
        stream: StateStream | None = None,
        checkpoint_logger: CheckpointLogger | None = None,
        schedule: EconomySchedule | None = None,
    ) -> None:
        """
        Initialize the runner.

        Args:
            config: Run configuration (validated here)
            providers: Decision providers, one per configured player
            stream: Stream to publish to (a new one if None)
            checkpoint_logger: Optional JSONL checkpoint writer
            schedule: Pre-generated schedule (generated from config if None)

        Raises:
            ConfigError: If the config is invalid or providers don't match seats
        """
        self.config = config.validate()
        if len(providers) != config.player_count:
            raise ConfigError(
                f"providers list length ({len(providers)}) must equal "
                f"player count ({config.player_count})"
            )
        self.providers = list(providers)
        self.schedule = schedule if schedule is not None else generate_schedule(config.economy)
        if self.schedule.days != config.days:
            raise ConfigError(
                f"schedule has {self.schedule.days} days, config expects {config.days}"
            )
        # An empty StateStream is falsy (len 0), so test against None.
        self.stream = stream if stream is not None else StateStream()
        self.checkpoint_logger = checkpoint_logger
        self.phase = RunPhase.INITIALIZING
        self.state: GameState | None = None
        self._resume_from: GameState | None = None
        self._awaiting: set[int] = set()

    @classmethod
    def resume(
        cls,
        checkpoint: GameState,
        config: RunConfig,
        providers: Sequence["DecisionProvider"],
        stream: StateStream | None = None,
        checkpoint_logger: CheckpointLogger | None = None,
        schedule: EconomySchedule | None = None,
    ) -> "GameRunner":
        """
        Build a runner that continues from a checkpoint.

        Days already recorded in the checkpoint are never replayed; the
        checkpoint is published as the new stream's first snapshot.

        Raises:
            RuntimeError: If the checkpoint is already complete
            ConfigError: If the checkpoint doesn't match the config (days,
                seat count or economy seed)
        """
        if checkpoint.is_complete:
            raise RuntimeError("Cannot resume a completed run")
        if checkpoint.total_days != config.days or checkpoint.player_count != config.player_count:
            raise ConfigError("Checkpoint does not match the run configuration")
        if checkpoint.seed is not None and checkpoint.seed != config.economy.seed:
            raise ConfigError(
                f"Checkpoint was played with seed {checkpoint.seed!r}, "
                f"config has {config.economy.seed!r}"
            )
        runner = cls(
            config,
            providers,
            stream=stream,
            checkpoint_logger=checkpoint_logger,
            schedule=schedule,
        )
        runner._resume_from = checkpoint
        return runner

    @property
    def awaiting_decisions(self) -> frozenset[int]:
        """Participants whose decision for the current day is still pending."""
        return frozenset(self._awaiting)

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    async def run(self) -> GameState:
        """
        Play every remaining day and close the stream.

        The stream and checkpoint log are closed even if a day raises, so
        observers are released; the error then propagates.

        Returns:
            The final GameState (phase COMPLETED)

        Raises:
            RuntimeError: If this runner has already started
        """
        if self.phase != RunPhase.INITIALIZING or self.state is not None:
            raise RuntimeError("GameRunner.run() can only be called once")

        try:
            state = await self._initialize()
            while not state.is_complete:
                state = await self.run_day(state)
        except Exception:
            completed = self.state.days_played if self.state else 0
            logger.error(f"Run aborted after {completed} completed days", exc_info=True)
            raise
        finally:
            await self.stream.close()
            if self.checkpoint_logger:
                self.checkpoint_logger.close()

        logger.info(f"Run complete after {state.days_played} days")
        return state

    async def _initialize(self) -> GameState:
        if self._resume_from is not None:
            state = replace(self._resume_from, phase=RunPhase.RUNNING)
            logger.info(f"Resuming run at day {state.next_day} of {state.total_days}")
        else:
            names = await self._player_names()
            state = initial_state(
                names,
                self.config.starting_silver,
                self.config.days,
                seed=self.config.economy.seed,
            )
            logger.info(
                f"Starting run: seed={self.config.economy.seed} days={self.config.days} "
                f"players={names}"
            )
        self.phase = RunPhase.RUNNING
        await self._publish(state)
        return state

    async def _player_names(self) -> list[str]:
        names = [p.name for p in self.config.players]
        if not self.config.choose_names:
            return names

        chosen = await asyncio.gather(
            *(provider.choose_name() for provider in self.providers),
            return_exceptions=True,
        )
        for idx, name in enumerate(chosen):
            if isinstance(name, BaseException):
                logger.warning(f"Name choice failed for seat {idx}: {name}")
            elif name:
                names[idx] = name
        return names

    async def run_day(self, state: GameState) -> GameState:
        """
        Run one full day: decisions, transition, publication.

        Args:
            state: The state before the day (state.next_day is the day to play)

        Returns:
            The state after the day
        """
        day = state.next_day
        logger.info(f"Starting day {day} of {state.total_days}")

        active = state.active_players()
        requests = {
            idx: build_decision_request(
                state,
                self.schedule,
                idx,
                history_days=self.config.history_days,
                strategy=self.config.players[idx].strategy,
            )
            for idx in active
        }

        self._awaiting = set(active)
        outcomes = await asyncio.gather(
            *(self._request_decision(idx, request) for idx, request in requests.items())
        )
        self._awaiting.clear()

        actions: list[RequestedAction] = [EMPTY_ACTION] * state.player_count
        statuses = list(state.statuses)
        usage = list(state.usage)
        for idx, outcome in zip(requests, outcomes):
            usage[idx] = usage[idx].add(outcome.usage)
            if isinstance(outcome, DecisionFailure):
                statuses[idx] = statuses[idx].disqualify(outcome.reason, day)
                logger.warning(
                    f"Disqualified {statuses[idx].name} (seat {idx}) on day {day}: "
                    f"{outcome.reason}"
                )
            else:
                actions[idx] = outcome.action

        state = replace(state, statuses=tuple(statuses), usage=tuple(usage))
        new_state = apply_day(state, actions, self.schedule)
        if new_state.day >= new_state.total_days:
            new_state = replace(new_state, phase=RunPhase.COMPLETED)
            self.phase = RunPhase.COMPLETED

        await self._publish(new_state)
        logger.info(
            f"Day {day} complete: silver="
            f"{[inv.silver for inv in new_state.inventories]}"
        )
        return new_state

    # =========================================================================
    # DECISIONS
    # =========================================================================

    async def _request_decision(
        self, idx: int, request: DecisionRequest
    ) -> DecisionResult | DecisionFailure:
        """
        Ask one provider for a decision, converting every failure to a value.

        Human providers are never timed out; the round simply waits.
        """
        provider = self.providers[idx]
        timeout = None if provider.waits_for_human else self.config.decision_timeout
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(provider.decide(request), timeout)
            if not isinstance(result, DecisionResult):
                raise ActionSchemaError(
                    f"Provider returned {type(result).__name__}, expected DecisionResult"
                )
            action = parse_action(result.action)
        except asyncio.TimeoutError:
            elapsed = (time.perf_counter() - start) * 1000
            return DecisionFailure(
                reason=f"TimeoutError: no decision within {timeout}s",
                usage=Usage(duration_ms=elapsed),
            )
        except Exception as e:
            elapsed = (time.perf_counter() - start) * 1000
            logger.debug(f"Decision failure for seat {idx}", exc_info=True)
            return DecisionFailure(reason=_failure_reason(e), usage=Usage(duration_ms=elapsed))
        finally:
            self._awaiting.discard(idx)

        return replace(result, action=action)

    async def _publish(self, state: GameState) -> None:
        self.state = state
        if self.checkpoint_logger:
            self.checkpoint_logger.log_state(state)
        await self.stream.publish(state)


def _failure_reason(error: BaseException) -> str:
    reason = f"{type(error).__name__}: {error}"
    if len(reason) > MAX_REASON_LENGTH:
        reason = reason[: MAX_REASON_LENGTH - 3] + "..."
    return reason


async def run_game(
    config: RunConfig,
    providers: Sequence["DecisionProvider"] | None = None,
    stream: StateStream | None = None,
    checkpoint_logger: CheckpointLogger | None = None,
    **provider_kwargs,
) -> GameState:
    """
    Convenience wrapper: build providers from config if needed and run.

    Args:
        config: Run configuration
        providers: Explicit providers (built with players.registry if None)
        stream: Optional stream to publish to
        checkpoint_logger: Optional checkpoint writer
        **provider_kwargs: Passed to players.registry.create_providers

    Returns:
        Final GameState
    """
    if providers is None:
        from players.registry import create_providers

        providers = create_providers(config, **provider_kwargs)
    runner = GameRunner(config, providers, stream=stream, checkpoint_logger=checkpoint_logger)
    return await runner.run()
