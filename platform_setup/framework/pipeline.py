"""The configuration pipeline: a fixed, fail-fast sequence of stages.

State machine::

    INIT -> CREDENTIAL_BOOTSTRAP -> SCAFFOLD_CHECK -> ASSET_STAGE -> PLUGIN_INSTALL
         -> PLATFORM_CONFIG[0..N-1] -> DONE

Any exception moves the run to the absorbing FAILED state and is re-raised as the
same object; no later stage runs. A skipped (inactive) platform still advances to
the next PLATFORM_CONFIG state.

Runs mutate the project tree without locking. Callers must not start two runs
against the same project root at the same time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Mapping, Sequence

from pipelinekit.config_namespace import ConfigNamespace
from pipelinekit.engine.pipeline import Block, StepRecorder, StepRunner, json_safe, utc_now_iso8601
from pipelinekit.stage_registry import StageRegistry
from platform_setup.framework.collaborators import Collaborators
from platform_setup.framework.context import OrchestrationContext
from platform_setup.framework.errors import ScaffoldBootstrapError
from platform_setup.framework.runtime import RunContext

PipelineState = Literal[
    "INIT",
    "CREDENTIAL_BOOTSTRAP",
    "SCAFFOLD_CHECK",
    "ASSET_STAGE",
    "PLUGIN_INSTALL",
    "PLATFORM_CONFIG",
    "DONE",
    "FAILED",
]

STAGE_STATE_ORDER: tuple[str, ...] = (
    "CREDENTIAL_BOOTSTRAP",
    "SCAFFOLD_CHECK",
    "ASSET_STAGE",
    "PLUGIN_INSTALL",
    "PLATFORM_CONFIG",
)
TERMINAL_STATES: tuple[str, ...] = ("DONE", "FAILED")

MAX_BOOTSTRAP_DEPTH = 1


@dataclass(frozen=True)
class PlanEntry:
    stage_id: str
    instance_id: str
    state: str

    def __post_init__(self) -> None:
        if self.state not in STAGE_STATE_ORDER:
            raise ValueError(
                f"Invalid plan state for {self.instance_id}: {self.state!r} "
                f"(expected one of: {', '.join(STAGE_STATE_ORDER)})"
            )


@dataclass(frozen=True)
class PipelineInputs:
    """What stage builders receive: collaborators plus a handle to start a nested run."""

    collaborators: Collaborators
    run_nested: Callable[[OrchestrationContext], "PipelineResult"]


@dataclass
class PipelineResult:
    run_id: str
    context: OrchestrationContext
    started_at: str
    state: str = "INIT"
    states: list[str] = field(default_factory=lambda: ["INIT"])
    outputs: dict[str, Any] = field(default_factory=dict)
    steps: list[dict[str, Any]] = field(default_factory=list)
    nested: list["PipelineResult"] = field(default_factory=list)
    error: dict[str, Any] | None = None
    finished_at: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == "DONE"

    def transition(self, state: str) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Pipeline run {self.run_id} already terminated in state {self.state}")
        self.state = state
        self.states.append(state)
        if state in TERMINAL_STATES:
            self.finished_at = utc_now_iso8601()

    def fail(self, exc: BaseException) -> None:
        self.error = {
            "type": type(exc).__name__,
            "message": str(exc),
            "state": self.state,
            "path": getattr(exc, "pipeline_path", None),
        }
        self.transition("FAILED")

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "state": self.state,
            "states": list(self.states),
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "context": self.context.describe(),
            "outputs": json_safe(self.outputs, max_depth=8, max_items=500),
            "steps": list(self.steps),
            "nested": [child.to_dict() for child in self.nested],
            "error": self.error,
        }


_LOCATION_ATTRS = ("pipeline_path", "pipeline_node_type", "pipeline_node_name")
_NESTED_PATH_ATTR = "pipeline_nested_path"


def _detach_nested_path(exc: BaseException) -> None:
    """Move a nested run's failure location aside so the parent's runner can annotate its own stage."""

    nested_path = getattr(exc, "pipeline_path", None)
    try:
        for attr in _LOCATION_ATTRS:
            if attr in vars(exc):
                delattr(exc, attr)
        setattr(exc, _NESTED_PATH_ATTR, nested_path)
    except (AttributeError, TypeError):
        pass


def _join_nested_path(exc: BaseException) -> None:
    """`scaffold/action` + nested `web/action` becomes `scaffold/action/bootstrap/web/action`."""

    if _NESTED_PATH_ATTR not in getattr(exc, "__dict__", {}):
        return
    nested_path = getattr(exc, _NESTED_PATH_ATTR)
    delattr(exc, _NESTED_PATH_ATTR)
    outer_path = getattr(exc, "pipeline_path", None)
    parts = [part for part in (outer_path, "bootstrap", nested_path) if part]
    exc.pipeline_path = "/".join(parts)  # type: ignore[attr-defined]


class ConfigurationPipeline:
    def __init__(
        self,
        *,
        registry: StageRegistry,
        plan: Sequence[PlanEntry],
        collaborators: Collaborators,
        stage_configs: Mapping[str, Mapping[str, Any]] | None = None,
        logger: logging.Logger | None = None,
        recorder: StepRecorder | None = None,
    ) -> None:
        self._registry = registry
        self._plan = tuple(plan)
        self._collaborators = collaborators
        self._stage_configs = dict(stage_configs or {})
        self._logger = logger or logging.getLogger("platform_setup.pipeline")
        self._runner = StepRunner(recorder=recorder)
        self._active: list[PipelineResult] = []
        self._validate_plan()

    @property
    def plan(self) -> tuple[PlanEntry, ...]:
        return self._plan

    def _validate_plan(self) -> None:
        if not self._plan:
            raise ValueError("Pipeline plan cannot be empty")

        seen: set[str] = set()
        last_rank = -1
        for entry in self._plan:
            self._registry.resolve(entry.stage_id)
            if entry.instance_id in seen:
                raise ValueError(f"Duplicate stage instance id in plan: {entry.instance_id}")
            seen.add(entry.instance_id)

            rank = STAGE_STATE_ORDER.index(entry.state)
            if rank < last_rank:
                raise ValueError(
                    f"Plan entry {entry.instance_id} ({entry.state}) runs after a later stage state"
                )
            last_rank = rank

        planned_kinds = {entry.stage_id for entry in self._plan}
        unknown = sorted(set(self._stage_configs) - planned_kinds)
        if unknown:
            raise ValueError(f"Unknown config keys under stages: {', '.join(unknown)}")

    def compile(self, inputs: PipelineInputs) -> list[tuple[PlanEntry, Block]]:
        compiled: list[tuple[PlanEntry, Block]] = []
        for entry in self._plan:
            ref = self._registry.resolve(entry.stage_id)
            cfg = ConfigNamespace(
                dict(self._stage_configs.get(entry.stage_id, {})),
                path=f"stages.{entry.stage_id}",
            )
            block = ref.build(inputs, instance_id=entry.instance_id, cfg=cfg)
            cfg.assert_consumed()
            compiled.append((entry, block))
        return compiled

    def run(self, context: OrchestrationContext) -> PipelineResult:
        """Run every planned stage for `context`, returning the result or raising the first error."""

        created_at = utc_now_iso8601()
        run_id = f"{context.app_config_id}.d{context.bootstrap_depth}.{created_at}"
        result = PipelineResult(run_id=run_id, context=context, started_at=created_at)
        if self._active:
            self._active[-1].nested.append(result)

        run_ctx = RunContext(
            run_id=run_id,
            context=context,
            logger=self._logger,
            created_at=created_at,
        )
        inputs = PipelineInputs(collaborators=self._collaborators, run_nested=self._run_nested)

        self._logger.info(
            "Configuration run %s started (app_config=%s, depth=%d, active=%s)",
            run_id,
            context.app_config_id,
            context.bootstrap_depth,
            ", ".join(context.active_platforms()) or "<none>",
        )

        self._active.append(result)
        try:
            platform_index = 0
            for entry, block in self.compile(inputs):
                if entry.state == "PLATFORM_CONFIG":
                    label = f"PLATFORM_CONFIG[{platform_index}]"
                    platform_index += 1
                else:
                    label = entry.state
                result.transition(label)
                self._runner.run(run_ctx, block)
                result.outputs[entry.instance_id] = run_ctx.outputs.get(entry.instance_id)
        except Exception as exc:
            _join_nested_path(exc)
            result.steps = list(run_ctx.steps)
            result.fail(exc)
            try:
                setattr(exc, "pipeline_result", result)
            except AttributeError:
                pass
            self._logger.error(
                "Configuration run %s failed in %s: %s", run_id, result.error["state"], exc
            )
            raise
        finally:
            self._active.pop()

        result.steps = list(run_ctx.steps)
        result.transition("DONE")
        self._logger.info("Configuration run %s completed", run_id)
        return result

    def _run_nested(self, context: OrchestrationContext) -> PipelineResult:
        if context.bootstrap_depth > MAX_BOOTSTRAP_DEPTH:
            raise ScaffoldBootstrapError(
                f"Nested bootstrap depth {context.bootstrap_depth} exceeds the limit of {MAX_BOOTSTRAP_DEPTH}"
            )
        try:
            return self.run(context)
        except Exception as exc:
            _detach_nested_path(exc)
            raise
