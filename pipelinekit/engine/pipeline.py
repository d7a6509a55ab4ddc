"""Execution engine for Block/ActionStep trees.

This module is app-agnostic and must not import `platform_setup.*`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Protocol, TypeAlias


def utc_now_iso8601() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


class FlowContext(Protocol):
    logger: logging.Logger
    outputs: dict[str, Any]
    steps: list[dict[str, Any]]


def _clean_name(value: Any, *, what: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{what} must be a string or None (type={type(value).__name__})")
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{what} cannot be empty")
    return cleaned


def _require_dict(value: Any, *, what: str) -> None:
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be a dict (type={type(value).__name__})")


@dataclass(frozen=True)
class Block:
    """Ordered group of nodes; `meta` is inherited by every descendant record."""

    name: str | None = None
    nodes: list["Node"] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", _clean_name(self.name, what="Block name"))
        _require_dict(self.meta, what="Block meta")


@dataclass(frozen=True)
class ActionStep:
    """Plain Python callable run against the flow context.

    When `capture_key` is set the return value is stored in `ctx.outputs`.
    """

    name: str | None
    fn: Callable[[FlowContext], Any]
    capture_key: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", _clean_name(self.name, what="Action name"))
        if not callable(self.fn):
            raise TypeError(f"Action fn must be callable (type={type(self.fn).__name__})")
        object.__setattr__(
            self, "capture_key", _clean_name(self.capture_key, what="Action capture_key")
        )
        _require_dict(self.meta, what="Action meta")


Node: TypeAlias = Block | ActionStep


class StepRecorder(Protocol):
    def on_step_start(self, ctx: FlowContext, path: str, **metrics: Any) -> None:
        ...

    def on_step_end(self, ctx: FlowContext, record: dict[str, Any]) -> None:
        ...

    def on_step_error(self, ctx: FlowContext, path: str, step_name: str, exc: Exception) -> None:
        ...


class DefaultStepRecorder:
    """Logs step progress through `ctx.logger` and keeps completed records on `ctx.steps`."""

    def on_step_start(self, ctx: FlowContext, path: str, **metrics: Any) -> None:
        tokens: list[str] = []
        for key, label in (("node_type", "type"), ("stage_id", "stage_id"), ("source", "source")):
            value = metrics.get(key)
            if isinstance(value, str) and value.strip():
                tokens.append(f"{label}={value.strip()}")
        doc = metrics.get("doc")
        if isinstance(doc, str) and doc.strip():
            tokens.append(f"doc={json.dumps(doc.strip(), ensure_ascii=False)}")

        ctx.logger.info("Step: %s (%s)", path, ", ".join(tokens))

    def on_step_end(self, ctx: FlowContext, record: dict[str, Any]) -> None:
        ctx.steps.append(record)
        meta = record.get("meta")
        stage_id = meta.get("stage_id") if isinstance(meta, dict) else None
        if isinstance(stage_id, str) and stage_id.strip():
            ctx.logger.info("Completed action %s (stage_id=%s)", record.get("path"), stage_id.strip())
        else:
            ctx.logger.info("Completed action %s", record.get("path"))

    def on_step_error(self, ctx: FlowContext, path: str, step_name: str, exc: Exception) -> None:
        ctx.logger.error("Step failed: %s (%s)", path, exc)


class NullStepRecorder:
    def on_step_start(self, ctx: FlowContext, path: str, **metrics: Any) -> None:
        return

    def on_step_end(self, ctx: FlowContext, record: dict[str, Any]) -> None:
        return

    def on_step_error(self, ctx: FlowContext, path: str, step_name: str, exc: Exception) -> None:
        return


_ERROR_ATTRS = ("pipeline_path", "pipeline_node_type", "pipeline_node_name")


def json_safe(value: Any, *, max_depth: int = 4, max_items: int = 25) -> Any:
    """Bounded, JSON-serializable rendering of an action result for step records."""

    if max_depth <= 0:
        return "<max_depth>"
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        items = list(value)
        out: list[Any] = [
            json_safe(item, max_depth=max_depth - 1, max_items=max_items) for item in items[:max_items]
        ]
        if len(items) > max_items:
            out.append(f"<{len(items) - max_items} more>")
        return out
    if isinstance(value, dict):
        mapped: dict[str, Any] = {}
        for idx, (key, item) in enumerate(value.items()):
            if idx >= max_items:
                mapped["<more>"] = f"<{len(value) - max_items} more>"
                break
            mapped[str(key)] = json_safe(item, max_depth=max_depth - 1, max_items=max_items)
        return mapped
    return repr(value)


def _annotate(exc: Exception, *, path: str, node_type: str, node_name: str) -> None:
    for attr, value in zip(_ERROR_ATTRS, (path, node_type, node_name)):
        if hasattr(exc, attr):
            continue
        try:
            setattr(exc, attr, value)
        except AttributeError:
            pass


def _child_name(child: Node, index: int) -> str:
    if child.name:
        return child.name
    prefix = "action" if isinstance(child, ActionStep) else "block"
    return f"{prefix}_{index + 1:02d}"


class StepRunner:
    """Runs a node tree depth-first, in declaration order, stopping at the first error.

    Errors are re-raised as the original exception object, annotated with
    `pipeline_path`, `pipeline_node_type` and `pipeline_node_name`. The innermost
    node sets them; enclosing blocks never overwrite them.
    """

    def __init__(self, *, recorder: StepRecorder | None = None):
        recorder = recorder or DefaultStepRecorder()
        for method in ("on_step_start", "on_step_end", "on_step_error"):
            if not callable(getattr(recorder, method, None)):
                raise TypeError(f"Step recorder missing required method: {method}")
        self._recorder = recorder

    def run(self, ctx: FlowContext, node: Node) -> None:
        default = "action_01" if isinstance(node, ActionStep) else "pipeline"
        self._run_node(ctx, node, path=[node.name or default], inherited={})

    def _run_node(
        self, ctx: FlowContext, node: Node, *, path: list[str], inherited: dict[str, Any]
    ) -> None:
        if isinstance(node, ActionStep):
            self._run_action(ctx, node, path=path, inherited=inherited)
        elif isinstance(node, Block):
            self._run_block(ctx, node, path=path, inherited=inherited)
        else:
            raise TypeError(f"Unsupported pipeline node type: {type(node).__name__}")

    def _run_block(
        self, ctx: FlowContext, block: Block, *, path: list[str], inherited: dict[str, Any]
    ) -> None:
        try:
            meta = {**inherited, **block.meta}
            names = [_child_name(child, idx) for idx, child in enumerate(block.nodes)]
            duplicates = sorted({name for name in names if names.count(name) > 1})
            if duplicates:
                raise ValueError(
                    f"Duplicate node name(s) in block {'/'.join(path)}: {', '.join(duplicates)}"
                )
            for child, name in zip(block.nodes, names):
                self._run_node(ctx, child, path=[*path, name], inherited=meta)
        except Exception as exc:
            _annotate(exc, path="/".join(path), node_type="block", node_name=path[-1])
            raise

    def _run_action(
        self, ctx: FlowContext, action: ActionStep, *, path: list[str], inherited: dict[str, Any]
    ) -> None:
        pipeline_path = "/".join(path)
        try:
            meta = {**inherited, **action.meta}
            if "stage_id" not in meta and len(path) >= 2:
                # Under a root named "pipeline" the stage is the second segment.
                meta["stage_id"] = path[1] if path[0] == "pipeline" else path[0]
            if "source" not in meta:
                fn = action.fn
                qualname = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", "<callable>")
                meta["source"] = f"{getattr(fn, '__module__', None) or '<unknown_module>'}.{qualname}"

            self._recorder.on_step_start(
                ctx,
                pipeline_path,
                node_type="action",
                stage_id=meta.get("stage_id"),
                source=meta.get("source"),
                doc=meta.get("doc"),
            )

            result = action.fn(ctx)
            if action.capture_key is not None:
                ctx.outputs[action.capture_key] = result

            record: dict[str, Any] = {
                "type": "action",
                "name": path[-1],
                "path": pipeline_path,
                "created_at": utc_now_iso8601(),
                "meta": json_safe(meta),
            }
            if result is not None:
                record["result"] = json_safe(result)
            self._recorder.on_step_end(ctx, record)
        except Exception as exc:
            try:
                self._recorder.on_step_error(ctx, pipeline_path, path[-1], exc)
            except Exception:
                ctx.logger.exception("Step recorder failed during error handling for %s", pipeline_path)
            _annotate(exc, path=pipeline_path, node_type="action", node_name=path[-1])
            raise
