from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from pipelinekit.config_namespace import ConfigNamespace
from pipelinekit.engine.pipeline import Block

StageKind = Literal["action", "composite"]
STAGE_KINDS: tuple[str, ...] = ("action", "composite")


def _optional_text(value: Any, *, what: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise TypeError(f"{what} must be a non-empty string or None")
    return value.strip()


def _names(values: Any, *, what: str) -> tuple[str, ...]:
    out: list[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise TypeError(f"{what} entries must be non-empty strings")
        out.append(value.strip())
    return tuple(out)


@dataclass(frozen=True)
class StageIO:
    """Named facts a stage relies on (`requires`) and establishes (`provides`)."""

    requires: tuple[str, ...] = ()
    provides: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "requires", _names(self.requires, what="StageIO.requires"))
        object.__setattr__(self, "provides", _names(self.provides, what="StageIO.provides"))


class StageBuilder(Protocol):
    def __call__(self, inputs: Any, *, instance_id: str, cfg: ConfigNamespace) -> Block:
        ...


@dataclass(frozen=True)
class StageRef:
    """A registered stage kind. One kind may be planned several times under distinct instance ids."""

    id: str
    builder: StageBuilder
    doc: str | None = None
    source: str | None = None
    tags: tuple[str, ...] = ()
    kind: StageKind | None = None
    io: StageIO = field(default_factory=StageIO)

    def __post_init__(self) -> None:
        stage_id = _optional_text(self.id, what="StageRef.id")
        if stage_id is None:
            raise TypeError("StageRef.id must be a non-empty string")
        object.__setattr__(self, "id", stage_id)
        object.__setattr__(self, "doc", _optional_text(self.doc, what="StageRef.doc"))
        object.__setattr__(self, "source", _optional_text(self.source, what="StageRef.source"))
        object.__setattr__(self, "tags", _names(self.tags, what="StageRef.tags"))

        if self.kind is not None:
            kind = str(self.kind).strip().lower()
            if kind not in STAGE_KINDS:
                raise ValueError(
                    f"StageRef.kind must be one of: {', '.join(STAGE_KINDS)} (got {self.kind!r})"
                )
            object.__setattr__(self, "kind", kind)

    def build(self, inputs: Any, *, instance_id: str, cfg: ConfigNamespace) -> Block:
        """Build one planned instance and stamp `stage_kind`/`stage_instance` onto its meta."""

        if not isinstance(instance_id, str) or not instance_id.strip():
            raise ValueError("instance_id must be a non-empty string")
        instance_id = instance_id.strip()

        block = self.builder(inputs, instance_id=instance_id, cfg=cfg)
        if not isinstance(block, Block):
            raise TypeError(
                f"Stage builder returned non-Block (stage={self.id}, type={type(block).__name__})"
            )
        if block.name != instance_id:
            raise ValueError(
                f"Stage builder returned mismatched Block.name: expected={instance_id} got={block.name}"
            )

        meta = dict(block.meta)
        for key, expected in (("stage_kind", self.id), ("stage_instance", instance_id)):
            existing = meta.setdefault(key, expected)
            if existing != expected:
                raise ValueError(
                    f"Stage builder returned conflicting meta.{key}: expected={expected} got={existing!r}"
                )
        if self.doc:
            meta.setdefault("doc", self.doc)
        if self.source:
            meta.setdefault("source", self.source)
        if self.tags:
            meta.setdefault("tags", list(self.tags))

        return Block(name=block.name, nodes=list(block.nodes), meta=meta)
