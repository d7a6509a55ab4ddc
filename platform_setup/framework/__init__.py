"""Orchestration contracts for platform configuration runs.

This package holds everything generic *within* this repo (context and settings,
activation gate, error taxonomy, collaborator protocols, the pipeline state
machine) but intentionally excludes stage implementations and default
collaborators.

Common entrypoints:

- `platform_setup.framework.context`: `OrchestrationContext` and `build_context`
- `platform_setup.framework.pipeline`: `ConfigurationPipeline`, `PlanEntry`, `PipelineResult`

For reusable, project-agnostic pipeline primitives, use `pipelinekit`.
"""
