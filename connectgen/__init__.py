"""Design-component to Code Connect mapping core.

Subpackages:
- evidence: Component-set evidence extraction (variant axes, properties, layers)
- mapping: MappingSchema model and evidence-backed validation
- codegen: Reconciliation, import resolution and Code Connect rendering
- orchestrator: Per-component retry loop, Proposal Source contract, artifacts
"""

__version__ = "0.3.0"
