from diagram_pipeline.compiler.connection_optimizer import (
    OptimizationResult,
    assess_complexity,
    optimize_connections,
    simple_rewrite,
)

__all__ = [
    "OptimizationResult",
    "assess_complexity",
    "optimize_connections",
    "simple_rewrite",
]
