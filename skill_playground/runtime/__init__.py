"""LangGraph-based execution runtime for plans.

 The runtime takes a validated ``Plan`` (produced by the planning subsystem)
 and executes it step by step:

 - arguments are resolved from literals or from the run ``Context``,
 - each step's output is written back into the context for later steps,
 - the first failed step aborts the run and is reported on the
   ``ExecutionResult``.

 The main entry point is ``Executor``.
 """

from .engine import Executor
from .models import CancellationToken, Context, ExecutionResult, ExecutionStatus

__all__ = [
    "CancellationToken",
    "Context",
    "ExecutionResult",
    "ExecutionStatus",
    "Executor",
]
