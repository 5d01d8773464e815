"""Sequential step execution with rollback on the first failure."""

import logging
from typing import Callable, Optional, Sequence, Tuple

from .steps import InstallResult, RunContext, Step

logger = logging.getLogger("c8deploy.harness")

StepAction = Callable[[], None]
Plan = Sequence[Tuple[Step, StepAction]]


def run_steps(plan: Plan, unwinder, ctx: Optional[RunContext] = None) -> InstallResult:
    """Run ``plan`` in order.

    A step is recorded as completed only after its action returns. The first
    action that raises stops forward execution and hands the context to
    ``unwinder``; no later step runs afterwards.
    """
    ctx = ctx if ctx is not None else RunContext()

    for step, action in plan:
        ctx.current = step
        try:
            action()
        except Exception as e:
            logger.error("Step '%s' failed: %s", step, e)
            unwinder.unwind(ctx)
            return InstallResult(
                ok=False,
                completed=tuple(ctx.completed),
                failed_step=step,
                error=e,
                unwound=tuple(ctx.unwound),
                compensation_failures=tuple(ctx.failures),
            )
        ctx.completed.append(step)
        ctx.current = None

    return InstallResult(ok=True, completed=tuple(ctx.completed))
