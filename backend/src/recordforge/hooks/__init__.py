"""Entity lifecycle hook system.

Extension points for logic that runs around engine writes:
- afterCreate: after a record is created (failure becomes a warning)
- afterUpdate: after a record is updated (failure becomes a warning)
- beforeDelete: before a delete is dispatched (can abort)

Usage:
    from recordforge.hooks import hook, HookContext, HookResult

    @hook("auditDelete")
    def audit_delete(ctx: HookContext) -> HookResult | None:
        ...
"""

from recordforge.hooks.builtin import register_builtin_hooks
from recordforge.hooks.registry import HookRegistry, hook
from recordforge.hooks.service import HookService
from recordforge.hooks.types import HookContext, HookResult
from recordforge.metadata.loader import VALID_HOOK_POINTS

__all__ = [
    "HookContext",
    "HookRegistry",
    "HookResult",
    "HookService",
    "VALID_HOOK_POINTS",
    "hook",
    "register_builtin_hooks",
]
