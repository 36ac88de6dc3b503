"""Hook execution service.

Runs the hooks declared for an entity at one lifecycle point, in declared
order. Failures after a write become warnings; failures before a delete
abort it.
"""

import logging

from recordforge.hooks.registry import HookRegistry
from recordforge.hooks.types import HookContext, HookResult
from recordforge.metadata.loader import HookConfig

logger = logging.getLogger(__name__)

AFTER_WRITE_POINTS = ("afterCreate", "afterUpdate")


class HookService:
    """Orchestrates hook execution for entity lifecycle events."""

    def run_hooks(
        self,
        hook_point: str,
        configs: tuple[HookConfig, ...] | list[HookConfig],
        context: HookContext,
    ) -> list[HookResult]:
        """Execute hooks for a given hook point.

        Args:
            hook_point: afterCreate, afterUpdate or beforeDelete
            configs: Hook references from entity metadata, in declared order
            context: The hook context with current record state

        Returns:
            Results of the hooks that ran. For beforeDelete, execution stops
            at the first result carrying an abort message.
        """
        results: list[HookResult] = []
        is_after_write = hook_point in AFTER_WRITE_POINTS

        for config in configs:
            try:
                hook_fn = HookRegistry.get(config.name)
            except ValueError:
                logger.warning("Hook '%s' is not registered, skipping", config.name)
                continue

            try:
                result = hook_fn(context)
            except Exception as e:
                logger.error("%s hook '%s' failed: %s", hook_point, config.name, e)
                if is_after_write:
                    results.append(HookResult(warning=f"Hook '{config.name}' failed: {e}"))
                    continue
                results.append(HookResult(abort=f"Hook '{config.name}' failed: {e}"))
                return results

            if result is None:
                continue
            results.append(result)
            if result.abort and not is_after_write:
                return results

        return results
