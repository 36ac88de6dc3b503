"""Hook registry.

Provides registration and lookup for hook implementations referenced
by name from entity metadata.
"""

from collections.abc import Callable

from recordforge.hooks.types import HookContext, HookResult

# Hook function signature: (HookContext) -> HookResult | None
HookFn = Callable[[HookContext], HookResult | None]


class HookRegistry:
    """Registry for hook implementations.

    Hooks must be registered before they can be referenced from entity
    metadata, either via register_builtin_hooks() or the @hook decorator.

    Example:
        @hook("syncDoctorSpecialty")
        def sync_doctor_specialty(ctx: HookContext) -> HookResult | None:
            ...
    """

    _hooks: dict[str, HookFn] = {}

    @classmethod
    def register(cls, name: str, hook_fn: HookFn) -> None:
        """Register a hook function by name.

        Idempotent: re-registering the same name is a no-op.
        """
        if name in cls._hooks:
            return
        cls._hooks[name] = hook_fn

    @classmethod
    def get(cls, name: str) -> HookFn:
        """Get a registered hook function by name.

        Raises:
            ValueError: If hook is not registered
        """
        if name not in cls._hooks:
            raise ValueError(
                f"Hook '{name}' is not registered. "
                "Hooks must be explicitly registered at application startup."
            )
        return cls._hooks[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._hooks

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._hooks.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._hooks.clear()


def hook(name: str) -> Callable[[HookFn], HookFn]:
    """Decorator to register a hook function."""

    def decorator(fn: HookFn) -> HookFn:
        HookRegistry.register(name, fn)
        return fn

    return decorator
