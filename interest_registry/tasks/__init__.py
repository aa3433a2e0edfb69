from interest_registry.tasks import activation  # noqa: F401

__all__ = [
    "activation",
]
