"""Access control building blocks: policy models, role managers, file adapters and storage interfaces."""

__version__ = "0.1.0"

__all__ = ["file_adapter", "logger", "model", "persist", "role_manager"]