"""SynapSync - canonical store sync for AI assistant cognitives.

Keeps skills, agents, prompts, workflows and tools in a single store
and mirrors them into provider directories (.claude/, .cursor/, ...)
as symlinks or copies.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "SyncEngine",
    "SyncResult",
    "CognitiveScanner",
    "ManifestManager",
    "ProviderProjector",
    "CognitiveType",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("SyncEngine", "SyncResult"):
        from synapsync.sync import engine

        return getattr(engine, name)
    if name == "CognitiveScanner":
        from synapsync.sync.scanner import CognitiveScanner

        return CognitiveScanner
    if name == "ManifestManager":
        from synapsync.sync.manifest import ManifestManager

        return ManifestManager
    if name == "ProviderProjector":
        from synapsync.sync.projector import ProviderProjector

        return ProviderProjector
    if name == "CognitiveType":
        from synapsync.config.schema import CognitiveType

        return CognitiveType
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
