# SynapSync Errors
# Exceptions raised for conditions the sync core cannot degrade around


class SynapSyncError(Exception):
    """Base class for SynapSync errors."""


class StoreNotFoundError(SynapSyncError, FileNotFoundError):
    """The canonical store directory does not exist."""


class ManifestError(SynapSyncError, ValueError):
    """The manifest file exists but cannot be read or parsed."""


class ConfigNotFoundError(SynapSyncError, FileNotFoundError):
    """No project configuration file could be located."""


class CognitiveNotFoundError(SynapSyncError, KeyError):
    """No manifest entry has the requested name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
