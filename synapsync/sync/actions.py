# SynapSync Sync Actions
# Manifest changes derived from a scan comparison

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from synapsync.sync.item import ScannedCognitive
from synapsync.sync.manifest import ManifestManager
from synapsync.sync.scanner import CognitiveScanner, ScanComparison


class SyncOperation(str, Enum):
    """Types of manifest changes."""

    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"


@dataclass
class SyncAction:
    """
    A pending manifest change.

    Add and update actions carry the scanned cognitive; remove actions
    carry only the name of the vanished entry.
    """

    operation: SyncOperation
    target: Union[ScannedCognitive, str]
    reason: str = ""

    @property
    def name(self) -> str:
        """Name of the cognitive this action applies to."""
        if isinstance(self.target, str):
            return self.target
        return self.target.name

    @property
    def cognitive(self) -> Optional[ScannedCognitive]:
        """Scanned cognitive for add/update actions, None for removals."""
        return None if isinstance(self.target, str) else self.target


@dataclass
class ActionResult:
    """Result of applying an action."""

    action: SyncAction
    success: bool
    error: Optional[str] = None

    @property
    def item_name(self) -> str:
        """Get the item name."""
        return self.action.name


def build_actions(comparison: ScanComparison) -> list[SyncAction]:
    """
    Turn a scan comparison into a flat list of manifest actions.

    Args:
        comparison: Result of CognitiveScanner.compare().

    Returns:
        Adds, then updates, then removals.
    """
    actions: list[SyncAction] = []

    for cognitive in comparison.new:
        actions.append(
            SyncAction(
                operation=SyncOperation.ADD,
                target=cognitive,
                reason="New cognitive found in filesystem",
            )
        )

    for cognitive in comparison.modified:
        actions.append(
            SyncAction(
                operation=SyncOperation.UPDATE,
                target=cognitive,
                reason="Cognitive content has changed",
            )
        )

    for name in comparison.removed:
        actions.append(
            SyncAction(
                operation=SyncOperation.REMOVE,
                target=name,
                reason="Cognitive no longer exists in filesystem",
            )
        )

    return actions


def execute_action(
    action: SyncAction,
    manifest: ManifestManager,
    scanner: CognitiveScanner,
) -> ActionResult:
    """
    Apply an action to the in-memory manifest.

    Updates keep the original installation time and source of the entry.

    Args:
        action: The action to apply.
        manifest: Manifest to modify (not saved here).
        scanner: Scanner used to build manifest entries.

    Returns:
        ActionResult with success status.
    """
    try:
        if action.operation == SyncOperation.ADD:
            manifest.add_entry(scanner.to_manifest_entry(action.target))
        elif action.operation == SyncOperation.UPDATE:
            entry = scanner.to_manifest_entry(action.target)
            manifest.update_entry(
                action.name,
                cognitive_type=entry.cognitive_type,
                category=entry.category,
                version=entry.version,
                fingerprint=entry.fingerprint,
            )
        elif action.operation == SyncOperation.REMOVE:
            manifest.remove_entry(action.name)
        else:
            return ActionResult(
                action=action,
                success=False,
                error=f"Unknown operation: {action.operation}",
            )
    except Exception as e:
        return ActionResult(action=action, success=False, error=str(e))

    return ActionResult(action=action, success=True)
