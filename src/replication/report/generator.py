"""
Report generation for replication diffs.

Turns a ReplicationDiff into a serializable report with an overall status,
a per-entity-type breakdown, the operations and conflicts, and actionable
recommendations.
"""

from datetime import UTC, datetime
from typing import Any

from ocf.entity_types import label

from ..diff import Operation, ReplicationDiff, summarize_diff
from ..inventory import ActualStateInventory


class ReportStatus:
    """Constants for report statuses."""

    IN_SYNC = "IN_SYNC"
    DRIFT = "DRIFT"
    CONFLICT = "CONFLICT"


STATUSES = (ReportStatus.IN_SYNC, ReportStatus.DRIFT, ReportStatus.CONFLICT)


def format_timestamp(timestamp: datetime) -> str:
    """
    Format timestamp for reports

    Args:
        timestamp: DateTime object

    Returns:
        ISO 8601 formatted timestamp string
    """
    return timestamp.isoformat()


def _determine_status(diff: ReplicationDiff) -> str:
    if diff.conflicts:
        return ReportStatus.CONFLICT
    if diff.total > 0:
        return ReportStatus.DRIFT
    return ReportStatus.IN_SYNC


def _describe_counts(entity_type: str, counts: dict[str, int]) -> str:
    parts = []
    for operation in (Operation.CREATE, Operation.EDIT, Operation.DELETE):
        if counts[operation]:
            parts.append(f"{operation} {label(entity_type, counts[operation])}")
    if counts["conflict"]:
        parts.append(f"{counts['conflict']} conflicted")
    return ", ".join(parts)


def _build_breakdown(diff: ReplicationDiff) -> list[dict[str, Any]]:
    """
    Per-type operation counts, sorted by entity type

    Args:
        diff: Computed diff

    Returns:
        List of ``{entity_type, create, edit, delete, conflict, description}``
    """
    breakdown = []
    for entity_type, counts in sorted(summarize_diff(diff).items()):
        breakdown.append({
            "entity_type": entity_type,
            **counts,
            "description": _describe_counts(entity_type, counts),
        })
    return breakdown


def generate_report(
    diff: ReplicationDiff,
    inventory: ActualStateInventory | None = None,
    desired_count: int | None = None,
) -> dict[str, Any]:
    """
    Generate a replication report from a computed diff

    Args:
        diff: Computed replication diff
        inventory: Inventory the diff was computed against (adds ledger
            context to the report)
        desired_count: Number of desired items submitted

    Returns:
        Dictionary containing:
        - status: IN_SYNC, DRIFT, or CONFLICT
        - contract_anchor: Ledger contract the inventory was read from
        - desired_items: Number of desired items submitted
        - ledger_entities: Number of entities in the inventory
        - edit_detection: Whether payloads were compared
        - creates, edits, deletes, conflicts, total_operations: Counts
        - breakdown: Per entity type counts
        - operations: Operations without payloads
        - conflict_details: Conflict records
        - summary: Human-readable summary
        - recommendations: List of recommended actions
        - timestamp: Report generation timestamp
    """
    status = _determine_status(diff)
    edit_detection = inventory.payloads_by_type is not None if inventory else None

    report = {
        "status": status,
        "contract_anchor": inventory.contract_anchor if inventory else None,
        "desired_items": desired_count,
        "ledger_entities": inventory.entity_count if inventory else None,
        "edit_detection": edit_detection,
        "creates": len(diff.creates),
        "edits": len(diff.edits),
        "deletes": len(diff.deletes),
        "conflicts": len(diff.conflicts),
        "total_operations": diff.total,
        "breakdown": _build_breakdown(diff),
        "operations": [
            {"id": item.id, "type": item.type, "operation": item.operation}
            for item in diff.operations()
        ],
        "conflict_details": [conflict.to_dict() for conflict in diff.conflicts],
        "summary": _generate_summary(diff, desired_count),
        "recommendations": _generate_recommendations(diff, edit_detection),
        "timestamp": format_timestamp(datetime.now(UTC)),
    }

    return report


def _generate_summary(diff: ReplicationDiff, desired_count: int | None) -> str:
    """
    Generate human-readable summary

    Args:
        diff: Computed diff
        desired_count: Number of desired items submitted

    Returns:
        Summary string
    """
    source = f" ({desired_count} desired items)" if desired_count is not None else ""

    if diff.in_sync:
        return f"Ledger is in sync with the desired state{source}."

    summary = (
        f"Ledger differs from the desired state{source}: "
        f"{len(diff.creates)} to create, {len(diff.edits)} to edit, "
        f"{len(diff.deletes)} to delete."
    )
    if diff.conflicts:
        summary += f" {len(diff.conflicts)} create(s) conflict on security_id."
    return summary


def _generate_recommendations(
    diff: ReplicationDiff,
    edit_detection: bool | None,
) -> list[str]:
    """
    Generate actionable recommendations based on the diff

    Args:
        diff: Computed diff
        edit_detection: Whether payloads were compared (None when unknown)

    Returns:
        List of recommendation strings
    """
    recommendations = []

    if diff.conflicts:
        recommendations.append(
            f"{len(diff.conflicts)} create(s) reuse a security_id that is already on "
            "the ledger. Fix the duplicate security_id values in the source data "
            "before submitting creates."
        )

    if diff.deletes:
        recommendations.append(
            f"{len(diff.deletes)} ledger entities are absent from the desired state. "
            "Confirm they were removed at the source before submitting deletes."
        )

    if edit_detection is False:
        recommendations.append(
            "Edit detection was skipped because no payload index was supplied. "
            "Provide a manifest of ledger objects to compare payloads."
        )

    if diff.in_sync:
        recommendations.append(
            "Ledger matches the desired state. No operations to submit."
        )
    elif not diff.conflicts:
        recommendations.append(
            f"Submit the {diff.total} operation(s) to bring the ledger in line."
        )

    return recommendations
