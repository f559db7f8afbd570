"""
Exceptions raised while computing a replication diff.

Conflicts and comparison mismatches are reported as data in the diff; the
classes here cover the fatal cases where no diff can be trusted.
"""


class ReplicationError(Exception):
    """Base class for replication failures."""
    pass


class ReplicationSchemaError(ReplicationError, ValueError):
    """
    Input data does not have the expected shape.

    Raised for a missing or empty id, a payload that is not an object, or a
    type that cannot be resolved.
    """

    def __init__(
        self,
        message: str,
        entity_id: str | None = None,
        entity_type: str | None = None,
        field_path: str | None = None,
    ):
        super().__init__(message)
        self.entity_id = entity_id
        self.entity_type = entity_type
        self.field_path = field_path


class UnsupportedEntityTypeError(ReplicationSchemaError):
    """An entity type, category or object_type is not in the catalog."""

    def __init__(self, message: str, value: object = None, **kwargs):
        super().__init__(message, **kwargs)
        self.value = value


class InventoryConsistencyError(ReplicationError):
    """
    The payload index disagrees with the id inventory it was built for.

    This points at a caller assembling the two from different snapshots,
    not at bad business data.
    """

    def __init__(self, message: str, entity_id: str, entity_type: str):
        super().__init__(message)
        self.entity_id = entity_id
        self.entity_type = entity_type
