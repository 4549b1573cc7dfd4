"""Domain-specific exceptions"""

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    error_code = "domain_error"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error_code, "detail": str(self)}


class ValidationError(DomainException):
    """Input is malformed: non-positive amount, missing field, unknown enum value"""

    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["field"] = self.field
        return payload


class NotFoundError(DomainException):
    """
    Referenced entity does not exist or belongs to another user.

    Both cases produce the same message so ownership cannot be probed.
    """

    error_code = "not_found"

    def __init__(self, entity: str, entity_id: Any = None):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConsistencyError(DomainException):
    """Cross-entity link or ledger state would violate a consistency rule"""

    error_code = "consistency_error"
