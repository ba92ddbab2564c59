"""
Domain exceptions and their HTTP translation.

Services raise these; the global handler in ``partsflow.main`` turns them into
``{"success": false, "error": {...}}`` responses through ``to_http_exception``.
"""
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class PartsFlowException(Exception):
    """Base class for every domain error raised by the application."""

    code = "PARTSFLOW_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details or {}


class EntityNotFoundException(PartsFlowException):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: Any, code: Optional[str] = None):
        super().__init__(f"{entity} with id '{entity_id}' not found.", code=code)
        self.entity = entity
        self.entity_id = entity_id


class BusinessRuleViolationException(PartsFlowException):
    code = "BUSINESS_RULE_VIOLATION"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidStateTransitionException(PartsFlowException):
    code = "INVALID_STATE_TRANSITION"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, entity: str, from_status: str, to_status: str):
        super().__init__(f"{entity} cannot transition from '{from_status}' to '{to_status}'.")
        self.from_status = from_status
        self.to_status = to_status


class ConflictException(PartsFlowException):
    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class UnavailableDependencyException(PartsFlowException):
    code = "UNAVAILABLE_DEPENDENCY"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, dependency: str, reason: str = ""):
        message = f"Dependency '{dependency}' is unavailable."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)
        self.dependency = dependency


# ── Netting engine errors ─────────────────────────────────────────────────────

class PlanNotFound(EntityNotFoundException):
    def __init__(self, plan_id: Any):
        super().__init__("ProductionPlan", plan_id, code="PLAN_NOT_FOUND")


class ProductNotFound(EntityNotFoundException):
    def __init__(self, product_code: str):
        super().__init__("Product", product_code, code="PRODUCT_NOT_FOUND")


class PartNotFound(EntityNotFoundException):
    def __init__(self, part_code: str):
        super().__init__("Part", part_code, code="PART_NOT_FOUND")


class EmptyBOM(BusinessRuleViolationException):
    def __init__(self, product_code: str):
        super().__init__(
            f"Product '{product_code}' has no bill of materials; it cannot be planned.",
            code="EMPTY_BOM",
            details={"product_code": product_code},
        )
        self.product_code = product_code


class InvalidPlanStatus(BusinessRuleViolationException):
    def __init__(self, plan_id: Any, plan_status: str, action: str):
        super().__init__(
            f"Production plan {plan_id} in status '{plan_status}' does not allow {action}.",
            code="INVALID_PLAN_STATUS",
            details={"plan_id": plan_id, "status": plan_status},
        )


class InsufficientInventory(BusinessRuleViolationException):
    def __init__(self, plan_id: Any, shortages: list):
        parts = ", ".join(f"{s['part_code']}: short {s['shortage_quantity']}" for s in shortages)
        super().__init__(
            f"Production plan {plan_id} cannot start; insufficient parts ({parts}).",
            code="INSUFFICIENT_INVENTORY",
            details={"plan_id": plan_id, "shortages": shortages},
        )


UnavailableDependency = UnavailableDependencyException


def to_http_exception(exc: PartsFlowException) -> HTTPException:
    detail = {"code": exc.code, "message": exc.message}
    if exc.details:
        detail["details"] = exc.details
    return HTTPException(status_code=exc.status_code, detail=detail)


@contextmanager
def dependency_guard(dependency: str, session: Optional[Session] = None) -> Iterator[None]:
    """Re-raise storage failures from a collaborator as ``UnavailableDependency``.

    When a session is given it is rolled back first so it stays usable.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        if session is not None:
            session.rollback()
        logger.error("dependency_unavailable dependency=%s error=%s", dependency, exc)
        raise UnavailableDependency(dependency, exc.__class__.__name__) from exc
