"""Sample per-message handler: processes one employee record per queue message."""
from __future__ import annotations

from datetime import date
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from batch_worker.app.core import SERVICE_NAME


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class Employee(BaseModel):
    """Employee record carried in the message body. Accepts snake_case or PascalCase keys."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    employee_id: str = Field(..., min_length=1, alias="EmployeeId")
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+$", alias="Email")
    first_name: str = Field(..., alias="FirstName")
    last_name: str = Field(..., alias="LastName")
    date_of_birth: date = Field(..., alias="DateOfBirth")
    date_of_joining: date = Field(..., alias="DateOfJoining")


class ProcessEmployeeHandler:
    """MessageHandler[Employee] implementation."""

    async def process(self, employee: Employee, context: Any) -> None:
        if employee.date_of_joining < employee.date_of_birth:
            raise ValueError(f"employee {employee.employee_id}: joining date precedes date of birth")
        _log(
            "employee_processed",
            request_id=getattr(context, "request_id", None),
            employee_id=employee.employee_id,
        )
