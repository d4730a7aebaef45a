from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from finance_api.core.clock import parse_iso_datetime
from finance_api.core.errors import ValidationFailed

AccountType = Literal["Checking", "Savings", "Credit Card", "Investment"]
BudgetPeriod = Literal["weekly", "monthly", "yearly"]


def _at_most_two_decimals(value: float) -> float:
    if Decimal(str(value)).as_tuple().exponent < -2:
        raise ValueError("must have at most 2 decimal places")
    return value


def _reject_boolean(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("must be a number")
    return value


def _iso_date(value: str) -> str:
    try:
        parse_iso_datetime(value)
    except ValueError:
        raise ValueError("must be a valid ISO-8601 date")
    return value.strip()


class Payload(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class UserPayload(Payload):
    name: str = Field(min_length=1)
    email: EmailStr


class AccountPayload(Payload):
    name: str = Field(min_length=1, max_length=100)
    balance: float = Field(allow_inf_nan=False)
    type: AccountType

    @field_validator("balance", mode="before")
    @classmethod
    def check_balance_is_number(cls, value: Any) -> Any:
        return _reject_boolean(value)

    @field_validator("balance")
    @classmethod
    def check_balance_precision(cls, value: float) -> float:
        return _at_most_two_decimals(value)


class AccountUpdatePayload(AccountPayload):
    expected_version: int = Field(ge=1, strict=True)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"expected_version"})


class TransactionPayload(Payload):
    account_id: str = Field(min_length=1)
    date: str
    amount: float = Field(allow_inf_nan=False)
    category: str = Field(min_length=1)
    description: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def check_amount_is_number(cls, value: Any) -> Any:
        return _reject_boolean(value)

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        return _iso_date(value)


class BudgetPayload(Payload):
    category: str = Field(min_length=1)
    amount: float = Field(gt=0, allow_inf_nan=False)
    period: BudgetPeriod

    @field_validator("amount", mode="before")
    @classmethod
    def check_amount_is_number(cls, value: Any) -> Any:
        return _reject_boolean(value)


class GoalPayload(Payload):
    name: str = Field(min_length=1)
    target_amount: float = Field(gt=0, allow_inf_nan=False)
    current_amount: float = Field(ge=0, allow_inf_nan=False)
    deadline: str

    @field_validator("target_amount", "current_amount", mode="before")
    @classmethod
    def check_amounts_are_numbers(cls, value: Any) -> Any:
        return _reject_boolean(value)

    @field_validator("deadline")
    @classmethod
    def check_deadline(cls, value: str) -> str:
        return _iso_date(value)


P = TypeVar("P", bound=Payload)


@dataclass(frozen=True)
class Violation:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message


@dataclass(frozen=True)
class Valid(Generic[P]):
    value: P


@dataclass(frozen=True)
class Invalid:
    violations: list[Violation]

    @property
    def message(self) -> str:
        return str(self.violations[0])


def parse_payload(model: type[P], payload: Any) -> Valid[P] | Invalid:
    if not isinstance(payload, dict):
        return Invalid([Violation("", "request body must be a JSON object")])
    try:
        return Valid(model.model_validate(payload))
    except ValidationError as exc:
        return Invalid(
            [Violation(".".join(str(part) for part in err["loc"]), err["msg"]) for err in exc.errors()]
        )


def require_valid(model: type[P], payload: Any) -> P:
    result = parse_payload(model, payload)
    if isinstance(result, Invalid):
        raise ValidationFailed(result.message)
    return result.value
