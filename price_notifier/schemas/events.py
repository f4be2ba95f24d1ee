"""
Queue message schemas

Payloads travel as UTF-8 JSON with camelCase keys. Unknown keys are
ignored so older consumers keep working when producers add fields.
"""
import hashlib
import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from price_notifier.exceptions import MalformedMessageError

# Percentages are rounded so float noise (19.999999999999996) cannot
# flip a threshold decision
PERCENT_PRECISION = 6


def compute_change(old_price: float, new_price: float) -> tuple[float, Optional[float]]:
    """
    Compute (change_amount, change_percentage) for a price transition

    The percentage is None when the old price is 0: there is no base to
    express the change against, so it is undefined rather than infinite.
    """
    change_amount = new_price - old_price
    if old_price == 0:
        return change_amount, None
    return change_amount, round(100 * change_amount / old_price, PERCENT_PRECISION)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EventModel(BaseModel):
    """Base for immutable queue messages"""
    
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore"
    )
    
    def to_json(self) -> str:
        """Serialize to the wire format"""
        return self.model_dump_json(by_alias=True)
    
    @classmethod
    def from_json(cls, body):
        """
        Deserialize a queue payload

        Raises:
            MalformedMessageError: If the payload is not UTF-8 JSON or does
                not match the schema
        """
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedMessageError(f"Invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedMessageError(f"Expected a JSON object, got {type(data).__name__}")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise MalformedMessageError(
                f"Invalid {cls.__name__} payload: {e.error_count()} error(s): {e.errors()[0]['msg']}"
            ) from e


class ChangeEvent(EventModel):
    """One product price transition, produced by the publisher"""
    
    product_id: str = Field(..., min_length=1)
    product_name: str = ""
    old_price: float = Field(..., ge=0)
    new_price: float = Field(..., ge=0)
    change_amount: float
    change_percentage: Optional[float] = None
    updated_by: str = "seller"
    timestamp: datetime
    
    @model_validator(mode="before")
    @classmethod
    def derive_change(cls, data: Any) -> Any:
        """Always recompute amount and percentage from the two prices"""
        if not isinstance(data, dict):
            return data
        old_price = data.get("oldPrice", data.get("old_price"))
        new_price = data.get("newPrice", data.get("new_price"))
        try:
            change_amount, change_percentage = compute_change(float(old_price), float(new_price))
        except (TypeError, ValueError):
            # Leave it to field validation to report
            return data
        data = {
            k: v for k, v in data.items()
            if k not in ("change_amount", "change_percentage")
        }
        data["changeAmount"] = change_amount
        data["changePercentage"] = change_percentage
        return data
    
    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)
    
    @classmethod
    def from_prices(
        cls,
        product_id: str,
        product_name: str,
        old_price: float,
        new_price: float,
        updated_by: str = "seller",
        timestamp: Optional[datetime] = None
    ) -> "ChangeEvent":
        """Build an event for a product update"""
        return cls(
            product_id=product_id,
            product_name=product_name,
            old_price=old_price,
            new_price=new_price,
            updated_by=updated_by,
            timestamp=timestamp or datetime.now(timezone.utc)
        )
    
    @property
    def idempotency_key(self) -> str:
        """
        Stable key shared by every redelivery of this event

        Redeliveries carry the exact payload, so the full-precision
        timestamp keeps distinct changes with equal prices apart.
        """
        stamp = self.timestamp.isoformat()
        raw = f"{self.product_id}|{self.old_price:.6f}|{self.new_price:.6f}|{stamp}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class AlertType(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class AlertEvent(EventModel):
    """A significant price transition, produced by the history consumer"""
    
    alert_id: Optional[str] = None
    alert_type: AlertType
    product_id: str = Field(..., min_length=1)
    product_name: str = ""
    old_price: float
    new_price: float
    change_amount: float
    change_percentage: float
    alert_time: datetime
    
    @field_validator("alert_time")
    @classmethod
    def normalize_alert_time(cls, value: datetime) -> datetime:
        return _as_utc(value)
    
    @property
    def is_increase(self) -> bool:
        return self.alert_type == AlertType.INCREASE
    
    @property
    def dedup_key(self) -> str:
        """Key for per-recipient sent markers"""
        if self.alert_id:
            return self.alert_id
        raw = f"{self.product_id}|{self.old_price:.6f}|{self.new_price:.6f}|{self.alert_time.isoformat()}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()
