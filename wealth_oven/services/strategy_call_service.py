"""
Strategy Call Service - discovery call bookings
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from wealth_oven.models import StrategyCallBooking
from wealth_oven.services.errors import NotFoundError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("phone_number", "company", "preferred_date", "preferred_time_slot", "timezone")


class StrategyCallService:

    @staticmethod
    def create_booking(data: Dict[str, Any], db: Session, user_id: Optional[str] = None) -> StrategyCallBooking:
        booking = StrategyCallBooking(
            user_id=user_id,
            email=data["email"],
            phone_number=data.get("phone_number"),
            name=data["name"],
            company=data.get("company"),
            preferred_date=str(data["preferred_date"]),
            preferred_time_slot=data["preferred_time_slot"],
            timezone=data.get("timezone") or "UTC",
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)

        logger.info(
            f"Strategy call booked for {booking.preferred_date} {booking.preferred_time_slot}",
            extra={"request_id": booking.id, "user_id": user_id},
        )
        return booking

    @staticmethod
    def list_bookings(db: Session) -> List[StrategyCallBooking]:
        return db.query(StrategyCallBooking).order_by(StrategyCallBooking.created_at.desc()).all()

    @staticmethod
    def list_user_bookings(user_id: str, db: Session) -> List[StrategyCallBooking]:
        return (
            db.query(StrategyCallBooking)
            .filter(StrategyCallBooking.user_id == user_id)
            .order_by(StrategyCallBooking.created_at.desc())
            .all()
        )

    @staticmethod
    def get_booking(booking_id: str, db: Session) -> StrategyCallBooking:
        booking = db.query(StrategyCallBooking).filter(StrategyCallBooking.id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    def update_booking(booking_id: str, fields: Dict[str, Any], db: Session) -> StrategyCallBooking:
        booking = StrategyCallService.get_booking(booking_id, db)
        for key, value in fields.items():
            if key in EDITABLE_FIELDS and value is not None:
                setattr(booking, key, str(value) if key == "preferred_date" else value)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def delete_booking(booking_id: str, db: Session) -> None:
        booking = StrategyCallService.get_booking(booking_id, db)
        db.delete(booking)
        db.commit()

    @staticmethod
    def has_existing_bookings(user_id: str, db: Session) -> bool:
        return (
            db.query(StrategyCallBooking.id)
            .filter(StrategyCallBooking.user_id == user_id)
            .first()
            is not None
        )
