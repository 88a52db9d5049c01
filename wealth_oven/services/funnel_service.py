"""
Funnel Service - funnel catalog, categories and tags
"""
import logging
import re
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from wealth_oven.infrastructure.cache import AuctionCache
from wealth_oven.models import Auction, Category, Funnel, Tag
from wealth_oven.services.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "image_url", "category_id", "is_available_for_lease", "active")

BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def slugify_title(title: str) -> str:
    """Lowercase, keep [a-z0-9 ], spaces to hyphens, first 30 chars"""
    base = re.sub(r"[^a-z0-9 ]", "", title.lower())
    return re.sub(r"\s+", "-", base)[:30]


def generate_funnel_id(title: str, timestamp_ms: Optional[int] = None) -> str:
    """Public funnel id: slug plus a base36 millisecond timestamp"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{slugify_title(title)}-{to_base36(timestamp_ms)}"


class FunnelService:

    # ==================== Funnels ====================

    @staticmethod
    def list_funnels(db: Session, include_inactive: bool = False) -> List[Funnel]:
        query = db.query(Funnel)
        if not include_inactive:
            query = query.filter(Funnel.active.is_(True))
        return query.order_by(Funnel.created_at.desc()).all()

    @staticmethod
    def list_leasable_funnels(db: Session) -> List[Funnel]:
        return (
            db.query(Funnel)
            .filter(Funnel.active.is_(True), Funnel.is_available_for_lease.is_(True))
            .order_by(Funnel.created_at.desc())
            .all()
        )

    @staticmethod
    def get_funnel(funnel_pk: str, db: Session) -> Funnel:
        funnel = db.query(Funnel).filter(Funnel.id == funnel_pk).first()
        if not funnel:
            raise NotFoundError("Funnel not found")
        return funnel

    @staticmethod
    def get_by_public_id(funnel_id: str, db: Session) -> Funnel:
        funnel = db.query(Funnel).filter(Funnel.funnel_id == funnel_id, Funnel.active.is_(True)).first()
        if not funnel:
            raise NotFoundError("Funnel not found")
        return funnel

    @staticmethod
    def create_funnel(data: Dict[str, Any], db: Session) -> Funnel:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("Title is required")

        category_id = data.get("category_id")
        if category_id and not db.query(Category.id).filter(Category.id == category_id).first():
            raise ValidationError("Category not found")

        timestamp_ms = int(time.time() * 1000)
        funnel_id = generate_funnel_id(title, timestamp_ms)
        while db.query(Funnel.id).filter(Funnel.funnel_id == funnel_id).first():
            timestamp_ms += 1
            funnel_id = generate_funnel_id(title, timestamp_ms)

        funnel = Funnel(
            funnel_id=funnel_id,
            title=title,
            description=data.get("description"),
            image_url=data.get("image_url"),
            category_id=category_id,
            is_available_for_lease=bool(data.get("is_available_for_lease")),
            active=True,
        )
        db.add(funnel)
        db.commit()
        db.refresh(funnel)

        logger.info(f"Created funnel {funnel.funnel_id}")
        return funnel

    @staticmethod
    def update_funnel(
        funnel_pk: str,
        fields: Dict[str, Any],
        db: Session,
        cache: Optional[AuctionCache] = None,
    ) -> Funnel:
        """Edit a funnel; cached auctions that show its title are dropped"""
        funnel = FunnelService.get_funnel(funnel_pk, db)

        for key, value in fields.items():
            if key not in EDITABLE_FIELDS or value is None:
                continue
            if key == "category_id" and not db.query(Category.id).filter(Category.id == value).first():
                raise ValidationError("Category not found")
            setattr(funnel, key, value)

        db.commit()
        db.refresh(funnel)
        FunnelService._invalidate_auctions(funnel, db, cache)
        return funnel

    @staticmethod
    def delete_funnel(funnel_pk: str, db: Session, cache: Optional[AuctionCache] = None) -> Funnel:
        """Soft delete: the funnel stays referenced by auctions and purchases"""
        funnel = FunnelService.get_funnel(funnel_pk, db)
        if funnel.active:
            funnel.active = False
            db.commit()
            db.refresh(funnel)
            FunnelService._invalidate_auctions(funnel, db, cache)
            logger.info(f"Deactivated funnel {funnel.funnel_id}")
        return funnel

    @staticmethod
    def _invalidate_auctions(funnel: Funnel, db: Session, cache: Optional[AuctionCache]) -> None:
        """Auction snapshots embed funnel fields"""
        if cache is None:
            return
        auction_ids = [row.id for row in db.query(Auction.id).filter(Auction.funnel_id == funnel.id)]
        if auction_ids:
            cache.invalidate_many(auction_ids)

    # ==================== Categories ====================

    @staticmethod
    def list_categories(db: Session) -> List[Category]:
        return db.query(Category).order_by(Category.name.asc()).all()

    @staticmethod
    def create_category(name: str, db: Session) -> Category:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        if db.query(Category.id).filter(Category.name == name).first():
            raise ConflictError(f"Category '{name}' already exists")

        category = Category(name=name)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    # ==================== Tags ====================

    @staticmethod
    def list_tags(db: Session) -> List[Tag]:
        return db.query(Tag).order_by(Tag.name.asc()).all()

    @staticmethod
    def create_tag(name: str, db: Session) -> Tag:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Tag name is required")
        if db.query(Tag.id).filter(Tag.name == name).first():
            raise ConflictError(f"Tag '{name}' already exists")

        tag = Tag(name=name)
        db.add(tag)
        db.commit()
        db.refresh(tag)
        return tag
