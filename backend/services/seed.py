from sqlalchemy.exc import SQLAlchemyError

from config import ADMIN_USERNAME, ADMIN_PASSWORD
from database import get_db
from models import User, College, ChatRoom, MarketplaceItem
from services.auth import hash_password
from services.colleges import DEFAULT_ROOM_NAME

DEFAULT_COLLEGES = [
    ("University of California, Los Angeles", "UCLA123"),
    ("New York University", "NYU456"),
    ("University of Texas at Austin", "UT789"),
    ("University of Washington", "UW012"),
]

DEFAULT_MARKETPLACE = [
    {
        "title": "VIP Monthly",
        "description": "Gold nickname, priority review and VIP chat badge for 30 days",
        "category": "vip_features",
        "price": 300,
        "features": ["gold_nickname", "priority_review", "vip_badge"],
        "duration": 30,
    },
    {
        "title": "Confession Spotlight",
        "description": "Pin one approved confession to the top of your college feed for a day",
        "category": "premium_services",
        "price": 150,
        "features": ["spotlight"],
        "duration": 1,
    },
    {
        "title": "Private Room Pass",
        "description": "Access to invite-only chat rooms for a week",
        "category": "special_access",
        "price": 200,
        "features": ["private_rooms"],
        "duration": 7,
    },
]


def seed_defaults() -> dict:
    """Insert the bootstrap chief admin, colleges, their chat rooms and the marketplace. Idempotent."""
    db = get_db()
    created = {"admins": 0, "colleges": 0, "rooms": 0, "items": 0}
    try:
        if not db.query(User).filter(User.username == ADMIN_USERNAME).first():
            db.add(User(
                username=ADMIN_USERNAME,
                password_hash=hash_password(ADMIN_PASSWORD),
                role="chief",
                status="active"
            ))
            created["admins"] += 1

        for name, code in DEFAULT_COLLEGES:
            if not db.query(College).filter(College.code == code).first():
                db.add(College(name=name, code=code, is_active=True))
                created["colleges"] += 1
            if not db.query(ChatRoom).filter(ChatRoom.college_code == code).first():
                db.add(ChatRoom(name=DEFAULT_ROOM_NAME, college_code=code, is_active=True, max_participants=50))
                created["rooms"] += 1

        if not db.query(MarketplaceItem).first():
            for item in DEFAULT_MARKETPLACE:
                db.add(MarketplaceItem(is_active=True, **item))
                created["items"] += 1

        db.commit()
        print(f"Seed data applied: {created}")
        return created
    except SQLAlchemyError as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()
