import os
from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./confessions.db")

# Seed colleges, chat rooms, marketplace and the bootstrap chief admin on startup
SEED_DATA = os.environ.get("SEED_DATA", "true").lower() == "true"

# Bootstrap chief admin
ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "secretchat2024")

# CORS
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

# Confessions
DAILY_CONFESSION_LIMIT = 5
CONFESSION_CATEGORIES = ("crush", "funny", "secrets", "rants", "advice", "academic")
CONFESSION_MIN_LENGTH = 10
CONFESSION_MAX_LENGTH = 1000
COMMENT_MAX_LENGTH = 500
DIRECT_MESSAGE_MAX_LENGTH = 1000
CHAT_MESSAGE_MAX_LENGTH = 500
NICKNAME_MAX_LENGTH = 50

# Listing
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

# Stripe
STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET")

# Token packs sold through Stripe checkout: pack id -> (tokens, price in cents)
TOKEN_PACKS = {
    "starter": (100, 199),
    "popular": (500, 799),
    "mega": (1200, 1499),
}
