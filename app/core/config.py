import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./commission_engine.db")
SQLALCHEMY_DATABASE_URI = DATABASE_URL

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# JWT Settings
SECRET_KEY: str = os.getenv("SECRET_KEY", "a_very_secret_key_that_should_be_in_env_file_and_much_stronger") # In a real app, use a strong, randomly generated key
ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))

# Commission split limits, in percent of the transaction amount
COMMISSION_MAX_TIER_PERCENTAGE: Decimal = Decimal(os.getenv("COMMISSION_MAX_TIER_PERCENTAGE", "15"))
COMMISSION_MAX_TOTAL_PERCENTAGE: Decimal = Decimal(os.getenv("COMMISSION_MAX_TOTAL_PERCENTAGE", "20"))

# Number of latest ledger entries returned with user stats
COMMISSION_RECENT_LIMIT: int = int(os.getenv("COMMISSION_RECENT_LIMIT", 5))

if "a_very_secret_key" in SECRET_KEY:
    # Avoid logging the key itself.
    print("WARNING: SECRET_KEY is not configured or is using the placeholder value.")
