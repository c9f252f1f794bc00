import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./merchant_verification.db")

VERIFICATION_MODE = os.getenv("VERIFICATION_MODE", "dummy").lower()

MAX_BANK_ATTEMPTS_PER_DAY = 3
MAX_UPI_ATTEMPTS_PER_DAY = 5
MAX_BANK_ACCOUNTS_PER_STORE = 3
MAX_UPI_ACCOUNTS_PER_STORE = 5
VERIFICATION_COOLDOWN_SECONDS = 10
NAME_MATCH_THRESHOLD = 0.6

CONFIRM_DELAY_SECONDS = float(os.getenv("CONFIRM_DELAY_SECONDS", "2.5"))
CONFIRM_ATTEMPTS = int(os.getenv("CONFIRM_ATTEMPTS", "1"))
PROVIDER_TIMEOUT_SECONDS = int(os.getenv("PROVIDER_TIMEOUT_SECONDS", "10"))

# 0 = pennyless validation, anything else is a penny drop of that many paise
VALIDATION_AMOUNT_PAISE = int(os.getenv("VALIDATION_AMOUNT_PAISE", "0"))

ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")
CRON_SECRET = os.getenv("CRON_SECRET")

RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID", "")
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "")
RAZORPAY_BASE_URL = os.getenv("RAZORPAY_BASE_URL", "https://api.razorpay.com/v1")
RAZORPAY_X_ACCOUNT_NUMBER = os.getenv("RAZORPAY_X_ACCOUNT_NUMBER", "")

BANK_VERIFICATION_ENCRYPTION_KEY = os.getenv("BANK_VERIFICATION_ENCRYPTION_KEY", "")

DEFAULT_CONTACT_EMAIL = "noreply@merchant.local"
DEFAULT_CONTACT_PHONE = "0000000000"
