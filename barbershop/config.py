# barbershop/config.py

import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./barbershop.db")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me-later")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOYALTY_POINTS_PER_SERVICE = int(os.getenv("LOYALTY_POINTS_PER_SERVICE", "10"))
LOYALTY_POINTS_PER_LEVEL = 200

shop_settings = {
    "timezone": os.getenv("SHOP_TIMEZONE", "America/Sao_Paulo"),
    "open_time": "09:00",
    "close_time": "19:00",
    "slot_minutes": int(os.getenv("SLOT_MINUTES", "15")),
    "currency_symbol": "R$",
}
