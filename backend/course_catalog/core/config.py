# File: backend/course_catalog/core/config.py

import os
from dotenv import load_dotenv

load_dotenv()  # If using a .env file

# ------------------
# Database settings
# ------------------
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "course_catalog")

# ------------------
# JWT Auth
# ------------------
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "supersecretkey")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRES_SECONDS = int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "3600"))
RESET_TOKEN_EXPIRES_SECONDS = int(os.getenv("RESET_TOKEN_EXPIRES_SECONDS", "3600"))

# ------------------
# Mail relay (password reset links)
# ------------------
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
EMAIL_USER = os.getenv("EMAIL_USER", "")
EMAIL_PASS = os.getenv("EMAIL_PASS", "")

# Reset links point at the front end, e.g. {FRONTEND_URL}/reset-password?token=...
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# ------------------
# HTTP server
# ------------------
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ------------------
# Optional bootstrap admin
# ------------------
FIRST_ADMIN_EMAIL = os.getenv("FIRST_ADMIN_EMAIL")
FIRST_ADMIN_PASSWORD = os.getenv("FIRST_ADMIN_PASSWORD")
