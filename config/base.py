import os


def env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

# Outbound email (AWS SES SMTP by default)
SMTP_HOST = os.getenv("SMTP_HOST", "email-smtp.us-east-1.amazonaws.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_SECURE = env_bool("SMTP_SECURE")
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
SMTP_FROM = os.getenv("SMTP_FROM", "noreply@playfunia.com")
COMPANY_NAME = os.getenv("COMPANY_NAME", "PlayFunia")
SMTP_FROM_NAME = os.getenv("SMTP_FROM_NAME", f"{COMPANY_NAME} Employee Portal")
ADMIN_NOTIFICATION_EMAIL = os.getenv("ADMIN_NOTIFICATION_EMAIL", "")

PORTAL_URL = os.getenv("PORTAL_URL", "http://localhost:5000")

STORAGE_BUCKET_POLICIES = os.getenv("STORAGE_BUCKET_POLICIES", "policy-media")
STORAGE_BUCKET_TASK_MEDIA = os.getenv("STORAGE_BUCKET_TASK_MEDIA", "task-media")

CACHE_MAX_SIZE = int(os.getenv("CACHE_MAX_SIZE", "100"))
SESSION_LIFETIME_DAYS = int(os.getenv("SESSION_LIFETIME_DAYS", "365"))
