from config.base import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

SUPABASE_URL = "http://localhost:54321"
SUPABASE_ANON_KEY = "test-anon-key"
SUPABASE_SERVICE_ROLE_KEY = "test-service-role-key"
SMTP_HOST = "localhost"
ADMIN_NOTIFICATION_EMAIL = "admin@example.com"
PORTAL_URL = "http://portal.test"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
