"""Employee Portal package.

This package is organized by feature modules (users, attendance, schedules, ...)
with a thin Flask controller layer over service/repository layers. Storage, auth
and file uploads are delegated to the hosted backend (Supabase).
"""
