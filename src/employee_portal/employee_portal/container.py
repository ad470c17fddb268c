from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from .attendance.service import AttendanceService
from .attendance.supabase_attendance_repository import SupabaseAttendanceRepository
from .backend.auth import AuthGateway, SupabaseAuthGateway
from .backend.connection import BackendConfig, BackendConnection
from .backend.storage import StorageGateway, SupabaseStorageGateway
from .cache.query_cache import QueryCache
from .core.constants import MAX_CACHE_SIZE
from .dashboard.service import DashboardService
from .dashboard.supabase_dashboard_repository import SupabaseDashboardRepository
from .devices.identity import DeviceIdentityProvider, FingerprintDeviceIdentity
from .devices.storage import SessionDeviceStorage
from .devices.supabase_device_repository import SupabaseDeviceRepository
from .events.service import EventService
from .events.supabase_event_repository import SupabaseEventRepository
from .notifications.mailer import SmtpMailer, SmtpSettings
from .notifications.service import NotificationService
from .notifications.supabase_recipient_repository import SupabaseRecipientRepository
from .notifications.templates import EmailRenderer
from .policies.service import PolicyService
from .policies.supabase_policy_repository import SupabasePolicyRepository
from .reports.service import ReportService
from .schedules.service import ScheduleService
from .schedules.supabase_schedule_repository import SupabaseScheduleRepository
from .tasks.service import TaskService
from .tasks.supabase_task_repository import SupabaseTaskRepository
from .users.service import AuthService, EmployeeService
from .users.supabase_user_repository import SupabaseUserRepository


def session_device_identity() -> DeviceIdentityProvider:
    """Device identity persisted in the caller's signed session cookie."""
    return FingerprintDeviceIdentity(SessionDeviceStorage())


@dataclass(frozen=True)
class Container:
    cache: QueryCache
    auth_gateway: AuthGateway
    storage: StorageGateway

    auth_service: AuthService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    schedule_service: ScheduleService
    task_service: TaskService
    event_service: EventService
    policy_service: PolicyService
    dashboard_service: DashboardService
    report_service: ReportService
    notification_service: NotificationService

    device_identity_factory: Callable[[], DeviceIdentityProvider] = field(default=session_device_identity)


def build_container(settings: Any) -> Container:
    """Wire Supabase-backed repositories into services from a settings module."""

    conn = BackendConnection.get_instance(
        BackendConfig(
            url=str(getattr(settings, "SUPABASE_URL")),
            anon_key=str(getattr(settings, "SUPABASE_ANON_KEY")),
            service_role_key=str(getattr(settings, "SUPABASE_SERVICE_ROLE_KEY")),
        )
    )
    cache = QueryCache(max_size=int(getattr(settings, "CACHE_MAX_SIZE", MAX_CACHE_SIZE)))

    users_repo = SupabaseUserRepository(conn)
    attendance_repo = SupabaseAttendanceRepository(conn)
    task_repo = SupabaseTaskRepository(conn)
    event_repo = SupabaseEventRepository(conn)
    devices_repo = SupabaseDeviceRepository(conn)
    auth_gateway = SupabaseAuthGateway(conn)
    storage = SupabaseStorageGateway(conn)

    company_name = str(getattr(settings, "COMPANY_NAME", "PlayFunia"))
    notification_service = NotificationService(
        SmtpMailer(
            SmtpSettings(
                host=str(getattr(settings, "SMTP_HOST")),
                port=int(getattr(settings, "SMTP_PORT", 587)),
                secure=bool(getattr(settings, "SMTP_SECURE", False)),
                user=str(getattr(settings, "SMTP_USER", "")),
                password=str(getattr(settings, "SMTP_PASS", "")),
                from_email=str(getattr(settings, "SMTP_FROM")),
                from_name=str(getattr(settings, "SMTP_FROM_NAME", f"{company_name} Employee Portal")),
            )
        ),
        EmailRenderer(company_name=company_name, portal_url=str(getattr(settings, "PORTAL_URL"))),
        SupabaseRecipientRepository(conn),
        admin_email=getattr(settings, "ADMIN_NOTIFICATION_EMAIL", None) or None,
    )

    return Container(
        cache=cache,
        auth_gateway=auth_gateway,
        storage=storage,
        auth_service=AuthService(users_repo, auth_gateway),
        employee_service=EmployeeService(users_repo, auth_gateway, cache, notification_service),
        attendance_service=AttendanceService(attendance_repo, devices_repo, cache),
        schedule_service=ScheduleService(SupabaseScheduleRepository(conn), cache, notification_service),
        task_service=TaskService(
            task_repo,
            users_repo,
            cache,
            notification_service,
            storage=storage,
            media_bucket=str(getattr(settings, "STORAGE_BUCKET_TASK_MEDIA", "task-media")),
        ),
        event_service=EventService(event_repo, users_repo, cache, notification_service),
        policy_service=PolicyService(
            SupabasePolicyRepository(conn),
            storage,
            cache,
            bucket=str(getattr(settings, "STORAGE_BUCKET_POLICIES", "policy-media")),
        ),
        dashboard_service=DashboardService(SupabaseDashboardRepository(conn), cache),
        report_service=ReportService(attendance_repo, task_repo, event_repo, users_repo),
        notification_service=notification_service,
    )
