"""Cache key builders. Prefixes (``admin:``, ``employee:``) are what ``invalidate`` matches on."""

ADMIN_PREFIX = "admin:"
EMPLOYEE_PREFIX = "employee:"

ADMIN_STATS = "admin:dashboard:stats"
EMPLOYEES = "admin:employees"
EVENTS = "admin:events"
TASKS = "admin:tasks"
POLICIES = "admin:policies"
ATTENDANCE_PREFIX = "admin:attendance:"


def attendance(day: str) -> str:
    return f"{ATTENDANCE_PREFIX}{day}"


def employee_dashboard(user_id: str) -> str:
    return f"employee:dashboard:{user_id}"


def employee_tasks(user_id: str, day: str) -> str:
    return f"employee:tasks:{user_id}:{day}"


def employee_events(user_id: str) -> str:
    return f"employee:events:{user_id}"
