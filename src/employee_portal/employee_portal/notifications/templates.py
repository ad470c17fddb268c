from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

# Header gradients per tone.
THEMES = {
    "info": ("#3b82f6", "#1d4ed8"),
    "success": ("#10b981", "#059669"),
    "warning": ("#f59e0b", "#d97706"),
    "danger": ("#ef4444", "#dc2626"),
    "muted": ("#6b7280", "#4b5563"),
    "event": ("#8b5cf6", "#7c3aed"),
}


@dataclass(frozen=True)
class Notice:
    """Content of one notification email, rendered through ``notice.html``."""

    heading: str
    intro: str
    details: Tuple[Tuple[str, str], ...] = ()
    details_title: Optional[str] = None
    greeting_name: Optional[str] = None
    outro: Tuple[str, ...] = ()
    warning: Optional[str] = None
    button_label: Optional[str] = None
    button_path: Optional[str] = None
    tone: str = "info"


def details(*pairs: Tuple[str, Any]) -> Tuple[Tuple[str, str], ...]:
    """Drop rows whose value is empty so optional fields simply disappear."""
    return tuple((label, str(value)) for label, value in pairs if value not in (None, ""))


class EmailRenderer:
    def __init__(self, *, company_name: str, portal_url: str, template_dir: Path = TEMPLATE_DIR):
        self._company_name = company_name
        self._portal_url = portal_url.rstrip("/")
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
        )

    @property
    def company_name(self) -> str:
        return self._company_name

    def url(self, path: str) -> str:
        return f"{self._portal_url}/{path.lstrip('/')}"

    def render_notice(self, notice: Notice) -> str:
        start, end = THEMES.get(notice.tone, THEMES["info"])
        return self._env.get_template("notice.html").render(
            notice=notice,
            header_start=start,
            header_end=end,
            button_url=self.url(notice.button_path) if notice.button_path else None,
            company_name=self._company_name,
        )

    def render(self, template: str, **context: Any) -> str:
        context.setdefault("company_name", self._company_name)
        return self._env.get_template(template).render(**context)


def join_days(days: Iterable[str]) -> str:
    items: List[str] = [d[:1].upper() + d[1:] for d in days if d]
    return ", ".join(items)
