# taskpulse/services/notifier.py
"""
Email notifications for committed mutations.

Services hand NotificationEvent objects to the NotificationDispatcher, which
queues them and delivers from a background worker thread. A delivery
failure is logged and dropped; it never reaches the request that produced
the event.
"""

import enum
import logging
import queue
import smtplib
import ssl
import threading
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Dict, Optional

from taskpulse.config.settings import settings
from taskpulse.exceptions import NotifierError

logger = logging.getLogger(__name__)


class EventKind(str, enum.Enum):
    DEPT_CREATE = "dept_create"
    DEPT_UPDATE = "dept_update"
    DEPT_ADD_EMPLOYEE = "dept_add_employee"
    DEPT_REMOVE_EMPLOYEE = "dept_remove_employee"
    PROJ_CREATE = "proj_create"
    PROJ_UPDATE = "proj_update"
    PROJ_ADD_MEMBER = "proj_add_member"
    PROJ_REMOVE_MEMBER = "proj_remove_member"
    TASK_CREATE = "task_create"
    TASK_UPDATE = "task_update"
    TASK_DELETE = "task_delete"
    TASK_STATUS_UPDATE = "task_status_update"


@dataclass(frozen=True)
class Recipient:
    user_id: str
    email: str
    name: str


@dataclass
class NotificationEvent:
    recipient: Recipient
    kind: EventKind
    data: Dict[str, Any] = field(default_factory=dict)


# Subject and body per event kind; placeholders come from the event data
TEMPLATES: Dict[EventKind, Dict[str, str]] = {
    EventKind.DEPT_CREATE: {
        "subject": "Department created: {department_name}",
        "body": "The department '{department_name}' was created by {actor_name}.",
    },
    EventKind.DEPT_UPDATE: {
        "subject": "Department updated: {department_name}",
        "body": "The department '{department_name}' was updated by {actor_name}.",
    },
    EventKind.DEPT_ADD_EMPLOYEE: {
        "subject": "New member in {department_name}",
        "body": "{employee_name} was added to the department '{department_name}' by {actor_name}.",
    },
    EventKind.DEPT_REMOVE_EMPLOYEE: {
        "subject": "Member left {department_name}",
        "body": "{employee_name} was removed from the department '{department_name}' by {actor_name}.",
    },
    EventKind.PROJ_CREATE: {
        "subject": "New project: {project_name}",
        "body": "The project '{project_name}' was created by {actor_name}. "
                "It runs from {start_date} to {end_date}.",
    },
    EventKind.PROJ_UPDATE: {
        "subject": "Project updated: {project_name}",
        "body": "The project '{project_name}' was updated by {actor_name}. Current status: {status}.",
    },
    EventKind.PROJ_ADD_MEMBER: {
        "subject": "Team change on {project_name}",
        "body": "{member_name} joined the team of '{project_name}' (added by {actor_name}).",
    },
    EventKind.PROJ_REMOVE_MEMBER: {
        "subject": "Team change on {project_name}",
        "body": "{member_name} left the team of '{project_name}' (removed by {actor_name}).",
    },
    EventKind.TASK_CREATE: {
        "subject": "New task: {task_title}",
        "body": "The task '{task_title}' was created by {actor_name} and assigned to {assignee_name}. "
                "Due date: {due_date}. Priority: {priority}.",
    },
    EventKind.TASK_UPDATE: {
        "subject": "Task updated: {task_title}",
        "body": "The task '{task_title}' was updated by {actor_name}.",
    },
    EventKind.TASK_DELETE: {
        "subject": "Task deleted: {task_title}",
        "body": "The task '{task_title}' was deleted by {actor_name}.",
    },
    EventKind.TASK_STATUS_UPDATE: {
        "subject": "Task status changed: {task_title}",
        "body": "{actor_name} changed the status of '{task_title}' from {old_status} to {status}.",
    },
}


class _TemplateData(dict):
    def __missing__(self, key):
        return ""


def render(kind: EventKind, data: Dict[str, Any], recipient: Recipient) -> Dict[str, str]:
    """Render subject and body for one recipient"""
    template = TEMPLATES[kind]
    values = _TemplateData(data)
    body = f"Hello {recipient.name},\n\n{template['body'].format_map(values)}\n\nTask Pulse"
    return {"subject": template["subject"].format_map(values), "body": body}


class Notifier:
    """Delivers one notification to one recipient"""

    def notify(self, recipient: Recipient, kind: EventKind, data: Dict[str, Any]) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Used when SMTP is not configured"""

    def notify(self, recipient: Recipient, kind: EventKind, data: Dict[str, Any]) -> None:
        message = render(kind, data, recipient)
        logger.info(f"[{kind.value}] to {recipient.email}: {message['subject']}")


class EmailNotifier(Notifier):
    """Sends plain-text mail over SMTP (SSL on 465, STARTTLS otherwise)"""

    def __init__(self, smtp: Dict[str, Any]):
        self.smtp = smtp

    def _open(self) -> smtplib.SMTP:
        host = self.smtp["host"]
        port = int(self.smtp["port"])
        timeout = self.smtp.get("timeout", 8)
        if port == 465:
            server = smtplib.SMTP_SSL(host, port, timeout=timeout, context=ssl.create_default_context())
        else:
            server = smtplib.SMTP(host, port, timeout=timeout)
            server.ehlo()
            server.starttls(context=ssl.create_default_context())
        server.ehlo()
        server.login(self.smtp["user"], self.smtp["password"])
        return server

    def notify(self, recipient: Recipient, kind: EventKind, data: Dict[str, Any]) -> None:
        rendered = render(kind, data, recipient)
        msg = EmailMessage()
        msg["From"] = formataddr((self.smtp.get("from_name") or "Task Pulse", self.smtp["from_email"]))
        msg["To"] = recipient.email
        msg["Subject"] = rendered["subject"]
        msg.set_content(rendered["body"])

        try:
            server = self._open()
            try:
                server.send_message(msg)
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            raise NotifierError(f"Could not deliver {kind.value} to {recipient.email}: {e}") from e
        logger.info(f"Mail sent to {recipient.email}: {rendered['subject']}")


def build_notifier() -> Notifier:
    if settings.smtp_configured():
        return EmailNotifier(settings.SMTP)
    logger.warning("SMTP is not configured, notifications will only be logged")
    return LoggingNotifier()


_STOP = object()


class NotificationDispatcher:
    """Bounded queue of notification events consumed by one worker thread"""

    def __init__(self, notifier: Notifier, maxsize: int = 1000):
        self.notifier = notifier
        self.queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.is_running:
                return
            self._worker = threading.Thread(target=self._run, name="notification-dispatcher", daemon=True)
            self._worker.start()
            logger.info("Notification dispatcher started")

    def stop(self, timeout: float = 5.0) -> None:
        with self._lock:
            worker = self._worker
            self._worker = None
        if worker is None or not worker.is_alive():
            return
        try:
            self.queue.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.warning("Notification queue full at shutdown, pending events are dropped")
            return
        worker.join(timeout)
        logger.info("Notification dispatcher stopped")

    def enqueue(self, event: NotificationEvent) -> bool:
        """Queue an event without blocking. Returns False when it had to be dropped."""
        if not self.is_running:
            self.start()
        try:
            self.queue.put_nowait(event)
        except queue.Full:
            logger.warning(f"Notification queue full, dropping {event.kind.value} for {event.recipient.email}")
            return False
        return True

    def join(self) -> None:
        """Block until every queued event has been processed"""
        self.queue.join()

    def _run(self) -> None:
        while True:
            event = self.queue.get()
            try:
                if event is _STOP:
                    return
                self._deliver(event)
            finally:
                self.queue.task_done()

    def _deliver(self, event: NotificationEvent) -> None:
        try:
            self.notifier.notify(event.recipient, event.kind, event.data)
        except NotifierError as e:
            logger.error(str(e))
        except Exception:
            logger.exception(f"Unexpected error delivering {event.kind.value} to {event.recipient.email}")


# Global instance
notification_dispatcher = NotificationDispatcher(build_notifier(), maxsize=settings.NOTIFY_QUEUE_SIZE)


def get_dispatcher() -> NotificationDispatcher:
    return notification_dispatcher
