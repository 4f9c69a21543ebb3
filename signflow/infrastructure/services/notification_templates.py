"""Notification templates: kind -> subject/body (Jinja, HTML-escaped)."""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, Template

from signflow.shared.enums import NotificationKind


def _button(link_var: str, label: str) -> str:
    return (
        '<p><a href="{{ ' + link_var + ' }}" style="background:#1a4d8f;color:#fff;'
        'padding:10px 18px;text-decoration:none;border-radius:4px">' + label + "</a></p>"
    )


# kind -> (subject_template, body_template)
# Context: recipient_name, document_name, document_id, version, creator_name,
# document_link, approval_link, plus kind-specific keys.
_DEFAULT_TEMPLATES: dict[NotificationKind, tuple[str, str]] = {
    NotificationKind.APPROVAL_REQUEST: (
        "Approval requested: {{ document_name }}",
        "<p>Hello {{ recipient_name }},</p>"
        "<p>{{ sender_name or creator_name }} has sent you "
        "<strong>{{ document_name }}</strong> for approval.</p>"
        + _button("approval_link", "Review document"),
    ),
    NotificationKind.NEW_VERSION: (
        "New version to approve: {{ document_name }} (v{{ version }})",
        "<p>Hello {{ recipient_name }},</p>"
        "<p>{{ creator_name }} uploaded version {{ version }} of "
        "<strong>{{ document_name }}</strong> after it was rejected. "
        "Your approval is requested again.</p>"
        + _button("approval_link", "Review new version"),
    ),
    NotificationKind.REJECTION: (
        "Document rejected: {{ document_name }}",
        "<p>Hello {{ recipient_name }},</p>"
        "<p><strong>{{ document_name }}</strong> (version {{ version }}) was "
        "rejected by {{ rejector_name }}.</p>"
        "<p>Reason: {{ reason }}</p>"
        + _button("document_link", "Open document"),
    ),
    NotificationKind.APPROVAL_COMPLETE: (
        "Document approved: {{ document_name }}",
        "<p>Hello {{ recipient_name }},</p>"
        "<p>All approvers have signed <strong>{{ document_name }}</strong> "
        "(version {{ version }}).</p>"
        + _button("document_link", "Download signed document"),
    ),
    NotificationKind.REMINDER: (
        "Reminder: {{ document_name }} is waiting for your approval",
        "<p>Hello {{ recipient_name }},</p>"
        "<p><strong>{{ document_name }}</strong> from {{ sender_name or creator_name }} "
        "is still waiting for your approval.</p>"
        + _button("approval_link", "Review document"),
    ),
    NotificationKind.EXPIRATION: (
        "Approval deadline passed: {{ document_name }}",
        "<p>Hello {{ recipient_name }},</p>"
        "<p>The approval deadline ({{ deadline }}) for "
        "<strong>{{ document_name }}</strong> has passed and the document expired.</p>"
        "{% if pending_names %}<p>Still pending:</p><ul>"
        "{% for name in pending_names %}<li>{{ name }}</li>{% endfor %}</ul>{% endif %}"
        "<p>The creator can resend it to reopen the approval.</p>"
        + _button("document_link", "Open document"),
    ),
}


class NotificationTemplateRenderer:
    """Renders subject and HTML body for a notification kind."""

    def __init__(
        self,
        templates: dict[NotificationKind, tuple[str, str]] | None = None,
    ) -> None:
        """Initialize with optional template dict; falls back to _DEFAULT_TEMPLATES."""
        self._templates = templates or _DEFAULT_TEMPLATES
        self._subject_env = Environment(autoescape=False)
        self._body_env = Environment(autoescape=True)
        self._compiled: dict[NotificationKind, tuple[Template, Template]] = {}
        for kind, (sub_str, body_str) in self._templates.items():
            self._compiled[kind] = (
                self._subject_env.from_string(sub_str),
                self._body_env.from_string(body_str),
            )

    def render(self, kind: NotificationKind, context: dict[str, Any]) -> tuple[str, str]:
        """Render subject and body. Raises KeyError if the kind has no template."""
        if kind not in self._compiled:
            raise KeyError(f"Unknown notification template: {kind}")
        ctx = {"sender_name": None, **context}
        subject_tpl, body_tpl = self._compiled[kind]
        subject = " ".join(subject_tpl.render(**ctx).split())
        body = body_tpl.render(**ctx)
        return subject, body
