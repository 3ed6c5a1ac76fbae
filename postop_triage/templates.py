"""
templates.py
============
Patient- and clinician-facing message texts, per locale.
Vietnamese ("vi") is the clinic default; "en" is available for
English-speaking patients and staff.
"""

import html
import json
from typing import Any, Dict

from .models import SeverityTier

DEFAULT_LOCALE = "vi"

MESSAGES: Dict[str, Dict[str, str]] = {
    "vi": {
        "red_sms": "⚠️ KHẨN: Hậu phẫu có dấu hiệu nguy hiểm. Bác sĩ đã được thông báo. Hãy gọi hotline ngay.",
        "red_subject": "⚠️ Khẩn cấp: Tình trạng hậu phẫu (RED)",
        "red_body": (
            "<p>Tình trạng được phân loại <b>RED (khẩn cấp)</b>. Bác sĩ đã được thông báo ngay lập tức.</p>"
            "<p>Nếu triệu chứng tăng lên, hãy gọi hotline hoặc đến cơ sở cấp cứu gần nhất.</p>"
            "<pre>{summary}</pre>"
        ),
        "yellow_subject": "Theo dõi hậu phẫu (YELLOW)",
        "yellow_body": "<p>Tình trạng cần theo dõi sát. Nhân viên y tế sẽ gọi lại trong vòng 1–2 giờ.</p>",
        "green_subject": "Hướng dẫn chăm sóc hậu phẫu (GREEN)",
        "green_body": (
            "<p>Tình trạng ổn định. Tiếp tục chăm sóc theo hướng dẫn:</p>"
            "<ul>"
            "<li>Chườm lạnh 20 phút mỗi 2 giờ</li>"
            "<li>Uống thuốc theo đơn</li>"
            "<li>Không khạc nhổ mạnh</li>"
            "</ul>"
        ),
        "clinician_subject": "⚠️ Cảnh báo hậu phẫu (RED)",
        "appointment_subject": "Xác nhận lịch hẹn",
        "appointment_body": "<p>Lịch hẹn đã được tạo:</p><p>{date} – {procedure}</p>",
    },
    "en": {
        "red_sms": "⚠️ URGENT: Your post-op check-in shows warning signs. Your clinician has been notified. Call the hotline now.",
        "red_subject": "⚠️ Urgent: post-operative status (RED)",
        "red_body": (
            "<p>Your status was classified <b>RED (urgent)</b>. Your clinician has been notified immediately.</p>"
            "<p>If symptoms get worse, call the hotline or go to the nearest emergency department.</p>"
            "<pre>{summary}</pre>"
        ),
        "yellow_subject": "Post-operative follow-up (YELLOW)",
        "yellow_body": "<p>Your status needs close monitoring. A member of staff will call you back within 1–2 hours.</p>",
        "green_subject": "Post-operative care instructions (GREEN)",
        "green_body": (
            "<p>Your status is stable. Keep following your care instructions:</p>"
            "<ul>"
            "<li>Apply a cold compress for 20 minutes every 2 hours</li>"
            "<li>Take your medication as prescribed</li>"
            "<li>Do not spit forcefully</li>"
            "</ul>"
        ),
        "clinician_subject": "⚠️ Post-operative alert (RED)",
        "appointment_subject": "Appointment confirmation",
        "appointment_body": "<p>Your appointment has been booked:</p><p>{date} – {procedure}</p>",
    },
}


def messages_for(locale: str) -> Dict[str, str]:
    """Message table for ``locale``, falling back to the clinic default."""
    return MESSAGES.get((locale or "").lower(), MESSAGES[DEFAULT_LOCALE])


def patient_email(tier: SeverityTier, summary: str, locale: str = DEFAULT_LOCALE) -> Dict[str, str]:
    """Subject and HTML body of the patient email for ``tier``."""
    m = messages_for(locale)
    if tier == SeverityTier.RED:
        return {"subject": m["red_subject"], "html": m["red_body"].format(summary=html.escape(summary, quote=False))}
    if tier == SeverityTier.YELLOW:
        return {"subject": m["yellow_subject"], "html": m["yellow_body"]}
    return {"subject": m["green_subject"], "html": m["green_body"]}


def urgent_sms(locale: str = DEFAULT_LOCALE) -> str:
    return messages_for(locale)["red_sms"]


def clinician_email(payload: Dict[str, Any], locale: str = DEFAULT_LOCALE) -> Dict[str, str]:
    body = json.dumps(payload, indent=2, ensure_ascii=False, default=str)
    return {"subject": messages_for(locale)["clinician_subject"], "html": f"<pre>{html.escape(body, quote=False)}</pre>"}


def clinician_sms(payload: Dict[str, Any]) -> str:
    return f"RED ALERT: {payload.get('name') or ''} - {payload.get('phone') or ''}"


def appointment_email(date: Any, procedure: Any, locale: str = DEFAULT_LOCALE) -> Dict[str, str]:
    m = messages_for(locale)
    return {
        "subject": m["appointment_subject"],
        "html": m["appointment_body"].format(
            date=html.escape("" if date is None else str(date)),
            procedure=html.escape("" if procedure is None else str(procedure)),
        ),
    }
