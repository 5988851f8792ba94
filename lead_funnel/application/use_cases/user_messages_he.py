"""Hebrew user-facing messages for the visitor chat and the owner email."""


class UserMessagesHE:
    """Centralized Hebrew user-facing messages."""

    # Identity capture
    ASK_NAME = "רגע לפני שנמשיך, איך קוראים לך? 😊"

    @staticmethod
    def ask_email(name: str) -> str:
        """Generate email question addressed by name."""
        if name:
            return f"נעים מאוד {name}! מה כתובת האימייל שלך?"
        return "מה כתובת האימייל שלך?"

    INVALID_EMAIL = "נראה שכתובת האימייל לא תקינה. אפשר לנסות שוב? (לדוגמה: name@example.com)"
    ASK_PHONE = "ומה מספר הטלפון שלך?"
    INVALID_PHONE = "מספר הטלפון לא נראה תקין. אפשר לנסות שוב? (לדוגמה: 050-1234567)"

    # Chat failures
    RETRY = "שגיאת רשת. נסה שוב."

    # Owner notification email
    EMAIL_HEADING = "🧲 ליד חדש הגיע!"
    EMAIL_LEAD_DETAILS = "פרטי הליד"
    EMAIL_NAME = "👤 שם:"
    EMAIL_PHONE = "📱 טלפון:"
    EMAIL_EMAIL = "📧 אימייל:"
    EMAIL_NOT_GIVEN = "לא צוין"
    EMAIL_WHATSAPP = "💬 שלח הודעה בווטסאפ"
    EMAIL_RATING = "⭐ דירוג:"
    EMAIL_ANALYSIS_HEADING = "📋 דוח ניתוח השיחה"
    EMAIL_SUMMARY = "סיכום השיחה:"
    EMAIL_PAINS = "🎯 כאבים שזוהו:"
    EMAIL_BENEFITS = "✨ תועלות פוטנציאליות:"
    EMAIL_SALES_SCRIPT = "📞 תסריט שיחה מוצע:"
    EMAIL_FOOTER = "נשלח על ידי Magnt.AI - מערכת מגנטים ומחממי לידים"

    @staticmethod
    def email_subject(task_title: str, lead_name: str) -> str:
        """Generate the owner email subject."""
        return f"🧲 ליד חדש מהמגנט: {task_title} - {lead_name}"

    @staticmethod
    def email_source(task_title: str) -> str:
        """Generate the line naming the magnet the lead came from."""
        return f"מהמגנט: {task_title}"

    @staticmethod
    def low_engagement(turns: int, threshold: int) -> str:
        """Generate the low-engagement notice."""
        return (
            f"⚠️ <strong>שים לב:</strong> ליד זה ענה רק {turns} הודעות (פחות מ-{threshold}), "
            "לכן לא שלחנו לך סיכום ודוח מפורט.<br><br>"
            "מומלץ ליצור קשר ולברר אם יש עניין בשירות שלך."
        )

    ANALYSIS_UNAVAILABLE = (
        "⚠️ <strong>שים לב:</strong> לא הצלחנו להפיק דוח ניתוח לשיחה הזו. "
        "מומלץ לעבור על השיחה וליצור קשר עם הליד."
    )
