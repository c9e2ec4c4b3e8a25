# Global Constants

class TaskStatus:
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class NotificationTypes:
    REMINDER = "reminder"
    OVERDUE = "overdue"
    COMMENT = "comment"
    MENTION = "mention"
    UPDATE = "update"


# Types the outbox emails; comment and mention stay in-app only
EMAILED_NOTIFICATION_TYPES = [
    NotificationTypes.REMINDER,
    NotificationTypes.OVERDUE,
    NotificationTypes.UPDATE,
]

# Minutes before deadline: 7d, 3d, 1d
DEFAULT_REMINDERS_MIN = [10080, 4320, 1440]

# Longest accepted reminder offset: one year before the deadline
MAX_REMINDER_OFFSET_MIN = 525600

# Comment bodies are clipped to this many characters inside notification messages
MESSAGE_SNIPPET_LENGTH = 140
