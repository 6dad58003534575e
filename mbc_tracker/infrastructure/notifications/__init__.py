from mbc_tracker.infrastructure.notifications.logging_sender import LoggingNotificationSender
from mbc_tracker.infrastructure.notifications.templates import (
    build_magic_link,
    render_magic_link_message,
)

__all__ = ["LoggingNotificationSender", "build_magic_link", "render_magic_link_message"]
