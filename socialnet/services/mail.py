"""
Outbound mail boundary.

Delivery itself belongs to an external provider; this module builds the
message and records the dispatch request.
"""

from socialnet.core.config import settings
from socialnet.core.logging import get_logger
from socialnet.models.user import User

logger = get_logger(__name__)


def build_reset_link(token: str) -> str:
    return f"{settings.password_reset_url}?token={token}"


async def send_password_reset(user: User, token: str) -> None:
    link = build_reset_link(token)
    logger.info("mail.password_reset.queued", user_id=user.id, to=user.email)
    if settings.debug:
        # local development has no mail provider; expose the link in the log
        logger.debug("mail.password_reset.link", user_id=user.id, link=link)
