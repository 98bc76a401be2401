"""FastAPI dependency providers.

Session generators come in two flavours: `get_db_write` for endpoints that
mutate state and `get_db_read` for read-only routes, which may be pointed at
a replica. The remaining providers hand out the shared collaborators so
tests can override them with `app.dependency_overrides`.
"""

from .database import get_read_session, get_write_session


def get_db_write():
    """Yield a write-capable DB session for FastAPI dependency injection."""
    yield from get_write_session()


def get_db_read():
    """Yield a read-only DB session for FastAPI dependency injection."""
    yield from get_read_session()


def get_dispatcher():
    from services.notification_dispatcher import notification_dispatcher

    return notification_dispatcher


def get_email_sender():
    from services.email_service import email_sender

    return email_sender


def get_image_storage():
    from services.image_storage import image_storage

    return image_storage
