"""
Repository for webhook registrations (``pickhero_webhooks``).
"""

from typing import Optional

from sqlalchemy import delete, insert, select, update

from app.db.repositories.base import BaseRepository, log_operation, utcnow
from app.db.tables import webhook_table
from app.domain.models.webhook import WebhookRegistration


class WebhookRepository(BaseRepository):
    """Persists one ``WebhookRegistration`` per topic."""

    @log_operation()
    async def find_by_type(self, webhook_type: str) -> Optional[WebhookRegistration]:
        async with self.get_session() as session:
            result = await session.execute(select(webhook_table).where(webhook_table.c.type == webhook_type))
            row = result.mappings().first()
        return WebhookRegistration.from_row(row) if row else None

    @log_operation()
    async def save(self, registration: WebhookRegistration) -> WebhookRegistration:
        """
        Insert or update the registration for its topic.

        Args:
            registration: Registration to persist

        Returns:
            WebhookRegistration: The persisted registration with ``id`` set
        """
        now = utcnow()
        values = {
            "type": registration.type,
            "pickhero_webhook_id": registration.pickhero_webhook_id,
            "secret": registration.secret,
            "date_updated": now,
        }

        async with self.get_session() as session:
            result = await session.execute(select(webhook_table.c.id).where(webhook_table.c.type == registration.type))
            existing_id = result.scalar()

            if existing_id is None:
                values["date_created"] = now
                result = await session.execute(insert(webhook_table).values(**values))
                registration.id = result.inserted_primary_key[0]
                registration.date_created = now
            else:
                await session.execute(update(webhook_table).where(webhook_table.c.id == existing_id).values(**values))
                registration.id = existing_id
            await session.commit()

        registration.date_updated = now
        return registration

    @log_operation()
    async def delete(self, webhook_type: str) -> bool:
        async with self.get_session() as session:
            result = await session.execute(delete(webhook_table).where(webhook_table.c.type == webhook_type))
            await session.commit()
        return result.rowcount > 0
