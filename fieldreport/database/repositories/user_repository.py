from fieldreport.database.connection import get_connection, translate_errors
from fieldreport.database.repositories.base import BaseUserStore


class UserRepository(BaseUserStore):
    """Database lookups on the users table."""

    def exists(self, user_id: int) -> bool:
        with translate_errors(f"look up user {user_id}"), get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 FROM users WHERE id = %s", (user_id,))
                row = cur.fetchone()
        return row is not None
