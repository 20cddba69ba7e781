from datetime import datetime
from typing import Any

from psycopg.rows import dict_row

from fieldreport.database.connection import get_connection, translate_errors
from fieldreport.database.repositories.base import BaseReportStore
from fieldreport.reports.models import Report, ReportImage, ReportStatus

_REPORT_COLUMNS = "id, user_id, description, date, status::text AS status"


def _to_report(row: dict[str, Any]) -> Report:
    return Report(
        id=row["id"],
        user_id=row["user_id"],
        description=row["description"],
        submitted_at=row["date"],
        status=ReportStatus(row["status"]),
    )


class ReportRepository(BaseReportStore):
    """Database operations for the reports and report_images tables."""

    def create(self, user_id: int, description: str) -> Report:
        with translate_errors(f"create report for user {user_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO reports (user_id, description, status)
                    VALUES (%s, %s, 'PENDING')
                    RETURNING {_REPORT_COLUMNS}
                    """,
                    (user_id, description),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT ... RETURNING produced no row")
        return _to_report(row)

    def add_image(self, report_id: int, stored_path: str) -> ReportImage:
        with translate_errors(f"add image to report {report_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO report_images (report_id, url)
                    VALUES (%s, %s)
                    RETURNING id, report_id, url
                    """,
                    (report_id, stored_path),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT ... RETURNING produced no row")
        return ReportImage(id=row["id"], report_id=row["report_id"], stored_path=row["url"])

    def find_by_id(self, report_id: int) -> Report | None:
        with translate_errors(f"load report {report_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_REPORT_COLUMNS} FROM reports WHERE id = %s",
                    (report_id,),
                )
                row = cur.fetchone()
        return _to_report(row) if row is not None else None

    def list_images(self, report_id: int) -> list[ReportImage]:
        with translate_errors(f"list images of report {report_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, report_id, url
                    FROM report_images
                    WHERE report_id = %s
                    ORDER BY id
                    """,
                    (report_id,),
                )
                rows = cur.fetchall()
        return [
            ReportImage(id=row["id"], report_id=row["report_id"], stored_path=row["url"])
            for row in rows
        ]

    def update_status(
        self,
        report_id: int,
        status: ReportStatus,
        expected: ReportStatus,
    ) -> Report | None:
        with translate_errors(f"update status of report {report_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE reports
                    SET status = %s::report_status
                    WHERE id = %s AND status = %s::report_status
                    RETURNING {_REPORT_COLUMNS}
                    """,
                    (status.value, report_id, expected.value),
                )
                row = cur.fetchone()
            conn.commit()
        return _to_report(row) if row is not None else None

    def find_pending_without_images(self, created_before: datetime) -> list[Report]:
        with translate_errors("find incomplete reports"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_REPORT_COLUMNS}
                    FROM reports r
                    WHERE r.status = 'PENDING'
                      AND r.date < %s
                      AND NOT EXISTS (
                          SELECT 1 FROM report_images i WHERE i.report_id = r.id
                      )
                    ORDER BY r.date
                    """,
                    (created_before,),
                )
                rows = cur.fetchall()
        return [_to_report(row) for row in rows]
