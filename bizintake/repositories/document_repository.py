import json
import logging
import sqlite3
import uuid
from datetime import datetime, timedelta

from bizintake.db.connection import read_only, transaction
from bizintake.errors import Conflict, NotFound
from bizintake.models.email_draft import Campaign, EmailDraft
from bizintake.models.submission import EnrichedBusinessData, Submission, utcnow
from bizintake.repositories.base import AbstractIntakeRepository
from bizintake.repositories.normalize import (
    EMAIL_DRAFT_ALIASES,
    campaign_from_document,
    email_draft_from_document,
    enriched_data_to_document,
    first_value,
    format_timestamp,
    parse_timestamp,
    submission_from_document,
    submission_to_document,
)

logger = logging.getLogger(__name__)

SUBMISSIONS = "submissions"
GENERATED_EMAILS = "generatedEmails"
CAMPAIGNS = "campaigns"


def _next_timestamp(previous: datetime | None) -> datetime:
    """Current time, nudged forward so it is strictly later than ``previous``."""
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def _newest_first(items: list) -> list:
    return sorted(items, key=lambda item: (item.created_at, item.id), reverse=True)


class DocumentRepository(AbstractIntakeRepository):
    """
    Keyed JSON document store on SQLite: one row per (collection, id).
    Each write is a single-document read-modify-write inside one transaction.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    # -- low-level document access ------------------------------------------

    @staticmethod
    def _load(conn: sqlite3.Connection, collection: str, doc_id: str) -> dict | None:
        row = conn.execute(
            "SELECT data FROM documents WHERE collection = ? AND id = ?",
            (collection, doc_id),
        ).fetchone()
        return json.loads(row["data"]) if row else None

    @staticmethod
    def _store(conn: sqlite3.Connection, collection: str, doc_id: str, document: dict) -> None:
        conn.execute(
            """
            INSERT INTO documents (collection, id, data)
            VALUES (?, ?, ?)
            ON CONFLICT(collection, id) DO UPDATE SET
                data       = excluded.data,
                written_at = CURRENT_TIMESTAMP
            """,
            (collection, doc_id, json.dumps(document)),
        )

    def _load_all(self, collection: str) -> list[tuple[str, dict]]:
        with read_only(self._db_path) as conn:
            rows = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ?", (collection,)
            ).fetchall()
        return [(row["id"], json.loads(row["data"])) for row in rows]

    # -- submissions ---------------------------------------------------------

    def create_submission(
        self, business_type: str, city: str, province: str, country: str
    ) -> Submission:
        now = utcnow()
        submission = Submission(
            id=uuid.uuid4().hex,
            business_type=business_type,
            city=city,
            province=province,
            country=country,
            status="pending",
            created_at=now,
            updated_at=now,
        )
        with transaction(self._db_path) as conn:
            self._store(conn, SUBMISSIONS, submission.id, submission_to_document(submission))
        logger.info("[store] submission created | id=%s", submission.id)
        return submission

    def list_submissions(self) -> list[Submission]:
        return _newest_first(
            [submission_from_document(doc_id, doc) for doc_id, doc in self._load_all(SUBMISSIONS)]
        )

    def _update_submission(self, submission_id: str, changes: dict) -> Submission:
        with transaction(self._db_path) as conn:
            document = self._load(conn, SUBMISSIONS, submission_id)
            if document is None:
                raise NotFound("Submission not found")
            previous = submission_from_document(submission_id, document)
            document.update(changes)
            document["updatedAt"] = format_timestamp(_next_timestamp(previous.updated_at))
            self._store(conn, SUBMISSIONS, submission_id, document)
        return submission_from_document(submission_id, document)

    def update_submission_status(self, submission_id: str, status: str) -> Submission:
        updated = self._update_submission(submission_id, {"status": status})
        logger.info("[store] submission status updated | id=%s | status=%s", submission_id, status)
        return updated

    def apply_enriched_data(
        self, submission_id: str, data: EnrichedBusinessData
    ) -> Submission:
        updated = self._update_submission(
            submission_id, {"enrichedData": enriched_data_to_document(data)}
        )
        logger.info("[store] enrichment applied | id=%s", submission_id)
        return updated

    # -- generated emails ----------------------------------------------------

    def list_generated_emails(self) -> list[EmailDraft]:
        return _newest_first(
            [email_draft_from_document(doc_id, doc) for doc_id, doc in self._load_all(GENERATED_EMAILS)]
        )

    def _resolve_email_id(self, conn: sqlite3.Connection, email_id: str) -> str | None:
        if self._load(conn, GENERATED_EMAILS, email_id) is not None:
            return email_id
        # Older drafts are keyed by auto-id and carry the entity id in a field.
        rows = conn.execute(
            "SELECT id, data FROM documents WHERE collection = ? ORDER BY id",
            (GENERATED_EMAILS,),
        ).fetchall()
        for row in rows:
            related = first_value(json.loads(row["data"]), EMAIL_DRAFT_ALIASES["related_entity_id"])
            if related is not None and str(related) == email_id:
                return row["id"]
        return None

    def get_generated_email(self, email_id: str) -> EmailDraft:
        with read_only(self._db_path) as conn:
            doc_id = self._resolve_email_id(conn, email_id)
            document = self._load(conn, GENERATED_EMAILS, doc_id) if doc_id else None
        if document is None:
            raise NotFound("Email not found")
        return email_draft_from_document(doc_id, document)

    def _update_email(self, email_id: str, changes: dict, mark_sent: bool = False) -> EmailDraft:
        """
        Apply `changes` to one draft. A sent draft is terminal: only a repeated
        send (`mark_sent`) may touch it again.
        """
        with transaction(self._db_path) as conn:
            doc_id = self._resolve_email_id(conn, email_id)
            document = self._load(conn, GENERATED_EMAILS, doc_id) if doc_id else None
            if document is None:
                raise NotFound("Email not found")
            if not mark_sent and email_draft_from_document(doc_id, document).status == "sent":
                raise Conflict("Email has already been sent")
            previous = parse_timestamp(first_value(document, EMAIL_DRAFT_ALIASES["updated_at"]))
            now = format_timestamp(_next_timestamp(previous))
            document.update(changes)
            document["updatedAt"] = now
            if mark_sent:
                document["sentAt"] = now
            self._store(conn, GENERATED_EMAILS, doc_id, document)
        return email_draft_from_document(doc_id, document)

    def set_email_status(self, email_id: str, status: str) -> None:
        self._update_email(email_id, {"status": status}, mark_sent=status == "sent")
        logger.info("[store] email status updated | id=%s | status=%s", email_id, status)

    def update_email_content(self, email_id: str, subject: str, body: str) -> EmailDraft:
        draft = self._update_email(
            email_id,
            {
                "subject": subject,
                "aiEmail": body,
                "editedSubject": subject,
                "editedBody": body,
            },
        )
        logger.info("[store] email content updated | id=%s", email_id)
        return draft

    # -- campaigns -----------------------------------------------------------

    def list_campaigns(self) -> list[Campaign]:
        return _newest_first(
            [campaign_from_document(doc_id, doc) for doc_id, doc in self._load_all(CAMPAIGNS)]
        )
