from abc import ABC, abstractmethod

from bizintake.models.email_draft import Campaign, EmailDraft
from bizintake.models.submission import EnrichedBusinessData, Submission


class AbstractIntakeRepository(ABC):
    """Sole owner of persisted state. Unknown ids raise ``bizintake.errors.NotFound``."""

    @abstractmethod
    def create_submission(
        self, business_type: str, city: str, province: str, country: str
    ) -> Submission:
        """Persist a new submission with status 'pending' and return the stored record."""

    @abstractmethod
    def list_submissions(self) -> list[Submission]:
        """All submissions, newest first."""

    @abstractmethod
    def update_submission_status(self, submission_id: str, status: str) -> Submission:
        """Set the status, refresh updatedAt and return the updated record."""

    @abstractmethod
    def apply_enriched_data(
        self, submission_id: str, data: EnrichedBusinessData
    ) -> Submission:
        """Attach enrichment data, refresh updatedAt and return the updated record."""

    @abstractmethod
    def list_generated_emails(self) -> list[EmailDraft]:
        """All email drafts, newest first."""

    @abstractmethod
    def get_generated_email(self, email_id: str) -> EmailDraft:
        """Look a draft up by document id, falling back to its related entity id."""

    @abstractmethod
    def set_email_status(self, email_id: str, status: str) -> None:
        """Set a draft's status. A sent draft accepts only "sent" again; anything else raises Conflict."""

    @abstractmethod
    def update_email_content(self, email_id: str, subject: str, body: str) -> EmailDraft:
        """Store operator edits to a draft's subject and body."""

    @abstractmethod
    def list_campaigns(self) -> list[Campaign]:
        """All campaign entities, newest first."""
