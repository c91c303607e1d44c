"""Base abstract models and the transactional outbox.

Provides:
- ``TimestampedModel``: ``created_at`` / ``updated_at`` bookkeeping only
  (integer primary key from ``DEFAULT_AUTO_FIELD``).
- ``BaseModel``: UUIDv7 primary key on top of ``TimestampedModel``.
- ``SoftDeleteModel``: timestamps plus soft-delete via ``deleted_at``.
- ``OutboxEvent``: Transactional Outbox row for post-commit side effects.

Design decisions:
- Catalog and basket records keep integer identifiers (they are referenced
  by id inside outbound messages); orders use UUIDv7.
- ``objects`` manager on soft-deletable models returns ALL records.  Use
  ``.alive()`` explicitly to exclude soft-deleted rows.
- ``save()`` guard ensures ``updated_at`` is included when ``update_fields``
  is specified (Django skips ``auto_now`` fields otherwise).
"""

from __future__ import annotations

from datetime import timedelta

from django.db import models
from django.utils import timezone
from uuid_utils.compat import uuid7

# ---------------------------------------------------------------------------
# Timestamps / identifiers
# ---------------------------------------------------------------------------


class TimestampedModel(models.Model):
    """Abstract base with timestamp bookkeeping."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


class BaseModel(TimestampedModel):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid7,
        editable=False,
    )

    class Meta:
        abstract = True


# ---------------------------------------------------------------------------
# Soft Delete infrastructure
# ---------------------------------------------------------------------------


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet with soft-delete helpers."""

    def alive(self) -> SoftDeleteQuerySet:
        """Return only non-deleted records."""
        return self.filter(deleted_at__isnull=True)


class SoftDeleteManager(models.Manager):
    """Manager that exposes ``.alive()`` on the queryset."""

    def get_queryset(self) -> SoftDeleteQuerySet:
        return SoftDeleteQuerySet(self.model, using=self._db)

    def alive(self) -> SoftDeleteQuerySet:
        return self.get_queryset().alive()


class SoftDeleteModel(TimestampedModel):
    """Abstract model with soft-delete via a single ``deleted_at`` timestamp.

    - ``objects`` is **unfiltered** (returns all rows).
    - Use ``Model.objects.alive()`` to exclude soft-deleted rows.
    - ``delete()`` performs a soft-delete.
    """

    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        default=None,
        db_index=True,
    )

    objects = SoftDeleteManager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        """Computed: ``True`` when the record has been soft-deleted."""
        return self.deleted_at is not None

    def delete(self, using=None, keep_parents=False) -> tuple[int, dict[str, int]]:
        """Soft-delete this instance (no-op if already deleted)."""
        if self.is_deleted:
            return 0, {}
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at", "updated_at"])
        return 1, {self._meta.label: 1}


# ---------------------------------------------------------------------------
# Transactional Outbox
# ---------------------------------------------------------------------------


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PUBLISHED = "PUBLISHED", "Published"
    FAILED = "FAILED", "Failed"


class OutboxEventQuerySet(models.QuerySet):
    def deliverable(self, max_retries: int, now=None) -> OutboxEventQuerySet:
        """Rows the relay should (re)try: pending, or failed and due."""
        now = now or timezone.now()
        due_failures = models.Q(
            status=EventStatus.FAILED,
            retry_count__lt=max_retries,
            next_attempt_at__lte=now,
        )
        return self.filter(models.Q(status=EventStatus.PENDING) | due_failures)

    def exhausted(self, max_retries: int) -> OutboxEventQuerySet:
        return self.filter(status=EventStatus.FAILED, retry_count__gte=max_retries)


class OutboxEvent(BaseModel):
    """Transactional Outbox row for reliable post-commit delivery.

    Rows are written in the **same database transaction** as the business
    data that produced them.  The ``OutboxRelay`` delivers each row through
    the handler registered for its ``topic``; rows that fail are retried by
    the ``orders.relay_outbox`` Celery task with exponential backoff.

    Workflow:
    1. Service creates ``OutboxEvent`` inside ``transaction.atomic()``.
    2. After commit the service dispatches the new rows once.
    3. On success → ``mark_as_published()``.
    4. On failure → ``mark_as_failed(error, backoff)`` increments
       ``retry_count`` and schedules ``next_attempt_at``.
    """

    event_type = models.CharField(max_length=100)
    schema_version = models.PositiveSmallIntegerField(default=1)
    payload = models.JSONField()
    aggregate_id = models.CharField(max_length=255)
    topic = models.CharField(max_length=100)
    correlation_id = models.CharField(max_length=255, blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=EventStatus.choices,
        default=EventStatus.PENDING,
    )
    processed_at = models.DateTimeField(null=True, blank=True, default=None)
    next_attempt_at = models.DateTimeField(null=True, blank=True, default=None)
    error_message = models.TextField(null=True, blank=True, default=None)  # noqa: DJ01
    retry_count = models.PositiveIntegerField(default=0)

    objects = OutboxEventQuerySet.as_manager()

    class Meta:
        db_table = "outbox_events"
        ordering = ["created_at"]
        indexes = [
            models.Index(
                fields=["event_type"],
                name="outbox_event_type_idx",
            ),
            models.Index(
                fields=["aggregate_id"],
                name="outbox_aggregate_id_idx",
            ),
            models.Index(
                fields=["status", "created_at"],
                name="outbox_status_created_idx",
            ),
        ]

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def mark_as_published(self) -> None:
        """Mark event as successfully published."""
        self.status = EventStatus.PUBLISHED
        self.processed_at = timezone.now()
        self.error_message = None
        self.next_attempt_at = None
        self.save(
            update_fields=[
                "status",
                "processed_at",
                "error_message",
                "next_attempt_at",
                "updated_at",
            ]
        )

    def mark_as_failed(self, error: str, backoff: float = 0) -> None:
        """Mark event as failed, record the error and schedule the next try.

        The delay doubles with every failed attempt: ``backoff * 2**(n-1)``.
        """
        self.status = EventStatus.FAILED
        self.error_message = error
        self.retry_count += 1
        delay = backoff * (2 ** (self.retry_count - 1))
        self.next_attempt_at = timezone.now() + timedelta(seconds=delay)
        self.save(
            update_fields=[
                "status",
                "error_message",
                "retry_count",
                "next_attempt_at",
                "updated_at",
            ]
        )

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.event_type} [{self.status}] ({self.aggregate_id})"
