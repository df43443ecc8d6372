"""Module-level singletons: stores, repos and services, wired once.

Backends are chosen at import time from configuration, the same way
db/engine.py and db/redis.py decide: DATABASE_URL selects the Postgres
document store, REDIS_URL the Redis sync-cache backend,
INSTRUCTOR_SERVICE_URL the remote instructor-of-record lookup.  With none
of them set everything runs in memory.
"""

from __future__ import annotations

from app.core.config import SETTINGS
from app.db.engine import async_session_factory
from app.repos.assignment_repo import DocumentAssignmentRepo
from app.repos.course_repo import DocumentCourseRepo
from app.repos.decision_repo import DocumentDecisionRepo
from app.repos.document_store import DocumentStore, InMemoryDocumentStore
from app.repos.enrollment_repo import DocumentEnrollmentRepo
from app.repos.message_repo import DocumentMessageRepo
from app.repos.pg_document_store import PgDocumentStore
from app.repos.review_repo import DocumentReviewRepo
from app.services.cache import cache_service
from app.services.catalog_service import CatalogService
from app.services.instructor_lookup import (
    HttpInstructorLookup,
    InstructorLookup,
    StoreInstructorLookup,
)
from app.services.messaging_service import MessagingService
from app.services.moderation import ModerationStateMachine
from app.services.progress_service import ProgressService
from app.services.review_service import ReviewService
from app.services.seed_catalog import SEED_COURSES
from app.services.sync_cache import SyncCacheFactory

if async_session_factory is not None:
    document_store: DocumentStore = PgDocumentStore(async_session_factory)
else:
    document_store = InMemoryDocumentStore()

course_repo = DocumentCourseRepo(document_store)
assignment_repo = DocumentAssignmentRepo(document_store)
review_repo = DocumentReviewRepo(document_store)
enrollment_repo = DocumentEnrollmentRepo(document_store)
decision_repo = DocumentDecisionRepo(document_store)
message_repo = DocumentMessageRepo(document_store)

if SETTINGS.instructor_service_url:
    instructor_lookup: InstructorLookup = HttpInstructorLookup(
        SETTINGS.instructor_service_url, timeout=SETTINGS.upstream_timeout_seconds
    )
else:
    instructor_lookup = StoreInstructorLookup(course_repo, assignment_repo)

sync_caches = SyncCacheFactory(
    cache_service, ttl_seconds=SETTINGS.sync_cache_ttl_seconds
)

state_machine = ModerationStateMachine(course_repo, decision_repo)

catalog_service = CatalogService(
    seed=SEED_COURSES,
    courses=course_repo,
    assignments=assignment_repo,
    reviews=review_repo,
    state_machine=state_machine,
    instructor_lookup=instructor_lookup,
    timeout=SETTINGS.upstream_timeout_seconds,
)
progress_service = ProgressService(
    catalog=catalog_service, enrollments=enrollment_repo, sync_caches=sync_caches
)
review_service = ReviewService(
    catalog=catalog_service, reviews=review_repo, enrollments=enrollment_repo
)
messaging_service = MessagingService(
    catalog=catalog_service,
    messages=message_repo,
    enrollments=enrollment_repo,
    sync_caches=sync_caches,
)
