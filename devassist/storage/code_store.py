"""
Code Store - persisted snippets, error patterns and developer context

Explicitly constructed storage handle with an init/close lifecycle. Every
operation runs in its own short transaction, so no logical transaction ever
spans an await in the pipeline.

Error-pattern dedup is intentionally approximate: a stored error counts as
"the same" when, for the same language, its text contains the first 50
characters of the new error text.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional

from sqlalchemy import or_
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from devassist.database import (
    CodeSnippet,
    DeveloperContext,
    ErrorPattern,
    create_db_engine,
    init_db,
)

logger = logging.getLogger(__name__)

# Characters of the error text used to find a similar stored error
ERROR_DEDUP_PREFIX = 50

# Characters of the error text used as the solution lookup key
ERROR_LOOKUP_PREFIX = 100

# Maximum cached solutions returned for one error
MAX_ERROR_SOLUTIONS = 5

UNKNOWN_APP = "unknown"


class StoreNotInitializedError(RuntimeError):
    """Raised when the store is used before init() or after close()."""

    pass


class CodeStore:
    """
    Relational store for the developer assistant.

    Example:
        store = CodeStore("sqlite:///./dev-assistant.db")
        store.init()
        try:
            store.save_snippet(content="print(1)", language="python", source_app="vscode")
        finally:
            store.close()
    """

    def __init__(self, database_url: str):
        """
        Initialize the store handle. No connection is opened until init().

        Args:
            database_url: SQLAlchemy database URL
        """
        self.database_url = database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    # ============================================================================
    # Lifecycle
    # ============================================================================

    def init(self) -> None:
        """Open the engine and create tables if they do not exist."""
        if self._engine is not None:
            return

        self._engine = create_db_engine(self.database_url)
        init_db(self._engine)
        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self._engine,
        )
        logger.info(f"Code store initialized: {self.database_url}")

    def close(self) -> None:
        """Dispose of the engine. The store can be re-initialized afterwards."""
        if self._engine is None:
            return

        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Code store closed")

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def __enter__(self) -> "CodeStore":
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        if self._session_factory is None:
            raise StoreNotInitializedError("CodeStore.init() has not been called")

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ============================================================================
    # Snippet Operations
    # ============================================================================

    def save_snippet(
        self,
        content: str,
        language: str,
        source_app: str,
        tags: Optional[List[str]] = None,
        file_path: Optional[str] = None,
        project_context: Optional[str] = None,
        favorited: bool = False,
    ) -> CodeSnippet:
        """
        Persist a new snippet with a fresh id and creation timestamp.

        Returns:
            The saved CodeSnippet (detached from its session)
        """
        snippet = CodeSnippet(
            content=content,
            language=language,
            tags=tags or [],
            file_path=file_path,
            project_context=project_context,
            timestamp=datetime.now(timezone.utc),
            source_app=source_app,
            favorited=favorited,
        )

        with self.session_scope() as session:
            session.add(snippet)

        logger.debug(f"Saved snippet {snippet.id} ({language})")
        return snippet

    def get_snippet(self, snippet_id: str) -> Optional[CodeSnippet]:
        with self.session_scope() as session:
            return session.get(CodeSnippet, snippet_id)

    def get_snippets(
        self,
        language: Optional[str] = None,
        search_term: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[CodeSnippet]:
        """
        Query snippets, newest first.

        Args:
            language: Only snippets with this language tag
            search_term: Substring that must appear in the content or the tags
            limit: Maximum number of rows

        Returns:
            Matching snippets
        """
        with self.session_scope() as session:
            query = session.query(CodeSnippet)

            if language:
                query = query.filter(CodeSnippet.language == language)

            if search_term:
                query = query.filter(
                    or_(
                        CodeSnippet.content.contains(search_term, autoescape=True),
                        CodeSnippet.tags_json.contains(search_term, autoescape=True),
                    )
                )

            query = query.order_by(CodeSnippet.timestamp.desc())

            if limit:
                query = query.limit(limit)

            return query.all()

    def set_favorited(self, snippet_id: str, favorited: bool) -> Optional[CodeSnippet]:
        """
        Update the favorited flag, the only mutable snippet field.

        Returns:
            The updated snippet, or None if no snippet has that id
        """
        with self.session_scope() as session:
            snippet = session.get(CodeSnippet, snippet_id)
            if snippet is None:
                return None
            snippet.favorited = favorited
            return snippet

    # ============================================================================
    # Error Pattern Operations
    # ============================================================================

    def record_error(self, error_text: str, solution: str, language: str) -> ErrorPattern:
        """
        Insert a new error pattern or bump the matching one, in one transaction.

        The frequency increment is evaluated by the database, so two
        recordings of the same error never collapse into one.

        Args:
            error_text: Observed error text
            solution: Solution to store (replaces the previous one on a match)
            language: Language tag

        Returns:
            The inserted or updated ErrorPattern
        """
        prefix = error_text[:ERROR_DEDUP_PREFIX]
        now = datetime.now(timezone.utc)

        with self.session_scope() as session:
            existing_id = (
                session.query(ErrorPattern.id)
                .filter(ErrorPattern.language == language)
                .filter(ErrorPattern.error_text.contains(prefix, autoescape=True))
                .limit(1)
                .scalar()
            )

            if existing_id is not None:
                session.query(ErrorPattern).filter(ErrorPattern.id == existing_id).update(
                    {
                        ErrorPattern.frequency: ErrorPattern.frequency + 1,
                        ErrorPattern.solution: solution,
                        ErrorPattern.last_encountered: now,
                    },
                    synchronize_session=False,
                )
                pattern = session.get(ErrorPattern, existing_id, populate_existing=True)
                logger.debug(
                    f"Error pattern {existing_id} seen again (frequency={pattern.frequency})"
                )
                return pattern

            pattern = ErrorPattern(
                error_text=error_text,
                solution=solution,
                language=language,
                frequency=1,
                last_encountered=now,
            )
            session.add(pattern)
            session.flush()
            logger.debug(f"Recorded new error pattern {pattern.id} ({language})")
            return pattern

    def get_error_solutions(self, error_text: str, language: str) -> List[ErrorPattern]:
        """
        Find stored solutions for an error, most frequent first.

        The lookup key is the first 100 characters of the error text.

        Returns:
            At most five ErrorPattern rows
        """
        key = error_text[:ERROR_LOOKUP_PREFIX]

        with self.session_scope() as session:
            return (
                session.query(ErrorPattern)
                .filter(ErrorPattern.language == language)
                .filter(ErrorPattern.error_text.contains(key, autoescape=True))
                .order_by(ErrorPattern.frequency.desc())
                .limit(MAX_ERROR_SOLUTIONS)
                .all()
            )

    # ============================================================================
    # Context Management
    # ============================================================================

    def update_developer_context(
        self,
        current_app: Optional[str] = None,
        active_file: Optional[str] = None,
        project_root: Optional[str] = None,
    ) -> DeveloperContext:
        """
        Append a context row stamped with the current instant.

        A missing application name is stored as "unknown".
        """
        context = DeveloperContext(
            current_app=current_app or UNKNOWN_APP,
            active_file=active_file,
            project_root=project_root,
            last_activity=datetime.now(timezone.utc),
        )

        with self.session_scope() as session:
            session.add(context)

        return context

    def get_current_context(self) -> Optional[DeveloperContext]:
        """Return the most recent context row, or None if there is none."""
        with self.session_scope() as session:
            return (
                session.query(DeveloperContext)
                .order_by(DeveloperContext.last_activity.desc(), DeveloperContext.id.desc())
                .first()
            )

    # ============================================================================
    # Maintenance Operations
    # ============================================================================

    def cleanup_old_data(self, days_to_keep: int = 30) -> dict:
        """
        Delete snippets and context rows older than the retention horizon.

        Error patterns are never purged.

        Args:
            days_to_keep: Retention horizon in days

        Returns:
            Number of deleted rows per table
        """
        cutoff = datetime.now(timezone.utc) - timedelta(days=days_to_keep)

        with self.session_scope() as session:
            snippets_deleted = (
                session.query(CodeSnippet)
                .filter(CodeSnippet.timestamp <= cutoff)
                .delete(synchronize_session=False)
            )
            contexts_deleted = (
                session.query(DeveloperContext)
                .filter(DeveloperContext.last_activity <= cutoff)
                .delete(synchronize_session=False)
            )

        logger.info(
            f"Retention sweep ({days_to_keep}d): removed {snippets_deleted} snippets, "
            f"{contexts_deleted} context rows"
        )
        return {"snippets": snippets_deleted, "contexts": contexts_deleted}
