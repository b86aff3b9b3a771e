from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

from fulfillment_network.config import config
from fulfillment_network.exceptions import DatabaseError
from fulfillment_network.logging_setup import get_logger, log_exception

AFTER_COMMIT_KEY = 'after_commit_actions'

logger = get_logger(__name__)

class Database:
    """Database connection manager for the Fulfillment Network."""

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Database, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the database connection if not already initialized."""
        if self._initialized:
            return

        self._engine = None
        self._session_factory = None
        self._session = None
        self._initialized = True

    def initialize(self, connection_string=None):
        """Initialize database connection.

        Args:
            connection_string: Optional SQLAlchemy URL, defaults to
                ``config.database_url``. In-memory SQLite URLs share one
                connection so every session sees the same database.
        """
        connection_string = connection_string or config.database_url
        echo = config.get_boolean('DATABASE', 'echo', False)

        if self._engine is not None:
            self.dispose()

        if connection_string.startswith('sqlite'):
            engine_options = {'connect_args': {'check_same_thread': False}}
            if connection_string in ('sqlite://', 'sqlite:///:memory:'):
                engine_options['poolclass'] = StaticPool
        else:
            engine_options = config.pool_options

        self._engine = create_engine(connection_string, echo=echo, **engine_options)
        self._session_factory = sessionmaker(bind=self._engine)
        self._session = scoped_session(self._session_factory)
        logger.info(f"Database engine created for {self._engine.url.render_as_string(hide_password=True)}")

    def dispose(self):
        """Release the engine and any thread-local session."""
        if self._session is not None:
            self._session.remove()
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None
        self._session = None

    def create_all_tables(self):
        """Create all tables defined in the models."""
        from fulfillment_network.models import Base
        Base.metadata.create_all(self.engine)

    def drop_all_tables(self):
        """Drop all tables from the database."""
        from fulfillment_network.models import Base
        Base.metadata.drop_all(self.engine)

    @property
    def session(self):
        """Get the current database session."""
        if self._session is None:
            self.initialize()
        return self._session

    @property
    def engine(self):
        """Get the database engine."""
        if self._engine is None:
            self.initialize()
        return self._engine

    @contextmanager
    def session_scope(self):
        """Provide a transactional scope around a series of operations.

        Actions registered with :func:`run_after_commit` while the scope is
        open run once, in registration order, after the commit succeeded.
        They are dropped when the scope rolls back.
        """
        session = self.session()
        session.info[AFTER_COMMIT_KEY] = []
        try:
            yield session
            session.commit()
            actions = list(session.info[AFTER_COMMIT_KEY])
        except Exception:
            session.rollback()
            raise
        finally:
            session.info.pop(AFTER_COMMIT_KEY, None)
            session.close()

        self._run_after_commit_actions(actions)

    def _run_after_commit_actions(self, actions):
        for action in actions:
            try:
                action()
            except Exception as e:
                # The transaction is already committed; the hook owns its failure
                log_exception(__name__, e, "Post-commit action failed")

# Global database instance
db = Database()

@contextmanager
def session_scope():
    """Session scope context manager."""
    with db.session_scope() as session:
        yield session

def run_after_commit(session, action):
    """Schedule ``action`` to run after the transaction of ``session`` commits.

    Args:
        session: Session opened by :func:`session_scope`
        action: Callable taking no arguments

    Raises:
        DatabaseError: If the session is not inside a ``session_scope``
    """
    actions = session.info.get(AFTER_COMMIT_KEY)
    if actions is None:
        raise DatabaseError("Post-commit actions require an open session_scope transaction")
    actions.append(action)
