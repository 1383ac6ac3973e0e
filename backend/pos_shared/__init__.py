"""
Shared infrastructure for the POS backend.

STRUCTURE:
- pos_shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Role, TableStatus, OrderStatus and the other closed enums

- pos_shared.infrastructure: Database and process-level coordination
  - db.py: SQLAlchemy engine lifecycle, sessions, safe_commit()
  - correlation.py: X-Request-ID middleware and logging filter
  - locks.py: Per-key mutual exclusion (one lock per table id)

- pos_shared.security: Credential verifier
  - auth.py: JWT issue/verify, current_user_context, CredentialVerifier
  - password.py: Bcrypt hashing
  - rate_limit.py: Login rate limiting (slowapi)

- pos_shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging and a stable kind
  - schemas.py: Pydantic request/response schemas

IMPORT EXAMPLES:
    from pos_shared.security.auth import verify_jwt, current_user_context
    from pos_shared.infrastructure.db import get_db, safe_commit
    from pos_shared.config.settings import settings
    from pos_shared.config.constants import Role, OrderStatus
    from pos_shared.utils.exceptions import NotFoundError, AuthorizationError
"""
