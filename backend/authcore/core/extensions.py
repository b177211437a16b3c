"""Flask extension singletons for the auth service."""

from __future__ import annotations

from flask import Flask
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

# Deterministic constraint names; the SQL ledger matches duplicate-hash
# violations by ``uq_refresh_tokens_token_hash``.
NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
migrate = Migrate(render_as_batch=True)

# Only verifies bearer tokens on ``/auth/me``; issuance goes through JWTTokenCodec.
jwt = JWTManager()

# Keyed by client address (after ProxyFix); limits come from config per route.
limiter = Limiter(key_func=get_remote_address, headers_enabled=True)


def init_app(app: Flask) -> None:
    """Bind the database, migrations, bearer guard and rate limiter to ``app``.

    Models are imported here so ``flask db migrate`` sees both tables.
    """
    db.init_app(app)

    from authcore import models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
