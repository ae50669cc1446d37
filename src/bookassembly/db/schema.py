# ABOUTME: SQL DDL statements for the Book Assembly document store.
# ABOUTME: Each collection is a table of JSON documents keyed by (user_id, id).

SCHEMA_V1 = """
-- Books: one JSON document per row. Lifecycle markers live in columns so the
-- bin and retention queries don't have to parse JSON.
CREATE TABLE books (
    id          TEXT NOT NULL,
    user_id     TEXT NOT NULL,
    data        TEXT NOT NULL,
    series_id   TEXT,
    deleted_at  INTEGER,
    created_at  INTEGER NOT NULL,
    updated_at  INTEGER NOT NULL,
    PRIMARY KEY (user_id, id)
);

CREATE INDEX idx_books_user_deleted ON books(user_id, deleted_at);
CREATE INDEX idx_books_series ON books(user_id, series_id) WHERE series_id IS NOT NULL;

CREATE TABLE series (
    id          TEXT NOT NULL,
    user_id     TEXT NOT NULL,
    data        TEXT NOT NULL,
    name_key    TEXT NOT NULL,
    deleted_at  INTEGER,
    created_at  INTEGER NOT NULL,
    updated_at  INTEGER NOT NULL,
    PRIMARY KEY (user_id, id)
);

-- Genres: name_key is the normalized name, unique per user.
CREATE TABLE genres (
    id          TEXT NOT NULL,
    user_id     TEXT NOT NULL,
    data        TEXT NOT NULL,
    name_key    TEXT NOT NULL,
    created_at  INTEGER NOT NULL,
    updated_at  INTEGER NOT NULL,
    PRIMARY KEY (user_id, id),
    UNIQUE (user_id, name_key)
);

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""

MIGRATION_V2 = """
-- Wishlist: books the user wants but does not own yet.
CREATE TABLE wishlist (
    id          TEXT NOT NULL,
    user_id     TEXT NOT NULL,
    data        TEXT NOT NULL,
    created_at  INTEGER NOT NULL,
    updated_at  INTEGER NOT NULL,
    PRIMARY KEY (user_id, id)
);

INSERT INTO schema_version (version) VALUES (2);
"""

# Ordered (version, sql) pairs applied on top of SCHEMA_V1.
MIGRATIONS: list[tuple[int, str]] = [
    (2, MIGRATION_V2),
]
