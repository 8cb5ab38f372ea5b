"""Tests for persistence table definitions."""

from sqlalchemy import UniqueConstraint
from sqlalchemy.dialects import postgresql, sqlite

from mylist.persistence.tables import (
    Base,
    ListMembershipTable,
    MovieTable,
    TVShowTable,
    new_content_id,
)


class TestNewContentId:
    def test_is_hex_uuid(self) -> None:
        content_id = new_content_id()
        assert len(content_id) == 32
        int(content_id, 16)

    def test_unique(self) -> None:
        assert new_content_id() != new_content_id()


class TestTableDefinitions:
    """Test table structure."""

    def test_tables_registered(self) -> None:
        assert set(Base.metadata.tables) == {"movies", "tv_shows", "list_memberships"}

    def test_membership_unique_per_owner_and_content(self) -> None:
        constraints = [
            c for c in ListMembershipTable.__table__.constraints if isinstance(c, UniqueConstraint)
        ]
        assert len(constraints) == 1
        assert [col.name for col in constraints[0].columns] == ["owner_id", "content_id"]

    def test_membership_has_owner_ordering_index(self) -> None:
        indexes = {i.name: [c.name for c in i.columns] for i in ListMembershipTable.__table__.indexes}
        assert indexes["idx_list_owner_added"] == ["owner_id", "added_at"]

    def test_json_columns_use_jsonb_on_postgres(self) -> None:
        genres = MovieTable.__table__.c.genres.type
        assert isinstance(genres.dialect_impl(postgresql.dialect()), postgresql.JSONB)
        assert not isinstance(genres.dialect_impl(sqlite.dialect()), postgresql.JSONB)

    def test_show_episodes_not_nullable(self) -> None:
        assert TVShowTable.__table__.c.episodes.nullable is False
