from typing import Optional
from sqlalchemy.orm import Session
from socialnet.errors import FilterAlreadyExistsError, FilterAuthorNotMatchError, FilterNotFoundError
from socialnet.models.filter import Filter


def get_filter_by_name(db: Session, name: str) -> Optional[Filter]:
    return db.query(Filter).filter(Filter.name == name).first()


def get_filters(db: Session) -> list[Filter]:
    """Return all filters, newest first."""
    return db.query(Filter).order_by(Filter.created_at.desc(), Filter.name).all()


def get_filters_by_author(db: Session, author_id: str) -> list[Filter]:
    return db.query(Filter).filter(Filter.author_id == author_id).order_by(Filter.name).all()


def add_filter(db: Session, author_id: str, name: str) -> Filter:
    """Add a filter; filter names are unique across all users."""
    if get_filter_by_name(db, name) is not None:
        raise FilterAlreadyExistsError(name)

    db_filter = Filter(author_id=author_id, name=name)
    db.add(db_filter)
    db.commit()
    db.refresh(db_filter)
    return db_filter


def remove_filter(db: Session, author_id: str, name: str) -> None:
    """Remove one of the author's filters."""
    db_filter = get_filter_by_name(db, name)
    if db_filter is None:
        raise FilterNotFoundError(name)
    if db_filter.author_id != author_id:
        raise FilterAuthorNotMatchError(author_id, name)

    db.delete(db_filter)
    db.commit()
