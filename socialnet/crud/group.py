from typing import Optional
from sqlalchemy.orm import Session
from socialnet.errors import (
    AlreadyGroupMemberError, GroupAlreadyExistsError, GroupAuthorNotMatchError, GroupNotFoundError,
    NotGroupMemberError
)
from socialnet.models.group import Group, GroupMembership


def get_group(db: Session, group_id: str) -> Optional[Group]:
    return db.query(Group).filter(Group.id == group_id).first()


def get_group_by_name(db: Session, name: str) -> Optional[Group]:
    return db.query(Group).filter(Group.name == name).first()


def get_groups(db: Session) -> list[Group]:
    """Return all groups, newest first."""
    return db.query(Group).order_by(Group.created_at.desc(), Group.name).all()


def get_groups_by_author(db: Session, author_id: str) -> list[Group]:
    return db.query(Group).filter(Group.author_id == author_id).order_by(Group.name).all()


def create_group(db: Session, author_id: str, name: str) -> Group:
    """Create a group; its author becomes the first member."""
    if get_group_by_name(db, name) is not None:
        raise GroupAlreadyExistsError(name)

    group = Group(name=name, author_id=author_id)
    group.memberships.append(GroupMembership(user_id=author_id))
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def add_member(db: Session, group: Group, user_id: str) -> Group:
    if user_id in group.member_ids:
        raise AlreadyGroupMemberError(user_id, group.id)

    group.memberships.append(GroupMembership(user_id=user_id))
    db.commit()
    db.refresh(group)
    return group


def remove_member(db: Session, group: Group, user_id: str) -> Group:
    membership = next((m for m in group.memberships if m.user_id == user_id), None)
    if membership is None:
        raise NotGroupMemberError(user_id, group.id)

    group.memberships.remove(membership)
    db.commit()
    db.refresh(group)
    return group


def delete_group(db: Session, group: Group) -> None:
    db.delete(group)
    db.commit()


def assert_author_is_user(db: Session, group_id: str, user_id: str) -> Group:
    """Return the group if ``user_id`` created it, otherwise raise."""
    group = get_group(db, group_id)
    if group is None:
        raise GroupNotFoundError(group_id)
    if group.author_id != user_id:
        raise GroupAuthorNotMatchError(user_id, group_id)
    return group
