"""
Conversions from stored records to what the frontend reads.

Everything stored is keyed by user ID; everything returned to a client shows
usernames. The substitution happens here and only here, including for error
messages (see :meth:`Responses.error_message`).
"""
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from socialnet import schemas
from socialnet.errors import SocialError
from socialnet.models import Filter, FriendRequest, Group, Post, Quiz
from socialnet.services.identity import IdentityResolver


class Responses:
    def __init__(self, identity: IdentityResolver):
        self.identity = identity

    def post(self, db: Session, post: Post) -> schemas.PostResponse:
        return self.posts(db, [post])[0]

    def posts(self, db: Session, posts: Sequence[Post]) -> List[schemas.PostResponse]:
        """Same as :meth:`post` but resolves all authors in one query."""
        authors = self.identity.ids_to_usernames(db, [post.author_id for post in posts])
        return [
            schemas.PostResponse(
                id=post.id,
                author=author,
                content=post.content,
                tags=list(post.tags or []),
                background_color=post.background_color,
                created_at=post.created_at,
                updated_at=post.updated_at,
            )
            for post, author in zip(posts, authors)
        ]

    def filters(self, db: Session, filters: Sequence[Filter]) -> List[schemas.FilterResponse]:
        authors = self.identity.ids_to_usernames(db, [f.author_id for f in filters])
        return [
            schemas.FilterResponse(id=f.id, name=f.name, author=author, created_at=f.created_at)
            for f, author in zip(filters, authors)
        ]

    def group(self, db: Session, group: Group) -> schemas.GroupResponse:
        return self.groups(db, [group])[0]

    def groups(self, db: Session, groups: Sequence[Group]) -> List[schemas.GroupResponse]:
        """Resolve authors and members of every group with a single lookup."""
        ids: List[str] = []
        for group in groups:
            ids.append(group.author_id)
            ids.extend(group.member_ids)
        usernames = iter(self.identity.ids_to_usernames(db, ids))

        results = []
        for group in groups:
            author = next(usernames)
            members = [next(usernames) for _ in group.member_ids]
            results.append(schemas.GroupResponse(
                id=group.id, name=group.name, author=author, members=members, created_at=group.created_at
            ))
        return results

    def quiz(self, db: Session, quiz: Quiz) -> schemas.QuizResponse:
        return self.quizzes(db, [quiz])[0]

    def quizzes(self, db: Session, quizzes: Sequence[Quiz]) -> List[schemas.QuizResponse]:
        authors = self.identity.ids_to_usernames(db, [quiz.author_id for quiz in quizzes])
        return [
            schemas.QuizResponse(
                id=quiz.id,
                author=author,
                question=quiz.question,
                options=list(quiz.options or []),
                answer=quiz.answer,
                tags=list(quiz.tags or []),
                created_at=quiz.created_at,
                updated_at=quiz.updated_at,
            )
            for quiz, author in zip(quizzes, authors)
        ]

    def friend_request(self, db: Session, request: FriendRequest, viewer_id: Optional[str] = None) -> schemas.FriendRequestResponse:
        return self.friend_requests(db, [request], viewer_id)[0]

    def friend_requests(
        self, db: Session, requests: Sequence[FriendRequest], viewer_id: Optional[str] = None
    ) -> List[schemas.FriendRequestResponse]:
        """
        Add requester/recipient usernames; with ``viewer_id`` also mark each
        request as ``sent`` or ``received`` from that user's point of view.
        """
        requesters = self.identity.ids_to_usernames(db, [r.requester_id for r in requests])
        recipients = self.identity.ids_to_usernames(db, [r.recipient_id for r in requests])
        results = []
        for request, requester, recipient in zip(requests, requesters, recipients):
            direction = None
            if viewer_id is not None:
                direction = "sent" if request.requester_id == viewer_id else "received"
            results.append(schemas.FriendRequestResponse(
                id=request.id,
                requester_id=request.requester_id,
                recipient_id=request.recipient_id,
                status=request.status,
                created_at=request.created_at,
                requester_username=requester,
                recipient_username=recipient,
                direction=direction,
            ))
        return results

    def friends(self, db: Session, friend_ids: Sequence[str]) -> List[schemas.FriendResponse]:
        usernames = self.identity.ids_to_usernames(db, friend_ids)
        return [schemas.FriendResponse(user_id=uid, username=name) for uid, name in zip(friend_ids, usernames)]

    def error_message(self, db: Optional[Session], error: SocialError) -> str:
        """Render ``error`` with its identifiers replaced by usernames."""
        if not error.user_ids or db is None:
            return str(error)
        return error.render(self.identity.ids_to_usernames(db, error.user_ids))
