"""Announcements feed and the profile data shown next to each post."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import NotFoundOrForbidden, RepositoryError
from .events import ChangeAction, ChangeEvent, ChangeFeed, change_feed
from .models import PostRow, ProfileRow
from .schemas import Post, PostForm, Profile, ProfileUpdate, PublicProfile

logger = logging.getLogger(__name__)

POSTS_TABLE = "posts"


def default_display_name(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return email.split("@", 1)[0] or None


class PostRepository:
    def __init__(self, db: Session, feed: Optional[ChangeFeed] = None) -> None:
        self.db = db
        self.feed = feed if feed is not None else change_feed

    def list(self) -> List[Post]:
        """Newest posts first, each with its author's public profile."""
        query = select(PostRow).order_by(PostRow.created_at.desc(), PostRow.id.desc())
        try:
            rows = self.db.scalars(query).all()
        except SQLAlchemyError as exc:
            logger.error("Error fetching posts: %s", exc)
            raise RepositoryError("Could not load posts") from exc
        authors = self.public_profiles({row.user_id for row in rows})
        return [self._to_post(row, authors.get(row.user_id)) for row in rows]

    def create(self, form: PostForm, owner_id: str) -> Post:
        row = PostRow(user_id=owner_id, **form.model_dump())
        self._commit(row, "create")
        logger.info("Post %s created by %s", row.id, owner_id)
        self._publish(ChangeAction.INSERT, row.id)
        return self._to_post(row, self.public_profiles([owner_id]).get(owner_id))

    def update(self, post_id: str, form: PostForm, owner_id: str) -> Post:
        row = self._owned_row(post_id, owner_id)
        for key, value in form.model_dump().items():
            setattr(row, key, value)
        self._commit(row, "update")
        self._publish(ChangeAction.UPDATE, post_id)
        return self._to_post(row, self.public_profiles([owner_id]).get(owner_id))

    def delete(self, post_id: str, owner_id: str) -> None:
        row = self._owned_row(post_id, owner_id)
        try:
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Error deleting post %s: %s", post_id, exc)
            raise RepositoryError("Could not delete post") from exc
        self._publish(ChangeAction.DELETE, post_id)

    def public_profiles(self, user_ids: Iterable[str]) -> Dict[str, PublicProfile]:
        """Only the fields other users may see: display name and department."""
        ids = list(user_ids)
        if not ids:
            return {}
        query = select(ProfileRow.user_id, ProfileRow.display_name, ProfileRow.department).where(
            ProfileRow.user_id.in_(ids)
        )
        try:
            rows = self.db.execute(query).all()
        except SQLAlchemyError as exc:
            logger.error("Error fetching profiles: %s", exc)
            raise RepositoryError("Could not load profiles") from exc
        return {
            user_id: PublicProfile(user_id=user_id, display_name=display_name, department=department)
            for user_id, display_name, department in rows
        }

    def get_profile(self, owner_id: str, email: Optional[str] = None) -> Profile:
        row = self._profile_row(owner_id)
        if row is None:
            return self.upsert_profile(owner_id, ProfileUpdate(), email=email)
        return Profile.model_validate(row)

    def upsert_profile(self, owner_id: str, form: ProfileUpdate, email: Optional[str] = None) -> Profile:
        row = self._profile_row(owner_id)
        if row is None:
            row = ProfileRow(user_id=owner_id, email=email, display_name=default_display_name(email))
        for key, value in form.model_dump(exclude_unset=True).items():
            setattr(row, key, value)
        self._commit(row, "save profile")
        return Profile.model_validate(row)

    def _profile_row(self, owner_id: str) -> Optional[ProfileRow]:
        try:
            return self.db.scalars(select(ProfileRow).where(ProfileRow.user_id == owner_id)).first()
        except SQLAlchemyError as exc:
            logger.error("Error fetching profile for %s: %s", owner_id, exc)
            raise RepositoryError("Could not load profile") from exc

    def _owned_row(self, post_id: str, owner_id: str) -> PostRow:
        query = select(PostRow).where(PostRow.id == post_id, PostRow.user_id == owner_id)
        try:
            row = self.db.scalars(query).first()
        except SQLAlchemyError as exc:
            logger.error("Error fetching post %s: %s", post_id, exc)
            raise RepositoryError("Could not load post") from exc
        if row is None:
            raise NotFoundOrForbidden("Post not found or not owned by you")
        return row

    def _commit(self, row: object, action: str) -> None:
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Error trying to %s: %s", action, exc)
            raise RepositoryError(f"Could not {action}") from exc

    def _publish(self, action: ChangeAction, post_id: str) -> None:
        self.feed.publish(ChangeEvent(table=POSTS_TABLE, action=action, record_id=post_id))

    @staticmethod
    def _to_post(row: PostRow, author: Optional[PublicProfile]) -> Post:
        post = Post.model_validate(row)
        post.author = author
        return post
