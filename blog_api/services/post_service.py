"""
Blog API — Post Service
=======================

What:  The storage calls behind the five /posts endpoints.
How:   Each method issues exactly one statement against the session it is
       handed and returns wire-ready schemas (or nothing, for writes that
       answer 204).
Who:   Called by the route handlers in blog_api/routes/posts.py.

Error Handling Strategy:
    Anything the driver or ORM raises is logged and re-raised as
    DatabaseError, so the global handler answers with a generic 500.
    A lookup that finds nothing raises RecordNotFoundError, which is a
    DatabaseError as well. Identifiers that are not UUIDs fail inside the
    storage call and surface the same way.
"""

import logging
import uuid
from typing import Any, Dict

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.exceptions import BlogApiError, DatabaseError, RecordNotFoundError
from blog_api.models.blog_post import BlogPost, project
from blog_api.schemas.blog_post import BlogPostListResponse, BlogPostResponse

logger = logging.getLogger(__name__)


class PostService:
    """
    Stateless storage layer for blog posts.

    Storage contract:
        list_posts()   → find-all
        get_post()     → find-by-id
        create_post()  → insert
        update_post()  → partial-update-by-id
        delete_post()  → delete-by-id
    """

    async def list_posts(self, db: AsyncSession) -> BlogPostListResponse:
        """Return every stored post, oldest first."""
        try:
            result = await db.execute(select(BlogPost).order_by(BlogPost.created))
            posts = list(result.scalars().all())
            return BlogPostListResponse(posts=[project(post) for post in posts])
        except Exception as e:
            logger.error("Database error listing blog posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve blog posts",
                context={"error_type": type(e).__name__},
            )

    async def get_post(self, db: AsyncSession, post_id: str) -> BlogPostResponse:
        """
        Retrieve a single post by id.

        Any spelling uuid.UUID accepts (upper case, braces, no hyphens) finds
        the post; the response always carries the canonical lowercase id.

        Raises:
            RecordNotFoundError: No post has this id (→ 500, see exceptions.py)
            DatabaseError: Malformed id or query failure (→ 500)
        """
        try:
            post_uuid = uuid.UUID(post_id)
            result = await db.execute(select(BlogPost).where(BlogPost.id == post_uuid))
            post = result.scalar_one_or_none()

            if post is None:
                raise RecordNotFoundError(resource_id=post_id)

            return project(post)

        except BlogApiError:
            raise
        except Exception as e:
            logger.error("Database error fetching blog post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the blog post",
                context={"post_id": post_id, "error_type": type(e).__name__},
            )

    async def create_post(self, db: AsyncSession, values: Dict[str, Any]) -> BlogPostResponse:
        """
        Insert a new post built from `values` (title, content, author).

        `id` and `created` come from the column defaults during flush.
        """
        try:
            post = BlogPost(**values)
            db.add(post)
            await db.commit()
            logger.info("Blog post created: %s by %s", post.id, post.author_string or "unknown")
            return project(post)
        except Exception as e:
            logger.error("Database error creating blog post: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the blog post",
                context={"error_type": type(e).__name__},
            )

    async def update_post(self, db: AsyncSession, post_id: str, changes: Dict[str, Any]) -> None:
        """
        Overwrite the given fields of one post.

        An empty change set is accepted and writes nothing. Updating an id
        that matches no row is not an error.
        """
        try:
            post_uuid = uuid.UUID(post_id)
            if not changes:
                logger.debug("Empty change set for blog post %s; nothing to write", post_id)
                return

            await db.execute(
                update(BlogPost).where(BlogPost.id == post_uuid).values(**changes)
            )
            await db.commit()
            logger.info("Blog post updated: %s (%s)", post_id, ", ".join(sorted(changes)))
        except Exception as e:
            logger.error("Database error updating blog post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not update the blog post",
                context={"post_id": post_id, "error_type": type(e).__name__},
            )

    async def delete_post(self, db: AsyncSession, post_id: str) -> None:
        """Remove one post. Deleting an id that matches no row is not an error."""
        try:
            post_uuid = uuid.UUID(post_id)
            await db.execute(delete(BlogPost).where(BlogPost.id == post_uuid))
            await db.commit()
            logger.info("Blog post deleted: %s", post_id)
        except Exception as e:
            logger.error("Database error deleting blog post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not delete the blog post",
                context={"post_id": post_id, "error_type": type(e).__name__},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
post_service = PostService()
