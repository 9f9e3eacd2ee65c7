"""
Blog API — Post Route Handlers
==============================

What:  The five /posts endpoints.
How:   Check the request, delegate the single storage call to PostService,
       pick the status code. Storage failures propagate as DatabaseError
       and are turned into 500s by the handlers in main.py.

    GET    /posts        → 200 {"posts": [...]}
    GET    /posts/{id}   → 200 post
    POST   /posts        → 201 post       | 400 missing field
    PUT    /posts/{id}   → 204            | 400 path/body id mismatch
    DELETE /posts/{id}   → 204
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db_session
from blog_api.exceptions import ValidationError
from blog_api.schemas.blog_post import (
    BlogPostCreate,
    BlogPostListResponse,
    BlogPostResponse,
    BlogPostUpdate,
    ErrorResponse,
)
from blog_api.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])

SERVER_ERROR = {500: {"description": "Storage failure", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid request body", "model": ErrorResponse}}


@router.get(
    "",
    response_model=BlogPostListResponse,
    responses=SERVER_ERROR,
    summary="List all blog posts",
)
async def list_posts(db: AsyncSession = Depends(get_db_session)) -> BlogPostListResponse:
    return await post_service.list_posts(db)


@router.get(
    "/{post_id}",
    response_model=BlogPostResponse,
    responses=SERVER_ERROR,
    summary="Get a single blog post by id",
    description="An unknown id is reported as a server error, like any other storage failure.",
)
async def get_post(post_id: str, db: AsyncSession = Depends(get_db_session)) -> BlogPostResponse:
    return await post_service.get_post(db, post_id)


@router.post(
    "",
    response_model=BlogPostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**BAD_REQUEST, **SERVER_ERROR},
    summary="Create a blog post",
)
async def create_post(
    post: Optional[BlogPostCreate] = None,
    db: AsyncSession = Depends(get_db_session),
) -> BlogPostResponse:
    """
    Insert a post from {title, content, author}.

    Only presence is checked: an empty title still passes. The first absent
    field (in title, content, author order) is named in the 400 message.
    """
    post = post or BlogPostCreate()

    missing = post.first_missing_field()
    if missing is not None:
        logger.debug("Rejected create: missing %s", missing)
        raise ValidationError(message=f"Missing `{missing}` in request body", field=missing)

    return await post_service.create_post(db, post.to_record_values())


@router.put(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**BAD_REQUEST, **SERVER_ERROR},
    summary="Update some fields of a blog post",
)
async def update_post(
    post_id: str,
    body: Optional[BlogPostUpdate] = None,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    Apply a partial update.

    The body must repeat the path id in `id`. Of the remaining fields only
    title, content and author are written, and only those present.
    """
    body = body or BlogPostUpdate()

    if not (post_id and body.id and post_id == body.id):
        logger.debug("Rejected update: path id %s, body id %s", post_id, body.id)
        raise ValidationError(
            message=(
                f"Request path id ({post_id}) and request body id "
                f"({body.id}) must match"
            ),
            field="id",
        )

    await post_service.update_post(db, post_id, body.changes())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=SERVER_ERROR,
    summary="Delete a blog post",
)
async def delete_post(post_id: str, db: AsyncSession = Depends(get_db_session)) -> Response:
    await post_service.delete_post(db, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
