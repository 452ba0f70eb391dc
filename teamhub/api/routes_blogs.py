"""
api/routes_blogs.py — Blog posts, their likes and comments.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from ..auth.models import User
from ..config import Settings, get_settings
from ..core import blogs
from ..core.uploads import stored_upload
from .dependencies import get_current_user
from .dto import CommentRequest
from .errors import paged, success_response

router = APIRouter()


@router.get("/api/blogs")
async def list_blogs(page: Optional[int] = Query(default=None), limit: Optional[int] = Query(default=None)):
    items, pagination = blogs.list_blogs(page, limit)
    return success_response("Blogs fetched successfully", paged(items, pagination, "blogs"))


# Declared before /api/blogs/{blog_id} so "user" is not read as an id.
@router.get("/api/blogs/user/blogs")
async def list_my_blogs(
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    status: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
):
    items, pagination = blogs.list_user_blogs(user, page, limit, status)
    return success_response("User blogs fetched successfully", paged(items, pagination, "blogs"))


@router.get("/api/blogs/{blog_id}")
async def get_blog(blog_id: str):
    return success_response("Blog fetched successfully", blogs.get_blog(blog_id))


@router.post("/api/blogs")
async def create_blog(
    title: str = Form(default=""),
    content: str = Form(default=""),
    description: Optional[str] = Form(default=None),
    tags: Optional[str] = Form(default=None),
    status: Optional[str] = Form(default=None),
    thumbnail: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    async with stored_upload(thumbnail, "blogs", settings.uploads_dir) as thumbnail_path:
        blog = blogs.create_blog(
            user,
            title=title,
            content=content,
            description=description,
            tags=tags,
            status=status,
            thumbnail=thumbnail_path,
        )
    return success_response("Blog created successfully", blog, http_status=201)


@router.put("/api/blogs/{blog_id}")
async def update_blog(
    blog_id: str,
    title: Optional[str] = Form(default=None),
    content: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    tags: Optional[str] = Form(default=None),
    status: Optional[str] = Form(default=None),
    thumbnail: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    async with stored_upload(thumbnail, "blogs", settings.uploads_dir) as thumbnail_path:
        blog = blogs.update_blog(
            user,
            blog_id,
            {
                "title": title,
                "content": content,
                "description": description,
                "tags": tags,
                "status": status,
                "thumbnail": thumbnail_path,
            },
        )
    return success_response("Blog updated successfully", blog)


@router.delete("/api/blogs/{blog_id}")
async def delete_blog(blog_id: str, user: User = Depends(get_current_user)):
    blogs.delete_blog(user, blog_id)
    return success_response("Blog deleted successfully")


@router.post("/api/blogs/{blog_id}/like")
async def like_blog(blog_id: str, user: User = Depends(get_current_user)):
    result = blogs.toggle_blog_like(user, blog_id)
    message = "Blog liked successfully" if result.liked else "Blog unliked successfully"
    return success_response(message, result)


@router.post("/api/blogs/{blog_id}/comment")
async def comment_blog(blog_id: str, body: CommentRequest, user: User = Depends(get_current_user)):
    comment = blogs.comment_on_blog(user, blog_id, body.content)
    return success_response("Comment added successfully", comment, http_status=201)
