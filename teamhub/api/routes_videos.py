"""
api/routes_videos.py — Video uploads, their likes and comments.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from ..auth.models import User
from ..config import Settings, get_settings
from ..core import videos
from ..core.uploads import stored_upload
from .dependencies import get_current_user
from .dto import CommentRequest
from .errors import paged, success_response

router = APIRouter()


@router.get("/api/videos")
async def list_videos(page: Optional[int] = Query(default=None), limit: Optional[int] = Query(default=None)):
    items, pagination = videos.list_videos(page, limit)
    return success_response("Videos fetched successfully", paged(items, pagination, "videos"))


@router.get("/api/videos/{video_id}")
async def get_video(video_id: str):
    return success_response("Video fetched successfully", videos.get_video(video_id))


@router.post("/api/videos")
async def create_video(
    title: str = Form(default=""),
    description: Optional[str] = Form(default=None),
    duration: Optional[float] = Form(default=None),
    video: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    async with stored_upload(video, "videos", settings.uploads_dir) as video_path:
        created = videos.create_video(
            user,
            title=title,
            video_path=video_path,
            description=description,
            duration=duration,
        )
    return success_response("Video uploaded successfully", created, http_status=201)


@router.put("/api/videos/{video_id}")
async def update_video(
    video_id: str,
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    duration: Optional[float] = Form(default=None),
    video: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    async with stored_upload(video, "videos", settings.uploads_dir) as video_path:
        updated = videos.update_video(
            user,
            video_id,
            {"title": title, "description": description, "duration": duration, "video": video_path},
        )
    return success_response("Video updated successfully", updated)


@router.delete("/api/videos/{video_id}")
async def delete_video(video_id: str, user: User = Depends(get_current_user)):
    videos.delete_video(user, video_id)
    return success_response("Video deleted successfully")


@router.post("/api/videos/{video_id}/like")
async def like_video(video_id: str, user: User = Depends(get_current_user)):
    result = videos.toggle_video_like(user, video_id)
    message = "Video liked successfully" if result.liked else "Video unliked successfully"
    return success_response(message, result)


@router.post("/api/videos/{video_id}/comment")
async def comment_video(video_id: str, body: CommentRequest, user: User = Depends(get_current_user)):
    comment = videos.comment_on_video(user, video_id, body.content)
    return success_response("Comment added successfully", comment, http_status=201)
