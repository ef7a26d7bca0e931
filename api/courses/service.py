"""
Course and lecture business logic.
"""

from __future__ import annotations

import logging

from fastapi import UploadFile, status

from core import storage
from core.errors import AppError

from . import repository, schemas

THUMBNAIL_FOLDER = "thumbnails"
LECTURE_FOLDER = "lectures"

COURSE_NOT_FOUND = "Invalid course id or course not found."
LECTURE_NOT_FOUND = "Invalid lecture id or lecture not found."

logger = logging.getLogger(__name__)


def to_course(row: dict) -> dict:
    return {
        "id": int(row["id"]),
        "title": row["title"],
        "description": row["description"],
        "category": row["category"],
        "created_by": row["created_by"],
        "thumbnail": {
            "public_id": row.get("thumbnail_public_id"),
            "secure_url": row.get("thumbnail_url"),
        },
        "number_of_lectures": int(row.get("number_of_lectures") or 0),
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def to_lecture(row: dict) -> dict:
    return {
        "id": int(row["id"]),
        "course_id": int(row["course_id"]),
        "title": row["title"],
        "description": row["description"],
        "lecture": {
            "public_id": row.get("video_public_id"),
            "secure_url": row.get("video_url"),
        },
        "position": int(row["position"]),
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


async def _get_course_or_404(course_id: int) -> dict:
    row = await repository.get_course(course_id)
    if row is None:
        raise AppError(COURSE_NOT_FOUND, status.HTTP_404_NOT_FOUND)
    return row


async def list_courses(*, category: str, search_query: str, limit: int, offset: int) -> list[dict]:
    rows = await repository.list_courses(
        category=category,
        search_query=search_query,
        limit=limit,
        offset=offset,
    )
    return [to_course(row) for row in rows]


async def get_lectures(course_id: int) -> dict:
    course = await _get_course_or_404(course_id)
    lectures = await repository.list_lectures(course_id)
    return {"course": to_course(course), "lectures": [to_lecture(row) for row in lectures]}


async def create_course(
    *,
    title: str,
    description: str,
    category: str,
    created_by: str,
    thumbnail: UploadFile | None = None,
) -> dict:
    stored: storage.StoredMedia | None = None
    if thumbnail is not None and thumbnail.filename:
        stored = await storage.save_upload(
            thumbnail,
            folder=THUMBNAIL_FOLDER,
            allowed_extensions=storage.IMAGE_EXTENSIONS,
        )

    row = await repository.create_course(
        title=title,
        description=description,
        category=category,
        created_by=created_by,
        thumbnail_public_id=stored.public_id if stored else None,
        thumbnail_url=stored.secure_url if stored else None,
    )
    logger.info("course_created course_id=%s", row["id"])
    return to_course(row)


async def update_course(course_id: int, payload: schemas.UpdateCourseRequest) -> dict:
    fields = payload.model_dump(exclude_none=True)
    if not fields:
        raise AppError("Nothing to update.", status.HTTP_400_BAD_REQUEST)

    row = await repository.update_course(course_id, fields)
    if row is None:
        raise AppError(COURSE_NOT_FOUND, status.HTTP_404_NOT_FOUND)
    logger.info("course_updated course_id=%s fields=%s", course_id, sorted(fields))
    return to_course(row)


async def delete_course(course_id: int) -> None:
    await _get_course_or_404(course_id)
    lectures = await repository.list_lectures(course_id)

    row = await repository.delete_course(course_id)
    if row is None:
        raise AppError(COURSE_NOT_FOUND, status.HTTP_404_NOT_FOUND)

    await storage.delete_media(row.get("thumbnail_public_id"))
    for lecture in lectures:
        await storage.delete_media(lecture.get("video_public_id"))
    logger.info("course_deleted course_id=%s lectures=%s", course_id, len(lectures))


async def add_lecture(
    course_id: int,
    *,
    title: str,
    description: str,
    video: UploadFile,
) -> dict:
    await _get_course_or_404(course_id)
    if video is None or not video.filename:
        raise AppError("Lecture video is required.", status.HTTP_400_BAD_REQUEST)

    stored = await storage.save_upload(
        video,
        folder=LECTURE_FOLDER,
        allowed_extensions=storage.VIDEO_EXTENSIONS,
    )
    row = await repository.add_lecture(
        course_id,
        title=title,
        description=description,
        video_public_id=stored.public_id,
        video_url=stored.secure_url,
    )
    if row is None:
        # Course vanished between the check and the insert.
        await storage.delete_media(stored.public_id)
        raise AppError(COURSE_NOT_FOUND, status.HTTP_404_NOT_FOUND)

    logger.info("lecture_added course_id=%s lecture_id=%s", course_id, row["id"])
    return await get_lectures(course_id)


async def update_lecture(course_id: int, lecture_id: int, payload: schemas.UpdateLectureRequest) -> dict:
    fields = payload.model_dump(exclude_none=True)
    if not fields:
        raise AppError("Nothing to update.", status.HTTP_400_BAD_REQUEST)

    await _get_course_or_404(course_id)
    row = await repository.update_lecture(course_id, lecture_id, fields)
    if row is None:
        raise AppError(LECTURE_NOT_FOUND, status.HTTP_404_NOT_FOUND)
    logger.info("lecture_updated course_id=%s lecture_id=%s", course_id, lecture_id)
    return to_lecture(row)


async def remove_lecture(course_id: int, lecture_id: int) -> dict:
    await _get_course_or_404(course_id)
    row = await repository.delete_lecture(course_id, lecture_id)
    if row is None:
        raise AppError(LECTURE_NOT_FOUND, status.HTTP_404_NOT_FOUND)

    await storage.delete_media(row.get("video_public_id"))
    logger.info("lecture_removed course_id=%s lecture_id=%s", course_id, lecture_id)
    return await get_lectures(course_id)
