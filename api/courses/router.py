"""
Course and lecture API endpoints: /api/v1/course/*
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/api/v1/course")


@router.get("")
async def list_courses(
    category: str = Query(default="", max_length=100),
    q: str = Query(default="", max_length=200),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> dict:
    courses = await service.list_courses(category=category, search_query=q, limit=limit, offset=offset)
    return {"success": True, "message": "All courses.", "courses": courses, "count": len(courses)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_course(
    title: str = Form(..., min_length=schemas.TITLE_MIN, max_length=schemas.TITLE_MAX),
    description: str = Form(..., min_length=schemas.DESCRIPTION_MIN, max_length=schemas.DESCRIPTION_MAX),
    category: str = Form(..., min_length=1, max_length=100),
    created_by: str = Form(..., min_length=1, max_length=100),
    thumbnail: UploadFile | None = File(default=None),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    course = await service.create_course(
        title=title,
        description=description,
        category=category,
        created_by=created_by,
        thumbnail=thumbnail,
    )
    return {"success": True, "message": "Course created successfully.", "course": course}


@router.delete("")
async def remove_lecture_by_query(
    course_id: int = Query(...),
    lecture_id: int = Query(...),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    result = await service.remove_lecture(course_id, lecture_id)
    return {"success": True, "message": "Lecture removed successfully.", **result}


@router.get("/{course_id}")
async def get_lectures(
    course_id: int,
    _: dict = Depends(auth_dependencies.require_subscriber),
) -> dict:
    result = await service.get_lectures(course_id)
    return {"success": True, "message": "Course lectures fetched successfully.", **result}


@router.put("/{course_id}")
async def update_course(
    course_id: int,
    payload: schemas.UpdateCourseRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    course = await service.update_course(course_id, payload)
    return {"success": True, "message": "Course updated successfully.", "course": course}


@router.delete("/{course_id}")
async def delete_course(
    course_id: int,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    await service.delete_course(course_id)
    return {"success": True, "message": "Course deleted successfully."}


@router.post("/{course_id}", status_code=status.HTTP_201_CREATED)
async def add_lecture(
    course_id: int,
    title: str = Form(..., min_length=1, max_length=schemas.LECTURE_TITLE_MAX),
    description: str = Form(..., min_length=1, max_length=schemas.LECTURE_DESCRIPTION_MAX),
    lecture: UploadFile = File(...),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    result = await service.add_lecture(course_id, title=title, description=description, video=lecture)
    return {"success": True, "message": "Lecture added successfully.", **result}


@router.put("/{course_id}/lectures/{lecture_id}")
async def update_lecture(
    course_id: int,
    lecture_id: int,
    payload: schemas.UpdateLectureRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    lecture = await service.update_lecture(course_id, lecture_id, payload)
    return {"success": True, "message": "Lecture updated successfully.", "lecture": lecture}


@router.delete("/{course_id}/lectures/{lecture_id}")
async def remove_lecture(
    course_id: int,
    lecture_id: int,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    result = await service.remove_lecture(course_id, lecture_id)
    return {"success": True, "message": "Lecture removed successfully.", **result}
