"""
Course and lecture API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

TITLE_MIN = 8
TITLE_MAX = 59
DESCRIPTION_MIN = 8
DESCRIPTION_MAX = 200

LECTURE_TITLE_MAX = 100
LECTURE_DESCRIPTION_MAX = 500


class UpdateCourseRequest(BaseModel):
    title: str | None = Field(default=None, min_length=TITLE_MIN, max_length=TITLE_MAX)
    description: str | None = Field(default=None, min_length=DESCRIPTION_MIN, max_length=DESCRIPTION_MAX)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    created_by: str | None = Field(default=None, min_length=1, max_length=100)


class UpdateLectureRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=LECTURE_TITLE_MAX)
    description: str | None = Field(default=None, min_length=1, max_length=LECTURE_DESCRIPTION_MAX)
