"""
Course and lecture persistence (raw SQL).

`courses.number_of_lectures` is kept in step with the lectures table inside
the same statement that inserts or deletes a lecture.
"""

from __future__ import annotations

from core import db

COURSE_COLUMNS = """
    id, title, description, category, created_by, thumbnail_public_id,
    thumbnail_url, number_of_lectures, created_at, updated_at
"""

LECTURE_COLUMNS = """
    id, course_id, title, description, video_public_id, video_url,
    position, created_at, updated_at
"""


async def list_courses(
    *,
    category: str = "",
    search_query: str = "",
    limit: int = 50,
    offset: int = 0,
) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {COURSE_COLUMNS}
        FROM courses
        WHERE ($1 = '' OR lower(category) = lower($1))
          AND ($2 = '' OR lower(title) LIKE ('%' || lower($2) || '%'))
        ORDER BY created_at DESC, id DESC
        LIMIT $3 OFFSET $4
        """,
        (category or "").strip(),
        (search_query or "").strip(),
        limit,
        offset,
    )


async def get_course(course_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {COURSE_COLUMNS}
        FROM courses
        WHERE id = $1
        """,
        course_id,
    )


async def create_course(
    *,
    title: str,
    description: str,
    category: str,
    created_by: str,
    thumbnail_public_id: str | None = None,
    thumbnail_url: str | None = None,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO courses (title, description, category, created_by, thumbnail_public_id, thumbnail_url)
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING {COURSE_COLUMNS}
        """,
        title.strip(),
        description.strip(),
        category.strip(),
        created_by.strip(),
        thumbnail_public_id,
        thumbnail_url,
    )
    if row is None:
        raise RuntimeError("Failed to create course.")
    return row


async def update_course(course_id: int, fields: dict) -> dict | None:
    # NULL arguments keep the current value.
    return await db.fetch_one(
        f"""
        UPDATE courses
        SET title = COALESCE($2, title),
            description = COALESCE($3, description),
            category = COALESCE($4, category),
            created_by = COALESCE($5, created_by),
            updated_at = now()
        WHERE id = $1
        RETURNING {COURSE_COLUMNS}
        """,
        course_id,
        fields.get("title"),
        fields.get("description"),
        fields.get("category"),
        fields.get("created_by"),
    )


async def delete_course(course_id: int) -> dict | None:
    # Lectures go with it (ON DELETE CASCADE).
    return await db.fetch_one(
        f"""
        DELETE FROM courses
        WHERE id = $1
        RETURNING {COURSE_COLUMNS}
        """,
        course_id,
    )


async def list_lectures(course_id: int) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {LECTURE_COLUMNS}
        FROM lectures
        WHERE course_id = $1
        ORDER BY position ASC, id ASC
        """,
        course_id,
    )


async def get_lecture(course_id: int, lecture_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {LECTURE_COLUMNS}
        FROM lectures
        WHERE course_id = $1
          AND id = $2
        """,
        course_id,
        lecture_id,
    )


async def add_lecture(
    course_id: int,
    *,
    title: str,
    description: str,
    video_public_id: str | None,
    video_url: str | None,
) -> dict | None:
    """
    Append a lecture at the end of the course. Returns None if the course does not exist.
    """
    return await db.fetch_one(
        f"""
        WITH course AS (
            UPDATE courses
            SET number_of_lectures = number_of_lectures + 1,
                updated_at = now()
            WHERE id = $1
            RETURNING id
        )
        INSERT INTO lectures (course_id, title, description, video_public_id, video_url, position)
        SELECT course.id, $2, $3, $4, $5,
               COALESCE((SELECT max(position) FROM lectures WHERE course_id = $1), 0) + 1
        FROM course
        RETURNING {LECTURE_COLUMNS}
        """,
        course_id,
        title.strip(),
        description.strip(),
        video_public_id,
        video_url,
    )


async def update_lecture(course_id: int, lecture_id: int, fields: dict) -> dict | None:
    return await db.fetch_one(
        f"""
        UPDATE lectures
        SET title = COALESCE($3, title),
            description = COALESCE($4, description),
            updated_at = now()
        WHERE course_id = $1
          AND id = $2
        RETURNING {LECTURE_COLUMNS}
        """,
        course_id,
        lecture_id,
        fields.get("title"),
        fields.get("description"),
    )


async def delete_lecture(course_id: int, lecture_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        WITH removed AS (
            DELETE FROM lectures
            WHERE course_id = $1
              AND id = $2
            RETURNING {LECTURE_COLUMNS}
        ),
        course AS (
            UPDATE courses
            SET number_of_lectures = GREATEST(number_of_lectures - 1, 0),
                updated_at = now()
            WHERE id = $1
              AND EXISTS (SELECT 1 FROM removed)
            RETURNING id
        )
        SELECT {LECTURE_COLUMNS}
        FROM removed
        """,
        course_id,
        lecture_id,
    )
