# File: backend/course_catalog/seed.py
"""
Reset the database to demo data:

    python -m course_catalog.seed

Drops every user and course, then creates one admin, one student and three
courses, with the student enrolled in the React course.
"""

import asyncio
import logging

from course_catalog.core.database import Database
from course_catalog.core.security import hash_password

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"email": "admin@example.com", "password": "adminpassword123", "role": "admin"},
    {"email": "student@example.com", "password": "studentpassword123", "role": "student"},
]

DEMO_COURSES = [
    {
        "title": "Introduction to React",
        "description": "Learn the fundamentals of building user interfaces with React, "
                       "including components, state, and props.",
        "icon": "Laptop",
    },
    {
        "title": "Node.js and Express Fundamentals",
        "description": "Dive into backend development by learning how to build a RESTful API "
                       "with Node.js and Express.",
        "icon": "Code",
    },
    {
        "title": "MongoDB for Beginners",
        "description": "A comprehensive guide to using MongoDB as your application's database, "
                       "covering collections, documents, and queries.",
        "icon": "Storage",
    },
]

STUDENT_EMAIL = "student@example.com"
STUDENT_COURSE_TITLE = "Introduction to React"


async def seed_database(db: Database):
    await db.users.delete_many({})
    await db.courses.delete_many({})
    logger.info("Existing data cleared.")

    users = [
        {
            "email": u["email"],
            "hashed_password": hash_password(u["password"]),
            "role": u["role"],
            "enrolled_courses": [],
        }
        for u in DEMO_USERS
    ]
    await db.users.insert_many(users)
    logger.info("Demo users created.")

    result = await db.courses.insert_many([dict(c) for c in DEMO_COURSES])
    course_ids = dict(zip((c["title"] for c in DEMO_COURSES), result.inserted_ids))
    logger.info("Demo courses created.")

    await db.users.update_one(
        {"email": STUDENT_EMAIL},
        {"$push": {"enrolled_courses": course_ids[STUDENT_COURSE_TITLE]}},
    )
    logger.info("Student enrolled in the React course.")


async def main():
    db = Database()
    await db.connect()
    try:
        await seed_database(db)
        logger.info("Database seeding complete.")
    finally:
        db.close()


def run():
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] %(levelname)s in %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    asyncio.run(main())


if __name__ == "__main__":
    run()
