import os
import asyncio
from datetime import datetime, timezone

from survey_backend.crud import create_user, get_user_by_username
from survey_backend.database import engine, async_session
from survey_backend.dependencies import get_repository
from survey_backend.models import Base
from survey_backend.services.repository import SURVEYS, questions_path

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
ADMIN_ROLE = os.getenv("ADMIN_ROLE", "admin")
# Optional additional fields for the admin user:
ADMIN_NAME = os.getenv("ADMIN_NAME", "Primary")
ADMIN_SURNAME = os.getenv("ADMIN_SURNAME", "Admin")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")

SAMPLE_QUESTIONS = [
    {"type": "text", "question": "What is your name?", "required": True},
    {
        "type": "multipleChoice",
        "question": "How would you rate our service?",
        "required": True,
        "options": ["Excellent", "Good", "Average", "Poor"],
    },
    {"type": "rating", "question": "Rate your overall experience (1-5)", "required": True, "maxRating": 5},
    {"type": "comment", "question": "Any additional comments?", "required": False},
]


async def init_database():
    # Create all tables if they don't exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Database schema ensured.")


async def init_admin():
    if not ADMIN_PASSWORD:
        raise RuntimeError("ADMIN_PASSWORD environment variable is not set")
    async with async_session() as db:
        admin = await get_user_by_username(db, ADMIN_USERNAME)
        if admin is None:
            print("No admin user found. Creating default admin user...")
            admin = await create_user(
                db,
                ADMIN_USERNAME,
                ADMIN_PASSWORD,
                role=ADMIN_ROLE,
                name=ADMIN_NAME,
                surname=ADMIN_SURNAME,
                email=ADMIN_EMAIL,
            )
            print(f"Admin user '{ADMIN_USERNAME}' created.")
        else:
            print(f"Admin user '{ADMIN_USERNAME}' already exists.")
        return admin


def seed_sample_survey(owner_id: str) -> str:
    """Insert a published feedback survey with four questions, created in order."""
    repo = get_repository()
    repo.ensure_indexes()
    now = datetime.now(timezone.utc)
    survey_id = repo.store.insert(SURVEYS, {
        "userId": owner_id,
        "title": "Customer Feedback Survey",
        "description": "Help us improve our services by providing your feedback",
        "groupId": os.getenv("SAMPLE_GROUP_ID", "group123"),
        "isActive": True,
        "status": "published",
        "createdAt": now.isoformat(),
        "updatedAt": now.isoformat(),
    })
    for idx, question in enumerate(SAMPLE_QUESTIONS, start=1):
        created = now.replace(microsecond=0).timestamp() + idx
        repo.store.insert(questions_path(survey_id), {
            **question,
            "createdAt": datetime.fromtimestamp(created, timezone.utc).isoformat(),
        })
    print(f"Sample survey '{survey_id}' created.")
    return survey_id


async def main():
    await init_database()  # Ensure that the schema is created
    admin = await init_admin()     # Seed the admin user if not present
    if os.getenv("SEED_SAMPLE_SURVEY", "false").lower() in ("1", "true", "yes"):
        seed_sample_survey(str(admin.id))

if __name__ == "__main__":
    asyncio.run(main())
