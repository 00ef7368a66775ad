"""
Example class for trying out pytest-planner-mcp.

Point analyze_class or plan_test_generation at this file.
"""

from typing import Optional


class DuplicateUserError(Exception):
    pass


class UserService:
    """Business logic for user accounts."""

    def __init__(self, user_repository, email_service, cache):
        self.repo = user_repository
        self.email = email_service
        self.cache = cache

    def create_user(self, email: str, name: str, age: int) -> dict:
        if not email:
            raise ValueError("Email is required")
        if age < 0 or age > 150:
            raise ValueError("Invalid age")
        if self.repo.exists(email):
            raise DuplicateUserError("User already exists")
        user = self.repo.save({"email": email, "name": name, "age": age})
        self.email.send_welcome(email)
        return user

    def get_user(self, user_id: int) -> Optional[dict]:
        cached = self.cache.get(user_id)
        if cached is not None:
            return cached
        user = self.repo.find(user_id)
        self.cache.set(user_id, user)
        return user

    def update_email(self, user_id: int, email: str) -> dict:
        user = self.repo.find(user_id)
        if user is None:
            raise LookupError("User not found")
        user["email"] = email
        self.cache.delete(user_id)
        return self.repo.save(user)

    def deactivate_users(self, user_ids: list[int]) -> int:
        count = 0
        for user_id in user_ids:
            user = self.repo.find(user_id)
            if user and user.get("active"):
                user["active"] = False
                self.repo.save(user)
                count += 1
        return count

    async def sync_profile(self, user_id: int) -> dict:
        try:
            profile = await self.email.fetch_profile(user_id)
        finally:
            self.cache.delete(user_id)
        return profile

    def _normalize(self, email):
        return email.strip().lower()
