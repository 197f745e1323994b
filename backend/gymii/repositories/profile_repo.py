from __future__ import annotations
from typing import Any, Optional

from gymii.models import Profile
from gymii.repositories.base import BaseRepository

class ProfileRepository(BaseRepository[Profile]):
    model = Profile

    def upsert(self, user_id: int, **fields: Any) -> Profile:
        profile: Optional[Profile] = self.get(user_id)
        if profile is None:
            profile = Profile(id=user_id)
        for name, value in fields.items():
            setattr(profile, name, value)
        return self.save(profile)
