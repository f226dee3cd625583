"""
Decoded Whop iframe session.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WhopSession:
    """Identity resolved from the x-whop-user-token payload."""
    actor_id: str
    company_id: str
    email: Optional[str] = None

    def to_dict(self):
        return {
            'actor_id': self.actor_id,
            'company_id': self.company_id,
            'email': self.email,
        }
