# reset_password.py - set a new password for an account by e-mail
import sys

from billtracker.core.config import settings
from billtracker.db.repositories import UserRepository
from billtracker.db.session import make_engine, make_session_factory
from billtracker.services.security import hash_password


def reset_password(email: str, new_password: str) -> int:
    db = make_session_factory(make_engine(settings.DATABASE_URL))()
    try:
        user = UserRepository(db).find_by_email(email)
        if not user:
            print("User not found:", email)
            return 1
        user.hashed_password = hash_password(new_password)
        db.add(user)
        db.commit()
        print(f"Password reset for {user.email}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python reset_password.py <email> <new_password>")
        sys.exit(2)
    sys.exit(reset_password(sys.argv[1], sys.argv[2]))
