import argparse

from dotenv import load_dotenv

from billing.core.config import Settings
from billing.infrastructure.repositories.user_repository import UserRepository
from billing.services.user_service import UserService


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Issue an API token for a user, creating the user if needed.")
    parser.add_argument("email")
    parser.add_argument("--first-name", default="")
    parser.add_argument("--last-name", default="")
    args = parser.parse_args()

    settings = Settings()
    settings.database_path.parent.mkdir(parents=True, exist_ok=True)
    users = UserRepository(str(settings.database_path))

    user = users.get_by_email(args.email)
    if not user:
        user = users.create(args.email, args.first_name or args.email.split("@")[0], args.last_name)
        print(f"Created user {user.email}")

    service = UserService(
        users,
        jwt_secret=settings.jwt_secret,
        jwt_expiration_hours=settings.jwt_expiration_hours,
    )
    print(service.create_token(user))


if __name__ == "__main__":
    main()
