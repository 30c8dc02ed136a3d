# create_admin.py
import argparse
import getpass
import uuid

from sqlmodel import Session

from app.core.identity import IdentityProvider
from app.core.supabase_client import supabase_admin
from app.database import create_db_and_tables, engine
from app.models import category, order, product  # noqa: F401  (register tables)
from app.repositories.cart_repo import CartRepository
from app.repositories.user_repo import UserRepository
from app.services.user_service import UserService


def main():
    parser = argparse.ArgumentParser(description="Create a Supabase account and make it an ADMIN.")
    parser.add_argument("email")
    parser.add_argument("--name", default="Admin User")
    parser.add_argument("--password", help="prompted for when omitted")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")

    print("Creating auth account...")
    response = supabase_admin().auth.admin.create_user(
        {"email": args.email, "password": password, "email_confirm": True}
    )
    account = response.user

    create_db_and_tables()
    service = UserService(UserRepository(), CartRepository(), IdentityProvider())
    with Session(engine) as session:
        user = service.ensure_admin(session, uuid.UUID(str(account.id)), args.email, args.name)
        print(f"Admin ready: {user.email} ({user.id}) role={user.role.value}")


if __name__ == "__main__":
    main()
