#!/usr/bin/env python3
"""
Admin tools for the Campus Portal.

Creates staff accounts (admin, doctor, teacher), lists users, resets
passwords and verifies accounts straight against the database.
"""

import os
import sys
import argparse
from typing import Optional

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv
dotenv_path = os.path.join(os.path.dirname(__file__), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)

from pydantic import ValidationError
from sqlalchemy.orm import Session

from campus_portal.core.database import SessionLocal, create_db_and_tables
from campus_portal.core.roles import Role
from campus_portal.schemas.user import StaffCreate, UserUpdate
from campus_portal.services.admin_service import AdminService
from campus_portal.services.user_service import UserService

STAFF_ROLES = [Role.ADMIN.value, Role.DOCTOR.value, Role.TEACHER.value]


def get_db() -> Session:
    return SessionLocal()


def create_account(role: str, email: str, password: str, full_name: str,
                   department: Optional[str] = None) -> bool:
    """Create a verified staff account"""
    db = get_db()
    try:
        user_data = StaffCreate(
            email=email,
            password=password,
            full_name=full_name,
            role=Role(role),
            department=department,
        )
        user = UserService(db).create_user(user_data, role=user_data.role)

        print(f"Created {user.role.value} account")
        print(f"   Email: {user.email}")
        print(f"   Name: {user.full_name}")
        print(f"   ID: {user.id}")
        return True

    except (ValidationError, ValueError) as e:
        print(f"Could not create account: {e}")
        return False
    finally:
        db.close()


def list_users(role: Optional[str] = None, unverified_only: bool = False) -> None:
    db = get_db()
    try:
        users = UserService(db).list_users(
            role=Role(role) if role else None,
            verified=False if unverified_only else None,
        )

        if not users:
            print("No users found")
            return

        print(f"Total users: {len(users)}")
        print("=" * 80)

        for user in users:
            flags = []
            if not user.is_verified:
                flags.append("unverified")
            if not user.is_active:
                flags.append("inactive")

            print(f"ID: {user.id} | {user.role.value}" + (f" ({', '.join(flags)})" if flags else ""))
            print(f"   Name: {user.full_name}")
            print(f"   Email: {user.email}")
            if user.registration_number:
                print(f"   Registration: {user.registration_number} | Course: {user.course}")
            print(f"   Created: {user.created_at.strftime('%d.%m.%Y %H:%M')}")
            print("-" * 80)
    finally:
        db.close()


def reset_password(email: str, password: str) -> bool:
    db = get_db()
    try:
        user_service = UserService(db)
        user = user_service.get_user_by_email(email)
        if not user:
            print(f"No user with email {email}")
            return False

        user_service.update_user(user.id, UserUpdate(password=password))
        print(f"Password reset for {user.email}")
        return True
    except ValidationError as e:
        print(f"Invalid password: {e}")
        return False
    finally:
        db.close()


def verify_account(email: str, approved: bool = True) -> bool:
    db = get_db()
    try:
        user_service = UserService(db)
        user = user_service.get_user_by_email(email)
        if not user:
            print(f"No user with email {email}")
            return False

        user_service.set_verification(user.id, approved)
        print(f"{user.email} {'verified' if approved else 'deactivated'}")
        return True
    finally:
        db.close()


def show_stats() -> None:
    db = get_db()
    try:
        stats = AdminService(db).dashboard_stats()
        print("Users:")
        for role, count in stats["users"].items():
            print(f"   {role}: {count}")
        print(f"Pending verifications: {stats['pending_verifications']}")
        print("Elections:")
        for status, count in stats["elections"].items():
            print(f"   {status}: {count}")
        print(f"Open complaints: {stats['open_complaints']}")
        print(f"Pending applications: {stats['pending_applications']}")
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Campus Portal admin tools")
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    create_parser = subparsers.add_parser('create-account', help='Create an admin, doctor or teacher account')
    create_parser.add_argument('--role', required=True, choices=STAFF_ROLES, help='Account role')
    create_parser.add_argument('--email', required=True, help='Email address')
    create_parser.add_argument('--password', required=True, help='Password')
    create_parser.add_argument('--name', required=True, help='Full name')
    create_parser.add_argument('--department', help='Department')

    list_users_parser = subparsers.add_parser('list-users', help='List users')
    list_users_parser.add_argument('--role', choices=[role.value for role in Role], help='Filter by role')
    list_users_parser.add_argument('--unverified', action='store_true', help='Only accounts awaiting verification')

    reset_parser = subparsers.add_parser('reset-password', help='Set a new password')
    reset_parser.add_argument('--email', required=True, help='Email address')
    reset_parser.add_argument('--password', required=True, help='New password')

    verify_parser = subparsers.add_parser('verify', help='Verify an account')
    verify_parser.add_argument('--email', required=True, help='Email address')
    verify_parser.add_argument('--reject', action='store_true', help='Deactivate instead of verifying')

    subparsers.add_parser('init-db', help='Create database tables')
    subparsers.add_parser('stats', help='Show dashboard counts')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == 'create-account':
        create_account(args.role, args.email, args.password, args.name, args.department)

    elif args.command == 'list-users':
        list_users(args.role, args.unverified)

    elif args.command == 'reset-password':
        reset_password(args.email, args.password)

    elif args.command == 'verify':
        verify_account(args.email, approved=not args.reject)

    elif args.command == 'init-db':
        create_db_and_tables()
        print("Database tables created")

    elif args.command == 'stats':
        show_stats()


if __name__ == "__main__":
    main()
