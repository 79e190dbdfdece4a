#!/usr/bin/env python3
"""
DUECh command line interface
Run the web server, prepare the database and manage users and corpus data
"""

import argparse
import getpass
import logging
import sys
from datetime import date

from .auth import AuthenticationError, UserManager
from .config import get_database_config, get_site_config
from .definitions import ROLES
from .repository import (
    DictionaryError, DuplicateLemmaError, DuplicateUserError,
    JsonDictionaryRepository, get_repository
)
from .word_of_the_day import WordOfTheDayError, get_word_of_the_day

logger = logging.getLogger(__name__)


def cmd_serve(args) -> int:
    import uvicorn
    uvicorn.run("duech_web.app:app", host=args.host, port=args.port, reload=args.reload,
                log_level=get_site_config().log_level.lower())
    return 0


def cmd_init_db(args) -> int:
    from importlib.resources import files
    from .database_manager import get_database_manager

    print(f"[INFO] Applying schema to {get_database_config().get_connection_string()}")
    manager = get_database_manager()
    if not manager.test_connection():
        print("[ERROR] Could not connect to the database")
        return 1
    schema = files('duech').joinpath('schema.sql').read_text(encoding='utf-8')
    manager.execute_script(schema)
    print("[OK] Database schema ready")
    return 0


def cmd_create_user(args) -> int:
    password = args.password or getpass.getpass("Password: ")
    try:
        user = UserManager().create_user(args.username, args.email, password, args.role)
    except (AuthenticationError, DuplicateUserError) as e:
        print(f"[ERROR] {e}")
        return 1
    print(f"[OK] Created user '{user.username}' (id={user.id}, role={user.role})")
    return 0


def cmd_import_json(args) -> int:
    """Copy words and users from a JSON corpus into PostgreSQL"""
    from .pg_repository import PostgresDictionaryRepository

    source = JsonDictionaryRepository(args.path)
    target = PostgresDictionaryRepository()

    users_created = 0
    for user in source.list_users():
        if not user.password_hash:
            print(f"[WARN] Skipping user '{user.username}' without password hash")
            continue
        try:
            target.create_user(user.username, user.email, user.password_hash, user.role)
            users_created += 1
        except DuplicateUserError:
            logger.info(f"User '{user.username}' already exists, skipping")

    created = skipped = 0
    for word in source.list_words():
        word.created_by = None
        word.assigned_to = None
        try:
            target.create_word(word)
            created += 1
        except DuplicateLemmaError:
            skipped += 1
        except DictionaryError as e:
            print(f"[WARN] Could not import '{word.lemma}': {e}")
            skipped += 1

    print(f"[OK] Imported {created} words ({skipped} skipped) and {users_created} users")
    return 0


def cmd_word_of_the_day(args) -> int:
    day = date.fromisoformat(args.date) if args.date else None
    try:
        word = get_word_of_the_day(get_repository(), day)
    except WordOfTheDayError as e:
        print(f"[ERROR] {e}")
        return 1
    print(word.lemma)
    for meaning in word.meanings:
        print(f"  {meaning.number}. {meaning.meaning}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='duech', description='Diccionario de uso del español de Chile')
    subparsers = parser.add_subparsers(dest='command', required=True)

    serve = subparsers.add_parser('serve', help='Run the web application')
    serve.add_argument('--host', default='127.0.0.1')
    serve.add_argument('--port', type=int, default=8000)
    serve.add_argument('--reload', action='store_true', help='Reload on code changes')
    serve.set_defaults(func=cmd_serve)

    init_db = subparsers.add_parser('init-db', help='Create the PostgreSQL schema')
    init_db.set_defaults(func=cmd_init_db)

    create_user = subparsers.add_parser('create-user', help='Create an editorial user')
    create_user.add_argument('username')
    create_user.add_argument('--email')
    create_user.add_argument('--password', help='Prompted when omitted')
    create_user.add_argument('--role', choices=ROLES, default='lexicographer')
    create_user.set_defaults(func=cmd_create_user)

    import_json = subparsers.add_parser('import-json', help='Load a JSON corpus into PostgreSQL')
    import_json.add_argument('path')
    import_json.set_defaults(func=cmd_import_json)

    wotd = subparsers.add_parser('word-of-the-day', help='Print the word of the day')
    wotd.add_argument('--date', help='YYYY-MM-DD, defaults to today (UTC)')
    wotd.set_defaults(func=cmd_word_of_the_day)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=get_site_config().log_level.upper(),
                        format='%(asctime)s - %(levelname)s - %(message)s')
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\n[INFO] Interrupted")
        return 130
    except DictionaryError as e:
        print(f"[ERROR] {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
