"""Print a bearer token for the store admin API.

Token issuance normally belongs to the auth provider; this is for local
testing and operations.

Usage:
    ENV_FILE=.env.prod python scripts/users/create_admin_token.py --email admin@zonastreet.com
"""

import argparse
import os
import sys
from pathlib import Path
from uuid import uuid4

# Add parent directory to path to import libs
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from dotenv import load_dotenv

# MUST be done before importing libs that use get_settings()
project_root = Path(__file__).resolve().parents[2]
env_file = os.environ.get("ENV_FILE", ".env")
load_dotenv(project_root / env_file, override=True)

from libs.auth.dependencies import create_access_token  # noqa: E402
from libs.common.config import get_settings  # noqa: E402


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--email", default="admin@zonastreet.com")
    parser.add_argument("--user-id", default=None)
    parser.add_argument("--minutes", type=int, default=settings.JWT_EXPIRES_MINUTES)
    args = parser.parse_args()

    token = create_access_token(
        user_id=args.user_id or str(uuid4()),
        role=settings.ADMIN_ROLE,
        email=args.email,
        expires_minutes=args.minutes,
    )
    print(token)


if __name__ == "__main__":
    main()
