"""Allow ``python -m s3_bucket_migrator``."""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
