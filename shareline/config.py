"""Configuration settings for the ShareLine server."""

import os

from common.constants import DEFAULT_DATABASE_PATH, DEFAULT_UPLOAD_DIR


DATABASE_PATH = os.environ.get("SHARELINE_DATABASE_PATH", DEFAULT_DATABASE_PATH)

DATABASE_TIMEOUT = float(os.environ.get("SHARELINE_DATABASE_TIMEOUT", "30"))

UPLOAD_DIR = os.environ.get("SHARELINE_UPLOAD_DIR", DEFAULT_UPLOAD_DIR)

SHARELINE_HOST = os.environ.get("SHARELINE_HOST", "0.0.0.0")

SHARELINE_PORT = int(os.environ.get("SHARELINE_PORT", "8080"))

BASE_URL = os.environ.get("SHARELINE_BASE_URL", "http://localhost:8080")

# content: sniffing only. auto: client hint, then sniffing. declared: client hint only.
MIME_DETECTION = os.environ.get("SHARELINE_MIME_DETECTION", "content").lower()

SNIFF_BYTES = int(os.environ.get("SHARELINE_SNIFF_BYTES", "2048"))

IDENTITY_HEADER = os.environ.get("SHARELINE_IDENTITY_HEADER", "X-Forwarded-User")

NAME_HEADER = os.environ.get("SHARELINE_NAME_HEADER", "X-Forwarded-Preferred-Username")

EMAIL_HEADER = os.environ.get("SHARELINE_EMAIL_HEADER", "X-Forwarded-Email")

SHARE_TOKEN_BYTES = int(os.environ.get("SHARELINE_SHARE_TOKEN_BYTES", "32"))
