"""Project-wide constants."""

GENERIC_MIME_TYPE: str = "application/octet-stream"

STREAM_PIECE_SIZE: int = 64 * 1024  # 64 KiB per streamed piece

DEFAULT_UPLOAD_DIR: str = "./uploads"

DEFAULT_DATABASE_PATH: str = "./data/shareline.db"
