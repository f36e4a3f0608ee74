"""Configuration settings for the storage gateway client."""

import os


GATEWAY_URL = os.environ.get("CHUNKWEAVE_GATEWAY_URL", "https://uploader.irys.xyz")

UPLOAD_URL = os.environ.get("CHUNKWEAVE_UPLOAD_URL", "http://localhost:3000/api/irys-upload")

GRAPHQL_URL = os.environ.get("CHUNKWEAVE_GRAPHQL_URL", f"{GATEWAY_URL}/graphql")

REQUEST_TIMEOUT_SECONDS = float(os.environ.get("CHUNKWEAVE_TIMEOUT", "30"))

MAX_RETRIES = int(os.environ.get("CHUNKWEAVE_MAX_RETRIES", "3"))

RETRY_BACKOFF_MULTIPLIER = float(os.environ.get("CHUNKWEAVE_RETRY_BACKOFF", "2"))

CLIENT_REINIT_INTERVAL_SECONDS = float(os.environ.get("CHUNKWEAVE_REINIT_INTERVAL", str(30 * 60)))

SEARCH_PAGE_SIZE = 100
