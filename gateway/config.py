"""Configuration settings for the share gateway."""

import os

APPWRITE_ENDPOINT = os.environ.get("FILEVAULT_ENDPOINT", "https://cloud.appwrite.io/v1")

APPWRITE_PROJECT_ID = os.environ.get("FILEVAULT_PROJECT_ID", "")

BUCKET_ID = os.environ.get("FILEVAULT_BUCKET_ID", "")

GATEWAY_HOST = os.environ.get("FILEVAULT_GATEWAY_HOST", "0.0.0.0")

GATEWAY_PORT = int(os.environ.get("FILEVAULT_GATEWAY_PORT", "8080"))

PUBLIC_ORIGIN = os.environ.get("FILEVAULT_SHARE_ORIGIN", f"http://localhost:{GATEWAY_PORT}")

REQUEST_TIMEOUT = float(os.environ.get("FILEVAULT_TIMEOUT", "30"))
