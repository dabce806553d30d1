#!/usr/bin/env python3
"""
Startup script for the TimeGate OTP service
"""
import os
import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "127.0.0.1")

    print(f"Starting TimeGate server on {host}:{port}")

    uvicorn.run(
        "main_node:create_app",
        factory=True,
        host=host,
        port=port,
        log_level="info",
        access_log=True
    )
