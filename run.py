#!/usr/bin/env python3
"""
Simple script to run the Employee Vaccination Inventory API
"""

import uvicorn
from app.core.config import settings

if __name__ == "__main__":
    print("Starting Employee Vaccination Inventory...")
    print(f"App: {settings.app_name}")
    print(f"Host: {settings.host}")
    print(f"Port: {settings.port}")
    print(f"Debug: {settings.debug}")
    print(f"API Documentation: http://localhost:{settings.port}/docs")
    print("-" * 50)

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info"
    )
