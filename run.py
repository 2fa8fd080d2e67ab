#!/usr/bin/env python3
"""
Café Finder Backend - Run Script
This script starts the FastAPI backend server
"""

import os
import sys
import subprocess
from pathlib import Path

def print_colored(message, color="blue"):
    """Print colored output"""
    colors = {
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "blue": "\033[94m",
        "reset": "\033[0m"
    }
    print(f"{colors.get(color, '')}{message}{colors['reset']}")

def check_file_exists(filepath, error_message):
    """Check if a file exists"""
    if not Path(filepath).exists():
        print_colored(f"❌ Error: {error_message}", "red")
        sys.exit(1)

def has_places_key() -> bool:
    """True if GOOGLE_PLACES_API_KEY is set in the environment or a .env file"""
    if os.environ.get("GOOGLE_PLACES_API_KEY"):
        return True
    for env_path in (Path(".env"), Path("../.env")):
        if env_path.exists():
            for line in env_path.read_text(encoding="utf-8").splitlines():
                name, _, value = line.partition("=")
                if name.strip() == "GOOGLE_PLACES_API_KEY" and value.strip():
                    return True
    return False

def main():
    print_colored("🚀 Starting Café Finder Backend...", "blue")

    # Check if we're in the project root
    check_file_exists("cafe_finder/main.py", "cafe_finder/main.py not found. Please run this script from the project root.")

    # Missing key is allowed, the API just serves mock cafés
    if not has_places_key():
        print_colored("⚠️  Warning: GOOGLE_PLACES_API_KEY is not set.", "yellow")
        print("The API will serve mock cafés. To use live data, add to .env:")
        print("  GOOGLE_PLACES_API_KEY=your_api_key_here")
        print()

    # Check if virtual environment is activated
    if not os.environ.get('VIRTUAL_ENV'):
        print_colored("⚠️  Virtual environment not activated.", "yellow")
        print("Consider activating one first:")
        print("  source venv/bin/activate  # On macOS/Linux")
        print("  venv\\Scripts\\activate     # On Windows")
        print()

    # Check if dependencies are installed
    print_colored("🔍 Checking dependencies...", "blue")
    try:
        import fastapi
        import uvicorn
    except ImportError:
        print_colored("❌ Dependencies not installed.", "red")
        print("Installing dependencies...")
        subprocess.run([sys.executable, "-m", "pip", "install", "-e", "."], check=True)

    # Start the server
    print_colored("✅ All checks passed!", "green")
    print_colored("🌐 Starting Uvicorn server...", "blue")
    print("📍 Backend will be available at: http://localhost:8000")
    print("📍 Café search: http://localhost:8000/api/cafes?lat=37.7749&lng=-122.4194")
    print("📍 API Documentation: http://localhost:8000/docs")
    print()
    print("Press Ctrl+C to stop the server")
    print()

    # Run uvicorn with auto-reload for development
    try:
        subprocess.run([
            sys.executable, "-m", "uvicorn",
            "cafe_finder.main:app",
            "--reload",
            "--host", "0.0.0.0",
            "--port", "8000"
        ], check=True)
    except KeyboardInterrupt:
        print_colored("\n👋 Backend server stopped.", "yellow")
    except subprocess.CalledProcessError as e:
        print_colored(f"\n❌ Error starting server: {e}", "red")
        sys.exit(1)

if __name__ == "__main__":
    main()
