#!/usr/bin/env python3
"""
Initialize the freight CMS portal client.

This script sets up the project by:
- Checking the .env file and backend settings
- Validating the business configuration
- Creating the session and export directories
- Checking that the backend answers
"""

import os
import sys
from pathlib import Path

import httpx
import yaml
from dotenv import load_dotenv


def check_python_version() -> bool:
    """Verify Python version is 3.11 or higher."""
    if sys.version_info < (3, 11):
        print(f"❌ Python 3.11+ required. Current version: {sys.version}")
        return False
    print(f"✅ Python version: {sys.version_info.major}.{sys.version_info.minor}")
    return True


def check_env_file() -> bool:
    """Check if .env file exists."""
    env_path = Path(".env")
    if not env_path.exists():
        print("❌ .env file not found")
        print("   Run: cp .env.example .env")
        print("   Then edit .env with your backend URL")
        return False
    print("✅ .env file exists")
    return True


def load_and_validate_env() -> bool:
    """Load environment variables and check the backend settings."""
    load_dotenv()

    base_url = os.getenv("CMS_API_BASE_URL")
    if not base_url:
        print("❌ CMS_API_BASE_URL not set")
        return False
    if not base_url.startswith(("http://", "https://")):
        print(f"❌ CMS_API_BASE_URL must be an http(s) URL, got {base_url}")
        return False
    print(f"✅ Backend: {base_url}")

    timeout = os.getenv("CMS_REQUEST_TIMEOUT")
    if timeout:
        try:
            float(timeout)
        except ValueError:
            print(f"❌ CMS_REQUEST_TIMEOUT must be a number of seconds, got {timeout}")
            return False
    else:
        print("⚠️  CMS_REQUEST_TIMEOUT not set (requests never time out)")

    return True


def check_config_files() -> bool:
    """Validate the business configuration."""
    path = Path("config/config.yaml")
    if not path.exists():
        print("❌ Main configuration not found: config/config.yaml")
        return False

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        print(f"❌ Error parsing config.yaml: {e}")
        return False

    if not config:
        print("❌ config.yaml is empty")
        return False

    polling = config.get("polling", {})
    for key, seconds in polling.items():
        if not isinstance(seconds, (int, float)) or seconds <= 0:
            print(f"❌ polling.{key} must be a positive number of seconds")
            return False

    print("✅ config.yaml is valid")
    return True


def create_data_directories() -> bool:
    """Create necessary data directories."""
    directories = [
        "data/session",
        "data/exports",
    ]

    for directory in directories:
        Path(directory).mkdir(parents=True, exist_ok=True)

    print(f"✅ Created {len(directories)} data directories")
    return True


def test_imports() -> bool:
    """Test that critical packages can be imported."""
    required_packages = [
        "httpx",
        "pydantic",
        "pydantic_settings",
        "structlog",
        "yaml",
        "dotenv",
    ]

    missing = []
    for package in required_packages:
        try:
            __import__(package)
        except ImportError:
            missing.append(package)

    if missing:
        print(f"❌ Missing packages: {', '.join(missing)}")
        print("   Run: pip install -e .[test]")
        return False

    print("✅ All required packages installed")
    return True


def check_backend() -> bool:
    """Check that the backend answers (any HTTP status counts)."""
    base_url = os.getenv("CMS_API_BASE_URL", "").rstrip("/")
    try:
        response = httpx.get(f"{base_url}/auth/verify", timeout=5)
    except httpx.RequestError as e:
        print(f"⚠️  Backend not reachable: {e}")
        return True
    print(f"✅ Backend answered with HTTP {response.status_code}")
    return True


def display_next_steps() -> None:
    """Show user what to do next."""
    print("\n" + "=" * 60)
    print("🎉 Project initialization complete!")
    print("=" * 60)
    print("\nNext steps:")
    print("\n1. Review config/config.yaml (polling intervals, page sizes)")
    print("2. Run the tests:")
    print("   pytest")
    print("3. Print an example driver statement:")
    print("   freight-cms-statement")
    print("\n" + "=" * 60)


def main() -> int:
    """Run all initialization checks."""
    print("=" * 60)
    print("Freight CMS Portal Client - Initialization")
    print("=" * 60)
    print()

    checks = [
        ("Python version", check_python_version),
        (".env file", check_env_file),
        ("Environment variables", load_and_validate_env),
        ("Configuration files", check_config_files),
        ("Data directories", create_data_directories),
        ("Package imports", test_imports),
        ("Backend", check_backend),
    ]

    passed = 0
    failed = 0

    for name, check_func in checks:
        print(f"\nChecking {name}...")
        if check_func():
            passed += 1
        else:
            failed += 1

    print("\n" + "=" * 60)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    if failed == 0:
        display_next_steps()
        return 0
    else:
        print("\n❌ Some checks failed. Please fix the issues above.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
