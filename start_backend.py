#!/usr/bin/env python3
# SPDX-License-Identifier: AGPL-3.0-only

"""
Startup script for the ToolHub back-end
"""

import sys

from app import app
from common.config import config


def check_ai_keys():
    """Check that the model provider keys are configured"""
    ok = True
    if config.mistral_api_key:
        print("✅ MISTRAL_API_KEY is set (OCR, HTML reshape)")
    else:
        print("❌ MISTRAL_API_KEY is not set: OCR tools will fail")
        ok = False
    if config.groq_api_key:
        print("✅ GROQ_API_KEY is set (table reshape, writing tools)")
    else:
        print("❌ GROQ_API_KEY is not set: Image to Excel and writing tools will fail")
        ok = False
    return ok


def main():
    print("🚀 Starting ToolHub Backend...")
    print("=" * 50)

    if not check_ai_keys() or not config.validate_ai_config():
        print("\n⚠️  AI tools will not work without provider keys!")
        print("   You can still use the PDF tools (protect, unlock, convert).")
        print("   Continue anyway? (y/N): ", end="")

        try:
            response = input().lower().strip()
            if response not in ['y', 'yes']:
                print("❌ Exiting. Please add the keys to .env first.")
                sys.exit(1)
        except KeyboardInterrupt:
            print("\n❌ Exiting.")
            sys.exit(1)

    print("\n" + "=" * 50)
    print("🌐 Starting Flask server...")
    print("📖 Health check: http://localhost:8000/api/health")
    print(f"🔗 Allowed front-end origins: {', '.join(config.get_cors_origins())}")
    print("=" * 50)

    try:
        app.run(host="0.0.0.0", port=8000, debug=True)
    except KeyboardInterrupt:
        print("\n🛑 Server stopped by user.")


if __name__ == "__main__":
    main()
