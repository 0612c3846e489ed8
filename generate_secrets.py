#!/usr/bin/env python3
"""
Generate a .env snippet for the pick'em pool
Run this script to generate the SECRET_KEY the app warns about when unset
"""

import secrets


def generate_secrets():
    """Print a secret key plus the pool settings worth pinning in .env"""
    print("Generating settings for the pick'em pool...")
    print("=" * 50)

    print(f"SECRET_KEY={secrets.token_urlsafe(32)}")
    print("PICKS_PER_WEEK=3")
    print("PARLAY_BONUS=1")

    print("=" * 50)
    print("Copy these values to your .env file and never commit the key")


if __name__ == "__main__":
    generate_secrets()
