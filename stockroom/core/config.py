import os

# Database Configuration
# Local SQLite file; override with a full Tortoise URL (e.g. sqlite://:memory:)
DB_URL = os.getenv("DATABASE_URL", "sqlite://inventory.db")

# Export files are always written here so the data is retrievable
# even when nothing downloads or shares the file.
EXPORT_DIR = os.getenv("EXPORT_DIR", "exports")

# Application Metadata
PROJECT_NAME = "Stockroom Inventory Tracker"
VERSION = "1.0.0"

# Initial option rows, only seeded into an empty option table
SEED_CATEGORIES = ["T-Shirt", "Shirt", "Pant", "Kurta", "Frock", "Dress", "Other"]
SEED_AGE_GROUPS = ["0-1", "1-2", "2-3", "3-4", "4-5"]
