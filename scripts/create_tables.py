#!/usr/bin/env python3
"""
Create the EyeMate database tables
"""
import sys
import os

# Make the eyemate package importable when run from a checkout
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect

from eyemate.core.database import create_tables, test_connection, get_db_info, engine
from eyemate.core.config import get_settings
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

EXPECTED_TABLES = [
    'users', 'patients', 'iop_records', 'medications', 'patient_medications',
    'medication_reminders', 'medication_reminder_logs', 'medication_doses',
    'appointments', 'appointment_reminders', 'appointment_reschedule_requests',
    'notifications', 'push_subscriptions', 'medical_documents'
]


def main():
    settings = get_settings()

    logger.info("🚀 Creating EyeMate tables")
    logger.info(f"📊 Environment: {settings.ENVIRONMENT}")
    logger.info(f"🗄️ Database: {settings.DB_NAME} on {settings.DB_HOST}:{settings.DB_PORT}")

    logger.info("🔗 Testing connection...")
    if not test_connection():
        logger.error("❌ Could not connect to the database")
        return False

    db_info = get_db_info()
    if db_info and "mysql_version" in db_info:
        logger.info(f"✅ Connected to MySQL {db_info['mysql_version']}")
        logger.info(f"📂 Database: {db_info['database_name']}")

    try:
        logger.info("🔨 Creating tables...")
        create_tables()
        logger.info("✅ Tables created")
        verify_tables()
        return True
    except Exception as e:
        logger.error(f"❌ Error creating tables: {e}")
        return False


def verify_tables():
    tables = inspect(engine).get_table_names()

    logger.info("📋 Checking tables:")
    for table in EXPECTED_TABLES:
        if table in tables:
            logger.info(f"   ✅ {table}")
        else:
            logger.warning(f"   ⚠️ {table} - missing")

    logger.info(f"📊 Total tables: {len(tables)}")


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
