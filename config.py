"""
Application configuration loaded from the environment (.env supported).
"""
import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Runtime settings for the salary service."""

    # Server
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', 8000))
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*').split(',')

    # Database (optional; salary records stay in memory when unset)
    DATABASE_URL = os.getenv('DATABASE_URL')
    DATABASE_NAME = os.getenv('DATABASE_NAME', 'hrms')
    SALARY_COLLECTION = os.getenv('SALARY_COLLECTION', 'salary_info')

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    LOG_FORMAT = os.getenv('LOG_FORMAT', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
