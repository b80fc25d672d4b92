"""
MongoDB connection.

``db`` is None unless DATABASE_URL is configured.
"""
import logging

from pymongo import MongoClient

from config import Config

logger = logging.getLogger(__name__)

client = None
db = None

if Config.DATABASE_URL:
    client = MongoClient(Config.DATABASE_URL)
    db = client[Config.DATABASE_NAME]
    logger.info(f"Using MongoDB database: {Config.DATABASE_NAME}")
