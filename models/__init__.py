"""
Persistence package. `storage` is the process-wide DBStorage; the app factory
points it at a database with init_engine() and reload().
"""
from models.db_storage import DBStorage

storage = DBStorage()
