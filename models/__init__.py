"""
Persistence package. ``storage`` is the process-wide DBStorage; the app
factory calls ``storage.reload(database_url)`` before serving requests.
"""
from models.db_storage import DBStorage

storage = DBStorage()
