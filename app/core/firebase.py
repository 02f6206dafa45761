from firebase_admin import credentials, initialize_app, firestore, get_app
from .config import settings

_db = None


def get_db():
    """Return the Firestore client, initializing the Firebase app on first use"""
    global _db
    if _db is None:
        try:
            get_app()
        except ValueError:
            cred = credentials.Certificate(str(settings.FIREBASE_CREDS_PATH_ABSOLUTE))
            initialize_app(cred)
        _db = firestore.client()
    return _db
