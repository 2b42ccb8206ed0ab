# backend/wsgi.py
from ims import create_app

app = create_app()
