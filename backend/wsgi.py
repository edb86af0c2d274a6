# backend/wsgi.py
from laundrydesk import create_app

app = create_app()
