"""
Weather Station Logger Backend
==============================

This is the Python package for the weather logger API.

HOW IT'S ORGANIZED:
------------------
- models/      = Data structures (what does a reading look like?)
- services/    = Workers (the SQLite store that keeps every reading)
- routers/     = API endpoints (the doors into our app)
- utils/       = Small helpers (input validation)
- static/      = The browser dashboard
- main.py      = Puts it all together and starts the server
- simulator.py = A fake weather station for local testing
"""

__version__ = "1.0.0"
