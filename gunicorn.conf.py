# Gunicorn configuration for the visitflow API
# Run with: gunicorn -c gunicorn.conf.py visitflow.app:app
import os

# Server socket
bind = f"{os.environ.get('HOST', '0.0.0.0')}:{os.environ.get('PORT', 8000)}"
backlog = 2048

# The visit store is process-local, so every request must hit the same worker
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
# Whisper + extraction round trips can take a while on long recordings
timeout = 120
keepalive = 2

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

# Process naming
proc_name = "visitflow"

# Server mechanics
preload_app = False
daemon = False
